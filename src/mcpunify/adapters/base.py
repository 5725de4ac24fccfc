"""Abstract base class and result types for target adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from mcpunify.exceptions import McpUnifyError

if TYPE_CHECKING:
    from mcpunify.project import Fragment
    from mcpunify.targets import TargetDescriptor
    from mcpunify.unified import UnifiedConfig
    from mcpunify.utils.diff import ServerDiff


@dataclass
class WriteResult:
    """Result of a write operation."""

    path: str
    written: bool
    bytes_written: int = 0
    message: str = ""


@dataclass
class ValidationResult:
    """Result of a single validation check."""

    name: str
    passed: bool
    message: str
    severity: str = "error"  # error, warning, info


@dataclass
class MergePlan:
    """What a target adapter is about to write."""

    content: str | dict[str, Any]
    diff: ServerDiff
    notes: list[str] = field(default_factory=list)


class TargetAdapter(ABC):
    """Base class for host-application adapters (Cursor, Codex, ...).

    ``generate_mcp`` projects the unified list for this host; ``write`` merges
    the result into whatever the host already has on disk.
    """

    descriptor: TargetDescriptor
    path: Path

    @property
    def label(self) -> str:
        return self.descriptor.label

    @abstractmethod
    def generate_mcp(self, unified: UnifiedConfig) -> Fragment:
        """Project *unified* into this host's native records."""

    @abstractmethod
    def write(self, dry_run: bool = False) -> list[WriteResult]:
        """Merge the last generated fragment into the host config and write it."""

    @abstractmethod
    def existing_names(self) -> list[str]:
        """Server names currently present in the host config's managed section."""

    def validate(self, unified: UnifiedConfig) -> list[ValidationResult]:
        """Check the host config holds every server the projection expects."""
        from mcpunify.validate import check_server_consistency

        if not self.path.is_file():
            return [
                ValidationResult(
                    name=f"{self.label} config file",
                    passed=True,
                    message=f"{self.path} does not exist yet",
                    severity="info",
                )
            ]

        try:
            actual = set(self.existing_names())
        except McpUnifyError as exc:
            return [
                ValidationResult(
                    name=f"{self.label} config file",
                    passed=False,
                    message=str(exc),
                )
            ]

        fragment = self.generate_mcp(unified)
        return [check_server_consistency(set(fragment.records), actual, self.label)]
