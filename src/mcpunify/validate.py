"""Validation orchestrator — checks the unified list and every target against it."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from mcpunify.adapters.base import ValidationResult
from mcpunify.exceptions import CapabilityUnavailableError, ConfigParseError, McpUnifyError
from mcpunify.formats import Capabilities
from mcpunify.unified import UnifiedConfig, load_unified

if TYPE_CHECKING:
    from mcpunify.adapters.base import TargetAdapter
    from mcpunify.config import McpUnifyConfig


# ===================================================================
# Standalone check functions (reusable by adapters)
# ===================================================================


def check_server_consistency(
    expected_names: set[str],
    actual_names: set[str],
    target_name: str,
) -> ValidationResult:
    """Check that *actual_names* contains every expected server.

    Extra names are local servers the merge deliberately preserves, so they
    are reported but never fail the check.
    """
    missing = expected_names - actual_names
    extra = actual_names - expected_names

    parts: list[str] = []
    if missing:
        parts.append(f"missing {len(missing)}: {', '.join(sorted(missing))}")
    if extra:
        parts.append(f"local {len(extra)}: {', '.join(sorted(extra))}")

    if missing:
        return ValidationResult(
            name=f"{target_name} server consistency",
            passed=False,
            message="; ".join(parts),
            severity="error",
        )

    msg = f"{len(expected_names)}/{len(expected_names)} expected servers present"
    if extra:
        msg += f" ({'; '.join(parts)})"
    return ValidationResult(
        name=f"{target_name} server consistency",
        passed=True,
        message=msg,
        severity="info",
    )


def check_invalid_entries(unified: UnifiedConfig) -> ValidationResult:
    """Fail when the unified list contains entries that had to be dropped."""
    if unified.invalid:
        details = "; ".join(str(e) for e in unified.invalid[:5])
        return ValidationResult(
            name="unified entries",
            passed=False,
            message=f"{len(unified.invalid)} invalid: {details}",
            severity="error",
        )
    return ValidationResult(
        name="unified entries",
        passed=True,
        message=f"{len(unified)} servers, all valid",
        severity="info",
    )


def check_case_insensitive_duplicates(
    server_names: set[str] | list[str],
    label: str,
) -> ValidationResult:
    """Check for case-insensitive duplicate server names."""
    seen: dict[str, str] = {}
    duplicates: list[tuple[str, str]] = []

    for key in server_names:
        lower = key.lower()
        if lower in seen:
            duplicates.append((seen[lower], key))
        else:
            seen[lower] = key

    if duplicates:
        pairs = ", ".join(f"'{a}' vs '{b}'" for a, b in duplicates)
        return ValidationResult(
            name=f"{label} case-insensitive duplicates",
            passed=False,
            message=f"duplicates found: {pairs}",
            severity="warning",
        )

    return ValidationResult(
        name=f"{label} case-insensitive duplicates",
        passed=True,
        message="no case-insensitive duplicates",
    )


# ===================================================================
# ValidationReport + Validator
# ===================================================================


@dataclass
class ValidationReport:
    """Aggregate result of a validation run."""

    passed: bool
    results: list[ValidationResult] = field(default_factory=list)

    def add(self, vr: ValidationResult) -> None:
        self.results.append(vr)
        if not vr.passed and vr.severity == "error":
            self.passed = False


class Validator:
    """Orchestrates validation of all target configs against the unified list."""

    def __init__(
        self,
        config: McpUnifyConfig,
        targets: dict[str, TargetAdapter],
        *,
        capabilities: Capabilities | None = None,
    ) -> None:
        self._config = config
        self._targets = targets
        self._caps = capabilities or Capabilities.detect()

    def run(
        self,
        *,
        verbose: bool = False,
        target_filter: str | None = None,
    ) -> ValidationReport:
        """Run all validation checks and return a :class:`ValidationReport`."""
        report = ValidationReport(passed=True)

        # Determine targets
        target_names = list(self._targets)
        if target_filter:
            if target_filter not in self._targets:
                report.add(
                    ValidationResult(
                        name="target filter",
                        passed=False,
                        message=f"Unknown target '{target_filter}'",
                    )
                )
                return report
            target_names = [target_filter]

        # Unified list
        path = self._config.unified_path
        try:
            unified = load_unified(path, self._caps)
        except (ConfigParseError, CapabilityUnavailableError) as exc:
            report.add(ValidationResult(name="unified file", passed=False, message=str(exc)))
            return report

        if not path.is_file():
            report.add(
                ValidationResult(
                    name="unified file",
                    passed=True,
                    message=f"{path} not found",
                    severity="warning",
                )
            )
        report.add(check_invalid_entries(unified))
        report.add(check_case_insensitive_duplicates(list(unified.servers), "unified"))

        # Per-target adapter validation
        for name in target_names:
            target = self._targets[name]
            try:
                for vr in target.validate(unified):
                    report.add(vr)
            except McpUnifyError as exc:
                report.add(
                    ValidationResult(
                        name=f"{name} validation",
                        passed=False,
                        message=str(exc),
                    )
                )

        return report
