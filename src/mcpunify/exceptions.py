"""Exception taxonomy for mcpunify.

Every error here is recoverable at some smaller scope (one entry, one
migration source, one target) and is logged rather than aborting a run.
"""

from __future__ import annotations


class McpUnifyError(Exception):
    """Base exception for mcpunify."""


class ConfigParseError(McpUnifyError):
    """Raised when a source document cannot be parsed."""

    def __init__(self, path: object, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot parse {path}: {reason}")


class InvalidEntryError(McpUnifyError):
    """Raised when a server entry is unusable (no name, or bad invocation)."""

    def __init__(self, name: str | None, reason: str) -> None:
        self.name = name
        self.reason = reason
        label = f"'{name}'" if name else "<unnamed>"
        super().__init__(f"Server {label}: {reason}")


class CapabilityUnavailableError(McpUnifyError):
    """Raised when the YAML or TOML handling a step needs is not available."""

    def __init__(self, capability: str, step: str = "") -> None:
        self.capability = capability
        self.step = step
        msg = f"{capability} support is not available"
        if step:
            msg += f"; skipping {step}"
        super().__init__(msg)


class WriteError(McpUnifyError):
    """Raised when a target file cannot be written."""

    def __init__(self, path: object, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot write {path}: {reason}")
