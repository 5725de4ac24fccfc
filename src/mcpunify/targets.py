"""Per-host descriptors: format, schema quirks and default config paths."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from mcpunify.unified import OPTIONAL_FIELDS


@dataclass(frozen=True)
class TargetDescriptor:
    """How one host application stores MCP servers.

    ``agent`` is the identifier entries list in ``agents`` to opt in.
    """

    agent: str
    label: str
    fmt: str  # json or toml
    managed_key: str = "mcpServers"
    url_key: str = "url"
    supports_headers: bool = False
    optional_fields: tuple[str, ...] = ()


CURSOR = TargetDescriptor(agent="cursor", label="Cursor", fmt="json")
CLAUDE = TargetDescriptor(agent="claude", label="Claude Desktop", fmt="json")
WINDSURF = TargetDescriptor(
    agent="windsurf",
    label="Windsurf",
    fmt="json",
    url_key="serverUrl",
    supports_headers=True,
)
CODEX = TargetDescriptor(
    agent="codex",
    label="Codex CLI",
    fmt="toml",
    managed_key="mcp_servers",
    optional_fields=OPTIONAL_FIELDS,
)

DESCRIPTORS: dict[str, TargetDescriptor] = {
    d.agent: d for d in (CURSOR, CLAUDE, WINDSURF, CODEX)
}


def _claude_desktop_path() -> str:
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA") or str(Path.home() / "AppData" / "Roaming")
        return str(Path(appdata) / "Claude" / "claude_desktop_config.json")
    if sys.platform == "darwin":
        return "~/Library/Application Support/Claude/claude_desktop_config.json"
    return "~/.config/Claude/claude_desktop_config.json"


def default_target_path(target_type: str) -> str:
    """Default config file location for *target_type* on this platform."""
    if target_type == "cursor":
        return "~/.cursor/mcp.json"
    if target_type == "claude":
        return _claude_desktop_path()
    if target_type == "windsurf":
        return "~/.codeium/windsurf/mcp_config.json"
    if target_type == "codex":
        return "~/.codex/config.toml"
    raise KeyError(target_type)
