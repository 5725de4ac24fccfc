"""Codex target adapter — ``[mcp_servers.<name>]`` tables in config.toml."""

from __future__ import annotations

from pathlib import Path

from mcpunify.adapters.base import MergePlan, TargetAdapter, WriteResult
from mcpunify.exceptions import ConfigParseError, WriteError
from mcpunify.formats import Capabilities, read_text
from mcpunify.merge import merge_toml_text
from mcpunify.project import Fragment, project
from mcpunify.targets import CODEX, TargetDescriptor
from mcpunify.unified import UnifiedConfig
from mcpunify.utils.diff import diff_servers, show_server_diff
from mcpunify.utils.io import write_text
from mcpunify.utils.logger import SilentLogger, SyncLogger
from mcpunify.utils.paths import Environment
from mcpunify.utils.toml import managed_server_names, parse_toml, render_server_block


class CodexTargetAdapter(TargetAdapter):
    """Rewrites only the managed server tables; the rest of config.toml is kept verbatim."""

    def __init__(
        self,
        path: Path,
        *,
        descriptor: TargetDescriptor = CODEX,
        environment: Environment | None = None,
        capabilities: Capabilities | None = None,
        backup_dir: Path | None = None,
        logger: SyncLogger | None = None,
    ) -> None:
        self.descriptor = descriptor
        self.path = path
        self._env = environment or Environment.detect()
        self._caps = capabilities or Capabilities.detect()
        self._backup_dir = backup_dir
        self._log = logger or SilentLogger()
        self._fragment: Fragment | None = None
        self._blocks: dict[str, str] = {}

    # ------------------------------------------------------------------
    # TargetAdapter interface
    # ------------------------------------------------------------------

    def generate_mcp(self, unified: UnifiedConfig) -> Fragment:
        self._fragment = project(unified, self.descriptor, self._env, self._log)
        self._blocks = {
            name: render_server_block(name, record)
            for name, record in self._fragment.records.items()
        }
        return self._fragment

    @property
    def blocks(self) -> dict[str, str]:
        """Rendered TOML text per server from the last ``generate_mcp``."""
        return dict(self._blocks)

    def plan(self) -> MergePlan:
        """Merge the rendered blocks into the on-disk text, without writing."""
        if self._fragment is None:
            raise RuntimeError("generate_mcp() must be called before plan()")

        existing = self._read()
        merged = merge_toml_text(existing, self._blocks)

        try:
            parse_toml(merged, self.path)
        except ConfigParseError as exc:
            raise WriteError(self.path, f"merged config would not parse ({exc.reason})") from exc

        diff = diff_servers(managed_server_names(existing), self._blocks)
        return MergePlan(content=merged, diff=diff)

    def write(self, dry_run: bool = False) -> list[WriteResult]:
        if self._fragment is None:
            return []
        self._caps.require("toml", f"{self.label} target")
        if not self._blocks:
            self._log.info(f"{self.label}: no eligible servers, leaving {self.path} alone")
            return []

        plan = self.plan()
        show_server_diff(self.label, plan.diff, self._log)

        return [write_text(self.path, str(plan.content), self._log, self._backup_dir, dry_run)]

    def existing_names(self) -> list[str]:
        return managed_server_names(self._read())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read(self) -> str:
        if not self.path.is_file():
            return ""
        try:
            text = read_text(self.path)
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigParseError(self.path, str(exc)) from exc
        return text if text.strip() else ""
