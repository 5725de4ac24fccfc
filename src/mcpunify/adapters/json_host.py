"""JSON host adapter — Cursor, Claude Desktop and Windsurf.

All three keep servers in a top-level ``mcpServers`` map next to settings
we must not touch; they differ only in path and in the per-record schema,
which lives in the :class:`TargetDescriptor`.
"""

from __future__ import annotations

from pathlib import Path

from mcpunify.adapters.base import MergePlan, TargetAdapter, WriteResult
from mcpunify.formats import load_json_document
from mcpunify.merge import merge_json_document
from mcpunify.project import Fragment, project
from mcpunify.targets import TargetDescriptor
from mcpunify.unified import UnifiedConfig
from mcpunify.utils.diff import diff_servers, show_server_diff
from mcpunify.utils.io import write_json
from mcpunify.utils.logger import SilentLogger, SyncLogger
from mcpunify.utils.paths import Environment


class JsonTargetAdapter(TargetAdapter):
    """Merges projected servers into a JSON host config."""

    def __init__(
        self,
        descriptor: TargetDescriptor,
        path: Path,
        *,
        environment: Environment | None = None,
        backup_dir: Path | None = None,
        logger: SyncLogger | None = None,
    ) -> None:
        self.descriptor = descriptor
        self.path = path
        self._env = environment or Environment.detect()
        self._backup_dir = backup_dir
        self._log = logger or SilentLogger()
        self._fragment: Fragment | None = None

    # ------------------------------------------------------------------
    # TargetAdapter interface
    # ------------------------------------------------------------------

    def generate_mcp(self, unified: UnifiedConfig) -> Fragment:
        self._fragment = project(unified, self.descriptor, self._env, self._log)
        return self._fragment

    def plan(self) -> MergePlan:
        """Merge the current fragment into the on-disk document, without writing."""
        if self._fragment is None:
            raise RuntimeError("generate_mcp() must be called before plan()")

        existing = load_json_document(self.path)
        key = self.descriptor.managed_key
        notes: list[str] = []

        section = existing.get(key)
        if section is not None and not isinstance(section, dict):
            notes.append(f"'{key}' was a {type(section).__name__}, replaced with a mapping")
            section = None

        merged = merge_json_document(existing, self._fragment.records, key)
        diff = diff_servers(section or {}, self._fragment.records)
        return MergePlan(content=merged, diff=diff, notes=notes)

    def write(self, dry_run: bool = False) -> list[WriteResult]:
        if self._fragment is None:
            return []
        if not self._fragment.records:
            self._log.info(f"{self.label}: no eligible servers, leaving {self.path} alone")
            return []

        plan = self.plan()
        for note in plan.notes:
            self._log.warn(f"{self.label}: {note}")
        show_server_diff(self.label, plan.diff, self._log)

        return [write_json(self.path, plan.content, self._log, self._backup_dir, dry_run)]

    def existing_names(self) -> list[str]:
        section = load_json_document(self.path).get(self.descriptor.managed_key)
        return list(section) if isinstance(section, dict) else []
