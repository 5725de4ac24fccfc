"""Core sync orchestrator — migrates, loads the unified list, updates each target."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from mcpunify.adapters.base import WriteResult
from mcpunify.exceptions import CapabilityUnavailableError, ConfigParseError, McpUnifyError
from mcpunify.formats import Capabilities
from mcpunify.migrate import MigrationResult, migrate_legacy
from mcpunify.unified import UnifiedConfig, load_unified
from mcpunify.utils.logger import SilentLogger, SyncLogger

if TYPE_CHECKING:
    from mcpunify.adapters.base import TargetAdapter
    from mcpunify.config import McpUnifyConfig


@dataclass
class TargetSyncResult:
    """Outcome of syncing a single target."""

    target_name: str
    success: bool
    skipped: bool = False
    server_count: int = 0
    writes: list[WriteResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass
class SyncResult:
    """Aggregate outcome of a full sync run.

    ``success`` is only false when targets were attempted and every one of
    them failed; a partial run is still a best-effort success.
    """

    success: bool
    dry_run: bool
    migration: MigrationResult | None = None
    server_count: int = 0
    invalid_count: int = 0
    target_results: dict[str, TargetSyncResult] = field(default_factory=dict)

    @property
    def failed_targets(self) -> list[str]:
        return [n for n, tr in self.target_results.items() if not tr.success]


class SyncEngine:
    """Orchestrates sync from the team repository to multiple targets."""

    def __init__(
        self,
        config: McpUnifyConfig,
        targets: dict[str, TargetAdapter],
        *,
        capabilities: Capabilities | None = None,
        logger: SyncLogger | None = None,
    ) -> None:
        self._config = config
        self._targets = targets
        self._caps = capabilities or Capabilities.detect()
        self._log = logger or SilentLogger()

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------

    def run(
        self,
        *,
        dry_run: bool = False,
        target_filter: str | None = None,
        migrate: bool = True,
    ) -> SyncResult:
        """Execute the sync pipeline.

        Returns a :class:`SyncResult` summarising what happened.
        """
        log = self._log
        result = SyncResult(success=True, dry_run=dry_run)

        # Determine which targets to process
        target_names = list(self._targets)
        if target_filter:
            if target_filter not in self._targets:
                log.error(f"Unknown target '{target_filter}'")
                result.success = False
                return result
            target_names = [target_filter]

        # --- Team configuration ---
        log.section("Team configuration")
        if migrate and self._config.sync.migrate:
            result.migration = self._migrate(dry_run)

        migration = result.migration
        if dry_run and migration is not None and migration.entries and not migration.path.exists():
            # Nothing was written; project what the migration would have produced.
            unified = UnifiedConfig(
                servers={e.name: e for e in migration.entries}, path=migration.path
            )
        else:
            unified = self.load_unified()
        result.server_count = len(unified)
        result.invalid_count = len(unified.invalid)

        # --- Per-target processing ---
        attempted = 0
        for name in target_names:
            target = self._targets[name]
            tr = TargetSyncResult(target_name=name, success=True)

            log.section(f"Target: {name} ({target.label})")

            try:
                fragment = target.generate_mcp(unified)
                tr.server_count = len(fragment)
                log.info(f"{len(fragment)}/{len(unified)} servers eligible for {target.label}")
                tr.writes = target.write(dry_run=dry_run)
                attempted += 1
            except CapabilityUnavailableError as exc:
                tr.skipped = True
                log.warn(f"{name}: {exc}")
            except McpUnifyError as exc:
                attempted += 1
                tr.success = False
                tr.errors.append(str(exc))
                log.error(f"{name}: {exc}")

            result.target_results[name] = tr

        failed = len(result.failed_targets)
        if attempted and failed == attempted:
            result.success = False

        return result

    def load_unified(self) -> UnifiedConfig:
        """Load the unified list; parse problems degrade to an empty list."""
        path = self._config.unified_path
        try:
            unified = load_unified(path, self._caps, self._log)
        except (ConfigParseError, CapabilityUnavailableError) as exc:
            self._log.error(f"{exc}; continuing with no servers")
            return UnifiedConfig(path=path)

        if not path.is_file():
            self._log.warn(f"Unified server list not found: {path}")
        else:
            self._log.info(f"Loaded {len(unified)} servers from {path}")
        return unified

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _migrate(self, dry_run: bool) -> MigrationResult:
        src = self._config.source
        migration = migrate_legacy(
            self._config.repo_dir,
            unified_file=src.unified_file,
            legacy_json=src.legacy_json,
            legacy_yaml=src.legacy_yaml,
            capabilities=self._caps,
            logger=self._log,
            dry_run=dry_run,
        )
        if migration.migrated:
            self._log.info(
                f"Migrated {migration.server_count} servers from "
                f"{', '.join(migration.sources)} into {migration.path}"
            )
        return migration
