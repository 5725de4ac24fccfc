"""Target adapters for the supported host applications."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mcpunify.adapters.base import TargetAdapter
    from mcpunify.config import McpUnifyConfig, TargetConfig
    from mcpunify.formats import Capabilities
    from mcpunify.utils.logger import SyncLogger
    from mcpunify.utils.paths import Environment


class AdapterError(Exception):
    """Raised when no adapter is registered for a given type."""


def create_target(
    target_config: TargetConfig,
    config: McpUnifyConfig,
    *,
    environment: Environment | None = None,
    capabilities: Capabilities | None = None,
    logger: SyncLogger | None = None,
) -> TargetAdapter:
    """Instantiate the adapter for *target_config.type*."""
    from mcpunify.config import resolve_path
    from mcpunify.targets import DESCRIPTORS

    descriptor = DESCRIPTORS.get(target_config.type)
    if descriptor is None:
        raise AdapterError(f"No adapter registered for target type '{target_config.type}'.")

    path = resolve_path(target_config.path, config.config_dir)
    backup_dir = (
        resolve_path(config.sync.backup_dir, config.config_dir) if config.sync.backup else None
    )

    if descriptor.fmt == "toml":
        from mcpunify.adapters.codex import CodexTargetAdapter

        return CodexTargetAdapter(
            path,
            descriptor=descriptor,
            environment=environment,
            capabilities=capabilities,
            backup_dir=backup_dir,
            logger=logger,
        )

    from mcpunify.adapters.json_host import JsonTargetAdapter

    return JsonTargetAdapter(
        descriptor,
        path,
        environment=environment,
        backup_dir=backup_dir,
        logger=logger,
    )


def create_targets(
    config: McpUnifyConfig,
    *,
    environment: Environment | None = None,
    capabilities: Capabilities | None = None,
    logger: SyncLogger | None = None,
) -> dict[str, TargetAdapter]:
    """Instantiate target adapters from *config.targets*."""
    return {
        name: create_target(
            tc, config, environment=environment, capabilities=capabilities, logger=logger
        )
        for name, tc in config.targets.items()
    }
