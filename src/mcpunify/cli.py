"""CLI entry point for mcpunify."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from mcpunify import __version__
from mcpunify.adapters import AdapterError
from mcpunify.adapters import create_targets as _create_targets

if TYPE_CHECKING:
    from mcpunify.adapters.base import TargetAdapter
    from mcpunify.config import McpUnifyConfig
    from mcpunify.utils.logger import SyncLogger

# Exit codes
EXIT_OK = 0
EXIT_RUNTIME_ERROR = 1
EXIT_CONFIG_ERROR = 2


# ===================================================================
# Shared helpers
# ===================================================================


def create_targets(
    config: McpUnifyConfig,
    logger: SyncLogger | None = None,
) -> dict[str, TargetAdapter]:
    """Instantiate target adapters from *config.targets*."""
    return _create_targets(config, logger=logger)


def _load_config(ctx: click.Context, repo: str | None = None) -> McpUnifyConfig:
    from mcpunify.config import ConfigError, load

    try:
        cfg = load(ctx.obj["config_path"])
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    if repo:
        cfg.source.repo_dir = str(Path(repo).expanduser().resolve())
    return cfg


def _targets_or_exit(
    cfg: McpUnifyConfig,
    logger: SyncLogger | None = None,
) -> dict[str, TargetAdapter]:
    try:
        return create_targets(cfg, logger)
    except AdapterError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)


# ===================================================================
# CLI group
# ===================================================================


@click.group()
@click.version_option(version=__version__, prog_name="mcpunify")
@click.option("--config", "-c", type=click.Path(), help="Path to mcpunify.yaml config file.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output.")
@click.pass_context
def main(ctx: click.Context, config: str | None, quiet: bool) -> None:
    """Project a team MCP server list into every host application."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["quiet"] = quiet


# ===================================================================
# sync
# ===================================================================


@main.command()
@click.option("--dry-run", is_flag=True, help="Show what would change without writing files.")
@click.option("--target", "-t", help="Sync only a specific target.")
@click.option("--no-backup", is_flag=True, help="Skip creating backups before writing.")
@click.option("--no-migrate", is_flag=True, help="Do not build the unified file from legacy files.")
@click.option("--repo", type=click.Path(file_okay=False), help="Team configuration repository.")
@click.pass_context
def sync(
    ctx: click.Context,
    dry_run: bool,
    target: str | None,
    no_backup: bool,
    no_migrate: bool,
    repo: str | None,
) -> None:
    """Merge the unified server list into every configured target."""
    from mcpunify.config import resolve_path
    from mcpunify.sync import SyncEngine
    from mcpunify.utils.logger import SyncLogger

    quiet: bool = ctx.obj["quiet"]
    cfg = _load_config(ctx, repo)

    if no_backup:
        cfg.sync.backup = False

    logger = SyncLogger(dry_run=dry_run, quiet=quiet)
    targets = _targets_or_exit(cfg, logger)

    engine = SyncEngine(cfg, targets, logger=logger)
    result = engine.run(dry_run=dry_run, target_filter=target, migrate=not no_migrate)

    if not dry_run:
        try:
            logger.flush_to_file(resolve_path(cfg.sync.log_dir, cfg.config_dir))
        except OSError as e:
            click.echo(f"Warning: could not write sync log: {e}", err=True)

    if not quiet:
        from mcpunify.utils.output import print_sync_summary

        print_sync_summary(result)

    sys.exit(EXIT_OK if result.success else EXIT_RUNTIME_ERROR)


# ===================================================================
# migrate
# ===================================================================


@main.command()
@click.option("--dry-run", is_flag=True, help="Show the migration without writing files.")
@click.option("--repo", type=click.Path(file_okay=False), help="Team configuration repository.")
@click.pass_context
def migrate(ctx: click.Context, dry_run: bool, repo: str | None) -> None:
    """Build the unified server file from the legacy JSON and YAML files."""
    from mcpunify.migrate import migrate_legacy
    from mcpunify.utils.logger import SyncLogger

    quiet: bool = ctx.obj["quiet"]
    cfg = _load_config(ctx, repo)
    src = cfg.source

    logger = SyncLogger(dry_run=dry_run, quiet=quiet)
    result = migrate_legacy(
        cfg.repo_dir,
        unified_file=src.unified_file,
        legacy_json=src.legacy_json,
        legacy_yaml=src.legacy_yaml,
        logger=logger,
        dry_run=dry_run,
    )

    if not quiet:
        from mcpunify.utils.output import print_migration_result

        print_migration_result(result)

    sys.exit(EXIT_RUNTIME_ERROR if logger.errors else EXIT_OK)


# ===================================================================
# list
# ===================================================================


@main.command(name="list")
@click.option("--repo", type=click.Path(file_okay=False), help="Team configuration repository.")
@click.pass_context
def list_servers(ctx: click.Context, repo: str | None) -> None:
    """List servers in the unified file and the targets that receive them."""
    from mcpunify.exceptions import CapabilityUnavailableError, ConfigParseError
    from mcpunify.unified import load_unified
    from mcpunify.utils.output import print_server_table

    cfg = _load_config(ctx, repo)
    targets = _targets_or_exit(cfg)

    try:
        unified = load_unified(cfg.unified_path)
    except (ConfigParseError, CapabilityUnavailableError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_RUNTIME_ERROR)

    print_server_table(unified, targets)


# ===================================================================
# validate
# ===================================================================


@main.command()
@click.option("--verbose", "-v", is_flag=True, help="Show details for passed checks too.")
@click.option("--target", "-t", help="Validate only a specific target.")
@click.pass_context
def validate(ctx: click.Context, verbose: bool, target: str | None) -> None:
    """Check every target config against the unified server list."""
    from mcpunify.validate import Validator

    quiet: bool = ctx.obj["quiet"]
    cfg = _load_config(ctx)
    targets = _targets_or_exit(cfg)

    validator = Validator(cfg, targets)
    report = validator.run(verbose=verbose, target_filter=target)

    if not quiet:
        from mcpunify.utils.output import print_validation_report

        print_validation_report(report, verbose=verbose)

    sys.exit(EXIT_OK if report.passed else EXIT_RUNTIME_ERROR)


# ===================================================================
# init
# ===================================================================


@main.command()
@click.option("--force", is_flag=True, help="Overwrite existing mcpunify.yaml.")
def init(force: bool) -> None:
    """Create an mcpunify.yaml config file with sensible defaults."""
    from mcpunify.config import ConfigError, generate_default_config

    try:
        path = generate_default_config(Path.cwd(), force=force)
        click.echo(f"Created {path}")
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)


# ===================================================================
# status
# ===================================================================


@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show source files and whether each target is up to date."""
    from mcpunify.exceptions import CapabilityUnavailableError, ConfigParseError
    from mcpunify.unified import UnifiedConfig, load_unified
    from mcpunify.utils.output import print_status

    cfg = _load_config(ctx)
    targets = _targets_or_exit(cfg)

    try:
        unified = load_unified(cfg.unified_path)
    except (ConfigParseError, CapabilityUnavailableError) as e:
        click.echo(f"Warning: {e}", err=True)
        unified = UnifiedConfig(path=cfg.unified_path)

    print_status(cfg, unified, targets)
