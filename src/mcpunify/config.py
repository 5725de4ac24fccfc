"""Config file loading and validation for mcpunify.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from mcpunify.targets import DESCRIPTORS, default_target_path

CONFIG_FILENAME = "mcpunify.yaml"
SUPPORTED_VERSIONS = {1}
KNOWN_TARGET_TYPES = set(DESCRIPTORS)

DEFAULT_UNIFIED_FILE = "mcp-servers.yaml"
DEFAULT_LEGACY_JSON = "mcp-config.json"
DEFAULT_LEGACY_YAML = "mcps.yaml"


# === Config Dataclasses ===


@dataclass
class SourceConfig:
    """Team configuration repository and the files inside it."""

    repo_dir: str = "~/team-config"
    unified_file: str = DEFAULT_UNIFIED_FILE
    legacy_json: str = DEFAULT_LEGACY_JSON
    legacy_yaml: str = DEFAULT_LEGACY_YAML


@dataclass
class TargetConfig:
    """Single host application to write to."""

    type: str
    path: str = ""

    def __post_init__(self) -> None:
        if not self.path and self.type in KNOWN_TARGET_TYPES:
            self.path = default_target_path(self.type)


@dataclass
class SyncOptions:
    """Sync behavior options."""

    backup: bool = True
    backup_dir: str = "~/.mcpunify/backups"
    log_dir: str = "~/.mcpunify/logs"
    migrate: bool = True


def default_targets() -> dict[str, TargetConfig]:
    return {name: TargetConfig(type=name) for name in DESCRIPTORS}


@dataclass
class McpUnifyConfig:
    """Top-level mcpunify configuration."""

    version: int = 1
    source: SourceConfig = field(default_factory=SourceConfig)
    targets: dict[str, TargetConfig] = field(default_factory=default_targets)
    sync: SyncOptions = field(default_factory=SyncOptions)

    # Resolved at load time (not from YAML)
    config_dir: Path = field(default_factory=lambda: Path.cwd())

    @property
    def repo_dir(self) -> Path:
        return resolve_path(self.source.repo_dir, self.config_dir)

    @property
    def unified_path(self) -> Path:
        return resolve_path(self.source.unified_file, self.repo_dir)


# === Errors ===


class ConfigError(Exception):
    """Raised when config file is invalid or missing."""


# === Path Resolution ===


def resolve_path(path_str: str, base_dir: Path) -> Path:
    """Resolve a path string: expand ~ and make relative paths absolute."""
    p = Path(path_str).expanduser()
    if not p.is_absolute():
        p = base_dir / p
    return p


# === Config Discovery ===


def find_config(start_dir: Path | None = None) -> Path | None:
    """Find mcpunify.yaml by walking up from start_dir (or cwd)."""
    current = (start_dir or Path.cwd()).resolve()

    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate

        parent = current.parent
        if parent == current:
            return None  # Reached filesystem root
        current = parent


# === Parsing ===


def _parse_str(raw: dict[str, Any], key: str, default: str, where: str) -> str:
    value = raw.get(key, default)
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{where}.{key} must be a non-empty string")
    return value


def _parse_source(raw: Any) -> SourceConfig:
    if not isinstance(raw, dict):
        raise ConfigError(f"'source' must be a mapping, got {type(raw).__name__}")
    return SourceConfig(
        repo_dir=_parse_str(raw, "repo_dir", SourceConfig.repo_dir, "source"),
        unified_file=_parse_str(raw, "unified_file", SourceConfig.unified_file, "source"),
        legacy_json=_parse_str(raw, "legacy_json", SourceConfig.legacy_json, "source"),
        legacy_yaml=_parse_str(raw, "legacy_yaml", SourceConfig.legacy_yaml, "source"),
    )


def _parse_target(name: str, raw: dict[str, Any]) -> TargetConfig:
    target_type = raw.get("type", name if name in KNOWN_TARGET_TYPES else None)
    if not target_type:
        raise ConfigError(f"Target '{name}' is missing required field 'type'")
    if target_type not in KNOWN_TARGET_TYPES:
        raise ConfigError(
            f"Target '{name}': unknown type '{target_type}'. "
            f"Supported: {', '.join(sorted(KNOWN_TARGET_TYPES))}"
        )

    path = raw.get("path", "")
    if not isinstance(path, str):
        raise ConfigError(f"Target '{name}': path must be a string")

    return TargetConfig(type=target_type, path=path)


def _parse_targets(raw: Any) -> dict[str, TargetConfig]:
    if not isinstance(raw, dict):
        raise ConfigError(f"'targets' must be a mapping, got {type(raw).__name__}")
    targets = {}
    for name, target_raw in raw.items():
        if target_raw is None:
            target_raw = {}
        if not isinstance(target_raw, dict):
            raise ConfigError(f"Target '{name}' must be a mapping, got {type(target_raw).__name__}")
        targets[name] = _parse_target(name, target_raw)
    return targets


def _parse_sync_options(raw: Any) -> SyncOptions:
    if not isinstance(raw, dict):
        raise ConfigError(f"'sync' must be a mapping, got {type(raw).__name__}")
    for key in ("backup", "migrate"):
        if not isinstance(raw.get(key, True), bool):
            raise ConfigError(f"sync.{key} must be a boolean, got {type(raw[key]).__name__}")
    return SyncOptions(
        backup=raw.get("backup", True),
        backup_dir=_parse_str(raw, "backup_dir", SyncOptions.backup_dir, "sync"),
        log_dir=_parse_str(raw, "log_dir", SyncOptions.log_dir, "sync"),
        migrate=raw.get("migrate", True),
    )


# === Loading ===


def load_config(config_path: Path) -> McpUnifyConfig:
    """Load and validate mcpunify.yaml from a specific path."""
    if not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8-sig"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file must be a YAML mapping, got {type(raw).__name__}")

    # Version check
    version = raw.get("version")
    if version is None:
        raise ConfigError("Missing required field 'version'")
    if not isinstance(version, int) or isinstance(version, bool):
        raise ConfigError(f"'version' must be an integer, got {type(version).__name__}")
    if version not in SUPPORTED_VERSIONS:
        raise ConfigError(
            f"Unsupported config version {version}. Supported: {sorted(SUPPORTED_VERSIONS)}"
        )

    config_dir = config_path.parent.resolve()

    source = _parse_source(raw.get("source") or {})
    targets = _parse_targets(raw["targets"]) if "targets" in raw else default_targets()
    sync_opts = _parse_sync_options(raw.get("sync") or {})

    if not targets:
        raise ConfigError("At least one target must be defined in 'targets'")

    return McpUnifyConfig(
        version=version,
        source=source,
        targets=targets,
        sync=sync_opts,
        config_dir=config_dir,
    )


def load(config_path: str | Path | None = None) -> McpUnifyConfig:
    """Load config from explicit path, a discovered mcpunify.yaml, or defaults.

    Args:
        config_path: Explicit path to config file, or None to auto-discover.

    Returns:
        Parsed McpUnifyConfig.  Without any config file the built-in defaults
        (all known hosts at their usual paths) are returned.

    Raises:
        ConfigError: If an explicit path is missing or any config is invalid.
    """
    if config_path is not None:
        return load_config(Path(config_path).resolve())

    found = find_config()
    if not found:
        return McpUnifyConfig()
    return load_config(found)


# === Default Config Generation ===


DEFAULT_CONFIG = """\
# mcpunify.yaml — project a team MCP server list into every host application

version: 1

# Team configuration repository (already cloned by the bootstrap)
source:
  repo_dir: ~/team-config
  unified_file: mcp-servers.yaml    # servers: [{name, command|url, ...}]
  legacy_json: mcp-config.json      # old mcpServers map, migrated once
  legacy_yaml: mcps.yaml            # old mcps list (repository/buildCommands)

# Host applications to write; omit 'path' to use the platform default
targets:
  cursor:
    type: cursor
    path: ~/.cursor/mcp.json
  claude:
    type: claude                    # Claude Desktop
  windsurf:
    type: windsurf
    path: ~/.codeium/windsurf/mcp_config.json
  codex:
    type: codex
    path: ~/.codex/config.toml

# Sync options
sync:
  backup: true                      # Copy each host file before writing
  backup_dir: ~/.mcpunify/backups
  log_dir: ~/.mcpunify/logs
  migrate: true                     # Build the unified file from legacy files if missing
"""


def generate_default_config(target_dir: Path, force: bool = False) -> Path:
    """Write default mcpunify.yaml to target_dir.

    Returns:
        Path to the created config file.

    Raises:
        ConfigError: If file already exists and force=False.
    """
    target = target_dir / CONFIG_FILENAME
    if target.exists() and not force:
        raise ConfigError(f"{CONFIG_FILENAME} already exists. Use --force to overwrite.")

    target.write_text(DEFAULT_CONFIG, encoding="utf-8")
    return target
