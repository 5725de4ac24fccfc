"""Tests for mcpunify.config — loading, validation and defaults."""

from __future__ import annotations

from pathlib import Path

import pytest

from mcpunify.config import (
    CONFIG_FILENAME,
    DEFAULT_CONFIG,
    ConfigError,
    McpUnifyConfig,
    TargetConfig,
    find_config,
    generate_default_config,
    load,
    load_config,
    resolve_path,
)
from mcpunify.targets import default_target_path

# ===================================================================
# Helpers
# ===================================================================


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / CONFIG_FILENAME
    path.write_text(content, encoding="utf-8")
    return path


FULL = """\
version: 1
source:
  repo_dir: team
  unified_file: servers.yaml
targets:
  cursor:
    type: cursor
    path: hosts/cursor.json
  work-codex:
    type: codex
sync:
  backup: false
  log_dir: logs
  migrate: false
"""


# ===================================================================
# Loading
# ===================================================================


def test_load_full(tmp_path: Path):
    cfg = load_config(_write(tmp_path, FULL))
    assert cfg.version == 1
    assert cfg.config_dir == tmp_path.resolve()
    assert cfg.repo_dir == tmp_path.resolve() / "team"
    assert cfg.unified_path == tmp_path.resolve() / "team" / "servers.yaml"
    assert cfg.source.legacy_json == "mcp-config.json"
    assert cfg.targets["cursor"].path == "hosts/cursor.json"
    assert cfg.targets["work-codex"].type == "codex"
    assert cfg.targets["work-codex"].path == default_target_path("codex")
    assert cfg.sync.backup is False
    assert cfg.sync.migrate is False
    assert cfg.sync.backup_dir == "~/.mcpunify/backups"


def test_minimal_uses_default_targets(tmp_path: Path):
    cfg = load_config(_write(tmp_path, "version: 1\n"))
    assert set(cfg.targets) == {"cursor", "claude", "windsurf", "codex"}
    assert cfg.sync.backup is True


def test_target_type_inferred_from_name(tmp_path: Path):
    cfg = load_config(_write(tmp_path, "version: 1\ntargets:\n  windsurf:\n"))
    assert cfg.targets["windsurf"].type == "windsurf"


def test_default_config_text_loads(tmp_path: Path):
    cfg = load_config(_write(tmp_path, DEFAULT_CONFIG))
    assert set(cfg.targets) == {"cursor", "claude", "windsurf", "codex"}


@pytest.mark.parametrize(
    "content, match",
    [
        ("targets: {}\n", "version"),
        ("version: '1'\n", "integer"),
        ("version: 9\n", "Unsupported"),
        ("- a\n- b\n", "mapping"),
        ("version: 1\ntargets: {}\n", "At least one target"),
        ("version: 1\ntargets:\n  x:\n    path: a\n", "missing required field 'type'"),
        ("version: 1\ntargets:\n  x:\n    type: vim\n", "unknown type 'vim'"),
        ("version: 1\nsync:\n  backup: 'yes'\n", "boolean"),
        ("version: 1\nsource:\n  repo_dir: ''\n", "non-empty"),
        ("version: 1\nsource: [a]\n", "'source' must be a mapping"),
        ("version: [1\n", "Invalid YAML"),
    ],
)
def test_invalid_configs(tmp_path: Path, content: str, match: str):
    with pytest.raises(ConfigError, match=match):
        load_config(_write(tmp_path, content))


def test_missing_explicit_path(tmp_path: Path):
    with pytest.raises(ConfigError, match="not found"):
        load(tmp_path / "nope.yaml")


# ===================================================================
# Discovery
# ===================================================================


def test_find_config_walks_up(tmp_path: Path):
    path = _write(tmp_path, "version: 1\n")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    assert find_config(nested) == path.resolve()


def test_load_without_config_uses_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    cfg = load()
    assert isinstance(cfg, McpUnifyConfig)
    assert set(cfg.targets) == {"cursor", "claude", "windsurf", "codex"}


def test_load_discovers_from_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _write(tmp_path, FULL)
    monkeypatch.chdir(tmp_path)
    assert set(load().targets) == {"cursor", "work-codex"}


# ===================================================================
# Helpers
# ===================================================================


def test_resolve_path(tmp_path: Path):
    assert resolve_path("sub/file", tmp_path) == tmp_path / "sub" / "file"
    assert resolve_path("~/x", tmp_path) == Path.home() / "x"
    assert resolve_path(str(tmp_path / "abs"), Path("/elsewhere")) == tmp_path / "abs"


def test_target_config_default_path():
    assert TargetConfig(type="cursor").path == "~/.cursor/mcp.json"
    assert TargetConfig(type="codex", path="x.toml").path == "x.toml"


def test_generate_default_config(tmp_path: Path):
    path = generate_default_config(tmp_path)
    assert path.read_text(encoding="utf-8") == DEFAULT_CONFIG
    with pytest.raises(ConfigError, match="already exists"):
        generate_default_config(tmp_path)
    generate_default_config(tmp_path, force=True)
