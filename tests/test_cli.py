"""Tests for mcpunify CLI — commands, exit codes, output."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from mcpunify.adapters.base import TargetAdapter, WriteResult
from mcpunify.cli import EXIT_CONFIG_ERROR, EXIT_OK, EXIT_RUNTIME_ERROR, main
from mcpunify.config import CONFIG_FILENAME
from mcpunify.exceptions import WriteError
from mcpunify.project import Fragment, project
from mcpunify.targets import CURSOR
from mcpunify.unified import UnifiedConfig
from mcpunify.utils.paths import Environment

# ===================================================================
# Fake adapters for CLI tests
# ===================================================================


class FakeTarget(TargetAdapter):
    def __init__(self, *, fail: bool = False) -> None:
        self.descriptor = CURSOR
        self.path = Path("fake.json")
        self.fail = fail

    def generate_mcp(self, unified: UnifiedConfig) -> Fragment:
        return project(unified, self.descriptor, Environment(home="/h", sep="/"))

    def write(self, dry_run: bool = False) -> list[WriteResult]:
        if self.fail:
            raise WriteError(self.path, "permission denied")
        if dry_run:
            return [WriteResult(path="fake.json", written=False, message="WOULD CREATE")]
        return [WriteResult(path="fake.json", written=True, bytes_written=100)]

    def existing_names(self) -> list[str]:
        return []


# ===================================================================
# Helpers
# ===================================================================

CONFIG = """\
version: 1
source:
  repo_dir: repo
targets:
  cursor:
    type: cursor
    path: hosts/cursor/mcp.json
  codex:
    type: codex
    path: hosts/codex/config.toml
sync:
  backup_dir: backups
  log_dir: logs
"""

UNIFIED = """\
servers:
  - name: fs
    command: fsd
    args: ["--stdio"]
  - name: web
    url: https://example.com/mcp
    agents: [codex]
"""


def _setup(tmp_path: Path, *, unified: str | None = UNIFIED) -> Path:
    cfg = tmp_path / CONFIG_FILENAME
    cfg.write_text(CONFIG, encoding="utf-8")
    repo = tmp_path / "repo"
    repo.mkdir()
    if unified is not None:
        (repo / "mcp-servers.yaml").write_text(unified, encoding="utf-8")
    return cfg


def _patch_targets(targets: dict[str, TargetAdapter]):
    return patch("mcpunify.cli.create_targets", return_value=targets)


# ===================================================================
# Tests — version and help
# ===================================================================


def test_version():
    runner = CliRunner()
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == EXIT_OK
    assert "mcpunify" in result.output
    assert "0.1.0" in result.output


def test_help():
    runner = CliRunner()
    result = runner.invoke(main, ["--help"])
    assert result.exit_code == EXIT_OK
    for cmd in ("sync", "migrate", "list", "validate", "status", "init"):
        assert cmd in result.output


@pytest.mark.parametrize("cmd", ["sync", "migrate", "list", "validate", "status", "init"])
def test_subcommand_help(cmd: str):
    runner = CliRunner()
    result = runner.invoke(main, [cmd, "--help"])
    assert result.exit_code == EXIT_OK
    assert "--help" in result.output


# ===================================================================
# Tests — init
# ===================================================================


def test_init_creates_file(tmp_path: Path):
    runner = CliRunner()
    with runner.isolated_filesystem(temp_dir=tmp_path) as td:
        result = runner.invoke(main, ["init"])
        assert result.exit_code == EXIT_OK
        assert "Created" in result.output
        assert (Path(td) / CONFIG_FILENAME).is_file()


def test_init_no_overwrite(tmp_path: Path):
    runner = CliRunner()
    with runner.isolated_filesystem(temp_dir=tmp_path) as td:
        (Path(td) / CONFIG_FILENAME).write_text("existing")
        result = runner.invoke(main, ["init"])
        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "already exists" in result.output


def test_init_force(tmp_path: Path):
    runner = CliRunner()
    with runner.isolated_filesystem(temp_dir=tmp_path) as td:
        (Path(td) / CONFIG_FILENAME).write_text("old content")
        result = runner.invoke(main, ["init", "--force"])
        assert result.exit_code == EXIT_OK
        assert "version: 1" in (Path(td) / CONFIG_FILENAME).read_text()


# ===================================================================
# Tests — sync
# ===================================================================


def test_sync_bad_config(tmp_path: Path):
    cfg = tmp_path / CONFIG_FILENAME
    cfg.write_text("version: 7\n")
    result = CliRunner().invoke(main, ["-c", str(cfg), "sync"])
    assert result.exit_code == EXIT_CONFIG_ERROR
    assert "Error" in result.output


def test_sync_missing_explicit_config(tmp_path: Path):
    result = CliRunner().invoke(main, ["-c", str(tmp_path / "nope.yaml"), "sync"])
    assert result.exit_code == EXIT_CONFIG_ERROR


def test_sync_dry_run(tmp_path: Path):
    cfg = _setup(tmp_path)
    with _patch_targets({"cursor": FakeTarget()}):
        result = CliRunner().invoke(main, ["-c", str(cfg), "sync", "--dry-run"])
    assert result.exit_code == EXIT_OK
    assert "DRY RUN" in result.output
    assert not (tmp_path / "logs").exists()


def test_sync_partial_failure_still_ok(tmp_path: Path):
    cfg = _setup(tmp_path)
    targets = {"cursor": FakeTarget(), "broken": FakeTarget(fail=True)}
    with _patch_targets(targets):
        result = CliRunner().invoke(main, ["-c", str(cfg), "sync"])
    assert result.exit_code == EXIT_OK
    assert "permission denied" in result.output


def test_sync_all_failed(tmp_path: Path):
    cfg = _setup(tmp_path)
    with _patch_targets({"broken": FakeTarget(fail=True)}):
        result = CliRunner().invoke(main, ["-c", str(cfg), "sync"])
    assert result.exit_code == EXIT_RUNTIME_ERROR


def test_sync_unknown_target(tmp_path: Path):
    cfg = _setup(tmp_path)
    with _patch_targets({"cursor": FakeTarget()}):
        result = CliRunner().invoke(main, ["-c", str(cfg), "sync", "-t", "nope"])
    assert result.exit_code == EXIT_RUNTIME_ERROR


def test_sync_end_to_end(tmp_path: Path):
    cfg = _setup(tmp_path)
    cursor_path = tmp_path / "hosts" / "cursor" / "mcp.json"
    cursor_path.parent.mkdir(parents=True)
    cursor_path.write_text(json.dumps({"mcpServers": {"mine": {"command": "me"}}}))

    result = CliRunner().invoke(main, ["-c", str(cfg), "sync"])

    assert result.exit_code == EXIT_OK, result.output
    assert "Sync complete" in result.output
    assert json.loads(cursor_path.read_text())["mcpServers"] == {
        "mine": {"command": "me"},
        "fs": {"command": "fsd", "args": ["--stdio"]},
    }
    codex_text = (tmp_path / "hosts" / "codex" / "config.toml").read_text()
    assert "[mcp_servers.web]" in codex_text
    assert list((tmp_path / "backups").glob("cursor-mcp.json.*.bak"))
    assert list((tmp_path / "logs").glob("sync-*.log"))


def test_sync_no_backup(tmp_path: Path):
    cfg = _setup(tmp_path)
    cursor_path = tmp_path / "hosts" / "cursor" / "mcp.json"
    cursor_path.parent.mkdir(parents=True)
    cursor_path.write_text("{}")

    result = CliRunner().invoke(main, ["-c", str(cfg), "sync", "--no-backup"])

    assert result.exit_code == EXIT_OK
    assert not (tmp_path / "backups").exists()


def test_sync_repo_override_and_migrate(tmp_path: Path):
    cfg = _setup(tmp_path, unified=None)
    other = tmp_path / "other-repo"
    other.mkdir()
    (other / "mcp-config.json").write_text(json.dumps({"mcpServers": {"x": {"command": "x"}}}))

    result = CliRunner().invoke(main, ["-c", str(cfg), "sync", "--repo", str(other)])

    assert result.exit_code == EXIT_OK, result.output
    assert (other / "mcp-servers.yaml").is_file()
    cursor = json.loads((tmp_path / "hosts" / "cursor" / "mcp.json").read_text())
    assert cursor["mcpServers"] == {"x": {"command": "x"}}


def test_sync_no_migrate(tmp_path: Path):
    cfg = _setup(tmp_path, unified=None)
    (tmp_path / "repo" / "mcp-config.json").write_text(json.dumps({"mcpServers": {}}))

    CliRunner().invoke(main, ["-c", str(cfg), "sync", "--no-migrate"])

    assert not (tmp_path / "repo" / "mcp-servers.yaml").exists()


def test_sync_quiet(tmp_path: Path):
    cfg = _setup(tmp_path)
    with _patch_targets({"cursor": FakeTarget()}):
        result = CliRunner().invoke(main, ["-c", str(cfg), "-q", "sync"])
    assert result.exit_code == EXIT_OK
    assert "Sync complete" not in result.output


# ===================================================================
# Tests — migrate
# ===================================================================


def test_migrate_command(tmp_path: Path):
    cfg = _setup(tmp_path, unified=None)
    (tmp_path / "repo" / "mcps.yaml").write_text("mcps:\n  - name: tool\n    repository: r\n")

    result = CliRunner().invoke(main, ["-c", str(cfg), "migrate"])

    assert result.exit_code == EXIT_OK
    assert "Migrated" in result.output
    assert (tmp_path / "repo" / "mcp-servers.yaml").is_file()


def test_migrate_when_unified_exists(tmp_path: Path):
    cfg = _setup(tmp_path)
    result = CliRunner().invoke(main, ["-c", str(cfg), "migrate"])
    assert result.exit_code == EXIT_OK
    assert "already exists" in result.output


def test_migrate_dry_run(tmp_path: Path):
    cfg = _setup(tmp_path, unified=None)
    (tmp_path / "repo" / "mcp-config.json").write_text(json.dumps({"mcpServers": {"x": {"command": "x"}}}))
    result = CliRunner().invoke(main, ["-c", str(cfg), "migrate", "--dry-run"])
    assert result.exit_code == EXIT_OK
    assert not (tmp_path / "repo" / "mcp-servers.yaml").exists()


# ===================================================================
# Tests — list, validate, status
# ===================================================================


def test_list(tmp_path: Path):
    cfg = _setup(tmp_path)
    result = CliRunner().invoke(main, ["-c", str(cfg), "list"])
    assert result.exit_code == EXIT_OK
    assert "fs" in result.output
    assert "web" in result.output
    assert "Total: 2 servers" in result.output


def test_list_bad_unified(tmp_path: Path):
    cfg = _setup(tmp_path, unified="servers: [oops\n")
    result = CliRunner().invoke(main, ["-c", str(cfg), "list"])
    assert result.exit_code == EXIT_RUNTIME_ERROR


def test_validate_before_and_after_sync(tmp_path: Path):
    cfg = _setup(tmp_path)
    cursor_path = tmp_path / "hosts" / "cursor" / "mcp.json"
    cursor_path.parent.mkdir(parents=True)
    cursor_path.write_text(json.dumps({"mcpServers": {"mine": {}}}))

    runner = CliRunner()
    before = runner.invoke(main, ["-c", str(cfg), "validate"])
    assert before.exit_code == EXIT_RUNTIME_ERROR

    runner.invoke(main, ["-c", str(cfg), "sync"])
    after = runner.invoke(main, ["-c", str(cfg), "validate", "-v"])
    assert after.exit_code == EXIT_OK
    assert "passed" in after.output


def test_status(tmp_path: Path):
    cfg = _setup(tmp_path)
    result = CliRunner().invoke(main, ["-c", str(cfg), "status"])
    assert result.exit_code == EXIT_OK
    assert "Team repository" in result.output
    assert "cursor" in result.output
    assert "codex" in result.output
