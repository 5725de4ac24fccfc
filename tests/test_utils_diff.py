"""Tests for mcpunify.utils.diff — server diff computation and display."""

from __future__ import annotations

from mcpunify.utils.diff import diff_servers, show_server_diff
from mcpunify.utils.logger import SyncLogger


def test_diff_servers():
    diff = diff_servers(["a", "b", "local"], ["b", "a", "c"])
    assert diff.added == ["c"]
    assert diff.updated == ["b", "a"]
    assert diff.preserved == ["local"]


def test_diff_from_empty():
    diff = diff_servers([], ["a"])
    assert diff.added == ["a"]
    assert diff.updated == []
    assert diff.preserved == []


def test_show_added_and_preserved():
    log = SyncLogger(quiet=True)
    show_server_diff("Cursor", diff_servers(["mine"], ["a", "b"]), log)
    assert any("+2 servers (a, b)" in line for line in log.lines)
    assert any("1 local servers kept (mine)" in line for line in log.lines)


def test_show_updated():
    log = SyncLogger(quiet=True)
    show_server_diff("Cursor", diff_servers(["a"], ["a"]), log)
    assert any("~1 servers (a)" in line for line in log.lines)


def test_show_nothing():
    log = SyncLogger(quiet=True)
    show_server_diff("Cursor", diff_servers(["mine"], []), log)
    assert any("nothing to write" in line for line in log.lines)
