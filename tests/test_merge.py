"""Tests for mcpunify.merge — overwrite-per-name merge for JSON and TOML."""

from __future__ import annotations

import copy
import tomllib

from mcpunify.merge import merge_json_document, merge_toml_text
from mcpunify.utils.toml import render_server_block

# ===================================================================
# JSON
# ===================================================================

EXISTING_JSON = {
    "theme": "dark",
    "mcpServers": {
        "A": {"command": "old-a"},
        "B": {"command": "local-b", "args": ["--keep"]},
    },
}

RECORDS = {
    "A": {"command": "new-a"},
    "C": {"url": "https://c"},
}


def test_json_overwrite_keep_add():
    merged = merge_json_document(EXISTING_JSON, RECORDS)
    assert merged["mcpServers"] == {
        "A": {"command": "new-a"},
        "B": {"command": "local-b", "args": ["--keep"]},
        "C": {"url": "https://c"},
    }
    assert merged["theme"] == "dark"


def test_json_does_not_mutate_input():
    before = copy.deepcopy(EXISTING_JSON)
    merge_json_document(EXISTING_JSON, RECORDS)
    assert EXISTING_JSON == before


def test_json_replaces_whole_record():
    existing = {"mcpServers": {"A": {"command": "a", "env": {"K": "v"}}}}
    merged = merge_json_document(existing, {"A": {"url": "https://a"}})
    assert merged["mcpServers"]["A"] == {"url": "https://a"}


def test_json_non_mapping_section_replaced():
    merged = merge_json_document({"mcpServers": ["bogus"], "x": 1}, RECORDS)
    assert merged == {"mcpServers": RECORDS, "x": 1}


def test_json_empty_document():
    assert merge_json_document({}, RECORDS) == {"mcpServers": RECORDS}


def test_json_idempotent():
    once = merge_json_document(EXISTING_JSON, RECORDS)
    assert merge_json_document(once, RECORDS) == once


def test_json_custom_key():
    merged = merge_json_document({}, RECORDS, managed_key="servers")
    assert merged == {"servers": RECORDS}


# ===================================================================
# TOML
# ===================================================================

EXISTING_TOML = """\
# personal settings
model = "o3"

[mcp_servers.A]
command = "old-a"

[mcp_servers.A.env]
OLD = "1"

[mcp_servers.B]
command = "local-b"

[profiles.fast]
model = "o4-mini"
"""


def _blocks() -> dict[str, str]:
    return {
        "A": render_server_block("A", {"command": "new-a", "env": {"NEW": "2"}}),
        "C": render_server_block("C", {"url": "https://c"}),
    }


def test_toml_overwrite_keep_add():
    merged = merge_toml_text(EXISTING_TOML, _blocks())
    data = tomllib.loads(merged)
    assert data["model"] == "o3"
    assert data["profiles"] == {"fast": {"model": "o4-mini"}}
    assert data["mcp_servers"] == {
        "A": {"command": "new-a", "env": {"NEW": "2"}},
        "B": {"command": "local-b"},
        "C": {"url": "https://c"},
    }


def test_toml_untouched_lines_verbatim():
    merged = merge_toml_text(EXISTING_TOML, _blocks())
    assert merged.startswith('# personal settings\nmodel = "o3"\n')
    assert '[profiles.fast]\nmodel = "o4-mini"\n' in merged
    assert "OLD" not in merged


def test_toml_idempotent():
    once = merge_toml_text(EXISTING_TOML, _blocks())
    assert merge_toml_text(once, _blocks()) == once


def test_toml_empty_existing():
    merged = merge_toml_text("", _blocks())
    assert merged.startswith("[mcp_servers.A]\n")
    assert merged.endswith("\n")
    assert set(tomllib.loads(merged)["mcp_servers"]) == {"A", "C"}


def test_toml_no_blocks_leaves_text():
    assert merge_toml_text(EXISTING_TOML, {}) == EXISTING_TOML


def test_toml_header_inside_multiline_string_ignored():
    existing = (
        "[notes]\n"
        'text = """\n'
        "[mcp_servers.A]\n"
        '"""\n'
        "\n"
        "[mcp_servers.A]\n"
        'command = "old"\n'
    )
    merged = merge_toml_text(existing, {"A": render_server_block("A", {"command": "new"})})
    data = tomllib.loads(merged)
    assert data["notes"]["text"] == "[mcp_servers.A]\n"
    assert data["mcp_servers"]["A"] == {"command": "new"}


def test_toml_triple_quotes_in_comment_ignored():
    existing = (
        '# tip: wrap prompts in """ blocks\n'
        'model = "o3"\n'
        "\n"
        "[mcp_servers.fs]\n"
        'command = "old"\n'
    )
    merged = merge_toml_text(existing, {"fs": render_server_block("fs", {"command": "new"})})
    assert merged.count("[mcp_servers.fs]") == 1
    data = tomllib.loads(merged)
    assert data["model"] == "o3"
    assert data["mcp_servers"]["fs"] == {"command": "new"}


def test_toml_triple_quotes_in_single_line_string_ignored():
    existing = (
        "x = \"'''\"\n"
        "y = '\"\"\"'\n"
        "\n"
        "[mcp_servers.fs]\n"
        'command = "old"\n'
    )
    merged = merge_toml_text(existing, {"fs": render_server_block("fs", {"command": "new"})})
    data = tomllib.loads(merged)
    assert data["x"] == "'''"
    assert data["y"] == '"""'
    assert data["mcp_servers"]["fs"] == {"command": "new"}


def test_toml_multiline_string_closed_on_same_line():
    existing = (
        'prompt = """one line"""\n'
        "[mcp_servers.fs]\n"
        'command = "old"\n'
    )
    merged = merge_toml_text(existing, {"fs": render_server_block("fs", {"command": "new"})})
    assert tomllib.loads(merged)["mcp_servers"]["fs"] == {"command": "new"}
