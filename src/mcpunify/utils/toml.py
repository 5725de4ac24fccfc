"""TOML text helpers for the Codex target.

Server tables are rendered by hand and located in existing documents by a
line scan over table headers, so everything outside ``[mcp_servers.<name>]``
tables is carried through byte for byte.  :mod:`tomllib` is only used to
check the final text parses.
"""

from __future__ import annotations

import re
import tomllib
from typing import Any

from mcpunify.exceptions import ConfigParseError

MANAGED_TABLE = "mcp_servers"

_BARE_KEY = re.compile(r"^[A-Za-z0-9_-]+$")
_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
}


# ===================================================================
# Rendering
# ===================================================================


def toml_string(val: str) -> str:
    """Render *val* as a TOML basic string."""
    out = []
    for ch in val:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\u{ord(ch):04X}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def toml_key(key: str) -> str:
    """Render *key* bare when allowed, quoted otherwise."""
    return key if _BARE_KEY.match(key) else toml_string(key)


def toml_value(val: Any) -> str:
    """Serialize a single Python value to a TOML literal."""
    if isinstance(val, bool):
        return "true" if val else "false"
    if isinstance(val, (int, float)):
        return str(val)
    if isinstance(val, str):
        return toml_string(val)
    if isinstance(val, (list, tuple)):
        items = ", ".join(toml_value(v) for v in val)
        return f"[{items}]"
    if isinstance(val, dict):
        pairs = ", ".join(f"{toml_key(str(k))} = {toml_value(v)}" for k, v in val.items())
        return "{ " + pairs + " }" if pairs else "{}"
    raise TypeError(f"Cannot render {type(val).__name__} as TOML")


def render_server_block(name: str, record: dict[str, Any]) -> str:
    """Render one server record as a ``[mcp_servers.<name>]`` table.

    Scalar and array keys come first; mapping values (``env``) follow as
    ``[mcp_servers.<name>.<key>]`` sub-tables.  A key written after a
    sub-table header would belong to the sub-table when re-parsed.
    """
    table = f"{MANAGED_TABLE}.{toml_key(name)}"
    lines = [f"[{table}]"]
    nested: list[tuple[str, dict[str, Any]]] = []

    for key, val in record.items():
        if isinstance(val, dict):
            nested.append((key, val))
            continue
        lines.append(f"{toml_key(key)} = {toml_value(val)}")

    for key, mapping in nested:
        lines.append("")
        lines.append(f"[{table}.{toml_key(key)}]")
        for sub_key, sub_val in mapping.items():
            lines.append(f"{toml_key(str(sub_key))} = {toml_value(sub_val)}")

    return "\n".join(lines) + "\n"


# ===================================================================
# Scanning
# ===================================================================


def split_table_key(key: str) -> list[str] | None:
    """Split a dotted table key into its parts.

    Returns ``None`` when *key* is not a valid TOML key (e.g. the inside of a
    multi-line array row that happens to start with ``[``).
    """
    parts: list[str] = []
    i = 0
    n = len(key)
    while True:
        while i < n and key[i] in " \t":
            i += 1
        if i >= n:
            return None

        if key[i] in "\"'":
            quote = key[i]
            i += 1
            buf: list[str] = []
            while i < n and key[i] != quote:
                if quote == '"' and key[i] == "\\" and i + 1 < n:
                    buf.append(_unescape(key[i + 1]))
                    i += 2
                    continue
                buf.append(key[i])
                i += 1
            if i >= n:
                return None
            i += 1
            parts.append("".join(buf))
        else:
            start = i
            while i < n and key[i] not in ". \t":
                i += 1
            bare = key[start:i]
            if not _BARE_KEY.match(bare):
                return None
            parts.append(bare)

        while i < n and key[i] in " \t":
            i += 1
        if i >= n:
            return parts
        if key[i] != ".":
            return None
        i += 1


def _unescape(ch: str) -> str:
    for raw, escaped in _ESCAPES.items():
        if escaped[1] == ch:
            return raw
    return ch


def _parse_header(line: str) -> list[str] | None:
    """Return the key parts of a ``[table]`` or ``[[array]]`` header line.

    Brackets inside quoted key parts do not end the header; anything after
    the closing bracket other than a comment disqualifies the line.
    """
    text = line.strip()
    if not text.startswith("["):
        return None
    double = text.startswith("[[")
    i = start = 2 if double else 1
    n = len(text)
    quote: str | None = None
    while i < n:
        ch = text[i]
        if quote is not None:
            if quote == '"' and ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in "\"'":
            quote = ch
        elif ch == "]":
            break
        i += 1
    else:
        return None

    key = text[start:i]
    i += 1
    if double:
        if i >= n or text[i] != "]":
            return None
        i += 1
    rest = text[i:].strip()
    if rest and not rest.startswith("#"):
        return None
    return split_table_key(key)


def _find_closing(line: str, i: int, delim: str) -> int:
    n = len(line)
    while i < n:
        if delim == '"""' and line[i] == "\\":
            i += 2
            continue
        if line.startswith(delim, i):
            return i
        i += 1
    return -1


def _open_multiline(line: str, state: str | None) -> str | None:
    """Return the multi-line string delimiter still open after *line*.

    *state* is the delimiter open before the line.  Comments and
    single-line strings are skipped, so quotes inside them never count.
    """
    i = 0
    n = len(line)
    while i < n:
        if state is not None:
            end = _find_closing(line, i, state)
            if end < 0:
                return state
            i = end + 3
            # Up to two quotes may directly precede the closing delimiter.
            extra = 0
            while i < n and extra < 2 and line[i] == state[0]:
                i += 1
                extra += 1
            state = None
            continue

        ch = line[i]
        if ch == "#":
            break
        if line.startswith('"""', i) or line.startswith("'''", i):
            state = line[i : i + 3]
            i += 3
            continue
        if ch in "\"'":
            i += 1
            while i < n and line[i] != ch and line[i] not in "\r\n":
                if ch == '"' and line[i] == "\\":
                    i += 1
                i += 1
        i += 1
    return state


def _iter_lines(text: str):
    """Yield ``(line, table_parts)`` where *table_parts* is set on header lines."""
    in_multiline: str | None = None
    for line in text.splitlines(keepends=True):
        parts = _parse_header(line) if in_multiline is None else None
        in_multiline = _open_multiline(line, in_multiline)
        yield line, parts


def managed_server_names(text: str) -> list[str]:
    """Names of all ``[mcp_servers.<name>]`` tables in *text*, in order."""
    names: list[str] = []
    for _line, parts in _iter_lines(text):
        if parts and len(parts) >= 2 and parts[0] == MANAGED_TABLE and parts[1] not in names:
            names.append(parts[1])
    return names


def remove_server_tables(text: str, names: set[str]) -> str:
    """Drop the tables (and sub-tables) of *names* from *text*.

    A table runs from its header to the next header of any kind.  Lines
    outside those tables are returned verbatim.
    """
    kept: list[str] = []
    skipping = False
    for line, parts in _iter_lines(text):
        if parts is not None:
            skipping = len(parts) >= 2 and parts[0] == MANAGED_TABLE and parts[1] in names
        if not skipping:
            kept.append(line)
    return "".join(kept)


def parse_toml(text: str, source: object = "<toml>") -> dict[str, Any]:
    """Parse *text* with :mod:`tomllib`, raising :class:`ConfigParseError`."""
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(source, f"invalid TOML: {e}") from e
