"""Merge policy: fragment wins per name, nothing else in the document moves.

Both functions are pure.  Reading and writing the host file is the
adapters' job.
"""

from __future__ import annotations

import copy
from typing import Any

from mcpunify.utils.toml import remove_server_tables


def merge_json_document(
    existing: dict[str, Any],
    records: dict[str, dict[str, Any]],
    managed_key: str = "mcpServers",
) -> dict[str, Any]:
    """Overwrite or insert each of *records* in ``existing[managed_key]``.

    Names already present but absent from *records* stay as they are, as do
    all other top-level keys.  A managed value that is not a mapping is
    replaced by a fresh one.  *existing* is not modified.
    """
    merged = copy.deepcopy(existing)
    section = merged.get(managed_key)
    if not isinstance(section, dict):
        section = {}

    for name, record in records.items():
        section[name] = copy.deepcopy(record)

    merged[managed_key] = section
    return merged


def merge_toml_text(existing: str, blocks: dict[str, str]) -> str:
    """Replace the server tables named in *blocks* and append the new ones.

    Every line outside the replaced tables is kept verbatim.  The new blocks
    go at the end, one blank line apart, so merging the same blocks into the
    output again gives identical text.
    """
    if not blocks:
        return existing

    kept = remove_server_tables(existing, set(blocks)).rstrip()
    body = "\n\n".join(block.rstrip("\n") for block in blocks.values()) + "\n"
    return kept + "\n\n" + body if kept else body
