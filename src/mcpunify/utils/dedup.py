"""Duplicate server-name handling for the unified list."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mcpunify.unified import ServerEntry
    from mcpunify.utils.logger import SyncLogger


def dedup_entries(
    entries: Iterable[ServerEntry],
    log: SyncLogger,
) -> dict[str, ServerEntry]:
    """Key *entries* by name; a repeated name replaces the earlier entry.

    The replaced entry keeps its position in the ordering.  Names that differ
    only by case are kept apart but reported, because some hosts compare
    server keys case-insensitively.
    """
    result: dict[str, ServerEntry] = {}
    seen_lower: dict[str, str] = {}

    for entry in entries:
        if entry.name in result:
            log.warn(f"Duplicate server '{entry.name}': later definition wins")
        result[entry.name] = entry

        lower = entry.name.lower()
        prev = seen_lower.get(lower)
        if prev is not None and prev != entry.name:
            log.warn(f"Servers '{prev}' and '{entry.name}' differ only by case")
        seen_lower.setdefault(lower, entry.name)

    return result
