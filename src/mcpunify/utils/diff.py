"""Server diff reporting between a target's managed section and a fragment."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mcpunify.utils.logger import SyncLogger


@dataclass
class ServerDiff:
    """Which names a merge adds, overwrites and leaves alone."""

    added: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    preserved: list[str] = field(default_factory=list)


def diff_servers(existing: Iterable[str], incoming: Iterable[str]) -> ServerDiff:
    existing_names = list(existing)
    incoming_names = list(incoming)
    incoming_set = set(incoming_names)
    existing_set = set(existing_names)
    return ServerDiff(
        added=[n for n in incoming_names if n not in existing_set],
        updated=[n for n in incoming_names if n in existing_set],
        preserved=[n for n in existing_names if n not in incoming_set],
    )


def show_server_diff(target_name: str, diff: ServerDiff, log: SyncLogger) -> None:
    """Log which servers are added, overwritten or preserved for a target."""
    if diff.added:
        log.info(f"{target_name}: +{len(diff.added)} servers ({', '.join(diff.added)})")
    if diff.updated:
        log.info(f"{target_name}: ~{len(diff.updated)} servers ({', '.join(diff.updated)})")
    if diff.preserved:
        log.info(
            f"{target_name}: {len(diff.preserved)} local servers kept "
            f"({', '.join(diff.preserved)})"
        )
    if not (diff.added or diff.updated):
        log.info(f"{target_name}: nothing to write")
