"""Projection of the unified server list into one host's native records."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from mcpunify.exceptions import InvalidEntryError
from mcpunify.targets import TargetDescriptor
from mcpunify.unified import ServerEntry
from mcpunify.utils.logger import SilentLogger, SyncLogger
from mcpunify.utils.paths import Environment, resolve_placeholders


@dataclass
class Fragment:
    """Records one target should receive, keyed by server name."""

    target: str
    records: dict[str, dict[str, Any]] = field(default_factory=dict)
    skipped: dict[str, str] = field(default_factory=dict)
    invalid: list[InvalidEntryError] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.records)


def build_record(
    entry: ServerEntry,
    descriptor: TargetDescriptor,
    env: Environment,
) -> dict[str, Any]:
    """Render a single entry in *descriptor*'s schema.

    URL entries are copied verbatim.  Command entries get ``~`` and
    ``{TOKEN}`` placeholders resolved in ``command`` and ``args`` only.
    """
    record: dict[str, Any]
    if entry.is_remote:
        record = {descriptor.url_key: entry.url}
        if descriptor.supports_headers and entry.headers:
            record["headers"] = dict(entry.headers)
    elif entry.command is not None:
        record = {"command": resolve_placeholders(entry.command, env)}
        if entry.args:
            record["args"] = [resolve_placeholders(a, env) for a in entry.args]
        if entry.env:
            record["env"] = dict(entry.env)
    else:
        raise InvalidEntryError(entry.name, "neither 'url' nor 'command' is set")

    for key in descriptor.optional_fields:
        if key in entry.options:
            value = entry.options[key]
            record[key] = list(value) if isinstance(value, list) else value

    return record


def project(
    entries: Iterable[ServerEntry],
    descriptor: TargetDescriptor,
    env: Environment | None = None,
    logger: SyncLogger | None = None,
) -> Fragment:
    """Filter *entries* for *descriptor* and render the survivors.

    Disabled entries and entries restricted to other agents are skipped
    quietly; entries with no usable invocation are skipped with a warning.
    """
    log = logger or SilentLogger()
    env = env or Environment.detect()
    fragment = Fragment(target=descriptor.agent)

    for entry in entries:
        if not entry.enabled:
            fragment.skipped[entry.name] = "disabled"
            continue
        if not entry.eligible_for(descriptor.agent):
            fragment.skipped[entry.name] = f"restricted to {', '.join(entry.agents)}"
            continue
        try:
            fragment.records[entry.name] = build_record(entry, descriptor, env)
        except InvalidEntryError as exc:
            log.warn(f"{descriptor.label}: skipping {exc}")
            fragment.skipped[entry.name] = exc.reason
            fragment.invalid.append(exc)

    return fragment
