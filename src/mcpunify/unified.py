"""Unified server list: decoding, validation and serialization.

The unified file is the team-wide source of truth::

    servers:
      - name: fs
        command: fsd
        args: ["~/bin/run"]
        agents: [cursor, codex]
      - name: web
        url: https://example.com/mcp

Raw records are decoded once into :class:`ServerEntry` values; everything
downstream works on those.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mcpunify.exceptions import ConfigParseError, InvalidEntryError
from mcpunify.formats import Capabilities, dumps_yaml, load_document
from mcpunify.utils.dedup import dedup_entries
from mcpunify.utils.logger import SilentLogger, SyncLogger

TIMEOUT_FIELDS = ("startup_timeout_sec", "tool_timeout_sec")
TOOL_LIST_FIELDS = ("enabled_tools", "disabled_tools")
OPTIONAL_FIELDS = TIMEOUT_FIELDS + TOOL_LIST_FIELDS

_FALSE_STRINGS = {"false", "no", "off", "0"}


@dataclass(frozen=True)
class ServerEntry:
    """One capability server definition."""

    name: str
    enabled: bool = True
    agents: tuple[str, ...] = ()
    url: str | None = None
    command: str | None = None
    args: tuple[str, ...] = ()
    env: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    repository: str | None = None
    build_commands: tuple[str, ...] = ()
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def is_remote(self) -> bool:
        """True for entries reached over HTTP rather than spawned locally."""
        return self.url is not None

    @property
    def is_build_only(self) -> bool:
        """True for entries that only describe how to clone and build a server."""
        return self.url is None and self.command is None

    def eligible_for(self, agent: str) -> bool:
        """An empty ``agents`` list means every target may load this server."""
        return not self.agents or agent.lower() in self.agents


@dataclass(frozen=True)
class UnifiedConfig:
    """Ordered, name-keyed collection of :class:`ServerEntry`."""

    servers: dict[str, ServerEntry] = field(default_factory=dict)
    invalid: tuple[InvalidEntryError, ...] = ()
    path: Path | None = None

    def __len__(self) -> int:
        return len(self.servers)

    def __iter__(self) -> Iterator[ServerEntry]:
        return iter(self.servers.values())

    def __contains__(self, name: object) -> bool:
        return name in self.servers


# ===================================================================
# Decoding
# ===================================================================


def _as_str_tuple(value: Any, field_name: str, name: str) -> tuple[str, ...]:
    # A one-item list may arrive collapsed to a scalar.
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value if v is not None)
    if isinstance(value, (str, int, float, bool)):
        return (str(value),)
    raise InvalidEntryError(name, f"'{field_name}' must be a list of strings")


def _as_str_map(value: Any, field_name: str, name: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidEntryError(name, f"'{field_name}' must be a mapping")
    return {str(k): "" if v is None else str(v) for k, v in value.items()}


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _decode_options(raw: dict[str, Any], name: str) -> dict[str, Any]:
    options: dict[str, Any] = {}
    for key in TIMEOUT_FIELDS:
        value = raw.get(key)
        if value is None:
            continue
        if isinstance(value, bool):
            raise InvalidEntryError(name, f"'{key}' must be a number")
        if isinstance(value, str):
            try:
                value = float(value) if "." in value else int(value)
            except ValueError:
                raise InvalidEntryError(name, f"'{key}' must be a number") from None
        if not isinstance(value, (int, float)):
            raise InvalidEntryError(name, f"'{key}' must be a number")
        options[key] = value
    for key in TOOL_LIST_FIELDS:
        if raw.get(key) is not None:
            options[key] = list(_as_str_tuple(raw[key], key, name))
    return options


def decode_entry(raw: Any) -> ServerEntry:
    """Decode one raw record, raising :class:`InvalidEntryError` if unusable."""
    if not isinstance(raw, dict):
        raise InvalidEntryError(None, f"entry must be a mapping, got {type(raw).__name__}")

    name = _as_text(raw.get("name"))
    if name is None:
        raise InvalidEntryError(None, "missing required field 'name'")

    url = _as_text(raw.get("url"))
    command = _as_text(raw.get("command"))
    repository = _as_text(raw.get("repository"))
    build_commands = _as_str_tuple(raw.get("buildCommands"), "buildCommands", name)

    if url and command:
        raise InvalidEntryError(name, "both 'url' and 'command' are set")
    if not url and not command and not (repository or build_commands):
        raise InvalidEntryError(name, "neither 'url' nor 'command' is set")

    agents = tuple(
        a.strip().lower() for a in _as_str_tuple(raw.get("agents"), "agents", name) if a.strip()
    )

    enabled = raw.get("enabled")
    return ServerEntry(
        name=name,
        enabled=True if enabled is None else _as_bool(enabled),
        agents=agents,
        url=url,
        command=command,
        args=_as_str_tuple(raw.get("args"), "args", name),
        env=_as_str_map(raw.get("env"), "env", name),
        headers=_as_str_map(raw.get("headers"), "headers", name),
        repository=repository,
        build_commands=build_commands,
        options=_decode_options(raw, name),
    )


def decode_unified(
    data: dict[str, Any],
    source: object = "<unified>",
    logger: SyncLogger | None = None,
) -> UnifiedConfig:
    """Decode a parsed unified document.

    Invalid entries are dropped and collected in ``UnifiedConfig.invalid``.
    ``servers`` may also be a mapping of name -> record.
    """
    log = logger or SilentLogger()
    raw_servers = data.get("servers")

    if raw_servers is None:
        records: list[Any] = []
    elif isinstance(raw_servers, list):
        records = raw_servers
    elif isinstance(raw_servers, dict):
        records = [
            {"name": key, **value} if isinstance(value, dict) else value
            for key, value in raw_servers.items()
        ]
    else:
        raise ConfigParseError(
            source, f"'servers' must be a list, got {type(raw_servers).__name__}"
        )

    entries: list[ServerEntry] = []
    invalid: list[InvalidEntryError] = []
    for raw in records:
        try:
            entries.append(decode_entry(raw))
        except InvalidEntryError as exc:
            log.warn(f"Skipping invalid entry: {exc}")
            invalid.append(exc)

    path = source if isinstance(source, Path) else None
    return UnifiedConfig(servers=dedup_entries(entries, log), invalid=tuple(invalid), path=path)


def load_unified(
    path: Path,
    capabilities: Capabilities | None = None,
    logger: SyncLogger | None = None,
) -> UnifiedConfig:
    """Load the unified file at *path*.

    A missing file is an empty config.  Parse failures raise
    :class:`ConfigParseError`; a YAML file without YAML support raises
    :class:`CapabilityUnavailableError`.
    """
    if not path.is_file():
        return UnifiedConfig(path=path)

    data = load_document(path, capabilities or Capabilities.detect())
    return decode_unified(data, source=path, logger=logger)


# ===================================================================
# Encoding
# ===================================================================


def encode_entry(entry: ServerEntry) -> dict[str, Any]:
    """Render *entry* back into the unified file schema."""
    out: dict[str, Any] = {"name": entry.name}
    if not entry.enabled:
        out["enabled"] = False
    if entry.agents:
        out["agents"] = list(entry.agents)
    if entry.url is not None:
        out["url"] = entry.url
    if entry.command is not None:
        out["command"] = entry.command
    if entry.args:
        out["args"] = list(entry.args)
    if entry.env:
        out["env"] = dict(entry.env)
    if entry.headers:
        out["headers"] = dict(entry.headers)
    if entry.repository is not None:
        out["repository"] = entry.repository
    if entry.build_commands:
        out["buildCommands"] = list(entry.build_commands)
    out.update(entry.options)
    return out


def encode_unified(entries: list[ServerEntry]) -> dict[str, Any]:
    return {"servers": [encode_entry(e) for e in entries]}


def dump_unified(config: UnifiedConfig, capabilities: Capabilities | None = None) -> str:
    """Serialize *config* back to the ``servers:`` YAML schema."""
    return dumps_yaml(encode_unified(list(config)), capabilities or Capabilities.detect())
