"""One-time migration from the two legacy server files to the unified file.

Legacy layout inside the team repository:

* ``mcp-config.json`` — ``{"mcpServers": {name: {command, args, env}}}``
* ``mcps.yaml`` — ``mcps: [{name, repository, buildCommands}]``

Migration only runs while the unified file does not exist; once written it
is never overwritten from legacy data.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mcpunify.config import DEFAULT_LEGACY_JSON, DEFAULT_LEGACY_YAML, DEFAULT_UNIFIED_FILE
from mcpunify.exceptions import (
    CapabilityUnavailableError,
    ConfigParseError,
    InvalidEntryError,
    WriteError,
)
from mcpunify.formats import Capabilities, load_json_document, load_yaml_document
from mcpunify.unified import (
    ServerEntry,
    UnifiedConfig,
    decode_entry,
    dump_unified,
    encode_entry,
)
from mcpunify.utils.io import write_text
from mcpunify.utils.logger import SilentLogger, SyncLogger


@dataclass
class MigrationResult:
    """Outcome of :func:`migrate_legacy`."""

    migrated: bool
    path: Path
    server_count: int = 0
    message: str = ""
    sources: list[str] = field(default_factory=list)
    entries: list[ServerEntry] = field(default_factory=list)


def _read_legacy_json(path: Path, log: SyncLogger) -> list[ServerEntry] | None:
    try:
        data = load_json_document(path)
    except ConfigParseError as exc:
        log.warn(f"Legacy JSON ignored: {exc}")
        return None

    servers = data.get("mcpServers", {})
    if not isinstance(servers, dict):
        log.warn(f"Legacy JSON ignored: 'mcpServers' in {path} is not a mapping")
        return None

    entries: list[ServerEntry] = []
    for name, cfg in servers.items():
        if not isinstance(cfg, dict):
            log.warn(f"Legacy JSON: server '{name}' is not a mapping, skipped")
            continue
        raw = {"name": name, **{k: cfg[k] for k in ("command", "url", "args", "env") if k in cfg}}
        try:
            entries.append(decode_entry(raw))
        except InvalidEntryError as exc:
            log.warn(f"Legacy JSON: {exc}")
    return entries


def _read_legacy_yaml(
    path: Path,
    capabilities: Capabilities,
    log: SyncLogger,
) -> list[dict[str, Any]] | None:
    try:
        data = load_yaml_document(path, capabilities)
    except (CapabilityUnavailableError, ConfigParseError) as exc:
        log.warn(f"Legacy YAML ignored: {exc}")
        return None

    items = data.get("mcps") or []
    if not isinstance(items, list):
        log.warn(f"Legacy YAML ignored: 'mcps' in {path} is not a list")
        return None
    return [item for item in items if isinstance(item, dict)]


def merge_legacy(
    json_entries: list[ServerEntry],
    yaml_items: list[dict[str, Any]],
    logger: SyncLogger | None = None,
) -> list[ServerEntry]:
    """Combine both legacy sources.

    JSON entries come first and own ``command``/``args``/``env``.  A YAML
    item with a matching name only contributes ``repository`` and
    ``buildCommands``; an unmatched one is appended as a build-only entry.
    When a name repeats inside the YAML list the first item wins.
    """
    log = logger or SilentLogger()
    merged: dict[str, ServerEntry] = {}
    for entry in json_entries:
        merged[entry.name] = entry

    claimed: set[str] = set()
    for item in yaml_items:
        raw = {k: item[k] for k in ("name", "repository", "buildCommands") if k in item}
        try:
            build = decode_entry(raw)
        except InvalidEntryError as exc:
            log.warn(f"Legacy YAML: {exc}")
            continue

        if build.name in claimed:
            log.warn(f"Legacy YAML: duplicate '{build.name}' ignored (first entry wins)")
            continue
        claimed.add(build.name)

        if build.name in merged:
            merged[build.name] = dataclasses.replace(
                merged[build.name],
                repository=build.repository,
                build_commands=build.build_commands,
            )
        else:
            merged[build.name] = build

    return list(merged.values())


def _yaml_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    text = str(value)
    escaped = (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def emit_unified_lines(entries: list[ServerEntry]) -> str:
    """Write the unified schema line by line, without a YAML emitter.

    Every string is double-quoted, so the output parses back to the same
    values as the structured emitter would produce.
    """
    if not entries:
        return "servers: []\n"

    lines = ["servers:"]
    for entry in entries:
        record = encode_entry(entry)
        first = True
        for key, value in record.items():
            lead = "  - " if first else "    "
            first = False
            if isinstance(value, list):
                if not value:
                    lines.append(f"{lead}{key}: []")
                    continue
                lines.append(f"{lead}{key}:")
                lines.extend(f"      - {_yaml_scalar(v)}" for v in value)
            elif isinstance(value, dict):
                if not value:
                    lines.append(f"{lead}{key}: {{}}")
                    continue
                lines.append(f"{lead}{key}:")
                lines.extend(
                    f"      {_yaml_scalar(k)}: {_yaml_scalar(v)}" for k, v in value.items()
                )
            else:
                lines.append(f"{lead}{key}: {_yaml_scalar(value)}")
    return "\n".join(lines) + "\n"


def render_unified(
    entries: list[ServerEntry],
    capabilities: Capabilities,
    logger: SyncLogger | None = None,
) -> str:
    """Serialize *entries* with PyYAML, or line by line if that is unavailable."""
    log = logger or SilentLogger()
    try:
        return dump_unified(UnifiedConfig(servers={e.name: e for e in entries}), capabilities)
    except (CapabilityUnavailableError, ValueError) as exc:
        log.warn(f"Structured YAML emission failed ({exc}); writing line by line")
        return emit_unified_lines(entries)


def migrate_legacy(
    repo_dir: Path,
    *,
    unified_file: str = DEFAULT_UNIFIED_FILE,
    legacy_json: str = DEFAULT_LEGACY_JSON,
    legacy_yaml: str = DEFAULT_LEGACY_YAML,
    capabilities: Capabilities | None = None,
    logger: SyncLogger | None = None,
    dry_run: bool = False,
) -> MigrationResult:
    """Create the unified file from legacy sources if it does not exist yet.

    Never touches the filesystem when the unified file already exists or no
    legacy source is present.
    """
    log = logger or SilentLogger()
    caps = capabilities or Capabilities.detect()
    unified_path = repo_dir / unified_file

    if unified_path.exists():
        return MigrationResult(
            migrated=False, path=unified_path, message=f"{unified_path.name} already exists"
        )

    json_path = repo_dir / legacy_json
    yaml_path = repo_dir / legacy_yaml
    if not json_path.is_file() and not yaml_path.is_file():
        return MigrationResult(
            migrated=False, path=unified_path, message="no legacy configuration found"
        )

    sources: list[str] = []
    json_entries: list[ServerEntry] = []
    yaml_items: list[dict[str, Any]] = []

    if json_path.is_file():
        read = _read_legacy_json(json_path, log)
        if read is not None:
            json_entries = read
            sources.append(json_path.name)
            log.info(f"Legacy JSON: {len(read)} servers from {json_path}")

    if yaml_path.is_file():
        items = _read_legacy_yaml(yaml_path, caps, log)
        if items is not None:
            yaml_items = items
            sources.append(yaml_path.name)
            log.info(f"Legacy YAML: {len(items)} build entries from {yaml_path}")

    if not sources:
        return MigrationResult(
            migrated=False, path=unified_path, message="legacy configuration could not be read"
        )

    entries = merge_legacy(json_entries, yaml_items, log)
    content = render_unified(entries, caps, log)

    try:
        wr = write_text(unified_path, content, log, dry_run=dry_run)
    except WriteError as exc:
        log.error(str(exc))
        return MigrationResult(
            migrated=False, path=unified_path, message=str(exc), sources=sources
        )

    return MigrationResult(
        migrated=wr.written,
        path=unified_path,
        server_count=len(entries),
        message=wr.message,
        sources=sources,
        entries=entries,
    )
