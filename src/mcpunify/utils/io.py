"""File writing utilities that return WriteResult."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

from mcpunify.adapters.base import WriteResult
from mcpunify.exceptions import WriteError
from mcpunify.formats import dumps_json, read_text
from mcpunify.utils.backup import backup_file

if TYPE_CHECKING:
    from mcpunify.utils.logger import SyncLogger


def write_json(
    path: Path,
    data: Any,
    log: SyncLogger,
    backup_dir: Path | None = None,
    dry_run: bool = False,
) -> WriteResult:
    """Serialize *data* as JSON and write to *path*.

    Returns a :class:`WriteResult` describing the outcome.
    """
    content = dumps_json(data)

    # Validate round-trip
    try:
        json.loads(content)
    except json.JSONDecodeError as e:
        raise WriteError(path, f"JSON validation failed: {e}") from e

    return _write(path, content, log, backup_dir=backup_dir, dry_run=dry_run)


def write_text(
    path: Path,
    content: str,
    log: SyncLogger,
    backup_dir: Path | None = None,
    dry_run: bool = False,
) -> WriteResult:
    """Write plain text to *path*.

    Returns a :class:`WriteResult` describing the outcome.
    """
    return _write(path, content, log, backup_dir=backup_dir, dry_run=dry_run)


# ------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------

_BOM = b"\xef\xbb\xbf"


def _current(path: Path) -> str | None:
    """Existing text of *path*, or ``None`` when it must be (re)written.

    Missing and unreadable files qualify, and so does a leading
    byte-order mark.
    """
    if not path.is_file():
        return None
    try:
        with path.open("rb") as f:
            if f.read(len(_BOM)) == _BOM:
                return None
        return read_text(path)
    except (OSError, UnicodeDecodeError):
        return None


def _write(
    path: Path,
    content: str,
    log: SyncLogger,
    *,
    backup_dir: Path | None,
    dry_run: bool,
) -> WriteResult:
    nbytes = len(content.encode("utf-8"))
    existing = _current(path)

    if existing == content:
        msg = f"{path}: no changes"
        log.info(msg)
        return WriteResult(path=str(path), written=False, bytes_written=0, message=msg)

    if dry_run:
        if path.exists():
            msg = f"{path}: WOULD UPDATE ({nbytes} bytes)"
        else:
            msg = f"{path}: WOULD CREATE ({nbytes} bytes)"
        log.info(msg)
        return WriteResult(path=str(path), written=False, bytes_written=0, message=msg)

    try:
        if backup_dir is not None:
            backup_file(path, backup_dir, log)
        path.parent.mkdir(parents=True, exist_ok=True)
        _atomic_replace(path, content)
    except OSError as e:
        raise WriteError(path, str(e)) from e

    msg = f"Written: {path} ({nbytes} bytes)"
    log.info(msg)
    return WriteResult(path=str(path), written=True, bytes_written=nbytes, message=msg)


def _atomic_replace(path: Path, content: str) -> None:
    """Write *content* to a sibling temp file, then rename it over *path*.

    UTF-8 without a byte-order mark; newlines are written as given.
    """
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise
