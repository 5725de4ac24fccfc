"""File backup utilities."""

from __future__ import annotations

import shutil
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mcpunify.utils.logger import SyncLogger


def backup_file(path: Path, backup_dir: Path, log: SyncLogger) -> Path | None:
    """Create a timestamped backup of *path* inside *backup_dir*.

    Backups from different hosts can share a file name (``config.json``), so
    the parent directory name is folded into the backup name.  Returns the
    backup path, or ``None`` if *path* does not exist yet.
    """
    if not path.is_file():
        return None

    backup_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    owner = path.parent.name.lstrip(".") or "root"
    backup_path = backup_dir / f"{owner}-{path.name}.{timestamp}.bak"
    shutil.copy2(path, backup_path)
    log.info(f"Backup: {path} -> {backup_path}")
    return backup_path
