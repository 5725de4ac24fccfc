"""Rich-based logging utilities for mcpunify."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule


class SyncLogger:
    """Logger with rich console output and optional file flushing.

    Warnings and errors are counted so the final summary can report a
    best-effort run without re-scanning the buffer.
    """

    def __init__(self, dry_run: bool = False, quiet: bool = False) -> None:
        self.dry_run = dry_run
        self.quiet = quiet
        self.warnings = 0
        self.errors = 0
        self._console = Console(quiet=quiet)
        self._buffer: list[str] = []

    @property
    def lines(self) -> list[str]:
        return list(self._buffer)

    def _record(self, msg: str, level: str = "INFO") -> None:
        prefix = "[DRY-RUN] " if self.dry_run else ""
        timestamp = datetime.now().strftime("%H:%M:%S")
        self._buffer.append(f"[{timestamp}] [{level}] {prefix}{msg}")

    def info(self, msg: str) -> None:
        self._record(msg, "INFO")
        self._console.print(f"  [green]INFO[/green]  {escape(msg)}")

    def warn(self, msg: str) -> None:
        self.warnings += 1
        self._record(msg, "WARN")
        self._console.print(f"  [yellow]WARN[/yellow]  {escape(msg)}")

    def error(self, msg: str) -> None:
        self.errors += 1
        self._record(msg, "ERROR")
        self._console.print(f"  [red]ERROR[/red] {escape(msg)}")

    def section(self, title: str) -> None:
        self._record(f"=== {title} ===")
        self._console.print(Rule(escape(title)))

    def flush_to_file(self, log_dir: Path) -> Path | None:
        """Append buffered messages to a dated log file and return its path."""
        if not self._buffer:
            return None
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"sync-{datetime.now().strftime('%Y-%m-%d')}.log"
        with open(log_file, "a", encoding="utf-8") as f:
            f.write("\n".join(self._buffer) + "\n")
        return log_file


class SilentLogger(SyncLogger):
    """Suppresses console output; buffer is still preserved for flush_to_file."""

    def __init__(self, dry_run: bool = False) -> None:
        super().__init__(dry_run=dry_run, quiet=True)
