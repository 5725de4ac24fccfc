"""Rich output helpers for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from mcpunify.adapters.base import TargetAdapter
    from mcpunify.config import McpUnifyConfig
    from mcpunify.migrate import MigrationResult
    from mcpunify.sync import SyncResult
    from mcpunify.unified import UnifiedConfig
    from mcpunify.validate import ValidationReport


def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'s' if n != 1 else ''}"


def print_sync_summary(result: SyncResult, console: Console | None = None) -> None:
    """Print a coloured summary of sync results."""
    con = console or Console()

    total_files = 0
    total_errors = 0

    for tr in result.target_results.values():
        total_files += sum(1 for w in tr.writes if w.written)
        total_errors += len(tr.errors)

    header = f"Sync complete: {_plural(len(result.target_results), 'target')}"
    header += f", {_plural(total_files, 'file')} written"
    if total_errors:
        header += f", [red]{_plural(total_errors, 'error')}[/red]"
    else:
        header += ", 0 errors"

    con.print()
    con.print(header)
    if result.migration is not None and result.migration.migrated:
        con.print(f"  migrated legacy config into {escape(str(result.migration.path))}")
    if result.invalid_count:
        con.print(f"  [yellow]{_plural(result.invalid_count, 'invalid entry')} skipped[/yellow]")

    for name, tr in result.target_results.items():
        n_written = sum(1 for w in tr.writes if w.written)
        if tr.skipped:
            mark = "[yellow]⊘[/yellow]"
            detail = "skipped"
        elif tr.success:
            mark = "[green]✓[/green]"
            detail = f"{_plural(tr.server_count, 'server')}, {_plural(n_written, 'file')} written"
        else:
            mark = "[red]✗[/red]"
            detail = escape("; ".join(tr.errors)) if tr.errors else "failed"

        con.print(f"  {name:<16} {mark}  {detail}")

    if result.dry_run:
        con.print()
        con.print("[yellow]DRY RUN — no files were written[/yellow]")


def print_migration_result(result: MigrationResult, console: Console | None = None) -> None:
    con = console or Console()
    con.print()
    if result.migrated:
        con.print(
            f"[green]Migrated[/green] {_plural(result.server_count, 'server')} "
            f"from {', '.join(result.sources)} into {escape(str(result.path))}"
        )
    else:
        con.print(f"No migration: {escape(result.message)}")


def print_validation_report(
    report: ValidationReport,
    verbose: bool = False,
    console: Console | None = None,
) -> None:
    """Print a coloured validation report."""
    con = console or Console()

    passed = sum(1 for r in report.results if r.passed)
    failed = sum(1 for r in report.results if not r.passed)

    con.print()

    for r in report.results:
        if r.passed and not verbose:
            continue
        mark = "[green]✓[/green]" if r.passed else "[red]✗[/red]"
        con.print(f"  {mark} {escape(r.name)}: {escape(r.message)}")

    con.print()
    parts = []
    if passed:
        parts.append(f"[green]{passed} passed[/green]")
    if failed:
        parts.append(f"[red]{failed} failed[/red]")
    con.print(f"Validation: {', '.join(parts) or 'no checks'}")


def print_server_table(
    unified: UnifiedConfig,
    targets: dict[str, TargetAdapter],
    console: Console | None = None,
) -> None:
    """List unified servers with their invocation and eligible targets."""
    con = console or Console()

    table = Table(show_header=True, show_edge=False, pad_edge=False, box=None)
    table.add_column("Name", style="cyan", min_width=14)
    table.add_column("Invocation")
    table.add_column("Targets")

    for entry in unified:
        if entry.is_remote:
            invocation = entry.url
        elif entry.command is not None:
            invocation = " ".join([entry.command, *entry.args])
        else:
            invocation = f"(build only) {entry.repository or ''}".rstrip()

        if not entry.enabled:
            eligible = "[dim]disabled[/dim]"
        else:
            names = [
                n for n, t in targets.items()
                if entry.eligible_for(t.descriptor.agent) and not entry.is_build_only
            ]
            eligible = ", ".join(names) or "[dim]none[/dim]"

        table.add_row(escape(entry.name), escape(invocation), eligible)

    con.print()
    con.print(table)
    con.print()
    con.print(f"Total: {_plural(len(unified), 'server')}")


def print_status(
    config: McpUnifyConfig,
    unified: UnifiedConfig,
    targets: dict[str, TargetAdapter],
    console: Console | None = None,
) -> None:
    """Print current sync status: source files and per-target state."""
    from mcpunify.config import resolve_path

    con = console or Console()
    repo = config.repo_dir

    # --- Source ---
    con.print()
    con.print(f"[bold]Team repository:[/bold] {escape(str(repo))}")
    _print_path_status(con, "Unified", config.unified_path, extra_count=len(unified))
    _print_path_status(con, "Legacy JSON", resolve_path(config.source.legacy_json, repo))
    _print_path_status(con, "Legacy YAML", resolve_path(config.source.legacy_yaml, repo))

    # --- Targets ---
    con.print()
    con.print("[bold]Targets:[/bold]")

    table = Table(show_header=True, show_edge=False, pad_edge=False, box=None)
    table.add_column("Name", style="cyan", min_width=14)
    table.add_column("Status", min_width=10)
    table.add_column("Details")

    for name, target in targets.items():
        results = target.validate(unified)
        all_pass = all(r.passed for r in results)
        if not results:
            mark = "[yellow]⚠[/yellow]"
            detail = "no validation checks"
        elif all_pass:
            mark = "[green]✓[/green]"
            detail = escape(results[0].message)
        else:
            mark = "[red]✗[/red]"
            detail = escape("; ".join(r.message for r in results if not r.passed))

        table.add_row(name, mark, detail)

    con.print(table)


def _print_path_status(
    con: Console,
    label: str,
    path: Path,
    *,
    extra_count: int | None = None,
) -> None:
    """Print a source path with exists/missing indicator."""
    if path.is_file():
        suffix = f" ({extra_count} servers)" if extra_count is not None else ""
        con.print(f"  {label + ':':<14} {escape(str(path))} [green](exists{suffix})[/green]")
    else:
        con.print(f"  {label + ':':<14} {escape(str(path))} [yellow](missing)[/yellow]")
