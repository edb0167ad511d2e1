from __future__ import annotations

from typing import Iterable, List, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from rowcache.cache.freshness import CacheDecision, FreshnessAction
from rowcache.orchestrator import BootReport

_ACTION_STYLES = {
    FreshnessAction.CACHE_UP_TO_DATE: "green",
    FreshnessAction.CACHE_STALE: "yellow",
    FreshnessAction.NO_CACHING: "cyan",
    FreshnessAction.CACHE_UNAVAILABLE: "red",
}


def _action_cell(decision: CacheDecision) -> str:
    style = _ACTION_STYLES.get(decision.action, "white")
    return f"[{style}]{decision.action.value}[/{style}]"


def print_status(decisions: Sequence[tuple[str, CacheDecision]], console: Console | None = None) -> None:
    """
    Render freshness decisions as a rich table, one row per entity.
    """
    console = console or Console()
    if not decisions:
        console.print("[yellow]No entities to inspect.[/yellow]")
        return

    table = Table(title="rowcache status", box=box.ROUNDED, header_style="bold magenta")
    table.add_column("Entity", style="cyan", no_wrap=True)
    table.add_column("Action")
    table.add_column("Target")
    table.add_column("Materialize", justify="center")

    for identity, decision in decisions:
        table.add_row(
            identity,
            _action_cell(decision),
            decision.target,
            "yes" if decision.materialize else "no",
        )
    console.print(table)


def print_boot_reports(reports: Iterable[BootReport], console: Console | None = None) -> None:
    """
    Render boot outcomes: action taken, rows written, and timing.
    """
    console = console or Console()
    rows: List[BootReport] = list(reports)
    if not rows:
        console.print("[yellow]Nothing was booted.[/yellow]")
        return

    table = Table(title="rowcache warm", box=box.ROUNDED, header_style="bold magenta")
    table.add_column("Entity", style="cyan", no_wrap=True)
    table.add_column("Action")
    table.add_column("Database")
    table.add_column("Rows", justify="right")
    table.add_column("Duration (s)", justify="right")

    for report in rows:
        action = _action_cell(report.decision)
        if report.fell_back:
            action += " [red](fallback)[/red]"
        inserted = str(report.result.rows_inserted) if report.result is not None else "-"
        table.add_row(
            report.entity,
            action,
            report.connection.database_name,
            inserted,
            f"{report.duration_seconds:.3f}",
        )
    console.print(table)


def print_artifacts(paths: Sequence[str], console: Console | None = None) -> None:
    console = console or Console()
    if not paths:
        console.print("[yellow]No cache artifacts found.[/yellow]")
        return
    for path in paths:
        console.print(f"  {path}")


__all__ = ["print_artifacts", "print_boot_reports", "print_status"]
