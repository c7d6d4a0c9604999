"""stats command: task counts by status, severity and file."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from revtrack_cli.errors import reported_errors
from revtrack_core.render import SEVERITY_DISPLAY_ORDER, SEVERITY_LABELS
from revtrack_core.stats import task_stats

console = Console()

_SEV_STYLE = {
    "required": "red",
    "improvement": "yellow",
    "recommendation": "blue",
    "suggestion": "dim",
    "needs_confirmation": "magenta",
}


@click.command("stats")
@click.option("--top", default=10, show_default=True, help="Number of most flagged files to show.")
@click.pass_context
def stats_cmd(ctx, top: int):
    """Show task statistics.

    Counts are recomputed from the task files on every run: status totals,
    severity distribution, and the files with the most tasks, useful for
    spotting where remediation work piles up.
    """
    with reported_errors():
        stats = task_stats(ctx.obj["tasks"])

    if not stats.total:
        console.print("[yellow]No tasks saved yet.[/yellow]")
        return

    # --- Summary ---
    console.print("\n[bold]Task stats[/bold]")
    console.print(f"  Total tasks:  {stats.total}")
    console.print(f"  Open:         {stats.open}")

    # --- Status breakdown ---
    status_table = Table(title="Status", show_header=True)
    status_table.add_column("Status", style="bold")
    status_table.add_column("Count", justify="right")
    for name, count in (
        ("pending", stats.pending),
        ("in_progress", stats.in_progress),
        ("completed", stats.completed),
        ("cancelled", stats.cancelled),
    ):
        status_table.add_row(name, str(count))
    console.print(status_table)

    # --- Severity breakdown ---
    sev_table = Table(title="Severity Breakdown", show_header=True)
    sev_table.add_column("Severity", style="bold")
    sev_table.add_column("Count", justify="right")
    sev_table.add_column("% of total", justify="right")
    for sev in SEVERITY_DISPLAY_ORDER:
        count = stats.by_severity.get(sev.value, 0)
        pct = f"{count / stats.total * 100:.1f}%"
        style = _SEV_STYLE.get(sev.value, "white")
        sev_table.add_row(f"[{style}]{SEVERITY_LABELS[sev]}[/{style}]", str(count), pct)
    console.print(sev_table)

    # --- Most flagged files ---
    if stats.by_file:
        file_table = Table(title=f"Top {top} Most Flagged Files", show_header=True, min_width=40)
        file_table.add_column("File")
        file_table.add_column("Tasks", justify="right")
        for file_path, count in stats.by_file.most_common(top):
            file_table.add_row(escape(file_path), str(count))
        console.print(file_table)
