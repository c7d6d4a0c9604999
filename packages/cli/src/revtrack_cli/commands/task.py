"""task commands: create tasks and drive them through their lifecycle."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from revtrack_cli.errors import reported_errors
from revtrack_core import render
from revtrack_core.converter import tasks_from_review
from revtrack_core.lifecycle import complete_task, execute_task, set_task_status, verify_task
from revtrack_core.stats import task_stats
from revtrack_store.models import Severity, Task, TaskStatus

console = Console()

_STATUSES = [s.value for s in TaskStatus]
_SEVERITIES = [s.value for s in Severity]

_STATUS_STYLE = {
    "pending": "yellow",
    "in_progress": "cyan",
    "completed": "green",
    "cancelled": "dim",
}


@click.group("task")
def task_group():
    """Track remediation work item by item."""


@task_group.command("create")
@click.option("--title", required=True)
@click.option("--description", required=True)
@click.option("--severity", type=click.Choice(_SEVERITIES), default="improvement", show_default=True)
@click.option("--category", default=None, help="Free-form category, e.g. readability or security.")
@click.option("--file", "file_path", default=None, help="File the task is about.")
@click.option("--start-line", type=click.IntRange(min=1), default=None)
@click.option("--end-line", type=click.IntRange(min=1), default=None)
@click.option(
    "--patch-file",
    type=click.File("r", encoding="utf-8"),
    default=None,
    help="File holding a suggested diff.",
)
@click.pass_context
def create_cmd(ctx, title, description, severity, category, file_path, start_line, end_line, patch_file):
    """Create a pending task by hand."""
    if start_line is not None and end_line is not None and end_line < start_line:
        raise click.BadParameter("must not be before --start-line", param_hint="--end-line")

    task = Task(
        title=title,
        description=description,
        severity=Severity(severity),
        category=category,
        file=file_path,
        start_line=start_line,
        end_line=end_line,
        suggestion_patch_diff=patch_file.read() if patch_file else None,
    )
    with reported_errors():
        saved = ctx.obj["tasks"].create(task)

    console.print(f"[green]Created task {saved.id}[/green]")
    console.print(f"  Title:    {escape(saved.title)}")
    console.print(f"  Severity: {saved.severity.value}")


@task_group.command("from-review")
@click.argument("review_id")
@click.pass_context
def from_review_cmd(ctx, review_id: str):
    """Create one pending task per finding of a saved review.

    Running this twice on the same review creates duplicate tasks.
    """
    with reported_errors():
        created = tasks_from_review(ctx.obj["reviews"], ctx.obj["tasks"], review_id)

    if not created:
        console.print(f"[yellow]Review {review_id} has no findings; no tasks created.[/yellow]")
        return

    console.print(f"[green]Created {len(created)} task(s).[/green]")
    for t in created:
        where = f" @ {t.file}" if t.file else ""
        label = escape(f"[{t.severity.value}]")
        console.print(f"- {label} {t.id}: {escape(t.title)}{escape(where)}", highlight=False)


@task_group.command("list")
@click.option("--status", type=click.Choice(_STATUSES), default=None, help="Only tasks in this status.")
@click.option(
    "--limit",
    default=None,
    type=click.IntRange(1, 100),
    help="Maximum number of tasks to show. Defaults to list_limit from the config (20).",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "markdown"]),
    default="table",
    show_default=True,
)
@click.pass_context
def list_cmd(ctx, status: str | None, limit: int | None, output_format: str):
    """Show tasks, newest first."""
    limit = limit or int(ctx.obj["config"]["list_limit"])
    store = ctx.obj["tasks"]
    with reported_errors():
        tasks = store.list_tasks(status=TaskStatus(status) if status else None, limit=limit)
        stats = task_stats(store)

    if not tasks:
        if status:
            console.print(f"[yellow]No tasks with status '{status}'.[/yellow]")
        else:
            console.print("[yellow]No tasks saved yet.[/yellow]")
        return

    if output_format == "markdown":
        click.echo(render.task_index(tasks, stats, title=f"Tasks ({status or 'all'})"))
        return

    console.print(render.stats_line(stats), highlight=False)
    table = Table(title=f"Tasks ({status or 'all'})", show_header=True, header_style="bold cyan")
    table.add_column("ID", no_wrap=True)
    table.add_column("Status", width=11)
    table.add_column("Severity", width=18)
    table.add_column("Title", max_width=40)

    for t in tasks:
        style = _STATUS_STYLE.get(t.status.value, "white")
        table.add_row(
            t.id,
            f"[{style}]{t.status.value}[/{style}]",
            t.severity.value,
            escape(t.title),
        )
    console.print(table)


@task_group.command("show")
@click.argument("task_id")
@click.pass_context
def show_cmd(ctx, task_id: str):
    """Print one task as a markdown report."""
    with reported_errors():
        task = ctx.obj["tasks"].get(task_id)
    click.echo(render.task_to_markdown(task))


@task_group.command("execute")
@click.argument("task_id")
@click.pass_context
def execute_cmd(ctx, task_id: str):
    """Start work on a task and print what to do."""
    with reported_errors():
        result = execute_task(ctx.obj["tasks"], task_id)

    if result.already_done:
        console.print(
            f"[cyan]Task {task_id} is already completed[/cyan] (at {result.task.completed_at}).",
            highlight=False,
        )
        return
    click.echo(render.execution_guide(result.task))


@task_group.command("verify")
@click.argument("task_id")
@click.pass_context
def verify_cmd(ctx, task_id: str):
    """Print the verification checklist for a task in progress."""
    with reported_errors():
        task = verify_task(ctx.obj["tasks"], task_id)
    click.echo(render.verification_checklist(task))


@task_group.command("complete")
@click.argument("task_id")
@click.option("--note", "verification_note", default=None, help="How the change was verified.")
@click.pass_context
def complete_cmd(ctx, task_id: str, verification_note: str | None):
    """Mark a task in progress as completed."""
    store = ctx.obj["tasks"]
    with reported_errors():
        result = complete_task(store, task_id, verification_note=verification_note)
        stats = task_stats(store)

    if result.already_done:
        console.print(
            f"[cyan]Task {task_id} is already completed[/cyan] (at {result.task.completed_at}).",
            highlight=False,
        )
        return
    click.echo(render.completion_summary(result.task, stats))


@task_group.command("delete")
@click.argument("task_id")
@click.pass_context
def delete_cmd(ctx, task_id: str):
    """Delete a task."""
    store = ctx.obj["tasks"]
    with reported_errors():
        task = store.get(task_id)
        store.delete(task_id)
    console.print(f"[green]Deleted task {task_id}[/green]: {escape(task.title)}", highlight=False)


@task_group.command("set-status")
@click.argument("task_id")
@click.argument("status", type=click.Choice(_STATUSES))
@click.pass_context
def set_status_cmd(ctx, task_id: str, status: str):
    """Force a task's status, bypassing lifecycle checks (e.g. to revive a cancelled task)."""
    with reported_errors():
        task = set_task_status(ctx.obj["tasks"], task_id, TaskStatus(status))
    console.print(f"Task {task.id} is now [bold]{task.status.value}[/bold].", highlight=False)
