"""review commands: save, list, show and export reviews."""

from __future__ import annotations

import json

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from revtrack_cli.errors import reported_errors
from revtrack_core.render import review_index_line, review_to_markdown
from revtrack_store.models import review_from_dict, review_to_dict

console = Console()

_RISK_STYLE = {"low": "green", "medium": "yellow", "high": "red"}


@click.group("review")
def review_group():
    """Save and inspect code reviews."""


@review_group.command("save")
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.pass_context
def save_cmd(ctx, source):
    """Save a review from a JSON file (or stdin) and print its id.

    \b
    Expected shape:
      {"target": {"base": "origin/main", "head": "HEAD"},
       "summary": "...", "risk": "low|medium|high",
       "criteria_feedback": {"readability": {"label": "...", "improve": ["..."]}},
       "findings": [{"severity": "required", "title": "...", "detail": "...", ...}]}
    """
    try:
        payload = json.load(source)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON ({e})", param_hint="SOURCE")
    try:
        review = review_from_dict(payload)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="SOURCE")

    with reported_errors():
        saved = ctx.obj["reviews"].save(review)

    console.print(f"[green]Saved review {saved.id}[/green]")
    console.print(f"  Target:   {escape(saved.target.base)}...{escape(saved.target.head)}")
    console.print(f"  Findings: {len(saved.findings)}")


@review_group.command("list")
@click.option(
    "--limit",
    default=None,
    type=click.IntRange(1, 100),
    help="Maximum number of reviews to show. Defaults to list_limit from the config (20).",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "markdown"]),
    default="table",
    show_default=True,
)
@click.pass_context
def list_cmd(ctx, limit: int | None, output_format: str):
    """Show saved reviews, newest first."""
    limit = limit or int(ctx.obj["config"]["list_limit"])
    with reported_errors():
        reviews = ctx.obj["reviews"].list_reviews(limit=limit)

    if not reviews:
        console.print("[yellow]No reviews saved yet.[/yellow]")
        return

    if output_format == "markdown":
        click.echo(f"{len(reviews)} review(s), newest first\n")
        click.echo("\n".join(review_index_line(r) for r in reviews))
        return

    table = Table(title=f"Reviews (newest first, {len(reviews)})", show_header=True, header_style="bold cyan")
    table.add_column("ID", no_wrap=True)
    table.add_column("Target", max_width=30)
    table.add_column("Findings", justify="right", width=8)
    table.add_column("Risk", width=6)

    for r in reviews:
        risk = r.risk.value if r.risk is not None else ""
        style = _RISK_STYLE.get(risk, "white")
        table.add_row(
            r.id,
            escape(f"{r.target.base}...{r.target.head}"),
            str(len(r.findings)),
            f"[{style}]{risk}[/{style}]" if risk else "-",
        )

    console.print(table)


@review_group.command("show")
@click.argument("review_id", required=False)
@click.option("--latest", is_flag=True, help="Show the most recently saved review.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["markdown", "json"]),
    default="markdown",
    show_default=True,
)
@click.pass_context
def show_cmd(ctx, review_id: str | None, latest: bool, output_format: str):
    """Print one review as a markdown report or as its stored JSON."""
    if bool(review_id) == latest:
        raise click.UsageError("Pass either a REVIEW_ID or --latest.")

    with reported_errors():
        if latest:
            review = ctx.obj["reviews"].latest()
            if review is None:
                console.print("[yellow]No reviews saved yet.[/yellow]")
                return
        else:
            review = ctx.obj["reviews"].get(review_id)

    if output_format == "json":
        click.echo(json.dumps(review_to_dict(review), indent=2, ensure_ascii=False))
    else:
        click.echo(review_to_markdown(review))


@review_group.command("export")
@click.argument("review_id")
@click.pass_context
def export_cmd(ctx, review_id: str):
    """Write the markdown report next to the review record as <id>.md."""
    store = ctx.obj["reviews"]
    with reported_errors():
        review = store.get(review_id)
        path = store.save_markdown(review_id, review_to_markdown(review))
    console.print(f"[green]Exported {review_id}[/green] to {escape(str(path))}")
