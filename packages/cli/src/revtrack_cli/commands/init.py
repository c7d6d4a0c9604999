"""init command: interactive setup wizard.

Writes .revtrack.yml so every later command resolves the same data
directory, and optionally keeps that directory out of version control.
"""

from __future__ import annotations

from pathlib import Path

import click
import yaml
from rich.console import Console

console = Console()

_DEFAULT_DATA_DIR = ".review/data"


@click.command("init")
@click.pass_context
def init_cmd(ctx):
    """Set up revtrack for this project.

    Creates or updates .revtrack.yml in the current directory.
    """
    console.print("\n[bold cyan]revtrack init[/bold cyan]: project setup wizard\n")

    project_root = click.prompt("Project root", default=".")
    data_dir = click.prompt("Data directory (reviews/ and tasks/ go here)", default=_DEFAULT_DATA_DIR)

    config: dict = {"project_root": project_root}
    if data_dir != _DEFAULT_DATA_DIR:
        config["data_dir"] = data_dir

    config_path = Path((ctx.parent.params.get("config_path") if ctx.parent else None) or ".revtrack.yml")
    _write_config(config_path, config)
    console.print(f"[green]Wrote {config_path}[/green]")

    if click.confirm("\nAdd the data directory to .gitignore?", default=True):
        if _ensure_gitignored(Path(".gitignore"), data_dir):
            console.print("[green]Updated .gitignore[/green]")
        else:
            console.print("[dim].gitignore already lists the data directory[/dim]")

    console.print("\n[bold green]Setup complete![/bold green]")
    console.print("Save a review with: [bold]revtrack review save review.json[/bold]")


def _write_config(path: Path, config: dict) -> None:
    """Write or update the config file, preserving any existing keys."""
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    existing.update(config)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))


def _ensure_gitignored(path: Path, entry: str) -> bool:
    """Append ``entry`` to the ignore file unless already present. Returns True if written."""
    entry = entry.rstrip("/") + "/"
    lines = path.read_text().splitlines() if path.exists() else []
    if entry in lines or entry.rstrip("/") in lines:
        return False
    lines.append(entry)
    path.write_text("\n".join(lines) + "\n")
    return True
