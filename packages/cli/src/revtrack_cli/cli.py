"""CLI entry point for revtrack.

Commands:
  review   - save, list, show and export code reviews
  task     - create tasks and drive them through their lifecycle
  stats    - task counts by status, severity and file
  init     - interactive setup wizard writing .revtrack.yml
"""

from __future__ import annotations

import importlib.metadata
from pathlib import Path

import click

from revtrack_cli.commands.init import init_cmd
from revtrack_cli.commands.review import review_group
from revtrack_cli.commands.stats import stats_cmd
from revtrack_cli.commands.task import task_group


def _build_stores(data_dir: Path):
    """Instantiate the review and task stores rooted at ``data_dir``.

    This factory lives in cli.py so neither revtrack_core nor revtrack_store
    know about the CLI config format.
    """
    from revtrack_store.reviews import ReviewStore
    from revtrack_store.tasks import TaskStore

    return ReviewStore(data_dir), TaskStore(data_dir)


@click.group()
@click.version_option(
    version=importlib.metadata.version("revtrack"),
    prog_name="revtrack",
)
@click.option(
    "--config",
    "config_path",
    default=".revtrack.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="REVTRACK_CONFIG",
)
@click.option(
    "--data-dir",
    default=None,
    type=click.Path(file_okay=False),
    help="Directory holding reviews/ and tasks/. Overrides config and environment.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log store activity to stderr.")
@click.pass_context
def main(ctx: click.Context, config_path: str, data_dir: str | None, verbose: bool):
    """Persist code review findings and track their remediation as tasks."""
    from revtrack_core.config import load_config, resolve_data_dir
    from revtrack_core.logging_setup import setup_logging

    setup_logging(verbose)
    ctx.ensure_object(dict)

    try:
        config = load_config(config_path, cli_overrides={"data_dir": data_dir})
    except ValueError as e:
        raise click.UsageError(str(e))

    # Resolve the workspace once; every subcommand shares the same stores.
    data_path = resolve_data_dir(config)
    reviews, tasks = _build_stores(data_path)
    ctx.obj["config"] = config
    ctx.obj["data_dir"] = data_path
    ctx.obj["reviews"] = reviews
    ctx.obj["tasks"] = tasks
    ctx.call_on_close(reviews.close)
    ctx.call_on_close(tasks.close)


main.add_command(review_group)
main.add_command(task_group)
main.add_command(stats_cmd)
main.add_command(init_cmd)
