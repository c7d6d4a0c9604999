"""Translate store and lifecycle failures into CLI errors."""

from __future__ import annotations

import contextlib

import click

from revtrack_core.lifecycle import LifecycleError
from revtrack_store.errors import RecordNotFound, StoreError


class NotFoundError(click.ClickException):
    exit_code = 1


class PreconditionFailed(click.ClickException):
    """A lifecycle guard refused the action; the message carries the guidance."""

    exit_code = 1


@contextlib.contextmanager
def reported_errors():
    try:
        yield
    except RecordNotFound as e:
        raise NotFoundError(str(e)) from e
    except LifecycleError as e:
        raise PreconditionFailed(f"{e}\n{e.guidance}") from e
    except StoreError as e:
        raise click.ClickException(str(e)) from e
