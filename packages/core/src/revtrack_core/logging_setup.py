"""Console logging for the revtrack CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(verbose: bool = False) -> None:
    """Route revtrack logs to stderr through rich.

    Call once, early. INFO by default, DEBUG with ``verbose``. Third-party
    loggers stay at WARNING.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)

    handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("revtrack_store").setLevel(logging.DEBUG if verbose else logging.INFO)
    logging.getLogger("revtrack_core").setLevel(logging.DEBUG if verbose else logging.INFO)
    logging.getLogger("revtrack_cli").setLevel(logging.DEBUG if verbose else logging.INFO)
    logging.captureWarnings(True)
