"""Logging setup for the CLI."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from dbreconcile.cli.common.output import console

# SDK debug logs include full request/response bodies
_NOISY_LOGGERS = ("databricks.sdk", "urllib3")


def configure_logging(verbose: bool) -> None:
    """Route dbreconcile logs through Rich; DEBUG when verbose, WARNING otherwise."""
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        show_time=verbose,
        show_path=False,
    )
    logging.basicConfig(
        level=level, format="%(message)s", handlers=[handler], force=True
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
