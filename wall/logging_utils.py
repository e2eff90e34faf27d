"""
logging_utils.py

A small collection of logging helpers used across the Wall project.

Diagnostics (backend errors, fallback decisions, teardown failures) go
through the standard `logging` module, one logger per module. High‑level
progress for CLI users goes through `log_verbose`, which echoes via Typer
only when --verbose is set.
"""

import logging

import typer

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """
    Configure root logging for CLI runs.

    Warnings and errors are always shown; --verbose lowers the threshold to
    DEBUG so backend calls are traced as well.
    """
    # No-op when the root logger already has handlers.
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger().setLevel(logging.DEBUG if verbose else logging.WARNING)


def log_verbose(message: str, verbose: bool) -> None:
    """
    Print a high‑level progress message when verbose mode is enabled.

    Parameters
    ----------
    message : str
        Short, plain‑English description of what the CLI is doing
        (e.g., "Loading the wall...", "Uploading image...").

    verbose : bool
        Whether verbose mode is active. When False, this function does
        nothing.
    """
    if verbose:
        typer.echo(message)
