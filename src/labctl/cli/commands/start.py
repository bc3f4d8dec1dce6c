"""Start command for labctl CLI."""

from __future__ import annotations

__all__ = ["start"]

import click

from labctl.cli.actions import exit_with_error, run_start
from labctl.exceptions import LabctlError
from labctl.utils.cli import get_controller


@click.command()
@click.pass_context
def start(ctx: click.Context) -> None:
    """Start the JupyterLab server in the background.

    Prints the local access URL and public address hints. Starting an
    already running server is reported and exits 0.
    """
    try:
        run_start(get_controller(ctx))
    except LabctlError as e:
        exit_with_error(e)
