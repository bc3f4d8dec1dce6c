"""Uninstall command for labctl CLI."""

from __future__ import annotations

__all__ = ["uninstall"]

import click

from labctl.cli.actions import exit_with_error, run_uninstall
from labctl.exceptions import LabctlError
from labctl.utils.cli import get_controller


@click.command()
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def uninstall(ctx: click.Context, assume_yes: bool) -> None:
    """Stop the server and remove the installation.

    Deletes the virtual environment, TLS files, server log and PID file.
    Saved settings are kept for the next install.
    """
    try:
        run_uninstall(get_controller(ctx), assume_yes=assume_yes)
    except LabctlError as e:
        exit_with_error(e)
