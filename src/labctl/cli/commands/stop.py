"""Stop command for labctl CLI."""

from __future__ import annotations

__all__ = ["stop"]

import click

from labctl.cli.actions import run_stop
from labctl.utils.cli import get_controller


@click.command()
@click.pass_context
def stop(ctx: click.Context) -> None:
    """Stop the running JupyterLab server (SIGTERM)."""
    run_stop(get_controller(ctx))
