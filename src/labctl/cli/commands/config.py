"""Config command group for labctl CLI.

Shows the saved settings file and its location.
"""

from __future__ import annotations

__all__ = ["config"]

import click

from labctl.config import CONFIG_KEYS
from labctl.utils.cli import get_controller
from labctl.utils.validation import format_yes_no

from ..styling import style_dim, style_header


@click.group()
def config() -> None:
    """Configuration management commands."""
    pass


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Display the effective settings.

    Values missing from the file (or invalid there) show their defaults.
    """
    ctrl = get_controller(ctx)
    settings = ctrl.load_config()

    click.echo(style_header("Settings"))
    for field_name, key in CONFIG_KEYS.items():
        value = getattr(settings, field_name)
        if isinstance(value, bool):
            value = format_yes_no(value)
        click.echo(f"  {key}={value}")
    click.echo()

    if ctrl.store.exists():
        click.echo(style_dim(f"File: {ctrl.store.path}"))
    else:
        click.echo(style_dim(f"File: {ctrl.store.path} (not created yet, showing defaults)"))


@config.command("path")
@click.pass_context
def config_path(ctx: click.Context) -> None:
    """Show the settings file path."""
    click.echo(str(get_controller(ctx).store.path))
