"""Interactive prompts for the installation wizard.

The wizard only collects and confirms settings; persisting them and
running the install is left to the caller.
"""

from __future__ import annotations

__all__ = [
    "confirm_uninstall",
    "display_config_summary",
    "prompt_lab_config",
]

import click

from labctl.cli.styling import style_header
from labctl.config import LabConfig
from labctl.constants import MAX_PORT, MIN_PORT
from labctl.utils.validation import format_yes_no


def display_config_summary(config: LabConfig) -> None:
    """Print the four settings for review."""
    click.echo()
    click.echo(" Summary of your choices:")
    click.echo(" " + "─" * 46)
    click.echo(f"   {'VENV Directory:':<17}{config.install_path}")
    click.echo(f"   {'Port:':<17}{config.port}")
    click.echo(f"   {'SSL Certificate:':<17}{format_yes_no(config.use_tls)}")
    click.echo(f"   {'LSP Extension:':<17}{format_yes_no(config.use_extension)}")
    click.echo(" " + "─" * 46)


def prompt_lab_config(current: LabConfig) -> LabConfig | None:
    """Walk through the four settings, pre-filled from current values.

    Args:
        current: Saved settings, or defaults on first run.

    Returns:
        The confirmed settings, or None if the user declined.
    """
    click.echo()
    click.echo(style_header("JupyterLab Installation Wizard"))
    click.echo()

    install_path: str = click.prompt(" 1) Virtual environment path", default=current.install_path)
    port: int = click.prompt(
        " 2) JupyterLab port",
        default=current.port,
        type=click.IntRange(MIN_PORT, MAX_PORT),
    )
    use_tls = click.confirm(" 3) Generate self-signed SSL certificate?", default=current.use_tls)
    use_extension = click.confirm(" 4) Install JupyterLab LSP extension?", default=current.use_extension)

    # Blank paths fall back to the previous value
    config = LabConfig(
        install_path=install_path.strip() or current.install_path,
        port=port,
        use_tls=use_tls,
        use_extension=use_extension,
    )

    display_config_summary(config)

    if not click.confirm(" Proceed with these options?", default=True):
        click.echo("Aborted.")
        return None
    return config


def confirm_uninstall() -> bool:
    """Ask before deleting the installation (default: no)."""
    return click.confirm(
        "Are you sure you want to uninstall JupyterLab and remove all files?",
        default=False,
    )
