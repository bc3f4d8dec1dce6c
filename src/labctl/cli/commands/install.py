"""Install command for labctl CLI.

Runs the installation wizard, or installs straight from saved settings
plus command-line overrides with --yes.
"""

from __future__ import annotations

__all__ = ["install"]

from typing import Any

import click
from pydantic import ValidationError

from labctl.cli.actions import exit_with_error, run_install
from labctl.cli.prompts import prompt_lab_config
from labctl.config import LabConfig
from labctl.constants import MAX_PORT, MIN_PORT
from labctl.exceptions import LabctlError
from labctl.utils.cli import get_controller


@click.command()
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Skip the wizard and install with current settings")
@click.option("--path", "install_path", help="Virtual environment directory")
@click.option("--port", type=click.IntRange(MIN_PORT, MAX_PORT), help="JupyterLab port")
@click.option("--tls/--no-tls", "use_tls", default=None, help="Generate a self-signed certificate")
@click.option(
    "--extension/--no-extension",
    "use_extension",
    default=None,
    help="Install the JupyterLab LSP extension",
)
@click.pass_context
def install(
    ctx: click.Context,
    assume_yes: bool,
    install_path: str | None,
    port: int | None,
    use_tls: bool | None,
    use_extension: bool | None,
) -> None:
    """Install JupyterLab into a virtual environment.

    Options override the saved settings. Without --yes the wizard starts
    pre-filled with the result.

    \b
    Examples:
        labctl install                          # Interactive wizard
        labctl install --yes --port 9000 --tls  # Non-interactive
    """
    ctrl = get_controller(ctx)

    overrides: dict[str, Any] = {
        "install_path": install_path,
        "port": port,
        "use_tls": use_tls,
        "use_extension": use_extension,
    }
    current = ctrl.load_config()
    given = {k: v for k, v in overrides.items() if v is not None}
    try:
        config = LabConfig.model_validate({**current.model_dump(), **given})
    except ValidationError as e:
        raise click.UsageError(f"Invalid install option: {e.errors()[0]['msg']}") from e

    if not assume_yes:
        confirmed = prompt_lab_config(config)
        if confirmed is None:
            return
        config = confirmed

    try:
        run_install(ctrl, config=config)
    except LabctlError as e:
        exit_with_error(e)
