"""Interactive main menu.

Loops until the user picks Exit (or closes stdin). Every operation
reloads the saved settings first, so edits made by a previous install
are picked up immediately.
"""

from __future__ import annotations

__all__ = ["run_menu"]

import click

from labctl.cli.actions import report_error, run_install, run_start, run_stop, run_uninstall
from labctl.cli.styling import style_error, style_header, style_state
from labctl.controller import Controller
from labctl.exceptions import LabctlError

MENU_OPTIONS = (
    "1) Install JupyterLab",
    "2) Start server",
    "3) Stop server",
    "4) Uninstall",
    "5) Exit",
)


def _print_header(ctrl: Controller) -> None:
    config = ctrl.load_config()
    snapshot = ctrl.supervisor.status(config)

    click.echo()
    click.echo(style_header("JupyterLab Controller"))
    installed = style_state(snapshot.installed, "installed", "not installed")
    running = style_state(snapshot.running, f"running (PID {snapshot.pid})", "stopped")
    click.echo(f" Status: {installed}, {running}")
    click.echo()
    for option in MENU_OPTIONS:
        click.echo(f" {option}")
    click.echo()


def _dispatch(ctrl: Controller, choice: str) -> bool:
    """Run one menu option.

    Returns:
        False when the menu should exit.
    """
    if choice == "1":
        run_install(ctrl)
    elif choice == "2":
        if run_start(ctrl) is not None:
            click.pause("Press ENTER to return to the main menu...")
    elif choice == "3":
        run_stop(ctrl)
    elif choice == "4":
        run_uninstall(ctrl)
    elif choice == "5":
        return False
    else:
        click.echo(style_error("Invalid option."), err=True)
    return True


def run_menu(ctrl: Controller) -> None:
    """Show the menu until Exit, EOF or Ctrl-C."""
    while True:
        _print_header(ctrl)
        try:
            choice = click.prompt("Choose [1-5]", default="", show_default=False).strip()
            if not _dispatch(ctrl, choice):
                break
        except LabctlError as e:
            report_error(e)
        except click.Abort:
            click.echo()
            break
    click.echo("Goodbye.")
