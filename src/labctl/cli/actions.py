"""Operation flows shared by the interactive menu and the subcommands.

Each function reloads the config, runs one controller operation and
prints the outcome. LabctlError subclasses that mean "nothing to do"
(already running, not running) are reported as warnings here; the rest
propagate so the caller decides whether to exit or keep looping.
"""

from __future__ import annotations

__all__ = [
    "exit_with_error",
    "report_error",
    "run_install",
    "run_start",
    "run_stop",
    "run_uninstall",
    "show_access_hints",
]

import sys
from typing import NoReturn

import click

from labctl.cli.prompts import confirm_uninstall, prompt_lab_config
from labctl.cli.styling import style_dim, style_error, style_info, style_success
from labctl.config import LabConfig
from labctl.controller import Controller
from labctl.exceptions import AlreadyRunningError, LabctlError, NotRunningError, StepFailedError
from labctl.installer import StepStatus
from labctl.models import ProcessHandle
from labctl.network import access_urls, lookup_public_addresses


def report_error(error: LabctlError) -> None:
    """Print a controller error to stderr."""
    click.echo(style_error(str(error)), err=True)
    if isinstance(error, StepFailedError) and error.output:
        tail = error.output.strip().splitlines()[-5:]
        for line in tail:
            click.echo(style_dim(f"    {line}"), err=True)


def _echo_step(description: str, status: StepStatus) -> None:
    if status == "running":
        click.echo(f" {description}...", nl=False)
    elif status == "done":
        click.echo(" Done.")
    else:
        click.echo(" Failed.")


def run_install(ctrl: Controller, *, config: LabConfig | None = None) -> bool:
    """Run the wizard (unless config is given), save, then install.

    Args:
        ctrl: Controller wiring.
        config: Pre-collected settings; skips the wizard when provided.

    Returns:
        False if the wizard was declined, True otherwise.

    Raises:
        LabctlError: Save failed, a tool is missing, or a step failed.
    """
    if config is None:
        config = prompt_lab_config(ctrl.load_config())
        if config is None:
            return False

    ctrl.store.save(config)
    config = ctrl.load_config()

    report = ctrl.installer.install(config, on_step=_echo_step)
    if not report.performed:
        click.echo(style_info(f"JupyterLab is already installed at {config.install_dir}."))
        return True

    click.echo()
    click.echo(style_info("Installation complete."))
    return True


def show_access_hints(handle: ProcessHandle, config: LabConfig, *, tls: bool) -> None:
    """Print local and public URLs for a running server."""
    if handle.access_url:
        click.echo(f"Local Access URL: {handle.access_url}")
    else:
        click.echo(f"Check {handle.log_path} for the token URL.")

    for label, url in access_urls(lookup_public_addresses(), config.port, tls=tls):
        click.echo(label)
        click.echo(f"If allowed by firewall, access: {url}")


def run_start(ctrl: Controller) -> ProcessHandle | None:
    """Start the server and print how to reach it.

    Returns:
        The handle, or None if it was already running.

    Raises:
        LabctlError: Not installed, or the server died during startup.
    """
    config = ctrl.load_config()

    try:
        click.echo(style_info("Starting JupyterLab..."))
        handle = ctrl.supervisor.start(config)
    except AlreadyRunningError as e:
        click.echo(style_info(str(e)))
        return None

    click.echo(style_success(f"JupyterLab is running (PID {handle.pid})."))
    show_access_hints(handle, config, tls=ctrl.paths.tls.is_complete())
    return handle


def run_stop(ctrl: Controller) -> bool:
    """Stop the server.

    Returns:
        True if a running server was stopped (even if the signal failed).
    """
    pid = ctrl.supervisor.get_pid()
    try:
        if pid is not None:
            click.echo(style_info(f"Stopping JupyterLab (PID {pid})..."))
        signalled = ctrl.supervisor.stop()
    except NotRunningError as e:
        click.echo(style_info(str(e)))
        return False

    if not signalled:
        click.echo(style_error(f"Failed to kill {pid}"), err=True)
    click.echo(style_info("Stopped."))
    return True


def run_uninstall(ctrl: Controller, *, assume_yes: bool = False) -> bool:
    """Confirm, then remove the installation.

    Returns:
        True if files were removed.

    Raises:
        UninstallIncompleteError: If some files could not be removed.
    """
    config = ctrl.load_config()
    if not ctrl.supervisor.is_installed(config):
        click.echo(style_info("Nothing to uninstall."))
        return False

    if not assume_yes and not confirm_uninstall():
        click.echo(style_info("Uninstall aborted."))
        return False

    if ctrl.supervisor.is_running():
        run_stop(ctrl)

    ctrl.installer.uninstall(config)

    click.echo(style_info("Uninstalled completely."))
    return True


def exit_with_error(error: LabctlError) -> NoReturn:
    """Report a controller error and exit with its exit code."""
    report_error(error)
    sys.exit(error.exit_code)
