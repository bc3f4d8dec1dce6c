"""Idempotent JupyterLab installer.

install() is gated on the install directory: if it exists, nothing runs.
Otherwise the steps below run in order, each aborting the remainder on
failure:

1. Updating system              apt-get update
2. Installing system deps       apt-get install python3-venv openssl ...
3. Creating virtual environment python3 -m venv <install_path>
4. Upgrading pip/wheel          <venv>/bin/python -m pip install --upgrade pip wheel
5. Installing JupyterLab core   ... pip install jupyterlab ipykernel
6. Installing JupyterLab LSP    ... pip install jupyterlab-lsp   (use_extension)
7. Generating TLS certificate   openssl req -x509 ...            (use_tls)

With TLS declined, any certificate/key left by a previous install is
removed instead. A failed step leaves whatever it produced on disk;
running install again is the recovery path.
"""

from __future__ import annotations

__all__ = [
    "InstallReport",
    "InstallStep",
    "Installer",
    "StepStatus",
]

import logging
import socket
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from labctl.config import ControllerPaths, LabConfig
from labctl.constants import CORE_PACKAGES, EXTENSION_PACKAGES, SYSTEM_PACKAGES
from labctl.exceptions import (
    NotRunningError,
    StepFailedError,
    ToolNotFoundError,
    UninstallIncompleteError,
)
from labctl.models import ControllerEvent
from labctl.runner import CommandRunner, SubprocessRunner
from labctl.supervisor import ProcessSupervisor
from labctl.tls import build_self_signed_command, remove_tls_material
from labctl.utils.file_helpers import remove_path, set_secure_permissions
from labctl.utils.logging import log_event

StepStatus = Literal["running", "done", "failed"]

TLS_STEP_DESCRIPTION = "Generating self-signed TLS certificate"


@dataclass(frozen=True, slots=True)
class InstallStep:
    """One external command in the install sequence.

    Attributes:
        description: Shown to the user and reported on failure.
        argv: Command to run.
    """

    description: str
    argv: tuple[str, ...]


@dataclass(slots=True)
class InstallReport:
    """What an install() call did.

    Attributes:
        performed: False when the install was skipped (already installed).
        completed_steps: Descriptions of steps that succeeded, in order.
        removed_tls: Stale certificate/key files deleted because TLS was declined.
    """

    performed: bool
    completed_steps: list[str] = field(default_factory=list)
    removed_tls: list[Path] = field(default_factory=list)


class Installer:
    """Installs and uninstalls JupyterLab into a virtual environment."""

    def __init__(
        self,
        paths: ControllerPaths,
        supervisor: ProcessSupervisor,
        *,
        runner: CommandRunner | None = None,
        hostname: Callable[[], str] = socket.gethostname,
    ) -> None:
        """Initialize the installer.

        Args:
            paths: Controller file locations.
            supervisor: Used for the installed check and to stop before uninstall.
            runner: Command capability (subprocess by default).
            hostname: Supplies the certificate CN.
        """
        self.paths = paths
        self.supervisor = supervisor
        self._runner = runner or SubprocessRunner()
        self._hostname = hostname

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def _privileged(self, *argv: str) -> tuple[str, ...]:
        if self._runner.is_root():
            return argv
        return ("sudo", *argv)

    def plan(self, config: LabConfig) -> list[InstallStep]:
        """Steps install() would run for this configuration, in order."""
        venv_python = str(config.install_dir / "bin" / "python")
        pip = (venv_python, "-m", "pip", "install")

        steps = [
            InstallStep("Updating system", self._privileged("apt-get", "update", "-qq")),
            InstallStep(
                "Installing system deps",
                self._privileged("apt-get", "install", "-y", "-qq", *SYSTEM_PACKAGES),
            ),
            InstallStep("Creating virtual environment", ("python3", "-m", "venv", str(config.install_dir))),
            InstallStep("Upgrading pip/wheel", (*pip, "--upgrade", "pip", "wheel")),
            InstallStep("Installing JupyterLab core", (*pip, *CORE_PACKAGES)),
        ]
        if config.use_extension:
            steps.append(InstallStep("Installing JupyterLab LSP", (*pip, *EXTENSION_PACKAGES)))
        if config.use_tls:
            steps.append(
                InstallStep(
                    TLS_STEP_DESCRIPTION,
                    tuple(build_self_signed_command(self.paths.tls, self._hostname())),
                )
            )
        return steps

    def check_prerequisites(self, config: LabConfig) -> None:
        """Verify required tools are on PATH before anything is changed.

        Raises:
            ToolNotFoundError: For the first missing tool.
        """
        required = ["python3", "apt-get"]
        if not self._runner.is_root():
            required.insert(0, "sudo")
        if config.use_tls:
            required.append("openssl")

        for tool in required:
            if self._runner.which(tool) is None:
                raise ToolNotFoundError(tool)

    # ------------------------------------------------------------------
    # Install / Uninstall
    # ------------------------------------------------------------------

    def install(
        self,
        config: LabConfig,
        on_step: Callable[[str, StepStatus], None] | None = None,
    ) -> InstallReport:
        """Install JupyterLab unless the install directory already exists.

        Args:
            config: Settings for this install.
            on_step: Progress callback, called with (description, status).

        Returns:
            InstallReport describing what ran.

        Raises:
            ToolNotFoundError: A required tool is missing (nothing was changed).
            StepFailedError: A step exited non-zero (later steps did not run).
        """
        if self.supervisor.is_installed(config):
            log_event(
                logging.INFO,
                ControllerEvent(
                    event="install_skipped",
                    message=f"JupyterLab is already installed at {config.install_dir}.",
                    path=str(config.install_dir),
                ),
            )
            return InstallReport(performed=False)

        self.check_prerequisites(config)

        report = InstallReport(performed=True)
        for step in self.plan(config):
            if step.description == TLS_STEP_DESCRIPTION:
                remove_tls_material(self.paths.tls)
            self._run_step(step, on_step)
            report.completed_steps.append(step.description)

        if config.use_tls:
            set_secure_permissions(self.paths.key_file)
        else:
            report.removed_tls = remove_tls_material(self.paths.tls)

        log_event(
            logging.INFO,
            ControllerEvent(
                event="install_completed",
                message="Installation complete.",
                path=str(config.install_dir),
                details={"steps": report.completed_steps},
            ),
        )
        return report

    def _run_step(self, step: InstallStep, on_step: Callable[[str, StepStatus], None] | None) -> None:
        if on_step:
            on_step(step.description, "running")

        result = self._runner.run(step.argv)

        if not result.ok:
            if on_step:
                on_step(step.description, "failed")
            log_event(
                logging.ERROR,
                ControllerEvent(
                    event="install_step_failed",
                    message=f"Error in: {step.description}",
                    step=step.description,
                    error_type="StepFailedError",
                    error_message=result.output[-2000:],
                    details={"argv": list(step.argv), "returncode": result.returncode},
                ),
            )
            raise StepFailedError(step.description, result.returncode, result.output)

        if on_step:
            on_step(step.description, "done")

    def uninstall(self, config: LabConfig) -> bool:
        """Stop the server and delete everything install() created.

        Removes the install directory, TLS pair, server log and PID file.
        The config file is kept so a reinstall offers the same settings.
        Every path is attempted even when an earlier one fails.

        Args:
            config: Settings naming the install directory.

        Returns:
            False if nothing was installed (no-op), True otherwise.

        Raises:
            UninstallIncompleteError: If any path could not be removed.
        """
        if not self.supervisor.is_installed(config):
            log_event(
                logging.INFO,
                ControllerEvent(event="uninstall_skipped", message="Nothing to uninstall."),
            )
            return False

        try:
            self.supervisor.stop()
        except NotRunningError:
            pass

        failures: list[tuple[Path, OSError]] = []
        for path in (
            config.install_dir,
            self.paths.cert_file,
            self.paths.key_file,
            self.paths.log_file,
            self.paths.pid_file,
        ):
            try:
                remove_path(path)
            except OSError as e:
                failures.append((path, e))
                log_event(
                    logging.WARNING,
                    ControllerEvent(
                        event="uninstall_remove_failed",
                        message=f"Could not remove {path}",
                        path=str(path),
                        error_type=type(e).__name__,
                        error_message=str(e),
                    ),
                )

        if failures:
            raise UninstallIncompleteError(failures)

        log_event(
            logging.INFO,
            ControllerEvent(
                event="uninstall_completed",
                message="Uninstalled completely.",
                path=str(config.install_dir),
            ),
        )
        return True
