"""Process supervision for the JupyterLab server.

Tracks a single detached server process through a PID file.

Handles:
- PID file read/write/cleanup
- Liveness checks (re-verified with the OS on every query)
- Start with settle interval and log scan for the access URL
- Stop via SIGTERM

The PID file is read and then acted upon without locking. The controller
is driven by one interactive operator, so a concurrent external edit
between check and use is not guarded against.
"""

from __future__ import annotations

__all__ = [
    "ProcessSupervisor",
    "build_server_command",
    "find_access_url",
    "server_environment",
]

import logging
import os
import re
import time
from collections.abc import Callable
from pathlib import Path

from labctl.config import ControllerPaths, LabConfig
from labctl.constants import SERVER_BIND_ADDRESS, SETTLE_INTERVAL_SECONDS, TOKEN_URL_PATTERN
from labctl.exceptions import AlreadyRunningError, LaunchFailedError, NotInstalledError, NotRunningError
from labctl.models import ControllerEvent, ProcessHandle, SupervisorStatus, TLSMaterial
from labctl.runner import CommandRunner, OSProcessControl, ProcessControl, SubprocessRunner
from labctl.utils.logging import log_event

_TOKEN_URL_RE = re.compile(TOKEN_URL_PATTERN)


def build_server_command(
    config: LabConfig,
    tls: TLSMaterial,
    *,
    as_root: bool,
) -> list[str]:
    """Build the JupyterLab launch command.

    Args:
        config: Settings (install path, port).
        tls: Certificate/key pair; only passed when both files exist.
        as_root: Add --allow-root (JupyterLab refuses root otherwise).

    Returns:
        argv list.
    """
    argv = [
        str(config.install_dir / "bin" / "jupyter"),
        "lab",
        f"--ip={SERVER_BIND_ADDRESS}",
        f"--port={config.port}",
        "--no-browser",
    ]
    if tls.is_complete():
        argv.extend([f"--certfile={tls.cert_path}", f"--keyfile={tls.key_path}"])
    if as_root:
        argv.append("--allow-root")
    return argv


def server_environment(config: LabConfig, base: dict[str, str] | None = None) -> dict[str, str]:
    """Environment equivalent to activating the virtual environment."""
    env = dict(os.environ if base is None else base)
    bin_dir = str(config.install_dir / "bin")
    env["VIRTUAL_ENV"] = str(config.install_dir)
    env["PATH"] = os.pathsep.join(filter(None, [bin_dir, env.get("PATH", "")]))
    env.pop("PYTHONHOME", None)
    return env


def find_access_url(log_path: Path, offset: int = 0) -> str | None:
    """Return the first tokenized URL in the server log past offset, if any.

    The log is append-only across launches; offset skips output from
    earlier runs.
    """
    try:
        with log_path.open("rb") as raw:
            raw.seek(offset)
            content = raw.read().decode("utf-8", errors="replace")
    except FileNotFoundError:
        return None
    match = _TOKEN_URL_RE.search(content)
    return match.group(0) if match else None


def _log_size(log_path: Path) -> int:
    try:
        return log_path.stat().st_size
    except OSError:
        return 0


class ProcessSupervisor:
    """Start/stop/status for the managed JupyterLab process.

    Attributes:
        paths: Controller file locations (PID file, log, TLS pair).
    """

    def __init__(
        self,
        paths: ControllerPaths,
        *,
        process_control: ProcessControl | None = None,
        runner: CommandRunner | None = None,
        settle_interval: float = SETTLE_INTERVAL_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the supervisor.

        Args:
            paths: Controller file locations.
            process_control: Process capability (OS implementation by default).
            runner: Command capability, used for the root check.
            settle_interval: Seconds to wait after launch before verifying liveness.
            sleep: Sleep function (injected by tests).
        """
        self.paths = paths
        self._process = process_control or OSProcessControl()
        self._runner = runner or SubprocessRunner()
        self._settle_interval = settle_interval
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_installed(self, config: LabConfig) -> bool:
        """Whether the install directory exists."""
        return config.install_dir.is_dir()

    def _read_pid(self) -> int | None:
        """PID from the PID file, or None if absent or not an integer."""
        try:
            return int(self.paths.pid_file.read_text().strip())
        except (ValueError, OSError):
            return None

    def get_pid(self) -> int | None:
        """PID of the live managed process, or None."""
        pid = self._read_pid()
        if pid is None or pid <= 0:
            return None
        return pid if self._process.is_alive(pid) else None

    def is_running(self) -> bool:
        """Whether the PID file points at a live process."""
        return self.get_pid() is not None

    def status(self, config: LabConfig) -> SupervisorStatus:
        """Snapshot of install and process state."""
        pid = self.get_pid()
        return SupervisorStatus(
            installed=self.is_installed(config),
            running=pid is not None,
            pid=pid,
            install_path=str(config.install_dir),
            port=config.port,
            tls_enabled=self.paths.tls.is_complete(),
            log_path=str(self.paths.log_file),
        )

    # ------------------------------------------------------------------
    # PID file
    # ------------------------------------------------------------------

    def cleanup_stale_pid(self) -> bool:
        """Remove a PID file whose process is gone.

        Returns:
            True if a stale file was removed.
        """
        if not self.paths.pid_file.exists() or self.is_running():
            return False

        self.paths.pid_file.unlink(missing_ok=True)
        log_event(
            logging.INFO,
            ControllerEvent(
                event="stale_pid_removed",
                message=f"Removed stale PID file: {self.paths.pid_file}",
                path=str(self.paths.pid_file),
            ),
        )
        return True

    def _write_pid(self, pid: int) -> None:
        self.paths.pid_file.parent.mkdir(parents=True, exist_ok=True)
        self.paths.pid_file.write_text(f"{pid}\n")

    def _remove_pid(self) -> None:
        self.paths.pid_file.unlink(missing_ok=True)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, config: LabConfig) -> ProcessHandle:
        """Launch JupyterLab detached and verify it survives the settle interval.

        Args:
            config: Settings for this launch.

        Returns:
            ProcessHandle with PID, log path and access URL (if logged yet).

        Raises:
            AlreadyRunningError: A live process is recorded (PID file untouched).
            NotInstalledError: The install directory does not exist.
            LaunchFailedError: The process could not be spawned or died during
                the settle interval.
        """
        running_pid = self.get_pid()
        if running_pid is not None:
            raise AlreadyRunningError(running_pid)
        if not self.is_installed(config):
            raise NotInstalledError(config.install_dir)

        self.cleanup_stale_pid()

        argv = build_server_command(config, self.paths.tls, as_root=self._runner.is_root())
        log_offset = _log_size(self.paths.log_file)
        try:
            pid = self._process.spawn_detached(
                argv,
                log_path=self.paths.log_file,
                env=server_environment(config),
            )
        except OSError as e:
            log_event(
                logging.ERROR,
                ControllerEvent(
                    event="server_spawn_failed",
                    message=f"Could not launch {argv[0]}",
                    error_type=type(e).__name__,
                    error_message=str(e),
                ),
            )
            raise LaunchFailedError(self.paths.log_file) from e
        self._write_pid(pid)
        log_event(
            logging.INFO,
            ControllerEvent(
                event="server_spawned",
                message=f"Spawned JupyterLab (PID {pid})",
                pid=pid,
                details={"argv": argv},
            ),
        )

        self._sleep(self._settle_interval)

        if not self._process.is_alive(pid):
            self._remove_pid()
            log_event(
                logging.ERROR,
                ControllerEvent(
                    event="server_launch_failed",
                    message="JupyterLab exited during settle interval",
                    pid=pid,
                    path=str(self.paths.log_file),
                ),
            )
            raise LaunchFailedError(self.paths.log_file)

        log_event(
            logging.INFO,
            ControllerEvent(
                event="server_started",
                message=f"JupyterLab is running (PID {pid})",
                pid=pid,
                details={"port": config.port},
            ),
        )
        return ProcessHandle(
            pid=pid,
            log_path=self.paths.log_file,
            access_url=find_access_url(self.paths.log_file, log_offset),
        )

    def stop(self) -> bool:
        """Send SIGTERM to the managed process and remove the PID file.

        A failed signal is logged but the PID file is still removed.
        A PID file naming a dead process is removed before raising.

        Returns:
            True if the signal was delivered.

        Raises:
            NotRunningError: No live process is recorded.
        """
        pid = self.get_pid()
        if pid is None:
            self.cleanup_stale_pid()
            raise NotRunningError()

        signalled = True
        try:
            self._process.terminate(pid)
        except OSError as e:
            signalled = False
            log_event(
                logging.WARNING,
                ControllerEvent(
                    event="server_signal_failed",
                    message=f"Failed to kill {pid}",
                    pid=pid,
                    error_type=type(e).__name__,
                    error_message=str(e),
                ),
            )
        finally:
            self._remove_pid()

        if signalled:
            log_event(
                logging.INFO,
                ControllerEvent(event="server_stopped", message=f"Stopped JupyterLab (PID {pid})", pid=pid),
            )
        return signalled
