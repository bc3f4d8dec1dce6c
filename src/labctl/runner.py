"""Capability interfaces for running external commands and processes.

The installer and supervisor never touch subprocess or os.kill directly;
they receive a CommandRunner and a ProcessControl. Production code uses
SubprocessRunner / OSProcessControl, tests inject fakes.

This follows structural subtyping: fakes implement the methods without
inheriting from anything here.
"""

from __future__ import annotations

__all__ = [
    "CommandResult",
    "CommandRunner",
    "OSProcessControl",
    "ProcessControl",
    "SubprocessRunner",
]

import errno
import os
import shutil
import signal
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of a finished command.

    Attributes:
        returncode: Exit status (0 = success).
        output: Combined stdout/stderr text.
    """

    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@runtime_checkable
class CommandRunner(Protocol):
    """Runs external commands to completion.

    Required methods:
    - run(): Execute a command, capturing its output
    - call(): Execute a command attached to the terminal
    - which(): Locate an executable on PATH
    - is_root(): Whether the controller runs with EUID 0
    """

    def run(self, argv: Sequence[str], *, env: Mapping[str, str] | None = None) -> CommandResult: ...

    def call(self, argv: Sequence[str]) -> int: ...

    def which(self, name: str) -> str | None: ...

    def is_root(self) -> bool: ...


@runtime_checkable
class ProcessControl(Protocol):
    """Launches, probes and signals long-running background processes.

    Required methods:
    - spawn_detached(): Start a process that outlives the controller
    - is_alive(): Query the OS for process existence
    - terminate(): Ask a process to exit
    """

    def spawn_detached(
        self,
        argv: Sequence[str],
        *,
        log_path: Path,
        env: Mapping[str, str] | None = None,
    ) -> int: ...

    def is_alive(self, pid: int) -> bool: ...

    def terminate(self, pid: int) -> None: ...


# =============================================================================
# OS Implementations
# =============================================================================


class SubprocessRunner:
    """CommandRunner backed by subprocess.run."""

    def run(self, argv: Sequence[str], *, env: Mapping[str, str] | None = None) -> CommandResult:
        """Run a command quietly and return its exit status and output.

        A missing executable is reported as exit status 127, like a shell.
        """
        try:
            completed = subprocess.run(
                list(argv),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                env=dict(env) if env is not None else None,
                check=False,
                text=True,
            )
        except FileNotFoundError as e:
            return CommandResult(returncode=127, output=str(e))
        return CommandResult(returncode=completed.returncode, output=completed.stdout or "")

    def call(self, argv: Sequence[str]) -> int:
        """Run a command with inherited stdio so its progress is visible."""
        try:
            return subprocess.call(list(argv))
        except FileNotFoundError:
            return 127

    def which(self, name: str) -> str | None:
        return shutil.which(name)

    def is_root(self) -> bool:
        return hasattr(os, "geteuid") and os.geteuid() == 0


class OSProcessControl:
    """ProcessControl backed by subprocess.Popen and os.kill.

    Children spawned by this instance are tracked so their exit can be
    detected (and the zombie reaped) while the controller is still running.
    """

    def __init__(self) -> None:
        self._children: dict[int, subprocess.Popen[bytes]] = {}

    def spawn_detached(
        self,
        argv: Sequence[str],
        *,
        log_path: Path,
        env: Mapping[str, str] | None = None,
    ) -> int:
        """Start a process in a new session with output appended to log_path.

        Raises:
            OSError: If the log cannot be opened or the process cannot be spawned.
        """
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with log_path.open("ab") as log_file:
            process = subprocess.Popen(
                list(argv),
                stdin=subprocess.DEVNULL,
                stdout=log_file,
                stderr=subprocess.STDOUT,
                env=dict(env) if env is not None else None,
                start_new_session=True,
            )
        self._children[process.pid] = process
        return process.pid

    def is_alive(self, pid: int) -> bool:
        """Check process existence (signal 0), reaping our own exited children."""
        child = self._children.get(pid)
        if child is not None:
            if child.poll() is None:
                return True
            del self._children[pid]
            return False

        try:
            os.kill(pid, 0)
            return True
        except ProcessLookupError:
            return False
        except PermissionError:
            # Exists but owned by another user
            return True
        except OSError as e:
            if e.errno == errno.ESRCH:
                return False
            raise

    def terminate(self, pid: int) -> None:
        """Send SIGTERM.

        Raises:
            OSError: If the signal cannot be delivered.
        """
        os.kill(pid, signal.SIGTERM)
