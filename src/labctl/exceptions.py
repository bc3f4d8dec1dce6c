"""Custom exceptions for labctl.

Exceptions are organized into three categories, each detected at a
different point of an operation:

Validation Errors (bad input, nothing has run yet):
    - InvalidArgumentError: CLI argument missing or malformed

Precondition Errors (environment not ready, nothing has run yet):
    - ToolNotFoundError: Required executable missing from PATH
    - InputFileNotFoundError: Input file does not exist
    - NotInstalledError: JupyterLab is not installed
    - AlreadyRunningError: Server already running
    - NotRunningError: Server is not running

Execution Errors (an external command or write failed midway):
    - StepFailedError: An installer step returned non-zero
    - LaunchFailedError: Server exited during the settle interval
    - ConfigSaveError: Config file could not be written
    - UninstallIncompleteError: Some installed files could not be removed

Usage:
    from labctl.exceptions import AlreadyRunningError, StepFailedError
"""

from __future__ import annotations

__all__ = [
    "AlreadyRunningError",
    "ConfigSaveError",
    "ExecutionError",
    "InputFileNotFoundError",
    "InvalidArgumentError",
    "LabctlError",
    "LaunchFailedError",
    "NotInstalledError",
    "NotRunningError",
    "PreconditionError",
    "StepFailedError",
    "ToolNotFoundError",
    "UninstallIncompleteError",
    "ValidationError",
]

from pathlib import Path


class LabctlError(Exception):
    """Base exception for all labctl failures.

    Attributes:
        exit_code: Process exit code used by the CLI.
        failure_type: Category string for logging.
    """

    exit_code: int = 1
    failure_type: str = "unknown"


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(LabctlError):
    """Input failed validation before any action was taken."""

    failure_type = "validation_error"


class InvalidArgumentError(ValidationError):
    """A CLI argument is missing or malformed.

    Attributes:
        argument: Name of the offending argument.
        value: The rejected value (None when missing).
    """

    def __init__(self, argument: str, message: str, value: str | None = None) -> None:
        super().__init__(message)
        self.argument = argument
        self.value = value


# =============================================================================
# Precondition Errors
# =============================================================================


class PreconditionError(LabctlError):
    """The environment is not in a state that allows the operation."""

    failure_type = "precondition_error"


class ToolNotFoundError(PreconditionError):
    """A required executable is not on PATH."""

    def __init__(self, tool: str, hint: str | None = None) -> None:
        message = f"Required '{tool}' not found."
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)
        self.tool = tool


class InputFileNotFoundError(PreconditionError):
    """An input file passed on the command line does not exist."""

    def __init__(self, path: Path | str) -> None:
        super().__init__(f"Input file '{path}' does not exist.")
        self.path = Path(path)


class NotInstalledError(PreconditionError):
    """JupyterLab has not been installed at the configured path."""

    def __init__(self, install_path: Path | str) -> None:
        super().__init__(f"Not installed at {install_path}. Please run 'Install JupyterLab' first.")
        self.install_path = Path(install_path)


class AlreadyRunningError(PreconditionError):
    """The managed server is already running."""

    def __init__(self, pid: int) -> None:
        super().__init__(f"Already running (PID {pid}).")
        self.pid = pid


class NotRunningError(PreconditionError):
    """The managed server is not running."""

    def __init__(self) -> None:
        super().__init__("JupyterLab is not running.")


# =============================================================================
# Execution Errors
# =============================================================================


class ExecutionError(LabctlError):
    """An external command or file write failed.

    No rollback is performed; whatever the failed step produced stays on
    disk. Re-running the idempotent install is the recovery path.
    """

    failure_type = "execution_error"


class StepFailedError(ExecutionError):
    """An installer step exited with a non-zero status.

    Attributes:
        step: Human-readable step description (e.g. "Creating virtual environment").
        returncode: Exit status of the failed command.
        output: Combined output of the command, if captured.
    """

    def __init__(self, step: str, returncode: int, output: str = "") -> None:
        super().__init__(f"Error in: {step} (exit status {returncode})")
        self.step = step
        self.returncode = returncode
        self.output = output


class LaunchFailedError(ExecutionError):
    """The server process died before the settle interval elapsed."""

    def __init__(self, log_path: Path | str) -> None:
        super().__init__(f"Failed to start; see {log_path}")
        self.log_path = Path(log_path)


class ConfigSaveError(ExecutionError):
    """The configuration file could not be written."""

    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(f"Failed to save configuration to {path}: {reason}")
        self.path = Path(path)


class UninstallIncompleteError(ExecutionError):
    """Some paths survived uninstall.

    Attributes:
        failures: Each path that could not be removed, with the OS error.
    """

    def __init__(self, failures: list[tuple[Path, OSError]]) -> None:
        names = ", ".join(str(path) for path, _ in failures)
        super().__init__(f"Uninstall incomplete; could not remove: {names}")
        self.failures = failures
