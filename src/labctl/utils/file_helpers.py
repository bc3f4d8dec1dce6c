"""Shared file utilities for labctl.

Provides common utilities used by the config store, supervisor and installer:
- get_home_dir: Base directory for controller files
- get_controller_log_path: OS-appropriate location of the JSONL controller log
- set_secure_permissions: Owner-only file permissions
- atomic_write_text: Crash-safe file replacement
- remove_path: Delete a file or directory tree if present
"""

from __future__ import annotations

__all__ = [
    "atomic_write_text",
    "get_controller_log_path",
    "get_home_dir",
    "remove_path",
    "set_secure_permissions",
]

import os
import shutil
import sys
import tempfile
from pathlib import Path

from platformdirs import user_state_dir

from labctl.constants import APP_NAME, CONTROLLER_LOG_FILENAME, HOME_ENV_VAR


def get_home_dir() -> Path:
    """Get the directory controller files are stored in.

    Honors the LABCTL_HOME environment variable, falling back to the
    user's home directory.

    Returns:
        Path to the base directory.
    """
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home()


def get_controller_log_path() -> Path:
    """Get the path of the structured controller log.

    Platform-specific location (via platformdirs):
    - macOS: ~/Library/Application Support/labctl/controller.jsonl
    - Linux: ~/.local/state/labctl/controller.jsonl
    - Windows: %LOCALAPPDATA%\\labctl\\controller.jsonl

    Returns:
        Path to controller.jsonl.
    """
    return Path(user_state_dir(APP_NAME)) / CONTROLLER_LOG_FILENAME


def set_secure_permissions(path: Path) -> None:
    """Make a file readable and writable by its owner only (0600).

    Used for the TLS private key. No-op on Windows; a filesystem that
    rejects chmod leaves the file as it is.
    """
    if sys.platform == "win32":
        return
    try:
        path.chmod(0o600)
    except OSError:
        pass


def atomic_write_text(path: Path, content: str, *, mode: int = 0o600) -> None:
    """Replace a file's content atomically.

    Writes to a temp file in the same directory, fsyncs it, then renames
    over the target. Readers see either the old or the new content, never
    a truncated file.

    Args:
        path: Destination file.
        content: Text to write.
        mode: Permissions applied to the file before the rename.

    Raises:
        OSError: If the temp file cannot be written or renamed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=f".{path.name}_",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        if sys.platform != "win32":
            os.chmod(temp_path, mode)

        os.replace(temp_path, path)

    except Exception:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


def remove_path(path: Path) -> bool:
    """Remove a file or a directory tree if it exists.

    Args:
        path: File, symlink or directory to remove.

    Returns:
        True if something was removed, False if nothing was there.

    Raises:
        OSError: If removal fails.
    """
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
        return True
    if path.exists() or path.is_symlink():
        path.unlink()
        return True
    return False
