"""Configuration for labctl.

Defines the four user-facing settings, the file locations derived from
the home directory, and the flat key-value store that persists settings
between runs.

The config file is plain shell syntax, so it can also be sourced:

    VENV_DIR="/home/user/jupyterlab_venv"
    PORT="8888"
    USE_SSL="n"
    USE_LSP="n"

Example usage:
    paths = ControllerPaths.from_home()
    store = ConfigStore(paths.config_file, home=paths.home)

    # Load (defaults for a missing file or missing fields)
    config = store.load()

    # Save (always the full model, atomically)
    store.save(config.model_copy(update={"port": 9999}))
"""

from __future__ import annotations

__all__ = [
    "CONFIG_KEYS",
    "ConfigStore",
    "ControllerPaths",
    "LabConfig",
    "default_install_path",
]

import logging
import re
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from labctl.constants import (
    CERT_FILENAME,
    CONFIG_FILENAME,
    DEFAULT_INSTALL_DIRNAME,
    DEFAULT_PORT,
    DEFAULT_USE_EXTENSION,
    DEFAULT_USE_TLS,
    KEY_FILENAME,
    LOG_FILENAME,
    MAX_PORT,
    MIN_PORT,
    PID_FILENAME,
)
from labctl.exceptions import ConfigSaveError
from labctl.models import ControllerEvent, TLSMaterial
from labctl.utils.file_helpers import atomic_write_text, get_home_dir
from labctl.utils.logging import log_event
from labctl.utils.validation import format_yes_no, parse_yes_no, strip_surrounding_quotes

# On-disk key for each LabConfig field
CONFIG_KEYS: dict[str, str] = {
    "install_path": "VENV_DIR",
    "port": "PORT",
    "use_tls": "USE_SSL",
    "use_extension": "USE_LSP",
}


def default_install_path(home: Path | None = None) -> str:
    """Default virtual environment location under the given home directory."""
    return str((home or get_home_dir()) / DEFAULT_INSTALL_DIRNAME)


# =============================================================================
# File Locations
# =============================================================================


@dataclass(frozen=True, slots=True)
class ControllerPaths:
    """Locations of every file the controller reads or writes.

    Attributes:
        home: Base directory all other paths are derived from.
    """

    home: Path

    @classmethod
    def from_home(cls, home: Path | None = None) -> ControllerPaths:
        """Build paths from an explicit home, or LABCTL_HOME / the user's home."""
        return cls(home=Path(home) if home is not None else get_home_dir())

    @property
    def config_file(self) -> Path:
        return self.home / CONFIG_FILENAME

    @property
    def log_file(self) -> Path:
        return self.home / LOG_FILENAME

    @property
    def pid_file(self) -> Path:
        return self.home / PID_FILENAME

    @property
    def cert_file(self) -> Path:
        return self.home / CERT_FILENAME

    @property
    def key_file(self) -> Path:
        return self.home / KEY_FILENAME

    @property
    def tls(self) -> TLSMaterial:
        """Certificate/key pair location."""
        return TLSMaterial(cert_path=self.cert_file, key_path=self.key_file)


# =============================================================================
# Settings Model
# =============================================================================


class LabConfig(BaseModel):
    """User-facing controller settings.

    Attributes:
        install_path: Virtual environment directory JupyterLab is installed into.
        port: TCP port the server listens on.
        use_tls: Generate a self-signed certificate and serve HTTPS.
        use_extension: Install the jupyterlab-lsp extension.
    """

    install_path: str = Field(
        default_factory=default_install_path,
        min_length=1,
        description="Virtual environment directory",
    )
    port: int = Field(
        default=DEFAULT_PORT,
        ge=MIN_PORT,
        le=MAX_PORT,
        description="JupyterLab port",
    )
    use_tls: bool = Field(default=DEFAULT_USE_TLS, description="Serve HTTPS with a self-signed certificate")
    use_extension: bool = Field(default=DEFAULT_USE_EXTENSION, description="Install jupyterlab-lsp")

    model_config = {"extra": "ignore"}

    @field_validator("install_path")
    @classmethod
    def _strip_install_path(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("install_path cannot be empty")
        return value

    @property
    def install_dir(self) -> Path:
        """Install path with ~ expanded."""
        return Path(self.install_path).expanduser()

    def to_file_content(self) -> str:
        """Render as KEY="value" lines."""
        values = {
            "install_path": self.install_path,
            "port": str(self.port),
            "use_tls": format_yes_no(self.use_tls),
            "use_extension": format_yes_no(self.use_extension),
        }
        lines = [f'{CONFIG_KEYS[name]}="{_escape(value)}"' for name, value in values.items()]
        return "\n".join(lines) + "\n"


# Characters a shell still interprets inside double quotes.
_DOUBLE_QUOTE_SPECIALS = re.compile(r'([\\"$`])')
_ESCAPED_SPECIAL = re.compile(r'\\([\\"$`])')
_DOUBLE_QUOTED = re.compile(r'"((?:[^"\\]|\\.)*)"')


def _escape(value: str) -> str:
    return _DOUBLE_QUOTE_SPECIALS.sub(r"\\\1", value)


def _unquote(raw: str) -> str:
    """Undo shell-style quoting of a config value.

    A single double-quoted string is decoded the way a shell reads it, so
    escaped dollar signs and backticks come back literally. Other forms go
    through shlex. Falls back to stripping a matching quote pair when
    the value is not valid shell syntax (e.g. an unbalanced quote in a
    hand-edited file).
    """
    quoted = _DOUBLE_QUOTED.fullmatch(raw.strip())
    if quoted:
        return _ESCAPED_SPECIAL.sub(r"\1", quoted.group(1))
    try:
        parts = shlex.split(raw, comments=True, posix=True)
    except ValueError:
        return strip_surrounding_quotes(raw.strip())
    return " ".join(parts)


def _parse_lines(text: str) -> dict[str, str]:
    """Parse KEY=value lines into a dict of raw (unquoted) values."""
    values: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        key, sep, raw = line.partition("=")
        if not sep:
            continue
        values[key.strip()] = _unquote(raw)
    return values


# =============================================================================
# Config Store
# =============================================================================


class ConfigStore:
    """Loads and saves LabConfig as a flat KEY="value" file.

    Load never fails: an absent file, unreadable file, or any missing or
    invalid field falls back to defaults. Save always writes the full model.
    """

    def __init__(self, path: Path, *, home: Path | None = None) -> None:
        """Initialize the store.

        Args:
            path: Config file location.
            home: Home directory used for the default install path.
        """
        self.path = path
        self._home = home

    def defaults(self) -> LabConfig:
        """Configuration used when nothing has been saved yet."""
        return LabConfig(install_path=default_install_path(self._home))

    def exists(self) -> bool:
        """Whether a config file has been saved."""
        return self.path.is_file()

    def load(self) -> LabConfig:
        """Load configuration, falling back to defaults field by field.

        Returns:
            Fully populated LabConfig.
        """
        config = self.defaults()

        if not self.path.exists():
            return config

        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            log_event(
                logging.WARNING,
                ControllerEvent(
                    event="config_read_failed",
                    message=f"Failed to read config file, using defaults: {e}",
                    path=str(self.path),
                    error_type=type(e).__name__,
                    error_message=str(e),
                ),
            )
            return config

        raw = _parse_lines(text)
        updates: dict[str, Any] = {}
        for field_name, key in CONFIG_KEYS.items():
            if key not in raw:
                continue
            value = self._convert(field_name, raw[key])
            if value is None:
                continue
            try:
                LabConfig.model_validate({**config.model_dump(), field_name: value})
            except ValidationError as e:
                self._warn_invalid(key, raw[key], str(e))
                continue
            updates[field_name] = value

        return LabConfig.model_validate({**config.model_dump(), **updates})

    def _convert(self, field_name: str, raw: str) -> Any:
        """Convert a raw string to the field's type, or None if unusable."""
        key = CONFIG_KEYS[field_name]
        if field_name in ("use_tls", "use_extension"):
            parsed = parse_yes_no(raw)
            if parsed is None:
                self._warn_invalid(key, raw, "expected y or n")
            return parsed
        if field_name == "port":
            try:
                return int(raw.strip())
            except ValueError:
                self._warn_invalid(key, raw, "expected an integer")
                return None
        if not raw.strip():
            return None
        return raw

    def _warn_invalid(self, key: str, raw: str, reason: str) -> None:
        log_event(
            logging.WARNING,
            ControllerEvent(
                event="config_value_invalid",
                message=f"Invalid value for {key}, using default: {reason}",
                path=str(self.path),
                details={"key": key, "value": raw},
            ),
        )

    def save(self, config: LabConfig) -> None:
        """Persist the full configuration atomically.

        Args:
            config: Settings to write.

        Raises:
            ConfigSaveError: If the file cannot be written.
        """
        try:
            atomic_write_text(self.path, config.to_file_content())
        except OSError as e:
            raise ConfigSaveError(self.path, str(e)) from e

        log_event(
            logging.INFO,
            ControllerEvent(
                event="config_saved",
                message="Configuration saved",
                path=str(self.path),
                details=config.model_dump(),
            ),
        )
