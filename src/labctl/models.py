"""Pydantic models for labctl.

This module contains two categories of models:

Runtime Models (FrozenModel-based):
- FrozenModel: Base class for immutable models
- ProcessHandle: A successfully started server process
- TLSMaterial: Certificate/key pair used to serve HTTPS
- SupervisorStatus: Snapshot of install and process state
- CertificateExpiry: End of validity of the server certificate

Logging Models:
- ControllerEvent: Structured log entries for controller operations
"""

from __future__ import annotations

__all__ = [
    # Runtime Models
    "CertificateExpiry",
    "ExpiryStatus",
    "FrozenModel",
    "ProcessHandle",
    "SupervisorStatus",
    "TLSMaterial",
    # Logging Models
    "ControllerEvent",
]

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Runtime Models
# =============================================================================


class FrozenModel(BaseModel):
    """Base class for immutable Pydantic models."""

    model_config = ConfigDict(frozen=True)


class ProcessHandle(FrozenModel):
    """A started JupyterLab server.

    Attributes:
        pid: Process ID recorded in the PID file.
        log_path: File receiving the server's combined output.
        access_url: Tokenized URL scraped from the log, if found yet.
    """

    pid: int
    log_path: Path
    access_url: Optional[str] = None


class TLSMaterial(FrozenModel):
    """Certificate and private key for the notebook server.

    Both files exist or the pair is treated as absent.

    Attributes:
        cert_path: PEM certificate path.
        key_path: PEM private key path.
    """

    cert_path: Path
    key_path: Path

    def is_complete(self) -> bool:
        """Return True when both certificate and key are on disk."""
        return self.cert_path.is_file() and self.key_path.is_file()

    def is_partial(self) -> bool:
        """Return True when exactly one of the two files is on disk."""
        return self.cert_path.is_file() != self.key_path.is_file()


class SupervisorStatus(FrozenModel):
    """Point-in-time view of the controller state.

    Attributes:
        installed: Whether the install directory exists.
        running: Whether the PID file points at a live process.
        pid: PID of the live process, if running.
        install_path: Configured install directory.
        port: Configured port.
        tls_enabled: Whether a complete TLS pair is on disk.
        log_path: Server log file.
    """

    installed: bool
    running: bool
    pid: Optional[int] = None
    install_path: str
    port: int
    tls_enabled: bool
    log_path: str


ExpiryStatus = Literal["valid", "warning", "critical", "expired"]


class CertificateExpiry(FrozenModel):
    """When the server certificate stops being valid.

    Attributes:
        expires_at: The certificate's notAfter time (UTC).
        days_left: Whole days until expires_at, negative once it has passed.
        status: Urgency bucket derived from days_left.
    """

    expires_at: datetime
    days_left: int
    status: ExpiryStatus


# =============================================================================
# Logging Models
# =============================================================================


class ControllerEvent(BaseModel):
    """Structured log entry for controller operations.

    Serialized with exclude_none=True so only populated fields are written.

    Attributes:
        event: Machine-readable event name (e.g. "server_started").
        message: Human-readable description.
        pid: Managed process ID, when relevant.
        step: Installer step description, when relevant.
        path: File or directory the event concerns.
        error_type: Exception class name for failures.
        error_message: Exception message for failures.
        details: Additional context.
    """

    event: str
    message: str
    pid: Optional[int] = None
    step: Optional[str] = None
    path: Optional[str] = None
    error_type: Optional[str] = None
    error_message: Optional[str] = None
    details: Optional[Dict[str, Any]] = Field(default=None)
