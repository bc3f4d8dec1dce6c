"""TLS material utilities for the notebook server.

Provides the self-signed certificate command, best-effort removal of a
stale pair, pair validation, and certificate expiry inspection for
status output.
"""

from __future__ import annotations

__all__ = [
    "build_self_signed_command",
    "classify_expiry",
    "read_certificate_expiry",
    "remove_tls_material",
    "validate_tls_pair",
]

import logging
import ssl
from datetime import datetime, timezone
from pathlib import Path

from cryptography import x509

from labctl.constants import (
    CERT_EXPIRY_CRITICAL_DAYS,
    CERT_EXPIRY_WARNING_DAYS,
    TLS_CERT_DAYS,
    TLS_KEY_BITS,
)
from labctl.models import CertificateExpiry, ControllerEvent, ExpiryStatus, TLSMaterial
from labctl.utils.logging import log_event


def build_self_signed_command(material: TLSMaterial, common_name: str) -> list[str]:
    """Build the openssl invocation for a self-signed certificate.

    Args:
        material: Destination cert/key paths.
        common_name: Subject CN, normally the host name.

    Returns:
        argv list for CommandRunner.run().
    """
    return [
        "openssl",
        "req",
        "-x509",
        "-nodes",
        "-days",
        str(TLS_CERT_DAYS),
        "-newkey",
        f"rsa:{TLS_KEY_BITS}",
        "-keyout",
        str(material.key_path),
        "-out",
        str(material.cert_path),
        "-subj",
        f"/CN={common_name}",
    ]


def remove_tls_material(material: TLSMaterial) -> list[Path]:
    """Delete certificate and key, ignoring files that cannot be removed.

    Args:
        material: Pair to delete.

    Returns:
        Paths that were actually removed.
    """
    removed: list[Path] = []
    for path in (material.cert_path, material.key_path):
        try:
            path.unlink()
            removed.append(path)
        except FileNotFoundError:
            continue
        except OSError as e:
            log_event(
                logging.WARNING,
                ControllerEvent(
                    event="tls_cleanup_failed",
                    message=f"Could not remove {path}",
                    path=str(path),
                    error_type=type(e).__name__,
                    error_message=str(e),
                ),
            )
    return removed


def validate_tls_pair(material: TLSMaterial) -> list[str]:
    """Validate a certificate/key pair for user feedback.

    Checks that both files exist, load as PEM, match each other and have
    not expired.

    Args:
        material: Pair to check.

    Returns:
        List of error messages. Empty list means the pair is usable.
    """
    errors: list[str] = []

    if not material.cert_path.exists():
        errors.append(f"Certificate not found: {material.cert_path}")
    if not material.key_path.exists():
        errors.append(f"Private key not found: {material.key_path}")
    if errors:
        return errors

    try:
        ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        ctx.load_cert_chain(str(material.cert_path), str(material.key_path))
    except ssl.SSLError as e:
        errors.append(f"Invalid TLS certificate/key pair: {e}")
        return errors

    try:
        expiry = read_certificate_expiry(material.cert_path)
    except (OSError, ValueError) as e:
        errors.append(f"Could not check certificate expiry: {e}")
    else:
        if expiry.status == "expired":
            errors.append(f"Certificate has expired ({-expiry.days_left} days ago)")

    return errors


def classify_expiry(days_left: int) -> ExpiryStatus:
    """Map remaining validity onto the status shown by ``labctl status``."""
    if days_left < 0:
        return "expired"
    if days_left <= CERT_EXPIRY_CRITICAL_DAYS:
        return "critical"
    if days_left <= CERT_EXPIRY_WARNING_DAYS:
        return "warning"
    return "valid"


def read_certificate_expiry(cert_path: Path, *, now: datetime | None = None) -> CertificateExpiry:
    """Read the notAfter date of a PEM certificate.

    Args:
        cert_path: Certificate written by the installer.
        now: Reference time, defaults to the current UTC time.

    Raises:
        OSError: The file cannot be read.
        ValueError: The file is not a PEM certificate.
    """
    cert = x509.load_pem_x509_certificate(cert_path.read_bytes())
    expires_at = cert.not_valid_after_utc
    days_left = (expires_at - (now or datetime.now(timezone.utc))).days
    return CertificateExpiry(expires_at=expires_at, days_left=days_left, status=classify_expiry(days_left))
