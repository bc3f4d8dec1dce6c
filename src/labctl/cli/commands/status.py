"""Status command for labctl CLI.

Shows install and server state, and certificate health when TLS is on.
"""

from __future__ import annotations

__all__ = ["status"]

import json
from typing import Any

import click

from labctl.cli.styling import style_label, style_state, style_warning
from labctl.models import SupervisorStatus, TLSMaterial
from labctl.tls import read_certificate_expiry, validate_tls_pair
from labctl.utils.cli import get_controller


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Show JupyterLab install and runtime status.

    \b
    Examples:
        labctl status         # Human-readable
        labctl status --json  # For scripts
    """
    ctrl = get_controller(ctx)
    config = ctrl.load_config()
    snapshot = ctrl.supervisor.status(config)
    certificate = _certificate_report(ctrl.paths.tls)

    if as_json:
        result = snapshot.model_dump()
        result["certificate"] = certificate
        click.echo(json.dumps(result, indent=2))
        return

    _print_status_formatted(snapshot, certificate)


def _certificate_report(tls: TLSMaterial) -> dict[str, Any] | None:
    """Collect certificate health, or None when no TLS files exist.

    Args:
        tls: Certificate/key pair location.

    Returns:
        A "problems" list, plus the CertificateExpiry fields when the
        certificate can be read.
    """
    if tls.is_partial():
        missing = tls.key_path if tls.cert_path.exists() else tls.cert_path
        return {"problems": [f"Incomplete TLS pair, {missing} is missing; the server runs without TLS"]}
    if not tls.is_complete():
        return None

    report: dict[str, Any] = {"problems": validate_tls_pair(tls)}
    try:
        expiry = read_certificate_expiry(tls.cert_path)
    except (OSError, ValueError):
        return report
    report.update(expiry.model_dump(mode="json"))
    return report


def _print_status_formatted(snapshot: SupervisorStatus, certificate: dict[str, Any] | None) -> None:
    """Print status in human-readable format.

    Args:
        snapshot: Supervisor status.
        certificate: Output of _certificate_report.
    """
    click.echo(f"{style_label('Installed')} {style_state(snapshot.installed, 'yes', 'no')}")
    server = style_state(snapshot.running, f"running (PID {snapshot.pid})", "stopped")
    click.echo(f"{style_label('Server')} {server}")
    click.echo(f"{style_label('Install path')} {snapshot.install_path}")
    click.echo(f"{style_label('Port')} {snapshot.port}")
    click.echo(f"{style_label('TLS')} {style_state(snapshot.tls_enabled, 'enabled', 'disabled')}")
    click.echo(f"{style_label('Log')} {snapshot.log_path}")

    if certificate is None:
        return
    if certificate["problems"]:
        for problem in certificate["problems"]:
            click.echo(style_warning(problem))
        return

    days = certificate["days_left"]
    if certificate["status"] in ("critical", "warning"):
        click.echo(style_warning(f"Certificate expires in {days} days. Reinstall to regenerate it."))
    else:
        click.echo(f"{style_label('Certificate expires')} {certificate['expires_at']}")
