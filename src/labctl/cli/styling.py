"""Terminal styling for controller output.

Messages carry a bracketed tag so they stay readable without color
(piped output, CliRunner):

    [INFO]  blue      progress and "nothing to do" notices
    [OK]    green     completed operations
    [WARN]  yellow    degraded but not failed
    [ERROR] red       failed operations (printed to stderr by callers)
"""

from __future__ import annotations

__all__ = [
    "style_dim",
    "style_error",
    "style_header",
    "style_info",
    "style_label",
    "style_state",
    "style_success",
    "style_warning",
]

import click


def _tagged(tag: str, color: str, message: str) -> str:
    return click.style(f"[{tag}]", fg=color, bold=True) + f" {message}"


def style_header(title: str) -> str:
    """Banner line for the menu and wizard.

    Example:
        >>> click.echo(style_header("JupyterLab Controller"))
        === JupyterLab Controller ===
    """
    return click.style(f"=== {title} ===", fg="cyan", bold=True)


def style_label(label: str) -> str:
    """Cyan `label:` for key/value rows."""
    return click.style(f"{label}:", fg="cyan", bold=True)


def style_info(message: str) -> str:
    return _tagged("INFO", "blue", message)


def style_success(message: str) -> str:
    return _tagged("OK", "green", message)


def style_warning(message: str) -> str:
    return _tagged("WARN", "yellow", message)


def style_error(message: str) -> str:
    return _tagged("ERROR", "red", message)


def style_dim(message: str) -> str:
    return click.style(message, dim=True)


def style_state(active: bool, on: str, off: str) -> str:
    """Green word for an active state, yellow for an inactive one.

    Example:
        >>> style_state(status.running, "running", "stopped")
    """
    return click.style(on, fg="green") if active else click.style(off, fg="yellow")
