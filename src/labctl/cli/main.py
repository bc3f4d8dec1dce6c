"""Main CLI entry point for labctl.

Defines the CLI group and registers all subcommands. Running ``labctl``
without a subcommand opens the interactive menu.

Commands:
    config              - Configuration (show, path)
    install             - Install JupyterLab (wizard or --yes)
    start               - Start the server in the background
    status              - Show install and runtime status
    stop                - Stop the server
    train-sentencepiece - Train a SentencePiece tokenizer
    uninstall           - Remove the installation

Subcommand help:
    labctl COMMAND -h         Show help for a specific command
"""

from __future__ import annotations

__all__ = ["cli", "main"]

import sys

import click

from labctl import __version__
from labctl.utils.cli import get_controller
from labctl.utils.file_helpers import get_controller_log_path
from labctl.utils.logging import configure_logging

from .commands.config import config
from .commands.install import install
from .commands.start import start
from .commands.status import status
from .commands.stop import stop
from .commands.train import train_sentencepiece
from .commands.uninstall import uninstall
from .menu import run_menu


class LabctlGroup(click.Group):
    """Group whose help ends with usage examples and environment notes."""

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        formatter.write(
            """
Interactive:
  labctl                           Open the menu (install/start/stop/uninstall)

Non-Interactive:
  labctl install --yes --port 8888 --tls
  labctl start
  labctl status --json
  labctl stop
  labctl uninstall --yes

Environment:
  LABCTL_HOME   Directory holding the settings, server log, PID file and
                TLS files (default: your home directory)
"""
        )


@click.group(
    cls=LabctlGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """labctl: JupyterLab install and server controller."""
    if version:
        click.echo(f"labctl {__version__}")
        sys.exit(0)
    if ctx.invoked_subcommand is None:
        run_menu(get_controller(ctx))


# Register commands
cli.add_command(config)
cli.add_command(install)
cli.add_command(start)
cli.add_command(status)
cli.add_command(stop)
cli.add_command(train_sentencepiece)
cli.add_command(uninstall)


def main() -> None:
    """CLI entry point."""
    configure_logging(get_controller_log_path())
    cli()
