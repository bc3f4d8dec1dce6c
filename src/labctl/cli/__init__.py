"""Command-line interface for labctl.

Provides the interactive menu, the install/start/stop/uninstall
subcommands and the SentencePiece training wrapper.
"""

from .main import cli, main

__all__ = ["cli", "main"]
