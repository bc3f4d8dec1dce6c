"""Shared CLI utility functions.

Commands pick their collaborators up from the click context object when
one is provided (tests pass fakes there) and build the real ones
otherwise.
"""

from __future__ import annotations

__all__ = [
    "get_controller",
    "get_runner",
]

import click

from labctl.controller import Controller
from labctl.runner import CommandRunner, SubprocessRunner


def get_controller(ctx: click.Context) -> Controller:
    """Return the Controller from ctx.obj, creating it on first use.

    Args:
        ctx: Current click context.

    Returns:
        The controller shared by this invocation.
    """
    root = ctx.find_root()
    if not isinstance(root.obj, Controller):
        root.obj = Controller.create()
    return root.obj


def get_runner(ctx: click.Context) -> CommandRunner:
    """Return the CommandRunner from ctx.obj, or a subprocess runner."""
    obj = ctx.find_root().obj
    if isinstance(obj, CommandRunner):
        return obj
    return SubprocessRunner()
