"""CLI utility functions.

Re-exports helpers for convenient importing.
"""

from .helpers import get_controller, get_runner

__all__ = [
    "get_controller",
    "get_runner",
]
