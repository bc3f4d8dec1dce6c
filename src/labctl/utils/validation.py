"""Validation utilities for labctl.

Provides reusable parsing/validation functions for configuration values
and command-line arguments.
"""

from __future__ import annotations

__all__ = [
    "FALSE_WORDS",
    "TRUE_WORDS",
    "format_yes_no",
    "is_non_negative_integer",
    "parse_yes_no",
    "strip_surrounding_quotes",
]

import re

TRUE_WORDS: frozenset[str] = frozenset({"y", "yes", "true", "1"})
FALSE_WORDS: frozenset[str] = frozenset({"n", "no", "false", "0"})

# Digits only: no sign, no whitespace, no decimal point
_DIGITS_PATTERN = re.compile(r"^[0-9]+$")


def is_non_negative_integer(value: str) -> bool:
    """Check if a string consists only of ASCII digits.

    Args:
        value: Raw argument string.

    Returns:
        True for strings like "32000"; False for "", "-1", "1.5", "abc".
    """
    return bool(_DIGITS_PATTERN.fullmatch(value))


def parse_yes_no(value: str) -> bool | None:
    """Parse a yes/no answer as written to the config file.

    Args:
        value: Raw value (case-insensitive, surrounding whitespace ignored).

    Returns:
        True or False for recognised words, None otherwise.
    """
    word = value.strip().lower()
    if word in TRUE_WORDS:
        return True
    if word in FALSE_WORDS:
        return False
    return None


def format_yes_no(value: bool) -> str:
    """Render a boolean the way the config file stores it ("y" / "n")."""
    return "y" if value else "n"


def strip_surrounding_quotes(value: str) -> str:
    """Strip matching surrounding quotes from a string.

    Handles both single and double quotes. Only strips if quotes match
    at both ends.

    Examples:
        '"value"' -> 'value'
        "'value'" -> 'value'
        '"value'  -> '"value' (no change, mismatched)
        'value'   -> 'value' (no change, no quotes)
    """
    if len(value) >= 2:
        if (value[0] == '"' and value[-1] == '"') or (value[0] == "'" and value[-1] == "'"):
            return value[1:-1]
    return value
