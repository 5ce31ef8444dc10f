"""Terminal color helpers for template error messages.

ANSI colors with TTY detection. Honours ``NO_COLOR`` (https://no-color.org/)
and ``FORCE_COLOR``.
"""

from __future__ import annotations

import os
import re
import sys
from typing import Literal

_COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "cyan": "\033[36m",
    "bright_red": "\033[91m",
}

ColorName = Literal["reset", "bold", "dim", "red", "green", "yellow", "cyan", "bright_red"]

_ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


def _should_use_colors() -> bool:
    """Check if the terminal supports colors and the user allows them."""
    if os.environ.get("FORCE_COLOR"):
        return True
    if os.environ.get("NO_COLOR"):
        return False
    return sys.stdout.isatty()


_USE_COLORS = _should_use_colors()


def supports_color() -> bool:
    return _USE_COLORS


def colorize(text: str, *colors: ColorName) -> str:
    """Apply ANSI color codes to text.

    Example:
        >>> colorize("Error", "red", "bold")
        '\033[31m\033[1mError\033[0m'  # if colors supported
        'Error'  # if colors not supported
    """
    if not _USE_COLORS or not colors:
        return text
    prefix = "".join(_COLORS.get(color, "") for color in colors)
    return f"{prefix}{text}{_COLORS['reset']}"


def strip_colors(text: str) -> str:
    """Remove ANSI color codes from text."""
    return _ANSI_ESCAPE.sub("", text)


def location(text: str) -> str:
    return colorize(text, "cyan")


def hint(text: str) -> str:
    return colorize(text, "green")


def dim_text(text: str) -> str:
    return colorize(text, "dim")


def format_source_line(lineno: int, content: str, is_error: bool = False) -> str:
    """Format a numbered source line, highlighting the error line.

    Example:
        >>> format_source_line(42, "{{ user }}", is_error=True)
        '\033[33m> 42\033[0m | \033[91m{{ user }}\033[0m'
    """
    marker = ">" if is_error else " "
    number = colorize(f"{marker}{lineno:>3}", "yellow")
    body = colorize(content, "bright_red") if is_error else dim_text(content)
    return f"{number} | {body}"
