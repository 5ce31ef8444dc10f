"""HTML escaping primitive and the `Markup` safe-string type."""

from __future__ import annotations

from typing import Any

# Single-pass escaping via str.translate()
_ESCAPE_TABLE = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#39;",
    }
)


class Markup(str):
    """A string that is already safe for output and is never re-escaped.

    Example:
        >>> html_escape(Markup("<b>bold</b>"))
        '<b>bold</b>'
    """

    __slots__ = ()

    def __html__(self) -> Markup:
        return self

    def __repr__(self) -> str:
        return f"Markup({str.__repr__(self)})"


def html_escape(value: Any) -> str:
    """Escape ``& < > " '`` in the textual form of `value`.

    Objects implementing ``__html__`` (such as `Markup`) are trusted and
    returned as their HTML form unchanged.
    """
    if hasattr(value, "__html__"):
        return str(value.__html__())
    return str(value).translate(_ESCAPE_TABLE)
