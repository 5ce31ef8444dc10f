"""Pure runtime helpers used by `Context` and compiled templates.

Thread-Safety:
All functions are stateless and safe for concurrent use. `UNDEFINED` is an
immutable singleton.

"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


class Undefined:
    """Value of an identifier that no frame binds.

    Falsy, empty when rendered and iterates as an empty sequence, so
    optional data renders as nothing instead of aborting the render.
    """

    __slots__ = ()
    _instance: Undefined | None = None

    def __new__(cls) -> Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __str__(self) -> str:
        return ""

    def __bool__(self) -> bool:
        return False

    def __len__(self) -> int:
        return 0

    def __iter__(self):
        return iter(())

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED = Undefined()


def access(value: Any, key: Any) -> Any:
    """Look up `key` on `value`: mapping item, then attribute, then item.

    Missing keys and lookups on undefined or None values yield `UNDEFINED`.

    Example:
        >>> access({"name": "Ada"}, "name")
        'Ada'
        >>> access(None, "name")
        UNDEFINED
    """
    if value is UNDEFINED or value is None:
        return UNDEFINED

    if isinstance(value, Mapping):
        try:
            return value[key]
        except (KeyError, TypeError):
            pass

    if isinstance(key, str):
        try:
            return getattr(value, key)
        except AttributeError:
            pass

    try:
        return value[key]
    except (KeyError, IndexError, TypeError):
        return UNDEFINED


def stringify(value: Any) -> str:
    """Convert value to string for unescaped output.

    `UNDEFINED` and None produce an empty string rather than ``'None'``.
    """
    if value is None or value is UNDEFINED:
        return ""
    return str(value)
