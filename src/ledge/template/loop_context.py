"""Loop iteration metadata for ``@each`` blocks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class LoopMeta:
    """Per-iteration metadata bound as `loop` inside ``@each`` bodies.

    Properties:
        index: 0-based iteration count (0, 1, 2, ...)
        key: Sequence index, or the entry key when looping over a mapping
        is_first: True on the first iteration
        is_last: True on the final iteration
        total: Number of items, or None when the collection has no size

    Example:
            ```
            <ul>
            @each((fruit, key) in fruits)
              <li class="{{ loop.cycle('odd', 'even') }}">
                {{ loop.index + 1 }}/{{ loop.total }}: {{ fruit }}
              </li>
            @end
            </ul>
            ```

    """

    index: int
    key: Any
    is_first: bool
    is_last: bool
    total: int | None = None

    @property
    def first(self) -> bool:
        return self.is_first

    @property
    def last(self) -> bool:
        return self.is_last

    def cycle(self, *values: Any) -> Any:
        """Cycle through the given values.

        Example:
            {{ loop.cycle('odd', 'even') }}
        """
        if not values:
            return None
        return values[self.index % len(values)]

    def __repr__(self) -> str:
        total = "?" if self.total is None else self.total
        return f"<LoopMeta {self.index + 1}/{total} key={self.key!r}>"
