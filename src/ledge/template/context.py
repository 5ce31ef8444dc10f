"""Runtime resolution context — the per-render state of a compiled template.

Every call to a compiled render function receives exactly one `Context`.
The context owns an ordered stack of frames (plain dicts). The root frame
at index 0 holds the data passed to ``render()``; tag bodies that bind
local names (``@each`` iterations, slot bodies) push a frame on entry and
pop it on exit, so their bindings shadow outer names only for the duration
of the body.

Generated code looks like this:

    ```python
    def render(ctx, template):
        buf = []
        _append = buf.append

        def _each_1(user, loop):
            with ctx.frame():
                ctx.set_on_frame('user', user)
                ctx.set_on_frame('loop', loop)
                _append(ctx.escape(ctx.access(ctx.resolve('user'), 'username')))

        ctx.loop(ctx.resolve('users'), _each_1)
        return ''.join(buf)
    ```

Thread-Safety:
A context is created per render call and never shared, so concurrent
renders of the same template need no locking. Within one render the frame
stack is only touched by the single in-flight control flow.

"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping, Sized
from contextlib import contextmanager
from typing import Any

from ledge.environment.exceptions import ErrorCode, TemplateRuntimeError
from ledge.template.helpers import UNDEFINED, access, stringify
from ledge.template.loop_context import LoopMeta
from ledge.utils.html import Markup, html_escape

logger = logging.getLogger(__name__)

# Deep enough for any real component/include hierarchy while catching
# runaway recursion early.
DEFAULT_MAX_DEPTH = 50


class Context:
    """Scoped variable resolution, loop iteration and output escaping.

    Attributes:
        frames: Frame stack; index 0 is the root frame
        template_name: Template currently executing (for error messages)
        line: Last template line reached (updated by generated code)
        filename: File of `line` when the template was merged from layouts
        depth: Include/component nesting depth of this render
        max_depth: Nesting limit before `TemplateRuntimeError` is raised

    Example:
        >>> ctx = Context({"name": "root"})
        >>> ctx.new_frame()
        >>> ctx.set_on_frame("name", "inner")
        >>> ctx.resolve("name")
        'inner'
        >>> ctx.remove_frame()
        >>> ctx.resolve("name")
        'root'
    """

    __slots__ = ("depth", "filename", "frames", "line", "max_depth", "template_name")

    def __init__(
        self,
        data: Mapping[str, Any] | None = None,
        *,
        globals: Mapping[str, Any] | None = None,
        template_name: str | None = None,
        depth: int = 0,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        root: dict[str, Any] = dict(globals) if globals else {}
        if data:
            root.update(data)
        self.frames: list[dict[str, Any]] = [root]
        self.template_name = template_name
        self.line = 0
        self.filename: str | None = None
        self.depth = depth
        self.max_depth = max_depth

    # ─────────────────────────────────────────────────────────────────────────
    # Frames
    # ─────────────────────────────────────────────────────────────────────────

    def new_frame(self) -> None:
        """Push an empty frame."""
        self.frames.append({})

    def remove_frame(self) -> None:
        """Pop the topmost frame. The root frame is never removed."""
        if len(self.frames) == 1:
            raise TemplateRuntimeError(
                "Cannot remove the root frame",
                template_name=self.template_name,
                lineno=self.line or None,
            )
        self.frames.pop()

    @contextmanager
    def frame(self) -> Iterator[dict[str, Any]]:
        """Scope a frame to a ``with`` body; it is removed on every exit path."""
        self.new_frame()
        try:
            yield self.frames[-1]
        finally:
            self.remove_frame()

    def set_on_frame(self, name: str, value: Any) -> None:
        """Bind `name` in the topmost frame only."""
        self.frames[-1][name] = value

    def resolve(self, name: str) -> Any:
        """Look `name` up from the topmost frame down to the root.

        Returns `UNDEFINED` when no frame binds it; never raises.
        """
        for frame in reversed(self.frames):
            if name in frame:
                return frame[name]
        return UNDEFINED

    # ─────────────────────────────────────────────────────────────────────────
    # Iteration
    # ─────────────────────────────────────────────────────────────────────────

    def loop(self, collection: Any, body: Callable[[Any, LoopMeta], Any]) -> int:
        """Call ``body(element, loop_meta)`` for each element of `collection`.

        Sequences (and any other iterable) use the position as key; mappings
        iterate their entries with the entry key. Does not push frames: the
        body is expected to do that itself.

        Iterables without a size are consumed one item ahead so that
        `LoopMeta.is_last` is exact; their `total` is None.

        Returns:
            Number of iterations performed (0 for empty, None or undefined).
        """
        if collection is None or collection is UNDEFINED:
            return 0

        total = len(collection) if isinstance(collection, Sized) else None
        if isinstance(collection, Mapping):
            entries: Iterator[tuple[Any, Any]] = iter(collection.items())
        else:
            entries = enumerate(collection)

        current = next(entries, None)
        index = 0
        while current is not None:
            following = next(entries, None)
            key, element = current
            body(
                element,
                LoopMeta(
                    index=index,
                    key=key,
                    is_first=index == 0,
                    is_last=following is None,
                    total=total,
                ),
            )
            current = following
            index += 1
        return index

    # ─────────────────────────────────────────────────────────────────────────
    # Output
    # ─────────────────────────────────────────────────────────────────────────

    def escape(self, value: Any) -> str:
        """Escape a value for interpolation into markup.

        Undefined and None render as an empty string; `Markup` is trusted.
        """
        if value is None or value is UNDEFINED:
            return ""
        return html_escape(value)

    def stringify(self, value: Any) -> str:
        """Textual form of a value for raw (unescaped) interpolation."""
        return stringify(value)

    def safe(self, value: Any) -> Markup:
        """Mark a value as safe so `escape()` leaves it untouched."""
        return Markup(stringify(value))

    def access(self, value: Any, key: Any) -> Any:
        """Attribute/item lookup for ``a.b`` and ``a[b]``; missing → UNDEFINED."""
        return access(value, key)

    # ─────────────────────────────────────────────────────────────────────────
    # Nesting
    # ─────────────────────────────────────────────────────────────────────────

    def check_depth(self, template_name: str) -> None:
        """Raise when rendering `template_name` would exceed `max_depth`."""
        if self.depth >= self.max_depth:
            raise TemplateRuntimeError(
                f"Maximum include depth exceeded ({self.max_depth}) "
                f"when rendering '{template_name}'",
                template_name=self.template_name,
                lineno=self.line or None,
                code=ErrorCode.INCLUDE_DEPTH,
                suggestion="Check for circular includes: A → B → A",
            )

    @contextmanager
    def nested(self, template_name: str) -> Iterator[Context]:
        """Run an included template against this context's frames.

        Tracks depth and swaps the template name and line markers for the
        duration of the include.
        """
        self.check_depth(template_name)
        outer = self.template_name, self.line, self.filename
        self.template_name, self.line, self.filename = template_name, 0, None
        self.depth += 1
        try:
            yield self
        finally:
            self.depth -= 1
            self.template_name, self.line, self.filename = outer

    def child(
        self,
        data: Mapping[str, Any],
        template_name: str,
        globals: Mapping[str, Any] | None = None,
    ) -> Context:
        """Create an isolated context for a component render.

        The child shares no frames with this context, only the depth count.
        """
        self.check_depth(template_name)
        return Context(
            data,
            globals=globals,
            template_name=template_name,
            depth=self.depth + 1,
            max_depth=self.max_depth,
        )

    def debug(self) -> None:
        """Log the names visible in each frame (the ``@debugger`` tag)."""
        for level, frame in enumerate(self.frames):
            logger.debug(
                "%s:%s frame %d: %s",
                self.template_name or "<template>",
                self.line,
                level,
                sorted(frame),
            )

    def __repr__(self) -> str:
        return f"<Context {self.template_name or '<template>'} frames={len(self.frames)}>"
