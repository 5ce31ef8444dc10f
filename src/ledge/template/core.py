"""Ledge Template — compiled template object ready for rendering.

The Template class wraps the generated render function and provides the
``render()`` API, plus the two entry points generated code calls back
into: ``include()`` and ``render_component()``.

Architecture:
    ```
    Template
    ├── _env_ref: WeakRef[Environment]  # Prevents circular refs
    ├── _render_func: callable          # Extracted render() function
    ├── source: str                     # Generated Python source
    └── name, filename                  # For error messages
    ```

StringBuilder Pattern:
Generated code uses ``buf.append()`` + ``''.join(buf)``:
    ```python
    def render(ctx, template):
        buf = []
        _append = buf.append
        _append('Hello, ')
        ctx.line = 1
        _append(ctx.escape(ctx.resolve('name')))
        return ''.join(buf)
    ```

Thread-Safety:
- Templates are immutable after construction
- ``render()`` creates a fresh `Context` per call
- Multiple threads can call ``render()`` concurrently

"""

from __future__ import annotations

import weakref
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from ledge.environment.exceptions import (
    TemplateError,
    TemplateRuntimeError,
    build_source_snippet,
)
from ledge.template.context import Context
from ledge.template.helpers import UNDEFINED
from ledge.utils.html import Markup

if TYPE_CHECKING:
    from ledge.environment.core import Environment


class Template:
    """Compiled template ready for rendering.

    Thread-Safety:
        - Template object is immutable after construction
        - Each ``render()`` call creates its own `Context`
        - Multiple threads can render the same template simultaneously

    Memory Safety:
        Uses ``weakref.ref(env)`` so a template does not keep its
        environment alive.

    Attributes:
        name: Template reference (for error messages)
        filename: Source file path (for error messages)
        source: Generated Python source of the render function

    Error Enhancement:
        Runtime errors are caught and enhanced with template context:
            ```
            TemplateRuntimeError: Runtime Error: ZeroDivisionError: division by zero
              Location: pages.stats:4
            ```

    Example:
            >>> from ledge import Environment
            >>> env = Environment()
            >>> t = env.from_string("Hello, {{ name }}!")
            >>> t.render(name="World")
            'Hello, World!'

            >>> t.render({"name": "World"})  # Dict context also works
            'Hello, World!'

    """

    __slots__ = (
        "_env_ref",
        "_render_func",
        "_sources",
        "filename",
        "name",
        "source",
    )

    def __init__(
        self,
        env: Environment,
        source: str,
        name: str | None,
        filename: str | None,
        sources: Mapping[str | None, str] | None = None,
    ):
        """Compile the generated render function.

        Args:
            env: Parent Environment (stored as weak reference)
            source: Generated Python source defining ``render(ctx, template)``
            name: Template name (for error messages)
            filename: Source filename (for error messages)
            sources: Template text per filename (the template and its layouts),
                for runtime error snippets
        """
        self._env_ref: weakref.ref[Environment] = weakref.ref(env)
        self.name = name
        self.filename = filename
        self.source = source
        self._sources = dict(sources) if sources else {}

        namespace: dict[str, Any] = {"Markup": Markup, "UNDEFINED": UNDEFINED}
        exec(compile(source, filename or "<template>", "exec"), namespace)
        self._render_func: Callable[[Context, Template], str] = namespace["render"]

    @property
    def _env(self) -> Environment:
        """Get the Environment (dereferences weak reference)."""
        env = self._env_ref()
        if env is None:
            raise RuntimeError(
                f"Environment has been garbage collected (template: {self.name or 'unknown'})"
            )
        return env

    def render(self, data: Mapping[str, Any] | None = None, **kwargs: Any) -> str:
        """Render template with given data.

        Args:
            data: Dict of template variables
            **kwargs: Template variables as keyword arguments (win over `data`)

        Returns:
            Rendered template as string

        Example:
            >>> t.render(name="World")
            'Hello, World!'
        """
        env = self._env
        values = dict(data) if data else {}
        values.update(kwargs)
        ctx = Context(
            values,
            globals=env.globals,
            template_name=self.name,
            max_depth=env.max_include_depth,
        )
        return self._run(ctx)

    def _run(self, ctx: Context) -> str:
        try:
            return self._render_func(ctx, self)
        except TemplateError:
            raise
        except Exception as e:
            raise self._enhance_error(e, ctx) from e

    # ─────────────────────────────────────────────────────────────────────────
    # Entry points for generated code
    # ─────────────────────────────────────────────────────────────────────────

    def include(self, ctx: Context, reference: str) -> Markup:
        """Render `reference` against the frames of `ctx` (``@include``)."""
        template = self._env.get_template(reference)
        with ctx.nested(template.name or reference):
            return Markup(template._run(ctx))

    def render_component(
        self,
        ctx: Context,
        reference: str,
        props: Mapping[str, Any],
        slots: Mapping[str, Callable[..., Markup]],
    ) -> Markup:
        """Render `reference` in an isolated context (``@component``).

        The component's root frame holds the environment globals, then
        `props`, then `slots`.
        """
        env = self._env
        template = env.get_template(reference)
        child = ctx.child(
            {**props, "slots": dict(slots)},
            template.name or reference,
            globals=env.globals,
        )
        return Markup(template._run(child))

    def _enhance_error(self, error: Exception, ctx: Context) -> TemplateRuntimeError:
        """Convert a generic exception into a TemplateRuntimeError.

        Adds the template (or layout) name, the last line marker reached and a
        source snippet around it.
        """
        error_str = str(error).strip()
        error_type = type(error).__name__
        message = f"{error_type}: {error_str}" if error_str else f"{error_type} (no details available)"

        lineno = ctx.line or None
        template_name = ctx.template_name
        filename = self.filename
        if ctx.filename is not None and ctx.filename != self.filename:
            template_name = filename = ctx.filename

        snippet = None
        source = self._sources.get(filename)
        if source and lineno:
            snippet = build_source_snippet(source, lineno)

        suggestion = None
        if isinstance(error, TypeError) and "not callable" in error_str:
            suggestion = "Check that the called name is defined (undefined names resolve to UNDEFINED)"

        return TemplateRuntimeError(
            message,
            template_name=template_name,
            lineno=lineno,
            source_snippet=snippet,
            suggestion=suggestion,
        )

    def __repr__(self) -> str:
        return f"<Template {self.name or '(inline)'}>"
