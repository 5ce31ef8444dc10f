"""Ledge Compiler Core — main Compiler class.

The Compiler walks a (layout-merged) token tree and writes the Python
source of a single render function. Tag compilation is split across
mixins; each registered tag points at the method that compiles it.

Design Principles:
1. **Source text**: Generate Python source lines, compiled once by `Template`
2. **StringBuilder**: Output via `_append(...)`, join at end
3. **Scoped frames**: Tag bodies that bind names run inside `with ctx.frame():`
4. **O(1) dispatch**: Dict-based token kind → handler lookup, tag name → TagSpec

Generated code:
    ```python
    def render(ctx, template):
        buf = []
        _append = buf.append
        _append('<h1>')
        ctx.line = 1
        _append(ctx.escape(ctx.access(ctx.resolve('page'), 'title')))
        _append('</h1>\\n')
        return ''.join(buf)
    ```

"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import contextmanager
from typing import TYPE_CHECKING

from ledge._types import Token, TokenKind
from ledge.compiler.expressions import ExpressionCompiler
from ledge.compiler.statements import StatementCompilationMixin
from ledge.environment.exceptions import ErrorCode, TemplateSyntaxError
from ledge.parser import parse_expression

if TYPE_CHECKING:
    from ledge.compiler.tags import TagSpec
    from ledge.nodes import Expr

logger = logging.getLogger(__name__)

_INDENT = "    "


class Compiler(StatementCompilationMixin):
    """Compile a Ledge token tree to Python source.

    The generated source defines ``render(ctx, template)`` where `ctx` is the
    per-render `Context` and `template` is the owning `Template` (used by
    ``@include`` and ``@component`` to reach the environment).

    Attributes:
        filename: File of the token being compiled; tokens of a merged
            layout tree come from several files.
        name: Template name for log messages

    Custom tags receive the compiler and their token, and use the public
    helpers to emit code:
        ```python
        def compile_upper(compiler, token):
            expr = compiler.parse(token)
            compiler.writeln(f"_append(ctx.escape(str({compiler.render(expr)}).upper()))")

        env.register_tag("upper", TagSpec(block=False, seekable=True, compile=compile_upper))
        ```

    Example:
        >>> from ledge import Environment
        >>> env = Environment()
        >>> print(Compiler(env.tags).compile(env.parse("Hi {{ name }}")))
        def render(ctx, template):
            buf = []
            ...

    """

    __slots__ = (
        "_counter",
        "_default_filename",
        "_expressions",
        "_level",
        "_lines",
        "_token_dispatch",
        "_track_files",
        "filename",
        "name",
        "tags",
    )

    def __init__(self, tags: Mapping[str, TagSpec]):
        self.tags = tags
        self.name: str | None = None
        self.filename: str | None = None
        self._default_filename: str | None = None
        self._expressions = ExpressionCompiler()
        self._lines: list[str] = []
        self._level = 0
        self._track_files = False
        # Counter for unique function names in nested structures
        self._counter = 0
        self._token_dispatch: dict[TokenKind, Callable[[Token], None]] = {
            TokenKind.TEXT: self._compile_text,
            TokenKind.MUSTACHE: self._compile_mustache,
            TokenKind.COMMENT: self._compile_comment,
            TokenKind.TAG: self._compile_tag,
        }

    def compile(
        self,
        tokens: Iterable[Token],
        name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
    ) -> str:
        """Compile a token tree to the source of ``render(ctx, template)``.

        Args:
            tokens: Top-level tokens, layouts already merged
            name: Template name for log messages
            filename: Default filename for errors on tokens without one
            source: Template source attached to syntax errors raised for `filename`

        Raises:
            TemplateSyntaxError: Any compile error; no partial code is returned
        """
        self.name = name
        self.filename = self._default_filename = filename
        self._expressions.filename = filename
        self._lines = []
        self._level = 0
        self._counter = 0
        tokens = list(tokens)
        self._track_files = any(
            token.loc.filename not in (None, filename) for token in _walk(tokens)
        )

        try:
            self.writeln("def render(ctx, template):")
            with self.indent():
                self.write_buffer_prologue()
                self.compile_children(tokens)
                self.writeln("return ''.join(buf)")
        except TemplateSyntaxError as e:
            if e.source is None and source is not None and e.filename == filename:
                e.source = source
            raise

        logger.debug("Compiled %s into %d lines", name or filename or "<template>", len(self._lines))
        return "\n".join(self._lines) + "\n"

    # ─────────────────────────────────────────────────────────────────────────
    # Code writing
    # ─────────────────────────────────────────────────────────────────────────

    def writeln(self, code: str) -> None:
        """Append one line of code at the current indentation."""
        self._lines.append(_INDENT * self._level + code)

    @contextmanager
    def indent(self) -> Iterator[None]:
        """Indent the lines written inside the ``with`` body."""
        self._level += 1
        try:
            yield
        finally:
            self._level -= 1

    def unique_name(self, prefix: str) -> str:
        """Return a function name unique within the generated module."""
        self._counter += 1
        return f"_{prefix}_{self._counter}"

    def write_buffer_prologue(self) -> None:
        self.writeln("buf = []")
        self.writeln("_append = buf.append")

    def write_line_marker(self, token: Token) -> None:
        """Record the template line reached, for runtime error messages.

        Trees merged from several files also record the file of the line.
        """
        if self._track_files:
            self.writeln(f"ctx.filename = {self.filename!r}")
        self.writeln(f"ctx.line = {token.loc.line}")

    def write_body(self, tokens: Iterable[Token]) -> None:
        """Compile an indented block body; an empty body becomes ``pass``."""
        with self.indent():
            start = len(self._lines)
            self.compile_children(tokens)
            if len(self._lines) == start:
                self.writeln("pass")

    # ─────────────────────────────────────────────────────────────────────────
    # Expressions
    # ─────────────────────────────────────────────────────────────────────────

    def parse(self, token: Token) -> Expr:
        """Parse the argument of a tag or mustache token."""
        loc = token.loc
        col_offset = loc.column
        if token.kind is TokenKind.TAG:
            # Argument starts after "@", an optional "!", the name and "("
            col_offset += len(token.name) + 2 + (1 if token.properties.self_closing else 0)
        return parse_expression(
            token.raw_argument,
            filename=self.filename,
            lineno=loc.line,
            col_offset=col_offset,
        )

    def render(self, node: Expr) -> str:
        """Render an expression to code text."""
        return self._expressions.render(node)

    def error(
        self,
        message: str,
        token: Token,
        code: ErrorCode = ErrorCode.SYNTAX_ERROR,
    ) -> TemplateSyntaxError:
        return TemplateSyntaxError(
            message,
            code=code,
            filename=self.filename,
            lineno=token.loc.line,
            col_offset=token.loc.column,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Token dispatch
    # ─────────────────────────────────────────────────────────────────────────

    def compile_children(self, tokens: Iterable[Token]) -> None:
        for token in tokens:
            self.compile_token(token)

    def compile_token(self, token: Token) -> None:
        self.filename = token.loc.filename or self._default_filename
        self._expressions.filename = self.filename
        handler = self._token_dispatch.get(token.kind)
        if handler is None:
            raise self.error(f"Unexpected {token.kind.name} token", token, ErrorCode.UNEXPECTED_END)
        handler(token)

    def _compile_text(self, token: Token) -> None:
        if token.value:
            self.writeln(f"_append({token.value!r})")

    def _compile_comment(self, token: Token) -> None:
        pass

    def _compile_mustache(self, token: Token) -> None:
        value = self.render(self.parse(token))
        self.write_line_marker(token)
        if token.properties.escaped:
            self.writeln(f"_append(ctx.escape({value}))")
        else:
            self.writeln(f"_append(ctx.stringify({value}))")

    def _compile_tag(self, token: Token) -> None:
        spec = self.tags.get(token.name)
        if spec is None:
            raise self.error(f"Unknown tag @{token.name}", token, ErrorCode.UNKNOWN_TAG)
        spec.compile(self, token)


def _walk(tokens: Iterable[Token]) -> Iterator[Token]:
    for token in tokens:
        yield token
        yield from _walk(token.children)
