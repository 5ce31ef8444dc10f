"""Template structure tag compilation for Ledge compiler.

Provides mixin for compiling template structure tags (section, super,
layout, include, set, debugger).

Layout inheritance is resolved before compilation: by the time the token
tree reaches the compiler, sections already hold their merged bodies, so
``@section`` simply emits its children and ``@super`` emits nothing.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from ledge._types import Token
from ledge.nodes import ExprKind
from ledge.utils.expressions import allow_expressions, parse_as_key_value_pair

if TYPE_CHECKING:
    from ledge.environment.exceptions import ErrorCode, TemplateSyntaxError
    from ledge.nodes import Expr

# Expressions that can evaluate to a template reference
INCLUDE_EXPRESSIONS = (
    ExprKind.LITERAL,
    ExprKind.IDENTIFIER,
    ExprKind.MEMBER,
    ExprKind.SUBSCRIPT,
    ExprKind.CALL,
    ExprKind.BINARY_OP,
    ExprKind.CONDITIONAL,
)


class TemplateStructureMixin:
    """Mixin for compiling template structure tags.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes and cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        filename: str | None

        def writeln(self, code: str) -> None: ...
        def compile_children(self, tokens: Iterable[Token]) -> None: ...
        def write_line_marker(self, token: Token) -> None: ...
        def parse(self, token: Token) -> Expr: ...
        def render(self, node: Expr) -> str: ...
        def error(self, message: str, token: Token, code: ErrorCode = ...) -> TemplateSyntaxError: ...

    def _compile_section(self, token: Token) -> None:
        """Compile @section('name')...@end by emitting its (merged) body."""
        if not token.raw_argument.strip():
            raise self.error("@section requires a name", token)
        self.compile_children(token.children)

    def _compile_super(self, token: Token) -> None:
        """@super marks where the parent body goes; merging already placed it."""

    def _compile_layout(self, token: Token) -> None:
        raise self.error("@layout must be the first tag of a template", token)

    def _compile_include(self, token: Token) -> None:
        """Compile @include(reference).

        The included template renders against the current frames, so it
        sees every name visible at the point of inclusion.

        Generates:
            _append(template.include(ctx, 'partials.header'))
        """
        expr = self.parse(token)
        allow_expressions("include", expr, INCLUDE_EXPRESSIONS, self.filename)
        self.write_line_marker(token)
        self.writeln(f"_append(template.include(ctx, {self.render(expr)}))")

    def _compile_set(self, token: Token) -> None:
        """Compile @set('name', value) into a binding on the current frame.

        Generates:
            ctx.set_on_frame('name', value)
        """
        key, value = parse_as_key_value_pair(self.parse(token), self, tag_name="set")
        if value is None:
            raise self.error("@set expects a name and a value: @set('name', value)", token)
        self.write_line_marker(token)
        self.writeln(f"ctx.set_on_frame({key}, {value})")

    def _compile_debugger(self, token: Token) -> None:
        self.write_line_marker(token)
        self.writeln("ctx.debug()")
