"""Component and slot tag compilation for Ledge compiler.

A component renders another template in a fresh context whose root frame
holds the props plus a `slots` mapping. Each slot is compiled to a
function closing over the caller's `ctx`, so slot bodies see the
caller's names, not the component's:

    ```
    @component('components.card', title='Welcome')
      @slot('header', user)
        <b>{{ user.name }}</b>
      @end
      Body text
    @end
    ```

Generates:
    ```python
    def _slot_1(scope=None):
        buf = []
        _append = buf.append
        with ctx.frame():
            pass
            _append('  Body text\\n')
        return Markup(''.join(buf))
    def _slot_2(scope=None):
        buf = []
        _append = buf.append
        with ctx.frame():
            ctx.set_on_frame('user', scope)
            ...
        return Markup(''.join(buf))
    _append(template.render_component(ctx, 'components.card', { 'title': 'Welcome' },
                                      {'main': _slot_1, 'header': _slot_2}))
    ```

The component template outputs a slot with ``{{{ slots.header(user) }}}``;
``slots.main`` holds the body outside any ``@slot``.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from collections.abc import Iterable
from typing import TYPE_CHECKING

from ledge._types import Token, TokenKind
from ledge.nodes import ExprKind, Sequence
from ledge.utils.expressions import allow_expressions, parse_as_key_value_pair, parse_sequence_expression

if TYPE_CHECKING:
    from ledge.environment.exceptions import ErrorCode, TemplateSyntaxError
    from ledge.nodes import Expr

COMPONENT_EXPRESSIONS = (
    ExprKind.LITERAL,
    ExprKind.IDENTIFIER,
    ExprKind.MEMBER,
    ExprKind.SUBSCRIPT,
    ExprKind.CALL,
    ExprKind.CONDITIONAL,
    ExprKind.SEQUENCE,
)

MAIN_SLOT = "main"


class ComponentMixin:
    """Mixin for compiling @component and @slot.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes and cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        filename: str | None

        def writeln(self, code: str) -> None: ...
        def indent(self): ...
        def unique_name(self, prefix: str) -> str: ...
        def compile_children(self, tokens: Iterable[Token]) -> None: ...
        def write_buffer_prologue(self) -> None: ...
        def write_line_marker(self, token: Token) -> None: ...
        def parse(self, token: Token) -> Expr: ...
        def render(self, node: Expr) -> str: ...
        def error(self, message: str, token: Token, code: ErrorCode = ...) -> TemplateSyntaxError: ...

    def _compile_component(self, token: Token) -> None:
        """Compile @component(name, **props)...@end and @!component(...)."""
        expr = self.parse(token)
        allow_expressions("component", expr, COMPONENT_EXPRESSIONS, self.filename)
        name, props = parse_sequence_expression(expr, self)

        main_body: list[Token] = []
        slots: dict[str, tuple[Token, str | None]] = {}
        for child in token.children:
            if child.kind is TokenKind.TAG and child.name == "slot":
                slot_name, scope = self._slot_signature(child)
                if slot_name in slots:
                    raise self.error(f"Slot '{slot_name}' is defined twice", child)
                slots[slot_name] = (child, scope)
            else:
                main_body.append(child)

        functions: dict[str, str] = {}
        if MAIN_SLOT not in slots:
            functions[MAIN_SLOT] = self._write_slot_function(main_body, None)
        for slot_name, (slot_token, scope) in slots.items():
            functions[slot_name] = self._write_slot_function(slot_token.children, scope)

        slot_map = "{" + ", ".join(f"{k!r}: {v}" for k, v in functions.items()) + "}"
        self.write_line_marker(token)
        self.writeln(f"_append(template.render_component(ctx, {name}, {props}, {slot_map}))")

    def _slot_signature(self, token: Token) -> tuple[str, str | None]:
        """Return the slot name and the scope name it binds, if any."""
        expr = self.parse(token)
        key, _ = parse_as_key_value_pair(expr, self, (ExprKind.IDENTIFIER,), tag_name="slot")
        name = ast.literal_eval(key)
        if not isinstance(name, str):
            raise self.error("Slot name must be a string", token)
        scope = expr.elements[1].name if isinstance(expr, Sequence) and len(expr.elements) == 2 else None
        return name, scope

    def _write_slot_function(self, body: list[Token], scope: str | None) -> str:
        func = self.unique_name("slot")
        self.writeln(f"def {func}(scope=None):")
        with self.indent():
            self.write_buffer_prologue()
            self.writeln("with ctx.frame():")
            with self.indent():
                if scope:
                    self.writeln(f"ctx.set_on_frame({scope!r}, scope)")
                else:
                    self.writeln("pass")
                self.compile_children(body)
            self.writeln("return Markup(''.join(buf))")
        return func

    def _compile_slot(self, token: Token) -> None:
        raise self.error("@slot must be a direct child of @component", token)
