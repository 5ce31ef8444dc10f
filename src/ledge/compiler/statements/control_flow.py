"""Control flow tag compilation for Ledge compiler.

Provides mixin for compiling control flow tags (if, unless, each).

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from typing import TYPE_CHECKING

from ledge._types import Token, TokenKind
from ledge.nodes import Compare, ExprKind, Identifier, Sequence
from ledge.utils.expressions import allow_expressions, disallow_expressions

if TYPE_CHECKING:
    from ledge.environment.exceptions import ErrorCode, TemplateSyntaxError
    from ledge.nodes import Expr

# Condition arguments must be a single expression
_NOT_A_CONDITION = (ExprKind.SEQUENCE, ExprKind.ASSIGNMENT)

# Name the iteration key is bound to when `@each` does not name it
DEFAULT_KEY_NAME = "key"


class ControlFlowMixin:
    """Mixin for compiling control flow tags.

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
        def write_body(self, tokens: Iterable[Token]) -> None: ...
        def compile_children(self, tokens: Iterable[Token]) -> None: ...
        def write_line_marker(self, token: Token) -> None: ...
        def parse(self, token: Token) -> Expr: ...
        def render(self, node: Expr) -> str: ...
        def error(self, message: str, token: Token, code: ErrorCode = ...) -> TemplateSyntaxError: ...

    def _split_branches(
        self,
        token: Token,
        branch_tags: Collection[str],
    ) -> list[tuple[Token, list[Token]]]:
        """Split a block body at its direct ``@elseif``/``@else`` children.

        Returns:
            ``(opening_token, body)`` pairs; the first pair belongs to `token`
            itself, later pairs to each branch tag in order.
        """
        branches: list[tuple[Token, list[Token]]] = [(token, [])]
        for child in token.children:
            if child.kind is TokenKind.TAG and child.name in branch_tags:
                if branches[-1][0].name == "else":
                    raise self.error(
                        f"@{child.name} cannot follow @else in @{token.name}",
                        child,
                    )
                branches.append((child, []))
            else:
                branches[-1][1].append(child)
        return branches

    def _condition(self, token: Token) -> str:
        expr = self.parse(token)
        disallow_expressions(token.name, expr, _NOT_A_CONDITION, self.filename)
        return self.render(expr)

    def _compile_if(self, token: Token) -> None:
        """Compile @if(cond)...@elseif(cond)...@else...@end.

        Generates:
            if cond:
                ...
            elif cond:
                ...
            else:
                ...
        """
        self._compile_conditional(token, negate=False)

    def _compile_unless(self, token: Token) -> None:
        """Compile @unless(cond)...@else...@end as ``if not cond``."""
        self._compile_conditional(token, negate=True)

    def _compile_conditional(self, token: Token, *, negate: bool) -> None:
        branch_tags = ("else",) if negate else ("elseif", "else")
        branches = self._split_branches(token, branch_tags)

        self.write_line_marker(token)
        for position, (opener, body) in enumerate(branches):
            if opener.name == "else":
                if opener.raw_argument.strip():
                    raise self.error("@else does not take arguments", opener)
                self.writeln("else:")
            else:
                condition = self._condition(opener)
                if position == 0:
                    self.writeln(f"if not {condition}:" if negate else f"if {condition}:")
                else:
                    self.writeln(f"elif {condition}:")
            self.write_body(body)

    def _compile_each(self, token: Token) -> None:
        """Compile @each(item in items)...@else...@end.

        Every iteration gets its own frame binding the item, `loop` and the
        key (``key`` unless named with ``(item, name) in items``).

        Generates:
            def _each_1(value, loop):
                with ctx.frame():
                    ctx.set_on_frame('item', value)
                    ctx.set_on_frame('loop', loop)
                    ctx.set_on_frame('key', loop.key)
                    ...
            if not ctx.loop(ctx.resolve('items'), _each_1):
                ...  # @else body
        """
        expr = self.parse(token)
        allow_expressions("each", expr, (ExprKind.COMPARE,), self.filename)
        if not isinstance(expr, Compare) or expr.ops != ("in",):
            raise self.error("@each expects 'item in collection'", token)

        item_name, key_name = self._each_targets(expr.left, token)
        collection = self.render(expr.comparators[0])
        branches = self._split_branches(token, ("else",))

        func = self.unique_name("each")
        self.write_line_marker(token)
        self.writeln(f"def {func}(value, loop):")
        with self.indent():
            self.writeln("with ctx.frame():")
            with self.indent():
                self.writeln(f"ctx.set_on_frame({item_name!r}, value)")
                self.writeln("ctx.set_on_frame('loop', loop)")
                self.writeln(f"ctx.set_on_frame({key_name!r}, loop.key)")
                self.compile_children(branches[0][1])

        if len(branches) == 1:
            self.writeln(f"ctx.loop({collection}, {func})")
        else:
            opener, body = branches[1]
            if opener.raw_argument.strip():
                raise self.error("@else does not take arguments", opener)
            self.writeln(f"if not ctx.loop({collection}, {func}):")
            self.write_body(body)

    def _each_targets(self, target: Expr, token: Token) -> tuple[str, str]:
        if isinstance(target, Identifier):
            return target.name, DEFAULT_KEY_NAME
        if isinstance(target, Sequence) and len(target.elements) == 2:
            item, key = target.elements
            if isinstance(item, Identifier) and isinstance(key, Identifier):
                return item.name, key.name
        raise self.error("@each expects 'item in collection' or '(item, key) in collection'", token)

    def _compile_branch_outside_block(self, token: Token) -> None:
        raise self.error(f"@{token.name} must be used inside @if, @unless or @each", token)
