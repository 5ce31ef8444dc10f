"""Render expression trees to Python code text.

The generated render function receives the per-render `Context` as
``ctx``; every identifier therefore becomes a scoped lookup and every
attribute/item access goes through the permissive accessor:

    user.profile['name']  →  ctx.access(ctx.access(ctx.resolve('user'), 'profile'), 'name')

Compound sub-expressions are always parenthesised so the rendered text can
be embedded anywhere in generated code.
"""

from __future__ import annotations

from collections.abc import Callable

from ledge.environment.exceptions import ErrorCode, TemplateSyntaxError
from ledge.nodes import (
    Assignment,
    BinaryOp,
    BoolOp,
    Call,
    Compare,
    Conditional,
    Expr,
    ExprKind,
    Identifier,
    ListLiteral,
    Literal,
    Member,
    ObjectLiteral,
    Sequence,
    Subscript,
    UnaryOp,
)


class ExpressionCompiler:
    """Render `ledge.nodes` expressions as Python source fragments.

    Attributes:
        filename: Template filename used to attribute errors raised while
            rendering or validating expressions of the current template.

    Example:
        >>> from ledge.parser import parse_expression
        >>> ExpressionCompiler("page.edge").render(parse_expression("user.name"))
        "ctx.access(ctx.resolve('user'), 'name')"
    """

    __slots__ = ("_dispatch", "filename")

    def __init__(self, filename: str | None = None):
        self.filename = filename
        self._dispatch: dict[ExprKind, Callable[[Expr], str]] = {
            ExprKind.LITERAL: self._render_literal,
            ExprKind.IDENTIFIER: self._render_identifier,
            ExprKind.SEQUENCE: self._render_sequence,
            ExprKind.LIST: self._render_list,
            ExprKind.OBJECT_LITERAL: self._render_object,
            ExprKind.ASSIGNMENT: self._render_assignment,
            ExprKind.MEMBER: self._render_member,
            ExprKind.SUBSCRIPT: self._render_subscript,
            ExprKind.CALL: self._render_call,
            ExprKind.BINARY_OP: self._render_binary,
            ExprKind.UNARY_OP: self._render_unary,
            ExprKind.COMPARE: self._render_compare,
            ExprKind.BOOL_OP: self._render_boolop,
            ExprKind.CONDITIONAL: self._render_conditional,
        }

    def render(self, node: Expr) -> str:
        """Render one expression to code text."""
        return self._dispatch[node.kind](node)

    def _render_literal(self, node: Literal) -> str:
        return repr(node.value)

    def _render_identifier(self, node: Identifier) -> str:
        return f"ctx.resolve({node.name!r})"

    def _render_sequence(self, node: Sequence) -> str:
        items = [self.render(e) for e in node.elements]
        if len(items) == 1:
            return f"({items[0]},)"
        return f"({', '.join(items)})"

    def _render_list(self, node: ListLiteral) -> str:
        return f"[{', '.join(self.render(e) for e in node.items)}]"

    def _render_object(self, node: ObjectLiteral) -> str:
        pairs = (f"{self.render(p.key)}: {self.render(p.value)}" for p in node.properties)
        return f"{{{', '.join(pairs)}}}"

    def _render_assignment(self, node: Assignment) -> str:
        raise TemplateSyntaxError(
            f"Assignment to '{node.left.name}' is only allowed as a tag argument",
            code=ErrorCode.UNALLOWED_EXPRESSION,
            filename=self.filename,
            lineno=node.lineno,
            col_offset=node.col_offset,
        )

    def _render_member(self, node: Member) -> str:
        return f"ctx.access({self.render(node.obj)}, {node.attr!r})"

    def _render_subscript(self, node: Subscript) -> str:
        return f"ctx.access({self.render(node.obj)}, {self.render(node.key)})"

    def _render_call(self, node: Call) -> str:
        args = [self.render(arg) for arg in node.args]
        args.extend(f"{kw.left.name}={self.render(kw.right)}" for kw in node.keywords)
        return f"{self.render(node.func)}({', '.join(args)})"

    def _render_binary(self, node: BinaryOp) -> str:
        return f"({self.render(node.left)} {node.op} {self.render(node.right)})"

    def _render_unary(self, node: UnaryOp) -> str:
        separator = " " if node.op == "not" else ""
        return f"({node.op}{separator}{self.render(node.operand)})"

    def _render_compare(self, node: Compare) -> str:
        parts = [self.render(node.left)]
        for op, comparator in zip(node.ops, node.comparators, strict=True):
            parts.append(op)
            parts.append(self.render(comparator))
        return f"({' '.join(parts)})"

    def _render_boolop(self, node: BoolOp) -> str:
        return f"({f' {node.op} '.join(self.render(v) for v in node.values)})"

    def _render_conditional(self, node: Conditional) -> str:
        return (
            f"({self.render(node.body)} if {self.render(node.test)} "
            f"else {self.render(node.orelse)})"
        )
