"""Expression parser for tag arguments and mustaches.

Ledge expressions are a subset of Python expressions, so parsing is
delegated to the standard library `ast` module and the resulting Python
tree is converted into the `ledge.nodes` tagged union.

Tag arguments are parsed as the argument list of a call. This is what lets
``@component('card', title='hi')`` produce a `Sequence` whose second
element is an `Assignment`::

    parse_expression("'card', title='hi'")
    # Sequence(elements=(Literal('card'), Assignment(Identifier('title'), Literal('hi'))))

A lone positional argument collapses to the argument itself:

    parse_expression("user.name")
    # Member(obj=Identifier('user'), attr='name')

Positions in the returned nodes are template positions: the line/column of
the token the text came from is added to the offsets `ast` reports.

"""

from __future__ import annotations

import ast
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
    Identifier,
    ListLiteral,
    Literal,
    Member,
    ObjectLiteral,
    Property,
    Sequence,
    Subscript,
    UnaryOp,
)

# Prefix wrapped around the argument text; columns on the first line shift by its length
_CALL_PREFIX = "_("

_BINARY_OPS: dict[type[ast.operator], str] = {
    ast.Add: "+",
    ast.Sub: "-",
    ast.Mult: "*",
    ast.Div: "/",
    ast.FloorDiv: "//",
    ast.Mod: "%",
    ast.Pow: "**",
}

_UNARY_OPS: dict[type[ast.unaryop], str] = {
    ast.Not: "not",
    ast.USub: "-",
    ast.UAdd: "+",
}

_COMPARE_OPS: dict[type[ast.cmpop], str] = {
    ast.Eq: "==",
    ast.NotEq: "!=",
    ast.Lt: "<",
    ast.LtE: "<=",
    ast.Gt: ">",
    ast.GtE: ">=",
    ast.In: "in",
    ast.NotIn: "not in",
    ast.Is: "is",
    ast.IsNot: "is not",
}


class ExpressionParser:
    """Convert Python `ast` expressions into Ledge expression nodes.

    One parser instance handles one argument string; it keeps the text and
    the template offset needed to translate positions.
    """

    __slots__ = ("_col_offset", "_dispatch", "_filename", "_lineno", "_source", "_text")

    def __init__(self, text: str, filename: str | None, lineno: int, col_offset: int):
        self._text = text
        self._source = f"{_CALL_PREFIX}{text}\n)"
        self._filename = filename
        self._lineno = lineno
        self._col_offset = col_offset
        self._dispatch: dict[type[ast.AST], Callable[[ast.AST], Expr]] = {
            ast.Constant: self._convert_constant,
            ast.Name: self._convert_name,
            ast.Tuple: self._convert_tuple,
            ast.List: self._convert_list,
            ast.Dict: self._convert_dict,
            ast.Attribute: self._convert_attribute,
            ast.Subscript: self._convert_subscript,
            ast.Call: self._convert_call,
            ast.BinOp: self._convert_binop,
            ast.UnaryOp: self._convert_unaryop,
            ast.Compare: self._convert_compare,
            ast.BoolOp: self._convert_boolop,
            ast.IfExp: self._convert_ifexp,
        }

    def parse(self) -> Expr:
        try:
            tree = ast.parse(self._source, mode="eval")
        except SyntaxError as e:
            lineno, col = self._position(*self._clamp(e.lineno or 1, (e.offset or 1) - 1))
            raise TemplateSyntaxError(
                f"Invalid expression {self._text.strip()!r}: {e.msg}",
                code=ErrorCode.SYNTAX_ERROR,
                filename=self._filename,
                lineno=lineno,
                col_offset=col,
            ) from None

        call = tree.body
        if not (
            isinstance(call, ast.Call)
            and isinstance(call.func, ast.Name)
            and call.func.id == "_"
        ):
            raise self._error(call, f"Invalid expression {self._text.strip()!r}")
        if not call.args and not call.keywords:
            raise self._error(call, "Expected an expression")

        elements = [self.convert(arg) for arg in call.args]
        elements.extend(self._convert_keyword(keyword) for keyword in call.keywords)

        if len(elements) == 1 and call.args:
            return elements[0]

        lineno, col = self._node_position(call.args[0] if call.args else call.keywords[0])
        return Sequence(lineno, col, tuple(elements))

    def convert(self, node: ast.AST) -> Expr:
        handler = self._dispatch.get(type(node))
        if handler is None:
            raise self._error(node, f"{type(node).__name__} expressions are not supported")
        return handler(node)

    # ─────────────────────────────────────────────────────────────────────────
    # Positions
    # ─────────────────────────────────────────────────────────────────────────

    def _clamp(self, line: int, col: int) -> tuple[int, int]:
        """Move a position on the closing wrapper line to the end of the argument text."""
        lines = self._text.split("\n")
        if line <= len(lines):
            return line, col
        if len(lines) == 1:
            return 1, len(_CALL_PREFIX) + len(lines[0])
        return len(lines), len(lines[-1])

    def _position(self, line: int, col: int) -> tuple[int, int]:
        """Translate a position inside the wrapped source to a template position."""
        if line == 1:
            return self._lineno, self._col_offset + max(col - len(_CALL_PREFIX), 0)
        return self._lineno + line - 1, col

    def _node_position(self, node: ast.AST) -> tuple[int, int]:
        return self._position(getattr(node, "lineno", 1), getattr(node, "col_offset", 0))

    def _error(self, node: ast.AST, message: str) -> TemplateSyntaxError:
        lineno, col = self._node_position(node)
        return TemplateSyntaxError(
            message,
            code=ErrorCode.SYNTAX_ERROR,
            filename=self._filename,
            lineno=lineno,
            col_offset=col,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Node conversion
    # ─────────────────────────────────────────────────────────────────────────

    def _convert_constant(self, node: ast.Constant) -> Literal:
        raw = ast.get_source_segment(self._source, node) or repr(node.value)
        return Literal(*self._node_position(node), node.value, raw)

    def _convert_name(self, node: ast.Name) -> Identifier:
        return Identifier(*self._node_position(node), node.id)

    def _convert_tuple(self, node: ast.Tuple) -> Sequence:
        return Sequence(*self._node_position(node), tuple(self.convert(e) for e in node.elts))

    def _convert_list(self, node: ast.List) -> ListLiteral:
        return ListLiteral(*self._node_position(node), tuple(self.convert(e) for e in node.elts))

    def _convert_dict(self, node: ast.Dict) -> ObjectLiteral:
        properties = []
        for key, value in zip(node.keys, node.values, strict=True):
            if key is None:
                raise self._error(value, "Dict unpacking is not supported")
            properties.append(Property(self.convert(key), self.convert(value)))
        return ObjectLiteral(*self._node_position(node), tuple(properties))

    def _convert_attribute(self, node: ast.Attribute) -> Member:
        return Member(*self._node_position(node), self.convert(node.value), node.attr)

    def _convert_subscript(self, node: ast.Subscript) -> Subscript:
        if isinstance(node.slice, ast.Slice):
            raise self._error(node, "Slices are not supported")
        return Subscript(*self._node_position(node), self.convert(node.value), self.convert(node.slice))

    def _convert_keyword(self, node: ast.keyword) -> Assignment:
        if node.arg is None:
            raise self._error(node, "Keyword unpacking is not supported")
        lineno, col = self._node_position(node)
        return Assignment(lineno, col, Identifier(lineno, col, node.arg), self.convert(node.value))

    def _convert_call(self, node: ast.Call) -> Call:
        for arg in node.args:
            if isinstance(arg, ast.Starred):
                raise self._error(arg, "Argument unpacking is not supported")
        return Call(
            *self._node_position(node),
            self.convert(node.func),
            tuple(self.convert(arg) for arg in node.args),
            tuple(self._convert_keyword(keyword) for keyword in node.keywords),
        )

    def _convert_binop(self, node: ast.BinOp) -> BinaryOp:
        op = _BINARY_OPS.get(type(node.op))
        if op is None:
            raise self._error(node, f"Operator {type(node.op).__name__} is not supported")
        return BinaryOp(*self._node_position(node), op, self.convert(node.left), self.convert(node.right))

    def _convert_unaryop(self, node: ast.UnaryOp) -> UnaryOp:
        op = _UNARY_OPS.get(type(node.op))
        if op is None:
            raise self._error(node, f"Operator {type(node.op).__name__} is not supported")
        return UnaryOp(*self._node_position(node), op, self.convert(node.operand))

    def _convert_compare(self, node: ast.Compare) -> Compare:
        return Compare(
            *self._node_position(node),
            self.convert(node.left),
            tuple(_COMPARE_OPS[type(op)] for op in node.ops),
            tuple(self.convert(c) for c in node.comparators),
        )

    def _convert_boolop(self, node: ast.BoolOp) -> BoolOp:
        op = "and" if isinstance(node.op, ast.And) else "or"
        return BoolOp(*self._node_position(node), op, tuple(self.convert(v) for v in node.values))

    def _convert_ifexp(self, node: ast.IfExp) -> Conditional:
        return Conditional(
            *self._node_position(node),
            self.convert(node.test),
            self.convert(node.body),
            self.convert(node.orelse),
        )


def parse_expression(
    text: str,
    *,
    filename: str | None = None,
    lineno: int = 1,
    col_offset: int = 0,
) -> Expr:
    """Parse tag-argument or mustache text into an expression tree.

    Args:
        text: Raw argument text (without the surrounding parentheses)
        filename: Template filename for error attribution
        lineno: Template line the text starts on
        col_offset: Template column the text starts at

    Raises:
        TemplateSyntaxError: E_SYNTAX_ERROR for invalid or unsupported syntax
    """
    return ExpressionParser(text, filename, lineno, col_offset).parse()
