"""Expression nodes for Ledge tag arguments and mustaches."""

from __future__ import annotations

from collections.abc import Sequence as SequenceOf
from dataclasses import dataclass
from typing import Any

from ledge.nodes.base import Expr, ExprKind


@dataclass(frozen=True, slots=True)
class Literal(Expr):
    """Constant value: string, number, boolean, None.

    `raw` keeps the source spelling (``'card'`` keeps its quotes).
    """

    kind = ExprKind.LITERAL

    value: Any
    raw: str


@dataclass(frozen=True, slots=True)
class Identifier(Expr):
    """Variable reference: {{ user }}"""

    kind = ExprKind.IDENTIFIER

    name: str


@dataclass(frozen=True, slots=True)
class Sequence(Expr):
    """Comma-joined argument list: ('card', title='hi')"""

    kind = ExprKind.SEQUENCE

    elements: SequenceOf[Expr]


@dataclass(frozen=True, slots=True)
class Property:
    """One key/value entry of an object literal (not an expression itself)."""

    key: Expr
    value: Expr


@dataclass(frozen=True, slots=True)
class ObjectLiteral(Expr):
    """Object literal: {'title': 'hi'}"""

    kind = ExprKind.OBJECT_LITERAL

    properties: SequenceOf[Property]


@dataclass(frozen=True, slots=True)
class Assignment(Expr):
    """Keyword-style argument: title='hi'"""

    kind = ExprKind.ASSIGNMENT

    left: Identifier
    right: Expr


@dataclass(frozen=True, slots=True)
class ListLiteral(Expr):
    """List expression: [a, b, c]"""

    kind = ExprKind.LIST

    items: SequenceOf[Expr]


@dataclass(frozen=True, slots=True)
class Member(Expr):
    """Attribute access: obj.attr"""

    kind = ExprKind.MEMBER

    obj: Expr
    attr: str


@dataclass(frozen=True, slots=True)
class Subscript(Expr):
    """Item access: obj[key]"""

    kind = ExprKind.SUBSCRIPT

    obj: Expr
    key: Expr


@dataclass(frozen=True, slots=True)
class Call(Expr):
    """Function call: func(a, b=c)"""

    kind = ExprKind.CALL

    func: Expr
    args: SequenceOf[Expr]
    keywords: SequenceOf[Assignment] = ()


@dataclass(frozen=True, slots=True)
class BinaryOp(Expr):
    """Arithmetic operation: a + b"""

    kind = ExprKind.BINARY_OP

    op: str
    left: Expr
    right: Expr


@dataclass(frozen=True, slots=True)
class UnaryOp(Expr):
    """Unary operation: not x, -x"""

    kind = ExprKind.UNARY_OP

    op: str
    operand: Expr


@dataclass(frozen=True, slots=True)
class Compare(Expr):
    """Comparison chain: a < b <= c, user in users"""

    kind = ExprKind.COMPARE

    left: Expr
    ops: SequenceOf[str]
    comparators: SequenceOf[Expr]


@dataclass(frozen=True, slots=True)
class BoolOp(Expr):
    """Boolean operation: a and b, a or b"""

    kind = ExprKind.BOOL_OP

    op: str
    values: SequenceOf[Expr]


@dataclass(frozen=True, slots=True)
class Conditional(Expr):
    """Inline if: a if cond else b"""

    kind = ExprKind.CONDITIONAL

    test: Expr
    body: Expr
    orelse: Expr
