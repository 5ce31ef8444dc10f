"""Base node class for Ledge expression trees."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar


class ExprKind(Enum):
    """Discriminating tag of an expression node.

    Validators and the expression compiler dispatch on this tag instead of
    probing node attributes.
    """

    LITERAL = "Literal"
    IDENTIFIER = "Identifier"
    SEQUENCE = "Sequence"
    OBJECT_LITERAL = "ObjectLiteral"
    ASSIGNMENT = "Assignment"
    LIST = "List"
    MEMBER = "Member"
    SUBSCRIPT = "Subscript"
    CALL = "Call"
    BINARY_OP = "BinaryOp"
    UNARY_OP = "UnaryOp"
    COMPARE = "Compare"
    BOOL_OP = "BoolOp"
    CONDITIONAL = "Conditional"


@dataclass(frozen=True, slots=True)
class Expr:
    """Base class for all expression nodes.

    All nodes track their template source location for error reporting.
    Nodes are immutable.

    """

    kind: ClassVar[ExprKind]

    lineno: int
    col_offset: int
