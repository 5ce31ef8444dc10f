"""Expression tree for Ledge.

Tag arguments and mustache bodies are parsed into these immutable nodes.
Every node exposes a class-level `kind` tag (an `ExprKind`) so consumers
can dispatch on the variant directly.
"""

from ledge.nodes.base import Expr, ExprKind
from ledge.nodes.expressions import (
    Assignment,
    BinaryOp,
    BoolOp,
    Call,
    Compare,
    Conditional,
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

__all__ = [
    "Assignment",
    "BinaryOp",
    "BoolOp",
    "Call",
    "Compare",
    "Conditional",
    "Expr",
    "ExprKind",
    "Identifier",
    "ListLiteral",
    "Literal",
    "Member",
    "ObjectLiteral",
    "Property",
    "Sequence",
    "Subscript",
    "UnaryOp",
]
