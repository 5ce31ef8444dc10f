"""Expression validation and tag-argument normalization.

Tag compilers use these helpers to check that an argument has a shape the
tag supports before embedding it in generated code, and to turn call-like
argument lists into the pieces the generated code needs.

```python
# @component('card', title='hi')
name, props = parse_sequence_expression(expr, compiler)
# name  == "'card'"
# props == "{ 'title': 'hi' }"

# @slot('header', scope)
name, value = parse_as_key_value_pair(expr, compiler, {ExprKind.IDENTIFIER})
# name  == "'header'"
# value == "ctx.resolve('scope')"
```

"""

from __future__ import annotations

from collections.abc import Collection
from typing import Protocol

from ledge.environment.exceptions import ErrorCode, TemplateSyntaxError
from ledge.nodes import Expr, ExprKind, Sequence


class SupportsRender(Protocol):
    """The part of the expression compiler the normalizer relies on."""

    filename: str | None

    def render(self, node: Expr) -> str: ...


def _unallowed(tag_name: str, expression: Expr, filename: str | None) -> TemplateSyntaxError:
    return TemplateSyntaxError(
        f"{expression.kind.value} is not allowed for {tag_name} tag.",
        code=ErrorCode.UNALLOWED_EXPRESSION,
        filename=filename,
        lineno=expression.lineno,
        col_offset=expression.col_offset,
    )


def allow_expressions(
    tag_name: str,
    expression: Expr,
    allowed_kinds: Collection[ExprKind],
    filename: str | None,
) -> None:
    """Fail unless the expression kind is one of `allowed_kinds`.

    Example:
        >>> allow_expressions("include", expr, {ExprKind.LITERAL, ExprKind.IDENTIFIER}, "a.edge")

    Raises:
        TemplateSyntaxError: E_UNALLOWED_EXPRESSION at the expression location
    """
    if expression.kind not in allowed_kinds:
        raise _unallowed(tag_name, expression, filename)


def disallow_expressions(
    tag_name: str,
    expression: Expr,
    forbidden_kinds: Collection[ExprKind],
    filename: str | None,
) -> None:
    """Fail when the expression kind is one of `forbidden_kinds`.

    Raises:
        TemplateSyntaxError: E_UNALLOWED_EXPRESSION at the expression location
    """
    if expression.kind in forbidden_kinds:
        raise _unallowed(tag_name, expression, filename)


class PropsLiteral:
    """Ordered `(key_text, value_text)` pairs for a props dict literal.

    Keys keep their first-seen position; adding a key again replaces its
    value in place. Serialization to literal syntax happens only in
    `__str__`, at the point code text is emitted.

    Example:
        >>> props = PropsLiteral()
        >>> props.add("'title'", "'hi'")
        >>> str(props)
        "{ 'title': 'hi' }"
    """

    __slots__ = ("_pairs",)

    def __init__(self) -> None:
        self._pairs: dict[str, str] = {}

    def add(self, key: str, value: str) -> None:
        self._pairs[key] = value

    def items(self) -> list[tuple[str, str]]:
        return list(self._pairs.items())

    def __len__(self) -> int:
        return len(self._pairs)

    def __str__(self) -> str:
        if not self._pairs:
            return "{}"
        return "{ " + ", ".join(f"{k}: {v}" for k, v in self._pairs.items()) + " }"


def parse_sequence_expression(expression: Expr, compiler: SupportsRender) -> tuple[str, str]:
    """Split a call-like argument list into a name and a props literal.

    The first element of a sequence becomes the name; object literals and
    keyword assignments among the remaining elements are folded into the
    props literal. Other elements are ignored.

    ```
    ('foo.bar', title='hello')     → ("'foo.bar'", "{ 'title': 'hello' }")
    ('foo.bar', {'title': 'hello'}) → ("'foo.bar'", "{ 'title': 'hello' }")
    user.alert                      → ("ctx.access(ctx.resolve('user'), 'alert')", "{}")
    ```
    """
    if not isinstance(expression, Sequence):
        return compiler.render(expression), "{}"

    first, *rest = expression.elements
    name = compiler.render(first)
    props = PropsLiteral()

    for element in rest:
        if element.kind is ExprKind.OBJECT_LITERAL:
            for prop in element.properties:
                props.add(compiler.render(prop.key), compiler.render(prop.value))
        elif element.kind is ExprKind.ASSIGNMENT:
            props.add(repr(element.left.name), compiler.render(element.right))

    return name, str(props)


def parse_as_key_value_pair(
    expression: Expr,
    compiler: SupportsRender,
    allowed_value_kinds: Collection[ExprKind] = (),
    *,
    tag_name: str = "slot",
) -> tuple[str, str | None]:
    """Parse ``('key')`` or ``('key', value)`` tag arguments.

    Constraints:
        1. The expression must be a `Literal` or a `Sequence`.
        2. A sequence holds at most 2 elements, the first a `Literal`.
        3. When `allowed_value_kinds` is non-empty, the second element
           must be one of them.

    Returns:
        ``(literal_text, None)`` for a bare literal, otherwise
        ``(literal_text, rendered_value)``.

    Raises:
        TemplateSyntaxError: E_UNALLOWED_EXPRESSION or E_MAX_ARGUMENTS
    """
    filename = compiler.filename
    allow_expressions(tag_name, expression, (ExprKind.LITERAL, ExprKind.SEQUENCE), filename)

    if not isinstance(expression, Sequence):
        return expression.raw, None

    if len(expression.elements) > 2:
        raise TemplateSyntaxError(
            f"Maximum of 2 arguments are allowed for {tag_name} tag",
            code=ErrorCode.MAX_ARGUMENTS,
            filename=filename,
            lineno=expression.lineno,
            col_offset=expression.col_offset,
        )

    key = expression.elements[0]
    allow_expressions(tag_name, key, (ExprKind.LITERAL,), filename)
    if len(expression.elements) == 1:
        return key.raw, None

    value = expression.elements[1]
    if allowed_value_kinds:
        allow_expressions(tag_name, value, allowed_value_kinds, filename)

    return key.raw, compiler.render(value)
