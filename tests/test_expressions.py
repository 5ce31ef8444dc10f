"""Tests for expression parsing, rendering, validation and tag-argument normalization."""

from __future__ import annotations

import pytest

from ledge import ErrorCode, TemplateSyntaxError
from ledge.compiler.expressions import ExpressionCompiler
from ledge.nodes import (
    Assignment,
    Compare,
    ExprKind,
    Identifier,
    Literal,
    Member,
    Sequence,
)
from ledge.parser import parse_expression
from ledge.utils.expressions import (
    PropsLiteral,
    allow_expressions,
    disallow_expressions,
    parse_as_key_value_pair,
    parse_sequence_expression,
)


@pytest.fixture
def compiler() -> ExpressionCompiler:
    return ExpressionCompiler("page.edge")


class TestParseExpression:
    def test_identifier(self) -> None:
        expr = parse_expression("user")
        assert isinstance(expr, Identifier)
        assert expr.kind is ExprKind.IDENTIFIER
        assert expr.name == "user"

    def test_keyword_arguments_become_assignments(self) -> None:
        expr = parse_expression("'card', title='hi'")
        assert isinstance(expr, Sequence)
        name, title = expr.elements
        assert isinstance(name, Literal)
        assert (name.value, name.raw) == ("card", "'card'")
        assert isinstance(title, Assignment)
        assert title.left.name == "title"
        assert title.right.value == "hi"

    def test_single_argument_collapses(self) -> None:
        expr = parse_expression("user.name")
        assert isinstance(expr, Member)
        assert expr.attr == "name"
        assert expr.obj.name == "user"

    def test_lone_keyword_is_a_sequence(self) -> None:
        expr = parse_expression("x=1")
        assert isinstance(expr, Sequence)
        assert expr.elements[0].kind is ExprKind.ASSIGNMENT

    def test_each_target(self) -> None:
        expr = parse_expression("(user, index) in users")
        assert isinstance(expr, Compare)
        assert expr.ops == ("in",)
        assert [e.name for e in expr.left.elements] == ["user", "index"]

    def test_positions_are_template_positions(self) -> None:
        expr = parse_expression("  user", lineno=3, col_offset=10)
        assert (expr.lineno, expr.col_offset) == (3, 12)

    def test_positions_on_continuation_lines(self) -> None:
        expr = parse_expression("a,\n  b", lineno=5, col_offset=4)
        assert (expr.elements[1].lineno, expr.elements[1].col_offset) == (6, 2)

    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            (" x + ", (4, 7)),
            ("a,\n  b +", (5, 5)),
        ],
    )
    def test_error_at_end_stays_on_argument_lines(self, source: str, expected: tuple[int, int]) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            parse_expression(source, filename="page.edge", lineno=4, col_offset=2)
        assert exc_info.value.lineno == expected[0]
        assert exc_info.value.col_offset <= expected[1]

    @pytest.mark.parametrize(
        ("source", "message"),
        [
            ("", "Expected an expression"),
            ("   ", "Expected an expression"),
            ("x +", "Invalid expression"),
            ("x) + (y", "Invalid expression"),
            ("a[1:2]", "Slices are not supported"),
            ("lambda: 1", "Lambda expressions are not supported"),
            ("f(*args)", "Argument unpacking is not supported"),
            ("{**a}", "Dict unpacking is not supported"),
            ("a @ b", "Operator MatMult is not supported"),
        ],
    )
    def test_invalid_syntax(self, source: str, message: str) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            parse_expression(source, filename="page.edge")
        assert exc_info.value.code is ErrorCode.SYNTAX_ERROR
        assert message in exc_info.value.message
        assert exc_info.value.filename == "page.edge"


class TestExpressionCompiler:
    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("user", "ctx.resolve('user')"),
            ("'hi'", "'hi'"),
            ("42", "42"),
            ("None", "None"),
            ("user.name", "ctx.access(ctx.resolve('user'), 'name')"),
            ("items[0]", "ctx.access(ctx.resolve('items'), 0)"),
            ("a + 1", "(ctx.resolve('a') + 1)"),
            ("not a", "(not ctx.resolve('a'))"),
            ("-a", "(-ctx.resolve('a'))"),
            ("a < b <= c", "(ctx.resolve('a') < ctx.resolve('b') <= ctx.resolve('c'))"),
            ("a and b or c", "((ctx.resolve('a') and ctx.resolve('b')) or ctx.resolve('c'))"),
            ("x if y else z", "(ctx.resolve('x') if ctx.resolve('y') else ctx.resolve('z'))"),
            ("[1, 'a']", "[1, 'a']"),
            ("{'a': b}", "{'a': ctx.resolve('b')}"),
            ("(1,)", "(1,)"),
            ("f(1, k=2)", "ctx.resolve('f')(1, k=2)"),
            ("loop.cycle('odd', 'even')", "ctx.access(ctx.resolve('loop'), 'cycle')('odd', 'even')"),
        ],
    )
    def test_render(self, compiler: ExpressionCompiler, source: str, expected: str) -> None:
        assert compiler.render(parse_expression(source)) == expected

    def test_bare_assignment_is_not_allowed(self, compiler: ExpressionCompiler) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            compiler.render(parse_expression("x=1"))
        assert exc_info.value.code is ErrorCode.UNALLOWED_EXPRESSION
        assert exc_info.value.filename == "page.edge"


class TestValidation:
    def test_allow_accepts_listed_kinds(self) -> None:
        allow_expressions("include", parse_expression("'a'"), {ExprKind.LITERAL}, "page.edge")

    def test_allow_rejects_other_kinds(self) -> None:
        expr = parse_expression("  partial", lineno=2, col_offset=9)
        with pytest.raises(TemplateSyntaxError) as exc_info:
            allow_expressions("include", expr, {ExprKind.LITERAL}, "page.edge")
        error = exc_info.value
        assert error.code is ErrorCode.UNALLOWED_EXPRESSION
        assert error.message == "Identifier is not allowed for include tag."
        assert (error.filename, error.lineno, error.col_offset) == ("page.edge", 2, 11)

    def test_disallow(self) -> None:
        disallow_expressions("include", parse_expression("a"), {ExprKind.SEQUENCE}, None)
        with pytest.raises(TemplateSyntaxError, match="Sequence is not allowed for include tag"):
            disallow_expressions("include", parse_expression("a, b"), {ExprKind.SEQUENCE}, None)


class TestPropsLiteral:
    def test_empty(self) -> None:
        assert str(PropsLiteral()) == "{}"

    def test_repeated_key_replaces_in_place(self) -> None:
        props = PropsLiteral()
        props.add("'a'", "1")
        props.add("'b'", "2")
        props.add("'a'", "3")
        assert str(props) == "{ 'a': 3, 'b': 2 }"
        assert len(props) == 2


class TestParseSequenceExpression:
    def test_name_and_keyword_props(self, compiler: ExpressionCompiler) -> None:
        expr = parse_expression("'card', title='hi'")
        assert parse_sequence_expression(expr, compiler) == ("'card'", "{ 'title': 'hi' }")

    def test_object_literal_props(self, compiler: ExpressionCompiler) -> None:
        expr = parse_expression("'foo.bar', {'title': 'hello'}")
        assert parse_sequence_expression(expr, compiler) == ("'foo.bar'", "{ 'title': 'hello' }")

    def test_non_sequence(self, compiler: ExpressionCompiler) -> None:
        expr = parse_expression("user.alert")
        assert parse_sequence_expression(expr, compiler) == (
            "ctx.access(ctx.resolve('user'), 'alert')",
            "{}",
        )

    def test_other_elements_are_ignored(self, compiler: ExpressionCompiler) -> None:
        expr = parse_expression("'card', 1, a=b")
        assert parse_sequence_expression(expr, compiler) == ("'card'", "{ 'a': ctx.resolve('b') }")

    def test_later_key_replaces_earlier(self, compiler: ExpressionCompiler) -> None:
        expr = parse_expression("'card', {'a': 1, 'b': 2}, a=3")
        assert parse_sequence_expression(expr, compiler) == ("'card'", "{ 'a': 3, 'b': 2 }")

    def test_props_evaluate_to_a_dict(self, compiler: ExpressionCompiler) -> None:
        _, props = parse_sequence_expression(parse_expression("'card', title='hi', n=2"), compiler)
        assert eval(props) == {"title": "hi", "n": 2}


class TestParseAsKeyValuePair:
    def test_bare_literal(self, compiler: ExpressionCompiler) -> None:
        assert parse_as_key_value_pair(parse_expression("'header'"), compiler) == ("'header'", None)

    def test_key_and_value(self, compiler: ExpressionCompiler) -> None:
        expr = parse_expression("'header', scope")
        assert parse_as_key_value_pair(expr, compiler, {ExprKind.IDENTIFIER}) == (
            "'header'",
            "ctx.resolve('scope')",
        )

    def test_any_value_kind_when_unrestricted(self, compiler: ExpressionCompiler) -> None:
        expr = parse_expression("'title', user.name")
        assert parse_as_key_value_pair(expr, compiler, tag_name="set") == (
            "'title'",
            "ctx.access(ctx.resolve('user'), 'name')",
        )

    def test_too_many_arguments(self, compiler: ExpressionCompiler) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            parse_as_key_value_pair(parse_expression("'a', b, c"), compiler)
        assert exc_info.value.code is ErrorCode.MAX_ARGUMENTS
        assert exc_info.value.message == "Maximum of 2 arguments are allowed for slot tag"

    @pytest.mark.parametrize("source", ["header", "x, 1", "a.b"])
    def test_key_must_be_literal(self, compiler: ExpressionCompiler, source: str) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            parse_as_key_value_pair(parse_expression(source), compiler)
        assert exc_info.value.code is ErrorCode.UNALLOWED_EXPRESSION

    def test_value_kind_is_checked(self, compiler: ExpressionCompiler) -> None:
        with pytest.raises(TemplateSyntaxError, match="Literal is not allowed for slot tag"):
            parse_as_key_value_pair(parse_expression("'a', 1"), compiler, {ExprKind.IDENTIFIER})
