"""Tests for @component, @slot and @include."""

from __future__ import annotations

import pytest

from ledge import (
    DictLoader,
    Environment,
    ErrorCode,
    TemplateRuntimeError,
    TemplateSyntaxError,
)


@pytest.fixture
def env() -> Environment:
    loader = DictLoader(
        {
            "components.card": (
                "<div class=\"card\">\n"
                "<h2>{{ title }}</h2>\n"
                "{{{ slots.main() }}}"
                "</div>\n"
            ),
            "components.list": (
                "<ul>\n"
                "@each(item in items)\n"
                "<li>{{ slots.row(item) }}</li>\n"
                "@end\n"
                "</ul>\n"
            ),
            "components.panel": (
                "<header>{{ slots.header() }}</header>\n"
                "{{ slots.main() }}"
            ),
            "components.peek": "[{{ secret }}][{{ site }}]",
            "components.broken": "{{{ slots.footer() }}}",
            "components.tree": "@!component('components.tree')\n",
            "partials.greeting": "Hello {{ name }}!",
            "partials.recursive": "@include('partials.recursive')\n",
        }
    )
    return Environment(loader=loader, globals={"site": "ledge"}, max_include_depth=8)


class TestComponents:
    def test_main_slot(self, env: Environment) -> None:
        template = env.from_string("@component('components.card', title='Hi')\nBody\n@end\n")
        assert template.render() == '<div class="card">\n<h2>Hi</h2>\nBody\n</div>\n'

    def test_self_closing(self, env: Environment) -> None:
        template = env.from_string("@!component('components.card', title='Hi')\n")
        assert template.render() == '<div class="card">\n<h2>Hi</h2>\n</div>\n'

    def test_props_from_dict_literal(self, env: Environment) -> None:
        template = env.from_string("@!component('components.card', {'title': 'Dict'})\n")
        assert "<h2>Dict</h2>" in template.render()

    def test_props_are_escaped_but_slots_are_not(self, env: Environment) -> None:
        template = env.from_string("@component('components.card', title=title)\n<em>{{ body }}</em>\n@end\n")
        html = template.render(title="<x>", body="a & b")
        assert "<h2>&lt;x&gt;</h2>" in html
        assert "<em>a &amp; b</em>" in html

    def test_dynamic_component_name(self, env: Environment) -> None:
        template = env.from_string("@!component(name, title='T')\n")
        assert "<h2>T</h2>" in template.render(name="components.card")

    def test_named_scoped_slot(self, env: Environment) -> None:
        template = env.from_string(
            "@component('components.list', items=users)\n"
            "@slot('row', user)\n"
            "{{ prefix }}{{ user.name }}\n"
            "@end\n"
            "@end\n"
        )
        html = template.render(users=[{"name": "Ada"}, {"name": "Bob"}], prefix="*")
        assert html == "<ul>\n<li>*Ada\n</li>\n<li>*Bob\n</li>\n</ul>\n"

    def test_named_slot_and_main_body(self, env: Environment) -> None:
        template = env.from_string(
            "@component('components.panel')\n"
            "@slot('header')\n"
            "Title\n"
            "@end\n"
            "Content\n"
            "@end\n"
        )
        assert template.render() == "<header>Title\n</header>\nContent\n"

    def test_explicit_main_slot_replaces_body(self, env: Environment) -> None:
        template = env.from_string(
            "@component('components.card', title='T')\n"
            "ignored\n"
            "@slot('main')\n"
            "Explicit\n"
            "@end\n"
            "@end\n"
        )
        assert template.render() == '<div class="card">\n<h2>T</h2>\nExplicit\n</div>\n'

    def test_component_context_is_isolated(self, env: Environment) -> None:
        template = env.from_string("@!component('components.peek')\n")
        assert template.render(secret="hidden") == "[][ledge]"

    def test_slot_scope_does_not_leak_to_caller(self, env: Environment) -> None:
        template = env.from_string(
            "@component('components.list', items=[1])\n@slot('row', n)\n{{ n }}\n@end\n@end\n[{{ n }}]"
        )
        assert template.render().endswith("</ul>\n[]")

    def test_missing_slot_call_fails_with_suggestion(self, env: Environment) -> None:
        template = env.from_string("@!component('components.broken')\n")
        with pytest.raises(TemplateRuntimeError) as exc_info:
            template.render()
        error = exc_info.value
        assert error.template_name == "components.broken"
        assert "not callable" in error.message
        assert error.suggestion is not None

    def test_recursive_component_hits_depth_limit(self, env: Environment) -> None:
        with pytest.raises(TemplateRuntimeError) as exc_info:
            env.render("components.tree")
        assert exc_info.value.code is ErrorCode.INCLUDE_DEPTH


class TestComponentErrors:
    def test_duplicate_slot(self, env: Environment) -> None:
        with pytest.raises(TemplateSyntaxError, match="defined twice"):
            env.from_string(
                "@component('components.panel')\n@slot('a')\n@end\n@slot('a')\n@end\n@end\n"
            )

    def test_slot_outside_component(self, env: Environment) -> None:
        with pytest.raises(TemplateSyntaxError, match="direct child of @component"):
            env.from_string("@slot('a')\n@end\n")

    def test_slot_name_must_be_a_string(self, env: Environment) -> None:
        with pytest.raises(TemplateSyntaxError, match="Slot name must be a string"):
            env.from_string("@component('components.panel')\n@slot(1)\n@end\n@end\n")

    def test_slot_argument_limit(self, env: Environment) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            env.from_string("@component('components.panel')\n@slot('a', b, c)\n@end\n@end\n")
        assert exc_info.value.code is ErrorCode.MAX_ARGUMENTS

    def test_component_name_expression_kind(self, env: Environment) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            env.from_string("@!component(a + b)\n")
        assert exc_info.value.code is ErrorCode.UNALLOWED_EXPRESSION


class TestInclude:
    def test_include(self, env: Environment) -> None:
        assert env.from_string("@include('partials.greeting')\n").render(name="Ada") == "Hello Ada!"

    def test_include_sees_loop_variables(self, env: Environment) -> None:
        template = env.from_string("@each(name in names)\n@include('partials.greeting')\n;\n@end\n")
        assert template.render(names=["a", "b"]) == "Hello a!;\nHello b!;\n"

    def test_dynamic_reference(self, env: Environment) -> None:
        template = env.from_string("@include(partial)\n")
        assert template.render(partial="partials.greeting", name="Bo") == "Hello Bo!"

    def test_conditional_reference(self, env: Environment) -> None:
        template = env.from_string("@include('partials.greeting' if greet else 'components.peek')\n")
        assert template.render(greet=True, name="Al") == "Hello Al!"
        assert template.render(greet=False) == "[][ledge]"

    def test_include_depth_limit(self, env: Environment) -> None:
        with pytest.raises(TemplateRuntimeError) as exc_info:
            env.render("partials.recursive")
        error = exc_info.value
        assert error.code is ErrorCode.INCLUDE_DEPTH
        assert "Maximum include depth exceeded (8)" in error.message

    @pytest.mark.parametrize("argument", ["'a', 'b'", "x=1", "[1, 2]"])
    def test_disallowed_arguments(self, env: Environment, argument: str) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            env.from_string(f"@include({argument})\n")
        assert exc_info.value.code is ErrorCode.UNALLOWED_EXPRESSION
