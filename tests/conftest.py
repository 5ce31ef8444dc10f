"""Pytest configuration and fixtures for Ledge tests."""

import pytest

from ledge import DictLoader, Environment


@pytest.fixture
def env():
    """Create a basic Ledge Environment."""
    return Environment()


@pytest.fixture
def env_with_loader():
    """Create a Ledge Environment with DictLoader and test templates."""
    loader = DictLoader(
        {
            "layouts.main": (
                "<html>\n"
                "<title>\n"
                "@section('title')\n"
                "Default title\n"
                "@end\n"
                "</title>\n"
                "<body>\n"
                "@section('body')\n"
                "Default body\n"
                "@end\n"
                "</body>\n"
                "</html>\n"
            ),
            "pages.home": (
                "@layout('layouts.main')\n"
                "@set('heading', 'Welcome')\n"
                "@section('body')\n"
                "<h1>{{ heading }}</h1>\n"
                "@end\n"
            ),
            "partials.greeting": "Hello {{ name }}!",
            "components.card": (
                "<div class=\"card\">\n"
                "<h2>{{ title }}</h2>\n"
                "{{{ slots.main() }}}"
                "</div>\n"
            ),
        }
    )
    return Environment(loader=loader)


def assert_template_equal(template_result: str, expected: str) -> None:
    """Assert template result equals expected, normalizing whitespace.

    Args:
        template_result: The actual template rendering result.
        expected: The expected output.
    """
    actual_normalized = " ".join(template_result.split())
    expected_normalized = " ".join(expected.split())
    assert actual_normalized == expected_normalized, (
        f"Template output mismatch:\n"
        f"  Actual: {actual_normalized!r}\n"
        f"  Expected: {expected_normalized!r}"
    )
