"""Compile pipeline benchmarks: lexing, layout resolution and code generation.

Run with:
    pytest benchmarks/test_benchmark_compile_pipeline.py -v --benchmark-only

Each stage is timed on its own so a regression can be pinned to the
lexer, the section merger or the compiler.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from ledge import Environment
from ledge.compiler import Compiler
from ledge.lexer import Lexer

if TYPE_CHECKING:
    from pytest_benchmark.fixture import BenchmarkFixture


# Realistic page fragment
MEDIUM = """\
@if(user)
  <div class="profile">
    <h1>{{ user.name }}</h1>
    <p>{{ user.bio }}</p>
    @each(post in user.posts)
      <article>
        <h2>{{ post.title }}</h2>
        {{{ post.content }}}
      </article>
    @end
  </div>
@else
  <p>Please log in.</p>
@end
"""

# Repeated medium template
LARGE = MEDIUM * 20

# Lots of raw text between constructs
DATA_HEAVY = ("<p>" + "lorem ipsum dolor sit amet " * 20 + "</p>\n") * 50 + "{{ footer }}\n"


@pytest.mark.benchmark(group="compile:lexer")
@pytest.mark.parametrize(
    "source",
    [pytest.param(MEDIUM, id="medium"), pytest.param(LARGE, id="large"), pytest.param(DATA_HEAVY, id="data")],
)
def test_tokenize(benchmark: BenchmarkFixture, ledge_env: Environment, source: str) -> None:
    lexer = Lexer(ledge_env.tags)
    tokens = benchmark(lexer.tokenize, source)
    assert tokens


@pytest.mark.benchmark(group="compile:layout")
def test_resolve_layout(
    benchmark: BenchmarkFixture,
    ledge_env: Environment,
    template_source,
) -> None:
    source = template_source("pages/profile.edge")
    tokens = benchmark(ledge_env.parse, source, "pages/profile.edge")
    assert tokens[0].name == "set"


@pytest.mark.benchmark(group="compile:codegen")
def test_generate_code(benchmark: BenchmarkFixture, ledge_env: Environment) -> None:
    tokens = ledge_env.parse(LARGE)
    compiler = Compiler(ledge_env.tags)
    code = benchmark(compiler.compile, tokens, "large")
    assert code.startswith("def render(ctx, template):")


@pytest.mark.benchmark(group="compile:full")
def test_cold_get_template(benchmark: BenchmarkFixture, ledge_env: Environment) -> None:
    template = benchmark(ledge_env.get_template, "pages.profile")
    assert template.name == "pages.profile"
