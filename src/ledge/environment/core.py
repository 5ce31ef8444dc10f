"""Ledge Environment — central configuration and template management.

The Environment holds the loader, globals and the tag registry, and turns
template references into compiled `Template` objects:

    reference → loader → lexer → layout resolution → compiler → Template

Layout Resolution:
A template whose first tag is ``@layout('<reference>')`` is merged into its
parent before compilation. The parent is loaded, lexed and (recursively)
resolved itself, then `merge_sections()` overlays the child's sections and
hoists its ``@set`` calls:

    ```
    layouts/main.edge              home.edge
    <body>                         @layout('layouts.main')
    @section('content')            @section('content')
      default                        @super
    @end                             <p>Home</p>
    </body>                        @end
    ```

No Caching:
Every `get_template()` call loads and compiles afresh. Callers that render
the same template repeatedly keep the returned `Template`.

"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ledge._types import Token, TokenKind
from ledge.compiler.core import Compiler
from ledge.compiler.tags import TagSpec, builtin_tags
from ledge.environment.exceptions import (
    ErrorCode,
    TemplateNotFoundError,
    TemplateSyntaxError,
)
from ledge.environment.loaders import Loader
from ledge.lexer import Lexer
from ledge.nodes import Literal
from ledge.parser import parse_expression
from ledge.template.context import DEFAULT_MAX_DEPTH
from ledge.template.core import Template
from ledge.utils.sections import find_duplicate_sections, is_block, merge_sections

logger = logging.getLogger(__name__)


class Environment:
    """Central configuration for Ledge templates.

    Attributes:
        loader: Template source provider (DiskLoader, DictLoader, ...)
        globals: Variables visible in every template (data shadows them)
        tags: Tag registry; built-in tags plus any registered ones
        max_include_depth: Nesting limit for ``@include`` and ``@component``

    Example:
            >>> env = Environment(loader=DiskLoader("views/"), globals={"site": "Ledge"})
            >>> env.render("pages.home", user={"name": "Ada"})
            '<h1>Ledge</h1>...'

            >>> env.from_string("Hello {{ name }}").render(name="World")
            'Hello World'

    """

    def __init__(
        self,
        loader: Loader | None = None,
        *,
        globals: Mapping[str, Any] | None = None,
        tags: Mapping[str, TagSpec] | None = None,
        max_include_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self.loader = loader
        self.globals: dict[str, Any] = dict(globals or {})
        self.tags: dict[str, TagSpec] = builtin_tags()
        if tags:
            self.tags.update(tags)
        self.max_include_depth = max_include_depth

    def add_global(self, name: str, value: Any) -> None:
        """Make `value` visible as `name` in every template."""
        self.globals[name] = value

    def register_tag(self, name: str, spec: TagSpec) -> None:
        """Register a custom tag, replacing any existing tag of that name."""
        self.tags[name] = spec

    # ─────────────────────────────────────────────────────────────────────────
    # Loading and compiling
    # ─────────────────────────────────────────────────────────────────────────

    def get_template(self, reference: str) -> Template:
        """Load and compile a template by reference.

        Raises:
            TemplateNotFoundError: No loader, or the loader cannot find it
            TemplateSyntaxError: The template (or one of its layouts) is invalid
        """
        source, filename = self._load(reference)
        return self._compile(source, reference, filename)

    def from_string(self, source: str, name: str | None = None) -> Template:
        """Compile a template from a source string.

        Example:
            >>> env.from_string("{{ 1 + 1 }}").render()
            '2'
        """
        return self._compile(source, name, name)

    def render(self, reference: str, data: Mapping[str, Any] | None = None, **kwargs: Any) -> str:
        """Load, compile and render a template in one call."""
        return self.get_template(reference).render(data, **kwargs)

    def parse(self, source: str, filename: str | None = None) -> list[Token]:
        """Lex `source` and resolve its layout chain into one token tree."""
        return self._parse(source, filename, (), {})

    def _load(self, reference: str) -> tuple[str, str | None]:
        if self.loader is None:
            raise TemplateNotFoundError(
                f"Template '{reference}' not found: no loader configured"
            )
        return self.loader.get_source(reference)

    def _compile(self, source: str, name: str | None, filename: str | None) -> Template:
        sources: dict[str | None, str] = {}
        try:
            tokens = self._parse(source, filename, (), sources)
            code = Compiler(self.tags).compile(tokens, name=name, filename=filename, source=source)
        except TemplateSyntaxError as e:
            if e.source is None:
                e.source = sources.get(e.filename)
            raise
        return Template(self, code, name=name, filename=filename, sources=sources)

    def _parse(
        self,
        source: str,
        filename: str | None,
        chain: tuple[str | None, ...],
        sources: dict[str | None, str],
    ) -> list[Token]:
        sources[filename] = source
        tokens = Lexer(self.tags, filename).tokenize(source)

        layout = self._find_layout(tokens)
        if layout is None:
            return tokens

        reference = self._layout_reference(layout, filename)
        parent_source, parent_filename = self._load(reference)
        if parent_filename in chain or parent_filename == filename:
            cycle = " -> ".join(str(f) for f in (*chain, filename, parent_filename))
            raise TemplateSyntaxError(
                f"Circular layout: {cycle}",
                code=ErrorCode.SYNTAX_ERROR,
                filename=filename,
                lineno=layout.loc.line,
                col_offset=layout.loc.column,
            )

        logger.debug("Resolving layout %s for %s", reference, filename or "<string>")
        parent = self._parse(parent_source, parent_filename, (*chain, filename), sources)

        for section in find_duplicate_sections(tokens):
            logger.warning(
                "Section %s is declared more than once in %s; the last one wins",
                section,
                filename or "<string>",
            )
        return merge_sections(parent, tokens)

    def _find_layout(self, tokens: list[Token]) -> Token | None:
        """Return the ``@layout`` tag when it is the first significant token.

        Raises:
            TemplateSyntaxError: A layout tag appears anywhere else
        """
        first = True
        for token in tokens:
            if token.kind is TokenKind.COMMENT or (
                token.kind is TokenKind.TEXT and not token.value.strip()
            ):
                continue
            if is_block(token, "layout"):
                if not first:
                    raise TemplateSyntaxError(
                        "@layout must be the first tag of a template",
                        code=ErrorCode.SYNTAX_ERROR,
                        filename=token.loc.filename,
                        lineno=token.loc.line,
                        col_offset=token.loc.column,
                    )
                return token
            first = False
        return None

    def _layout_reference(self, token: Token, filename: str | None) -> str:
        expr = parse_expression(
            token.raw_argument,
            filename=filename,
            lineno=token.loc.line,
            col_offset=token.loc.column + len("@layout("),
        )
        if not isinstance(expr, Literal) or not isinstance(expr.value, str):
            raise TemplateSyntaxError(
                f"{expr.kind.value} is not allowed for layout tag.",
                code=ErrorCode.UNALLOWED_EXPRESSION,
                filename=filename,
                lineno=expr.lineno,
                col_offset=expr.col_offset,
            )
        return expr.value
