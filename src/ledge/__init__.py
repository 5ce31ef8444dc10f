"""Ledge — a compiler for ``@tag`` structured-markup templates.

Ledge compiles Edge-syntax templates (``@if``, ``@each``, ``@section``,
``@component``, ``{{ mustaches }}``) into Python render functions.

Quickstart:
    >>> from ledge import Environment
    >>> env = Environment()
    >>> template = env.from_string("Hello, {{ name }}!")
    >>> template.render(name="World")
    'Hello, World!'

File-based templates:
    >>> from ledge import DiskLoader, Environment
    >>> env = Environment(loader=DiskLoader("views/"))
    >>> env.get_template("users::list").render(users=users)

Architecture:
Template Source → Lexer → Token Tree → Layout Merge → Compiler → Python source → exec()

Pipeline stages:
1. **Lexer**: Tokenizes template source into a tree of tags, text and mustaches
2. **Layout merge**: Overlays a template's sections onto its ``@layout``
3. **Compiler**: Writes the Python source of ``render(ctx, template)``
4. **Template**: Wraps the compiled function with the ``render()`` interface

Scoping:
Every render gets its own `Context`, a stack of frames. ``@each``
iterations and slot bodies push a frame, so names they bind never leak
out of the body.

Undefined Names:
A name no frame binds resolves to `UNDEFINED`, which renders as an empty
string, is falsy and iterates as empty:

    >>> env.from_string("[{{ missing }}]").render()
    '[]'

"""

from ledge._types import Location, Token, TokenKind
from ledge.environment import (
    DictLoader,
    DiskLoader,
    Environment,
    ErrorCode,
    SourceSnippet,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    build_source_snippet,
)
from ledge.compiler import TagSpec
from ledge.template import UNDEFINED, Context, LoopMeta, Template
from ledge.utils.html import Markup, html_escape

__version__ = "0.1.0"

__all__ = [
    "UNDEFINED",
    "Context",
    "DictLoader",
    "DiskLoader",
    "Environment",
    "ErrorCode",
    "Location",
    "LoopMeta",
    "Markup",
    "SourceSnippet",
    "TagSpec",
    "Template",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "Token",
    "TokenKind",
    "__version__",
    "build_source_snippet",
    "html_escape",
]
