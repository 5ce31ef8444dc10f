"""Token tree types shared by the lexer, the section merger and the compiler.

The lexer produces a tree of immutable `Token` objects. Block tags own their
body as a tuple of child tokens; every other token is a leaf. Because tokens
are frozen, transformations such as layout merging build new tokens with
`dataclasses.replace()` and share every untouched subtree.

Example:
    ```
    @section('body')
      Hello {{ name }}
    @end
    ```

    becomes::

    Token(TAG, name='section', raw_argument="'body'", children=(
        Token(TEXT, value='  Hello '),
        Token(MUSTACHE, raw_argument='name'),
        Token(TEXT, value='\\n'),
    ))

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenKind(Enum):
    """Kinds of nodes in a parsed template."""

    TEXT = "text"
    TAG = "tag"
    END_TAG = "end_tag"
    MUSTACHE = "mustache"
    COMMENT = "comment"


@dataclass(frozen=True, slots=True)
class Location:
    """Source position of a token (1-based line, 0-based column)."""

    line: int
    column: int
    filename: str | None = None

    def __str__(self) -> str:
        return f"{self.filename or '<template>'}:{self.line}:{self.column}"


@dataclass(frozen=True, slots=True)
class TagProperties:
    """Properties of a `TAG` or `END_TAG` token.

    Attributes:
        name: Tag identifier (``if``, ``section``, ``set``, ...)
        raw_argument: Unparsed text between the tag parentheses
        self_closing: True for ``@!tag(...)`` forms that take no body
    """

    name: str
    raw_argument: str = ""
    self_closing: bool = False


@dataclass(frozen=True, slots=True)
class MustacheProperties:
    """Properties of a `MUSTACHE` token.

    Attributes:
        raw_argument: Unparsed expression text between the braces
        escaped: False for ``{{{ raw }}}`` interpolation
    """

    raw_argument: str
    escaped: bool = True


@dataclass(frozen=True, slots=True)
class Token:
    """A node of the parsed template.

    `properties` is a `TagProperties` for tags, a `MustacheProperties` for
    mustaches and None for text and comments, which carry `value` instead.
    """

    kind: TokenKind
    loc: Location
    properties: TagProperties | MustacheProperties | None = None
    value: str = ""
    children: tuple[Token, ...] = ()

    @property
    def name(self) -> str | None:
        """Tag name, or None when this token is not a tag."""
        if isinstance(self.properties, TagProperties):
            return self.properties.name
        return None

    @property
    def raw_argument(self) -> str:
        if self.properties is None:
            return ""
        return self.properties.raw_argument

    def __repr__(self) -> str:
        if self.kind in (TokenKind.TEXT, TokenKind.COMMENT):
            return f"Token({self.kind.name}, {self.value!r})"
        if self.kind is TokenKind.MUSTACHE:
            return f"Token(MUSTACHE, {self.raw_argument!r})"
        return (
            f"Token({self.kind.name}, {self.name!r}, {self.raw_argument!r}, "
            f"children={len(self.children)})"
        )
