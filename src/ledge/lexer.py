"""Ledge lexer — turns template source into a token tree.

Syntax:
    ```
    @layout('layouts.main')            inline tag
    @section('body')                   block tag, closed by @end / @endsection
      {{ user.name }}                  escaped interpolation
      {{{ user.bio }}}                 raw interpolation
      @{{ not interpolated }}          literal mustache text
      {{-- a comment --}}
      @!component('card', title='hi')  self-closing block tag
      @@section                        literal "@section" text
    @end
    ```

Tags are recognised only at the start of a line (after optional
indentation) and only for names registered with the environment; anything
else is text. A tag line produces no output of its own: its indentation and
trailing newline are consumed with it.

Scanning happens in two steps: `Lexer.scan()` yields a flat stream of
tokens (including `END_TAG` tokens for ``@end``), and `Lexer.tokenize()`
nests that stream into the tree of block tags and their children.

Example:
    >>> from ledge.compiler.tags import builtin_tags
    >>> tokens = tokenize("@if(user)\\nHi {{ user }}\\n@end\\n", builtin_tags())
    >>> tokens[0].name, [t.kind.name for t in tokens[0].children]
    ('if', ['TEXT', 'MUSTACHE', 'TEXT'])

"""

from __future__ import annotations

import bisect
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Protocol

from ledge._types import Location, MustacheProperties, TagProperties, Token, TokenKind
from ledge.environment.exceptions import ErrorCode, TemplateSyntaxError

# Indentation, one or two "@", optional "!", tag name
_TAG_RE = re.compile(r"[ \t]*(@@?)(!?)([A-Za-z_][A-Za-z0-9_]*)")
_TRAILING_RE = re.compile(r"[ \t]*(?:\r?\n|$)")


class TagSpecLike(Protocol):
    """What the lexer needs to know about a tag."""

    block: bool
    seekable: bool


@dataclass(slots=True)
class _OpenBlock:
    """A block tag whose body is still being collected."""

    token: Token
    children: list[Token] = field(default_factory=list)


class Lexer:
    """Tokenize Ledge template source.

    Attributes:
        tags: Registered tags, by name
        filename: Template filename attached to every token location

    Thread-Safety:
        A Lexer holds per-call state; create one per source string, or use
        the module-level `tokenize()` function.
    """

    __slots__ = ("_line_starts", "_pos", "_source", "_text", "_text_pos", "filename", "tags")

    def __init__(self, tags: Mapping[str, TagSpecLike], filename: str | None = None):
        self.tags = tags
        self.filename = filename
        self._source = ""
        self._pos = 0
        self._line_starts: list[int] = [0]
        self._text: list[str] = []
        self._text_pos = 0

    # ─────────────────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────────────────

    def tokenize(self, source: str) -> list[Token]:
        """Tokenize source into a tree of top-level tokens.

        Raises:
            TemplateSyntaxError: E_UNCLOSED_TAG, E_UNEXPECTED_END or
                E_SYNTAX_ERROR for malformed templates
        """
        root: list[Token] = []
        stack: list[_OpenBlock] = []

        for token in self.scan(source):
            siblings = stack[-1].children if stack else root

            if token.kind is TokenKind.END_TAG:
                if not stack:
                    raise self._error(
                        f"Unexpected @{token.name}, there is no open block to close",
                        token.loc,
                        ErrorCode.UNEXPECTED_END,
                    )
                closing = token.name[3:]
                opened = stack[-1].token
                if closing and closing != opened.name:
                    raise self._error(
                        f"Unexpected @{token.name}, expected @end{opened.name} "
                        f"to close @{opened.name} from line {opened.loc.line}",
                        token.loc,
                        ErrorCode.UNEXPECTED_END,
                    )
                block = stack.pop()
                finished = Token(
                    block.token.kind,
                    block.token.loc,
                    block.token.properties,
                    children=tuple(block.children),
                )
                (stack[-1].children if stack else root).append(finished)
                continue

            if token.kind is TokenKind.TAG and self._opens_block(token):
                stack.append(_OpenBlock(token))
                continue

            siblings.append(token)

        if stack:
            opened = stack[-1].token
            raise self._error(
                f"Unclosed tag @{opened.name}, expected @end or @end{opened.name}",
                opened.loc,
                ErrorCode.UNCLOSED_TAG,
            )
        return root

    def scan(self, source: str) -> Iterator[Token]:
        """Yield the flat token stream for `source`."""
        self._source = source
        self._pos = 0
        self._line_starts = [0] + [i + 1 for i, ch in enumerate(source) if ch == "\n"]
        self._text = []
        self._text_pos = 0

        while self._pos < len(source):
            if self._at_line_start():
                match = _TAG_RE.match(source, self._pos)
                if match and self._is_tag_name(match.group(3)):
                    yield from self._flush_text()
                    yield from self._scan_tag(match)
                    continue
            yield from self._scan_line()

        yield from self._flush_text()

    # ─────────────────────────────────────────────────────────────────────────
    # Tags
    # ─────────────────────────────────────────────────────────────────────────

    def _is_tag_name(self, name: str) -> bool:
        return name in self.tags or name == "end" or (
            name.startswith("end") and name[3:] in self.tags
        )

    def _opens_block(self, token: Token) -> bool:
        spec = self.tags.get(token.name)
        return bool(spec and spec.block and not token.properties.self_closing)

    def _scan_tag(self, match: re.Match[str]) -> Iterator[Token]:
        ats, bang, name = match.group(1), match.group(2), match.group(3)
        at_pos = match.start(1)
        loc = self._location(at_pos)

        if ats == "@@":
            # Escaped tag: keep one "@" and the rest of the line as text
            self._add_text(self._source[match.start() : at_pos] + "@", match.start())
            self._pos = at_pos + 2
            yield from self._scan_line()
            return

        self._pos = match.end()
        if name == "end" or (name.startswith("end") and name not in self.tags):
            self._expect_line_end(name, loc)
            yield Token(TokenKind.END_TAG, loc, TagProperties(name))
            return

        spec = self.tags[name]
        argument = ""
        paren = self._skip_spaces()
        if paren < len(self._source) and self._source[paren] == "(":
            argument = self._scan_argument(paren, name, loc)
        elif spec.seekable:
            raise self._error(
                f"Missing opening parenthesis for @{name} tag",
                loc,
                ErrorCode.SYNTAX_ERROR,
            )

        self._expect_line_end(name, loc)
        yield Token(TokenKind.TAG, loc, TagProperties(name, argument, self_closing=bool(bang)))

    def _skip_spaces(self) -> int:
        pos = self._pos
        while pos < len(self._source) and self._source[pos] in " \t":
            pos += 1
        return pos

    def _scan_argument(self, open_pos: int, name: str, loc: Location) -> str:
        """Return the text between balanced parentheses starting at `open_pos`."""
        source = self._source
        depth = 0
        quote: str | None = None
        pos = open_pos
        while pos < len(source):
            ch = source[pos]
            if quote:
                if ch == "\\":
                    pos += 1
                elif ch == quote:
                    quote = None
            elif ch in "'\"":
                quote = ch
            elif ch in "([{":
                depth += 1
            elif ch in ")]}":
                depth -= 1
                if depth == 0:
                    self._pos = pos + 1
                    return source[open_pos + 1 : pos]
            pos += 1

        raise self._error(
            f"Unclosed parenthesis in @{name} tag arguments",
            loc,
            ErrorCode.SYNTAX_ERROR,
        )

    def _expect_line_end(self, name: str, loc: Location) -> None:
        match = _TRAILING_RE.match(self._source, self._pos)
        if match is None:
            raise self._error(
                f"Unexpected content after @{name} tag, tags must be on their own line",
                self._location(self._pos),
                ErrorCode.SYNTAX_ERROR,
            )
        self._pos = match.end()

    # ─────────────────────────────────────────────────────────────────────────
    # Text and mustaches
    # ─────────────────────────────────────────────────────────────────────────

    def _scan_line(self) -> Iterator[Token]:
        """Scan text up to and including the next newline outside a mustache."""
        source = self._source
        end = source.find("\n", self._pos)
        line_end = len(source) if end == -1 else end + 1

        while self._pos < line_end:
            brace = source.find("{{", self._pos, line_end)
            if brace == -1:
                self._add_text(source[self._pos : line_end], self._pos)
                self._pos = line_end
                return

            if brace > 0 and source[brace - 1] == "@":
                # "@{{ ... }}" is literal mustache text
                self._add_text(source[self._pos : brace - 1], self._pos)
                close = source.find("}}", brace + 2)
                stop = len(source) if close == -1 else close + 2
                self._add_text(source[brace:stop], brace)
                self._pos = stop
            else:
                self._add_text(source[self._pos : brace], self._pos)
                yield from self._flush_text()
                yield self._scan_mustache(brace)

            if self._pos > line_end:
                # A multi-line mustache moved us past the line; finish the new one
                end = source.find("\n", self._pos)
                line_end = len(source) if end == -1 else end + 1

    def _scan_mustache(self, start: int) -> Token:
        source = self._source
        loc = self._location(start)

        if source.startswith("{{--", start):
            close = source.find("--}}", start + 4)
            if close == -1:
                raise self._error("Unclosed comment, expected --}}", loc, ErrorCode.SYNTAX_ERROR)
            self._pos = close + 4
            return Token(TokenKind.COMMENT, loc, value=source[start + 4 : close])

        escaped = not source.startswith("{{{", start)
        opener, closer = ("{{", "}}") if escaped else ("{{{", "}}}")
        close = source.find(closer, start + len(opener))
        if close == -1:
            raise self._error(f"Unclosed mustache, expected {closer}", loc, ErrorCode.SYNTAX_ERROR)

        argument = source[start + len(opener) : close]
        if not argument.strip():
            raise self._error("Empty mustache", loc, ErrorCode.SYNTAX_ERROR)
        self._pos = close + len(closer)
        return Token(
            TokenKind.MUSTACHE,
            self._location(start + len(opener)),
            MustacheProperties(argument, escaped=escaped),
        )

    def _add_text(self, text: str, pos: int) -> None:
        if not text:
            return
        if not self._text:
            self._text_pos = pos
        self._text.append(text)

    def _flush_text(self) -> Iterator[Token]:
        if self._text:
            value = "".join(self._text)
            self._text = []
            yield Token(TokenKind.TEXT, self._location(self._text_pos), value=value)

    # ─────────────────────────────────────────────────────────────────────────
    # Positions and errors
    # ─────────────────────────────────────────────────────────────────────────

    def _at_line_start(self) -> bool:
        return self._pos == 0 or self._source[self._pos - 1] == "\n"

    def _location(self, pos: int) -> Location:
        line = bisect.bisect_right(self._line_starts, pos)
        return Location(line, pos - self._line_starts[line - 1], self.filename)

    def _error(self, message: str, loc: Location, code: ErrorCode) -> TemplateSyntaxError:
        return TemplateSyntaxError(
            message,
            code=code,
            filename=self.filename,
            lineno=loc.line,
            col_offset=loc.column,
            source=self._source,
        )


def tokenize(
    source: str,
    tags: Mapping[str, TagSpecLike],
    filename: str | None = None,
) -> list[Token]:
    """Tokenize source into a token tree.

    Convenience wrapper around `Lexer.tokenize()`.
    """
    return Lexer(tags, filename).tokenize(source)
