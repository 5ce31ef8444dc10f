"""Layout inheritance: merging a child template's sections into its layout.

Given the token tree of a layout ("base") and of a template that extends
it ("extended"), `merge_sections()` produces the single tree that gets
compiled:

- base sections the child does not mention keep their default content,
- a child section replaces the base section of the same name,
- a child section whose first child is ``@super`` keeps the base content
  and appends its own after it,
- the child's top-level ``@set`` calls are hoisted in front of everything,
  so their bindings are visible inside every inherited section.

Everything else at the child's top level is discarded.

The merge never mutates its inputs. Untouched subtrees are shared between
the inputs and the result.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import replace

from ledge._types import Token, TokenKind


def is_block(token: Token, name: str) -> bool:
    """True when the token is a tag named `name`."""
    if token.kind is TokenKind.TAG or token.kind is TokenKind.END_TAG:
        return token.name == name
    return False


def has_child_super(token: Token) -> bool:
    """True when the token's first child is a ``@super`` tag."""
    if not token.children:
        return False
    return is_block(token.children[0], "super")


def section_name(token: Token) -> str:
    """Identifier of a section: its trimmed raw argument."""
    return token.raw_argument.strip()


def _sections(tokens: Iterable[Token]) -> Iterable[Token]:
    return (token for token in tokens if is_block(token, "section"))


def find_duplicate_sections(tokens: Sequence[Token]) -> list[str]:
    """Names of top-level sections declared more than once, in first-seen order."""
    counts = Counter(section_name(token) for token in _sections(tokens))
    return [name for name, count in counts.items() if count > 1]


def merge_sections(base: Sequence[Token], extended: Sequence[Token]) -> list[Token]:
    """Merge the sections of `extended` into the layout `base`.

    When `extended` declares the same section twice, the last declaration
    wins.

    Args:
        base: Top-level tokens of the layout template
        extended: Top-level tokens of the template extending it

    Returns:
        The extended template's ``@set`` calls followed by the base tokens
        with overridden sections substituted.
    """
    extended_sections = {section_name(token): token for token in _sections(extended)}
    extended_set_calls = [token for token in extended if is_block(token, "set")]

    merged: list[Token] = []
    for token in base:
        if not is_block(token, "section"):
            merged.append(token)
            continue

        override = extended_sections.get(section_name(token))
        if override is None:
            merged.append(token)
        elif has_child_super(override):
            merged.append(replace(override, children=token.children + override.children[1:]))
        else:
            merged.append(override)

    return extended_set_calls + merged
