"""Property-based tests for layout section merging.

- The child's @set calls come first, in declaration order
- Base tokens keep their order; only sections are substituted
- The inputs are never mutated
"""

from __future__ import annotations

from hypothesis import given, settings

from ledge._types import Token
from ledge.utils.sections import has_child_super, is_block, merge_sections, section_name

from .strategies import base_tokens, extended_tokens


def _is_section(token: Token) -> bool:
    return is_block(token, "section")


class TestMergeProperties:
    @given(base=base_tokens, extended=extended_tokens)
    @settings(max_examples=300)
    def test_set_calls_are_hoisted_in_order(self, base: list[Token], extended: list[Token]) -> None:
        merged = merge_sections(base, extended)
        set_calls = [t for t in extended if is_block(t, "set")]
        assert merged[: len(set_calls)] == set_calls

    @given(base=base_tokens, extended=extended_tokens)
    @settings(max_examples=300)
    def test_base_structure_is_preserved(self, base: list[Token], extended: list[Token]) -> None:
        merged = merge_sections(base, extended)
        body = merged[sum(1 for t in extended if is_block(t, "set")) :]

        assert len(body) == len(base)
        assert [t for t in body if not _is_section(t)] == [t for t in base if not _is_section(t)]
        assert [section_name(t) for t in body if _is_section(t)] == [
            section_name(t) for t in base if _is_section(t)
        ]

    @given(base=base_tokens, extended=extended_tokens)
    @settings(max_examples=300)
    def test_last_override_wins(self, base: list[Token], extended: list[Token]) -> None:
        overrides = {section_name(t): t for t in extended if _is_section(t)}
        merged = merge_sections(base, extended)
        body = merged[sum(1 for t in extended if is_block(t, "set")) :]

        for original, result in zip(base, body, strict=True):
            if not _is_section(original):
                continue
            override = overrides.get(section_name(original))
            if override is None:
                assert result is original
            elif has_child_super(override):
                assert result.children == original.children + override.children[1:]
            else:
                assert result is override

    @given(base=base_tokens, extended=extended_tokens)
    def test_inputs_are_not_mutated(self, base: list[Token], extended: list[Token]) -> None:
        base_copy, extended_copy = list(base), list(extended)
        merge_sections(base, extended)
        assert base == base_copy
        assert extended == extended_copy
