"""Property-based tests for the runtime context.

- Name resolution always agrees with a plain list-of-dicts model
- Escaped output never contains markup-significant characters
- Loop metadata is consistent for sized and unsized collections
"""

from __future__ import annotations

import html

from hypothesis import given, settings
from hypothesis import strategies as st

from ledge import Markup, TemplateRuntimeError
from ledge.template.context import Context
from ledge.template.helpers import UNDEFINED

from .strategies import escapable_text, frame_operation

_NAMES = ("a", "b", "c", "d")


def _model_resolve(model: list[dict[str, int]], name: str):
    for frame in reversed(model):
        if name in frame:
            return frame[name]
    return UNDEFINED


class TestFrameProperties:
    @given(operations=st.lists(frame_operation, max_size=40))
    @settings(max_examples=200)
    def test_resolution_matches_model(self, operations: list[tuple]) -> None:
        ctx = Context({"a": -1})
        model: list[dict[str, int]] = [{"a": -1}]

        for op in operations:
            if op[0] == "push":
                ctx.new_frame()
                model.append({})
            elif op[0] == "pop":
                if len(model) == 1:
                    try:
                        ctx.remove_frame()
                    except TemplateRuntimeError:
                        pass
                    else:
                        raise AssertionError("root frame was removed")
                else:
                    ctx.remove_frame()
                    model.pop()
            else:
                _, name, value = op
                ctx.set_on_frame(name, value)
                model[-1][name] = value

            assert len(ctx.frames) == len(model)
            for name in _NAMES:
                assert ctx.resolve(name) == _model_resolve(model, name)

    @given(depth=st.integers(min_value=0, max_value=20))
    def test_frame_context_manager_is_balanced(self, depth: int) -> None:
        ctx = Context()

        def enter(level: int) -> None:
            if level == 0:
                return
            with ctx.frame():
                ctx.set_on_frame("level", level)
                enter(level - 1)

        enter(depth)
        assert len(ctx.frames) == 1
        assert ctx.resolve("level") is UNDEFINED


class TestEscapeProperties:
    @given(text=escapable_text)
    @settings(max_examples=200)
    def test_no_raw_markup_characters(self, text: str) -> None:
        escaped = Context().escape(text)
        assert not set(escaped) & set("<>\"'")
        assert html.unescape(escaped) == text

    @given(text=escapable_text)
    def test_markup_is_idempotent(self, text: str) -> None:
        ctx = Context()
        once = ctx.escape(text)
        assert ctx.escape(Markup(once)) == once
        assert ctx.escape(ctx.safe(text)) == text


class TestLoopProperties:
    @given(items=st.lists(st.integers(), max_size=20), sized=st.booleans())
    @settings(max_examples=200)
    def test_loop_metadata(self, items: list[int], sized: bool) -> None:
        seen = []
        collection = items if sized else iter(items)
        count = Context().loop(collection, lambda value, loop: seen.append((value, loop)))

        assert count == len(items)
        assert [value for value, _ in seen] == items
        assert [loop.index for _, loop in seen] == list(range(len(items)))
        assert sum(loop.is_first for _, loop in seen) == min(len(items), 1)
        assert sum(loop.is_last for _, loop in seen) == min(len(items), 1)
        if seen:
            assert seen[-1][1].is_last
        expected_total = len(items) if sized else None
        assert all(loop.total == expected_total for _, loop in seen)

    @given(mapping=st.dictionaries(st.text(max_size=5), st.integers(), max_size=10))
    def test_mapping_keys(self, mapping: dict[str, int]) -> None:
        seen = []
        Context().loop(mapping, lambda value, loop: seen.append((loop.key, value)))
        assert seen == list(mapping.items())
