"""Tests for the highlight interval model: paint, erase, trimming and splitting."""

from __future__ import annotations

import random

import pytest

from typereader.highlights import apply_highlight, highlight_at, is_normalized, overlapping
from typereader.models import Color, Highlight

R, B, G = Color.RED, Color.BLUE, Color.GREEN


def _hl(start: int, end: int, color: Color = R) -> Highlight:
    return Highlight(start=start, end=end, color=color)


def _spans(highlights: list[Highlight]) -> list[tuple[int, int, str]]:
    return [(h.start, h.end, h.color.value) for h in highlights]


# ---------------------------------------------------------------------------
# Paint
# ---------------------------------------------------------------------------


class TestPaint:
    def test_paint_on_empty(self) -> None:
        assert _spans(apply_highlight([], 3, 7, G)) == [(3, 7, "green")]

    def test_fully_contained_highlight_is_discarded(self) -> None:
        result = apply_highlight([_hl(10, 20, R)], 5, 25, B)
        assert result == [_hl(5, 25, B)]

    def test_partial_overlap_keeps_left_remnant(self) -> None:
        result = apply_highlight([_hl(0, 10, R)], 5, 15, B)
        assert result == [_hl(0, 5, R), _hl(5, 15, B)]

    def test_partial_overlap_keeps_right_remnant(self) -> None:
        result = apply_highlight([_hl(10, 20, R)], 5, 15, B)
        assert result == [_hl(5, 15, B), _hl(15, 20, R)]

    def test_paint_inside_splits_in_two(self) -> None:
        result = apply_highlight([_hl(0, 30, R)], 10, 20, G)
        assert _spans(result) == [(0, 10, "red"), (10, 20, "green"), (20, 30, "red")]

    def test_adjacent_ranges_untouched(self) -> None:
        existing = [_hl(0, 5, R), _hl(10, 15, B)]
        result = apply_highlight(existing, 5, 10, G)
        assert _spans(result) == [(0, 5, "red"), (5, 10, "green"), (10, 15, "blue")]

    def test_spanning_many_highlights(self) -> None:
        existing = [_hl(0, 4, R), _hl(6, 8, B), _hl(9, 12, G), _hl(14, 20, R)]
        result = apply_highlight(existing, 2, 16, B)
        assert _spans(result) == [(0, 2, "red"), (2, 16, "blue"), (16, 20, "red")]

    def test_same_color_repaint_is_not_merged(self) -> None:
        result = apply_highlight([_hl(0, 10, R)], 5, 15, R)
        assert result == [_hl(0, 5, R), _hl(5, 15, R)]

    def test_exact_repaint_replaces_color(self) -> None:
        assert apply_highlight([_hl(3, 9, R)], 3, 9, G) == [_hl(3, 9, G)]

    def test_color_given_as_string(self) -> None:
        assert apply_highlight([], 0, 1, "blue") == [_hl(0, 1, B)]

    def test_input_not_mutated(self) -> None:
        existing = [_hl(0, 10, R)]
        apply_highlight(existing, 2, 4, B)
        assert existing == [_hl(0, 10, R)]


# ---------------------------------------------------------------------------
# Erase
# ---------------------------------------------------------------------------


class TestErase:
    def test_erase_middle(self) -> None:
        result = apply_highlight([_hl(0, 10, R)], 3, 6, None)
        assert result == [_hl(0, 3, R), _hl(6, 10, R)]

    def test_erase_whole_range(self) -> None:
        assert apply_highlight([_hl(2, 4, R), _hl(5, 9, B)], 0, 10, None) == []

    def test_erase_nothing_there(self) -> None:
        existing = [_hl(0, 3, R)]
        assert apply_highlight(existing, 3, 8, None) == existing

    def test_erase_is_idempotent(self) -> None:
        existing = [_hl(0, 5, R), _hl(7, 12, B), _hl(15, 18, G)]
        once = apply_highlight(existing, 4, 16, None)
        assert apply_highlight(once, 4, 16, None) == once


# ---------------------------------------------------------------------------
# Invalid ranges
# ---------------------------------------------------------------------------


class TestInvalidRange:
    @pytest.mark.parametrize("start,end", [(5, 5), (6, 5), (-1, 3)])
    def test_rejected(self, start: int, end: int) -> None:
        with pytest.raises(ValueError):
            apply_highlight([], start, end, R)


# ---------------------------------------------------------------------------
# Invariant under random operations
# ---------------------------------------------------------------------------


class TestInvariant:
    def test_random_operations_stay_normalized(self) -> None:
        rng = random.Random(1234)
        colors = [R, B, G, None]
        length = 60
        highlights: list[Highlight] = []
        painted: list[Color | None] = [None] * length

        for _ in range(500):
            start = rng.randrange(0, length - 1)
            end = rng.randrange(start + 1, length + 1)
            color = rng.choice(colors)
            highlights = apply_highlight(highlights, start, end, color)
            for i in range(start, end):
                painted[i] = color

            assert is_normalized(highlights)
            # every character is covered by exactly the colour painted last
            for i in range(length):
                h = highlight_at(highlights, i)
                assert (h.color if h else None) == painted[i]


class TestHelpers:
    def test_is_normalized_detects_overlap(self) -> None:
        assert not is_normalized([_hl(0, 5), _hl(4, 8)])

    def test_is_normalized_detects_unsorted(self) -> None:
        assert not is_normalized([_hl(6, 8), _hl(0, 5)])

    def test_is_normalized_accepts_touching(self) -> None:
        assert is_normalized([_hl(0, 5), _hl(5, 8)])

    def test_highlight_at(self) -> None:
        hs = [_hl(0, 5, R), _hl(8, 10, B)]
        assert highlight_at(hs, 4) == hs[0]
        assert highlight_at(hs, 5) is None
        assert highlight_at(hs, 8) == hs[1]

    def test_overlapping_window(self) -> None:
        hs = [_hl(0, 5), _hl(8, 10), _hl(12, 20)]
        assert overlapping(hs, 5, 12) == [hs[1]]
