"""Highlight interval model.

A document's highlights are kept as a flat list of half-open ``[start, end)``
ranges, sorted by ``start`` and pairwise non-overlapping. Every write flattens
the list again, so the invariant can be checked with a single pass.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from typereader.models import Color, Highlight


def apply_highlight(
    existing: Iterable[Highlight],
    start: int,
    end: int,
    color: Optional[Color],
) -> List[Highlight]:
    """Paint ``[start, end)`` with ``color``, or erase it when ``color`` is None.

    Existing highlights overlapping the range are trimmed to their remnants
    outside it. The overlapped middle is always dropped, even when repainting
    with the same colour.
    """
    if start < 0 or start >= end:
        raise ValueError(f"invalid highlight range: [{start}, {end})")

    out: List[Highlight] = []
    for h in existing:
        if h.end <= start or h.start >= end:
            out.append(h)
            continue
        if h.start < start:
            out.append(Highlight(start=h.start, end=start, color=h.color))
        if h.end > end:
            out.append(Highlight(start=end, end=h.end, color=h.color))

    if color is not None:
        out.append(Highlight(start=start, end=end, color=Color(color)))

    out.sort(key=lambda h: h.start)
    return out


def is_normalized(highlights: List[Highlight]) -> bool:
    """True if sorted by start, non-empty ranges, and no two ranges overlap."""
    for h in highlights:
        if h.start < 0 or h.start >= h.end:
            return False
    for a, b in zip(highlights, highlights[1:]):
        if a.start > b.start or a.end > b.start:
            return False
    return True


def highlight_at(highlights: List[Highlight], index: int) -> Optional[Highlight]:
    for h in highlights:
        if h.start <= index < h.end:
            return h
        if h.start > index:
            break
    return None


def overlapping(highlights: List[Highlight], start: int, end: int) -> List[Highlight]:
    return [h for h in highlights if h.start < end and h.end > start]
