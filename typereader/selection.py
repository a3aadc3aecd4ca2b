"""Map a reader selection back to character offsets.

The renderer tags every character with its offset into the document
(``data-index``). A drag selection reports the tagged element it started on
(anchor) and the one it ended on (focus), both inclusive, in either order.
"""

from __future__ import annotations

from typing import Optional

from typereader.models import SelectionBody, TextRange


def resolve_selection(selection: SelectionBody, content_length: int) -> Optional[TextRange]:
    anchor, focus = selection.anchor, selection.focus
    if anchor is None or focus is None or anchor < 0 or focus < 0:
        return None
    # renderer reports the selected text too; whitespace-only drags are ignored
    if selection.text and not selection.text.strip():
        return None

    start = min(anchor, focus)
    end = min(max(anchor, focus) + 1, content_length)
    if start >= end:
        return None
    return TextRange(start=start, end=end)


def selected_text(content: str, rng: TextRange) -> str:
    return content[rng.start:rng.end].strip()
