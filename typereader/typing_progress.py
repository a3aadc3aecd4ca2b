"""Typing progress: the cursor into a document's content.

The cursor counts correctly typed characters from the start of the content.
Pages are derived from it and are never stored.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional

from typereader.config import PAGE_SIZE

logger = logging.getLogger(__name__)

NEWLINE = "\n"


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


class TypingSession:
    def __init__(
        self,
        content: str,
        cursor: int = 0,
        on_move: Optional[Callable[[int], None]] = None,
        page_size: int = PAGE_SIZE,
    ):
        self.content = content
        self.cursor = clamp(cursor, 0, len(content))
        self.on_move = on_move
        self.page_size = page_size

    def _set(self, cursor: int) -> None:
        self.cursor = cursor
        if self.on_move is not None:
            self.on_move(cursor)

    # --- transitions ---

    def advance(self) -> bool:
        if self.cursor >= len(self.content):
            return False
        self._set(self.cursor + 1)
        return True

    def retreat(self) -> bool:
        if self.cursor <= 0:
            return False
        self._set(self.cursor - 1)
        return True

    def jump(self, target: int) -> int:
        self._set(clamp(target, 0, len(self.content)))
        return self.cursor

    # --- input events ---

    @property
    def expected(self) -> Optional[str]:
        if self.cursor < len(self.content):
            return self.content[self.cursor]
        return None

    def type_char(self, ch: str) -> bool:
        """Advance if ``ch`` is the expected character; mismatches are ignored."""
        if self.expected is None or ch != self.expected:
            return False
        return self.advance()

    def submit_line(self) -> bool:
        if self.expected != NEWLINE:
            return False
        return self.advance()

    def backspace(self) -> bool:
        return self.retreat()

    def jump_to_page(self, page: int) -> int:
        """Jump to the first character of a 1-indexed page."""
        page = clamp(page, 1, max(1, self.total_pages))
        return self.jump((page - 1) * self.page_size)

    def handle_key(self, key: str, ctrl: bool = False, meta: bool = False, alt: bool = False) -> bool:
        if key == "Backspace":
            return self.backspace()
        if key == "Enter":
            return self.submit_line()
        if len(key) == 1 and not (ctrl or meta or alt):
            return self.type_char(key)
        logger.debug("ignoring key %r", key)
        return False

    # --- pagination ---

    @property
    def page_index(self) -> int:
        return self.cursor // self.page_size

    @property
    def page_number(self) -> int:
        return self.page_index + 1

    @property
    def page_start(self) -> int:
        return self.page_index * self.page_size

    @property
    def total_pages(self) -> int:
        return math.ceil(len(self.content) / self.page_size)

    @property
    def visible_text(self) -> str:
        return self.content[self.page_start:self.page_start + self.page_size]

    @property
    def progress(self) -> float:
        if not self.content:
            return 0.0
        return min(100.0, self.cursor / len(self.content) * 100)
