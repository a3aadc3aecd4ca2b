"""Tests for the typing cursor: advance, retreat, jump and pagination."""

from __future__ import annotations

import pytest

from typereader.typing_progress import TypingSession


def _session(content: str, cursor: int = 0, page_size: int = 400) -> tuple[TypingSession, list[int]]:
    moves: list[int] = []
    return TypingSession(content, cursor, on_move=moves.append, page_size=page_size), moves


class TestTyping:
    def test_matching_char_advances(self) -> None:
        s, moves = _session("abc")
        assert s.type_char("a")
        assert s.cursor == 1
        assert moves == [1]

    def test_mismatch_is_noop(self) -> None:
        s, moves = _session("abc")
        assert not s.type_char("x")
        assert s.cursor == 0
        assert moves == []

    def test_typing_at_end_is_noop(self) -> None:
        s, moves = _session("ab", cursor=2)
        assert not s.type_char("b")
        assert not s.advance()
        assert s.cursor == 2
        assert moves == []

    def test_backspace_at_start_is_noop(self) -> None:
        s, moves = _session("ab")
        assert not s.backspace()
        assert s.cursor == 0
        assert moves == []

    def test_enter_only_matches_newline(self) -> None:
        s, _ = _session("a\nb")
        assert not s.submit_line()
        s.type_char("a")
        assert s.submit_line()
        assert s.cursor == 2

    def test_end_to_end(self) -> None:
        s, moves = _session("ab\ncd")
        s.handle_key("a")
        assert s.cursor == 1
        s.handle_key("b")
        assert s.cursor == 2
        s.handle_key("Enter")
        assert s.cursor == 3
        s.handle_key("Backspace")
        assert s.cursor == 2
        assert moves == [1, 2, 3, 2]

    def test_modified_keys_ignored(self) -> None:
        s, _ = _session("abc")
        assert not s.handle_key("a", ctrl=True)
        assert not s.handle_key("a", meta=True)
        assert not s.handle_key("Shift")
        assert s.cursor == 0

    def test_initial_cursor_clamped(self) -> None:
        s, _ = _session("abc", cursor=10)
        assert s.cursor == 3


class TestJump:
    @pytest.mark.parametrize("target,expected", [(-5, 0), (0, 0), (2, 2), (3, 3), (99, 3)])
    def test_jump_clamps(self, target: int, expected: int) -> None:
        s, moves = _session("abc")
        assert s.jump(target) == expected
        assert s.cursor == expected
        assert moves == [expected]

    def test_jump_to_page(self) -> None:
        s, _ = _session("x" * 25, page_size=10)
        assert s.total_pages == 3
        assert s.jump_to_page(2) == 10
        assert s.page_number == 2

    def test_jump_to_page_clamped(self) -> None:
        s, _ = _session("x" * 25, page_size=10)
        assert s.jump_to_page(0) == 0
        assert s.jump_to_page(7) == 20

    def test_jump_to_page_on_empty_content(self) -> None:
        s, _ = _session("")
        assert s.jump_to_page(3) == 0


class TestPagination:
    def test_window_follows_cursor(self) -> None:
        content = "".join(chr(ord("a") + i % 26) for i in range(30))
        s, _ = _session(content, cursor=12, page_size=10)
        assert s.page_index == 1
        assert s.page_start == 10
        assert s.visible_text == content[10:20]

    def test_cursor_at_end_of_exact_page_boundary(self) -> None:
        s, _ = _session("x" * 20, cursor=20, page_size=10)
        assert s.page_index == 2
        assert s.visible_text == ""

    def test_progress(self) -> None:
        s, _ = _session("abcd", cursor=1)
        assert s.progress == 25.0
        assert TypingSession("").progress == 0.0
