"""Unit tests for the in-memory TextEditor buffer."""

from unittest.mock import Mock

from imgman.models.editor import EditorBuffer, Position, TextEditor, default_paste_handler
from imgman.models.paste import PasteEvent


class TestTextEditor:
    """Tests for TextEditor buffer operations."""

    def test_implements_editor_protocol(self):
        assert isinstance(TextEditor(""), EditorBuffer)

    def test_cursor_defaults_to_end(self):
        editor = TextEditor("one\ntwo")
        assert editor.get_cursor() == Position(1, 3)

    def test_replace_selection_inserts_and_moves_cursor(self):
        editor = TextEditor("ab", cursor=Position(0, 1))

        editor.replace_selection("X\n")

        assert editor.get_value() == "aX\nb"
        assert editor.get_cursor() == Position(1, 0)

    def test_replace_selection_replaces_selected_text(self):
        editor = TextEditor("hello world")
        editor.set_selection(Position(0, 6), Position(0, 11))

        editor.replace_selection("there")

        assert editor.get_value() == "hello there"
        assert editor.get_cursor() == Position(0, 11)

    def test_replace_range(self):
        editor = TextEditor("line one\nline two")

        editor.replace_range("2", Position(1, 5), Position(1, 8))

        assert editor.get_value() == "line one\nline 2"

    def test_replace_range_shifts_cursor_after_range(self):
        editor = TextEditor("abc\ndef", cursor=Position(1, 2))

        editor.replace_range("", Position(0, 0), Position(1, 0))

        assert editor.get_value() == "def"
        assert editor.get_cursor() == Position(0, 2)

    def test_replace_range_keeps_cursor_before_range(self):
        editor = TextEditor("abc\ndef", cursor=Position(0, 1))

        editor.replace_range("XYZ", Position(1, 0), Position(1, 3))

        assert editor.get_cursor() == Position(0, 1)

    def test_positions_are_clipped(self):
        editor = TextEditor("ab")
        editor.set_cursor(Position(5, 9))
        assert editor.get_cursor() == Position(0, 2)

    def test_default_paste_inserts_text(self):
        editor = TextEditor("")
        assert editor.get_paste_handler() is default_paste_handler

        editor.paste(PasteEvent(text="pasted"))

        assert editor.get_value() == "pasted"

    def test_paste_goes_to_installed_handler(self):
        editor = TextEditor("")
        handler = Mock()
        editor.set_paste_handler(handler)
        event = PasteEvent(text="pasted")

        editor.paste(event)

        handler.assert_called_once_with(editor, event)
        assert editor.get_value() == ""
