"""Editor buffer interface and an in-memory implementation.

The host editor is an external collaborator. Everything imgman needs from it
is captured by :class:`EditorBuffer`: reading the full text, inserting at the
cursor, replacing a line/column range, and swapping the native paste handler.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, runtime_checkable


PasteHandler = Callable[[Any, Any], None]


@dataclass(frozen=True, order=True)
class Position:
    """Zero-based line/column position in a buffer."""
    line: int
    ch: int


@runtime_checkable
class EditorBuffer(Protocol):
    """Text-buffer API consumed from the host editor."""

    def get_value(self) -> str:
        ...

    def replace_selection(self, text: str) -> None:
        ...

    def replace_range(self, text: str, from_pos: Position, to_pos: Position) -> None:
        ...

    def get_paste_handler(self) -> Optional[PasteHandler]:
        ...

    def set_paste_handler(self, handler: Optional[PasteHandler]) -> None:
        ...


def default_paste_handler(editor: "TextEditor", event) -> None:
    """Native paste behavior of :class:`TextEditor`: insert clipboard text."""
    if event.text:
        editor.replace_selection(event.text)


class TextEditor:
    """Plain in-memory editor used by the command line and tests.

    Keeps a single cursor (optionally with a selection anchor). Insertions and
    range replacements shift the cursor the way a code editor would.
    """

    def __init__(self, text: str = "", cursor: Optional[Position] = None, name: str = "untitled"):
        self.name = name
        self._text = text
        self._cursor = self._clip(cursor) if cursor else self._end_position()
        self._anchor: Optional[Position] = None
        self._paste_handler: Optional[PasteHandler] = default_paste_handler

    def __repr__(self) -> str:
        return f"TextEditor(name={self.name!r}, cursor={self._cursor})"

    # Buffer API

    def get_value(self) -> str:
        return self._text

    def set_value(self, text: str) -> None:
        self._text = text
        self._cursor = self._clip(self._cursor)
        self._anchor = None

    def get_cursor(self) -> Position:
        return self._cursor

    def set_cursor(self, pos: Position) -> None:
        self._cursor = self._clip(pos)
        self._anchor = None

    def set_selection(self, anchor: Position, head: Position) -> None:
        self._anchor = self._clip(anchor)
        self._cursor = self._clip(head)

    def replace_selection(self, text: str) -> None:
        start, end = self._cursor, self._cursor
        if self._anchor is not None:
            start, end = sorted((self._anchor, self._cursor))
        start_offset = self._offset(start)
        self._splice(text, start_offset, self._offset(end))
        self._cursor = self._position(start_offset + len(text))
        self._anchor = None

    def replace_range(self, text: str, from_pos: Position, to_pos: Position) -> None:
        start, end = sorted((self._clip(from_pos), self._clip(to_pos)))
        start_offset, end_offset = self._offset(start), self._offset(end)
        cursor_offset = self._offset(self._cursor)
        self._splice(text, start_offset, end_offset)

        if cursor_offset >= end_offset:
            cursor_offset += len(text) - (end_offset - start_offset)
        elif cursor_offset > start_offset:
            cursor_offset = start_offset + len(text)
        self._cursor = self._position(cursor_offset)
        self._anchor = None

    # Native paste handler slot

    def get_paste_handler(self) -> Optional[PasteHandler]:
        return self._paste_handler

    def set_paste_handler(self, handler: Optional[PasteHandler]) -> None:
        self._paste_handler = handler

    def paste(self, event) -> None:
        """Dispatch a paste/drop event to whatever handler is installed."""
        if self._paste_handler is not None:
            self._paste_handler(self, event)

    # Internals

    def _splice(self, text: str, start: int, end: int) -> None:
        self._text = self._text[:start] + text + self._text[end:]

    def _end_position(self) -> Position:
        lines = self._text.split("\n")
        return Position(len(lines) - 1, len(lines[-1]))

    def _clip(self, pos: Position) -> Position:
        lines = self._text.split("\n")
        line = min(max(pos.line, 0), len(lines) - 1)
        ch = min(max(pos.ch, 0), len(lines[line]))
        return Position(line, ch)

    def _offset(self, pos: Position) -> int:
        lines = self._text.split("\n")
        return sum(len(l) + 1 for l in lines[:pos.line]) + pos.ch

    def _position(self, offset: int) -> Position:
        before = self._text[:offset].split("\n")
        return Position(len(before) - 1, len(before[-1]))
