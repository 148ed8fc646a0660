"""Domain models for imgman."""

from .editor import EditorBuffer, PasteHandler, Position, TextEditor, default_paste_handler
from .paste import (
    ClipboardFile,
    EventKind,
    FetchOutcome,
    ImageSource,
    OutcomeStatus,
    PasteEvent,
    SourceKind,
)
from .settings import PluginSettings

__all__ = [
    "EditorBuffer",
    "PasteHandler",
    "Position",
    "TextEditor",
    "default_paste_handler",
    "ClipboardFile",
    "EventKind",
    "FetchOutcome",
    "ImageSource",
    "OutcomeStatus",
    "PasteEvent",
    "SourceKind",
    "PluginSettings",
]
