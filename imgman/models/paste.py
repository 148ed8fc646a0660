"""Paste event, image source and fetch outcome models."""

import enum
from dataclasses import dataclass, field
from typing import List, Optional


class SourceKind(str, enum.Enum):
    """Where the image bytes come from."""
    BLOB = "blob"
    URL = "url"


class EventKind(str, enum.Enum):
    """Native editor events the interceptor handles."""
    PASTE = "paste"
    DROP = "drop"


class OutcomeStatus(str, enum.Enum):
    """Fetch-and-store result tags."""
    SAVED = "saved"
    FAILED = "failed"


@dataclass(frozen=True)
class ImageSource:
    """A single image to be stored: raw bytes or a remote URL."""
    kind: SourceKind
    data: Optional[bytes] = None
    url: Optional[str] = None
    mime_type: Optional[str] = None
    filename: Optional[str] = None

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        mime_type: Optional[str] = None,
        filename: Optional[str] = None
    ) -> "ImageSource":
        return cls(kind=SourceKind.BLOB, data=data, mime_type=mime_type, filename=filename)

    @classmethod
    def from_url(cls, url: str) -> "ImageSource":
        return cls(kind=SourceKind.URL, url=url)

    def describe(self) -> str:
        """Short human readable label for log messages."""
        if self.kind == SourceKind.URL:
            return self.url or "<url>"
        size = len(self.data) if self.data is not None else 0
        return f"{self.filename or 'clipboard'} ({self.mime_type or 'unknown'}, {size} bytes)"


@dataclass(frozen=True)
class ClipboardFile:
    """A file carried by a clipboard or drag-and-drop payload."""
    name: str
    mime_type: str
    data: bytes

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image")


@dataclass
class PasteEvent:
    """Native paste/drop event as delivered by the host editor."""
    kind: EventKind = EventKind.PASTE
    files: List[ClipboardFile] = field(default_factory=list)
    text: Optional[str] = None
    default_prevented: bool = False

    def prevent_default(self) -> None:
        """Stop the host from applying its own paste/drop behavior."""
        self.default_prevented = True


@dataclass(frozen=True)
class FetchOutcome:
    """Result of a fetch-and-store operation.

    Exactly one of ``reference`` (on success) or ``reason`` (on failure) is set.
    """
    status: OutcomeStatus
    reference: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def saved(cls, reference: str) -> "FetchOutcome":
        return cls(status=OutcomeStatus.SAVED, reference=reference)

    @classmethod
    def failed(cls, reason: str) -> "FetchOutcome":
        return cls(status=OutcomeStatus.FAILED, reason=reason)

    @property
    def ok(self) -> bool:
        return self.status == OutcomeStatus.SAVED
