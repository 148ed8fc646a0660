"""Paste/drop interception for image capture."""

import logging
import re
from typing import Callable, List, Optional

from imgman.models.editor import EditorBuffer, PasteHandler
from imgman.models.paste import ImageSource, PasteEvent
from imgman.models.settings import PluginSettings
from imgman.services.placeholder_service import PlaceholderService


logger = logging.getLogger(__name__)


# Markdown inline image with a remote target: ![alt](https://host/img.png)
MD_IMAGE_URL_RE = re.compile(r"!\[[^\]]*\]\((https?://[^)\s]+)\)")


def extract_image_urls(text: Optional[str]) -> List[str]:
    """All remote image URLs embedded in Markdown text, in order of appearance."""
    if not text:
        return []
    return MD_IMAGE_URL_RE.findall(text)


def extract_image_sources(event: PasteEvent) -> List[ImageSource]:
    """
    Collect the images carried by a paste/drop event.

    Image files win over text: clipboard text is only scanned for Markdown
    image URLs when the event carries no image file.
    """
    sources = [
        ImageSource.from_bytes(f.data, mime_type=f.mime_type, filename=f.name)
        for f in event.files
        if f.is_image
    ]
    if sources:
        return sources
    return [ImageSource.from_url(url) for url in extract_image_urls(event.text)]


class PasteInterceptor:
    """Decides per event whether to capture images or defer to the host."""

    def __init__(self, placeholders: PlaceholderService, settings: Callable[[], PluginSettings]):
        self.placeholders = placeholders
        self._settings = settings

    def handler_for(self, original: Optional[PasteHandler]) -> PasteHandler:
        """Build the paste handler installed in place of ``original``."""
        def intercepting_handler(editor, event):
            self.on_paste_or_drop(editor, event, original)

        return intercepting_handler

    def on_paste_or_drop(
        self,
        editor: EditorBuffer,
        event: PasteEvent,
        original: Optional[PasteHandler]
    ) -> None:
        if not self._settings().save_on_paste:
            self._forward(editor, event, original)
            return

        sources = extract_image_sources(event)
        if not sources:
            self._forward(editor, event, original)
            return

        event.prevent_default()
        logger.info(f"Capturing {len(sources)} image(s) from {event.kind.value} event")

        for source in sources:
            try:
                self.placeholders.begin_capture(editor, source)
            except Exception:
                logger.exception(f"Could not insert placeholder for {source.describe()}")

    @staticmethod
    def _forward(editor: EditorBuffer, event: PasteEvent, original: Optional[PasteHandler]) -> None:
        if original is not None:
            original(editor, event)
