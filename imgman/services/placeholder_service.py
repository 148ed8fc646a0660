"""Placeholder substitution for asynchronously stored images.

A capture inserts a marker such as ``![Downloading file...k3x9q]()`` at the
cursor, stores the image in the background and then rewrites the marker
into ``![](reference)`` (or a failure notice). The marker is located again
by scanning the live buffer, since the user may have edited the text above
it while the download was in flight.
"""

import asyncio
import logging
import random
import string
from typing import Callable, Optional, Set

from imgman.models.editor import EditorBuffer, Position
from imgman.models.paste import FetchOutcome, ImageSource
from imgman.services.fetch_store_service import FetchStoreService


logger = logging.getLogger(__name__)


FAILURE_MESSAGE_TEXT = "⚠️Imgman download failed, check dev console"

PASTE_ID_LENGTH = 5
_PASTE_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_paste_id() -> str:
    """Short random id, unique enough among placeholders pending in one buffer."""
    return "".join(random.choices(_PASTE_ID_ALPHABET, k=PASTE_ID_LENGTH))


def marker_for(paste_id: str) -> str:
    return f"![Downloading file...{paste_id}]()"


def build_embed_syntax(reference: str) -> str:
    return f"![]({reference})"


def replace_first_occurrence(editor: EditorBuffer, target: str, replacement: str) -> bool:
    """Replace the first occurrence of ``target`` in the editor, scanning line by line.

    Only the matched substring is replaced; the rest of the line is left as is.

    Returns:
        bool: True if a replacement was made
    """
    lines = editor.get_value().split("\n")
    for i, line in enumerate(lines):
        ch = line.find(target)
        if ch != -1:
            editor.replace_range(replacement, Position(i, ch), Position(i, ch + len(target)))
            return True
    return False


class PlaceholderService:
    """Drives one marker per captured image from insertion to replacement."""

    def __init__(
        self,
        fetch_store: FetchStoreService,
        target_dir: Callable[[], str] = lambda: ""
    ):
        """
        Args:
            fetch_store: Collaborator that stores the image and returns a reference
            target_dir: Returns the currently configured save directory; read
                when the capture starts so settings changes apply immediately
        """
        self.fetch_store = fetch_store
        self._target_dir = target_dir
        self._pending: Set[asyncio.Task] = set()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def begin_capture(self, editor: EditorBuffer, source: ImageSource) -> asyncio.Task:
        """
        Insert a placeholder for ``source`` and start storing it.

        The marker is inserted before this method returns; storing happens in a
        detached task. Must be called from a running event loop.

        Raises:
            RuntimeError: No event loop is running; the buffer is left untouched
            Exception: Whatever the editor raises while inserting the marker
        """
        loop = asyncio.get_running_loop()
        paste_id = generate_paste_id()
        editor.replace_selection(marker_for(paste_id) + "\n")
        logger.debug(f"Inserted placeholder {paste_id} for {source.describe()}")

        task = loop.create_task(
            self.resolve(editor, paste_id, source, self._target_dir())
        )
        self._pending.add(task)
        task.add_done_callback(self._on_capture_done)
        return task

    async def resolve(
        self,
        editor: EditorBuffer,
        paste_id: str,
        source: ImageSource,
        target_dir: Optional[str] = None
    ) -> FetchOutcome:
        """Store the image and swap the placeholder for the result."""
        if target_dir is None:
            target_dir = self._target_dir()

        try:
            outcome = await self.fetch_store.fetch_and_store(source, target_dir)
        except Exception as e:
            logger.exception(f"Unexpected error storing image for placeholder {paste_id}")
            outcome = FetchOutcome.failed(f"{type(e).__name__}: {e}")

        if outcome.ok:
            self.replace_marker(editor, paste_id, build_embed_syntax(outcome.reference))
        else:
            logger.error(f"Failed imgman request for placeholder {paste_id}: {outcome.reason}")
            self.replace_marker(editor, paste_id, FAILURE_MESSAGE_TEXT)
        return outcome

    def replace_marker(self, editor: EditorBuffer, paste_id: str, replacement: str) -> bool:
        replaced = replace_first_occurrence(editor, marker_for(paste_id), replacement)
        if not replaced:
            # The user removed the placeholder while it was pending
            logger.debug(f"Placeholder {paste_id} no longer in buffer, nothing to replace")
        return replaced

    async def drain(self) -> None:
        """Wait until every capture started so far has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _on_capture_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Image capture failed", exc_info=exc)
