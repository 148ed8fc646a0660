"""Bookkeeping for instrumented editors and their native paste handlers."""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from imgman.models.editor import EditorBuffer, PasteHandler


logger = logging.getLogger(__name__)


Unregister = Callable[[], None]


@dataclass
class HandlerBinding:
    """An instrumented editor and its handler from before instrumentation."""
    editor: EditorBuffer
    original_handler: Optional[PasteHandler]


class HandlerRegistry:
    """
    Tracks which editors carry the interceptor.

    The original handler of an editor is recorded on its first install and
    never replaced afterwards, so installing twice cannot wrap the interceptor
    around itself and teardown always restores the true original.
    """

    def __init__(self, make_handler: Callable[[Optional[PasteHandler]], PasteHandler]):
        """
        Args:
            make_handler: Builds the intercepting handler for a given original
        """
        self._make_handler = make_handler
        self._bindings: Dict[int, HandlerBinding] = {}

    def __len__(self) -> int:
        return len(self._bindings)

    def is_installed(self, editor: EditorBuffer) -> bool:
        return id(editor) in self._bindings

    def original_handler(self, editor: EditorBuffer) -> Optional[PasteHandler]:
        binding = self._bindings.get(id(editor))
        return binding.original_handler if binding else None

    def editors(self) -> List[EditorBuffer]:
        return [binding.editor for binding in self._bindings.values()]

    def install(self, editor: EditorBuffer) -> Unregister:
        """
        Put the intercepting handler on ``editor``.

        Returns:
            Unregister: Callable restoring this editor's original handler
        """
        binding = self._bindings.get(id(editor))
        if binding is None:
            binding = HandlerBinding(editor=editor, original_handler=editor.get_paste_handler())
            self._bindings[id(editor)] = binding
            logger.debug(f"Recorded original paste handler for {editor!r}")

        editor.set_paste_handler(self._make_handler(binding.original_handler))
        logger.info(f"Installed image paste handler on {editor!r}")
        return lambda: self.restore(editor)

    def restore(self, editor: EditorBuffer) -> None:
        binding = self._bindings.pop(id(editor), None)
        if binding is not None:
            editor.set_paste_handler(binding.original_handler)
            logger.info(f"Restored original paste handler for {editor!r}")

    def restore_all(self) -> None:
        for binding in self._bindings.values():
            binding.editor.set_paste_handler(binding.original_handler)
            logger.debug(f"Restored original paste handler for {binding.editor!r}")

        if self._bindings:
            logger.info(f"Restored paste handlers on {len(self._bindings)} editor(s)")
        self._bindings.clear()
