"""Image paste plugin: wires settings, storage, placeholders and interception."""

import logging
from pathlib import Path
from typing import Optional

from imgman.config import Settings, get_settings
from imgman.models.editor import EditorBuffer
from imgman.models.settings import PluginSettings
from imgman.services.fetch_store_service import FetchStoreService
from imgman.services.handler_registry import HandlerRegistry, Unregister
from imgman.services.interceptor_service import PasteInterceptor
from imgman.services.placeholder_service import PlaceholderService
from imgman.services.settings_service import SettingsStore


logger = logging.getLogger(__name__)


class ImgmanPlugin:
    """
    One plugin lifetime.

    Call :meth:`load` before registering editors and :meth:`unload` on
    teardown to give every editor its native paste handler back.
    """

    def __init__(
        self,
        settings_path: Optional[Path] = None,
        app_settings: Optional[Settings] = None,
        fetch_store: Optional[FetchStoreService] = None
    ):
        self.app_settings = app_settings or get_settings()
        self.store = SettingsStore(self.app_settings.resolve_settings_path(settings_path))
        self.fetch_store = fetch_store or FetchStoreService(
            base_dir=self.app_settings.vault_root,
            timeout=self.app_settings.FETCH_TIMEOUT,
            max_image_size=self.app_settings.MAX_IMAGE_SIZE,
        )
        self.placeholders = PlaceholderService(
            self.fetch_store,
            target_dir=lambda: self.settings.target_directory,
        )
        self.interceptor = PasteInterceptor(self.placeholders, settings=lambda: self.settings)
        self.registry = HandlerRegistry(self.interceptor.handler_for)

    @property
    def settings(self) -> PluginSettings:
        return self.store.settings

    def load(self) -> "ImgmanPlugin":
        self.store.load()
        logger.info(
            f"imgman loaded: save_on_paste={self.settings.save_on_paste}, "
            f"directory='{self.settings.target_directory}'"
        )
        return self

    def update_settings(self, **changes) -> PluginSettings:
        """Change settings from the configuration surface; saved immediately."""
        return self.store.update(**changes)

    def register_editor(self, editor: EditorBuffer) -> Unregister:
        return self.registry.install(editor)

    def unload(self) -> None:
        self.registry.restore_all()
        logger.info("imgman unloaded")

    async def drain_pending(self) -> None:
        """Wait for every in-flight image capture to settle."""
        await self.placeholders.drain()
