"""imgman core services."""

from .fetch_store_service import FetchStoreService, FetchStoreError, ImageValidationError
from .handler_registry import HandlerRegistry, HandlerBinding
from .interceptor_service import PasteInterceptor, extract_image_sources, extract_image_urls
from .placeholder_service import (
    FAILURE_MESSAGE_TEXT,
    PlaceholderService,
    build_embed_syntax,
    generate_paste_id,
    marker_for,
    replace_first_occurrence,
)
from .settings_service import SettingsStore, SettingsError

__all__ = [
    "FetchStoreService",
    "FetchStoreError",
    "ImageValidationError",
    "HandlerRegistry",
    "HandlerBinding",
    "PasteInterceptor",
    "extract_image_sources",
    "extract_image_urls",
    "FAILURE_MESSAGE_TEXT",
    "PlaceholderService",
    "build_embed_syntax",
    "generate_paste_id",
    "marker_for",
    "replace_first_occurrence",
    "SettingsStore",
    "SettingsError",
]
