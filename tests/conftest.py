"""Shared fixtures for imgman tests."""

import io
import logging

import pytest
from PIL import Image

from tests.helpers import ControlledFetchStore


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo handler changes made by setup_logging() in CLI tests."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def png_bytes():
    """Small PNG image (10x10 red square)."""
    img = Image.new('RGB', (10, 10), color='red')
    buf = io.BytesIO()
    img.save(buf, 'PNG')
    return buf.getvalue()


@pytest.fixture
def jpeg_bytes():
    """Small JPEG image."""
    img = Image.new('RGB', (20, 15), color='yellow')
    buf = io.BytesIO()
    img.save(buf, 'JPEG', quality=85)
    return buf.getvalue()


@pytest.fixture
def controlled_store():
    """Fetch-and-store double completed by hand."""
    return ControlledFetchStore()
