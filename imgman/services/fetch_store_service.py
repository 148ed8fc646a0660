"""Fetch-and-store service for pasted and dropped images.

This service turns an image source into a file on disk:
- Raw bytes (clipboard or drag-and-drop file payloads)
- URLs (HTTP/HTTPS) referenced from pasted Markdown

Failures never raise out of :meth:`FetchStoreService.fetch_and_store`; they
come back as a failed :class:`FetchOutcome` carrying the reason.
"""

import asyncio
import logging
from datetime import datetime
from io import BytesIO
from pathlib import Path, PurePosixPath
from typing import Optional, Tuple
from urllib.parse import urlparse

from PIL import Image, UnidentifiedImageError
import aiohttp

from imgman.models.paste import FetchOutcome, ImageSource, SourceKind


logger = logging.getLogger(__name__)


class FetchStoreError(Exception):
    """Base exception for fetch-and-store operations."""
    pass


class ImageValidationError(FetchStoreError):
    """Raised when the fetched data is not an acceptable image."""
    pass


# Common Content-Type to extension mapping
MIME_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/bmp": "bmp",
    "image/svg+xml": "svg",
    "image/tiff": "tiff",
    "image/x-icon": "ico",
}

SUPPORTED_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp", "bmp", "svg", "tiff", "ico"}


class FetchStoreService:
    """Retrieves image bytes and writes them under a target directory."""

    # Maximum image size: 50MB
    MAX_IMAGE_SIZE = 52428800

    def __init__(
        self,
        base_dir: Optional[Path] = None,
        timeout: int = 10,
        max_image_size: Optional[int] = None
    ):
        """
        Initialize the fetch-and-store service.

        Args:
            base_dir: Directory relative target directories are joined to.
                Defaults to the current working directory.
            timeout: HTTP download timeout in seconds
            max_image_size: Maximum accepted image size in bytes
        """
        self.base_dir = Path(base_dir) if base_dir else Path.cwd()
        self.timeout = timeout
        self.max_image_size = max_image_size or self.MAX_IMAGE_SIZE

    async def fetch_and_store(self, source: ImageSource, target_dir: str) -> FetchOutcome:
        """
        Store an image source under ``target_dir``.

        Args:
            source: Bytes or URL to store
            target_dir: Directory setting, relative to ``base_dir`` unless absolute

        Returns:
            FetchOutcome: ``saved`` with the reference to embed, or ``failed``
        """
        logger.info(f"Storing image from {source.describe()} into '{target_dir or '.'}'")

        try:
            if source.kind == SourceKind.URL:
                data, extension = await self._download(source.url)
            else:
                data, extension = self._read_blob(source)

            name = await self._write_unique(self._resolve_dir(target_dir), extension, data)
        except FetchStoreError as e:
            logger.warning(f"Failed to store image from {source.describe()}: {e}")
            return FetchOutcome.failed(str(e))
        except OSError as e:
            logger.warning(f"Failed to write image from {source.describe()}: {e}")
            return FetchOutcome.failed(f"Write failed: {e}")

        reference = self.build_reference(target_dir, name)
        logger.info(f"Stored image as {reference}")
        return FetchOutcome.saved(reference)

    @staticmethod
    def build_reference(target_dir: str, name: str) -> str:
        """Reference to embed for a stored file, always with forward slashes."""
        if not target_dir:
            return name
        return (PurePosixPath(Path(target_dir).as_posix()) / name).as_posix()

    def _resolve_dir(self, target_dir: str) -> Path:
        directory = Path(target_dir) if target_dir else Path()
        if directory.is_absolute():
            return directory
        return self.base_dir / directory

    def _read_blob(self, source: ImageSource) -> Tuple[bytes, str]:
        data = source.data or b""
        if not data:
            raise ImageValidationError("Image data is empty")
        self._validate_size(len(data))

        extension = (
            self._extension_from_mime(source.mime_type)
            or self._extension_from_name(source.filename)
            or self._detect_extension(data)
        )
        return data, extension

    async def _download(self, url: Optional[str]) -> Tuple[bytes, str]:
        """
        Download an image over HTTP(S).

        Returns:
            Tuple[bytes, str]: (image data, file extension)

        Raises:
            ImageValidationError: If the URL or response is not an acceptable image
            FetchStoreError: If the download fails
        """
        parsed = urlparse(url or "")
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ImageValidationError(f"Invalid image URL: {url}")

        try:
            timeout_obj = aiohttp.ClientTimeout(total=self.timeout)

            async with aiohttp.ClientSession(timeout=timeout_obj) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        raise FetchStoreError(f"HTTP {response.status}: Failed to download image from {url}")

                    content_type = response.headers.get("Content-Type", "")
                    if not content_type.startswith("image/"):
                        raise ImageValidationError(f"URL does not point to an image. Content-Type: {content_type}")

                    content_length = response.headers.get("Content-Length")
                    if content_length and content_length.isdigit():
                        self._validate_size(int(content_length))

                    data = await response.read()

        except asyncio.TimeoutError:
            raise FetchStoreError(f"Timeout downloading image from {url} (>{self.timeout}s)")
        except aiohttp.ClientConnectorError as e:
            raise FetchStoreError(f"Connection failed: {str(e)}")
        except aiohttp.ClientError as e:
            raise FetchStoreError(f"Download failed: {str(e)}")

        self._validate_size(len(data))
        extension = (
            self._extension_from_mime(content_type)
            or self._extension_from_name(parsed.path)
            or self._detect_extension(data)
        )
        return data, extension

    def _validate_size(self, size: int) -> None:
        if size > self.max_image_size:
            size_mb = size / (1024 * 1024)
            max_mb = self.max_image_size / (1024 * 1024)
            raise ImageValidationError(f"Image too large: {size_mb:.1f}MB (max {max_mb:.0f}MB)")

    @staticmethod
    def _extension_from_mime(mime_type: Optional[str]) -> Optional[str]:
        if not mime_type:
            return None
        return MIME_EXTENSIONS.get(mime_type.split(";")[0].strip().lower())

    @staticmethod
    def _extension_from_name(name: Optional[str]) -> Optional[str]:
        if not name:
            return None
        extension = PurePosixPath(name).suffix.lower().lstrip(".")
        if extension in SUPPORTED_EXTENSIONS:
            return extension
        return None

    @staticmethod
    def _detect_extension(data: bytes) -> str:
        """Detect the image format from its content with Pillow."""
        try:
            with Image.open(BytesIO(data)) as image:
                image_format = (image.format or "").lower()
        except (UnidentifiedImageError, OSError) as e:
            raise ImageValidationError(f"Unable to detect image format: {e}")

        if image_format == "jpeg":
            return "jpg"
        if image_format not in SUPPORTED_EXTENSIONS:
            raise ImageValidationError(f"Unsupported image format: {image_format or 'unknown'}")
        return image_format

    async def _write_unique(self, directory: Path, extension: str, data: bytes) -> str:
        """Write ``data`` under a timestamp-based name that does not exist yet."""
        stem = datetime.now().strftime("%Y%m%d%H%M%S%f")
        return await asyncio.to_thread(_write_exclusive, directory, stem, extension, data)


def _write_exclusive(directory: Path, stem: str, extension: str, data: bytes) -> str:
    directory.mkdir(parents=True, exist_ok=True)
    suffix = 0
    while True:
        name = f"{stem}.{extension}" if suffix == 0 else f"{stem}-{suffix}.{extension}"
        try:
            with open(directory / name, "xb") as f:
                f.write(data)
            return name
        except FileExistsError:
            suffix += 1
