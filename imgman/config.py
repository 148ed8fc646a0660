"""Application configuration loaded from environment variables."""

import os
from typing import Optional
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Core settings
    IMGMAN_DEBUG: bool = os.getenv("IMGMAN_DEBUG", "false").lower() == "true"

    # Logging
    LOG_LEVEL: str = os.getenv("IMGMAN_LOG_LEVEL", "INFO")
    LOG_TO_FILE: bool = os.getenv("IMGMAN_LOG_TO_FILE", "false").lower() == "true"
    LOG_DIR: str = os.getenv("IMGMAN_LOG_DIR", "logs")

    # Plugin settings persistence
    SETTINGS_PATH: str = os.getenv("IMGMAN_SETTINGS_PATH", ".imgman/settings.json")

    # Base directory that relative save directories are joined to
    VAULT_ROOT: str = os.getenv("IMGMAN_VAULT_ROOT", ".")

    # Fetch-and-store
    FETCH_TIMEOUT: int = int(os.getenv("IMGMAN_FETCH_TIMEOUT", "10"))  # seconds
    MAX_IMAGE_SIZE: int = int(os.getenv("IMGMAN_MAX_IMAGE_SIZE", "52428800"))  # 50MB

    @property
    def log_level(self) -> str:
        """Effective log level, DEBUG when debug mode is on."""
        if self.IMGMAN_DEBUG:
            return "DEBUG"
        return self.LOG_LEVEL

    @property
    def vault_root(self) -> Path:
        return Path(self.VAULT_ROOT)

    def resolve_settings_path(self, override: Optional[str] = None) -> Path:
        """Get the plugin settings file path, honouring an explicit override."""
        return Path(override or self.SETTINGS_PATH)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
