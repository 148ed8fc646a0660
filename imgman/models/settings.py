"""Persisted plugin settings."""

from pydantic import BaseModel, ConfigDict, Field


class PluginSettings(BaseModel):
    """User-facing options, edited from the configuration surface."""

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    target_directory: str = Field(
        "",
        description="Directory to save images in; empty means the vault root",
    )
    save_on_paste: bool = Field(True, description="Save images while pasting")
