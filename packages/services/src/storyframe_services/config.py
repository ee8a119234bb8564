"""Runtime settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from storyframe_core_schemas import AspectRatio


class Settings(BaseSettings):
    """Generation settings, overridable through ``STORYFRAME_*`` variables.

    The API key is not part of the settings; the Gemini client reads it from
    ``GOOGLE_API_KEY``.
    """

    model_config = SettingsConfigDict(
        env_prefix="STORYFRAME_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    image_model: str = Field(default="gemini-2.5-flash-image")
    max_attempts: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=5.0, ge=0)
    default_aspect_ratio: AspectRatio = Field(default=AspectRatio.WIDESCREEN)
    default_batch_size: int = Field(default=10, gt=0)
    log_level: str = Field(default="WARNING")
