"""
App configuration - using pydantic settings for env vars
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """App settings - loads from .env file"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SMARTNOTE_",
        case_sensitive=False,
        extra="ignore",
    )

    # basic app stuff
    app_name: str = Field(default="SmartNote Core")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)  # colored console logs when True

    # DB settings
    database_url: str = Field(default="sqlite+aiosqlite:///./smartnote.db")
    database_echo: bool = Field(default=False)  # useful for debugging

    # Defaults applied on create
    default_note_color: str = Field(default="#ffffff", description="Color for new notes")
    default_tag_color: str = Field(default="#95a5a6", description="Color for new tags")

    # Tags
    popular_tags_limit: int = Field(default=10, description="Default size of popular tag lists")

    # Versions
    max_versions_per_note: int = Field(
        default=0, ge=0, description="Versions kept per note on save, 0 keeps everything"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Log format"
    )
    log_dir: Optional[str] = Field(default=None, description="Directory for log files, None disables")

    # Environment
    environment: str = Field(default="development", description="Environment name")


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
