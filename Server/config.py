"""
VersionVault Server - Configuration

Environment-backed settings for the FastAPI service. Every value can be
overridden with a VERSIONVAULT_* environment variable or a .env file.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server settings"""

    model_config = SettingsConfigDict(
        env_prefix="VERSIONVAULT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Root of the versioned file tree: <storage_root>/<userId>/<category>/
    storage_root: str = Field(default="uploads")

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)

    log_dir: str = Field(default="logs")
    log_level: str = Field(default="INFO")

    # Zero-byte uploads are committed as regular versions unless disabled
    allow_empty_uploads: bool = Field(default=True)

    # Read/write chunk size used when streaming uploads to disk
    chunk_size: int = Field(default=8192, gt=0)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
