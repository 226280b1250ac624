"""Files manager configuration — Pydantic BaseSettings loaded from .env."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings for the API and the thumbnail worker."""

    app_name: str = "files-manager"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # Network
    host: str = "127.0.0.1"
    port: int = 5000
    api_prefix: str = ""
    cors_origins: list[str] = [
        "http://localhost:3000",
    ]

    # Metadata store (MongoDB)
    db_host: str = "localhost"
    db_port: int = 27017
    db_database: str = "files_manager"
    mongo_url: str = ""  # Overrides db_host/db_port when set
    db_timeout_ms: int = 5000

    # Credential store + job queue (Redis)
    redis_url: str = "redis://localhost:6379/0"

    # Content store
    folder_path: str = "/tmp/files_manager"

    # Listing
    page_size: int = 20

    # Thumbnails
    queue_name: str = "fileQueue"
    queue_poll_timeout: float = 5.0  # seconds per blocking pop
    thumbnail_widths: tuple[int, ...] = (500, 250, 100)
    run_worker_in_process: bool = False

    @property
    def mongo_uri(self) -> str:
        return self.mongo_url or f"mongodb://{self.db_host}:{self.db_port}"

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        env_prefix="FILES_MANAGER_",
        extra="ignore",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, value: list[str] | str) -> list[str]:
        if isinstance(value, str) and not value.startswith("["):
            return [o.strip() for o in value.split(",") if o.strip()]
        if isinstance(value, list):
            return value
        return ["http://localhost:3000"]

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        """Content paths are stored in records, so they must be absolute."""
        self.folder_path = str(Path(self.folder_path).expanduser().resolve())
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
