"""
Configuration settings for the learnsync client.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import httpx
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PORTS = {"http": 80, "https": 443}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LEARNSYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Remote API
    # ========================================
    api_base_url: str = Field(
        default="http://localhost:5000/api",
        description="Base URL of the learning platform API",
    )
    api_token: str | None = Field(
        default=None,
        description="Bearer token for authenticated progress sync",
    )
    request_timeout_seconds: float = Field(
        default=8.0,
        description="Timeout for a single remote call; a timeout counts as a network failure",
    )
    force_offline: bool = Field(
        default=False,
        description="Skip every remote attempt (offline-only builds and demos)",
    )

    # ========================================
    # Local storage
    # ========================================
    data_dir: Path = Field(
        default=Path.home() / ".learnsync",
        description="Directory holding the local store",
    )
    store_filename: str = Field(
        default="store.db",
        description="SQLite file name for the key-value store",
    )
    bundled_dataset_path: Path | None = Field(
        default=None,
        description="Override for the bundled content dataset (JSON)",
    )
    extra_aliases: dict[str, str] = Field(
        default_factory=dict,
        description="Additional remote id -> dataset slug mappings",
    )

    # ========================================
    # Connectivity
    # ========================================
    connectivity_host: str | None = Field(
        default=None,
        description="Host probed to decide whether the device is online (defaults to the api_base_url host)",
    )
    connectivity_port: int | None = Field(
        default=None,
        description="Port probed together with connectivity_host (defaults to the api_base_url port)",
    )
    connectivity_timeout_seconds: float = Field(
        default=2.0,
        description="Socket timeout for the reachability probe",
    )

    # ========================================
    # Sync queue
    # ========================================
    max_delivery_attempts: int = Field(
        default=3,
        description="Permanent rejections tolerated before a queued mutation is dropped",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: str = Field(
        default="INFO",
        description="Loguru level for CLI output",
    )

    @property
    def store_path(self) -> Path:
        """Full path of the SQLite store."""
        return self.data_dir / self.store_filename

    @property
    def connectivity_target(self) -> tuple[str, int]:
        """Host and port the reachability probe connects to."""
        url = httpx.URL(self.api_base_url)
        host = self.connectivity_host or url.host or "localhost"
        port = self.connectivity_port or url.port or DEFAULT_PORTS.get(url.scheme, 80)
        return host, port


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
