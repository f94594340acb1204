"""Application configuration."""

import os
from urllib.parse import urlsplit

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")
_ENV_FILES = (f".env.{_ENVIRONMENT}", ".env")


class Settings(BaseSettings):
    """Server settings loaded from environment variables."""

    s3_bucket: str
    aws_region: str = "us-east-1"
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8080
    base_prefix: str = "photo-stream"
    presign_ttl_seconds: int = 300
    max_body_bytes: int = 1024 * 1024
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(env_file=_ENV_FILES, extra="ignore")


class ViewerSettings(BaseSettings):
    """Settings for the headless viewer process."""

    api_base_url: str = "http://localhost:8080"
    stream_id: str | None = None
    poll_interval_seconds: float = 15.0
    public_bucket: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="VIEWER_",
        env_file=_ENV_FILES,
        extra="ignore",
    )


def push_url_for(api_base_url: str) -> str:
    """Derive the push WebSocket URL from the HTTP API base URL."""
    base = api_base_url.rstrip("/")
    if base.startswith("https://"):
        return "wss://" + base.removeprefix("https://") + "/ws"
    if base.startswith("http://"):
        return "ws://" + base.removeprefix("http://") + "/ws"
    return base + "/ws"


def api_base_for_link(link: str) -> str:
    """Derive the HTTP API base URL from a phone link."""
    parts = urlsplit(link)
    directory = parts.path.rsplit("/", 1)[0]
    return f"{parts.scheme}://{parts.netloc}{directory}"
