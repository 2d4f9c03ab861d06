from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # Platform REST backend
    platform_api_url: str = "http://localhost:5000"
    platform_api_token: str = ""  # Optional; sent as a bearer token only when set
    request_timeout: float = 10.0

    # App config
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    export_dir: str = "exports"
    log_level: str = "INFO"

    # Transcript presentation
    truncate_chars: int = 300
    context_chars: int = 50

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles missing .env files (e.g. in CI/testing) by falling
    back to environment variables and defaults.
    """
    try:
        return Settings()
    except Exception:
        # If .env is missing or unreadable, build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]


settings = get_settings()
