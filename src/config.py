from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # Server
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    log_level: str = "INFO"

    # State persistence
    state_file: Path = Path("state.json")
    lock_file: Path = Path("state.lock")
    state_ttl_days: int = 30
    max_state_size_mb: float = 10.0
    lock_timeout_seconds: float = 10.0
    lock_stale_seconds: float = 30.0
    lock_poll_interval_seconds: float = 0.1

    # Categorizer
    categorizer_backend: str = "claude"
    anthropic_api_key: str = ""
    llm_model: str = "claude-sonnet-4-20250514"
    categorizer_timeout_seconds: float = 30.0

    # Tracker
    tracker_backend: str = "zoho"
    zoho_bearer_token: str = ""
    zoho_team_id: str = ""
    zoho_project_id: str = ""
    zoho_sprint_id: str = ""
    zoho_base_url: str = "https://api.zohosprints.com/zsapi"
    tracker_timeout_seconds: float = 30.0
    tracker_request_delay_seconds: float = 0.1
    local_tasks_file: Path = Path("local_tasks.json")

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
