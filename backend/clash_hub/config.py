"""
backend/clash_hub/config.py

Purpose:
    Central settings loading for the Clash Hub gateway and pages.

Dependencies:
    - pydantic-settings
    - pathlib
"""

from pathlib import Path

from pydantic_settings import BaseSettings

# Prefer backend/.env, fallback to project-root .env.
_BACKEND_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"
_ROOT_ENV_FILE = Path(__file__).resolve().parent.parent.parent / ".env"


class Settings(BaseSettings):
    # Bearer token for the Clash Royale API. Required for every upstream call.
    CR_API_TOKEN: str = ""
    ROYALE_API_BASE_URL: str = "https://proxy.royaleapi.dev/v1"

    # Upstream transport
    UPSTREAM_TIMEOUT_SECONDS: float = 10.0
    UPSTREAM_MAX_RETRIES: int = 0  # network errors only; status codes are always relayed
    UPSTREAM_RETRY_BASE_DELAY: float = 1.0

    BACKEND_CORS_ORIGINS: str = "*"
    SESSION_SECRET: str = "clash-hub-dev-session"
    # The session cookie also carries display preferences, so it outlives a visit.
    SESSION_MAX_AGE_SECONDS: int = 365 * 24 * 3600

    # Pages
    CLAN_PAGE_SIZE: int = 15
    PAGE_SESSIONS_MAX: int = 256

    LOG_LEVEL: str = "INFO"

    model_config = {
        "env_file": (str(_BACKEND_ENV_FILE), str(_ROOT_ENV_FILE)),
        "extra": "ignore",
    }


settings = Settings()
