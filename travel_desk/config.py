"""
Application Configuration.

Pydantic Settings model for the Travel Desk wizard core.
All configuration is loaded from environment variables and .env files.
Inject an AppConfig instance via dependency injection where needed.

The provider cap (``MAX_PROVIDER_INSTANCES``) is a constant in
``travel_desk.models.provider``, not a setting.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings

from travel_desk.models.enums import Currency


class AppConfig(BaseSettings):
    """Central configuration loaded from environment variables and defaults."""

    # --- Backend API ---
    API_BASE_URL: str = "http://localhost:5000"
    API_TOKEN: SecretStr = SecretStr("")
    API_TIMEOUT_S: float = Field(default=120.0, gt=0)

    # --- Wizard ---
    PROVIDER_SEARCH_LIMIT: int = Field(default=50, ge=1, le=500)
    DEFAULT_SALE_CURRENCY: Currency = Currency.USD
    DEFAULT_TEMPLATE_CATEGORY: str = "General"

    # --- Logging ---
    LOG_FILE: str = "travel_desk.log"
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _warn_missing_env(self) -> "AppConfig":
        """Emit a startup warning when critical configuration is empty."""
        _log = logging.getLogger("travel_desk.config")

        if not Path(".env").exists():
            _log.warning(
                "No .env file found; all configuration loaded from "
                "environment variables or defaults."
            )

        if not self.API_TOKEN.get_secret_value():
            _log.warning(
                "API_TOKEN is empty; requests are sent without an "
                "Authorization header."
            )

        return self


# ---------------------------------------------------------------------------
# Module-level singleton factory
# ---------------------------------------------------------------------------

_config_instance: Optional[AppConfig] = None
_config_lock: threading.Lock = threading.Lock()


def get_config() -> AppConfig:
    """Return a cached ``AppConfig`` singleton.

    Prefer constructor injection of ``AppConfig``; this factory exists for
    the logger, which needs defaults before anything is wired.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = AppConfig()
    return _config_instance
