# config.py
import logging
import os
from dataclasses import dataclass

from models import DEFAULT_SOURCE_URL as SIDESTORE_SERVER_LIST

logger = logging.getLogger(__name__)

@dataclass
class Config:
    """Holds all application configuration."""
    DEFAULT_SOURCE_URL: str = SIDESTORE_SERVER_LIST
    SETTINGS_FILENAME: str = "anisette_settings.json"
    KEYRING_SERVICE: str = "SideStore"
    REQUEST_TIMEOUT: float = 15.0
    LOG_FILENAME: str = "anisette_servers.log"
    DEBUG: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        """Builds a Config, letting ANISETTE_* environment variables override the defaults."""
        defaults = cls()
        return cls(
            DEFAULT_SOURCE_URL=os.getenv("ANISETTE_SOURCE_URL", defaults.DEFAULT_SOURCE_URL),
            SETTINGS_FILENAME=os.getenv("ANISETTE_SETTINGS_FILE", defaults.SETTINGS_FILENAME),
            KEYRING_SERVICE=os.getenv("ANISETTE_KEYRING_SERVICE", defaults.KEYRING_SERVICE),
            REQUEST_TIMEOUT=_env_float("ANISETTE_REQUEST_TIMEOUT", defaults.REQUEST_TIMEOUT),
            LOG_FILENAME=os.getenv("ANISETTE_LOG_FILE", defaults.LOG_FILENAME),
            DEBUG=os.getenv("ANISETTE_DEBUG", "").strip().lower() in ("1", "true", "yes", "on"),
        )


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r, not a number; using %s", name, raw, default)
        return default
