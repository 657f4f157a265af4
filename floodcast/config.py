# floodcast/config.py
import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://chidaniel.pythonanywhere.com"


@dataclass(frozen=True)
class Settings:
    api_base: str = DEFAULT_API_BASE
    http_timeout: float = 15.0
    cache_ttl: int = 600
    log_level: str = "INFO"


def _number(environ, key, default, cast):
    raw = environ.get(key, "")
    if not str(raw).strip():
        return default
    try:
        val = cast(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring %s=%r (not a number); using %s", key, raw, default)
        return default
    if val <= 0:
        logger.warning("Ignoring %s=%r (must be positive); using %s", key, raw, default)
        return default
    return val


def load_settings(environ=None) -> Settings:
    """Read FLOODCAST_* variables (after .env / Streamlit secrets have been seeded)."""
    env = os.environ if environ is None else environ
    return Settings(
        api_base=(env.get("FLOODCAST_API_BASE") or DEFAULT_API_BASE).strip().rstrip("/"),
        http_timeout=_number(env, "FLOODCAST_HTTP_TIMEOUT", Settings.http_timeout, float),
        cache_ttl=_number(env, "FLOODCAST_CACHE_TTL", Settings.cache_ttl, int),
        log_level=(env.get("FLOODCAST_LOG_LEVEL") or "INFO").strip().upper(),
    )
