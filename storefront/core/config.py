"""Environment-driven configuration objects for the storefront console."""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from storefront.core.constants import DEFAULT_API_BASE_URL, DEFAULT_CHECKOUT_TIMEOUT_SECONDS
from storefront.core.exceptions import ConfigurationException


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise ConfigurationException(f"{name} must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ConfigurationException(f"{name} must not be negative, got {value}")
    return value


@dataclass(slots=True)
class Settings:
    api_base_url: str
    redis_url: str | None
    cart_ttl_seconds: int
    checkout_timeout_seconds: int
    log_level: str

    @property
    def uses_redis(self) -> bool:
        return bool(self.redis_url)


def load_settings() -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    api_base_url = os.getenv("API_BASE_URL", "").strip() or DEFAULT_API_BASE_URL

    return Settings(
        api_base_url=api_base_url.rstrip("/"),
        redis_url=os.getenv("REDIS_URL") or None,
        cart_ttl_seconds=_int_from_env("CART_TTL_SECONDS", 0),
        checkout_timeout_seconds=_int_from_env(
            "CHECKOUT_TIMEOUT_SECONDS", DEFAULT_CHECKOUT_TIMEOUT_SECONDS
        ),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
