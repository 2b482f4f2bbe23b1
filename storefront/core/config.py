"""Environment-driven configuration objects for the storefront client."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .exceptions import ConfigurationException

STORAGE_BACKENDS = frozenset({"file", "redis", "memory"})


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ConfigurationException(f"{name} must be an integer, got {raw!r}") from exc


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError as exc:
        raise ConfigurationException(f"{name} must be a number, got {raw!r}") from exc


@dataclass(slots=True)
class CartStorageConfig:
    backend: str
    directory: Path
    key: str
    redis_url: str | None
    ttl_seconds: int


@dataclass(slots=True)
class Settings:
    api_base_url: str
    request_timeout: float
    cart_storage: CartStorageConfig
    log_level: str
    sentry_dsn: str
    environment: str


def load_settings() -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    backend = os.getenv("CART_STORAGE_BACKEND", "file").strip().lower()
    if backend not in STORAGE_BACKENDS:
        raise ConfigurationException(
            f"CART_STORAGE_BACKEND must be one of {sorted(STORAGE_BACKENDS)}, got {backend!r}"
        )

    redis_url = os.getenv("REDIS_URL") or None
    if backend == "redis" and not redis_url:
        raise ConfigurationException("CART_STORAGE_BACKEND=redis requires REDIS_URL")

    storage_dir = os.getenv("CART_STORAGE_DIR") or str(Path.home() / ".storefront")

    cart_storage = CartStorageConfig(
        backend=backend,
        directory=Path(storage_dir).expanduser(),
        key=os.getenv("CART_STORAGE_KEY", "cart").strip() or "cart",
        redis_url=redis_url,
        ttl_seconds=_get_int("CART_TTL_SECONDS", 0),
    )

    return Settings(
        api_base_url=os.getenv("STOREFRONT_API_URL", "http://localhost:8080").rstrip("/"),
        request_timeout=_get_float("ORDER_API_TIMEOUT", 10.0),
        cart_storage=cart_storage,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        sentry_dsn=os.getenv("SENTRY_DSN", ""),
        environment=os.getenv("ENVIRONMENT", "development"),
    )
