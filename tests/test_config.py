from __future__ import annotations

from pathlib import Path

import pytest

from storefront.core import config as config_module
from storefront.core.bootstrap import build_storefront
from storefront.core.config import load_settings
from storefront.core.exceptions import ConfigurationException
from storefront.integrations.local_storage import FileStorage, MemoryStorage

_ENV_VARS = (
    "STOREFRONT_API_URL",
    "ORDER_API_TIMEOUT",
    "CART_STORAGE_BACKEND",
    "CART_STORAGE_DIR",
    "CART_STORAGE_KEY",
    "CART_TTL_SECONDS",
    "REDIS_URL",
    "LOG_LEVEL",
    "SENTRY_DSN",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "load_dotenv", lambda *args, **kwargs: False)


def test_defaults(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CART_STORAGE_DIR", str(tmp_path))

    settings = load_settings()

    assert settings.api_base_url == "http://localhost:8080"
    assert settings.request_timeout == 10.0
    assert settings.cart_storage.backend == "file"
    assert settings.cart_storage.key == "cart"
    assert settings.cart_storage.directory == tmp_path
    assert settings.cart_storage.ttl_seconds == 0


def test_overrides(monkeypatch) -> None:
    monkeypatch.setenv("STOREFRONT_API_URL", "https://shop.example/")
    monkeypatch.setenv("ORDER_API_TIMEOUT", "2.5")
    monkeypatch.setenv("CART_STORAGE_BACKEND", "memory")
    monkeypatch.setenv("CART_STORAGE_KEY", "omise-cart")

    settings = load_settings()

    assert settings.api_base_url == "https://shop.example"
    assert settings.request_timeout == 2.5
    assert settings.cart_storage.backend == "memory"
    assert settings.cart_storage.key == "omise-cart"


def test_unknown_backend_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv("CART_STORAGE_BACKEND", "cookies")
    with pytest.raises(ConfigurationException):
        load_settings()


def test_redis_backend_requires_url(monkeypatch) -> None:
    monkeypatch.setenv("CART_STORAGE_BACKEND", "redis")
    with pytest.raises(ConfigurationException):
        load_settings()


def test_non_numeric_timeout_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv("ORDER_API_TIMEOUT", "soon")
    with pytest.raises(ConfigurationException):
        load_settings()


@pytest.mark.asyncio
async def test_build_storefront_shares_one_cart(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CART_STORAGE_DIR", str(tmp_path))
    storefront = build_storefront(load_settings(), configure_logging=False)

    try:
        assert isinstance(storefront.storage, FileStorage)
        first = storefront.new_checkout()
        second = storefront.new_checkout()
        assert first is not second
        assert first.cart is storefront.cart is second.cart
    finally:
        await storefront.close()


@pytest.mark.asyncio
async def test_build_storefront_with_memory_backend(monkeypatch) -> None:
    monkeypatch.setenv("CART_STORAGE_BACKEND", "memory")
    storefront = build_storefront(load_settings(), configure_logging=False)
    try:
        assert isinstance(storefront.storage, MemoryStorage)
        assert storefront.cart.is_empty()
    finally:
        await storefront.close()
