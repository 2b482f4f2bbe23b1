from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest
import redis

from storefront.core.cart_storage import CartStore
from storefront.core.config import CartStorageConfig, Settings
from storefront.core.exceptions import CorruptPayloadException, PersistenceException
from storefront.domain.cart import Product
from storefront.integrations.local_storage import (
    FileStorage,
    KeyValueStorage,
    MemoryStorage,
    RedisStorage,
    create_storage,
)


@dataclass
class FakeRedisClient:
    data: dict[str, str] = field(default_factory=dict)
    expiry: dict[str, int] = field(default_factory=dict)
    broken: bool = False

    def _check(self) -> None:
        if self.broken:
            raise redis.ConnectionError("connection refused")

    def get(self, key: str):
        self._check()
        return self.data.get(key)

    def set(self, key: str, value: str) -> bool:
        self._check()
        self.data[key] = value
        self.expiry.pop(key, None)
        return True

    def setex(self, key: str, ttl: int, value: str) -> bool:
        self._check()
        self.data[key] = value
        self.expiry[key] = ttl
        return True

    def delete(self, key: str) -> int:
        self._check()
        existed = 1 if key in self.data else 0
        self.data.pop(key, None)
        self.expiry.pop(key, None)
        return existed


@pytest.fixture
def fake_redis(monkeypatch):
    import storefront.integrations.local_storage as local_storage_module

    client = FakeRedisClient()
    monkeypatch.setattr(local_storage_module.redis, "from_url", lambda *args, **kwargs: client)
    return client


def _settings(tmp_path: Path, backend: str, redis_url: str | None = None) -> Settings:
    return Settings(
        api_base_url="http://shop.test",
        request_timeout=5.0,
        cart_storage=CartStorageConfig(
            backend=backend,
            directory=tmp_path,
            key="cart",
            redis_url=redis_url,
            ttl_seconds=0,
        ),
        log_level="INFO",
        sentry_dsn="",
        environment="test",
    )


def test_backends_satisfy_protocol(tmp_path: Path, fake_redis) -> None:
    assert isinstance(MemoryStorage(), KeyValueStorage)
    assert isinstance(FileStorage(tmp_path), KeyValueStorage)
    assert isinstance(RedisStorage("redis://fake"), KeyValueStorage)


def test_file_storage_round_trip(tmp_path: Path) -> None:
    storage = FileStorage(tmp_path / "profile")

    assert storage.get("cart") is None
    storage.set("cart", '{"items": []}')
    assert storage.get("cart") == '{"items": []}'
    assert (tmp_path / "profile" / "cart.json").exists()

    storage.remove("cart")
    assert storage.get("cart") is None
    storage.remove("cart")


def test_file_storage_leaves_no_temp_files(tmp_path: Path) -> None:
    storage = FileStorage(tmp_path)
    storage.set("cart", "one")
    storage.set("cart", "two")

    assert sorted(p.name for p in tmp_path.iterdir()) == ["cart.json"]
    assert storage.get("cart") == "two"


def test_file_storage_hashes_unsafe_keys(tmp_path: Path) -> None:
    storage = FileStorage(tmp_path)
    storage.set("../escape", "x")

    assert storage.get("../escape") == "x"
    assert not (tmp_path.parent / "escape.json").exists()


def test_file_storage_wraps_os_errors(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file")
    storage = FileStorage(blocker)

    with pytest.raises(PersistenceException):
        storage.set("cart", "x")


def test_cart_survives_reload_from_disk(tmp_path: Path) -> None:
    cart = CartStore(FileStorage(tmp_path))
    cart.add_item(Product(product_id=3, name="Tote", unit_price=2500), 2)

    reloaded = CartStore(FileStorage(tmp_path))

    assert reloaded.get_items() == cart.get_items()


def test_corrupt_file_yields_empty_cart(tmp_path: Path) -> None:
    (tmp_path / "cart.json").write_text("\x00garbage", encoding="utf-8")

    cart = CartStore(FileStorage(tmp_path))

    assert cart.is_empty()
    assert not (tmp_path / "cart.json").exists()


def test_redis_storage_is_shared_between_instances(fake_redis) -> None:
    cart_a = CartStore(RedisStorage("redis://fake"))
    cart_a.add_item(Product(product_id=10, name="Bread", unit_price=800))

    cart_b = CartStore(RedisStorage("redis://fake"))

    assert cart_b.get_total_price() == 800
    assert "storefront:cart" in fake_redis.data


def test_redis_storage_refreshes_ttl_when_configured(fake_redis) -> None:
    storage = RedisStorage("redis://fake", ttl_seconds=3600)
    storage.set("cart", "x")

    assert fake_redis.expiry["storefront:cart"] == 3600


def test_redis_storage_without_ttl_does_not_expire(fake_redis) -> None:
    RedisStorage("redis://fake").set("cart", "x")

    assert "storefront:cart" not in fake_redis.expiry


def test_redis_errors_become_persistence_errors(fake_redis) -> None:
    storage = RedisStorage("redis://fake")
    fake_redis.broken = True

    with pytest.raises(PersistenceException):
        storage.get("cart")
    with pytest.raises(PersistenceException):
        storage.set("cart", "x")
    with pytest.raises(PersistenceException):
        storage.remove("cart")


def test_cart_falls_back_to_memory_when_redis_goes_down(fake_redis) -> None:
    cart = CartStore(RedisStorage("redis://fake"))
    fake_redis.broken = True

    cart.add_item(Product(product_id=1, name="Milk", unit_price=500))

    assert cart.is_memory_fallback
    assert cart.get_total_quantity() == 1


def test_create_storage_selects_backend(tmp_path: Path, fake_redis) -> None:
    assert isinstance(create_storage(_settings(tmp_path, "file")), FileStorage)
    assert isinstance(create_storage(_settings(tmp_path, "memory")), MemoryStorage)
    assert isinstance(create_storage(_settings(tmp_path, "redis", "redis://fake")), RedisStorage)


def test_undecodable_file_is_discarded_and_persistence_continues(tmp_path: Path) -> None:
    (tmp_path / "cart.json").write_bytes(b"\xff\xfe\x00broken")

    cart = CartStore(FileStorage(tmp_path))
    assert cart.is_empty()
    assert not cart.is_memory_fallback

    cart.add_item(Product(product_id=1, name="Plush", unit_price=1200))

    reloaded = CartStore(FileStorage(tmp_path))
    assert reloaded.get_total_quantity() == 1


def test_file_storage_reports_undecodable_payload_as_corrupt(tmp_path: Path) -> None:
    (tmp_path / "cart.json").write_bytes(b"\xff\xfe")

    with pytest.raises(CorruptPayloadException):
        FileStorage(tmp_path).get("cart")
