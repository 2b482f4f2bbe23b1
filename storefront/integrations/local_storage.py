"""Durable client-local key-value storage backends for the cart.

Every backend exposes the same three calls (``get``/``set``/``remove`` by key) and
wraps its own failures in ``PersistenceException`` so the cart can fall back to memory.
"""
from __future__ import annotations

import hashlib
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import redis

from storefront.core.exceptions import CorruptPayloadException, PersistenceException

if TYPE_CHECKING:
    from storefront.core.config import Settings

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]{1,64}$")


@runtime_checkable
class KeyValueStorage(Protocol):
    """Key-value string store scoped to one client profile."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryStorage:
    """Process-local storage. Used as fallback and in tests."""

    def __init__(self, data: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class FileStorage:
    """One file per key inside a profile directory, replaced atomically on write."""

    SUFFIX = ".json"

    def __init__(self, directory: str | os.PathLike[str]):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if _SAFE_KEY.match(key) and key not in {".", ".."}:
            name = key
        else:
            name = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.directory / f"{name}{self.SUFFIX}"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise PersistenceException(f"Failed to read {path}: {exc}") from exc
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CorruptPayloadException(f"{path} is not valid UTF-8: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_name: str | None = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=self.SUFFIX)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            raise PersistenceException(f"Failed to write {path}: {exc}") from exc
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.debug("Could not remove temp file %s", tmp_name)

    def remove(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceException(f"Failed to remove {path}: {exc}") from exc


class RedisStorage:
    """Redis-backed storage. A positive TTL is refreshed on every write."""

    def __init__(self, redis_url: str, ttl_seconds: int = 0, key_prefix: str = "storefront:"):
        self._redis_url = redis_url
        self._ttl_seconds = int(ttl_seconds)
        self._key_prefix = key_prefix
        self._client: Any = redis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
        )

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    def get(self, key: str) -> str | None:
        try:
            return self._client.get(self._key(key))
        except redis.RedisError as exc:
            raise PersistenceException(f"Redis get failed: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        try:
            if self._ttl_seconds > 0:
                self._client.setex(self._key(key), self._ttl_seconds, value)
            else:
                self._client.set(self._key(key), value)
        except redis.RedisError as exc:
            raise PersistenceException(f"Redis set failed: {exc}") from exc

    def remove(self, key: str) -> None:
        try:
            self._client.delete(self._key(key))
        except redis.RedisError as exc:
            raise PersistenceException(f"Redis delete failed: {exc}") from exc


def create_storage(settings: Settings) -> KeyValueStorage:
    """Build the configured cart storage backend."""
    config = settings.cart_storage
    if config.backend == "redis" and config.redis_url:
        logger.info("Using Redis for cart storage")
        return RedisStorage(config.redis_url, ttl_seconds=config.ttl_seconds)
    if config.backend == "memory":
        logger.warning("Using in-memory cart storage; cart is LOST on restart")
        return MemoryStorage()
    logger.info("Using file cart storage in %s", config.directory)
    return FileStorage(config.directory)
