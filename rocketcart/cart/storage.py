"""
Cart Storage - persistence slots for the cart snapshot.

One named slot holds the whole cart as a JSON array of CartItem objects.
`load()` runs once when the store is hydrated; `save()` rewrites the slot
after every committed mutation.

Backends:
- MemoryCartStorage: process-local, used by tests and throwaway sessions
- FileCartStorage: JSON file on disk, replaced atomically
- RedisCartStorage: Upstash Redis key, optional TTL
"""
import asyncio
import json
import os
from pathlib import Path
from typing import Iterable, List, Optional

from rocketcart import config
from rocketcart.db import RedisKeys, get_redis
from rocketcart.errors import InvalidPersistedState, StorageFailure
from rocketcart.logging import get_logger

from .models import CartItem, CartSnapshot

logger = get_logger(__name__)


def encode_cart(items: Iterable[CartItem]) -> str:
    """Serialize items to compact, deterministic JSON."""
    return json.dumps(
        [item.to_dict() for item in items],
        separators=(",", ":"),
        ensure_ascii=False,
    )


def decode_cart(raw: str) -> List[CartItem]:
    """
    Parse a persisted slot.

    Raises:
        InvalidPersistedState: bad JSON, non-list payload, invalid item,
            or duplicate product ids
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise InvalidPersistedState(f"Could not parse cart data: {e}") from e

    if not isinstance(data, list):
        raise InvalidPersistedState(
            f"Cart data must be a list, got {type(data).__name__}"
        )

    try:
        items = [CartItem.from_dict(entry) for entry in data]
        # Validates uniqueness by id
        CartSnapshot(items=tuple(items))
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidPersistedState(f"Invalid cart item: {e}") from e

    return items


class CartStorage:
    """
    Base class for cart persistence slots.

    Subclasses implement `_read` / `_write` on raw strings; encoding and
    corrupt-data handling live here.
    """

    async def _read(self) -> Optional[str]:
        raise NotImplementedError

    async def _write(self, raw: str) -> None:
        raise NotImplementedError

    async def load(self) -> List[CartItem]:
        """
        Load the persisted cart.

        Returns:
            Stored items, or [] when the slot is empty or corrupt

        Raises:
            StorageFailure: If the slot cannot be reached
        """
        try:
            raw = await self._read()
        except Exception as e:
            logger.error(f"Failed to read cart from {self!r}: {e}")
            raise StorageFailure(f"Cart storage unavailable: {e}") from e

        if not raw:
            return []

        try:
            return decode_cart(raw)
        except InvalidPersistedState as e:
            # Corrupted data - start from an empty cart, keep the slot for inspection
            logger.warning(f"Corrupted cart data in {self!r}: {e}")
            return []

    async def save(self, items: Iterable[CartItem]) -> None:
        """
        Overwrite the slot with the complete sequence.

        Raises:
            StorageFailure: If the write fails
        """
        raw = encode_cart(items)
        try:
            await self._write(raw)
        except Exception as e:
            logger.error(f"Failed to save cart to {self!r}: {e}")
            raise StorageFailure(f"Cart storage unavailable: {e}") from e


class MemoryCartStorage(CartStorage):
    """Keeps the slot in memory. `writes` records every saved payload."""

    def __init__(self, raw: Optional[str] = None):
        self.raw = raw
        self.writes: List[str] = []

    async def _read(self) -> Optional[str]:
        return self.raw

    async def _write(self, raw: str) -> None:
        self.raw = raw
        self.writes.append(raw)

    def __repr__(self) -> str:
        return "MemoryCartStorage()"


class FileCartStorage(CartStorage):
    """JSON file slot. Writes go to a sibling temp file, then replace."""

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)

    def _read_sync(self) -> Optional[str]:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def _write_sync(self, raw: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(raw, encoding="utf-8")
        os.replace(tmp_path, self.path)

    async def _read(self) -> Optional[str]:
        return await asyncio.to_thread(self._read_sync)

    async def _write(self, raw: str) -> None:
        await asyncio.to_thread(self._write_sync, raw)

    def __repr__(self) -> str:
        return f"FileCartStorage({str(self.path)!r})"


class RedisCartStorage(CartStorage):
    """Upstash Redis slot at cart:{storage_key}."""

    def __init__(self, storage_key: str, redis_client=None, ttl: int = 0):
        self.key = RedisKeys.cart_key(storage_key)
        self.ttl = ttl
        self._redis = redis_client  # Lazy initialization when None

    @property
    def redis(self):
        """Get Redis client (lazy initialization)."""
        if self._redis is None:
            self._redis = get_redis()
        return self._redis

    async def _read(self) -> Optional[str]:
        return await self.redis.get(self.key)

    async def _write(self, raw: str) -> None:
        if self.ttl > 0:
            await self.redis.set(self.key, raw, ex=self.ttl)
        else:
            await self.redis.set(self.key, raw)

    def __repr__(self) -> str:
        return f"RedisCartStorage({self.key!r})"


def build_storage(
    backend: Optional[str] = None,
    storage_key: Optional[str] = None,
    path: Optional[str] = None,
) -> CartStorage:
    """
    Create the storage slot selected by configuration.

    Raises:
        ConfigError: unknown backend, or an unusable CART_TTL for redis
    """
    backend = (backend or config.cart_storage_backend()).lower()
    storage_key = storage_key or config.cart_storage_key()

    if backend == "memory":
        return MemoryCartStorage()
    if backend == "file":
        return FileCartStorage(path or config.cart_storage_path())
    if backend == "redis":
        return RedisCartStorage(storage_key, ttl=config.cart_ttl())

    raise config.ConfigError(
        f"Unknown cart storage backend {backend!r}, expected one of {config.STORAGE_BACKENDS}"
    )


__all__ = [
    "encode_cart",
    "decode_cart",
    "CartStorage",
    "MemoryCartStorage",
    "FileCartStorage",
    "RedisCartStorage",
    "build_storage",
]
