from __future__ import annotations

import hashlib
import logging
from typing import Any, Dict, Iterator, Optional

from media_providers.core.errors import ArgumentError

logger = logging.getLogger(__name__)


def make_cache_key(*parts: Any) -> str:
    """
    Deterministic key for the request parameters that change the output
    (text, voice/model, language, speed...).
    """
    normalized = []
    for part in parts:
        if part is None:
            normalized.append("")
        elif isinstance(part, float):
            normalized.append(f"{part:.2f}")
        else:
            normalized.append(str(part))
    raw = "\x1f".join(normalized)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def _release(payload: Any) -> None:
    release = getattr(payload, "release", None)
    if callable(release):
        release()


def _is_stale(payload: Any) -> bool:
    return payload is None or bool(getattr(payload, "released", False))


class MediaCache:
    """
    Bounded key -> payload map with strict FIFO eviction.

    Evicted payloads are released, not just dropped. Entries whose payload
    has already been released elsewhere are treated as misses and removed.
    Not thread-safe: one cooperative execution context per cache.
    """

    def __init__(self, max_size: int = 50) -> None:
        if max_size < 1:
            raise ArgumentError(f"Cache max_size must be >= 1, got {max_size}.")
        self._max_size = max_size
        self._store: Dict[str, Any] = {}

    @property
    def max_size(self) -> int:
        return self._max_size

    def get(self, key: str) -> Optional[Any]:
        payload = self._store.get(key)
        if payload is None:
            return None
        if _is_stale(payload):
            logger.debug(f"Dropping stale cache entry {key[:12]}")
            del self._store[key]
            return None
        return payload

    def put(self, key: str, payload: Any) -> None:
        if key in self._store:
            return

        if len(self._store) >= self._max_size:
            oldest_key = next(iter(self._store))
            evicted = self._store.pop(oldest_key)
            _release(evicted)
            logger.debug(f"Evicted cache entry {oldest_key[:12]}")

        self._store[key] = payload

    def clear(self) -> None:
        for payload in self._store.values():
            _release(payload)
        self._store.clear()

    def keys(self) -> list[str]:
        return list(self._store)

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._store))
