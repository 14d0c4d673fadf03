from __future__ import annotations

import logging
from typing import Any, Optional

from media_providers.core.bridge import HttpRequest, RawResponse, RequestBridge
from media_providers.core.cache import MediaCache
from media_providers.core.errors import RequestCancelledError

logger = logging.getLogger(__name__)

MIN_SPEED = 0.25
MAX_SPEED = 2.0


def clamp_speed(multiplier: float) -> float:
    # Two decimals, the same precision the cache key uses.
    return round(min(MAX_SPEED, max(MIN_SPEED, float(multiplier))), 2)


class BridgedService:
    """
    Common plumbing for adapters that talk HTTP through a RequestBridge.

    One bridge per adapter, so one in-flight request per adapter. The cache is
    only written after a request fully succeeded and was not cancelled.
    """

    name = "service"

    def __init__(self, bridge: RequestBridge, cache: Optional[MediaCache] = None) -> None:
        self._bridge = bridge
        self._cache = cache
        self._cancelled = False

    @property
    def cache(self) -> Optional[MediaCache]:
        return self._cache

    def cancel(self) -> None:
        self._cancelled = True
        self._bridge.cancel()
        logger.info(f"[{self.name}] Request cancelled")

    async def aclose(self) -> None:
        """Tear down: abort in-flight work, release cached media, close the transport."""
        if self._cache is not None:
            self._cache.clear()
        await self._bridge.aclose()

    def _begin(self) -> None:
        self._cancelled = False

    def _ensure_not_cancelled(self) -> None:
        if self._cancelled:
            raise RequestCancelledError(f"{self.name} request was cancelled")

    async def _exchange(self, request: HttpRequest) -> RawResponse:
        self._ensure_not_cancelled()
        return await self._bridge.send(request)

    async def _fetch(self, url: str) -> RawResponse:
        return await self._exchange(HttpRequest(method="GET", url=url))

    def _cache_get(self, key: str) -> Optional[Any]:
        if self._cache is None:
            return None
        return self._cache.get(key)

    def _cache_put(self, key: str, payload: Any) -> None:
        self._ensure_not_cancelled()
        if self._cache is not None:
            self._cache.put(key, payload)
