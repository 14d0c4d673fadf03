from __future__ import annotations

import asyncio
import time
from typing import Any, Coroutine, Protocol, TypeVar

T = TypeVar("T")


class Scheduler(Protocol):
    """Execution context that drives the bridge's polling loop one tick at a time."""

    def now(self) -> float:
        """Wall-clock seconds (monotonic)."""
        ...

    async def tick(self) -> None:
        """Suspend until the next tick."""
        ...

    async def sleep(self, seconds: float) -> None:
        ...

    def spawn(self, coro: Coroutine[Any, Any, T]) -> "asyncio.Task[T]":
        ...


class AsyncioScheduler:
    """Scheduler backed by the running asyncio event loop."""

    def __init__(self, tick_interval: float = 0.02) -> None:
        self._tick_interval = tick_interval

    def now(self) -> float:
        return time.monotonic()

    async def tick(self) -> None:
        await asyncio.sleep(self._tick_interval)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    def spawn(self, coro: Coroutine[Any, Any, T]) -> "asyncio.Task[T]":
        return asyncio.get_running_loop().create_task(coro)
