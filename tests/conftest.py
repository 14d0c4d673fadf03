from __future__ import annotations

import asyncio
import io

import httpx
import numpy as np
import pytest
import soundfile as sf

from media_providers.core.bridge import RequestBridge


class ManualClock:
    """Scheduler with a fake clock: every tick advances time by `step` seconds."""

    def __init__(self, step: float = 0.1) -> None:
        self.t = 0.0
        self.step = step
        self.slept: list[float] = []

    def now(self) -> float:
        return self.t

    async def tick(self) -> None:
        self.t += self.step
        await asyncio.sleep(0)

    async def sleep(self, seconds: float) -> None:
        self.slept.append(seconds)
        self.t += seconds
        await asyncio.sleep(0)

    def spawn(self, coro):
        return asyncio.ensure_future(coro)


def _make_wav(duration: float = 1.0, rate: int = 16000, channels: int = 1) -> bytes:
    t = np.linspace(0.0, duration, int(rate * duration), endpoint=False)
    tone = (0.3 * np.sin(2 * np.pi * 440.0 * t)).astype(np.float32)
    if channels > 1:
        tone = np.stack([tone] * channels, axis=1)
    buf = io.BytesIO()
    sf.write(buf, tone, rate, format="WAV", subtype="PCM_16")
    return buf.getvalue()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def make_wav():
    return _make_wav


@pytest.fixture
def make_bridge(clock):
    """Build a RequestBridge whose transport is an httpx.MockTransport handler."""

    def build(handler, timeout_s: float = 30.0) -> RequestBridge:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return RequestBridge(clock, timeout_s=timeout_s, client=client)

    return build
