from __future__ import annotations

import logging
from typing import Optional

from media_providers.core.audio import AudioClip
from media_providers.core.bridge import HttpRequest, RequestBridge
from media_providers.core.cache import MediaCache, make_cache_key
from media_providers.core.config import TTSConfig
from media_providers.core.errors import ArgumentError
from media_providers.core.interfaces import TTSProvider
from media_providers.core.normalizer import check_status, classify, resolve_audio
from media_providers.providers.base import BridgedService

logger = logging.getLogger(__name__)

_ROUTER_HOSTS = ("router.huggingface.co", "fal.ai")


class HuggingFaceTTS(BridgedService, TTSProvider):
    """
    HuggingFace TTS. Router/fal models answer with JSON pointing at the
    audio file; standard inference endpoints answer with raw audio bytes.
    """

    name = "HuggingFaceTTS"

    def __init__(self, config: TTSConfig, bridge: RequestBridge) -> None:
        cache = MediaCache(config.max_cache_size) if config.enable_caching else None
        super().__init__(bridge, cache)
        self._cfg = config

    def set_speed(self, multiplier: float) -> None:
        logger.warning("[HuggingFaceTTS] SetSpeed is not supported by HuggingFace TTS. Speed parameter ignored.")

    async def list_voices(self) -> list[str]:
        return ["default"]

    async def is_available(self) -> bool:
        return bool(self._cfg.api_key)

    async def synthesize(
        self,
        text: str,
        voice: Optional[str] = None,
        language: Optional[str] = None,
    ) -> AudioClip:
        text = (text or "").strip()
        if not text:
            raise ArgumentError("HuggingFaceTTS.synthesize received empty text.")

        key = make_cache_key(text, voice, language)
        cached = self._cache_get(key)
        if cached is not None:
            logger.info(f"[HuggingFaceTTS] Using cached audio for: {text[:20]}...")
            return cached

        self._begin()

        url = self._cfg.huggingface_url
        if any(host in url for host in _ROUTER_HOSTS):
            payload = {"text": text}
        else:
            payload = {"inputs": text}

        headers = {"Content-Type": "application/json"}
        if self._cfg.api_key:
            headers["Authorization"] = f"Bearer {self._cfg.api_key}"

        logger.info(f"[HuggingFaceTTS] Requesting: {url}")
        response = await self._exchange(HttpRequest(method="POST", url=url, headers=headers, json=payload))
        check_status(response, "HuggingFace TTS")

        clip = await resolve_audio(classify(response), self._fetch, name=key)
        self._cache_put(key, clip)
        return clip
