from __future__ import annotations

import logging
import uuid
from typing import Optional

from media_providers.core.audio import AudioClip
from media_providers.core.bridge import HttpRequest, RequestBridge
from media_providers.core.cache import MediaCache, make_cache_key
from media_providers.core.config import TTSConfig
from media_providers.core.errors import ArgumentError, MediaServiceError, ProtocolError
from media_providers.core.interfaces import TTSProvider
from media_providers.core.normalizer import JsonBody, check_status, classify, fetch_audio
from media_providers.core.scheduler import Scheduler
from media_providers.providers.base import BridgedService

logger = logging.getLogger(__name__)

GENERATE_SUCCESS = "generate-success"


class AllTalkTTS(BridgedService, TTSProvider):
    """
    Local AllTalk server. Generation is a form POST that answers with a
    relative URL; the WAV is fetched with a second request.
    """

    name = "AllTalkTTS"

    def __init__(self, config: TTSConfig, bridge: RequestBridge, scheduler: Scheduler) -> None:
        cache = MediaCache(config.max_cache_size) if config.enable_caching else None
        super().__init__(bridge, cache)
        self._cfg = config
        self._scheduler = scheduler

    def set_speed(self, multiplier: float) -> None:
        logger.warning("[AllTalkTTS] SetSpeed is not supported by AllTalk. Speed parameter ignored.")

    async def list_voices(self) -> list[str]:
        return [self._cfg.alltalk_voice]

    async def is_available(self) -> bool:
        try:
            clip = await self.synthesize("test")
        except MediaServiceError as e:
            logger.warning(f"[AllTalkTTS] Service availability check failed: {e}")
            return False
        return clip is not None

    async def synthesize(
        self,
        text: str,
        voice: Optional[str] = None,
        language: Optional[str] = None,
    ) -> AudioClip:
        text = (text or "").strip()
        if not text:
            raise ArgumentError("AllTalkTTS.synthesize received empty text.")

        voice = voice or self._cfg.alltalk_voice
        lang = language or self._cfg.default_language
        key = make_cache_key(text, voice, lang)

        cached = self._cache_get(key)
        if cached is not None:
            logger.info(f"[AllTalkTTS] Using cached audio for: {text[:30]}...")
            return cached

        self._begin()

        form = {
            "text_input": text,
            "text_filtering": "standard",
            "character_voice_gen": voice,
            "narrator_enabled": "false",
            "narrator_voice_gen": voice,
            "text_not_inside": "character",
            "language": lang,
            "output_file_name": f"tts{uuid.uuid4().hex}",
            "output_file_timestamp": "true",
            "autoplay": "false",
            "autoplay_volume": "0.8",
        }

        url = self._cfg.alltalk_generate_url()
        logger.info(f"[AllTalkTTS] Generating TTS at {url} (voice={voice}): {text[:50]}...")

        response = await self._exchange(HttpRequest(method="POST", url=url, data=form))
        check_status(response, "AllTalk TTS")

        body = classify(response)
        document = body.document if isinstance(body, JsonBody) else None
        status = document.get("status") if isinstance(document, dict) else None
        if status != GENERATE_SUCCESS:
            raise ProtocolError(f"AllTalk generation failed, status: {status}")

        file_url = document.get("output_file_url")
        if not isinstance(file_url, str) or not file_url:
            raise ProtocolError("AllTalk response has no output_file_url.")

        # The server reports success slightly before the file is readable.
        await self._scheduler.sleep(self._cfg.alltalk_fetch_delay_s)
        self._ensure_not_cancelled()

        clip = await fetch_audio(file_url, self._fetch, base_url=self._cfg.alltalk_url, name=key)
        logger.info(f"[AllTalkTTS] Audio loaded! Length: {clip.duration:.2f}s")

        self._cache_put(key, clip)
        return clip
