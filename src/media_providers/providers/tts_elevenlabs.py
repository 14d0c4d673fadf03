from __future__ import annotations

import logging
from typing import Optional

from media_providers.core.audio import AudioClip
from media_providers.core.bridge import HttpRequest, RequestBridge
from media_providers.core.cache import MediaCache, make_cache_key
from media_providers.core.config import TTSConfig
from media_providers.core.errors import ArgumentError, ConfigurationError, MediaServiceError, ProtocolError
from media_providers.core.interfaces import TTSProvider
from media_providers.core.normalizer import BinaryBody, check_status, classify, resolve_audio
from media_providers.providers.base import BridgedService, clamp_speed

logger = logging.getLogger(__name__)


class ElevenLabsTTS(BridgedService, TTSProvider):
    """
    ElevenLabs Text-to-Speech provider.
    Returns decoded audio (mp3 on the wire by default).
    """

    name = "ElevenLabsTTS"

    def __init__(self, config: TTSConfig, bridge: RequestBridge) -> None:
        cache = MediaCache(config.max_cache_size) if config.enable_caching else None
        super().__init__(bridge, cache)
        self._cfg = config
        self._speed = clamp_speed(config.speech_rate)

        if not config.api_key:
            logger.warning("[ElevenLabsTTS] API key is not set. Please configure ELEVENLABS_API_KEY.")

    @property
    def speed(self) -> float:
        return self._speed

    def set_speed(self, multiplier: float) -> None:
        self._speed = clamp_speed(multiplier)
        logger.info(f"[ElevenLabsTTS] Speed set to: {self._speed}")

    async def list_voices(self) -> list[str]:
        return [self._cfg.elevenlabs_voice_id]

    async def is_available(self) -> bool:
        if not self._cfg.api_key:
            return False
        try:
            clip = await self.synthesize("Hi")
        except MediaServiceError as e:
            logger.warning(f"[ElevenLabsTTS] Service availability check failed: {e}")
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
            raise ArgumentError("ElevenLabsTTS.synthesize received empty text.")
        if not self._cfg.api_key:
            raise ConfigurationError("ElevenLabs API key is not configured.")

        voice_id = voice or self._cfg.elevenlabs_voice_id
        lang = language or self._cfg.default_language
        key = make_cache_key(text, voice_id, lang, self._speed)

        cached = self._cache_get(key)
        if cached is not None:
            logger.info(f"[ElevenLabsTTS] Using cached audio for: {text[:30]}...")
            return cached

        self._begin()

        payload: dict = {
            "text": text,
            "voice_settings": {"speed": self._speed},
        }
        if self._cfg.elevenlabs_model_id:
            payload["model_id"] = self._cfg.elevenlabs_model_id

        params = {"output_format": self._cfg.output_format} if self._cfg.output_format else None

        request = HttpRequest(
            method="POST",
            url=f"{self._cfg.elevenlabs_base_url.rstrip('/')}/text-to-speech/{voice_id}",
            headers={
                "xi-api-key": self._cfg.api_key,
                "accept": "audio/mpeg",
                "content-type": "application/json",
            },
            params=params,
            json=payload,
        )

        response = await self._exchange(request)
        check_status(response, "ElevenLabs TTS")

        body = classify(response)
        if not isinstance(body, BinaryBody):
            # Some proxies drop the content type; the body is still raw audio.
            if not response.body:
                raise ProtocolError("ElevenLabs returned empty audio content.")
            body = BinaryBody(data=response.body, content_type="audio/mpeg")

        clip = await resolve_audio(body, self._fetch, name=key)
        logger.info(f"[ElevenLabsTTS] Audio loaded! Length: {clip.duration:.2f}s")

        self._cache_put(key, clip)
        return clip
