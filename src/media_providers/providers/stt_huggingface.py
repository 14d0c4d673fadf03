from __future__ import annotations

import logging
from typing import Optional

from media_providers.core.audio import AudioClip, describe, prepare_for_stt
from media_providers.core.bridge import HttpRequest, RequestBridge
from media_providers.core.config import STTConfig
from media_providers.core.errors import ArgumentError, ConfigurationError, DecodeError
from media_providers.core.interfaces import STTProvider, TranscriptionResult, WordSegment
from media_providers.core.normalizer import check_status, classify, extract_chunks, extract_transcript
from media_providers.providers.base import BridgedService
from media_providers.providers.stt_common import build_result

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "openai/whisper-large-v3-turbo"


class HuggingFaceSTT(BridgedService, STTProvider):
    """
    Hosted Whisper via the HuggingFace inference router.
    Uploads 16 kHz mono WAV, returns the transcript.
    """

    name = "HuggingFaceSTT"

    def __init__(self, config: STTConfig, bridge: RequestBridge) -> None:
        super().__init__(bridge)
        self._cfg = config

        if not config.api_key:
            logger.warning("[HuggingFaceSTT] API key (HF_TOKEN) is not set.")
        logger.info(f"[HuggingFaceSTT] Initialized with model: {self.model_name()}")

    def model_name(self) -> str:
        return self._cfg.model or DEFAULT_MODEL

    async def transcribe(self, audio: AudioClip, language: Optional[str] = None) -> str:
        text, _ = await self._transcribe(audio)
        return text

    async def transcribe_with_confidence(
        self,
        audio: AudioClip,
        expected_text: Optional[str] = None,
        language: Optional[str] = None,
    ) -> TranscriptionResult:
        text, words = await self._transcribe(audio)
        result = build_result(
            text,
            audio,
            expected_text,
            language or self._cfg.default_language,
            words=words,
        )
        result.metadata["model"] = self.model_name()
        return result

    async def is_available(self) -> bool:
        # Nothing cheap to probe without sending audio.
        return bool(self._cfg.api_key)

    async def _transcribe(self, audio: AudioClip) -> tuple[str, list[WordSegment]]:
        if audio is None:
            raise ArgumentError("HuggingFaceSTT.transcribe received no audio.")
        if not self._cfg.api_key:
            raise ConfigurationError("API key (HF_TOKEN) is required for HuggingFace STT.")

        self._begin()
        logger.info(f"[HuggingFaceSTT] Starting transcription: {describe(audio)}")

        try:
            wav = prepare_for_stt(audio, self._cfg.sample_rate)
        except ArgumentError:
            raise
        except RuntimeError as e:
            raise DecodeError(f"Failed to encode audio: {e}") from e

        url = f"{self._cfg.base_url.rstrip('/')}/{self.model_name()}"
        request = HttpRequest(
            method="POST",
            url=url,
            headers={
                "Authorization": f"Bearer {self._cfg.api_key}",
                "Content-Type": "audio/wav",
            },
            content=wav,
        )

        response = await self._exchange(request)
        check_status(response, "HuggingFace STT")

        body = classify(response)
        text = extract_transcript(body)
        words = [WordSegment(word=w, start=s, end=e) for w, s, e in extract_chunks(body)]
        self._ensure_not_cancelled()

        logger.info(f"[HuggingFaceSTT] Transcription: {text}")
        return text, words
