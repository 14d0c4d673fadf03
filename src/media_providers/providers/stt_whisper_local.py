from __future__ import annotations

import logging
from typing import Optional

from media_providers.core.audio import AudioClip
from media_providers.core.config import STTConfig
from media_providers.core.errors import ArgumentError, ProtocolError, RequestCancelledError
from media_providers.core.interfaces import LocalTranscriber, STTProvider, TranscriptionResult
from media_providers.providers.stt_common import build_result

logger = logging.getLogger(__name__)


class LocalWhisperSTT(STTProvider):
    """
    Offline Whisper. Recognition is delegated to an injected on-device
    transcriber; no network, no cache.
    """

    def __init__(self, config: STTConfig, transcriber: LocalTranscriber) -> None:
        if transcriber is None:
            raise ArgumentError("A local transcriber is required for the whisper_local provider.")
        self._cfg = config
        self._transcriber = transcriber
        self._cancelled = False

    async def transcribe(self, audio: AudioClip, language: Optional[str] = None) -> str:
        if audio is None:
            raise ArgumentError("LocalWhisperSTT.transcribe received no audio.")

        self._cancelled = False
        text = await self._transcriber.transcribe(audio, language or self._cfg.default_language)

        # The local engine cannot be interrupted; drop its result instead.
        if self._cancelled:
            raise RequestCancelledError("Transcription was cancelled")

        text = (text or "").strip()
        if not text:
            raise ProtocolError("Whisper returned empty transcription")
        return text

    async def transcribe_with_confidence(
        self,
        audio: AudioClip,
        expected_text: Optional[str] = None,
        language: Optional[str] = None,
    ) -> TranscriptionResult:
        text = await self.transcribe(audio, language)
        return build_result(text, audio, expected_text, language or self._cfg.default_language)

    async def is_available(self) -> bool:
        return self._transcriber is not None

    def cancel(self) -> None:
        self._cancelled = True
        logger.info("[LocalWhisperSTT] Transcription cancelled")

    async def aclose(self) -> None:
        self._cancelled = True
