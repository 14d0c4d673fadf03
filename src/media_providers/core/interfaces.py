from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from media_providers.core.audio import AudioClip
from media_providers.core.imaging import ImageInput


@dataclass
class WordSegment:
    word: str
    start: float
    end: float
    confidence: float = 1.0


@dataclass
class TranscriptionResult:
    text: str
    confidence: float = 1.0  # 0.0 to 1.0
    duration: float = 0.0
    language: Optional[str] = None
    words: list[WordSegment] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


class STTProvider(Protocol):
    """Speech-to-text provider interface."""

    async def transcribe(self, audio: AudioClip, language: Optional[str] = None) -> str:
        """
        Convert audio into text.
        """
        ...

    async def transcribe_with_confidence(
        self,
        audio: AudioClip,
        expected_text: Optional[str] = None,
        language: Optional[str] = None,
    ) -> TranscriptionResult:
        """
        Transcribe and score the result, optionally against the text the
        speaker was expected to say.
        """
        ...

    async def is_available(self) -> bool:
        ...

    def cancel(self) -> None:
        """Abort the in-flight transcription, if any."""
        ...


class TTSProvider(Protocol):
    """Text-to-speech provider interface."""

    async def synthesize(
        self,
        text: str,
        voice: Optional[str] = None,
        language: Optional[str] = None,
    ) -> AudioClip:
        """
        Convert text into a decoded audio clip.
        """
        ...

    async def list_voices(self) -> list[str]:
        ...

    async def is_available(self) -> bool:
        ...

    def cancel(self) -> None:
        ...

    def set_speed(self, multiplier: float) -> None:
        """Speed multiplier, clamped to [0.25, 2.0]. Backends without speed control ignore it."""
        ...


class VisionProvider(Protocol):
    """Image + text model interface."""

    async def generate(
        self,
        prompt: str,
        image: ImageInput,
        system_prompt: Optional[str] = None,
    ) -> str:
        ...

    async def is_available(self) -> bool:
        ...

    def model_name(self) -> str:
        ...


class LocalTranscriber(Protocol):
    """On-device speech recognizer used by the offline Whisper adapter."""

    async def transcribe(self, audio: AudioClip, language: Optional[str] = None) -> str:
        ...
