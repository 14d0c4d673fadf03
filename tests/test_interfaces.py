import numpy as np
import pytest

from media_providers.core.audio import AudioClip
from media_providers.core.interfaces import STTProvider, TranscriptionResult, TTSProvider, VisionProvider


class DummySTT:
    async def transcribe(self, audio, language=None) -> str:
        return "ok"

    async def transcribe_with_confidence(self, audio, expected_text=None, language=None) -> TranscriptionResult:
        return TranscriptionResult(text="ok", confidence=0.9, duration=audio.duration, language=language)

    async def is_available(self) -> bool:
        return True

    def cancel(self) -> None:
        pass


class DummyTTS:
    async def synthesize(self, text, voice=None, language=None) -> AudioClip:
        return AudioClip(samples=np.zeros(1600, dtype=np.float32), sample_rate=16000, name=text)

    async def list_voices(self) -> list[str]:
        return ["default"]

    async def is_available(self) -> bool:
        return True

    def cancel(self) -> None:
        pass

    def set_speed(self, multiplier: float) -> None:
        pass


class DummyVision:
    async def generate(self, prompt, image, system_prompt=None) -> str:
        return "a cat"

    async def is_available(self) -> bool:
        return True

    def model_name(self) -> str:
        return "dummy"


@pytest.mark.asyncio
async def test_dummy_providers_satisfy_contracts():
    tts: TTSProvider = DummyTTS()
    stt: STTProvider = DummySTT()
    vision: VisionProvider = DummyVision()

    clip = await tts.synthesize("hello")
    assert clip.duration == pytest.approx(0.1)

    result = await stt.transcribe_with_confidence(clip, language="en")
    assert result.text == "ok"
    assert result.words == []
    assert result.metadata == {}

    assert await vision.generate("what?", b"img") == "a cat"
