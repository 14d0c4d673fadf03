import io

import httpx
import pytest
import soundfile as sf

from media_providers.core.audio import decode_audio
from media_providers.core.config import STTConfig
from media_providers.core.errors import (
    ArgumentError,
    ConfigurationError,
    ProtocolError,
    RequestCancelledError,
    UnavailableError,
)
from media_providers.providers.stt_huggingface import HuggingFaceSTT
from media_providers.providers.stt_whisper_local import LocalWhisperSTT

HF = STTConfig(api_key="hf-key", base_url="https://hf.test/models/")


@pytest.mark.asyncio
async def test_huggingface_uploads_16k_mono_wav(make_bridge, make_wav):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"text": " hello world "})

    stt = HuggingFaceSTT(HF, make_bridge(handler))
    clip = decode_audio(make_wav(1.0, rate=48000, channels=2))
    text = await stt.transcribe(clip)

    assert text == "hello world"
    req = seen[0]
    assert str(req.url) == "https://hf.test/models/openai/whisper-large-v3-turbo"
    assert req.headers["Authorization"] == "Bearer hf-key"
    assert req.headers["Content-Type"] == "audio/wav"
    samples, rate = sf.read(io.BytesIO(req.content))
    assert rate == 16000
    assert samples.ndim == 1


@pytest.mark.asyncio
async def test_huggingface_accepts_bare_string_body(make_bridge, make_wav):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"Content-Type": "text/plain"}, content=b"bonjour")

    stt = HuggingFaceSTT(HF, make_bridge(handler))
    assert await stt.transcribe(decode_audio(make_wav(1.0))) == "bonjour"


@pytest.mark.asyncio
async def test_huggingface_confidence_against_expected_text(make_bridge, make_wav):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "text": "hello word",
                "chunks": [
                    {"text": "hello", "timestamp": [0.0, 0.5]},
                    {"text": "word", "timestamp": [0.5, 1.0]},
                ],
            },
        )

    stt = HuggingFaceSTT(HF, make_bridge(handler))
    result = await stt.transcribe_with_confidence(decode_audio(make_wav(1.0)), expected_text="hello world")

    assert result.text == "hello word"
    assert result.confidence == pytest.approx(1 - 1 / 11)
    assert result.duration == pytest.approx(1.0)
    assert result.language == "en"
    assert [w.word for w in result.words] == ["hello", "word"]
    assert all(w.confidence == pytest.approx(result.confidence) for w in result.words)
    assert result.metadata["expected_text"] == "hello world"
    assert result.metadata["accuracy"] == pytest.approx(1 - 1 / 11)
    assert result.metadata["model"] == "openai/whisper-large-v3-turbo"


@pytest.mark.asyncio
@pytest.mark.parametrize("status,error", [(401, ConfigurationError), (503, UnavailableError)])
async def test_huggingface_status_errors(make_bridge, make_wav, status, error):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json={"error": "Model openai/whisper is currently loading"})

    stt = HuggingFaceSTT(HF, make_bridge(handler))
    with pytest.raises(error):
        await stt.transcribe(decode_audio(make_wav(1.0)))


@pytest.mark.asyncio
async def test_huggingface_empty_transcript_is_protocol_error(make_bridge, make_wav):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"text": ""})

    with pytest.raises(ProtocolError):
        await HuggingFaceSTT(HF, make_bridge(handler)).transcribe(decode_audio(make_wav(1.0)))


@pytest.mark.asyncio
async def test_huggingface_validation_before_network(make_bridge, make_wav):
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(ArgumentError):
        await HuggingFaceSTT(HF, make_bridge(handler)).transcribe(None)

    stt = HuggingFaceSTT(STTConfig(api_key=""), make_bridge(handler))
    assert not await stt.is_available()
    with pytest.raises(ConfigurationError):
        await stt.transcribe(decode_audio(make_wav(1.0)))


# ---- Local Whisper ----


class DummyTranscriber:
    def __init__(self, text: str) -> None:
        self.text = text
        self.calls = []
        self.on_call = None

    async def transcribe(self, audio, language=None) -> str:
        self.calls.append(language)
        if self.on_call:
            self.on_call()
        return self.text


@pytest.mark.asyncio
async def test_local_whisper_delegates_to_transcriber(make_wav):
    transcriber = DummyTranscriber("  hola mundo ")
    stt = LocalWhisperSTT(STTConfig(provider="whisper_local", default_language="es"), transcriber)

    result = await stt.transcribe_with_confidence(decode_audio(make_wav(1.0)))

    assert result.text == "hola mundo"
    assert result.confidence == 1.0
    assert transcriber.calls == ["es"]
    assert await stt.is_available()


@pytest.mark.asyncio
async def test_local_whisper_empty_result(make_wav):
    stt = LocalWhisperSTT(STTConfig(), DummyTranscriber("   "))
    with pytest.raises(ProtocolError):
        await stt.transcribe(decode_audio(make_wav(1.0)))


@pytest.mark.asyncio
async def test_local_whisper_cancel_discards_result(make_wav):
    transcriber = DummyTranscriber("too late")
    stt = LocalWhisperSTT(STTConfig(), transcriber)
    transcriber.on_call = stt.cancel

    with pytest.raises(RequestCancelledError):
        await stt.transcribe(decode_audio(make_wav(1.0)))


def test_local_whisper_requires_transcriber():
    with pytest.raises(ArgumentError):
        LocalWhisperSTT(STTConfig(), None)


@pytest.mark.asyncio
async def test_huggingface_ignores_malformed_chunks(make_bridge, make_wav):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"text": "hi there", "chunks": [{"text": "hi", "timestamp": 1.0}]})

    stt = HuggingFaceSTT(HF, make_bridge(handler))
    result = await stt.transcribe_with_confidence(decode_audio(make_wav(1.0)))

    assert result.text == "hi there"
    assert result.words == []
