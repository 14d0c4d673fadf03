import json

import pytest

from media_providers.core.bridge import RawResponse
from media_providers.core.errors import ConfigurationError, ProtocolError, UnavailableError
from media_providers.core.normalizer import (
    BinaryBody,
    JsonBody,
    TextBody,
    check_status,
    classify,
    extract_chunks,
    extract_media_url,
    extract_message_content,
    extract_transcript,
    fetch_audio,
    resolve_audio,
)


def _resp(body: bytes, content_type: str = "", status: int = 200) -> RawResponse:
    headers = {"Content-Type": content_type} if content_type else {}
    return RawResponse(status=status, headers=headers, body=body)


def test_classify_by_content_type():
    assert isinstance(classify(_resp(b"\x00\x01", "audio/mpeg")), BinaryBody)
    assert isinstance(classify(_resp(b"\x00\x01", "application/octet-stream")), BinaryBody)
    assert classify(_resp(b'{"text": "hi"}', "application/json")) == JsonBody(document={"text": "hi"})
    assert classify(_resp(b"plain words", "text/plain")) == TextBody(text="plain words")


def test_classify_sniffs_json_without_content_type():
    body = classify(_resp(b'[{"generated_text": "x"}]'))
    assert isinstance(body, JsonBody)
    assert body.document[0]["generated_text"] == "x"


def test_classify_malformed_json_is_protocol_error():
    with pytest.raises(ProtocolError):
        classify(_resp(b"{not json", "application/json"))


def test_media_url_prefers_flat_field():
    doc = {"audio_url": "https://a/flat.wav", "audio": {"url": "https://a/nested.wav"}}
    assert extract_media_url(doc) == "https://a/flat.wav"
    assert extract_media_url({"audio": {"url": "https://a/nested.wav"}}) == "https://a/nested.wav"


def test_media_url_missing_is_protocol_error():
    with pytest.raises(ProtocolError):
        extract_media_url({"audio": {}})


@pytest.mark.parametrize(
    "status,error",
    [
        (401, ConfigurationError),
        (403, ConfigurationError),
        (503, UnavailableError),
        (429, UnavailableError),
        (500, UnavailableError),
        (400, ProtocolError),
        (404, ProtocolError),
    ],
)
def test_check_status_maps_to_taxonomy(status, error):
    with pytest.raises(error):
        check_status(_resp(b'{"error": "nope"}', "application/json", status=status), "svc")


def test_check_status_warming_up_message():
    with pytest.raises(UnavailableError) as exc:
        check_status(_resp(b'{"error": "Model is loading"}', "application/json", status=503), "HF")
    assert "warming up" in str(exc.value)
    assert "Model is loading" in str(exc.value)


def test_check_status_passes_success():
    check_status(_resp(b"", status=200), "svc")


def test_extract_transcript_variants():
    assert extract_transcript(JsonBody(document={"text": " hola "})) == "hola"
    assert extract_transcript(TextBody(text="hola")) == "hola"
    with pytest.raises(ProtocolError):
        extract_transcript(JsonBody(document={"text": ""}))
    with pytest.raises(ProtocolError):
        extract_transcript(BinaryBody(data=b"x", content_type="audio/wav"))


def test_extract_chunks():
    doc = {"text": "a b", "chunks": [{"text": " a", "timestamp": [0.0, 0.4]}, {"text": "b", "timestamp": [0.4, None]}]}
    assert extract_chunks(JsonBody(document=doc)) == [("a", 0.0, 0.4), ("b", 0.4, 0.4)]
    assert extract_chunks(TextBody(text="a b")) == []


def test_extract_message_content():
    doc = {"choices": [{"message": {"role": "assistant", "content": " a red apple "}}]}
    assert extract_message_content(doc) == "a red apple"
    with pytest.raises(ProtocolError):
        extract_message_content({"choices": []})


@pytest.mark.asyncio
async def test_resolve_audio_fetches_url_from_json(make_wav):
    fetched = []
    wav = make_wav(0.5)

    async def fetch(url: str) -> RawResponse:
        fetched.append(url)
        return _resp(wav, "audio/wav")

    body = classify(_resp(json.dumps({"audio": {"url": "https://cdn.test/out.wav"}}).encode(), "application/json"))
    clip = await resolve_audio(body, fetch, name="x")

    assert fetched == ["https://cdn.test/out.wav"]
    assert clip.duration == pytest.approx(0.5)


@pytest.mark.asyncio
async def test_resolve_audio_decodes_binary_without_fetch(make_wav):
    async def fetch(url: str) -> RawResponse:
        raise AssertionError("no secondary fetch expected")

    clip = await resolve_audio(BinaryBody(data=make_wav(0.25), content_type="audio/wav"), fetch)
    assert clip.duration == pytest.approx(0.25)


@pytest.mark.asyncio
async def test_resolve_audio_rejects_text():
    async def fetch(url: str) -> RawResponse:
        raise AssertionError("no secondary fetch expected")

    with pytest.raises(ProtocolError):
        await resolve_audio(TextBody(text="oops"), fetch)


@pytest.mark.asyncio
async def test_fetch_audio_joins_relative_url(make_wav):
    fetched = []

    async def fetch(url: str) -> RawResponse:
        fetched.append(url)
        return _resp(make_wav(0.1), "audio/wav")

    await fetch_audio("/audio/tts1.wav", fetch, base_url="http://127.0.0.1:7851/")
    assert fetched == ["http://127.0.0.1:7851/audio/tts1.wav"]


@pytest.mark.asyncio
async def test_fetch_audio_checks_download_status():
    async def fetch(url: str) -> RawResponse:
        return _resp(b"not found", "text/plain", status=404)

    with pytest.raises(ProtocolError):
        await fetch_audio("https://cdn.test/missing.wav", fetch)


@pytest.mark.parametrize(
    "chunk",
    [
        {"text": "hi", "timestamp": 1.0},
        {"text": "hi", "timestamp": {"start": 0.0}},
        {"text": "hi", "timestamp": ["soon", "later"]},
        {"text": "hi", "timestamp": [0.0]},
        "hi",
    ],
)
def test_extract_chunks_skips_malformed_entries(chunk):
    doc = {"text": "hi there", "chunks": [chunk, {"text": "there", "timestamp": [0.5, 1.0]}]}
    assert extract_chunks(JsonBody(document=doc)) == [("there", 0.5, 1.0)]
