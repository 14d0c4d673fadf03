from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union
from urllib.parse import urljoin

from media_providers.core.audio import AudioClip, decode_audio
from media_providers.core.bridge import RawResponse
from media_providers.core.errors import ConfigurationError, ProtocolError, UnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BinaryBody:
    data: bytes
    content_type: str


@dataclass(frozen=True)
class JsonBody:
    document: Any


@dataclass(frozen=True)
class TextBody:
    text: str


NormalizedResponse = Union[BinaryBody, JsonBody, TextBody]

Fetch = Callable[[str], Awaitable[RawResponse]]


def _error_detail(response: RawResponse) -> str:
    text = response.text.strip()
    if not text:
        return f"HTTP {response.status}"
    try:
        doc = json.loads(text)
    except ValueError:
        return text[:500]

    if isinstance(doc, dict):
        detail = doc.get("detail")
        if isinstance(detail, dict) and detail.get("message"):
            return str(detail["message"])
        if isinstance(detail, str) and detail:
            return detail
        error = doc.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
    return text[:500]


def check_status(response: RawResponse, service: str) -> None:
    """Map non-success HTTP statuses onto the error taxonomy."""
    status = response.status
    if status < 400:
        return

    detail = _error_detail(response)
    if status in (401, 403):
        raise ConfigurationError(f"{service}: invalid credential (HTTP {status}): {detail}")
    if status == 503:
        raise UnavailableError(f"{service}: model warming up, retry in a few seconds ({detail})")
    if status == 429 or status >= 500:
        raise UnavailableError(f"{service}: backend unavailable (HTTP {status}): {detail}")
    raise ProtocolError(f"{service}: request rejected (HTTP {status}): {detail}")


def classify(response: RawResponse) -> NormalizedResponse:
    """Tag a successful response by its content kind."""
    content_type = response.header("content-type").lower()

    if "audio" in content_type or "octet-stream" in content_type:
        return BinaryBody(data=response.body, content_type=content_type)

    text = response.text.strip()
    if "json" in content_type or text.startswith(("{", "[")):
        try:
            return JsonBody(document=json.loads(text))
        except ValueError as e:
            raise ProtocolError(f"Malformed JSON response: {text[:200]}") from e

    return TextBody(text=text)


def extract_media_url(document: Any) -> str:
    """Flat `audio_url` first, then nested `audio.url`."""
    if isinstance(document, dict):
        flat = document.get("audio_url")
        if isinstance(flat, str) and flat.strip():
            return flat.strip()

        nested = document.get("audio")
        if isinstance(nested, dict):
            url = nested.get("url")
            if isinstance(url, str) and url.strip():
                return url.strip()

    raise ProtocolError("Could not find audio URL in JSON response.")


def extract_transcript(body: NormalizedResponse) -> str:
    if isinstance(body, JsonBody):
        doc = body.document
        text = doc.get("text") if isinstance(doc, dict) else None
        if isinstance(text, str) and text.strip():
            return text.strip()
        raise ProtocolError("Empty transcription result.")

    if isinstance(body, TextBody):
        if body.text:
            return body.text
        raise ProtocolError("Empty transcription result.")

    raise ProtocolError(f"Expected a transcript, got binary content ({body.content_type}).")


def extract_chunks(body: NormalizedResponse) -> list[tuple[str, float, float]]:
    """Whisper `chunks` entries as (text, start, end); empty when absent."""
    if not isinstance(body, JsonBody) or not isinstance(body.document, dict):
        return []

    out = []
    for chunk in body.document.get("chunks") or []:
        if not isinstance(chunk, dict):
            continue
        text = str(chunk.get("text") or "").strip()
        stamp = chunk.get("timestamp")
        if not text or not isinstance(stamp, (list, tuple)) or len(stamp) != 2:
            logger.debug(f"Skipping malformed chunk: {chunk!r}")
            continue
        try:
            start = float(stamp[0] or 0.0)
            end = float(stamp[1]) if stamp[1] is not None else start
        except (TypeError, ValueError):
            logger.debug(f"Skipping chunk with non-numeric timestamp: {chunk!r}")
            continue
        out.append((text, start, end))
    return out


def extract_message_content(document: Any) -> str:
    """choices[0].message.content of a chat completion."""
    choices = document.get("choices") if isinstance(document, dict) else None
    if not choices:
        raise ProtocolError("No choices in response.")

    message = choices[0].get("message") if isinstance(choices[0], dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str) or not content.strip():
        raise ProtocolError("Empty response content.")
    return content.strip()


async def resolve_audio(
    body: NormalizedResponse,
    fetch: Fetch,
    base_url: Optional[str] = None,
    name: str = "",
) -> AudioClip:
    """
    Turn a classified response into a decoded clip.

    Binary bodies are decoded directly. JSON bodies must carry a media URL,
    which is fetched (second exchange) and decoded.
    """
    if isinstance(body, BinaryBody):
        logger.debug(f"Received direct audio bytes ({len(body.data)} bytes)")
        return decode_audio(body.data, name=name)

    if isinstance(body, JsonBody):
        url = extract_media_url(body.document)
        return await fetch_audio(url, fetch, base_url=base_url, name=name)

    raise ProtocolError(f"Expected audio or JSON with an audio URL, got text: {body.text[:200]}")


async def fetch_audio(
    url: str,
    fetch: Fetch,
    base_url: Optional[str] = None,
    name: str = "",
) -> AudioClip:
    if base_url and url.startswith("/"):
        url = base_url.rstrip("/") + url
    elif base_url:
        url = urljoin(base_url.rstrip("/") + "/", url)

    logger.debug(f"Fetching audio from {url}")
    response = await fetch(url)
    check_status(response, "audio download")
    return decode_audio(response.body, name=name)
