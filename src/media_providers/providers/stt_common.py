from __future__ import annotations

from typing import Optional

from media_providers.core.audio import AudioClip
from media_providers.core.interfaces import TranscriptionResult, WordSegment
from media_providers.core.scoring import confidence, similarity


def build_result(
    text: str,
    audio: AudioClip,
    expected_text: Optional[str],
    language: Optional[str],
    words: Optional[list[WordSegment]] = None,
) -> TranscriptionResult:
    score = confidence(text, expected_text, audio.duration)
    result = TranscriptionResult(
        text=text,
        confidence=score,
        duration=audio.duration,
        language=language,
        words=list(words or []),
    )

    # No segment scores higher than the overall confidence.
    for segment in result.words:
        segment.confidence = min(segment.confidence, score)

    if expected_text:
        result.metadata["expected_text"] = expected_text
        result.metadata["accuracy"] = similarity(text, expected_text)

    return result
