from __future__ import annotations

from typing import Optional

SHORT_TRANSCRIPT_CHARS = 3
SHORT_AUDIO_S = 0.5


def levenshtein(a: str, b: str) -> int:
    """Edit distance between two strings (insert/delete/substitute = 1)."""
    if len(a) < len(b):
        a, b = b, a

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + cost,
                )
            )
        previous = current
    return previous[-1]


def similarity(a: Optional[str], b: Optional[str]) -> float:
    """
    Case-insensitive text similarity in [0, 1] based on Levenshtein distance.

    Empty or missing input on either side scores 0.0, including two empty
    strings.
    """
    if not a or not b:
        return 0.0

    a = a.lower().strip()
    b = b.lower().strip()
    if not a or not b:
        return 0.0

    if a == b:
        return 1.0

    distance = levenshtein(a, b)
    return 1.0 - distance / max(len(a), len(b))


def confidence(
    transcript: str,
    expected: Optional[str] = None,
    audio_duration: float = 0.0,
) -> float:
    """
    Heuristic transcription confidence.

    Short transcripts and very short recordings are penalized; when the
    expected text is known the score is scaled by its similarity to the
    transcript.
    """
    score = 1.0

    if len(transcript or "") < SHORT_TRANSCRIPT_CHARS:
        score *= 0.5

    if audio_duration < SHORT_AUDIO_S:
        score *= 0.7

    if expected:
        score *= similarity(transcript, expected)

    return min(1.0, max(0.0, score))
