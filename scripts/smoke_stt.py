from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from media_providers.core.audio import decode_audio
from media_providers.core.factory import get_stt_provider


async def run(path: Path, expected: str | None) -> None:
    clip = decode_audio(path.read_bytes(), name=path.name)
    stt = get_stt_provider()
    try:
        result = await stt.transcribe_with_confidence(clip, expected_text=expected)
    finally:
        await stt.aclose()

    print("Transcript:", result.text)
    print(f"Confidence: {result.confidence:.2f}")
    if result.metadata:
        print("Metadata:", result.metadata)


def main() -> None:
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if len(sys.argv) < 2:
        print("usage: smoke_stt.py AUDIO_FILE [EXPECTED_TEXT]")
        raise SystemExit(2)

    expected = sys.argv[2] if len(sys.argv) > 2 else None
    asyncio.run(run(Path(sys.argv[1]), expected))


if __name__ == "__main__":
    main()
