from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from media_providers.core.audio import encode_wav
from media_providers.core.factory import get_tts_provider


async def run(provider: str) -> None:
    tts = get_tts_provider(provider)
    try:
        clip = await tts.synthesize("Hello! This is a quick text-to-speech smoke test.")
        again = await tts.synthesize("Hello! This is a quick text-to-speech smoke test.")
        # Closing releases cached clips, so encode first.
        out = Path(f"tmp_tts_{provider or 'default'}.wav")
        out.write_bytes(encode_wav(clip))
        print(f"Wrote {out} ({clip.duration:.2f}s). Second call cached: {again is clip}")
    finally:
        await tts.aclose()


def main() -> None:
    load_dotenv()  # loads .env from repo root (current working dir)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    provider = sys.argv[1] if len(sys.argv) > 1 else ""
    asyncio.run(run(provider))


if __name__ == "__main__":
    main()
