from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from media_providers.core.factory import get_vision_provider


async def run(path: Path) -> None:
    vision = get_vision_provider()
    try:
        reply = await vision.generate(
            "Name the main object in this picture with one noun.",
            path.read_bytes(),
            system_prompt="You are a concise vision assistant.",
        )
    finally:
        await vision.aclose()

    print(f"[{vision.model_name()}]", reply)


def main() -> None:
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if len(sys.argv) < 2:
        print("usage: smoke_vision.py IMAGE_FILE")
        raise SystemExit(2)

    asyncio.run(run(Path(sys.argv[1])))


if __name__ == "__main__":
    main()
