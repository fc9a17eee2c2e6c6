from __future__ import annotations

import asyncio
import base64
import logging
import mimetypes
import sys

from dotenv import load_dotenv

from api.config import Settings
from pipeline.graph import pipeline

logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def to_data_url(path: str) -> str:
    mime = mimetypes.guess_type(path)[0] or "image/jpeg"
    with open(path, "rb") as f:
        payload = base64.b64encode(f.read()).decode("ascii")
    return f"data:{mime};base64,{payload}"


async def run(image_path: str) -> None:
    load_dotenv()
    settings = Settings.from_env()

    initial_state = {
        "image": to_data_url(image_path),
        "raw_response": None,
        "result": None,
        "status_code": None,
        "body": None,
        "error": None,
    }

    # Stream: see each node's state delta live
    async for step in pipeline.astream(
        initial_state, config={"configurable": {"settings": settings}}
    ):
        node = list(step.keys())[0]
        print("\n" + "=" * 40)
        print(f"NODE: {node}")
        print(f"DELTA: {step[node]}")


def main() -> None:
    """
    Run a sample debug pass through the pipeline.

    Usage: python debug_run.py [image_path]  (defaults to `test.jpg`)
    """
    asyncio.run(run(sys.argv[1] if len(sys.argv) > 1 else "test.jpg"))


if __name__ == "__main__":
    main()
