"""
Console driver for Shop Sahai Voice

Each typed line is handled as one decoded transcript; the assistant's
reply is printed instead of spoken.

    python -m app.console            # English
    python -m app.console malayalam  # Malayalam

Commands: ":en" / ":ml" switch language, ":quit" exits.
"""

import asyncio
import sys

from shopsahai.models.command import Locale
from shopsahai.orchestrator import create_app_components


async def run(language: str) -> None:
    controller, _ = create_app_components(locale=Locale.from_language(language))
    controller.begin_listening()

    loop = asyncio.get_running_loop()
    while True:
        line = await loop.run_in_executor(None, sys.stdin.readline)
        if not line:
            break
        line = line.strip()
        if not line:
            continue
        if line == ":quit":
            break
        if line in (":en", ":ml"):
            controller.set_locale(Locale.from_language(line[1:]))
            continue
        await controller.handle(line)

    controller.close()


def main() -> None:
    language = sys.argv[1] if len(sys.argv) > 1 else "english"
    asyncio.run(run(language))


if __name__ == "__main__":
    main()
