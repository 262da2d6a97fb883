"""Entry point: watch an inbox and print each message as a JSON line.

Usage::

    python -m tempinbox <host> <query>
"""

from __future__ import annotations

import asyncio
import sys

import structlog

from .config import InboxConfig
from .errors import InboxError
from .logging import setup_logging
from .pipeline import InboxPipeline
from .shutdown import install_signal_handlers

logger = structlog.get_logger()


async def watch(host: str, query: str, config: InboxConfig) -> InboxError | None:
    """Print delivered messages until the stream closes; return the sticky error."""
    pipeline = await InboxPipeline.open(host, query, config)
    install_signal_handlers(pipeline.stop)
    try:
        async for message in pipeline:
            print(message.model_dump_json(by_alias=True), flush=True)
    finally:
        error = await pipeline.close()
    return error


def main() -> None:
    if len(sys.argv) != 3:
        print("Usage: python -m tempinbox <host> <query>", file=sys.stderr)
        sys.exit(1)

    host, query = sys.argv[1], sys.argv[2]
    config = InboxConfig()
    setup_logging(json=config.log_json, level=config.log_level)

    try:
        error = asyncio.run(watch(host, query, config))
    except InboxError as exc:
        logger.error("inbox_open_failed", host=host, error=str(exc))
        sys.exit(1)

    if error is not None:
        sys.exit(1)


if __name__ == "__main__":
    main()
