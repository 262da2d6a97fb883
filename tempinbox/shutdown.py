"""Stop a running pipeline on SIGTERM / SIGINT."""

from __future__ import annotations

import asyncio
import signal
from collections.abc import Callable

import structlog

logger = structlog.get_logger()


def install_signal_handlers(stop: Callable[[], None]) -> None:
    """Register SIGTERM and SIGINT handlers that call *stop*.

    Call this once from the running event loop.  *stop* must be
    synchronous and safe to call more than once, such as
    :meth:`InboxPipeline.stop`.
    """
    loop = asyncio.get_running_loop()

    def _handle(sig: signal.Signals) -> None:
        logger.info("shutdown_signal_received", signal=sig.name)
        stop()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _handle, sig)
