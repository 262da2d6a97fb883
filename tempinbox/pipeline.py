"""InboxPipeline — turns push notifications into a stream of fetched messages."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import httpx
import structlog

from .config import InboxConfig
from .errors import InboxError
from .fetcher import ContentFetcher
from .listener import NotificationListener
from .models import Message, PipelineState
from .session import bootstrap_session

logger = structlog.get_logger()

_CLOSED = object()


class InboxPipeline:
    """Orchestrates the receive → fetch → filter → deliver loop.

    Use :meth:`open` to bootstrap a session, connect the listener and start
    the background worker::

        async with await InboxPipeline.open("mail.example", "alice") as inbox:
            async for message in inbox:
                print(message.subject)

    Only the worker writes :attr:`err`.  :attr:`state` is written by the
    worker and by the caller-side :meth:`stop` and :meth:`close`, all on the
    event loop thread.  The first fatal error is sticky; a clean stop leaves
    it unset.  Delivery is
    a blocking handoff: the worker waits until the consumer has taken a
    message before it receives the next notification, so at most one fetch
    is in flight and messages arrive in notification order.
    """

    def __init__(
        self,
        listener: NotificationListener,
        fetcher: ContentFetcher,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._listener = listener
        self._fetcher = fetcher
        self._client = client

        self._state = PipelineState.INITIALIZING
        self._error: InboxError | None = None
        self._stream: asyncio.Queue[object] = asyncio.Queue(maxsize=1)
        self._stream_closed = False
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self._release_task: asyncio.Task[None] | None = None

    @classmethod
    async def open(
        cls,
        host: str,
        query: str,
        config: InboxConfig | None = None,
    ) -> InboxPipeline:
        """Bootstrap a session, connect the push listener and start the worker.

        Bootstrap and connect errors propagate; in that case no worker is
        started and the HTTP client is closed before returning.
        """
        config = config or InboxConfig()
        client = httpx.AsyncClient(timeout=httpx.Timeout(config.timeout_seconds))
        try:
            session = await bootstrap_session(client, host)
            listener = NotificationListener(host, query, session, config)
            await listener.connect()
        except BaseException:
            await client.aclose()
            raise

        fetcher = ContentFetcher(client, host, session, config)
        pipeline = cls(listener, fetcher, client=client)
        pipeline.start()
        return pipeline

    # ------------------------------------------------------------------
    # Public properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def err(self) -> InboxError | None:
        """The first fatal error, or ``None``."""
        return self._error

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Spawn the background worker.  Must be called from a running loop."""
        assert self._task is None, "Pipeline already started"
        self._state = PipelineState.RUNNING
        self._task = asyncio.create_task(self._run())
        self._task.add_done_callback(self._on_worker_done)

    def stop(self) -> None:
        """Request termination without waiting for it.

        Safe to call repeatedly and from signal handlers installed on the
        event loop.
        """
        if self._stop_event.is_set():
            return
        self._stop_event.set()
        if self._state == PipelineState.RUNNING:
            self._state = PipelineState.STOPPING
        if self._task is not None and not self._task.done():
            self._task.cancel()
        logger.info("pipeline_stop_requested")

    async def close(self) -> InboxError | None:
        """Stop the worker, release the connection and return the sticky error."""
        self.stop()
        if self._task is not None:
            await asyncio.wait({self._task})
        else:
            # Never started: no worker callback will close the stream.
            self._close_stream()
            self._state = PipelineState.STOPPED

        # Concurrent callers all wait for the same release.
        if self._release_task is None:
            self._release_task = asyncio.create_task(self._release())
        await asyncio.shield(self._release_task)
        return self._error

    async def _release(self) -> None:
        await self._listener.close()
        if self._client is not None:
            await self._client.aclose()

    async def __aenter__(self) -> InboxPipeline:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    async def next(self) -> Message | None:
        """Wait for the next delivered message; ``None`` once the stream is closed."""
        item = await self._stream.get()
        self._stream.task_done()
        if item is _CLOSED:
            # Keep the stream closed for every later reader.
            self._stream.put_nowait(_CLOSED)
            return None
        assert isinstance(item, Message)
        return item

    def __aiter__(self) -> AsyncIterator[Message]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[Message]:
        while (message := await self.next()) is not None:
            yield message

    async def get(self, url: str) -> httpx.Response:
        """Authenticated ad-hoc GET reusing the session cookie and user agent."""
        return await self._fetcher.get(url)

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------

    async def _run(self) -> None:
        logger.info("pipeline_started")
        try:
            while not self._stop_event.is_set():
                event = await self._listener.receive()
                if not event.actionable:
                    logger.debug("notification_skipped", reason="missing_id")
                    continue

                message = await self._fetcher.fetch(event.id)
                if not message.is_complete:
                    logger.debug("message_skipped", message_id=event.id, reason="no_parts")
                    continue

                await self._deliver(message)
        except InboxError as exc:
            self._fail(exc)
        except Exception as exc:
            logger.exception("pipeline_worker_error")
            error = InboxError(f"unexpected worker error: {exc!r}")
            error.__cause__ = exc
            self._fail(error)

    def _on_worker_done(self, task: asyncio.Task[None]) -> None:
        # Runs on every exit path, including cancellation before the first step.
        if self._state != PipelineState.FAILED:
            self._state = PipelineState.STOPPED
            logger.info("pipeline_stopped")
        self._close_stream()

    async def _deliver(self, message: Message) -> None:
        """Hand *message* to the consumer and wait until it has been taken."""
        await self._stream.put(message)
        await self._stream.join()
        logger.debug("message_delivered", message_id=message.id)

    def _fail(self, exc: InboxError) -> None:
        if self._error is None:
            self._error = exc
        self._state = PipelineState.FAILED
        logger.error("pipeline_failed", error=str(exc), error_type=type(exc).__name__)

    def _close_stream(self) -> None:
        if self._stream_closed:
            return
        self._stream_closed = True
        # A message still waiting for a consumer is dropped.
        while not self._stream.empty():
            self._stream.get_nowait()
            self._stream.task_done()
        self._stream.put_nowait(_CLOSED)
