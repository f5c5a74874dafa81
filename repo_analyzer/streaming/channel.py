"""Ordered, one-shot event channel between a pipeline and its single consumer.

The producer runs as its own task and pushes typed events; the consumer pulls
until the channel closes. A terminal event (done, complete or error) closes
the channel immediately, so exactly one terminal event is ever delivered.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional

from repo_analyzer.models import SelectionResult, StreamEvent

logger = logging.getLogger(__name__)


class EventChannel:
    def __init__(self) -> None:
        self._queue: asyncio.Queue[Optional[StreamEvent]] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def emit(self, event_type: str, data: Optional[Dict[str, Any]] = None) -> bool:
        """Queue an event; returns False once the channel is closed."""
        if self._closed:
            return False
        event = StreamEvent(event_type, data or {})
        self._queue.put_nowait(event)
        if event.is_terminal:
            self.close()
        return True

    def status(self, message: str, progress: int) -> bool:
        return self.emit("status", {"message": message, "progress": max(0, min(100, int(progress)))})

    def files(self, selection: SelectionResult) -> bool:
        return self.emit("files", selection.to_serializable())

    def chunk(self, content: str) -> bool:
        return self.emit("chunk", {"content": content})

    def done(self, payload: Optional[Dict[str, Any]] = None) -> bool:
        return self.emit("done", payload)

    def complete(self, payload: Dict[str, Any]) -> bool:
        return self.emit("complete", payload)

    def error(self, message: str) -> bool:
        return self.emit("error", {"message": message})

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(None)

    async def events(self) -> AsyncIterator[StreamEvent]:
        while True:
            event = await self._queue.get()
            if event is None:
                return
            yield event


Producer = Callable[[EventChannel], Awaitable[None]]


async def _drive(producer: Producer, channel: EventChannel, timeout: Optional[float]) -> None:
    deadline = asyncio.timeout(timeout)
    try:
        async with deadline:
            await producer(channel)
    except TimeoutError as e:
        if deadline.expired():
            logger.warning("⏱️  Pipeline exceeded %ss", timeout)
            channel.error(f"Request timed out after {timeout:g} seconds")
        else:
            logger.exception("❌ Pipeline failed: %s", e)
            channel.error(str(e) or "Upstream operation timed out")
    except asyncio.CancelledError:
        logger.info("👋 Consumer disconnected; pipeline stopped")
        channel.close()
        raise
    except Exception as e:
        logger.exception("❌ Pipeline failed: %s", e)
        channel.error(str(e) or "Unexpected error")
    finally:
        if not channel.closed:
            channel.error("Pipeline ended without a result")


async def stream_events(producer: Producer, timeout: Optional[float] = 60.0) -> AsyncIterator[StreamEvent]:
    """Run ``producer`` in a task and yield its events until the terminal one.

    Closing this generator early (consumer gone) cancels the producer task.
    """
    channel = EventChannel()
    task = asyncio.create_task(_drive(producer, channel, timeout))
    try:
        async for event in channel.events():
            yield event
    finally:
        if not task.done():
            task.cancel()
            # Wait for producer cleanup without re-raising its cancellation.
            await asyncio.wait({task})


def format_sse(event: StreamEvent) -> str:
    """Encode one event as a server-sent-events frame."""
    return f"data: {json.dumps(event.to_serializable())}\n\n"
