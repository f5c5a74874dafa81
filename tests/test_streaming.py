import asyncio
import json

import pytest

from repo_analyzer.models import SelectionResult, StreamEvent
from repo_analyzer.streaming import EventChannel, format_sse, stream_events


async def _collect(producer, timeout=1.0):
    return [event async for event in stream_events(producer, timeout=timeout)]


@pytest.mark.asyncio
async def test_events_arrive_in_order_and_stop_at_terminal():
    accepted = []

    async def producer(channel: EventChannel):
        channel.status("Analyzing query...", 10)
        channel.files(SelectionResult(["a.py"], "because", "model"))
        channel.chunk("hi")
        channel.done()
        accepted.append(channel.chunk("late"))

    events = await _collect(producer)

    assert [e.type for e in events] == ["status", "files", "chunk", "done"]
    assert events[1].data == {"files": ["a.py"], "reason": "because", "tier": "model", "count": 1}
    assert accepted == [False]


@pytest.mark.asyncio
async def test_progress_is_clamped():
    async def producer(channel: EventChannel):
        channel.status("over", 250)
        channel.status("under", -5)
        channel.complete({})

    events = await _collect(producer)

    assert [e.data["progress"] for e in events[:2]] == [100, 0]


@pytest.mark.asyncio
async def test_producer_exception_becomes_error_event():
    async def producer(channel: EventChannel):
        channel.status("Working...", 10)
        raise RuntimeError("tree listing exploded")

    events = await _collect(producer)

    assert events[-1] == StreamEvent("error", {"message": "tree listing exploded"})
    assert sum(e.is_terminal for e in events) == 1


@pytest.mark.asyncio
async def test_timeout_becomes_error_event():
    async def producer(channel: EventChannel):
        await asyncio.sleep(5)

    events = await _collect(producer, timeout=0.05)

    assert events == [StreamEvent("error", {"message": "Request timed out after 0.05 seconds"})]


@pytest.mark.asyncio
async def test_producer_without_terminal_event_still_closes():
    async def producer(channel: EventChannel):
        channel.status("Working...", 10)

    events = await _collect(producer)

    assert [e.type for e in events] == ["status", "error"]
    assert events[-1].data["message"] == "Pipeline ended without a result"


@pytest.mark.asyncio
async def test_closing_the_consumer_cancels_the_producer():
    cancelled = asyncio.Event()

    async def producer(channel: EventChannel):
        channel.status("Working...", 10)
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.set()
            raise

    events = stream_events(producer, timeout=None)
    first = await events.__anext__()
    await events.aclose()

    assert first.type == "status"
    await asyncio.wait_for(cancelled.wait(), timeout=1)


@pytest.mark.asyncio
async def test_producer_cleanup_finishes_before_aclose_returns():
    cleaned = []

    async def producer(channel: EventChannel):
        channel.status("Working...", 10)
        try:
            await asyncio.sleep(10)
        finally:
            await asyncio.sleep(0)
            cleaned.append(True)

    events = stream_events(producer, timeout=None)
    await events.__anext__()
    await events.aclose()

    assert cleaned == [True]


@pytest.mark.asyncio
async def test_upstream_timeout_is_not_reported_as_the_pipeline_deadline():
    async def producer(channel: EventChannel):
        raise TimeoutError("upstream read timed out")

    events = await _collect(producer, timeout=5)

    assert events == [StreamEvent("error", {"message": "upstream read timed out"})]


def test_format_sse_frame():
    frame = format_sse(StreamEvent("chunk", {"content": "hi"}))

    assert frame.startswith("data: ")
    assert frame.endswith("\n\n")
    assert json.loads(frame[len("data: "):]) == {"type": "chunk", "data": {"content": "hi"}}
