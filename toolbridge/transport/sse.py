"""
Server-Sent Events parsing for the HTTP transport.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass


@dataclass
class SseEvent:
    """One dispatched event of a ``text/event-stream`` body"""

    event: str = "message"
    data: str = ""
    id: str = ""


async def _iter_lines(chunks: AsyncIterator[bytes]) -> AsyncIterator[str]:
    buffer = b""
    async for chunk in chunks:
        buffer += chunk
        while b"\n" in buffer:
            line, buffer = buffer.split(b"\n", 1)
            yield line.rstrip(b"\r").decode("utf-8", errors="replace")
    if buffer:
        yield buffer.rstrip(b"\r").decode("utf-8", errors="replace")


async def iter_sse_events(chunks: AsyncIterator[bytes]) -> AsyncIterator[SseEvent]:
    """
    Parse a byte stream into events.

    Chunks may split lines anywhere. Comment lines are skipped, multi-line
    ``data`` fields are joined with newlines, and an event still open when
    the stream ends is dispatched.
    """
    event = ""
    data: list[str] = []
    event_id = ""

    async for line in _iter_lines(chunks):
        if not line:
            if data:
                yield SseEvent(event=event or "message", data="\n".join(data), id=event_id)
            event, data = "", []
            continue
        if line.startswith(":"):
            continue

        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if name == "event":
            event = value
        elif name == "data":
            data.append(value)
        elif name == "id":
            event_id = value

    if data:
        yield SseEvent(event=event or "message", data="\n".join(data), id=event_id)
