"""SSE (Server-Sent Events) framing for stream events.

Payload format: ``data: {"type": ..., "data": {...}}\\n\\n``
"""

from __future__ import annotations

import json

from .schemas import StreamEvent

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def sse_event(event: StreamEvent) -> str:
    """Frame one event."""
    return "data: " + json.dumps(event.model_dump(), ensure_ascii=False) + "\n\n"


def sse_error(message: str) -> str:
    """Frame a standalone error event."""
    return sse_event(StreamEvent.error(message))
