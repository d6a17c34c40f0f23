# backend/modules/orders/utils/sse.py

"""
Server-Sent Events framing for order stream frames.
"""

from ..services.order_event_broadcaster import StreamEvent

KEEPALIVE_FRAME = ": heartbeat\n\n"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def encode_event(event: StreamEvent) -> str:
    """
    Render a frame as SSE text.

    Keep-alives become a comment line, which EventSource clients ignore.
    Multi-line data is split over several ``data:`` lines.
    """
    if event.is_keepalive:
        return KEEPALIVE_FRAME

    lines = [f"event: {event.event}"]
    for line in (event.data or "").split("\n"):
        lines.append(f"data: {line}")
    return "\n".join(lines) + "\n\n"
