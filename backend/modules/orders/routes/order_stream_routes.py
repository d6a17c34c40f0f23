import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from core.deps import get_order_broadcaster
from ..services.order_event_broadcaster import OrderEventBroadcaster
from ..utils.sse import SSE_HEADERS, encode_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Order Stream"])


async def order_event_stream(
    request: Request, broadcaster: OrderEventBroadcaster
) -> AsyncIterator[str]:
    """
    Yield SSE frames for one viewer until it disconnects.

    The subscription is removed in ``finally`` whether the client goes
    away, the generator is cancelled by the server, or the broadcaster
    drops the subscription.
    """
    subscription = broadcaster.subscribe()
    try:
        async for event in subscription:
            if await request.is_disconnected():
                logger.debug(f"Viewer {subscription.handle} disconnected")
                break
            yield encode_event(event)
    finally:
        broadcaster.unsubscribe(subscription.handle)


@router.get("/stream")
async def stream_order_events(
    request: Request,
    broadcaster: OrderEventBroadcaster = Depends(get_order_broadcaster)
):
    """
    Long-lived Server-Sent Events stream of order changes.

    The first frame is a `connected` event with `{"ok": true}`; after that
    `order_created` and `order_updated` events carry the full order, and a
    `: heartbeat` comment is sent periodically.
    """
    return StreamingResponse(
        order_event_stream(request, broadcaster),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
