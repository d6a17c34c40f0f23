# backend/modules/orders/services/order_event_broadcaster.py

"""
Fan-out of order events to live viewer subscriptions.

Each subscription owns a bounded queue of pending frames and a keep-alive
task. Publishing never awaits: a frame is offered to every queue with a
single ``put_nowait`` and subscriptions that cannot take it are dropped
once the pass is over.
"""

import asyncio
import itertools
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from core.config import get_settings
from ..enums.order_enums import OrderEventType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreamEvent:
    """A frame queued for one subscriber. Keep-alives carry no event or data."""

    event: Optional[str] = None
    data: Optional[str] = None

    @property
    def is_keepalive(self) -> bool:
        return self.event is None


KEEPALIVE = StreamEvent()


class Subscription:
    """Registry record for one open viewer connection"""

    def __init__(self, handle: int, max_queue_size: int):
        self.handle = handle
        self.active = True
        self.keepalive_task: Optional[asyncio.Task] = None
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)

    def offer(self, event: StreamEvent) -> bool:
        """Try to queue ``event`` without waiting. False means the write failed."""
        if not self.active:
            return False
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            return False
        return True

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def close(self):
        """Deactivate, stop the keep-alive and wake the consumer."""
        if not self.active:
            return
        self.active = False
        self._cancel_keepalive()

        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(None)

    def _cancel_keepalive(self):
        task, self.keepalive_task = self.keepalive_task, None
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        # a keep-alive that removes its own subscription just returns
        if task is not current:
            task.cancel()

    def __aiter__(self):
        return self

    async def __anext__(self) -> StreamEvent:
        if not self.active and self._queue.empty():
            raise StopAsyncIteration
        event = await self._queue.get()
        if event is None:
            raise StopAsyncIteration
        return event


class OrderEventBroadcaster:
    """Manages viewer subscriptions and broadcasts named events to them"""

    def __init__(self, keepalive_interval: float = 25.0, max_queue_size: int = 100):
        self.keepalive_interval = keepalive_interval
        self.max_queue_size = max_queue_size
        self._subscriptions: Dict[int, Subscription] = {}
        self._handles = itertools.count(1)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def is_subscribed(self, handle: int) -> bool:
        return handle in self._subscriptions

    def subscribe(self) -> Subscription:
        """
        Register a new viewer and return its subscription.

        Must be called from the running event loop. The ``connected``
        acknowledgement is queued before the subscription becomes visible
        to ``publish``, so it is always the first frame.
        """
        subscription = Subscription(next(self._handles), self.max_queue_size)
        subscription.offer(
            StreamEvent(
                event=OrderEventType.CONNECTED.value,
                data=json.dumps({"ok": True}),
            )
        )
        self._subscriptions[subscription.handle] = subscription
        subscription.keepalive_task = asyncio.create_task(
            self._keepalive(subscription)
        )

        logger.info(
            f"Viewer {subscription.handle} subscribed. "
            f"Active subscribers: {self.subscriber_count}"
        )
        return subscription

    def unsubscribe(self, handle: int):
        """Remove a subscription. Unknown or already removed handles are ignored."""
        subscription = self._subscriptions.pop(handle, None)
        if subscription is None:
            return

        subscription.close()
        logger.info(
            f"Viewer {handle} unsubscribed. "
            f"Active subscribers: {self.subscriber_count}"
        )

    def publish(self, event_name: str, payload: Any) -> int:
        """
        Send an event to every active subscription.

        Returns the number of subscriptions that accepted the frame.
        Delivery failures are logged and the failing subscriptions removed;
        nothing is raised to the caller.
        """
        if not self._subscriptions:
            return 0

        try:
            data = json.dumps(payload, default=str)
        except (TypeError, ValueError) as e:
            logger.error(f"Could not serialize {event_name} payload: {str(e)}")
            return 0

        event = StreamEvent(event=event_name, data=data)
        delivered = 0
        dead_handles: List[int] = []

        for handle, subscription in list(self._subscriptions.items()):
            if subscription.offer(event):
                delivered += 1
            else:
                dead_handles.append(handle)

        for handle in dead_handles:
            logger.warning(f"Dropping viewer {handle}: could not deliver {event_name}")
            self.unsubscribe(handle)

        return delivered

    async def _keepalive(self, subscription: Subscription):
        while True:
            await asyncio.sleep(self.keepalive_interval)
            if not subscription.active:
                return
            if not subscription.offer(KEEPALIVE):
                logger.warning(
                    f"Dropping viewer {subscription.handle}: keep-alive not accepted"
                )
                self.unsubscribe(subscription.handle)
                return

    def close_all(self):
        """Remove every subscription (used on shutdown)"""
        for handle in list(self._subscriptions):
            self.unsubscribe(handle)
        logger.info("All order event subscriptions closed")


def _build_default_broadcaster() -> OrderEventBroadcaster:
    settings = get_settings()
    return OrderEventBroadcaster(
        keepalive_interval=settings.sse_keepalive_seconds,
        max_queue_size=settings.sse_queue_size,
    )


# Global instance
order_event_broadcaster = _build_default_broadcaster()
