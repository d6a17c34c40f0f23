# backend/core/deps.py

"""
Common dependencies for the application
"""

from functools import lru_cache

from fastapi import Depends

from .config import get_settings
from modules.orders.services.order_event_broadcaster import (
    OrderEventBroadcaster,
    order_event_broadcaster,
)
from modules.orders.services.order_service import OrderService
from modules.orders.services.order_store import OrderStore, build_order_store


@lru_cache()
def get_order_store() -> OrderStore:
    """Process-wide order store, built once from settings."""
    return build_order_store(get_settings())


def get_order_broadcaster() -> OrderEventBroadcaster:
    return order_event_broadcaster


def get_order_service(
    store: OrderStore = Depends(get_order_store),
    broadcaster: OrderEventBroadcaster = Depends(get_order_broadcaster),
) -> OrderService:
    return OrderService(store, broadcaster)
