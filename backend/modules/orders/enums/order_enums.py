from enum import Enum


class OrderStatus(str, Enum):
    NEW = "new"
    PREPARING = "preparing"
    READY = "ready"


class OrderEventType(str, Enum):
    CONNECTED = "connected"
    ORDER_CREATED = "order_created"
    ORDER_UPDATED = "order_updated"


# Kitchen workflow allows moving an order back (e.g. ready -> preparing),
# so every status may follow every other one.
ALLOWED_TRANSITIONS = {
    OrderStatus.NEW: {OrderStatus.NEW, OrderStatus.PREPARING, OrderStatus.READY},
    OrderStatus.PREPARING: {OrderStatus.NEW, OrderStatus.PREPARING, OrderStatus.READY},
    OrderStatus.READY: {OrderStatus.NEW, OrderStatus.PREPARING, OrderStatus.READY},
}


def parse_order_status(value) -> OrderStatus:
    """Return the OrderStatus for ``value`` or raise ValueError."""
    if isinstance(value, OrderStatus):
        return value
    return OrderStatus(value)
