import logging
import math
from typing import Any, List, Mapping, Optional

from core.exceptions import NotFoundError, ValidationError
from ..enums.order_enums import OrderEventType
from ..schemas.order_schemas import Order
from .order_event_broadcaster import OrderEventBroadcaster
from .order_store import OrderStore, validate_status

logger = logging.getLogger(__name__)


def coerce_number(value: Any) -> Optional[float]:
    """Parse an int, float or numeric string. Returns None when not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                return None
    else:
        return None

    if isinstance(number, float) and not math.isfinite(number):
        return None
    return number


def normalize_table_number(value: Any) -> int:
    number = coerce_number(value)
    if number is None or (isinstance(number, float) and not number.is_integer()):
        raise ValidationError("Invalid tableNumber")
    number = int(number)
    if number <= 0:
        raise ValidationError("Invalid tableNumber")
    return number


def normalize_items(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    items = []
    for item in value:
        if item is None or isinstance(item, (dict, list)):
            continue
        text = str(item).strip()
        if text:
            items.append(text)
    return items


def normalize_notes(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_total_price(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    number = coerce_number(value)
    if number is None or number < 0:
        raise ValidationError("Invalid totalPrice")
    return round(float(number), 2)


class OrderService:
    """
    Entry point for order mutations.

    Every successful mutation is committed to the store first and then
    published, so a viewer reacting to an event always finds the store
    at least as new as the event payload.
    """

    def __init__(self, store: OrderStore, broadcaster: OrderEventBroadcaster):
        self.store = store
        self.broadcaster = broadcaster

    def list_orders(self) -> List[Order]:
        return self.store.list()

    def get_order(self, order_id: str) -> Order:
        order = self.store.get(order_id)
        if order is None:
            raise NotFoundError("Order not found")
        return order

    def place_order(self, data: Mapping[str, Any]) -> Order:
        table_number = normalize_table_number(data.get("tableNumber"))
        items = normalize_items(data.get("items"))
        if not items:
            raise ValidationError("Order must include at least one item")
        notes = normalize_notes(data.get("notes"))
        total_price = normalize_total_price(data.get("totalPrice"))

        order = self.store.create(
            table_number=table_number,
            items=items,
            notes=notes,
            total_price=total_price,
        )
        logger.info(
            f"Order {order.id} created for table {order.table_number} "
            f"with {len(order.items)} item(s)"
        )

        self.broadcaster.publish(OrderEventType.ORDER_CREATED.value, order.to_payload())
        return order

    def change_status(self, order_id: str, status: Any) -> Order:
        text = str(status).strip() if status is not None else ""
        if not text:
            raise ValidationError("Missing status")
        new_status = validate_status(text)

        order = self.store.set_status(order_id, new_status)
        logger.info(f"Order {order.id} status changed to {order.status.value}")

        self.broadcaster.publish(OrderEventType.ORDER_UPDATED.value, order.to_payload())
        return order
