# backend/modules/orders/services/order_store.py

"""
Canonical order storage.

The store is the only component that writes order state. Two backends
share the same interface: an in-process store used by default and a
SQLAlchemy-backed store for deployments that need the orders to survive
a restart.
"""

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.config import Settings
from core.exceptions import NotFoundError, StorageError, ValidationError
from ..enums.order_enums import ALLOWED_TRANSITIONS, OrderStatus, parse_order_status
from ..models.order_models import OrderRecord
from ..schemas.order_schemas import Order

logger = logging.getLogger(__name__)

# largest value an SQL INTEGER column holds
MAX_TABLE_NUMBER = 2 ** 63 - 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_new_order(
    table_number, items: Sequence[str], total_price
) -> List[str]:
    """Check creation invariants and return the cleaned item list."""
    if (
        isinstance(table_number, bool)
        or not isinstance(table_number, int)
        or not 0 < table_number <= MAX_TABLE_NUMBER
    ):
        raise ValidationError("Invalid tableNumber")

    cleaned = [item.strip() for item in items or [] if item and item.strip()]
    if not cleaned:
        raise ValidationError("Order must include at least one item")

    if (
        isinstance(total_price, bool)
        or not isinstance(total_price, (int, float, Decimal))
        or total_price < 0
    ):
        raise ValidationError("Invalid totalPrice")

    return cleaned


def validate_status(status) -> OrderStatus:
    try:
        return parse_order_status(status)
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(f"Invalid status '{status}'. Allowed: {allowed}")


def check_transition(current: OrderStatus, new_status: OrderStatus):
    if new_status not in ALLOWED_TRANSITIONS[current]:
        raise ValidationError(
            f"Cannot change status from {current.value} to {new_status.value}"
        )


class OrderStore(ABC):
    """Interface shared by every order storage backend."""

    @abstractmethod
    def create(
        self,
        table_number: int,
        items: Sequence[str],
        notes: Optional[str] = None,
        total_price: float = 0.0,
    ) -> Order:
        ...

    @abstractmethod
    def get(self, order_id: str) -> Optional[Order]:
        ...

    @abstractmethod
    def list(self) -> List[Order]:
        """Return all orders, most recent first."""

    @abstractmethod
    def set_status(self, order_id: str, status) -> Order:
        ...


class InMemoryOrderStore(OrderStore):
    """Process-local store with sequential string ids."""

    def __init__(self):
        self._orders: Dict[str, Order] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def create(self, table_number, items, notes=None, total_price=0.0) -> Order:
        cleaned_items = validate_new_order(table_number, items, total_price)
        with self._lock:
            order = Order(
                id=str(next(self._ids)),
                table_number=table_number,
                items=cleaned_items,
                notes=notes,
                total_price=round(float(total_price), 2),
                status=OrderStatus.NEW,
                created_at=_utcnow(),
            )
            self._orders[order.id] = order
        return order

    def get(self, order_id: str) -> Optional[Order]:
        return self._orders.get(str(order_id))

    def list(self) -> List[Order]:
        with self._lock:
            # dicts keep insertion order, which is creation order
            return list(reversed(self._orders.values()))

    def set_status(self, order_id: str, status) -> Order:
        new_status = validate_status(status)
        with self._lock:
            current = self._orders.get(str(order_id))
            if current is None:
                raise NotFoundError("Order not found")
            check_transition(current.status, new_status)
            updated = current.model_copy(update={"status": new_status})
            self._orders[updated.id] = updated
        return updated

    def __len__(self) -> int:
        return len(self._orders)


class SqlOrderStore(OrderStore):
    """Order store persisted through SQLAlchemy."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    @staticmethod
    def _to_order(record: OrderRecord) -> Order:
        created_at = record.created_at
        if created_at.tzinfo is None:
            # SQLite drops the offset; values are always written in UTC
            created_at = created_at.replace(tzinfo=timezone.utc)
        return Order(
            id=str(record.id),
            table_number=record.table_number,
            items=list(record.items),
            notes=record.notes,
            total_price=float(record.total_price or 0),
            status=OrderStatus(record.status),
            created_at=created_at,
        )

    @staticmethod
    def _parse_id(order_id) -> Optional[int]:
        try:
            return int(str(order_id))
        except ValueError:
            return None

    def create(self, table_number, items, notes=None, total_price=0.0) -> Order:
        cleaned_items = validate_new_order(table_number, items, total_price)
        record = OrderRecord(
            table_number=table_number,
            items=cleaned_items,
            notes=notes,
            total_price=Decimal(str(total_price)),
            status=OrderStatus.NEW.value,
            created_at=_utcnow(),
        )
        with self._session_factory() as session:
            try:
                session.add(record)
                session.commit()
                session.refresh(record)
                return self._to_order(record)
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Failed to create order: {str(e)}")
                raise StorageError("Failed to create order")

    def get(self, order_id: str) -> Optional[Order]:
        pk = self._parse_id(order_id)
        if pk is None:
            return None
        with self._session_factory() as session:
            try:
                record = session.get(OrderRecord, pk)
            except SQLAlchemyError as e:
                logger.error(f"Failed to load order {order_id}: {str(e)}")
                raise StorageError("Failed to load order")
            return self._to_order(record) if record else None

    def list(self) -> List[Order]:
        with self._session_factory() as session:
            try:
                records = (
                    session.query(OrderRecord)
                    .order_by(OrderRecord.created_at.desc(), OrderRecord.id.desc())
                    .all()
                )
            except SQLAlchemyError as e:
                logger.error(f"Failed to list orders: {str(e)}")
                raise StorageError("Failed to list orders")
            return [self._to_order(record) for record in records]

    def set_status(self, order_id: str, status) -> Order:
        new_status = validate_status(status)
        pk = self._parse_id(order_id)
        if pk is None:
            raise NotFoundError("Order not found")
        with self._session_factory() as session:
            try:
                record = session.get(OrderRecord, pk)
                if record is None:
                    raise NotFoundError("Order not found")
                check_transition(OrderStatus(record.status), new_status)
                record.status = new_status.value
                session.commit()
                session.refresh(record)
                return self._to_order(record)
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Failed to update order {order_id}: {str(e)}")
                raise StorageError("Failed to update order status")


def build_order_store(settings: Settings) -> OrderStore:
    """Create the store backend selected by ``ORDER_STORE_BACKEND``."""
    if settings.uses_sql_store:
        from core.database import SessionLocal

        logger.info("Using SQL order store")
        return SqlOrderStore(SessionLocal)

    logger.info("Using in-memory order store")
    return InMemoryOrderStore()
