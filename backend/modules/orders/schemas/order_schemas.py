from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Optional
from datetime import datetime

from ..enums.order_enums import OrderStatus


class Order(BaseModel):
    """A table's submitted order as exposed on the wire."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str
    table_number: int = Field(..., alias="tableNumber")
    items: List[str]
    status: OrderStatus = OrderStatus.NEW
    created_at: datetime = Field(..., alias="createdAt")
    notes: Optional[str] = None
    total_price: float = Field(0.0, alias="totalPrice")

    def to_payload(self) -> dict:
        """JSON-ready dict with camelCase field names."""
        return self.model_dump(by_alias=True, mode="json")


class OrderCreateRequest(BaseModel):
    """
    Raw create-order body.

    Fields are untyped here; the order service coerces, trims and
    range-checks them.
    """

    model_config = ConfigDict(extra="ignore")

    tableNumber: Any = None
    items: Any = None
    notes: Any = None
    totalPrice: Any = None


class OrderStatusUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: Any = None


class OrderListOut(BaseModel):
    orders: List[Order]
