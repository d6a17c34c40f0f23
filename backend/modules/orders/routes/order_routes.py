from fastapi import APIRouter, Depends, status

from core.deps import get_order_service
from ..schemas.order_schemas import (
    Order, OrderCreateRequest, OrderListOut, OrderStatusUpdateRequest
)
from ..services.order_service import OrderService

router = APIRouter(prefix="/api/orders", tags=["Orders"])


@router.get("", response_model=OrderListOut)
async def get_orders(service: OrderService = Depends(get_order_service)):
    """
    Retrieve every order, most recent first.
    """
    return {"orders": service.list_orders()}


@router.post("", response_model=Order, status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreateRequest,
    service: OrderService = Depends(get_order_service)
):
    """
    Submit a new order for a table.

    - **tableNumber**: positive integer (numeric strings are accepted)
    - **items**: list of item names; blank entries are dropped
    - **notes**: optional free text
    - **totalPrice**: optional non-negative amount, defaults to 0

    The order starts in status `new` and an `order_created` event is
    pushed to every stream subscriber.
    """
    return service.place_order(order_data.model_dump())


@router.get("/{order_id}", response_model=Order)
async def get_order(
    order_id: str,
    service: OrderService = Depends(get_order_service)
):
    return service.get_order(order_id)


@router.post("/{order_id}/status", response_model=Order)
async def update_order_status(
    order_id: str,
    status_data: OrderStatusUpdateRequest,
    service: OrderService = Depends(get_order_service)
):
    """
    Replace the status of an order (`new`, `preparing` or `ready`).

    Subscribers receive an `order_updated` event with the updated order.
    """
    return service.change_status(order_id, status_data.status)
