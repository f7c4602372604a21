"""
MealPass API - Order Ledger.

Append-only order storage. Orders are written once at checkout and read for
order details, history and reporting.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from mealpass.models.mongodb import MenuItemSnapshot, OrderDocument
from mealpass.utils.errors import NotFoundError, PersistenceError, ValidationError
from mealpass.utils.ids import parse_uuid
from settings import settings

logger = logging.getLogger(__name__)


async def create_order(
    user_id: UUID,
    user_email: str,
    items: List[MenuItemSnapshot],
    created_at: datetime,
    user_name: Optional[str] = None,
    transaction_id: Optional[str] = None,
) -> OrderDocument:
    """
    Persist a new order. The total is recomputed from the snapshots.

    Args:
        user_id: Owning user's id.
        user_email: Owning user's email.
        items: Priced menu item snapshots.
        created_at: Order timestamp.
        user_name: Optional display name.
        transaction_id: Payment gateway reference.

    Returns:
        OrderDocument: The inserted order.

    Raises:
        ValidationError: If ``items`` is empty.
        PersistenceError: If the insert fails.
    """
    if not items:
        raise ValidationError("An order needs at least one meal")

    order = OrderDocument(
        user_id=user_id,
        user_email=user_email,
        user_name=user_name,
        items=items,
        total_cost=round(sum(item.price for item in items), 2),
        currency=settings.CURRENCY,
        transaction_id=transaction_id,
        created_at=created_at,
    )

    try:
        await order.insert()
    except Exception as e:
        logger.error(f"Error saving order for user {user_id}: {e}")
        raise PersistenceError("Could not save order", detail=str(e))

    logger.info(f"Order {order.uid} saved for user {user_id} (total {order.total_cost} {order.currency})")
    return order


async def get_order(order_id: str) -> OrderDocument:
    """Fetch an order by id, raising NotFoundError when absent or malformed."""
    uid = parse_uuid(order_id)
    order = await OrderDocument.find_one(OrderDocument.uid == uid) if uid else None
    if not order:
        logger.info(f"No order found with ID: {order_id}")
        raise NotFoundError("Order not found", detail=f"No order with id {order_id}")
    return order


async def list_user_orders(user_id: UUID, limit: int = 50) -> List[OrderDocument]:
    """Most recent orders for one user."""
    return await OrderDocument.find(
        OrderDocument.user_id == user_id
    ).sort(-OrderDocument.created_at).limit(limit).to_list()


async def list_orders(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    newest_first: bool = True,
) -> List[OrderDocument]:
    """All orders, optionally bounded by creation time (inclusive)."""
    filters = []
    if start:
        filters.append(OrderDocument.created_at >= start)
    if end:
        filters.append(OrderDocument.created_at <= end)

    sort_key = -OrderDocument.created_at if newest_first else +OrderDocument.created_at
    return await OrderDocument.find(*filters).sort(sort_key).to_list()


def order_to_dict(order: OrderDocument) -> Dict[str, Any]:
    """API representation of an order."""
    return {
        "order_id": str(order.uid),
        "user_id": str(order.user_id),
        "user_email": order.user_email,
        "user_name": order.user_name,
        "items": [item.model_dump(mode="json") for item in order.items],
        "total_cost": order.total_cost,
        "currency": order.currency,
        "transaction_id": order.transaction_id,
        "created_at": order.created_at.isoformat(),
    }
