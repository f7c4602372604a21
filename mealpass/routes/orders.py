"""
MealPass API - Order Routes.

Checkout, order history and order details.
"""

import logging

from fastapi import APIRouter, Depends, status

from mealpass.dependencies import get_current_user
from mealpass.models.enums import UserRole
from mealpass.models.mongodb import UserDocument
from mealpass.schemas.order import CheckoutRequest
from mealpass.services import order_service
from mealpass.services.checkout import CheckoutService, get_checkout_service
from mealpass.utils.errors import ForbiddenError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/checkout", status_code=status.HTTP_201_CREATED)
async def checkout(
    request: CheckoutRequest,
    user: UserDocument = Depends(get_current_user),
    service: CheckoutService = Depends(get_checkout_service),
):
    """
    Place an order for the selected menu items.

    Prices are computed for the caller's role. A response with status
    ``degraded`` means the order was stored and paid for but the coupon or
    purchase bookkeeping needs operator attention.

    Raises:
        RestrictedError: 403 with ``next_allowed_at`` for students inside
            their weekly window.
        PaymentDeclinedError: 402 when the payment is declined.
    """
    result = await service.checkout(user.uid, user, request.menu_item_ids)
    return result.to_dict()


@router.get("")
async def list_orders(user: UserDocument = Depends(get_current_user)):
    """Caller's order history, newest first."""
    orders = await order_service.list_user_orders(user.uid)
    return {"orders": [order_service.order_to_dict(order) for order in orders]}


@router.get("/{order_id}")
async def get_order(order_id: str, user: UserDocument = Depends(get_current_user)):
    """Order details for the owner, or for Admin/Staff at the counter."""
    order = await order_service.get_order(order_id)
    if order.user_id != user.uid and user.role not in (UserRole.ADMIN, UserRole.STAFF):
        raise ForbiddenError("Not allowed to view this order")
    return order_service.order_to_dict(order)
