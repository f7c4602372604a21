"""
MealPass API - Admin Routes.

Dashboard, reports, buyers, user roles, announcements, coupon
reconciliation and menu seeding. Every endpoint requires the Admin role.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from mealpass.dependencies import require_admin
from mealpass.models.mongodb import UserDocument
from mealpass.schemas.order import NotificationRequest, RoleUpdateRequest
from mealpass.services import (
    announcements,
    coupon_service,
    menu_service,
    order_service,
    reporting_service,
    user_service,
)
from mealpass.utils.errors import NotFoundError, ValidationError
from mealpass.utils.ids import parse_uuid

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/dashboard")
async def dashboard(admin: UserDocument = Depends(require_admin)):
    """Revenue, order and meal totals, monthly sales and the latest sales."""
    return await reporting_service.get_dashboard_data()


@router.get("/sales-report")
async def sales_report(
    start: Optional[datetime] = Query(None, alias="from"),
    end: Optional[datetime] = Query(None, alias="to"),
    admin: UserDocument = Depends(require_admin),
):
    start = reporting_service.to_naive_utc(start)
    end = reporting_service.to_naive_utc(end)
    if start and end and start > end:
        raise ValidationError("Invalid date range", detail="'from' must not be after 'to'")
    return await reporting_service.get_sales_report(start, end)


@router.get("/buyers")
async def buyers(admin: UserDocument = Depends(require_admin)):
    """Everyone who has placed an order, aggregated from the order ledger."""
    summaries = await reporting_service.get_all_buyers()
    return {"buyers": [buyer.to_dict() for buyer in summaries]}


@router.get("/buyers/recent")
async def recent_buyers(
    count: int = Query(5, ge=1, le=100),
    admin: UserDocument = Depends(require_admin),
):
    summaries = await reporting_service.get_recent_buyers(count)
    return {"buyers": [buyer.to_dict() for buyer in summaries]}


@router.get("/users")
async def list_users(admin: UserDocument = Depends(require_admin)):
    users = await UserDocument.find_all().sort(+UserDocument.name).to_list()
    return {
        "users": [
            {
                "user_id": str(user.uid),
                "email": user.email,
                "name": user.name,
                "role": user.role.value,
                "last_purchase_at": user.last_purchase_at.isoformat() if user.last_purchase_at else None,
                "created_at": user.created_at.isoformat(),
            }
            for user in users
        ]
    }


@router.patch("/users/{user_id}/role")
async def change_role(
    user_id: str,
    request: RoleUpdateRequest,
    admin: UserDocument = Depends(require_admin),
):
    """
    Change a user's role.

    The new role applies to menu prices and the weekly limit from the next
    request on.
    """
    uid = parse_uuid(user_id)
    user = await UserDocument.find_one(UserDocument.uid == uid) if uid else None
    if not user:
        raise NotFoundError("User not found", detail=f"No user with id {user_id}")

    await user_service.change_role(user, request.role)
    logger.info(f"Role change for {user.uid} made by admin {admin.uid}")
    return {"user_id": str(user.uid), "role": user.role.value}


@router.post("/notifications")
async def send_notification(
    request: NotificationRequest,
    admin: UserDocument = Depends(require_admin),
):
    return await announcements.send_announcement(
        request.recipient_type,
        request.subject,
        request.body,
        recipient=request.recipient,
    )


@router.get("/reconciliation/orders-missing-coupon")
async def orders_missing_coupon(admin: UserDocument = Depends(require_admin)):
    """Orders that were paid and stored but never received a coupon."""
    orders = await coupon_service.list_orders_missing_coupon()
    return {"orders": [order_service.order_to_dict(order) for order in orders]}


@router.post("/reconciliation/orders/{order_id}/coupon")
async def reissue_coupon(order_id: str, admin: UserDocument = Depends(require_admin)):
    coupon = await coupon_service.reissue_coupon(order_id)
    return coupon_service.coupon_to_dict(coupon)


@router.post("/menu/seed")
async def seed_menu(admin: UserDocument = Depends(require_admin)):
    """Load the default weekly menu into an empty catalog."""
    inserted = await menu_service.seed_default_menu()
    return {"inserted": inserted}
