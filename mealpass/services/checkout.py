"""
MealPass API - Checkout Orchestrator.

Coordinates a meal order:

1. server-side pricing of the selected menu items
2. eligibility gate (weekly limit for students)
3. payment capture
4. order write (the durability point)
5. coupon issuance
6. student purchase bookkeeping on the profile
7. confirmation email

Steps 1-4 abort the checkout on failure and nothing after the failing step
runs. Once the order is written it stands: failures in steps 5-7 are logged
and reported on the result, never rolled back. Orders left without a coupon
are listed by ``coupon_service.list_orders_missing_coupon``.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from beanie.operators import Set

from mealpass.models.enums import UserRole
from mealpass.models.mongodb import MenuItemSnapshot, UserDocument
from mealpass.services import coupon_service, menu_service, order_service
from mealpass.services.eligibility import is_eligible
from mealpass.services.email_service import EmailService, email_service, order_confirmation_message
from mealpass.services.payment import PaymentGateway, get_payment_gateway
from mealpass.services.pricing import price_for
from mealpass.utils.clock import utc_now
from mealpass.utils.errors import (
    PaymentDeclinedError,
    PersistenceError,
    RestrictedError,
    ValidationError,
)
from settings import settings

logger = logging.getLogger(__name__)


@dataclass
class CheckoutResult:
    """Outcome of a checkout whose order was stored."""
    order_id: str
    total_cost: float
    currency: str
    transaction_id: Optional[str]
    coupon_code: Optional[str]
    coupon_issued: bool = True
    profile_updated: bool = True
    notification_sent: bool = True

    @property
    def degraded(self) -> bool:
        """Order placed but coupon or profile bookkeeping needs attention."""
        return not (self.coupon_issued and self.profile_updated)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": "degraded" if self.degraded else "completed",
            "order_id": self.order_id,
            "coupon_code": self.coupon_code,
            "total_cost": self.total_cost,
            "currency": self.currency,
            "transaction_id": self.transaction_id,
            "coupon_issued": self.coupon_issued,
            "profile_updated": self.profile_updated,
            "notification_sent": self.notification_sent,
        }


class CheckoutService:
    """Places meal orders. Collaborators are injectable for testing."""

    def __init__(
        self,
        payment_gateway: Optional[PaymentGateway] = None,
        notifier: Optional[EmailService] = None,
    ):
        self.payment_gateway = payment_gateway or get_payment_gateway()
        self.notifier = notifier or email_service

    async def build_snapshots(
        self,
        selected_item_ids: List[str],
        role: Optional[UserRole],
    ) -> List[MenuItemSnapshot]:
        """
        Load the selected items and price them for ``role``.

        Raises:
            ValidationError: Empty selection, duplicates or unknown ids.
        """
        if not selected_item_ids:
            raise ValidationError("No meals selected", detail="Select at least one meal before checkout")

        if len(set(selected_item_ids)) != len(selected_item_ids):
            raise ValidationError("Duplicate meals in selection")

        items = await menu_service.get_menu_items_by_ids(selected_item_ids)
        unknown = [item_id for item_id in selected_item_ids if item_id not in items]
        if unknown:
            raise ValidationError("Unknown menu items", detail=", ".join(unknown))

        return [
            MenuItemSnapshot(
                menu_item_id=item_id,
                day=items[item_id].day,
                meal_type=items[item_id].meal_type,
                name=items[item_id].name,
                description=items[item_id].description,
                dietary_tags=list(items[item_id].dietary_tags),
                calories=items[item_id].calories,
                price=price_for(items[item_id].meal_type, role),
            )
            for item_id in selected_item_ids
        ]

    async def _record_purchase(self, profile: UserDocument, order_id: str, now: datetime) -> None:
        """Set both purchase bookkeeping fields in one write."""
        await UserDocument.find_one(UserDocument.uid == profile.uid).update(
            Set({
                UserDocument.last_purchase_at: now,
                UserDocument.last_order_id: order_id,
                UserDocument.updated_at: now,
            })
        )
        profile.last_purchase_at = now
        profile.last_order_id = order_id
        profile.updated_at = now

    async def checkout(
        self,
        user_id: UUID,
        profile: UserDocument,
        selected_item_ids: List[str],
        now: Optional[datetime] = None,
    ) -> CheckoutResult:
        """
        Place an order for the selected menu items.

        Args:
            user_id: Authenticated caller's id.
            profile: Caller's profile (role and purchase bookkeeping).
            selected_item_ids: Menu item ids, one per meal.
            now: Checkout time (defaults to current UTC time).

        Returns:
            CheckoutResult: Order id, coupon code and per-step flags.

        Raises:
            ValidationError: Bad selection or profile mismatch.
            RestrictedError: Student ordered within the purchase window.
            PaymentDeclinedError: Gateway declined; nothing was written.
            PersistenceError: Order could not be written; nothing was written.
        """
        now = now or utc_now()

        if profile.uid != user_id:
            raise ValidationError("Profile does not belong to the authenticated user")

        # 1. Validate and price the selection with the caller's role
        snapshots = await self.build_snapshots(selected_item_ids, profile.role)

        # 2. Eligibility gate
        eligibility = is_eligible(profile, now)
        if not eligibility.allowed:
            logger.info(f"Checkout restricted for user {user_id} until {eligibility.next_allowed_at}")
            raise RestrictedError(eligibility.next_allowed_at)

        total_cost = round(sum(item.price for item in snapshots), 2)

        # 3. Payment
        try:
            payment = await self.payment_gateway.capture(
                total_cost,
                settings.CURRENCY,
                metadata={"user_id": str(user_id)},
            )
        except Exception as e:
            logger.error(f"Payment gateway failure for user {user_id}: {e}")
            raise PaymentDeclinedError("Payment could not be processed")

        if not payment.success:
            logger.info(f"Payment declined for user {user_id}: {payment.message}")
            raise PaymentDeclinedError(payment.message)

        # 4. Order (durability point)
        try:
            order = await order_service.create_order(
                user_id=user_id,
                user_email=profile.email,
                user_name=profile.name,
                items=snapshots,
                created_at=now,
                transaction_id=payment.transaction_id,
            )
        except PersistenceError:
            logger.error(
                f"Order write failed after payment {payment.transaction_id} for user {user_id}"
            )
            raise

        order_id = str(order.uid)
        result = CheckoutResult(
            order_id=order_id,
            total_cost=order.total_cost,
            currency=order.currency,
            transaction_id=payment.transaction_id,
            coupon_code=None,
        )

        # 5. Coupon
        try:
            coupon = await coupon_service.issue_coupon(order, now)
            result.coupon_code = coupon.code
        except Exception as e:
            result.coupon_issued = False
            logger.error(f"Order {order_id} placed without coupon (manual recovery needed): {e}")

        # 6. Student purchase bookkeeping
        if profile.role == UserRole.STUDENT:
            try:
                await self._record_purchase(profile, order_id, now)
            except Exception as e:
                result.profile_updated = False
                logger.error(f"Order {order_id} placed but purchase window not recorded for user {user_id}: {e}")

        # 7. Confirmation email (best effort)
        meal_names = ", ".join(item.name for item in order.items)
        try:
            result.notification_sent = await self.notifier.send(
                profile.email,
                "Meal Order Confirmed & Details Link Generated",
                order_confirmation_message(
                    profile.name, meal_names, order.total_cost, order.currency, order_id
                ),
            )
        except Exception as e:
            result.notification_sent = False
            logger.error(f"Confirmation email for order {order_id} failed: {e}")

        logger.info(
            f"Checkout complete for user {user_id}: order {order_id}, "
            f"degraded={result.degraded}, notified={result.notification_sent}"
        )
        return result


_checkout_service: Optional[CheckoutService] = None


def get_checkout_service() -> CheckoutService:
    """FastAPI dependency returning the process-wide checkout service."""
    global _checkout_service
    if _checkout_service is None:
        _checkout_service = CheckoutService()
    return _checkout_service
