"""
MealPass API - Coupon Store.

One single-use coupon per order, keyed by the order id. Redemption flips a
coupon from valid to used exactly once: the transition is a single
conditional ``find_one_and_update`` on ``{code, is_valid: true}``, so of two
simultaneous redemptions only one can match the filter.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from beanie.odm.queries.update import UpdateResponse
from beanie.operators import In, Set

from mealpass.models.enums import RedemptionStatus
from mealpass.models.mongodb import CouponDocument, OrderDocument
from mealpass.services import order_service
from mealpass.utils.clock import utc_now
from mealpass.utils.errors import PersistenceError, ValidationError

logger = logging.getLogger(__name__)

RECONCILIATION_BATCH_SIZE = 500


@dataclass
class RedemptionResult:
    """Outcome of a redemption attempt."""
    status: RedemptionStatus
    code: str
    used_at: Optional[datetime] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def redeemed(self) -> bool:
        return self.status == RedemptionStatus.REDEEMED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "code": self.code,
            "used_at": self.used_at.isoformat() if self.used_at else None,
            "details": self.details,
        }


def _details(coupon: CouponDocument) -> Dict[str, Any]:
    return {
        "user_id": str(coupon.user_id),
        "order_id": str(coupon.order_id),
        "plan_name": coupon.plan_name,
        "meal_type": coupon.meal_type.value if coupon.meal_type else None,
        "description": coupon.description,
    }


def _describe_order(order: OrderDocument) -> Dict[str, Any]:
    """Coupon metadata derived from the order contents."""
    meal_types = {item.meal_type for item in order.items}
    names = ", ".join(item.name for item in order.items)
    return {
        "plan_name": f"{len(order.items)} meal(s)",
        "meal_type": meal_types.pop() if len(meal_types) == 1 else None,
        "description": names,
    }


async def issue_coupon(order: OrderDocument, now: Optional[datetime] = None) -> CouponDocument:
    """
    Create the valid coupon for a freshly stored order.

    Args:
        order: The persisted order.
        now: Creation timestamp (defaults to current UTC time).

    Returns:
        CouponDocument: The inserted coupon.

    Raises:
        PersistenceError: If the insert fails.
    """
    coupon = CouponDocument(
        code=str(order.uid),
        order_id=order.uid,
        user_id=order.user_id,
        is_valid=True,
        created_at=now or utc_now(),
        **_describe_order(order),
    )
    try:
        await coupon.insert()
    except Exception as e:
        logger.error(f"Error issuing coupon for order {order.uid}: {e}")
        raise PersistenceError("Could not issue coupon", detail=str(e))

    logger.info(f"Coupon issued for order {order.uid}")
    return coupon


async def get_coupon(code: str) -> Optional[CouponDocument]:
    """Exact, case-sensitive lookup."""
    return await CouponDocument.find_one(CouponDocument.code == code)


async def list_user_coupons(user_id: UUID) -> List[CouponDocument]:
    return await CouponDocument.find(
        CouponDocument.user_id == user_id
    ).sort(-CouponDocument.created_at).to_list()


async def redeem(code: str, now: Optional[datetime] = None) -> RedemptionResult:
    """
    Redeem a coupon code.

    Codes are order ids and are matched exactly; no case folding or
    trimming is applied.

    Args:
        code: Coupon code as presented at the point of service.
        now: Redemption timestamp (defaults to current UTC time).

    Returns:
        RedemptionResult: REDEEMED for the single winning call, ALREADY_USED
        (with the original ``used_at``) afterwards, NOT_FOUND for unknown codes.

    Raises:
        ValidationError: If ``code`` is empty or blank.
    """
    if not code or not code.strip():
        raise ValidationError("Coupon code cannot be empty")

    used_at = now or utc_now()

    # Conditional update: only matches while the coupon is still valid
    redeemed = await CouponDocument.find_one(
        CouponDocument.code == code,
        CouponDocument.is_valid == True,
    ).update(
        Set({CouponDocument.is_valid: False, CouponDocument.used_at: used_at}),
        response_type=UpdateResponse.NEW_DOCUMENT,
    )

    if redeemed is not None:
        logger.info(f"Coupon {code} redeemed for user {redeemed.user_id}")
        return RedemptionResult(
            status=RedemptionStatus.REDEEMED,
            code=code,
            used_at=redeemed.used_at,
            details=_details(redeemed),
        )

    # Either unknown, or already used (possibly by a concurrent call just now)
    existing = await get_coupon(code)
    if existing is None:
        logger.info(f"Coupon {code} not found")
        return RedemptionResult(status=RedemptionStatus.NOT_FOUND, code=code)

    logger.info(f"Coupon {code} already used at {existing.used_at}")
    return RedemptionResult(
        status=RedemptionStatus.ALREADY_USED,
        code=code,
        used_at=existing.used_at,
        details=_details(existing),
    )


async def list_orders_missing_coupon(batch_size: int = RECONCILIATION_BATCH_SIZE) -> List[OrderDocument]:
    """
    Orders that were stored but never got a coupon.

    Checkout does not roll back an order when coupon issuance fails; this is
    the query an operator or a repair job uses to find those orders. Orders
    are streamed oldest first and checked against the coupon collection one
    batch of codes at a time, so memory is bounded by the batch and the
    result rather than by the size of either collection.
    """
    missing: List[OrderDocument] = []
    batch: List[OrderDocument] = []

    async def flush() -> None:
        codes = [str(order.uid) for order in batch]
        issued = {
            coupon.code
            for coupon in await CouponDocument.find(In(CouponDocument.code, codes)).to_list()
        }
        missing.extend(order for order in batch if str(order.uid) not in issued)
        batch.clear()

    async for order in OrderDocument.find_all().sort(+OrderDocument.created_at):
        batch.append(order)
        if len(batch) >= batch_size:
            await flush()
    if batch:
        await flush()

    return missing


async def reissue_coupon(order_id: str) -> CouponDocument:
    """
    Issue the coupon for an order if it does not have one yet.

    Idempotent: returns the existing coupon when one is already stored.

    Raises:
        NotFoundError: If the order does not exist.
    """
    order = await order_service.get_order(order_id)
    existing = await get_coupon(str(order.uid))
    if existing:
        return existing

    logger.warning(f"Re-issuing missing coupon for order {order.uid}")
    return await issue_coupon(order)


def coupon_to_dict(coupon: CouponDocument) -> Dict[str, Any]:
    """API representation of a coupon."""
    return {
        "code": coupon.code,
        "is_valid": coupon.is_valid,
        "created_at": coupon.created_at.isoformat(),
        "used_at": coupon.used_at.isoformat() if coupon.used_at else None,
        **_details(coupon),
    }
