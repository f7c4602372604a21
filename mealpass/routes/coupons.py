"""
MealPass API - Coupon Routes.

Point-of-service redemption.
"""

from fastapi import APIRouter, Depends

from mealpass.dependencies import require_point_of_service
from mealpass.models.enums import RedemptionStatus
from mealpass.models.mongodb import UserDocument
from mealpass.schemas.order import RedeemRequest
from mealpass.services import coupon_service
from mealpass.utils.errors import CouponAlreadyUsedError, NotFoundError

router = APIRouter()


@router.post("/redeem")
async def redeem_coupon(
    request: RedeemRequest,
    operator: UserDocument = Depends(require_point_of_service),
):
    """
    Redeem a coupon code at the counter.

    Returns:
        dict: Redemption status with the order details on success.

    Raises:
        NotFoundError: 404 for unknown codes.
        CouponAlreadyUsedError: 409 with the original redemption time.
    """
    result = await coupon_service.redeem(request.code)

    if result.status == RedemptionStatus.NOT_FOUND:
        raise NotFoundError("Coupon not found", detail=f"No coupon with code {request.code}")

    if result.status == RedemptionStatus.ALREADY_USED:
        raise CouponAlreadyUsedError(result.code, result.used_at, result.details)

    return result.to_dict()
