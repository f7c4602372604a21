# mealpass/routes/user.py
"""
MealPass API - User Routes.

Profile, purchase eligibility and the caller's coupons.
"""

from fastapi import APIRouter, Depends

from mealpass.dependencies import get_current_user
from mealpass.models.mongodb import UserDocument
from mealpass.schemas.order import ProfileUpdateRequest
from mealpass.services import coupon_service, user_service
from mealpass.services.eligibility import is_eligible
from mealpass.utils.clock import utc_now

router = APIRouter()


def _profile(user: UserDocument) -> dict:
    return {
        "user_id": str(user.uid),
        "email": user.email,
        "name": user.name,
        "role": user.role.value,
        "last_purchase_at": user.last_purchase_at.isoformat() if user.last_purchase_at else None,
        "last_order_id": user.last_order_id,
        "created_at": user.created_at.isoformat(),
    }


@router.get("/profile")
async def get_profile(user: UserDocument = Depends(get_current_user)):
    """Get current user's profile."""
    return _profile(user)


@router.put("/profile")
async def update_profile(
    data: ProfileUpdateRequest,
    user: UserDocument = Depends(get_current_user)
):
    """Update the display name. Role and purchase fields are not user-editable."""
    await user_service.rename(user, data.name)

    return {"message": "Profile updated", "profile": _profile(user)}


@router.get("/eligibility")
async def get_eligibility(user: UserDocument = Depends(get_current_user)):
    """Whether the caller may check out now, and when the window reopens."""
    return is_eligible(user, utc_now()).to_dict()


@router.get("/coupons")
async def get_coupons(user: UserDocument = Depends(get_current_user)):
    coupons = await coupon_service.list_user_coupons(user.uid)
    return {"coupons": [coupon_service.coupon_to_dict(coupon) for coupon in coupons]}
