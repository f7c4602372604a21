"""
MealPass API - Order and Coupon Schemas.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, ConfigDict

from mealpass.models.enums import UserRole


class CheckoutRequest(BaseModel):
    """
    Schema for checkout.

    Only menu item ids are accepted; prices and totals are computed on the
    server.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "menu_item_ids": [
                    "8a6e0804-2bd0-4672-b79d-d97027f9071a",
                    "cf1f2c3e-0b4c-4a53-9a4c-0f3c7b2b9d11"
                ]
            }
        }
    )

    menu_item_ids: List[str] = Field(..., description="Selected menu item ids, one per meal")


class RedeemRequest(BaseModel):
    """Coupon code as entered at the point of service (case-sensitive)."""

    code: str = Field(..., description="Coupon code (the order id)")


class ProfileUpdateRequest(BaseModel):
    name: str = Field(..., min_length=2)


class RoleUpdateRequest(BaseModel):
    role: UserRole


class NotificationRequest(BaseModel):
    """
    Admin announcement.

    Attributes:
        recipient_type: ``all`` users, one ``specific`` email, or the
            ``unredeemed`` group (users holding unused coupons).
        recipient: Email address when ``recipient_type`` is ``specific``.
    """

    recipient_type: Literal["all", "specific", "unredeemed"] = "all"
    recipient: Optional[EmailStr] = None
    subject: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
