"""MealPass API - Pydantic Schemas Package."""

from mealpass.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    TokenResponse,
    RefreshRequest,
)
from mealpass.schemas.menu import (
    MenuItemCreate,
    MenuItemUpdate,
)
from mealpass.schemas.order import (
    CheckoutRequest,
    RedeemRequest,
    ProfileUpdateRequest,
    RoleUpdateRequest,
    NotificationRequest,
)

__all__ = [
    # Auth
    "RegisterRequest",
    "LoginRequest",
    "TokenResponse",
    "RefreshRequest",
    # Menu
    "MenuItemCreate",
    "MenuItemUpdate",
    # Orders and coupons
    "CheckoutRequest",
    "RedeemRequest",
    "ProfileUpdateRequest",
    "RoleUpdateRequest",
    "NotificationRequest",
]
