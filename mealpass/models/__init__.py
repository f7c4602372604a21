"""
MealPass API - MongoDB Models Package.

Export all Beanie ODM models for MongoDB operations.
"""

from mealpass.models.enums import (
    UserRole,
    MealType,
    DietaryTag,
    DayOfWeek,
    RedemptionStatus,
)
from mealpass.models.mongodb import (
    UserDocument,
    MenuItemDocument,
    MenuItemSnapshot,
    OrderDocument,
    CouponDocument,
    DOCUMENT_MODELS,
)

__all__ = [
    "UserRole",
    "MealType",
    "DietaryTag",
    "DayOfWeek",
    "RedemptionStatus",
    "UserDocument",
    "MenuItemDocument",
    "MenuItemSnapshot",
    "OrderDocument",
    "CouponDocument",
    "DOCUMENT_MODELS",
]
