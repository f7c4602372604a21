"""MealPass API - Utilities Package."""

from mealpass.utils.clock import utc_now
from mealpass.utils.errors import (
    MealPassException,
    AuthenticationError,
    NotFoundError,
    ValidationError,
    ForbiddenError,
    ConflictError,
    RestrictedError,
    PaymentDeclinedError,
    PersistenceError,
    CouponAlreadyUsedError,
)

__all__ = [
    "utc_now",
    "MealPassException",
    "AuthenticationError",
    "NotFoundError",
    "ValidationError",
    "ForbiddenError",
    "ConflictError",
    "RestrictedError",
    "PaymentDeclinedError",
    "PersistenceError",
    "CouponAlreadyUsedError",
]
