"""MealPass API - Routes Package."""

from mealpass.routes import (
    auth,
    user,
    menu,
    orders,
    coupons,
    admin,
)

__all__ = [
    "auth",
    "user",
    "menu",
    "orders",
    "coupons",
    "admin",
]
