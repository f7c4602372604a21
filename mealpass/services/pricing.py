"""
MealPass API - Pricing Policy.

Maps (meal type, role) to the price a buyer is shown and charged.
The admin-set base price on a menu item is used for reporting only.
"""

from typing import Any, Dict, Iterable, List, Optional

from mealpass.models.enums import MealType, UserRole


STAFF_PRICES: Dict[MealType, float] = {
    MealType.BREAKFAST: 20.0,
    MealType.LUNCH: 35.0,
    MealType.DINNER: 30.0,
}

STANDARD_PRICES: Dict[MealType, float] = {
    MealType.BREAKFAST: 25.0,
    MealType.LUNCH: 45.0,
    MealType.DINNER: 40.0,
}


def price_table(role: Optional[UserRole]) -> Dict[MealType, float]:
    """
    Select the price table for a role.

    Args:
        role: Buyer's role, or None for an unauthenticated caller.

    Returns:
        Staff table for Staff; standard table for Student, Admin and None.
    """
    if role == UserRole.STAFF:
        return STAFF_PRICES
    return STANDARD_PRICES


def price_for(meal_type: MealType, role: Optional[UserRole]) -> float:
    """
    Price of one meal of the given type for the given role.

    Args:
        meal_type: Breakfast, Lunch or Dinner.
        role: Buyer's role, or None for an unauthenticated caller.

    Returns:
        float: Price in the configured currency.

    Example:
        >>> price_for(MealType.LUNCH, UserRole.STAFF)
        35.0
        >>> price_for(MealType.LUNCH, None)
        45.0
    """
    return price_table(role)[MealType(meal_type)]


def priced_menu(items: Iterable[Any], role: Optional[UserRole]) -> List[Dict[str, Any]]:
    """
    Render menu items with the role-specific display price.

    The same role snapshot must be used here and at checkout so the price
    shown equals the price charged.
    """
    return [
        {
            "id": str(item.uid),
            "day": item.day,
            "meal_type": item.meal_type,
            "name": item.name,
            "description": item.description,
            "dietary_tags": list(item.dietary_tags),
            "calories": item.calories,
            "price": price_for(item.meal_type, role),
        }
        for item in items
    ]
