"""
MealPass API - Menu Schemas.

Pydantic schemas for admin menu management.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict

from mealpass.models.enums import DayOfWeek, DietaryTag, MealType


class MenuItemCreate(BaseModel):
    """
    Schema for creating a menu item.

    Attributes:
        day: Day of the week the meal is served.
        meal_type: Breakfast, Lunch or Dinner.
        name: Display name.
        description: Short description.
        dietary_tags: Any of Vegetarian, Vegan, Gluten-Free, Non-Veg.
        calories: Calorie count.
        price: Admin-set base price.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "day": "Monday",
                "meal_type": "Dinner",
                "name": "Lentil Soup",
                "description": "Hearty lentil soup with vegetables.",
                "dietary_tags": ["Vegan", "Vegetarian", "Gluten-Free"],
                "calories": 400,
                "price": 40.0
            }
        }
    )

    day: DayOfWeek
    meal_type: MealType
    name: str = Field(..., min_length=1)
    description: str = ""
    dietary_tags: List[DietaryTag] = Field(default_factory=list)
    calories: int = Field(default=0, ge=0)
    price: float = Field(default=0.0, ge=0)


class MenuItemUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    day: Optional[DayOfWeek] = None
    meal_type: Optional[MealType] = None
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    dietary_tags: Optional[List[DietaryTag]] = None
    calories: Optional[int] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
