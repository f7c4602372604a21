# mealpass/models/mongodb.py
"""
MealPass MongoDB Document Models.

Beanie ODM models for MongoDB.
"""

from beanie import Document, Indexed
from pydantic import BaseModel, EmailStr, Field, model_validator
from datetime import datetime
from typing import Optional, List
from uuid import UUID, uuid4

from mealpass.models.enums import DayOfWeek, DietaryTag, MealType, UserRole
from mealpass.utils.clock import utc_now


class UserDocument(Document):
    """User profile. Role and purchase bookkeeping live here."""

    uid: UUID = Field(default_factory=uuid4)
    email: Indexed(EmailStr, unique=True)
    password_hash: str
    name: str
    role: UserRole = UserRole.STUDENT

    # Weekly purchase restriction bookkeeping (both set or both unset)
    last_purchase_at: Optional[datetime] = None
    last_order_id: Optional[str] = None

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    last_login_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _purchase_fields_paired(self) -> "UserDocument":
        if (self.last_purchase_at is None) != (self.last_order_id is None):
            raise ValueError("last_purchase_at and last_order_id must be set together")
        return self

    class Settings:
        name = "users"  # Collection name in MongoDB
        indexes = [
            "uid",
            "role",
        ]

    class Config:
        json_schema_extra = {
            "example": {
                "email": "asha@campus.edu",
                "name": "Asha Rao",
                "role": "Student",
            }
        }


class MenuItemDocument(Document):
    """Weekly menu entry curated by admins."""

    uid: UUID = Field(default_factory=uuid4)
    day: DayOfWeek
    meal_type: MealType
    name: str = Field(..., min_length=1)
    description: str = ""
    dietary_tags: List[DietaryTag] = Field(default_factory=list)
    calories: int = Field(default=0, ge=0)
    price: float = Field(default=0.0, ge=0)  # admin base price, not what is charged
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    class Settings:
        name = "menu_items"
        indexes = [
            "uid",
            "name",
        ]


class MenuItemSnapshot(BaseModel):
    """Menu item copied by value into an order at checkout."""

    menu_item_id: str
    day: DayOfWeek
    meal_type: MealType
    name: str
    description: str = ""
    dietary_tags: List[DietaryTag] = Field(default_factory=list)
    calories: int = 0
    price: float  # price charged for the buyer's role


class OrderDocument(Document):
    """Placed order. Append-only: written once, never updated."""

    uid: UUID = Field(default_factory=uuid4)
    user_id: UUID
    user_email: EmailStr
    user_name: Optional[str] = None
    items: List[MenuItemSnapshot]
    total_cost: float
    currency: str = "INR"
    transaction_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def _total_matches_items(self) -> "OrderDocument":
        expected = round(sum(item.price for item in self.items), 2)
        if abs(expected - self.total_cost) > 0.005:
            raise ValueError(f"total_cost {self.total_cost} does not match item sum {expected}")
        return self

    class Settings:
        name = "orders"
        indexes = [
            "uid",
            "user_id",
            "created_at",
        ]


class CouponDocument(Document):
    """Single-use redemption coupon. The code is the order id it was issued for."""

    code: Indexed(str, unique=True)
    order_id: UUID
    user_id: UUID
    is_valid: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    used_at: Optional[datetime] = None

    # Descriptive metadata (optional)
    plan_name: Optional[str] = None
    meal_type: Optional[MealType] = None
    description: Optional[str] = None

    @model_validator(mode="after")
    def _validity_matches_usage(self) -> "CouponDocument":
        if self.is_valid == (self.used_at is not None):
            raise ValueError("coupon must be either valid and unused, or invalid with used_at set")
        return self

    class Settings:
        name = "coupons"
        indexes = [
            "user_id",
            "is_valid",
        ]


DOCUMENT_MODELS = [
    UserDocument,
    MenuItemDocument,
    OrderDocument,
    CouponDocument,
]
