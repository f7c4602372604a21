"""MealPass API - Domain enumerations."""

from enum import Enum


class UserRole(str, Enum):
    """Closed set of account roles. Only students are purchase-restricted."""

    STUDENT = "Student"
    ADMIN = "Admin"
    STAFF = "Staff"


class MealType(str, Enum):
    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"


class DietaryTag(str, Enum):
    VEGETARIAN = "Vegetarian"
    VEGAN = "Vegan"
    GLUTEN_FREE = "Gluten-Free"
    NON_VEG = "Non-Veg"


class DayOfWeek(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


class RedemptionStatus(str, Enum):
    """Outcome of a coupon redemption attempt."""

    REDEEMED = "redeemed"
    ALREADY_USED = "already_used"
    NOT_FOUND = "not_found"
