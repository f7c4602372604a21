# tests/test_pricing.py
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from mealpass.models.enums import MealType, UserRole
from mealpass.services.eligibility import is_eligible
from mealpass.services.pricing import price_for, priced_menu


@pytest.mark.parametrize(
    "meal_type, staff, standard",
    [
        (MealType.BREAKFAST, 20.0, 25.0),
        (MealType.LUNCH, 35.0, 45.0),
        (MealType.DINNER, 30.0, 40.0),
    ],
)
def test_price_tables(meal_type, staff, standard):
    assert price_for(meal_type, UserRole.STAFF) == staff
    assert price_for(meal_type, UserRole.STUDENT) == standard
    assert price_for(meal_type, UserRole.ADMIN) == standard
    # Anonymous callers see standard prices
    assert price_for(meal_type, None) == standard


def test_price_accepts_raw_meal_type_value():
    assert price_for("Lunch", UserRole.STAFF) == 35.0


def test_priced_menu_ignores_admin_base_price():
    item = SimpleNamespace(
        uid="abc",
        day="Monday",
        meal_type=MealType.DINNER,
        name="Lentil Soup",
        description="",
        dietary_tags=[],
        calories=400,
        price=999.0,
    )
    [staff_view] = priced_menu([item], UserRole.STAFF)
    [student_view] = priced_menu([item], UserRole.STUDENT)

    assert staff_view["price"] == 30.0
    assert student_view["price"] == 40.0
    assert staff_view["id"] == "abc"


NOW = datetime(2026, 3, 10, 12, 0, 0)


def student(last_purchase_at=None):
    return SimpleNamespace(role=UserRole.STUDENT, last_purchase_at=last_purchase_at)


def test_student_without_history_is_eligible():
    result = is_eligible(student(), NOW)
    assert result.allowed is True
    assert result.next_allowed_at is None


def test_student_inside_window_is_restricted():
    last = NOW - timedelta(days=2)
    result = is_eligible(student(last), NOW)

    assert result.allowed is False
    assert result.next_allowed_at == last + timedelta(days=7)


def test_window_boundary_is_inclusive():
    last = NOW - timedelta(days=7)
    assert is_eligible(student(last), NOW).allowed is True
    assert is_eligible(student(last), NOW - timedelta(milliseconds=1)).allowed is False


@pytest.mark.parametrize("role", [UserRole.STAFF, UserRole.ADMIN])
def test_other_roles_never_restricted(role):
    profile = SimpleNamespace(role=role, last_purchase_at=NOW - timedelta(hours=1))
    assert is_eligible(profile, NOW).allowed is True


def test_eligibility_to_dict():
    last = NOW - timedelta(days=1)
    data = is_eligible(student(last), NOW).to_dict()
    assert data == {"allowed": False, "next_allowed_at": (last + timedelta(days=7)).isoformat()}
