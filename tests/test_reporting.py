# tests/test_reporting.py
from datetime import datetime, timedelta

from mealpass.models.enums import MealType, UserRole
from mealpass.services import reporting_service

JAN = datetime(2026, 1, 15, 9, 0, 0)
FEB = datetime(2026, 2, 20, 9, 0, 0)


async def place(service, user, items, when):
    return await service.checkout(user.uid, user, [str(item.uid) for item in items], now=when)


async def test_dashboard_totals_and_monthly_series(service, make_user, make_item):
    staff = await make_user(UserRole.STAFF, name="Ravi")
    student = await make_user(UserRole.STUDENT, name="Meera")
    breakfast = await make_item(MealType.BREAKFAST)
    lunch = await make_item(MealType.LUNCH)

    await place(service, student, [breakfast, lunch], JAN)  # 70
    await place(service, staff, [lunch], FEB)  # 35
    await place(service, staff, [breakfast], FEB + timedelta(days=1))  # 20

    data = await reporting_service.get_dashboard_data()

    assert data["stats"] == {"total_revenue": 125.0, "total_orders": 3, "total_meals_ordered": 4}
    assert data["sales_chart"] == [
        {"month": "Jan 2026", "sales": 70.0},
        {"month": "Feb 2026", "sales": 55.0},
    ]
    assert [sale["amount"] for sale in data["recent_sales"]] == [20.0, 35.0, 70.0]
    assert data["recent_sales"][0]["user"] == "Ravi"


async def test_dashboard_empty(db):
    data = await reporting_service.get_dashboard_data()
    assert data["stats"]["total_orders"] == 0
    assert data["sales_chart"] == []
    assert data["recent_sales"] == []


async def test_sales_report_range(service, make_user, make_item):
    staff = await make_user(UserRole.STAFF)
    lunch = await make_item(MealType.LUNCH, name="Quinoa Salad")
    dinner = await make_item(MealType.DINNER, name="Lentil Soup")

    await place(service, staff, [lunch], JAN)
    await place(service, staff, [lunch, dinner], FEB)
    await place(service, staff, [dinner], FEB + timedelta(days=2))

    report = await reporting_service.get_sales_report(datetime(2026, 2, 1), datetime(2026, 2, 28))

    assert report["total_orders"] == 2
    assert report["total_revenue"] == 95.0
    assert report["total_meals_ordered"] == 3
    assert report["average_order_value"] == 47.5
    assert report["daily_sales"] == [
        {"date": "2026-02-20", "sales": 65.0},
        {"date": "2026-02-22", "sales": 30.0},
    ]
    assert report["revenue_by_meal_type"] == {"Dinner": 60.0, "Lunch": 35.0}
    assert report["top_items"][0] == {"name": "Lentil Soup", "count": 2}


async def test_buyers_aggregated_by_email(service, make_user, make_item):
    ravi = await make_user(UserRole.STAFF, name="Ravi", email="ravi@campus.edu")
    asha = await make_user(UserRole.STAFF, name="Asha", email="asha@campus.edu")
    lunch = await make_item(MealType.LUNCH)

    await place(service, ravi, [lunch], JAN)
    await place(service, ravi, [lunch], FEB)
    await place(service, asha, [lunch], FEB + timedelta(days=1))

    buyers = await reporting_service.get_all_buyers()

    assert [buyer.name for buyer in buyers] == ["Asha", "Ravi"]
    assert buyers[1].total_meal_cost == 70.0
    assert buyers[1].first_order_at == JAN
    assert buyers[1].to_dict()["id"] == "ravi@campus.edu"

    recent = await reporting_service.get_recent_buyers(1)
    assert [buyer.email for buyer in recent] == ["asha@campus.edu"]
