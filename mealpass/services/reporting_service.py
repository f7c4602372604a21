"""
MealPass API - Admin Reporting Service.

Aggregates over the order ledger for the admin dashboard, sales reports
and the buyer list.
"""

from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from mealpass.models.mongodb import OrderDocument
from mealpass.services import order_service


@dataclass
class BuyerSummary:
    """A buyer derived from their orders."""
    email: str
    name: str
    total_meal_cost: float
    first_order_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.email,
            "email": self.email,
            "name": self.name,
            "total_meal_cost": round(self.total_meal_cost, 2),
            "join_date": self.first_order_at.isoformat(),
        }


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert aware datetimes to naive UTC (the storage convention)."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _month_label(moment: datetime) -> str:
    return moment.strftime("%b %Y")


async def get_dashboard_data(recent_count: int = 5) -> Dict[str, Any]:
    """
    Overall dashboard statistics.

    Returns:
        Dict with ``stats`` (revenue, orders, meals), ``sales_chart``
        (monthly revenue, oldest first) and ``recent_sales``.
    """
    orders = await order_service.list_orders(newest_first=True)

    total_revenue = 0.0
    total_meals = 0
    monthly: Dict[str, float] = defaultdict(float)
    month_order: Dict[str, datetime] = {}

    for order in orders:
        total_revenue += order.total_cost
        total_meals += len(order.items)
        label = _month_label(order.created_at)
        monthly[label] += order.total_cost
        month_order[label] = order.created_at.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    sales_chart = [
        {"month": label, "sales": round(monthly[label], 2)}
        for label in sorted(monthly, key=lambda key: month_order[key])
    ]

    recent_sales = [
        {
            "id": str(order.uid),
            "user": order.user_name or order.user_email,
            "items_summary": f"{len(order.items)} meal(s)",
            "amount": order.total_cost,
            "date": order.created_at.isoformat(),
        }
        for order in orders[:recent_count]
    ]

    return {
        "stats": {
            "total_revenue": round(total_revenue, 2),
            "total_orders": len(orders),
            "total_meals_ordered": total_meals,
        },
        "sales_chart": sales_chart,
        "recent_sales": recent_sales,
    }


async def get_sales_report(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    top_n: int = 5,
) -> Dict[str, Any]:
    """
    Sales over a date range (inclusive).

    Returns:
        Totals, daily revenue series, revenue per meal type and best sellers.
    """
    start, end = to_naive_utc(start), to_naive_utc(end)
    orders = await order_service.list_orders(start=start, end=end, newest_first=False)

    daily: Dict[str, float] = defaultdict(float)
    by_meal_type: Dict[str, float] = defaultdict(float)
    item_counts: Counter = Counter()

    for order in orders:
        daily[order.created_at.date().isoformat()] += order.total_cost
        for item in order.items:
            by_meal_type[item.meal_type.value] += item.price
            item_counts[item.name] += 1

    revenue = round(sum(order.total_cost for order in orders), 2)
    return {
        "range": {
            "from": start.isoformat() if start else None,
            "to": end.isoformat() if end else None,
        },
        "total_revenue": revenue,
        "total_orders": len(orders),
        "total_meals_ordered": sum(item_counts.values()),
        "average_order_value": round(revenue / len(orders), 2) if orders else 0.0,
        "daily_sales": [{"date": day, "sales": round(amount, 2)} for day, amount in sorted(daily.items())],
        "revenue_by_meal_type": {key: round(value, 2) for key, value in sorted(by_meal_type.items())},
        "top_items": [{"name": name, "count": count} for name, count in item_counts.most_common(top_n)],
    }


def summarize_buyers(orders: List[OrderDocument]) -> List[BuyerSummary]:
    """Group orders by email. The longest display name seen wins."""
    buyers: Dict[str, BuyerSummary] = {}
    for order in orders:
        email = str(order.user_email)
        existing = buyers.get(email)
        if existing is None:
            buyers[email] = BuyerSummary(
                email=email,
                name=order.user_name or email,
                total_meal_cost=order.total_cost,
                first_order_at=order.created_at,
            )
            continue

        existing.total_meal_cost += order.total_cost
        if order.user_name and len(order.user_name) > len(existing.name):
            existing.name = order.user_name
        if order.created_at < existing.first_order_at:
            existing.first_order_at = order.created_at

    return sorted(buyers.values(), key=lambda buyer: buyer.name.lower())


async def get_all_buyers() -> List[BuyerSummary]:
    orders = await order_service.list_orders(newest_first=False)
    return summarize_buyers(orders)


async def get_recent_buyers(count: int) -> List[BuyerSummary]:
    buyers = await get_all_buyers()
    return sorted(buyers, key=lambda buyer: buyer.first_order_at, reverse=True)[:count]
