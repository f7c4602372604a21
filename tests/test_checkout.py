# tests/test_checkout.py
from datetime import datetime, timedelta

import pytest

from mealpass.models.enums import MealType, UserRole
from mealpass.models.mongodb import CouponDocument, OrderDocument, UserDocument
from mealpass.services import coupon_service, menu_service, order_service
from mealpass.services.checkout import CheckoutService
from mealpass.utils.errors import (
    PaymentDeclinedError,
    PersistenceError,
    RestrictedError,
    ValidationError,
)

from conftest import FakeGateway, FakeNotifier

NOW = datetime(2026, 3, 10, 12, 0, 0)


async def reload(user):
    return await UserDocument.find_one(UserDocument.uid == user.uid)


async def test_student_checkout_breakfast_and_lunch(service, gateway, notifier, make_user, make_item):
    user = await make_user(UserRole.STUDENT)
    breakfast = await make_item(MealType.BREAKFAST)
    lunch = await make_item(MealType.LUNCH)

    result = await service.checkout(user.uid, user, [str(breakfast.uid), str(lunch.uid)], now=NOW)

    # 25 + 45, admin base price ignored
    assert result.total_cost == 70.0
    assert result.degraded is False
    assert result.coupon_code == result.order_id
    assert gateway.captures[0]["amount"] == 70.0

    order = await order_service.get_order(result.order_id)
    assert [item.price for item in order.items] == [25.0, 45.0]
    assert order.transaction_id == "txn_test_1"

    coupon = await coupon_service.get_coupon(result.order_id)
    assert coupon.is_valid is True
    assert coupon.used_at is None
    assert coupon.user_id == user.uid

    stored = await reload(user)
    assert stored.last_purchase_at == NOW
    assert stored.last_order_id == result.order_id

    assert notifier.sent[0]["recipient"] == user.email
    assert result.order_id in notifier.sent[0]["body"]


async def test_staff_prices_and_no_restriction(service, make_user, make_item):
    user = await make_user(UserRole.STAFF)
    lunch = await make_item(MealType.LUNCH)
    dinner = await make_item(MealType.DINNER)

    first = await service.checkout(user.uid, user, [str(lunch.uid), str(dinner.uid)], now=NOW)
    second = await service.checkout(user.uid, user, [str(lunch.uid)], now=NOW + timedelta(minutes=5))

    assert first.total_cost == 65.0
    assert second.total_cost == 35.0
    stored = await reload(user)
    assert stored.last_purchase_at is None


async def test_second_student_order_within_week_is_restricted(service, gateway, make_user, make_item):
    user = await make_user(UserRole.STUDENT)
    item = await make_item(MealType.DINNER)
    await service.checkout(user.uid, user, [str(item.uid)], now=NOW)

    with pytest.raises(RestrictedError) as exc_info:
        await service.checkout(user.uid, user, [str(item.uid)], now=NOW + timedelta(days=2))

    assert exc_info.value.next_allowed_at == NOW + timedelta(days=7)
    assert len(gateway.captures) == 1
    assert await OrderDocument.find_all().count() == 1


async def test_student_may_order_again_after_window(service, make_user, make_item):
    user = await make_user(UserRole.STUDENT)
    item = await make_item(MealType.DINNER)
    await service.checkout(user.uid, user, [str(item.uid)], now=NOW)

    result = await service.checkout(user.uid, user, [str(item.uid)], now=NOW + timedelta(days=7))

    assert result.degraded is False
    assert (await reload(user)).last_purchase_at == NOW + timedelta(days=7)


async def test_declined_payment_writes_nothing(notifier, make_user, make_item):
    service = CheckoutService(payment_gateway=FakeGateway(approve=False), notifier=notifier)
    user = await make_user(UserRole.STUDENT)
    item = await make_item(MealType.BREAKFAST)

    with pytest.raises(PaymentDeclinedError):
        await service.checkout(user.uid, user, [str(item.uid)], now=NOW)

    assert await OrderDocument.find_all().count() == 0
    assert await CouponDocument.find_all().count() == 0
    assert (await reload(user)).last_purchase_at is None
    assert notifier.sent == []


async def test_gateway_error_is_reported_as_decline(notifier, make_user, make_item):
    service = CheckoutService(payment_gateway=FakeGateway(error=RuntimeError("timeout")), notifier=notifier)
    user = await make_user(UserRole.STAFF)
    item = await make_item(MealType.BREAKFAST)

    with pytest.raises(PaymentDeclinedError):
        await service.checkout(user.uid, user, [str(item.uid)], now=NOW)

    assert await OrderDocument.find_all().count() == 0


async def test_order_write_failure_aborts(service, monkeypatch, make_user, make_item):
    async def broken_create_order(**kwargs):
        raise PersistenceError("Could not save order")

    monkeypatch.setattr(order_service, "create_order", broken_create_order)
    user = await make_user(UserRole.STUDENT)
    item = await make_item(MealType.LUNCH)

    with pytest.raises(PersistenceError):
        await service.checkout(user.uid, user, [str(item.uid)], now=NOW)

    assert await CouponDocument.find_all().count() == 0
    assert (await reload(user)).last_purchase_at is None


async def test_coupon_failure_degrades_but_keeps_order(service, monkeypatch, make_user, make_item):
    async def broken_issue(order, now=None):
        raise PersistenceError("Could not issue coupon")

    monkeypatch.setattr(coupon_service, "issue_coupon", broken_issue)
    user = await make_user(UserRole.STUDENT)
    item = await make_item(MealType.LUNCH)

    result = await service.checkout(user.uid, user, [str(item.uid)], now=NOW)

    assert result.degraded is True
    assert result.coupon_issued is False
    assert result.coupon_code is None
    assert result.to_dict()["status"] == "degraded"
    # Order stands and the remaining steps still ran
    assert await OrderDocument.find_all().count() == 1
    assert (await reload(user)).last_order_id == result.order_id

    missing = await coupon_service.list_orders_missing_coupon()
    assert [str(order.uid) for order in missing] == [result.order_id]


async def test_profile_failure_degrades_but_keeps_coupon(service, monkeypatch, make_user, make_item):
    async def broken_record(profile, order_id, now):
        raise RuntimeError("profile store unavailable")

    monkeypatch.setattr(service, "_record_purchase", broken_record)
    user = await make_user(UserRole.STUDENT)
    item = await make_item(MealType.BREAKFAST)

    result = await service.checkout(user.uid, user, [str(item.uid)], now=NOW)

    assert result.degraded is True
    assert result.profile_updated is False
    assert result.coupon_issued is True
    assert await coupon_service.get_coupon(result.order_id) is not None


async def test_notification_failure_is_not_degraded(gateway, make_user, make_item):
    service = CheckoutService(payment_gateway=gateway, notifier=FakeNotifier(error=RuntimeError("smtp down")))
    user = await make_user(UserRole.STUDENT)
    item = await make_item(MealType.DINNER)

    result = await service.checkout(user.uid, user, [str(item.uid)], now=NOW)

    assert result.notification_sent is False
    assert result.degraded is False
    assert result.to_dict()["status"] == "completed"


async def test_empty_selection_rejected(service, gateway, make_user):
    user = await make_user(UserRole.STUDENT)
    with pytest.raises(ValidationError):
        await service.checkout(user.uid, user, [], now=NOW)
    assert gateway.captures == []


async def test_unknown_and_duplicate_items_rejected(service, make_user, make_item):
    user = await make_user(UserRole.STUDENT)
    item = await make_item(MealType.LUNCH)

    with pytest.raises(ValidationError):
        await service.checkout(user.uid, user, [str(item.uid), "not-a-menu-item"], now=NOW)
    with pytest.raises(ValidationError):
        await service.checkout(user.uid, user, [str(item.uid), str(item.uid)], now=NOW)


async def test_profile_must_match_caller(service, make_user, make_item):
    owner = await make_user(UserRole.STUDENT)
    other = await make_user(UserRole.STUDENT)
    item = await make_item(MealType.LUNCH)

    with pytest.raises(ValidationError):
        await service.checkout(other.uid, owner, [str(item.uid)], now=NOW)


async def test_order_snapshot_survives_menu_delete(service, make_user, make_item):
    user = await make_user(UserRole.STAFF)
    item = await make_item(MealType.DINNER, name="Grilled Salmon")
    result = await service.checkout(user.uid, user, [str(item.uid)], now=NOW)

    await menu_service.delete_menu_item(str(item.uid))

    order = await order_service.get_order(result.order_id)
    assert order.items[0].name == "Grilled Salmon"
    assert order.items[0].price == 30.0
    assert order.total_cost == 30.0
