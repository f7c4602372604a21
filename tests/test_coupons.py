# tests/test_coupons.py
import asyncio
from datetime import datetime, timedelta

import pytest

from mealpass.models.enums import MealType, RedemptionStatus, UserRole
from mealpass.models.mongodb import CouponDocument
from mealpass.services import coupon_service
from mealpass.utils.errors import NotFoundError, ValidationError

NOW = datetime(2026, 3, 10, 12, 0, 0)


@pytest.fixture
def placed_order(service, make_user, make_item):
    async def _place(role=UserRole.STUDENT, meal_types=(MealType.BREAKFAST, MealType.LUNCH)):
        user = await make_user(role)
        items = [await make_item(meal_type) for meal_type in meal_types]
        result = await service.checkout(user.uid, user, [str(item.uid) for item in items], now=NOW)
        return user, result

    return _place


async def test_redeem_then_already_used(placed_order):
    user, result = await placed_order()
    redeemed_at = NOW + timedelta(hours=1)

    first = await coupon_service.redeem(result.coupon_code, now=redeemed_at)
    second = await coupon_service.redeem(result.coupon_code, now=redeemed_at + timedelta(hours=1))

    assert first.status == RedemptionStatus.REDEEMED
    assert first.used_at == redeemed_at
    assert first.details["user_id"] == str(user.uid)
    assert first.details["order_id"] == result.order_id

    assert second.status == RedemptionStatus.ALREADY_USED
    assert second.used_at == redeemed_at

    coupon = await coupon_service.get_coupon(result.coupon_code)
    assert coupon.is_valid is False
    assert coupon.used_at == redeemed_at


async def test_unknown_code_not_found(db):
    result = await coupon_service.redeem("00000000-0000-0000-0000-000000000000")
    assert result.status == RedemptionStatus.NOT_FOUND
    assert result.used_at is None


async def test_codes_are_case_sensitive_and_not_trimmed(placed_order):
    _, result = await placed_order()
    code = result.coupon_code

    assert (await coupon_service.redeem(code.upper())).status == RedemptionStatus.NOT_FOUND
    assert (await coupon_service.redeem(f" {code} ")).status == RedemptionStatus.NOT_FOUND
    # Neither attempt consumed the coupon
    assert (await coupon_service.redeem(code)).status == RedemptionStatus.REDEEMED


@pytest.mark.parametrize("code", ["", "   "])
async def test_blank_code_rejected(db, code):
    with pytest.raises(ValidationError):
        await coupon_service.redeem(code)


async def test_concurrent_redemption_has_one_winner(placed_order):
    _, result = await placed_order()

    outcomes = await asyncio.gather(*[coupon_service.redeem(result.coupon_code) for _ in range(5)])

    statuses = [outcome.status for outcome in outcomes]
    assert statuses.count(RedemptionStatus.REDEEMED) == 1
    assert statuses.count(RedemptionStatus.ALREADY_USED) == 4

    winner = next(outcome for outcome in outcomes if outcome.redeemed)
    assert all(outcome.used_at == winner.used_at for outcome in outcomes)


async def test_coupon_description(placed_order):
    _, mixed = await placed_order(meal_types=(MealType.BREAKFAST, MealType.LUNCH))
    _, single = await placed_order(role=UserRole.STAFF, meal_types=(MealType.DINNER,))

    mixed_coupon = await coupon_service.get_coupon(mixed.coupon_code)
    single_coupon = await coupon_service.get_coupon(single.coupon_code)

    assert mixed_coupon.plan_name == "2 meal(s)"
    assert mixed_coupon.meal_type is None
    assert single_coupon.meal_type == MealType.DINNER
    assert single_coupon.description == "Dinner special"


async def test_list_user_coupons(placed_order):
    user, result = await placed_order()
    coupons = await coupon_service.list_user_coupons(user.uid)
    assert [coupon.code for coupon in coupons] == [result.coupon_code]


async def test_reissue_is_idempotent(placed_order):
    _, result = await placed_order()
    await CouponDocument.find_one(CouponDocument.code == result.coupon_code).delete()

    assert [str(order.uid) for order in await coupon_service.list_orders_missing_coupon()] == [result.order_id]

    first = await coupon_service.reissue_coupon(result.order_id)
    second = await coupon_service.reissue_coupon(result.order_id)

    assert first.code == second.code == result.order_id
    assert first.is_valid is True
    assert await CouponDocument.find_all().count() == 1
    assert await coupon_service.list_orders_missing_coupon() == []


async def test_reissue_unknown_order(db):
    with pytest.raises(NotFoundError):
        await coupon_service.reissue_coupon("not-an-order")


async def test_missing_coupon_scan_across_batches(placed_order):
    placed = [await placed_order(meal_types=(MealType.DINNER,)) for _ in range(3)]
    missing_ids = [placed[0][1].order_id, placed[2][1].order_id]
    for order_id in missing_ids:
        await CouponDocument.find_one(CouponDocument.code == order_id).delete()

    for batch_size in (1, 2, 500):
        missing = await coupon_service.list_orders_missing_coupon(batch_size=batch_size)
        assert sorted(str(order.uid) for order in missing) == sorted(missing_ids)
