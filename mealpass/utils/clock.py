"""MealPass API - Time helpers."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Current UTC time as a naive datetime at millisecond precision.

    MongoDB stores datetimes as naive UTC milliseconds, so values produced
    here compare equal to what is read back from the database.
    """
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)
