"""
MealPass API - Purchase-Eligibility Gate.

Students may place one order per rolling purchase window. Every other role
is never restricted.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from mealpass.models.enums import UserRole
from settings import settings


@dataclass(frozen=True)
class Eligibility:
    """Result of an eligibility check."""
    allowed: bool
    next_allowed_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "allowed": self.allowed,
            "next_allowed_at": self.next_allowed_at.isoformat() if self.next_allowed_at else None,
        }


def purchase_window() -> timedelta:
    return timedelta(days=settings.PURCHASE_WINDOW_DAYS)


def is_eligible(profile: Any, now: datetime) -> Eligibility:
    """
    Decide whether the profile may place a new order at ``now``.

    Pure: reads ``role`` and ``last_purchase_at`` and never writes. The
    durable update of ``last_purchase_at`` happens in checkout after the
    order is stored.

    Args:
        profile: Object with ``role`` and ``last_purchase_at`` attributes.
        now: Current time (naive UTC).

    Returns:
        Eligibility: ``allowed`` plus ``next_allowed_at`` when a window applies.
    """
    if profile.role != UserRole.STUDENT:
        return Eligibility(allowed=True)

    if profile.last_purchase_at is None:
        return Eligibility(allowed=True)

    next_allowed_at = profile.last_purchase_at + purchase_window()
    return Eligibility(allowed=now >= next_allowed_at, next_allowed_at=next_allowed_at)
