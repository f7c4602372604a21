"""
MealPass API - User Profile Writes.

Profile changes made outside checkout. Each write sets only the fields it
owns, so a profile loaded before a checkout can never overwrite the purchase
bookkeeping (``last_purchase_at``, ``last_order_id``) recorded by it.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from beanie.operators import Set

from mealpass.models.enums import UserRole
from mealpass.models.mongodb import UserDocument
from mealpass.utils.clock import utc_now

logger = logging.getLogger(__name__)


async def _set_fields(user: UserDocument, changes: Dict[Any, Any]) -> UserDocument:
    """Targeted ``$set`` on the stored user, mirrored onto the loaded object."""
    await UserDocument.find_one(UserDocument.uid == user.uid).update(Set(changes))
    for field, value in changes.items():
        setattr(user, str(field), value)
    return user


async def record_login(user: UserDocument, now: Optional[datetime] = None) -> UserDocument:
    return await _set_fields(user, {UserDocument.last_login_at: now or utc_now()})


async def rename(user: UserDocument, name: str, now: Optional[datetime] = None) -> UserDocument:
    """Change the display name."""
    now = now or utc_now()
    return await _set_fields(user, {UserDocument.name: name, UserDocument.updated_at: now})


async def change_role(user: UserDocument, role: UserRole, now: Optional[datetime] = None) -> UserDocument:
    """
    Assign a new role.

    The role is read per request, so the new price table and purchase
    restriction apply from the user's next request on.
    """
    now = now or utc_now()
    previous = user.role
    await _set_fields(user, {UserDocument.role: role, UserDocument.updated_at: now})
    logger.info(f"Role of user {user.uid} changed: {previous.value} -> {role.value}")
    return user
