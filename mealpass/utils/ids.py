"""MealPass API - Identifier helpers."""

import uuid
from typing import Optional


def parse_uuid(value: str) -> Optional[uuid.UUID]:
    """Parse a UUID string, returning None when it is malformed."""
    try:
        return uuid.UUID(str(value))
    except (ValueError, AttributeError, TypeError):
        return None
