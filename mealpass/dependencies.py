"""
MealPass API - FastAPI Dependencies.

Dependency injection helpers for routes.
"""

from typing import Optional

from fastapi import Depends, HTTPException, status

from mealpass.middleware.auth import jwt_bearer, optional_jwt_bearer
from mealpass.models.enums import UserRole
from mealpass.models.mongodb import UserDocument
from mealpass.utils.ids import parse_uuid


async def get_current_user_id(
    user_id: str = Depends(jwt_bearer)
) -> str:
    """
    Get current authenticated user ID from JWT token.

    Raises:
        HTTPException: 401 if not authenticated.
    """
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"}
        )
    return user_id


async def _load_user(user_id: str) -> Optional[UserDocument]:
    uid = parse_uuid(user_id)
    if not uid:
        return None
    return await UserDocument.find_one(UserDocument.uid == uid)


async def get_current_user(
    user_id: str = Depends(get_current_user_id)
) -> UserDocument:
    """
    Get current authenticated user's profile from database.

    Raises:
        HTTPException: 404 if user not found in database.
    """
    user = await _load_user(user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return user


async def get_optional_user(
    user_id: Optional[str] = Depends(optional_jwt_bearer)
) -> Optional[UserDocument]:
    """Profile of the caller if a valid token was sent, else None."""
    if not user_id:
        return None
    return await _load_user(user_id)


def require_roles(*roles: UserRole):
    """
    Build a dependency that only admits the given roles.

    Example:
        @router.get("/admin-only")
        async def admin_only(user: UserDocument = Depends(require_roles(UserRole.ADMIN))):
            ...
    """
    async def _checker(user: UserDocument = Depends(get_current_user)) -> UserDocument:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(role.value for role in roles)}"
            )
        return user

    return _checker


require_admin = require_roles(UserRole.ADMIN)
require_point_of_service = require_roles(UserRole.ADMIN, UserRole.STAFF)
