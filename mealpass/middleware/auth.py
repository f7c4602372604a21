"""
MealPass API - Authentication Middleware.

JWT verification for protected routes.
"""

from typing import Optional

from fastapi import Request, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from mealpass.services.auth import verify_token


class JWTBearer(HTTPBearer):
    """
    JWT Bearer token authentication.

    Custom HTTPBearer that validates JWT tokens and yields the user id
    (the token ``sub`` claim).

    Attributes:
        auto_error: Whether to raise on missing or invalid tokens. With
            ``auto_error=False`` anonymous callers get ``None``.
    """

    def __init__(self, auto_error: bool = True):
        super().__init__(auto_error=auto_error)

    def _reject(self, status_code: int, detail: str) -> None:
        if self.auto_error:
            raise HTTPException(
                status_code=status_code,
                detail=detail,
                headers={"WWW-Authenticate": "Bearer"}
            )

    async def __call__(self, request: Request) -> Optional[str]:
        """
        Verify JWT token from Authorization header.

        Returns:
            Optional[str]: User ID from token if valid.

        Raises:
            HTTPException: 401/403 if token is invalid or missing.
        """
        credentials: Optional[HTTPAuthorizationCredentials] = await super().__call__(request)

        if not credentials:
            self._reject(status.HTTP_403_FORBIDDEN, "Invalid authorization credentials")
            return None

        if credentials.scheme.lower() != "bearer":
            self._reject(status.HTTP_403_FORBIDDEN, "Invalid authentication scheme")
            return None

        payload = verify_token(credentials.credentials)
        if not payload:
            self._reject(status.HTTP_401_UNAUTHORIZED, "Invalid or expired token")
            return None

        user_id = payload.get("sub")
        if not user_id:
            self._reject(status.HTTP_401_UNAUTHORIZED, "Invalid token payload")
            return None

        return user_id


# Global JWT bearer instances for dependency injection
jwt_bearer = JWTBearer()
optional_jwt_bearer = JWTBearer(auto_error=False)
