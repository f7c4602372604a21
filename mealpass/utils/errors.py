"""
MealPass API - Custom Exception Classes.

Exception hierarchy for application error handling.
"""

from datetime import datetime
from typing import Any, Dict, Optional


class MealPassException(Exception):
    """
    Base exception class for MealPass application.

    All custom exceptions should inherit from this class.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code for the error.
        detail: Additional error details.
    """

    def __init__(
        self,
        message: str = "An error occurred",
        status_code: int = 500,
        detail: Optional[str] = None
    ):
        """
        Initialize MealPassException.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code (default 500).
            detail: Additional error details.
        """
        self.message = message
        self.status_code = status_code
        self.detail = detail or message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the JSON error response."""
        return {"error": self.message, "detail": self.detail}


class AuthenticationError(MealPassException):
    """
    Exception raised for authentication failures.

    Used when:
    - Invalid credentials
    - Expired tokens
    - Missing authentication
    """

    def __init__(
        self,
        message: str = "Authentication failed",
        detail: Optional[str] = None
    ):
        super().__init__(message=message, status_code=401, detail=detail)


class NotFoundError(MealPassException):
    """
    Exception raised when a resource is not found.

    Used when:
    - User not found
    - Menu item, order or coupon does not exist
    """

    def __init__(
        self,
        message: str = "Resource not found",
        detail: Optional[str] = None
    ):
        super().__init__(message=message, status_code=404, detail=detail)


class ValidationError(MealPassException):
    """
    Exception raised for input validation failures.

    Used when:
    - Empty meal selection
    - Negative price or calories
    - Unknown or duplicate menu item ids
    """

    def __init__(
        self,
        message: str = "Validation error",
        detail: Optional[str] = None
    ):
        super().__init__(message=message, status_code=400, detail=detail)


class ForbiddenError(MealPassException):
    """
    Exception raised for authorization failures.

    Used when:
    - User lacks the required role
    - Access denied to another user's order
    """

    def __init__(
        self,
        message: str = "Access denied",
        detail: Optional[str] = None
    ):
        super().__init__(message=message, status_code=403, detail=detail)


class ConflictError(MealPassException):
    """
    Exception raised for resource conflicts.

    Used when:
    - Duplicate entry
    - Resource already exists
    """

    def __init__(
        self,
        message: str = "Resource conflict",
        detail: Optional[str] = None
    ):
        super().__init__(message=message, status_code=409, detail=detail)


class RestrictedError(MealPassException):
    """
    Raised when the weekly purchase restriction denies a checkout.

    Attributes:
        next_allowed_at: Earliest time the user may order again.
    """

    def __init__(self, next_allowed_at: datetime):
        self.next_allowed_at = next_allowed_at
        super().__init__(
            message="Weekly purchase limit reached",
            status_code=403,
            detail=f"Next order allowed at {next_allowed_at.isoformat()}"
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["next_allowed_at"] = self.next_allowed_at.isoformat()
        return data


class PaymentDeclinedError(MealPassException):
    """Raised when the payment gateway declines a capture. Nothing is written."""

    def __init__(self, reason: Optional[str] = None):
        self.reason = reason or "Payment was declined"
        super().__init__(
            message="Payment declined",
            status_code=402,
            detail=self.reason
        )


class PersistenceError(MealPassException):
    """Raised when a required database write fails."""

    def __init__(
        self,
        message: str = "Could not save data",
        detail: Optional[str] = None
    ):
        super().__init__(message=message, status_code=503, detail=detail)


class CouponAlreadyUsedError(MealPassException):
    """
    Raised at the HTTP layer when a coupon was already redeemed.

    Kept distinct from NotFoundError so point-of-service staff can tell a
    mistyped code apart from a consumed one.
    """

    def __init__(self, code: str, used_at: Optional[datetime], details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.used_at = used_at
        self.details = details or {}
        when = used_at.isoformat() if used_at else "an unknown date"
        super().__init__(
            message="Coupon has already been used",
            status_code=409,
            detail=f"Coupon {code} was redeemed on {when}"
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["code"] = self.code
        data["used_at"] = self.used_at.isoformat() if self.used_at else None
        data["details"] = self.details
        return data
