"""
MealPass API - Authentication Schemas.

Pydantic schemas for authentication requests and responses.
"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator

from mealpass.models.enums import UserRole


class RegisterRequest(BaseModel):
    """
    Schema for user registration request.

    Attributes:
        email: User's email address.
        password: User's password (min 6 characters).
        name: User's full name.
        role: Student or Staff. Admin accounts are promoted by an admin.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "asha@campus.edu",
                "password": "securepassword123",
                "name": "Asha Rao",
                "role": "Student"
            }
        }
    )

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=6, description="User's password (minimum 6 characters)")
    name: str = Field(..., min_length=2, description="User's full name")
    role: UserRole = Field(default=UserRole.STUDENT, description="Student or Staff")

    @field_validator("role")
    @classmethod
    def no_self_service_admin(cls, value: UserRole) -> UserRole:
        if value == UserRole.ADMIN:
            raise ValueError("Admin accounts cannot be self-registered")
        return value


class LoginRequest(BaseModel):
    """Schema for user login request."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., description="User's password")


class TokenResponse(BaseModel):
    """
    Schema for authentication token response.

    Attributes:
        access_token: JWT access token.
        token_type: Token type (always "bearer").
        user_id: Authenticated user's ID.
        role: Authenticated user's role.
        refresh_token: JWT refresh token for token rotation.
    """

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    user_id: str = Field(..., description="Authenticated user's ID")
    role: UserRole = Field(..., description="Authenticated user's role")
    refresh_token: Optional[str] = Field(None, description="JWT refresh token for token rotation")


class RefreshRequest(BaseModel):
    """Schema for token refresh request."""

    refresh_token: str = Field(..., description="Refresh token")
