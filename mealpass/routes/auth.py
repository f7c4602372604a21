"""
MealPass API - Authentication Routes.

Endpoints for user registration, login, token refresh and the current user.
Uses Beanie ODM for async MongoDB operations.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from mealpass.dependencies import get_current_user
from mealpass.models.mongodb import UserDocument
from mealpass.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    TokenResponse,
    RefreshRequest,
)
from mealpass.services import user_service
from mealpass.services.auth import (
    hash_password,
    verify_password,
    create_access_token,
    create_refresh_token,
    verify_refresh_token,
)
from mealpass.utils.clock import utc_now
from mealpass.utils.ids import parse_uuid

logger = logging.getLogger(__name__)

router = APIRouter()


def _issue_tokens(user: UserDocument) -> TokenResponse:
    subject = {"sub": str(user.uid)}
    return TokenResponse(
        access_token=create_access_token(subject),
        token_type="bearer",
        user_id=str(user.uid),
        role=user.role,
        refresh_token=create_refresh_token(subject),
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest) -> TokenResponse:
    """
    Register a new user with email and password.

    New accounts start with no purchase history, so students may order
    immediately.

    Raises:
        HTTPException: 400 if email already exists.
    """
    existing = await UserDocument.find_one(UserDocument.email == request.email)
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    now = utc_now()
    user = UserDocument(
        email=request.email,
        password_hash=hash_password(request.password),
        name=request.name,
        role=request.role,
        created_at=now,
        updated_at=now,
    )
    await user.insert()
    logger.info(f"User registered: {user.uid} ({user.role.value})")

    return _issue_tokens(user)


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest) -> TokenResponse:
    """
    Login user with email and password.

    Raises:
        HTTPException: 401 if credentials are invalid.
    """
    user = await UserDocument.find_one(UserDocument.email == request.email)
    if not user or not verify_password(request.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    await user_service.record_login(user)

    return _issue_tokens(user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(request: RefreshRequest) -> TokenResponse:
    """
    Refresh access token using refresh token (token rotation).

    Raises:
        HTTPException: 401 if refresh token is invalid or expired.
    """
    payload = verify_refresh_token(request.refresh_token)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token"
        )

    uid = parse_uuid(payload.get("sub"))
    if not uid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload"
        )

    # Verify user still exists
    user = await UserDocument.find_one(UserDocument.uid == uid)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    return _issue_tokens(user)


@router.get("/me")
async def me(user: UserDocument = Depends(get_current_user)) -> dict:
    """Identity of the authenticated caller."""
    return {
        "user_id": str(user.uid),
        "email": user.email,
        "name": user.name,
        "role": user.role.value,
    }
