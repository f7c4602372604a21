"""MealPass API - Services Package."""

from .auth import (
    hash_password,
    verify_password,
    create_access_token,
    create_refresh_token,
    verify_token,
    verify_refresh_token,
)
from .email_service import email_service, EmailService
from .payment import PaymentGateway, PaymentResult, get_payment_gateway

__all__ = [
    "hash_password",
    "verify_password",
    "create_access_token",
    "create_refresh_token",
    "verify_token",
    "verify_refresh_token",
    "email_service",
    "EmailService",
    "PaymentGateway",
    "PaymentResult",
    "get_payment_gateway",
]
