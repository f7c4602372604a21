"""
MealPass API - Payment Gateway.

Captures meal order payments through Stripe. When no Stripe key is
configured (local development, demos) a simulated gateway approves any
non-negative amount.
"""

import asyncio
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Dict, Optional

import stripe

from settings import settings

logger = logging.getLogger(__name__)


@dataclass
class PaymentResult:
    """Result of a payment capture attempt."""
    success: bool
    transaction_id: Optional[str] = None
    message: Optional[str] = None


class PaymentGateway:
    """Interface for payment capture."""

    async def capture(
        self,
        amount: float,
        currency: str,
        metadata: Optional[Dict[str, str]] = None
    ) -> PaymentResult:
        raise NotImplementedError


class StripePaymentGateway(PaymentGateway):
    """Service for capturing one-off payments with Stripe PaymentIntents."""

    def __init__(self, api_key: str, payment_method: str):
        """
        Initialize Stripe.

        Args:
            api_key: Stripe secret key.
            payment_method: Payment method id to confirm intents with.
        """
        stripe.api_key = api_key
        self.payment_method = payment_method

    async def capture(
        self,
        amount: float,
        currency: str,
        metadata: Optional[Dict[str, str]] = None
    ) -> PaymentResult:
        """
        Create and confirm a PaymentIntent for ``amount``.

        Args:
            amount: Amount in major units (e.g. rupees).
            currency: ISO currency code.
            metadata: Extra key/values stored on the intent.

        Returns:
            PaymentResult: success with the intent id, or a decline reason.
        """
        if amount < 0:
            return PaymentResult(success=False, message="Invalid payment amount.")

        try:
            intent = await asyncio.to_thread(
                stripe.PaymentIntent.create,
                amount=int(round(amount * 100)),
                currency=currency.lower(),
                payment_method=self.payment_method,
                confirm=True,
                automatic_payment_methods={"enabled": True, "allow_redirects": "never"},
                metadata=metadata or {},
            )
        except stripe.CardError as e:
            logger.warning(f"Card declined: {e.user_message}")
            return PaymentResult(success=False, message=e.user_message or "Card declined")
        except stripe.StripeError as e:
            logger.error(f"Stripe error capturing payment: {str(e)}")
            return PaymentResult(success=False, message="Payment provider error")

        if intent.status != "succeeded":
            logger.warning(f"PaymentIntent {intent.id} ended in status {intent.status}")
            return PaymentResult(
                success=False,
                transaction_id=intent.id,
                message=f"Payment not completed ({intent.status})"
            )

        logger.info(f"Captured {amount} {currency} as PaymentIntent {intent.id}")
        return PaymentResult(success=True, transaction_id=intent.id, message="Payment successful")


class SimulatedPaymentGateway(PaymentGateway):
    """Approves every non-negative amount. For development only."""

    async def capture(
        self,
        amount: float,
        currency: str,
        metadata: Optional[Dict[str, str]] = None
    ) -> PaymentResult:
        logger.info(f"Simulating payment for: {amount} {currency}")
        if amount < 0:
            return PaymentResult(success=False, message="Invalid payment amount.")
        return PaymentResult(
            success=True,
            transaction_id=f"txn_{int(time.time() * 1000)}_{secrets.token_hex(4)}",
            message="Payment successful",
        )


def get_payment_gateway() -> PaymentGateway:
    """Pick the gateway from configuration."""
    if settings.payments_live:
        return StripePaymentGateway(
            api_key=settings.STRIPE_SECRET_KEY,
            payment_method=settings.STRIPE_TEST_PAYMENT_METHOD,
        )
    logger.warning("STRIPE_SECRET_KEY not configured - using simulated payments")
    return SimulatedPaymentGateway()
