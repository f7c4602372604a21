"""
MealPass Email Service.

Handles transactional email delivery (order confirmations, admin
announcements) using the Resend API.
"""

import asyncio
import html
import logging
from typing import Optional

import resend
from settings import settings

logger = logging.getLogger(__name__)


class EmailService:
    """Email service for order confirmations and announcements."""

    def __init__(self, api_key: Optional[str] = None, sender: Optional[str] = None):
        """Initialize Resend API with API key."""
        self.api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self.sender = sender or settings.EMAIL_FROM
        resend.api_key = self.api_key

    @staticmethod
    def create_email_html(subject: str, body: str) -> str:
        """
        Wrap a plain-text body in a minimal HTML layout.

        Args:
            subject: Email subject, used as the heading
            body: Plain-text body; blank lines separate paragraphs

        Returns:
            HTML string
        """
        paragraphs = "".join(
            f'<p style="color: #334155; font-size: 15px; line-height: 1.6; margin: 0 0 16px 0;">{html.escape(chunk)}</p>'
            for chunk in body.split("\n\n") if chunk.strip()
        )
        return f"""
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>{html.escape(subject)}</title>
</head>
<body style="margin: 0; padding: 32px 16px; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; background-color: #F8FAFC;">
    <table width="100%" cellpadding="0" cellspacing="0">
        <tr>
            <td align="center">
                <table width="600" cellpadding="0" cellspacing="0" style="max-width: 600px; background: #FFFFFF; border-radius: 12px; padding: 32px;">
                    <tr><td><h2 style="color: #0F766E; margin: 0 0 24px 0;">{html.escape(subject)}</h2></td></tr>
                    <tr><td>{paragraphs}</td></tr>
                </table>
            </td>
        </tr>
    </table>
</body>
</html>
        """

    async def send(self, recipient: str, subject: str, body: str) -> bool:
        """
        Send an email. Never raises.

        Args:
            recipient: Recipient email address
            subject: Subject line
            body: Plain-text body

        Returns:
            True if the email was handed to Resend, False otherwise
        """
        if not self.api_key:
            logger.warning(f"RESEND_API_KEY not configured - email to {recipient} not sent: {subject}")
            return False

        try:
            params = {
                "from": self.sender,
                "to": [recipient],
                "subject": subject,
                "text": body,
                "html": self.create_email_html(subject, body),
            }
            await asyncio.to_thread(resend.Emails.send, params)
            logger.info(f"Email sent to {recipient}: {subject}")
            return True
        except Exception as e:
            # Log error but don't expose details to user
            logger.error(f"Failed to send email to {recipient}: {str(e)}")
            return False


def order_confirmation_message(
    name: Optional[str],
    meal_names: str,
    total_cost: float,
    currency: str,
    order_id: str,
) -> str:
    """Body of the checkout confirmation email."""
    order_link = f"{settings.FRONTEND_URL.rstrip('/')}/order-details/{order_id}"
    return (
        f"Dear {name or 'Customer'}, your order for {meal_names} "
        f"(Total: {currency} {total_cost:.2f}) was successful.\n\n"
        f"Your coupon code is your order ID: {order_id}. "
        f"Show it at the counter to collect your meals.\n\n"
        f"Order details: {order_link}"
    )


# Singleton instance
email_service = EmailService()
