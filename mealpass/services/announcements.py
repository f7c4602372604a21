"""
MealPass API - Admin Announcements.

Resolves a recipient group to email addresses and sends one message per
recipient through the email service.
"""

import logging
from typing import Dict, List, Optional

from beanie.operators import In

from mealpass.models.mongodb import CouponDocument, UserDocument
from mealpass.services.email_service import EmailService, email_service
from mealpass.utils.errors import ValidationError

logger = logging.getLogger(__name__)

RECIPIENT_TYPES = ("all", "specific", "unredeemed")


async def resolve_recipients(recipient_type: str, recipient: Optional[str] = None) -> List[str]:
    """
    Email addresses for a recipient group.

    Args:
        recipient_type: ``all`` registered users, a ``specific`` address, or
            ``unredeemed`` (users holding at least one valid coupon).
        recipient: Address used when ``recipient_type`` is ``specific``.

    Raises:
        ValidationError: Unknown group or missing specific address.
    """
    if recipient_type not in RECIPIENT_TYPES:
        raise ValidationError("Unknown recipient type", detail=recipient_type)

    if recipient_type == "specific":
        if not recipient:
            raise ValidationError("Recipient email is required for a specific notification")
        return [recipient]

    if recipient_type == "all":
        users = await UserDocument.find_all().sort(+UserDocument.email).to_list()
        return [str(user.email) for user in users]

    coupons = await CouponDocument.find(CouponDocument.is_valid == True).to_list()
    user_ids = list({coupon.user_id for coupon in coupons})
    if not user_ids:
        return []
    users = await UserDocument.find(In(UserDocument.uid, user_ids)).sort(+UserDocument.email).to_list()
    return [str(user.email) for user in users]


async def send_announcement(
    recipient_type: str,
    subject: str,
    body: str,
    recipient: Optional[str] = None,
    notifier: Optional[EmailService] = None,
) -> Dict[str, object]:
    """
    Send an announcement to a recipient group.

    Returns:
        dict: Counts of recipients, sent and failed deliveries.
    """
    notifier = notifier or email_service
    recipients = await resolve_recipients(recipient_type, recipient)

    sent = 0
    for address in recipients:
        if await notifier.send(address, subject, body):
            sent += 1

    logger.info(f"Announcement '{subject}' to {recipient_type}: {sent}/{len(recipients)} sent")
    return {
        "recipient_type": recipient_type,
        "recipients": len(recipients),
        "sent": sent,
        "failed": len(recipients) - sent,
    }
