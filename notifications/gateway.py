"""
Outbound transactional messages.

``send`` is the transport contract: it delivers one message through Django's
configured email backend and raises ``NotificationError`` when delivery
fails. ``notify`` wraps it for callers whose own operation must succeed
regardless of delivery. It logs the failure and returns False.
"""

import logging
from typing import Optional

from django.conf import settings
from django.core.mail import EmailMultiAlternatives

from core.exceptions import NotificationError

logger = logging.getLogger(__name__)


def send(recipient_email: str, subject: str, plain_text_body: str, html_body: Optional[str] = None) -> None:
    if not recipient_email:
        raise NotificationError(f"No recipient for message {subject!r}")

    message = EmailMultiAlternatives(
        subject=subject,
        body=plain_text_body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[recipient_email],
    )
    if html_body:
        message.attach_alternative(html_body, "text/html")

    try:
        message.send(fail_silently=False)
    except Exception as exc:
        raise NotificationError(f"Could not deliver {subject!r} to {recipient_email}: {exc}") from exc


def notify(recipient_email: str, subject: str, plain_text_body: str, html_body: Optional[str] = None) -> bool:
    try:
        send(recipient_email, subject, plain_text_body, html_body)
    except NotificationError as exc:
        logger.error("Notification failed: %s", exc.message)
        return False
    logger.info("Sent %r to %s", subject, recipient_email)
    return True
