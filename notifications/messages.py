"""
Message builders for the storefront's notification triggers.

Each ``send_*`` function renders the plain-text and HTML bodies for one
trigger and hands them to ``gateway.notify``; they return whether delivery
succeeded and never raise for delivery or rendering failures.
"""

import logging

from django.conf import settings
from django.template import TemplateDoesNotExist, TemplateSyntaxError
from django.template.loader import render_to_string

from . import gateway

logger = logging.getLogger(__name__)


def format_naira(amount: int) -> str:
    return f"₦{amount:,}"


def _frontend_url(path: str) -> str:
    return f"{settings.FRONTEND_URL}/#/{path.lstrip('/')}"


def _deliver(recipient_email, subject, plain_text_body, template_name, context) -> bool:
    """Render the HTML body and send; a broken template means no email, never an error."""
    try:
        html_body = render_to_string(template_name, context)
    except (TemplateDoesNotExist, TemplateSyntaxError) as exc:
        logger.error("Could not render %s for %r: %s", template_name, subject, exc)
        return False
    return gateway.notify(recipient_email, subject, plain_text_body, html_body)


def send_order_confirmation(order) -> bool:
    items = [
        {
            "name": item.name,
            "image": item.image,
            "unit": item.unit,
            "quantity": item.quantity,
            "price": format_naira(item.price),
        }
        for item in order.items.all()
    ]
    context = {
        "order": order,
        "items": items,
        "total": format_naira(order.total),
        "subtotal": format_naira(order.subtotal),
        "shipping_cost": format_naira(order.shipping_cost),
        "tax_amount": format_naira(order.tax_amount),
    }
    return _deliver(
        order.customer_email,
        f"Order Confirmation #{order.pk}",
        f"Thank you for your order #{order.pk}. Total: {format_naira(order.total)}",
        "notifications/order_confirmation.html",
        context,
    )


def send_shipment_notice(order) -> bool:
    address = getattr(order, "shipping_address", None)
    context = {
        "order": order,
        "customer_name": order.customer_name,
        "address": address,
        "contact_phone": address.phone if address else "",
        "track_url": _frontend_url("contact"),
    }
    return _deliver(
        order.customer_email,
        f"Order Shipped #{order.pk}",
        f"Your order #{order.pk} has been shipped!",
        "notifications/order_shipped.html",
        context,
    )


def send_verification_email(user, token: str, resend: bool = False) -> bool:
    verify_url = _frontend_url(f"verify-email/{token}")
    context = {"name": user.name, "verify_url": verify_url, "resend": resend}
    return _deliver(
        user.email,
        "Verify your Farmers Market account",
        f"Verify your account here: {verify_url}",
        "notifications/verify_email.html",
        context,
    )


def send_password_reset(user, token: str) -> bool:
    reset_url = _frontend_url(f"reset-password/{token}")
    text = (
        "You are receiving this email because you (or someone else) has requested the reset "
        "of a password. Please click on the link below to set a new password:\n\n"
        f"{reset_url}\n\nIf you did not request this, please ignore this email."
    )
    return _deliver(
        user.email,
        "Password Reset Request - Farmers Market",
        text,
        "notifications/password_reset.html",
        {"reset_url": reset_url},
    )
