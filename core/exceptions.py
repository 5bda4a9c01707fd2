"""
Domain exceptions shared by the storefront apps.

Services raise these before touching the database so that a failed
operation leaves every record as it was. The REST layer translates them
into HTTP responses in ``core.exception_handler``.
"""

from typing import Optional


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    default_message = "The request could not be completed."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(StorefrontError):
    """Raised for malformed or missing input."""

    default_message = "Invalid input."


class EmptyOrderError(ValidationError):
    """Raised when an order is placed without any line items."""

    default_message = "No order items"


class InsufficientStockError(ValidationError):
    """Raised when oversell protection is on and a line asks for more than is in stock."""

    def __init__(self, product_name: str, available: int, requested: int):
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {product_name}. "
            f"Available: {available}, Requested: {requested}"
        )


class NotFoundError(StorefrontError):
    """Raised when a referenced record does not exist."""

    def __init__(self, resource: str = "Resource", identifier=None):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found")


class NotAuthorizedError(StorefrontError):
    """Raised when the acting user may not perform an owner-scoped action."""

    default_message = "Not authorized"


class InvalidStateTransition(StorefrontError):
    """Raised when an order status change is not on the lifecycle graph."""

    def __init__(self, current: str, target: str, message: Optional[str] = None):
        self.current = current
        self.target = target
        super().__init__(message or f"Cannot change order status from {current} to {target}.")


class AccountSuspended(StorefrontError):
    """Raised when a blocked account tries to authenticate."""

    default_message = "Your account has been suspended. Please contact support."


class PersistenceError(StorefrontError):
    """Raised when the database rejects a write."""

    default_message = "The record could not be saved. Please try again."


class NotificationError(StorefrontError):
    """Raised by the notification transport; callers log it and carry on."""

    default_message = "The notification could not be sent."
