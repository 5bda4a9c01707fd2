"""
REST framework exception handler for storefront domain errors.

Registered as ``REST_FRAMEWORK["EXCEPTION_HANDLER"]``. Domain errors become
``{"detail": <message>}`` responses; everything else falls through to the
stock DRF handler.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .exceptions import (
    AccountSuspended,
    InvalidStateTransition,
    NotAuthorizedError,
    NotFoundError,
    PersistenceError,
    StorefrontError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Checked in order; the first matching class wins.
STATUS_CODES = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (InvalidStateTransition, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (NotAuthorizedError, status.HTTP_401_UNAUTHORIZED),
    (AccountSuspended, status.HTTP_403_FORBIDDEN),
    (PersistenceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_code_for(exc: StorefrontError) -> int:
    for error_class, code in STATUS_CODES:
        if isinstance(exc, error_class):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def storefront_exception_handler(exc, context):
    if not isinstance(exc, StorefrontError):
        return exception_handler(exc, context)

    code = status_code_for(exc)
    view = context.get("view")
    if code >= 500:
        logger.error("%s in %s: %s", type(exc).__name__, type(view).__name__, exc.message)
    else:
        logger.info("%s in %s: %s", type(exc).__name__, type(view).__name__, exc.message)
    return Response({"detail": exc.message}, status=code)
