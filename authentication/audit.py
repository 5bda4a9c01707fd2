"""
Audit trail helper shared by the storefront views.

Writing the audit row must never break the request that triggered it, so
failures are logged and swallowed here.
"""

import logging

from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """
    Client IP address, honouring the first hop of X-Forwarded-For when a proxy
    or load balancer sits in front of the app.
    """
    x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")


def log_action(request, action, resource_type, resource_id, status, metadata=None, user=None):
    """
    Record one audit event.

    Args:
        request: HTTP request object
        action: Action type (CREATE, CANCEL, UPDATE_STATUS, LOGIN, etc.)
        resource_type: Type of resource (ORDER, PRODUCT, USER, etc.)
        resource_id: ID of the resource, if any
        status: SUCCESS, FAILURE or BLOCKED
        metadata: Additional event data
        user: Acting user when ``request.user`` is not yet authenticated (login)
    """
    if user is None and getattr(request, "user", None) is not None and request.user.is_authenticated:
        user = request.user
    try:
        AuditLog.objects.create(
            user=user,
            action=action,
            resource_type=resource_type,
            resource_id=str(resource_id) if resource_id else None,
            ip_address=get_client_ip(request),
            user_agent=request.META.get("HTTP_USER_AGENT", ""),
            request_path=request.path,
            request_method=request.method,
            status=status,
            metadata=metadata or {},
        )
    except Exception as e:
        logger.error(f"Error writing audit log for {action} {resource_type}: {e}")
