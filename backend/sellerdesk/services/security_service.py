# Overview: Security event audit trail for seller-scoped access checks.

from __future__ import annotations

from datetime import timedelta

from flask import has_request_context, request

from ..extensions import db
from ..models import SecurityEvent
from sellerdesk.time_utils import utcnow


def log_security_event(
    seller_id: int | None,
    event_type: str,
    success: bool,
    resource: str | None = None,
    action: str | None = None,
    reason: str | None = None,
) -> SecurityEvent:
    """
    Log security event to the audit trail.

    When called inside a request, the request path, method and client address
    fill in whatever the caller left empty.

    event_type examples:
    - CROSS_SELLER_ACCESS_DENIED
    - SELLER_CONTEXT_MISSING
    """
    ip_address = None
    if has_request_context():
        resource = resource or request.path
        action = action or request.method
        ip_address = request.remote_addr

    event = SecurityEvent(
        seller_id=seller_id,
        event_type=event_type,
        resource=resource,
        action=action,
        success=success,
        reason=reason,
        ip_address=ip_address,
        occurred_at=utcnow(),
    )

    db.session.add(event)
    db.session.commit()

    return event


def cleanup_security_events(*, retention_days: int = 90) -> int:
    """Delete security events older than retention_days."""
    cutoff = utcnow() - timedelta(days=retention_days)
    deleted = db.session.query(SecurityEvent).filter(
        SecurityEvent.occurred_at < cutoff
    ).delete()
    db.session.commit()
    return deleted
