"""
Seller Scoping Helpers

Every owned row carries seller_id. Services load a row by id, then hand it to
require_owned() together with the caller's seller id before reading it back
or mutating it.

SECURITY INVARIANTS:
1. A missing row is NotFoundError
2. A row owned by another seller is UnauthorizedError with no detail
3. Cross-seller attempts are logged as security events

USAGE:
    refund = require_owned(store.get_refund(refund_id), seller_id, "Refund", refund_id)
"""

from __future__ import annotations

from typing import TypeVar

from .exceptions import NotFoundError, UnauthorizedError
from .security_service import log_security_event

T = TypeVar("T")


def require_owned(entity: T | None, seller_id: int, label: str, entity_id: int) -> T:
    """
    Return `entity` if it exists and belongs to `seller_id`.

    Raises:
        NotFoundError: entity is None
        UnauthorizedError: entity.seller_id != seller_id
    """
    if entity is None:
        raise NotFoundError(f"{label} {entity_id} not found")

    if entity.seller_id != seller_id:
        log_security_event(
            seller_id=seller_id,
            event_type="CROSS_SELLER_ACCESS_DENIED",
            success=False,
            resource=f"{label.lower()}:{entity_id}",
            reason=f"{label} {entity_id} belongs to seller {entity.seller_id}, not {seller_id}",
        )
        raise UnauthorizedError()

    return entity
