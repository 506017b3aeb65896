"""
Refund Lifecycle Service

WHY: Refunds are the one place where a seller action changes another entity:
approving a refund moves the originating sale to `refunded`. The refund and
the sale must therefore be written in a fixed order with clear failure
reporting.

LIFECYCLE:
1. create   -> PENDING   (sale untouched)
2. approve  -> APPROVED  (refund_date stamped, then sale -> refunded)
3. reject   -> REJECTED  (sale untouched)

APPROVED and REJECTED are terminal. Notes can be edited in any status.
Deleting a refund never reverts a sale status set by an earlier approval.

The amount is validated against the sale amount once, at creation. It is not
re-checked at approval time.

A sale that is already refunded accepts no new refunds. This is stricter than
a plain amount check, which would let a second refund stack on the first.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable

from ..models import Refund
from ..models.sales import SALE_STATUS_REFUNDED
from ..validation import ValidationError, parse_decimal, require_text
from .exceptions import InvalidTransitionError, NotFoundError, PersistenceFailure
from .tenant_service import require_owned
from sellerdesk.time_utils import money, utcnow

logger = logging.getLogger(__name__)


# =============================================================================
# REFUND STATUS CONSTANTS
# =============================================================================

REFUND_STATUS_PENDING = "pending"
REFUND_STATUS_APPROVED = "approved"
REFUND_STATUS_REJECTED = "rejected"

REFUND_TRANSITIONS = {
    REFUND_STATUS_PENDING: {REFUND_STATUS_APPROVED, REFUND_STATUS_REJECTED},
    REFUND_STATUS_APPROVED: set(),
    REFUND_STATUS_REJECTED: set(),
}

MIN_REFUND_AMOUNT = Decimal("0.01")


def _clean_notes(notes: str | None) -> str | None:
    if notes is None:
        return None
    return str(notes).strip()


class RefundManager:
    """Refund operations for one seller over an injected store."""

    def __init__(self, store, seller_id: int, *, atomic: bool = False):
        self.store = store
        self.seller_id = seller_id
        self.atomic = atomic

    # =========================================================================
    # CREATION
    # =========================================================================

    def create(self, sale_id: int, amount, reason: str | None, notes: str | None = None) -> Refund:
        """
        Create a PENDING refund against one of the seller's sales.

        Raises:
            NotFoundError / UnauthorizedError: sale missing or foreign
            ValidationError: empty reason, amount outside (0, sale.amount],
                or the sale is already refunded
        """
        sale = require_owned(self.store.get_sale(sale_id), self.seller_id, "Sale", sale_id)

        reason = require_text(reason, "reason")

        try:
            value = parse_decimal(amount, "amount")
        except ValidationError:
            value = None
        if value is None or value <= 0 or value > sale.amount:
            raise ValidationError(
                f"Refund amount must be between ${money(MIN_REFUND_AMOUNT)} and ${money(sale.amount)}"
            )

        if sale.status == SALE_STATUS_REFUNDED:
            raise ValidationError(f"Sale {sale.id} has already been refunded")

        now = utcnow()
        return self.store.create_refund({
            "sale_id": sale.id,
            "seller_id": self.seller_id,
            "amount": value,
            "reason": reason,
            "status": REFUND_STATUS_PENDING,
            "notes": _clean_notes(notes),
            "created_at": now,
            "updated_at": now,
        })

    # =========================================================================
    # APPROVAL / REJECTION
    # =========================================================================

    def get(self, refund_id: int) -> Refund:
        return require_owned(self.store.get_refund(refund_id), self.seller_id, "Refund", refund_id)

    def _require_transition(self, refund: Refund, target: str) -> None:
        if target not in REFUND_TRANSITIONS.get(refund.status, set()):
            raise InvalidTransitionError(
                f"Cannot move refund {refund.id} from {refund.status} to {target}"
            )

    def _update(self, refund_id: int, patch: dict) -> Refund:
        updated = self.store.update_refund(refund_id, self.seller_id, patch)
        if updated is None:
            raise NotFoundError(f"Refund {refund_id} not found")
        return updated

    def approve(self, refund_id: int, notes: str | None = None) -> Refund:
        """
        Approve a PENDING refund and mark its sale refunded.

        The refund write happens first; if it fails the sale is never touched.
        If the sale write fails afterwards:
        - atomic: both writes are rolled back
        - best-effort: the refund stays approved and the PersistenceFailure
          lists "refund_status" in `completed`
        """
        refund = self.get(refund_id)
        self._require_transition(refund, REFUND_STATUS_APPROVED)

        patch = {"status": REFUND_STATUS_APPROVED, "refund_date": utcnow()}
        if notes is not None:
            patch["notes"] = _clean_notes(notes)

        if self.atomic:
            with self.store.atomic():
                updated = self._update(refund_id, patch)
                self._mark_sale_refunded(updated.sale_id)
            return updated

        updated = self._update(refund_id, patch)
        try:
            self._mark_sale_refunded(updated.sale_id)
        except PersistenceFailure as exc:
            logger.warning(
                "Refund %s approved but sale %s status update failed: %s",
                refund_id, updated.sale_id, exc,
            )
            raise PersistenceFailure(
                f"Refund {refund_id} was approved but sale {updated.sale_id} "
                f"could not be marked refunded: {exc}",
                completed=("refund_status",),
            ) from exc
        return updated

    def _mark_sale_refunded(self, sale_id: int) -> None:
        sale = self.store.update_sale_status(sale_id, self.seller_id, SALE_STATUS_REFUNDED)
        if sale is None:
            raise PersistenceFailure(f"Sale {sale_id} not found for seller")

    def reject(self, refund_id: int, notes: str | None = None) -> Refund:
        """Reject a PENDING refund. The sale is not touched."""
        refund = self.get(refund_id)
        self._require_transition(refund, REFUND_STATUS_REJECTED)

        patch = {"status": REFUND_STATUS_REJECTED}
        if notes is not None:
            patch["notes"] = _clean_notes(notes)
        return self._update(refund_id, patch)

    def update_notes(self, refund_id: int, notes: str | None) -> Refund:
        self.get(refund_id)
        return self._update(refund_id, {"notes": _clean_notes(notes)})

    def delete(self, refund_id: int) -> None:
        """Remove the refund row. A sale already marked refunded stays refunded."""
        self.get(refund_id)
        if not self.store.delete_refund(refund_id, self.seller_id):
            raise NotFoundError(f"Refund {refund_id} not found")

    # =========================================================================
    # QUERIES
    # =========================================================================

    def list_refunds(self) -> list[Refund]:
        """All of the seller's refunds, newest first."""
        return self.store.list_refunds(self.seller_id)

    def refunds_for_sale(self, sale_id: int) -> list[Refund]:
        return self.store.list_refunds(self.seller_id, sale_id=sale_id)

    def refunds_for_customer(self, customer_id: int) -> list[Refund]:
        return self.store.list_refunds(self.seller_id, customer_id=customer_id)


def refund_stats(refunds: Iterable[Refund]) -> dict:
    """
    Counts by status plus the total amount of APPROVED refunds only.

    Returns:
        - total_refunds, pending_refunds, approved_refunds, rejected_refunds
        - total_amount: Decimal sum over approved refunds
    """
    refunds = list(refunds)
    approved = [r for r in refunds if r.status == REFUND_STATUS_APPROVED]
    return {
        "total_refunds": len(refunds),
        "pending_refunds": sum(1 for r in refunds if r.status == REFUND_STATUS_PENDING),
        "approved_refunds": len(approved),
        "rejected_refunds": sum(1 for r in refunds if r.status == REFUND_STATUS_REJECTED),
        "total_amount": sum((Decimal(str(r.amount)) for r in approved), Decimal("0")),
    }
