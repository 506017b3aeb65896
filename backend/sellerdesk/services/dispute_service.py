# Overview: Service-layer operations for disputes raised against sales.

from __future__ import annotations

from typing import Iterable

from ..models import Dispute
from ..validation import ValidationError, require_text
from .exceptions import NotFoundError
from .tenant_service import require_owned
from sellerdesk.time_utils import utcnow

DISPUTE_STATUS_OPEN = "open"

DISPUTE_STATUSES = (DISPUTE_STATUS_OPEN,)


def _clean_description(description: str | None) -> str | None:
    if description is None:
        return None
    return str(description).strip() or None


class DisputeManager:
    """
    Dispute operations for one seller.

    A dispute links a sale and the customer who bought it. Opening one does
    not change the sale. Only the `open` status exists.
    """

    def __init__(self, store, seller_id: int):
        self.store = store
        self.seller_id = seller_id

    def create(self, sale_id: int, customer_id: int, reason: str | None, description: str | None = None) -> Dispute:
        """
        Open a dispute for a sale.

        Raises:
            NotFoundError / UnauthorizedError: sale or customer missing or foreign
            ValidationError: empty reason, or the customer did not make the sale
        """
        sale = require_owned(self.store.get_sale(sale_id), self.seller_id, "Sale", sale_id)
        customer = require_owned(self.store.get_customer(customer_id), self.seller_id, "Customer", customer_id)

        if sale.customer_id != customer.id:
            raise ValidationError(f"Customer {customer.id} is not the customer of sale {sale.id}")

        reason = require_text(reason, "reason")

        now = utcnow()
        return self.store.create_dispute({
            "sale_id": sale.id,
            "customer_id": customer.id,
            "seller_id": self.seller_id,
            "reason": reason,
            "description": _clean_description(description),
            "status": DISPUTE_STATUS_OPEN,
            "created_at": now,
            "updated_at": now,
        })

    def get(self, dispute_id: int) -> Dispute:
        return require_owned(self.store.get_dispute(dispute_id), self.seller_id, "Dispute", dispute_id)

    def update_description(self, dispute_id: int, description: str | None) -> Dispute:
        self.get(dispute_id)
        updated = self.store.update_dispute(
            dispute_id, self.seller_id, {"description": _clean_description(description)}
        )
        if updated is None:
            raise NotFoundError(f"Dispute {dispute_id} not found")
        return updated

    def delete(self, dispute_id: int) -> None:
        self.get(dispute_id)
        if not self.store.delete_dispute(dispute_id, self.seller_id):
            raise NotFoundError(f"Dispute {dispute_id} not found")

    def list_disputes(self) -> list[Dispute]:
        return self.store.list_disputes(self.seller_id)

    def disputes_for_sale(self, sale_id: int) -> list[Dispute]:
        return self.store.list_disputes(self.seller_id, sale_id=sale_id)

    def disputes_for_customer(self, customer_id: int) -> list[Dispute]:
        return self.store.list_disputes(self.seller_id, customer_id=customer_id)


def dispute_stats(disputes: Iterable[Dispute]) -> dict:
    """Total and open dispute counts."""
    disputes = list(disputes)
    return {
        "total_disputes": len(disputes),
        "open_disputes": sum(1 for d in disputes if d.status == DISPUTE_STATUS_OPEN),
    }
