from __future__ import annotations

from ..extensions import db
from sellerdesk.time_utils import money, to_utc_z, utcnow


class Refund(db.Model):
    """
    Refund request against a sale.

    LIFECYCLE:
    1. PENDING: created by the seller, sale untouched
    2. APPROVED: refund_date stamped, sale moved to `refunded`
    3. REJECTED: sale untouched

    APPROVED and REJECTED are terminal. The amount is checked against the
    sale amount once, at creation.
    """
    __tablename__ = "refunds"
    __table_args__ = (
        db.Index("ix_refunds_seller_created", "seller_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    seller_id = db.Column(db.Integer, db.ForeignKey("sellers.id"), nullable=False, index=True)

    amount = db.Column(db.Numeric(12, 2), nullable=False)
    reason = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(16), nullable=False, default="pending", index=True)  # pending, approved, rejected
    notes = db.Column(db.Text, nullable=True)
    refund_date = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    sale = db.relationship("Sale", backref=db.backref("refunds", lazy=True))

    def to_dict(self, include_sale: bool = False) -> dict:
        data = {
            "id": self.id,
            "sale_id": self.sale_id,
            "seller_id": self.seller_id,
            "amount": money(self.amount),
            "reason": self.reason,
            "status": self.status,
            "notes": self.notes,
            "refund_date": to_utc_z(self.refund_date),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_sale:
            data["sale"] = self.sale.to_dict() if self.sale else None
        return data


class Dispute(db.Model):
    """
    Customer dispute raised against a sale.

    Only the `open` status exists today. Opening a dispute does not change
    the sale's status.
    """
    __tablename__ = "disputes"
    __table_args__ = (
        db.Index("ix_disputes_seller_created", "seller_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)
    seller_id = db.Column(db.Integer, db.ForeignKey("sellers.id"), nullable=False, index=True)

    reason = db.Column(db.Text, nullable=False)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(16), nullable=False, default="open", index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    sale = db.relationship("Sale", backref=db.backref("disputes", lazy=True))
    customer = db.relationship("Customer")

    def to_dict(self, include_sale: bool = False) -> dict:
        data = {
            "id": self.id,
            "sale_id": self.sale_id,
            "customer_id": self.customer_id,
            "seller_id": self.seller_id,
            "reason": self.reason,
            "description": self.description,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_sale:
            data["sale"] = self.sale.to_dict() if self.sale else None
        return data
