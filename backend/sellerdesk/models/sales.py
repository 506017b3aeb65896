from __future__ import annotations

from ..extensions import db
from sellerdesk.time_utils import money, to_utc_z, utcnow

SALE_STATUS_ACTIVE = "active"
SALE_STATUS_COMPLETED = "completed"
SALE_STATUS_REFUNDED = "refunded"
SALE_STATUS_DISPUTED = "disputed"

SALE_STATUSES = (
    SALE_STATUS_ACTIVE,
    SALE_STATUS_COMPLETED,
    SALE_STATUS_REFUNDED,
    SALE_STATUS_DISPUTED,
)


class Sale(db.Model):
    """
    A customer's purchase of a product or a membership.

    Refunds and disputes hang off a sale. The only field the refund workflow
    writes is `status`, and only towards `refunded`.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_seller_status_created", "seller_id", "status", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    seller_id = db.Column(db.Integer, db.ForeignKey("sellers.id"), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)

    # Exactly one of these is normally set. Memberships are managed outside
    # this service, so membership_id is a plain reference.
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=True, index=True)
    membership_id = db.Column(db.Integer, nullable=True, index=True)

    amount = db.Column(db.Numeric(12, 2), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=SALE_STATUS_COMPLETED, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    customer = db.relationship("Customer", backref=db.backref("sales", lazy=True))
    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "seller_id": self.seller_id,
            "customer_id": self.customer_id,
            "product_id": self.product_id,
            "membership_id": self.membership_id,
            "amount": money(self.amount),
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
