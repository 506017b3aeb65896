from __future__ import annotations

from ..extensions import db
from sellerdesk.time_utils import to_utc_z, utcnow


class Customer(db.Model):
    """
    Buyer of a seller's products or memberships.

    Customers are scoped to sellers via seller_id; the same person buying
    from two sellers is two rows.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.UniqueConstraint("seller_id", "email", name="uq_customers_seller_email"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    seller_id = db.Column(db.Integer, db.ForeignKey("sellers.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "seller_id": self.seller_id,
            "name": self.name,
            "email": self.email,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
