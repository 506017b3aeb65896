from __future__ import annotations

from ..extensions import db
from sellerdesk.time_utils import to_utc_z, utcnow


class Seller(db.Model):
    """
    Tenant root: every seller owns its catalog, customers, sales and claims.

    DESIGN:
    - Sellers are the tenant boundary
    - Every owned row carries seller_id
    - All queries and writes are scoped by seller_id equality
    - No data may cross seller boundaries
    """
    __tablename__ = "sellers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Seller id={self.id} email={self.email!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }
