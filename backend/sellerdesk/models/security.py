from __future__ import annotations

from ..extensions import db
from sellerdesk.time_utils import to_utc_z, utcnow


class SecurityEvent(db.Model):
    """
    Security event audit log with seller context.

    WHY: Track cross-seller access attempts. A seller reaching for another
    seller's refund, sale or product is either a bug or probing.

    IMMUTABLE: Never update. Only maintenance cleanup deletes old rows.
    """
    __tablename__ = "security_events"
    __table_args__ = (
        db.Index("ix_security_events_seller_occurred", "seller_id", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Acting seller (nullable for requests without a resolvable identity)
    seller_id = db.Column(db.Integer, db.ForeignKey("sellers.id"), nullable=True, index=True)

    event_type = db.Column(db.String(64), nullable=False, index=True)  # CROSS_SELLER_ACCESS_DENIED, ...
    resource = db.Column(db.String(128), nullable=True)  # e.g., "/api/refunds/7/approve" or "refund:7"
    action = db.Column(db.String(64), nullable=True)     # e.g., "POST"

    success = db.Column(db.Boolean, nullable=False, index=True)
    reason = db.Column(db.Text, nullable=True)

    ip_address = db.Column(db.String(45), nullable=True)

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "seller_id": self.seller_id,
            "event_type": self.event_type,
            "resource": self.resource,
            "action": self.action,
            "success": self.success,
            "reason": self.reason,
            "ip_address": self.ip_address,
            "occurred_at": to_utc_z(self.occurred_at),
        }
