from __future__ import annotations

from ..extensions import db
from sellerdesk.time_utils import money, to_utc_z, utcnow


class Product(db.Model):
    """
    Digital product owned by a seller.

    Categories and tags attach through the two mapping tables below; the
    product row itself carries no assignment data.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_seller_status", "seller_id", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    seller_id = db.Column(db.Integer, db.ForeignKey("sellers.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    status = db.Column(db.String(16), nullable=False, default="draft")  # draft, published, archived
    image_url = db.Column(db.String(1024), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "seller_id": self.seller_id,
            "name": self.name,
            "description": self.description,
            "price": money(self.price),
            "status": self.status,
            "image_url": self.image_url,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Category(db.Model):
    """
    Product category. parent_id makes the categories of one seller a forest.

    The parent must belong to the same seller and must not be a descendant
    of the category itself (checked in catalog_service, not here).
    """
    __tablename__ = "categories"
    __table_args__ = (
        db.UniqueConstraint("seller_id", "slug", name="uq_categories_seller_slug"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    seller_id = db.Column(db.Integer, db.ForeignKey("sellers.id"), nullable=False, index=True)

    name = db.Column(db.String(128), nullable=False)
    slug = db.Column(db.String(160), nullable=False)
    parent_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True, index=True)
    description = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "seller_id": self.seller_id,
            "name": self.name,
            "slug": self.slug,
            "parent_id": self.parent_id,
            "description": self.description,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Tag(db.Model):
    """Flat product label; no hierarchy."""
    __tablename__ = "tags"
    __table_args__ = (
        db.UniqueConstraint("seller_id", "slug", name="uq_tags_seller_slug"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    seller_id = db.Column(db.Integer, db.ForeignKey("sellers.id"), nullable=False, index=True)

    name = db.Column(db.String(128), nullable=False)
    slug = db.Column(db.String(160), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "seller_id": self.seller_id,
            "name": self.name,
            "slug": self.slug,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class ProductCategoryMapping(db.Model):
    """Join row product <-> category. The composite key makes each pair unique."""
    __tablename__ = "product_category_mappings"

    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), primary_key=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), primary_key=True, index=True)


class ProductTagMapping(db.Model):
    """Join row product <-> tag."""
    __tablename__ = "product_tag_mappings"

    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), primary_key=True)
    tag_id = db.Column(db.Integer, db.ForeignKey("tags.id"), primary_key=True, index=True)
