# backend/sellerdesk/services/catalog_service.py
"""
Catalog Service: products, categories and tags.

All operations are seller-scoped. Rows are looked up by id and then checked
with require_owned(), so another seller's ids fail with Unauthorized rather
than leaking data.

CATEGORY FOREST:
- parent_id must reference a category of the same seller
- a category may not become its own ancestor (cycles rejected on write)
- deleting a category moves its children to the root
"""
from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Category, Product, ProductCategoryMapping, ProductTagMapping, Sale, Tag
from ..validation import ConflictError, ValidationError, slugify
from .persistence import KIND_CATEGORY, KIND_TAG, SqlAlchemyStore
from .tenant_service import require_owned

PRODUCT_MUTABLE_FIELDS = {"name", "description", "price", "status", "image_url"}
CATEGORY_MUTABLE_FIELDS = {"name", "slug", "parent_id", "description"}
TAG_MUTABLE_FIELDS = {"name", "slug"}


def _apply_patch(obj, patch: dict, allowed: set[str]) -> None:
    for k, v in patch.items():
        if k not in allowed:
            continue
        setattr(obj, k, v)


def _commit_or_conflict(message: str) -> None:
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(message)


# =============================================================================
# PRODUCTS
# =============================================================================

def list_products(seller_id: int, status: str | None = None) -> list[Product]:
    query = db.session.query(Product).filter(Product.seller_id == seller_id)
    if status:
        query = query.filter(Product.status == status)
    return query.order_by(Product.created_at.desc(), Product.id.desc()).all()


def get_product(seller_id: int, product_id: int) -> Product:
    return require_owned(db.session.get(Product, product_id), seller_id, "Product", product_id)


def create_product(seller_id: int, patch: dict) -> Product:
    product = Product(seller_id=seller_id)
    _apply_patch(product, patch, PRODUCT_MUTABLE_FIELDS)
    db.session.add(product)
    db.session.commit()
    return product


def update_product(seller_id: int, product_id: int, patch: dict) -> Product:
    product = get_product(seller_id, product_id)
    _apply_patch(product, patch, PRODUCT_MUTABLE_FIELDS)
    db.session.commit()
    return product


def delete_product(seller_id: int, product_id: int) -> None:
    """
    Delete a product and its category/tag mappings.

    Products that were sold stay: sales keep a reference to them, so they
    should be archived instead.
    """
    product = get_product(seller_id, product_id)
    if db.session.query(Sale.id).filter(Sale.product_id == product.id).first() is not None:
        raise ConflictError(f"Product {product.id} has sales; archive it instead")

    store = SqlAlchemyStore(db.session)
    with store.atomic():
        store.clear_mappings(product_id=product.id)
        db.session.delete(product)


def product_assignments(seller_id: int, product_id: int) -> dict:
    """Categories and tags currently assigned to a product."""
    product = get_product(seller_id, product_id)
    categories = (
        db.session.query(Category)
        .join(ProductCategoryMapping, ProductCategoryMapping.category_id == Category.id)
        .filter(ProductCategoryMapping.product_id == product.id)
        .order_by(Category.name.asc())
        .all()
    )
    tags = (
        db.session.query(Tag)
        .join(ProductTagMapping, ProductTagMapping.tag_id == Tag.id)
        .filter(ProductTagMapping.product_id == product.id)
        .order_by(Tag.name.asc())
        .all()
    )
    return {
        "product_id": product.id,
        "categories": [c.to_dict() for c in categories],
        "tags": [t.to_dict() for t in tags],
    }


# =============================================================================
# CATEGORIES
# =============================================================================

def _resolve_slug(patch: dict, name_required: bool) -> None:
    """Fill or normalize patch['slug'] from the name, the way the product form does."""
    if patch.get("slug"):
        patch["slug"] = slugify(patch["slug"])
    elif patch.get("name"):
        patch["slug"] = slugify(patch["name"])
    elif name_required:
        raise ValidationError("name is required")
    if "slug" in patch and not patch["slug"]:
        raise ValidationError("name must contain at least one letter or digit")


def list_categories(seller_id: int) -> list[Category]:
    return (
        db.session.query(Category)
        .filter(Category.seller_id == seller_id)
        .order_by(Category.name.asc(), Category.id.asc())
        .all()
    )


def get_category(seller_id: int, category_id: int) -> Category:
    return require_owned(db.session.get(Category, category_id), seller_id, "Category", category_id)


def _validate_parent(seller_id: int, category_id: int | None, parent_id: int | None) -> None:
    """
    Parent must exist under the same seller and must not sit below the
    category itself. Walks up from the proposed parent.
    """
    if parent_id is None:
        return

    parent = db.session.get(Category, parent_id)
    if parent is None or parent.seller_id != seller_id:
        raise ValidationError(f"Parent category {parent_id} not found")

    if category_id is None:
        return

    seen: set[int] = set()
    node = parent
    while node is not None and node.id not in seen:
        if node.id == category_id:
            raise ValidationError("A category cannot be its own ancestor")
        seen.add(node.id)
        node = db.session.get(Category, node.parent_id) if node.parent_id is not None else None


def create_category(seller_id: int, patch: dict) -> Category:
    patch = dict(patch)
    _resolve_slug(patch, name_required=True)
    _validate_parent(seller_id, None, patch.get("parent_id"))

    category = Category(seller_id=seller_id)
    _apply_patch(category, patch, CATEGORY_MUTABLE_FIELDS)
    db.session.add(category)
    _commit_or_conflict(f"Category slug already exists: {patch['slug']}")
    return category


def update_category(seller_id: int, category_id: int, patch: dict) -> Category:
    category = get_category(seller_id, category_id)
    patch = dict(patch)
    _resolve_slug(patch, name_required=False)
    if "parent_id" in patch:
        _validate_parent(seller_id, category.id, patch["parent_id"])

    _apply_patch(category, patch, CATEGORY_MUTABLE_FIELDS)
    _commit_or_conflict(f"Category slug already exists: {patch.get('slug', category.slug)}")
    return category


def delete_category(seller_id: int, category_id: int) -> None:
    category = get_category(seller_id, category_id)

    store = SqlAlchemyStore(db.session)
    with store.atomic():
        db.session.query(Category).filter(
            Category.seller_id == seller_id,
            Category.parent_id == category.id,
        ).update({Category.parent_id: None}, synchronize_session=False)
        store.clear_mappings(kind=KIND_CATEGORY, target_id=category.id)
        db.session.delete(category)


def category_tree(seller_id: int) -> list[dict]:
    """
    Nested category forest for the seller.

    Each node is the category dict plus a `children` list. A category whose
    parent is missing is treated as a root.
    """
    categories = list_categories(seller_id)
    nodes = {c.id: {**c.to_dict(), "children": []} for c in categories}

    roots: list[dict] = []
    for c in categories:
        node = nodes[c.id]
        if c.parent_id is not None and c.parent_id in nodes and c.parent_id != c.id:
            nodes[c.parent_id]["children"].append(node)
        else:
            roots.append(node)
    return roots


# =============================================================================
# TAGS
# =============================================================================

def list_tags(seller_id: int) -> list[Tag]:
    return (
        db.session.query(Tag)
        .filter(Tag.seller_id == seller_id)
        .order_by(Tag.name.asc(), Tag.id.asc())
        .all()
    )


def get_tag(seller_id: int, tag_id: int) -> Tag:
    return require_owned(db.session.get(Tag, tag_id), seller_id, "Tag", tag_id)


def create_tag(seller_id: int, patch: dict) -> Tag:
    patch = dict(patch)
    _resolve_slug(patch, name_required=True)

    tag = Tag(seller_id=seller_id)
    _apply_patch(tag, patch, TAG_MUTABLE_FIELDS)
    db.session.add(tag)
    _commit_or_conflict(f"Tag slug already exists: {patch['slug']}")
    return tag


def update_tag(seller_id: int, tag_id: int, patch: dict) -> Tag:
    tag = get_tag(seller_id, tag_id)
    patch = dict(patch)
    _resolve_slug(patch, name_required=False)

    _apply_patch(tag, patch, TAG_MUTABLE_FIELDS)
    _commit_or_conflict(f"Tag slug already exists: {patch.get('slug', tag.slug)}")
    return tag


def delete_tag(seller_id: int, tag_id: int) -> None:
    tag = get_tag(seller_id, tag_id)
    store = SqlAlchemyStore(db.session)
    with store.atomic():
        store.clear_mappings(kind=KIND_TAG, target_id=tag.id)
        db.session.delete(tag)
