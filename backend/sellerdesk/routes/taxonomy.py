# Overview: Flask API routes for categories and tags; parses input and returns JSON envelopes.

# backend/sellerdesk/routes/taxonomy.py
"""
Category and tag routes.

Slugs are derived from the name when omitted and are unique per seller.
Categories form a forest through parent_id; GET /api/categories/tree
returns it nested.
"""
from flask import Blueprint, g

from ..decorators import require_seller
from ..models import Category, Tag
from ..services import catalog_service
from ..validation import ModelValidationPolicy, validate_payload
from .common import json_body, respond

CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields={"name", "slug", "parent_id", "description"},
    required_on_create={"name"},
)

TAG_POLICY = ModelValidationPolicy(
    writable_fields={"name", "slug"},
    required_on_create={"name"},
)

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")
tags_bp = Blueprint("tags", __name__, url_prefix="/api/tags")


# =============================================================================
# CATEGORIES
# =============================================================================

@categories_bp.get("")
@require_seller
def list_categories_route():
    return respond(catalog_service.list_categories, g.seller_id, failure_message="Failed to list categories")


@categories_bp.get("/tree")
@require_seller
def category_tree_route():
    return respond(catalog_service.category_tree, g.seller_id, failure_message="Failed to build category tree")


@categories_bp.post("")
@require_seller
def create_category_route():
    def _create():
        patch = validate_payload(model=Category, payload=json_body(), policy=CATEGORY_POLICY, partial=False)
        return catalog_service.create_category(g.seller_id, patch)

    return respond(_create, failure_message="Failed to create category", status_code=201)


@categories_bp.put("/<int:category_id>")
@require_seller
def update_category_route(category_id: int):
    """Update a category. Moving it below one of its descendants answers 400."""
    def _update():
        patch = validate_payload(model=Category, payload=json_body(), policy=CATEGORY_POLICY, partial=True)
        return catalog_service.update_category(g.seller_id, category_id, patch)

    return respond(_update, failure_message="Failed to update category")


@categories_bp.delete("/<int:category_id>")
@require_seller
def delete_category_route(category_id: int):
    def _delete():
        catalog_service.delete_category(g.seller_id, category_id)
        return {"id": category_id, "deleted": True}

    return respond(_delete, failure_message="Failed to delete category")


# =============================================================================
# TAGS
# =============================================================================

@tags_bp.get("")
@require_seller
def list_tags_route():
    return respond(catalog_service.list_tags, g.seller_id, failure_message="Failed to list tags")


@tags_bp.post("")
@require_seller
def create_tag_route():
    def _create():
        patch = validate_payload(model=Tag, payload=json_body(), policy=TAG_POLICY, partial=False)
        return catalog_service.create_tag(g.seller_id, patch)

    return respond(_create, failure_message="Failed to create tag", status_code=201)


@tags_bp.put("/<int:tag_id>")
@require_seller
def update_tag_route(tag_id: int):
    def _update():
        patch = validate_payload(model=Tag, payload=json_body(), policy=TAG_POLICY, partial=True)
        return catalog_service.update_tag(g.seller_id, tag_id, patch)

    return respond(_update, failure_message="Failed to update tag")


@tags_bp.delete("/<int:tag_id>")
@require_seller
def delete_tag_route(tag_id: int):
    def _delete():
        catalog_service.delete_tag(g.seller_id, tag_id)
        return {"id": tag_id, "deleted": True}

    return respond(_delete, failure_message="Failed to delete tag")
