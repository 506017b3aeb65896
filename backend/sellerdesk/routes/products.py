# Overview: Flask API routes for products operations; parses input and returns JSON envelopes.

# backend/sellerdesk/routes/products.py
"""
Product management routes.

MULTI-TENANT: All product operations are scoped to the caller's seller id
(g.seller_id, set by @require_seller).

ASSIGNMENTS: PUT /<id>/assignments takes the full desired category and tag
sets and only writes the difference.
"""
from flask import Blueprint, g, request

from ..decorators import require_seller
from ..models import Product
from ..services import catalog_service
from ..services.results import OperationResult
from ..validation import (
    ModelValidationPolicy,
    enforce_rules_product,
    validate_payload,
)
from .common import assignment_reconciler, json_body, respond

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "price", "status", "image_url"},
    required_on_create={"name"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_seller
def list_products_route():
    """
    List the caller's products, newest first.

    Query params:
    - status: str (optional) - draft, published or archived
    """
    status = request.args.get("status")
    return respond(
        catalog_service.list_products, g.seller_id, status=status,
        failure_message="Failed to list products",
    )


@products_bp.post("")
@require_seller
def create_product_route():
    """Create a product. Price is a decimal string or number, 0 <= price <= 9,999,999.99."""
    def _create():
        patch = validate_payload(model=Product, payload=json_body(), policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
        return catalog_service.create_product(g.seller_id, patch)

    return respond(_create, failure_message="Failed to create product", status_code=201)


@products_bp.get("/<int:product_id>")
@require_seller
def get_product_route(product_id: int):
    return respond(catalog_service.get_product, g.seller_id, product_id, failure_message="Failed to load product")


@products_bp.put("/<int:product_id>")
@require_seller
def update_product_route(product_id: int):
    def _update():
        patch = validate_payload(model=Product, payload=json_body(), policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
        return catalog_service.update_product(g.seller_id, product_id, patch)

    return respond(_update, failure_message="Failed to update product")


@products_bp.delete("/<int:product_id>")
@require_seller
def delete_product_route(product_id: int):
    """
    Delete a product and its category/tag mappings.

    Returns 409 when the product has sales.
    """
    def _delete():
        catalog_service.delete_product(g.seller_id, product_id)
        return {"id": product_id, "deleted": True}

    return respond(_delete, failure_message="Failed to delete product")


@products_bp.get("/<int:product_id>/assignments")
@require_seller
def get_assignments_route(product_id: int):
    return respond(
        catalog_service.product_assignments, g.seller_id, product_id,
        failure_message="Failed to load product assignments",
    )


@products_bp.put("/<int:product_id>/assignments")
@require_seller
def put_assignments_route(product_id: int):
    """
    Move a product's categories and tags to the desired sets.

    Request body:
    {
        "category_ids": [3, 5],
        "tag_ids": [7]
    }

    A missing key means "none". Ids must belong to the caller.

    Returns:
        200: data lists the added and removed mappings
        400: malformed or unknown ids
        500: some writes failed; data.failed lists them, data.rolled_back
             tells whether the applied ones were undone
    """
    def _reconcile():
        data = json_body()
        result = assignment_reconciler().reconcile(
            product_id, data.get("category_ids"), data.get("tag_ids")
        )
        if not result.success:
            return OperationResult(
                success=False,
                data=result.to_dict(),
                error={
                    "type": "PersistenceFailure",
                    "message": f"{len(result.failed)} assignment change(s) failed",
                },
                status_code=500,
            )
        return result.to_dict()

    return respond(_reconcile, failure_message="Failed to update product assignments")
