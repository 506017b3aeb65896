# Overview: Flask API routes for customers and sales; parses input and returns JSON envelopes.

# backend/sellerdesk/routes/sales.py
"""
Customer and sale routes.

Sales are recorded here so refunds and disputes have something to point at.
Checkout and payment capture happen elsewhere.
"""
from flask import Blueprint, g, request

from ..decorators import require_seller
from ..services import sales_service
from .common import json_body, respond

customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")
sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@customers_bp.get("")
@require_seller
def list_customers_route():
    return respond(sales_service.list_customers, g.seller_id, failure_message="Failed to list customers")


@customers_bp.post("")
@require_seller
def create_customer_route():
    """Body: {"name": "Ada", "email": "ada@example.com"} (email optional, unique per seller)"""
    def _create():
        data = json_body()
        return sales_service.create_customer(g.seller_id, name=data.get("name"), email=data.get("email"))

    return respond(_create, failure_message="Failed to create customer", status_code=201)


@customers_bp.get("/<int:customer_id>")
@require_seller
def get_customer_route(customer_id: int):
    return respond(sales_service.get_customer, g.seller_id, customer_id, failure_message="Failed to load customer")


@sales_bp.get("")
@require_seller
def list_sales_route():
    """
    List the caller's sales, newest first.

    Query params:
    - status: str (optional) - active, completed, refunded or disputed
    - customer_id: int (optional)
    """
    return respond(
        sales_service.list_sales,
        g.seller_id,
        status=request.args.get("status"),
        customer_id=request.args.get("customer_id", type=int),
        failure_message="Failed to list sales",
    )


@sales_bp.post("")
@require_seller
def create_sale_route():
    """
    Record a sale.

    Request body:
    {
        "customer_id": 4,
        "amount": "50.00",
        "product_id": 9,          # or membership_id
        "status": "completed"     # optional
    }
    """
    def _create():
        data = json_body()
        kwargs = {}
        if data.get("status"):
            kwargs["status"] = data["status"]
        return sales_service.create_sale(
            g.seller_id,
            customer_id=data.get("customer_id"),
            amount=data.get("amount"),
            product_id=data.get("product_id"),
            membership_id=data.get("membership_id"),
            **kwargs,
        )

    return respond(_create, failure_message="Failed to create sale", status_code=201)


@sales_bp.get("/<int:sale_id>")
@require_seller
def get_sale_route(sale_id: int):
    return respond(sales_service.get_sale, g.seller_id, sale_id, failure_message="Failed to load sale")
