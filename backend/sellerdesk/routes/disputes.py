# Overview: Flask API routes for dispute operations; parses input and returns JSON envelopes.

# backend/sellerdesk/routes/disputes.py
"""
Dispute API Routes

Disputes are opened by the seller on behalf of the customer who made the
sale. Only the description is editable after creation.
"""

from flask import Blueprint, request

from ..decorators import require_seller
from ..services.dispute_service import dispute_stats
from .common import dispute_manager, json_body, respond


disputes_bp = Blueprint("disputes", __name__, url_prefix="/api/disputes")


@disputes_bp.get("")
@require_seller
def list_disputes_route():
    """
    List the caller's disputes, newest first.

    Query params:
    - sale_id: int (optional)
    - customer_id: int (optional)
    """
    sale_id = request.args.get("sale_id", type=int)
    customer_id = request.args.get("customer_id", type=int)

    def _list():
        manager = dispute_manager()
        if sale_id is not None:
            disputes = manager.disputes_for_sale(sale_id)
        elif customer_id is not None:
            disputes = manager.disputes_for_customer(customer_id)
        else:
            disputes = manager.list_disputes()
        return [d.to_dict(include_sale=True) for d in disputes]

    return respond(_list, failure_message="Failed to list disputes")


@disputes_bp.post("")
@require_seller
def create_dispute_route():
    """
    Open a dispute.

    Request body:
    {
        "sale_id": 12,
        "customer_id": 4,
        "reason": "Charge not recognized",
        "description": "optional"
    }
    """
    def _create():
        data = json_body()
        return dispute_manager().create(
            sale_id=data.get("sale_id"),
            customer_id=data.get("customer_id"),
            reason=data.get("reason"),
            description=data.get("description"),
        )

    return respond(_create, failure_message="Failed to create dispute", status_code=201)


@disputes_bp.get("/stats")
@require_seller
def dispute_stats_route():
    return respond(
        lambda: dispute_stats(dispute_manager().list_disputes()),
        failure_message="Failed to compute dispute stats",
    )


@disputes_bp.get("/<int:dispute_id>")
@require_seller
def get_dispute_route(dispute_id: int):
    return respond(
        lambda: dispute_manager().get(dispute_id).to_dict(include_sale=True),
        failure_message="Failed to load dispute",
    )


@disputes_bp.patch("/<int:dispute_id>")
@require_seller
def update_dispute_route(dispute_id: int):
    """Replace the dispute description. Body: {"description": "..."}"""
    def _update():
        data = json_body()
        return dispute_manager().update_description(dispute_id, data.get("description"))

    return respond(_update, failure_message="Failed to update dispute")


@disputes_bp.delete("/<int:dispute_id>")
@require_seller
def delete_dispute_route(dispute_id: int):
    def _delete():
        dispute_manager().delete(dispute_id)
        return {"id": dispute_id, "deleted": True}

    return respond(_delete, failure_message="Failed to delete dispute")
