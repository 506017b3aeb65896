# Overview: Flask API routes for refund operations; parses input and returns JSON envelopes.

# backend/sellerdesk/routes/refunds.py
"""
Refund API Routes

DESIGN:
- Create refunds against one of the caller's sales (status: pending)
- Approve (marks the sale refunded) or reject pending refunds
- Notes editable in any status; delete never reverts the sale

SECURITY:
- Every route requires the seller identity header
- Refunds of other sellers answer 403 "Not permitted"
"""

from flask import Blueprint, request

from ..decorators import require_seller
from ..services.refund_service import refund_stats
from .common import json_body, refund_manager, respond


refunds_bp = Blueprint("refunds", __name__, url_prefix="/api/refunds")


@refunds_bp.get("")
@require_seller
def list_refunds_route():
    """
    List the caller's refunds, newest first.

    Query params:
    - sale_id: int (optional) - only refunds of this sale
    - customer_id: int (optional) - only refunds of this customer's sales
    """
    sale_id = request.args.get("sale_id", type=int)
    customer_id = request.args.get("customer_id", type=int)

    def _list():
        manager = refund_manager()
        if sale_id is not None:
            refunds = manager.refunds_for_sale(sale_id)
        elif customer_id is not None:
            refunds = manager.refunds_for_customer(customer_id)
        else:
            refunds = manager.list_refunds()
        return [r.to_dict(include_sale=True) for r in refunds]

    return respond(_list, failure_message="Failed to list refunds")


@refunds_bp.post("")
@require_seller
def create_refund_route():
    """
    Create a pending refund.

    Request body:
    {
        "sale_id": 12,
        "amount": "25.00",
        "reason": "Customer could not download the file",
        "notes": "optional"
    }

    Returns:
        201: refund created
        400: empty reason or amount outside (0, sale amount]
        403: sale belongs to another seller
        404: sale not found
    """
    def _create():
        data = json_body()
        return refund_manager().create(
            sale_id=data.get("sale_id"),
            amount=data.get("amount"),
            reason=data.get("reason"),
            notes=data.get("notes"),
        )

    return respond(_create, failure_message="Failed to create refund", status_code=201)


@refunds_bp.get("/stats")
@require_seller
def refund_stats_route():
    """Counts by status and the approved refund total for the caller."""
    def _stats():
        stats = refund_stats(refund_manager().list_refunds())
        stats["total_amount"] = f"{stats['total_amount']:.2f}"
        return stats

    return respond(_stats, failure_message="Failed to compute refund stats")


@refunds_bp.get("/<int:refund_id>")
@require_seller
def get_refund_route(refund_id: int):
    return respond(
        lambda: refund_manager().get(refund_id).to_dict(include_sale=True),
        failure_message="Failed to load refund",
    )


@refunds_bp.post("/<int:refund_id>/approve")
@require_seller
def approve_refund_route(refund_id: int):
    """
    Approve a pending refund and mark its sale refunded.

    Request body (optional):
    {
        "notes": "Approved after checking download logs"
    }

    Returns:
        200: refund approved, sale refunded
        409: refund is not pending
        500: store failure; error.completed lists steps already applied
    """
    def _approve():
        data = json_body()
        return refund_manager().approve(refund_id, notes=data.get("notes"))

    return respond(_approve, failure_message="Failed to approve refund")


@refunds_bp.post("/<int:refund_id>/reject")
@require_seller
def reject_refund_route(refund_id: int):
    """Reject a pending refund. The sale is not touched."""
    def _reject():
        data = json_body()
        return refund_manager().reject(refund_id, notes=data.get("notes"))

    return respond(_reject, failure_message="Failed to reject refund")


@refunds_bp.patch("/<int:refund_id>/notes")
@require_seller
def update_refund_notes_route(refund_id: int):
    def _update():
        data = json_body()
        return refund_manager().update_notes(refund_id, data.get("notes"))

    return respond(_update, failure_message="Failed to update refund notes")


@refunds_bp.delete("/<int:refund_id>")
@require_seller
def delete_refund_route(refund_id: int):
    def _delete():
        refund_manager().delete(refund_id)
        return {"id": refund_id, "deleted": True}

    return respond(_delete, failure_message="Failed to delete refund")
