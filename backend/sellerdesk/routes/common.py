# Overview: Shared helpers for API routes: JSON body parsing, envelope responses, manager wiring.

from __future__ import annotations

from flask import current_app, g, request

from ..extensions import db
from ..services.assignment_service import AssignmentReconciler
from ..services.dispute_service import DisputeManager
from ..services.persistence import SqlAlchemyStore
from ..services.refund_service import RefundManager
from ..services.results import OperationResult
from ..validation import ValidationError


def json_body() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return payload


def respond(func, *args, failure_message: str, status_code: int = 200, **kwargs):
    """
    Run a service call and turn it into an envelope response.

    Service errors map to their HTTP status; anything unexpected is logged
    and reported as a generic 500 without internals.
    """
    try:
        result = OperationResult.capture(func, *args, status_code=status_code, **kwargs)
    except Exception:
        db.session.rollback()
        current_app.logger.exception(failure_message)
        result = OperationResult(
            success=False,
            error={"type": "Error", "message": "Internal server error"},
            status_code=500,
        )
    return result.to_response()


def _atomic() -> bool:
    return bool(current_app.config.get("MULTI_WRITE_ATOMIC", True))


def refund_manager() -> RefundManager:
    return RefundManager(SqlAlchemyStore(), g.seller_id, atomic=_atomic())


def dispute_manager() -> DisputeManager:
    return DisputeManager(SqlAlchemyStore(), g.seller_id)


def assignment_reconciler() -> AssignmentReconciler:
    return AssignmentReconciler(SqlAlchemyStore(), g.seller_id, atomic=_atomic())
