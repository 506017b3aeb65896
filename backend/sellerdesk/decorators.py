# Overview: Request decorators for API routes.

from functools import wraps

from flask import current_app, g, jsonify, request

from .services import sales_service
from .services.security_service import log_security_event


def _unauthenticated(message: str):
    return jsonify({"success": False, "error": {"type": "Unauthenticated", "message": message}}), 401


def require_seller(f):
    """
    Require a seller identity and establish tenant context.

    Authentication happens upstream; the gateway forwards the authenticated
    seller id in the configured header (SELLER_HEADER, default X-Seller-Id).

    Sets:
    - g.seller_id: the acting seller's id
    - g.seller: the Seller row

    Returns 401 if the header is missing, malformed, or names an unknown or
    deactivated seller.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        header = current_app.config.get("SELLER_HEADER", "X-Seller-Id")
        raw = (request.headers.get(header) or "").strip()

        if not raw:
            return _unauthenticated("Authentication required")

        if not raw.isdigit():
            log_security_event(
                seller_id=None,
                event_type="SELLER_CONTEXT_INVALID",
                success=False,
                reason=f"Malformed {header} header",
            )
            return _unauthenticated("Invalid seller identity")

        seller = sales_service.get_active_seller(int(raw))
        if seller is None:
            log_security_event(
                seller_id=None,
                event_type="SELLER_CONTEXT_INVALID",
                success=False,
                reason=f"Unknown or inactive seller {raw}",
            )
            return _unauthenticated("Invalid seller identity")

        g.seller = seller
        g.seller_id = seller.id

        return f(*args, **kwargs)

    return decorated_function
