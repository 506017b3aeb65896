# backend/sellerdesk/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/sellerdesk.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///sellerdesk.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Refund approval and assignment reconciliation run their writes in one
    # transaction when True; when False each write commits on its own and
    # partial completion is reported back to the caller.
    MULTI_WRITE_ATOMIC = _env_flag("SELLERDESK_MULTI_WRITE_ATOMIC", True)

    # Header set by the upstream auth gateway with the authenticated seller id
    SELLER_HEADER = os.environ.get("SELLERDESK_SELLER_HEADER", "X-Seller-Id")
