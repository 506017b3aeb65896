# Overview: Service-layer operations for customers and sales; thin seller-scoped CRUD.

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Customer, Product, Sale, Seller
from ..models.sales import SALE_STATUS_COMPLETED, SALE_STATUSES
from ..validation import ConflictError, ValidationError, parse_decimal, require_text
from .exceptions import NotFoundError
from .tenant_service import require_owned


# =============================================================================
# SELLERS
# =============================================================================

def create_seller(*, name: str, email: str) -> Seller:
    seller = Seller(name=require_text(name, "name"), email=require_text(email, "email").lower())
    db.session.add(seller)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(f"Seller email already exists: {seller.email}")
    return seller


def get_active_seller(seller_id: int) -> Seller | None:
    seller = db.session.get(Seller, seller_id)
    if seller is None or not seller.is_active:
        return None
    return seller


# =============================================================================
# CUSTOMERS
# =============================================================================

def list_customers(seller_id: int) -> list[Customer]:
    return (
        db.session.query(Customer)
        .filter(Customer.seller_id == seller_id)
        .order_by(Customer.name.asc(), Customer.id.asc())
        .all()
    )


def get_customer(seller_id: int, customer_id: int) -> Customer:
    return require_owned(db.session.get(Customer, customer_id), seller_id, "Customer", customer_id)


def create_customer(seller_id: int, *, name: str, email: str | None = None) -> Customer:
    customer = Customer(
        seller_id=seller_id,
        name=require_text(name, "name"),
        email=email.strip().lower() if email else None,
    )
    db.session.add(customer)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(f"Customer email already exists: {customer.email}")
    return customer


# =============================================================================
# SALES
# =============================================================================

def list_sales(seller_id: int, status: str | None = None, customer_id: int | None = None) -> list[Sale]:
    query = db.session.query(Sale).filter(Sale.seller_id == seller_id)
    if status:
        query = query.filter(Sale.status == status)
    if customer_id is not None:
        query = query.filter(Sale.customer_id == customer_id)
    return query.order_by(Sale.created_at.desc(), Sale.id.desc()).all()


def get_sale(seller_id: int, sale_id: int) -> Sale:
    return require_owned(db.session.get(Sale, sale_id), seller_id, "Sale", sale_id)


def create_sale(
    seller_id: int,
    *,
    customer_id: int,
    amount,
    product_id: int | None = None,
    membership_id: int | None = None,
    status: str = SALE_STATUS_COMPLETED,
) -> Sale:
    """
    Record a sale of a product or membership to one of the seller's customers.

    Raises:
        ValidationError: amount <= 0, unknown status, or no product/membership
        NotFoundError / UnauthorizedError: customer or product missing or foreign
    """
    value = parse_decimal(amount, "amount")
    if value <= 0:
        raise ValidationError("amount must be > 0")
    if status not in SALE_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(SALE_STATUSES)}")
    if product_id is None and membership_id is None:
        raise ValidationError("product_id or membership_id is required")

    if customer_id is None:
        raise NotFoundError("Customer not found")
    require_owned(db.session.get(Customer, customer_id), seller_id, "Customer", customer_id)
    if product_id is not None:
        require_owned(db.session.get(Product, product_id), seller_id, "Product", product_id)

    sale = Sale(
        seller_id=seller_id,
        customer_id=customer_id,
        product_id=product_id,
        membership_id=membership_id,
        amount=value,
        status=status,
    )
    db.session.add(sale)
    db.session.commit()
    return sale
