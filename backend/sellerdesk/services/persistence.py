# Overview: Persistence client injected into the refund, dispute and assignment services.

"""
SqlAlchemyStore: the only component that talks to the database for the
consistency services.

Each write commits on its own unless it runs inside `atomic()`, in which case
writes are flushed and the whole block commits (or rolls back) once.

Every SQLAlchemy error is rolled back and re-raised as PersistenceFailure with
the driver's message, so services never see raw database exceptions.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterable, Iterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..models import (
    Category,
    Customer,
    Dispute,
    Product,
    ProductCategoryMapping,
    ProductTagMapping,
    Refund,
    Sale,
    Tag,
)
from .exceptions import PersistenceFailure
from sellerdesk.time_utils import utcnow

KIND_CATEGORY = "category"
KIND_TAG = "tag"

# kind -> (mapping model, mapping target column name, target model)
MAPPING_KINDS = {
    KIND_CATEGORY: (ProductCategoryMapping, "category_id", Category),
    KIND_TAG: (ProductTagMapping, "tag_id", Tag),
}

REFUND_MUTABLE_FIELDS = {"status", "notes", "refund_date"}
DISPUTE_MUTABLE_FIELDS = {"description"}


def _mapping_for(kind: str):
    try:
        return MAPPING_KINDS[kind]
    except KeyError:
        raise ValueError(f"Unknown mapping kind: {kind}")


class SqlAlchemyStore:
    """Persistence client backed by the Flask-SQLAlchemy session."""

    def __init__(self, session=None):
        self.session = session if session is not None else db.session
        self._atomic_depth = 0

    # ------------------------------------------------------------------
    # Transaction handling
    # ------------------------------------------------------------------

    @property
    def in_atomic(self) -> bool:
        return self._atomic_depth > 0

    @contextmanager
    def atomic(self) -> Iterator["SqlAlchemyStore"]:
        """Group writes into one transaction. Nested blocks join the outer one."""
        self._atomic_depth += 1
        try:
            yield self
        except BaseException:
            self._atomic_depth -= 1
            if self._atomic_depth == 0:
                self.session.rollback()
            raise
        self._atomic_depth -= 1
        if self._atomic_depth == 0:
            self._commit()

    def _commit(self) -> None:
        try:
            if self.in_atomic:
                self.session.flush()
            else:
                self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistenceFailure(str(exc.orig) if getattr(exc, "orig", None) else str(exc)) from exc

    def _read(self, func):
        try:
            return func()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistenceFailure(str(exc)) from exc

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_product(self, product_id: int) -> Product | None:
        return self._read(lambda: self.session.get(Product, product_id))

    def get_sale(self, sale_id: int) -> Sale | None:
        return self._read(lambda: self.session.get(Sale, sale_id))

    def get_customer(self, customer_id: int) -> Customer | None:
        return self._read(lambda: self.session.get(Customer, customer_id))

    def get_refund(self, refund_id: int) -> Refund | None:
        return self._read(lambda: self.session.get(Refund, refund_id))

    def get_dispute(self, dispute_id: int) -> Dispute | None:
        return self._read(lambda: self.session.get(Dispute, dispute_id))

    def owned_target_ids(self, owner_id: int, kind: str, ids: Iterable[int]) -> set[int]:
        """Subset of `ids` that are categories/tags owned by `owner_id`."""
        _, _, target_model = _mapping_for(kind)
        wanted = set(ids)
        if not wanted:
            return set()
        rows = self._read(lambda: (
            self.session.query(target_model.id)
            .filter(target_model.seller_id == owner_id, target_model.id.in_(wanted))
            .all()
        ))
        return {row.id for row in rows}

    # ------------------------------------------------------------------
    # Mappings
    # ------------------------------------------------------------------

    def fetch_mappings(self, product_id: int, kind: str) -> set[int]:
        mapping_model, column, _ = _mapping_for(kind)
        target_col = getattr(mapping_model, column)
        rows = self._read(lambda: (
            self.session.query(target_col)
            .filter(mapping_model.product_id == product_id)
            .all()
        ))
        return {row[0] for row in rows}

    def _find_mapping(self, product_id: int, kind: str, target_id: int):
        mapping_model, column, _ = _mapping_for(kind)
        return self._read(lambda: (
            self.session.query(mapping_model)
            .filter_by(product_id=product_id, **{column: target_id})
            .first()
        ))

    def add_mapping(self, product_id: int, kind: str, target_id: int) -> bool:
        """
        Insert a mapping row. Returns False when the pair already exists.

        A concurrent insert of the same pair surfaces as an IntegrityError; if
        the row is there after rollback, that is the same no-op.
        """
        mapping_model, column, _ = _mapping_for(kind)
        if self._find_mapping(product_id, kind, target_id) is not None:
            return False

        self.session.add(mapping_model(product_id=product_id, **{column: target_id}))
        try:
            self._commit()
        except PersistenceFailure as exc:
            if isinstance(exc.__cause__, IntegrityError) and not self.in_atomic:
                if self._find_mapping(product_id, kind, target_id) is not None:
                    return False
            raise
        return True

    def remove_mapping(self, product_id: int, kind: str, target_id: int) -> bool:
        mapping_model, column, _ = _mapping_for(kind)
        deleted = self._read(lambda: (
            self.session.query(mapping_model)
            .filter_by(product_id=product_id, **{column: target_id})
            .delete(synchronize_session=False)
        ))
        self._commit()
        return bool(deleted)

    def clear_mappings(self, *, product_id: int | None = None, kind: str | None = None,
                       target_id: int | None = None) -> int:
        """Delete mapping rows for a product, or for one category/tag."""
        total = 0
        kinds = [kind] if kind else list(MAPPING_KINDS)
        for k in kinds:
            mapping_model, column, _ = _mapping_for(k)
            query = self.session.query(mapping_model)
            if product_id is not None:
                query = query.filter(mapping_model.product_id == product_id)
            if target_id is not None:
                query = query.filter(getattr(mapping_model, column) == target_id)
            total += self._read(lambda: query.delete(synchronize_session=False))
        self._commit()
        return total

    # ------------------------------------------------------------------
    # Refunds
    # ------------------------------------------------------------------

    def create_refund(self, record: dict) -> Refund:
        refund = Refund(**record)
        self.session.add(refund)
        self._commit()
        return refund

    def update_refund(self, refund_id: int, owner_id: int, patch: dict) -> Refund | None:
        """Apply `patch` to the owner's refund. None when no row matches."""
        refund = self._read(lambda: (
            self.session.query(Refund)
            .filter_by(id=refund_id, seller_id=owner_id)
            .first()
        ))
        if refund is None:
            return None
        for key, value in patch.items():
            if key not in REFUND_MUTABLE_FIELDS:
                raise ValueError(f"Refund field is not mutable: {key}")
            setattr(refund, key, value)
        refund.updated_at = utcnow()
        self._commit()
        return refund

    def delete_refund(self, refund_id: int, owner_id: int) -> bool:
        deleted = self._read(lambda: (
            self.session.query(Refund)
            .filter_by(id=refund_id, seller_id=owner_id)
            .delete(synchronize_session="fetch")
        ))
        self._commit()
        return bool(deleted)

    def list_refunds(
        self,
        owner_id: int,
        sale_id: int | None = None,
        customer_id: int | None = None,
    ) -> list[Refund]:
        """Owner's refunds, newest first, optionally narrowed to a sale or a customer."""
        query = self.session.query(Refund).filter(Refund.seller_id == owner_id)
        if sale_id is not None:
            query = query.filter(Refund.sale_id == sale_id)
        if customer_id is not None:
            query = query.join(Sale, Refund.sale_id == Sale.id).filter(Sale.customer_id == customer_id)
        return self._read(lambda: query.order_by(Refund.created_at.desc(), Refund.id.desc()).all())

    # ------------------------------------------------------------------
    # Sales
    # ------------------------------------------------------------------

    def update_sale_status(self, sale_id: int, owner_id: int, status: str) -> Sale | None:
        sale = self._read(lambda: (
            self.session.query(Sale)
            .filter_by(id=sale_id, seller_id=owner_id)
            .first()
        ))
        if sale is None:
            return None
        sale.status = status
        sale.updated_at = utcnow()
        self._commit()
        return sale

    # ------------------------------------------------------------------
    # Disputes
    # ------------------------------------------------------------------

    def create_dispute(self, record: dict) -> Dispute:
        dispute = Dispute(**record)
        self.session.add(dispute)
        self._commit()
        return dispute

    def update_dispute(self, dispute_id: int, owner_id: int, patch: dict) -> Dispute | None:
        dispute = self._read(lambda: (
            self.session.query(Dispute)
            .filter_by(id=dispute_id, seller_id=owner_id)
            .first()
        ))
        if dispute is None:
            return None
        for key, value in patch.items():
            if key not in DISPUTE_MUTABLE_FIELDS:
                raise ValueError(f"Dispute field is not mutable: {key}")
            setattr(dispute, key, value)
        dispute.updated_at = utcnow()
        self._commit()
        return dispute

    def delete_dispute(self, dispute_id: int, owner_id: int) -> bool:
        deleted = self._read(lambda: (
            self.session.query(Dispute)
            .filter_by(id=dispute_id, seller_id=owner_id)
            .delete(synchronize_session="fetch")
        ))
        self._commit()
        return bool(deleted)

    def list_disputes(
        self,
        owner_id: int,
        sale_id: int | None = None,
        customer_id: int | None = None,
    ) -> list[Dispute]:
        query = self.session.query(Dispute).filter(Dispute.seller_id == owner_id)
        if sale_id is not None:
            query = query.filter(Dispute.sale_id == sale_id)
        if customer_id is not None:
            query = query.filter(Dispute.customer_id == customer_id)
        return self._read(lambda: query.order_by(Dispute.created_at.desc(), Dispute.id.desc()).all())
