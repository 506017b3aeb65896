# Overview: Pytest coverage for the refund lifecycle.

"""
Refund Lifecycle Tests

Covers:
1. Creation: amount bound (0, sale amount], required reason, ownership
2. State machine: pending -> approved | rejected, both terminal
3. Approval side effect: sale moves to refunded; rejection leaves it alone
4. Partial failure: best-effort reports the completed step, atomic rolls back
5. Queries and aggregate stats
"""

from decimal import Decimal

import pytest

from sellerdesk.models import Refund, Sale
from sellerdesk.services.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    PersistenceFailure,
    UnauthorizedError,
)
from sellerdesk.services.persistence import SqlAlchemyStore
from sellerdesk.services.refund_service import RefundManager, refund_stats
from sellerdesk.validation import ValidationError


class FailingSaleStore(SqlAlchemyStore):
    """Store whose sale status update always fails."""

    def update_sale_status(self, sale_id, owner_id, status):
        raise PersistenceFailure("disk I/O error")


@pytest.fixture
def manager_a(db_session, seller_a):
    return RefundManager(SqlAlchemyStore(db_session), seller_a.id)


def _sale_status(db_session, sale_id):
    return db_session.get(Sale, sale_id).status


class TestRefundCreation:
    """Validation at creation time."""

    def test_create_pending_refund(self, db_session, manager_a, sale_a, seller_a):
        refund = manager_a.create(sale_a.id, "25.00", "  Wrong file delivered  ", notes="first contact")

        assert refund.id is not None
        assert refund.status == "pending"
        assert refund.amount == Decimal("25.00")
        assert refund.reason == "Wrong file delivered"
        assert refund.seller_id == seller_a.id
        assert refund.refund_date is None
        assert _sale_status(db_session, sale_a.id) == "completed"

    def test_full_amount_is_allowed(self, manager_a, sale_a):
        refund = manager_a.create(sale_a.id, Decimal("50.00"), "Duplicate charge")
        assert refund.amount == Decimal("50.00")

    def test_float_amount_keeps_cents(self, manager_a, sale_a):
        refund = manager_a.create(sale_a.id, 49.99, "Partial")
        assert refund.amount == Decimal("49.99")

    @pytest.mark.parametrize("amount", ["0", "-1", "50.01", "abc", None, "0.001", "10.005"])
    def test_amount_out_of_range(self, db_session, manager_a, sale_a, amount):
        with pytest.raises(ValidationError) as excinfo:
            manager_a.create(sale_a.id, amount, "Reason")
        assert "between $0.01 and $50.00" in str(excinfo.value)
        assert db_session.query(Refund).count() == 0

    @pytest.mark.parametrize("reason", ["", "   ", None])
    def test_reason_required(self, manager_a, sale_a, reason):
        with pytest.raises(ValidationError):
            manager_a.create(sale_a.id, "10.00", reason)

    def test_missing_sale(self, manager_a):
        with pytest.raises(NotFoundError):
            manager_a.create(99999, "10.00", "Reason")

    def test_foreign_sale(self, db_session, manager_a, sale_b):
        with pytest.raises(UnauthorizedError) as excinfo:
            manager_a.create(sale_b.id, "10.00", "Reason")
        assert str(excinfo.value) == "Not permitted"
        assert db_session.query(Refund).count() == 0

    def test_refunded_sale_is_rejected(self, db_session, manager_a, sale_a):
        sale_a.status = "refunded"
        db_session.commit()

        with pytest.raises(ValidationError):
            manager_a.create(sale_a.id, "10.00", "Again")


class TestRefundTransitions:
    """Approve / reject state machine."""

    def test_approve_marks_sale_refunded(self, db_session, manager_a, sale_a):
        refund = manager_a.create(sale_a.id, "20.00", "Reason")

        approved = manager_a.approve(refund.id, notes="ok")

        assert approved.status == "approved"
        assert approved.refund_date is not None
        assert approved.notes == "ok"
        assert _sale_status(db_session, sale_a.id) == "refunded"

    def test_approve_without_notes_keeps_existing(self, manager_a, sale_a):
        refund = manager_a.create(sale_a.id, "20.00", "Reason", notes="keep me")
        approved = manager_a.approve(refund.id)
        assert approved.notes == "keep me"

    def test_reject_leaves_sale_untouched(self, db_session, manager_a, sale_a):
        refund = manager_a.create(sale_a.id, "20.00", "Reason")

        rejected = manager_a.reject(refund.id, notes="Outside policy")

        assert rejected.status == "rejected"
        assert rejected.refund_date is None
        assert _sale_status(db_session, sale_a.id) == "completed"

    @pytest.mark.parametrize("first,second", [
        ("approve", "approve"),
        ("approve", "reject"),
        ("reject", "approve"),
        ("reject", "reject"),
    ])
    def test_terminal_states(self, manager_a, sale_a, first, second):
        refund = manager_a.create(sale_a.id, "20.00", "Reason")
        getattr(manager_a, first)(refund.id)

        with pytest.raises(InvalidTransitionError):
            getattr(manager_a, second)(refund.id)

    def test_approve_foreign_refund(self, db_session, sale_b, seller_a, seller_b):
        manager_b = RefundManager(SqlAlchemyStore(db_session), seller_b.id)
        refund = manager_b.create(sale_b.id, "5.00", "Reason")

        manager_a = RefundManager(SqlAlchemyStore(db_session), seller_a.id)
        with pytest.raises(UnauthorizedError):
            manager_a.approve(refund.id)

        assert db_session.get(Refund, refund.id).status == "pending"
        assert _sale_status(db_session, sale_b.id) == "completed"

    def test_amount_not_rechecked_at_approval(self, db_session, manager_a, sale_a):
        refund = manager_a.create(sale_a.id, "40.00", "Reason")
        sale_a.amount = Decimal("30.00")
        db_session.commit()

        approved = manager_a.approve(refund.id)
        assert approved.status == "approved"


class TestRefundPartialFailure:
    """Sale update failing after the refund was written."""

    def test_best_effort_reports_completed_step(self, db_session, seller_a, sale_a):
        store = FailingSaleStore(db_session)
        manager = RefundManager(store, seller_a.id, atomic=False)
        refund = manager.create(sale_a.id, "20.00", "Reason")

        with pytest.raises(PersistenceFailure) as excinfo:
            manager.approve(refund.id)

        assert excinfo.value.completed == ("refund_status",)
        assert "disk I/O error" in str(excinfo.value)
        assert db_session.get(Refund, refund.id).status == "approved"
        assert _sale_status(db_session, sale_a.id) == "completed"

    def test_atomic_rolls_back_refund(self, db_session, seller_a, sale_a):
        store = FailingSaleStore(db_session)
        manager = RefundManager(store, seller_a.id, atomic=True)
        refund = manager.create(sale_a.id, "20.00", "Reason")
        refund_id = refund.id

        with pytest.raises(PersistenceFailure) as excinfo:
            manager.approve(refund_id)

        assert excinfo.value.completed == ()
        reloaded = db_session.get(Refund, refund_id)
        assert reloaded.status == "pending"
        assert reloaded.refund_date is None
        assert _sale_status(db_session, sale_a.id) == "completed"


class TestRefundMaintenance:
    """Notes, delete and queries."""

    def test_update_notes_in_terminal_state(self, manager_a, sale_a):
        refund = manager_a.create(sale_a.id, "20.00", "Reason")
        manager_a.reject(refund.id)

        updated = manager_a.update_notes(refund.id, "  customer informed ")
        assert updated.notes == "customer informed"
        assert updated.status == "rejected"

    def test_delete_does_not_revert_sale(self, db_session, manager_a, sale_a):
        refund = manager_a.create(sale_a.id, "20.00", "Reason")
        manager_a.approve(refund.id)

        manager_a.delete(refund.id)

        assert db_session.get(Refund, refund.id) is None
        assert _sale_status(db_session, sale_a.id) == "refunded"

    def test_delete_missing(self, manager_a):
        with pytest.raises(NotFoundError):
            manager_a.delete(99999)

    def test_queries_are_newest_first_and_scoped(
        self, db_session, manager_a, seller_a, sale_a, sale_b, seller_b, customer_a, other_customer_a
    ):
        other_sale = Sale(
            seller_id=seller_a.id, customer_id=other_customer_a.id,
            membership_id=7, amount=Decimal("15.00"),
        )
        db_session.add(other_sale)
        db_session.commit()

        first = manager_a.create(sale_a.id, "10.00", "One")
        second = manager_a.create(other_sale.id, "5.00", "Two")
        RefundManager(SqlAlchemyStore(db_session), seller_b.id).create(sale_b.id, "5.00", "Foreign")

        assert [r.id for r in manager_a.list_refunds()] == [second.id, first.id]
        assert [r.id for r in manager_a.refunds_for_sale(sale_a.id)] == [first.id]
        assert [r.id for r in manager_a.refunds_for_customer(other_customer_a.id)] == [second.id]
        assert manager_a.refunds_for_sale(sale_b.id) == []


class TestRefundStats:
    """Aggregate counts and approved total."""

    def test_stats(self, db_session, seller_a, customer_a, product_a):
        sales = []
        for amount in ("50.00", "30.00", "20.00", "10.00"):
            sale = Sale(seller_id=seller_a.id, customer_id=customer_a.id,
                        product_id=product_a.id, amount=Decimal(amount))
            db_session.add(sale)
            sales.append(sale)
        db_session.commit()

        manager = RefundManager(SqlAlchemyStore(db_session), seller_a.id)
        approved_1 = manager.create(sales[0].id, "50.00", "a")
        approved_2 = manager.create(sales[1].id, "25.50", "b")
        rejected = manager.create(sales[2].id, "20.00", "c")
        manager.create(sales[3].id, "10.00", "d")

        manager.approve(approved_1.id)
        manager.approve(approved_2.id)
        manager.reject(rejected.id)

        stats = refund_stats(manager.list_refunds())

        assert stats["total_refunds"] == 4
        assert stats["pending_refunds"] == 1
        assert stats["approved_refunds"] == 2
        assert stats["rejected_refunds"] == 1
        assert stats["total_amount"] == Decimal("75.50")

    def test_stats_empty(self):
        stats = refund_stats([])
        assert stats["total_refunds"] == 0
        assert stats["total_amount"] == Decimal("0")
