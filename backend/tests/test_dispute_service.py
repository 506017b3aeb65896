# Overview: Pytest coverage for dispute creation and queries.

import pytest

from sellerdesk.models import Dispute, Sale
from sellerdesk.services.dispute_service import DisputeManager, dispute_stats
from sellerdesk.services.exceptions import NotFoundError, UnauthorizedError
from sellerdesk.services.persistence import SqlAlchemyStore
from sellerdesk.validation import ValidationError


@pytest.fixture
def disputes_a(db_session, seller_a):
    return DisputeManager(SqlAlchemyStore(db_session), seller_a.id)


class TestDisputeCreation:
    """Opening disputes."""

    def test_create_open_dispute(self, db_session, disputes_a, sale_a, customer_a):
        dispute = disputes_a.create(sale_a.id, customer_a.id, " Charge not recognized ", "Bank letter")

        assert dispute.status == "open"
        assert dispute.reason == "Charge not recognized"
        assert dispute.description == "Bank letter"
        assert dispute.customer_id == customer_a.id
        # Opening a dispute does not touch the sale
        assert db_session.get(Sale, sale_a.id).status == "completed"

    @pytest.mark.parametrize("reason", ["", "  ", None])
    def test_reason_required(self, disputes_a, sale_a, customer_a, reason):
        with pytest.raises(ValidationError):
            disputes_a.create(sale_a.id, customer_a.id, reason)

    def test_customer_must_match_sale(self, db_session, disputes_a, sale_a, other_customer_a):
        with pytest.raises(ValidationError):
            disputes_a.create(sale_a.id, other_customer_a.id, "Reason")
        assert db_session.query(Dispute).count() == 0

    def test_foreign_sale(self, disputes_a, sale_b, customer_a):
        with pytest.raises(UnauthorizedError):
            disputes_a.create(sale_b.id, customer_a.id, "Reason")

    def test_foreign_customer(self, disputes_a, sale_a, customer_b):
        with pytest.raises(UnauthorizedError):
            disputes_a.create(sale_a.id, customer_b.id, "Reason")

    def test_missing_sale(self, disputes_a, customer_a):
        with pytest.raises(NotFoundError):
            disputes_a.create(99999, customer_a.id, "Reason")


class TestDisputeMaintenance:
    """Description edits, delete, queries and stats."""

    def test_update_description(self, disputes_a, sale_a, customer_a):
        dispute = disputes_a.create(sale_a.id, customer_a.id, "Reason")

        updated = disputes_a.update_description(dispute.id, "  more detail ")
        assert updated.description == "more detail"

        cleared = disputes_a.update_description(dispute.id, "   ")
        assert cleared.description is None

    def test_delete(self, db_session, disputes_a, sale_a, customer_a):
        dispute = disputes_a.create(sale_a.id, customer_a.id, "Reason")
        disputes_a.delete(dispute.id)
        assert db_session.get(Dispute, dispute.id) is None

    def test_foreign_dispute_is_hidden(self, db_session, sale_b, customer_b, seller_a, seller_b):
        dispute = DisputeManager(SqlAlchemyStore(db_session), seller_b.id).create(
            sale_b.id, customer_b.id, "Reason"
        )
        manager_a = DisputeManager(SqlAlchemyStore(db_session), seller_a.id)

        with pytest.raises(UnauthorizedError):
            manager_a.get(dispute.id)
        with pytest.raises(UnauthorizedError):
            manager_a.delete(dispute.id)
        assert db_session.get(Dispute, dispute.id) is not None

    def test_queries_and_stats(self, disputes_a, sale_a, customer_a):
        first = disputes_a.create(sale_a.id, customer_a.id, "One")
        second = disputes_a.create(sale_a.id, customer_a.id, "Two")

        assert [d.id for d in disputes_a.list_disputes()] == [second.id, first.id]
        assert len(disputes_a.disputes_for_sale(sale_a.id)) == 2
        assert len(disputes_a.disputes_for_customer(customer_a.id)) == 2
        assert disputes_a.disputes_for_customer(99999) == []

        assert dispute_stats(disputes_a.list_disputes()) == {"total_disputes": 2, "open_disputes": 2}
