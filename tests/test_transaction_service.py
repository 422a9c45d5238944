"""Tests for TransactionService."""

import pytest
from datetime import timedelta
from decimal import Decimal
from sqlalchemy.exc import OperationalError

from ledgerfeed.domain.entities import (
    EntryCandidate,
    TransactionCandidate,
    TransactionStatus,
)
from ledgerfeed.domain.errors import (
    ConflictError,
    ConsistencyError,
    ImmutableStateError,
    NotFoundError,
    UnresolvedReferenceError,
    ValidationError,
)
from ledgerfeed.domain.transaction import TransactionService

from conftest import TODAY, fixed_clock


def approve_on_other_connection_before(temp_db, monkeypatch, method_name, approver_id):
    """Approve the transaction through a second connection just before temp_db writes it."""
    from ledgerfeed.database.factories import create_sqlite_database

    original = getattr(temp_db, method_name)

    def approve_then_write(*args, **kwargs):
        transaction_id = kwargs["transaction_id"] if "transaction_id" in kwargs else args[0]
        other_db = create_sqlite_database(database_path=temp_db.database_path)
        try:
            TransactionService(other_db, now=fixed_clock).approve_transaction(
                transaction_id, approver_id
            )
        finally:
            other_db.disconnect()
        return original(*args, **kwargs)

    monkeypatch.setattr(temp_db, method_name, approve_then_write)


class TestCreateTransaction:
    """Tests for creating transactions."""

    def test_create_stores_pending_transaction(self, transaction_service, make_candidate, sample_user):
        txn = transaction_service.create_transaction(make_candidate("100.00"))

        assert txn.status == TransactionStatus.PENDING
        assert txn.approved_by is None
        assert txn.created_by == sample_user.id
        assert txn.description == "Office supplies"
        assert txn.date == TODAY
        assert len(txn.entries) == 2
        assert txn.total_debits == Decimal("100.00")
        assert txn.total_credits == Decimal("100.00")

    def test_entries_keep_their_order(self, transaction_service, sample_user, sample_accounts):
        candidate = TransactionCandidate(
            description="Split sale",
            date=TODAY,
            created_by=sample_user.id,
            entries=[
                EntryCandidate(account_id=sample_accounts["Sales"].id, credit_amount=Decimal("70")),
                EntryCandidate(account_id=sample_accounts["Cash"].id, debit_amount=Decimal("100")),
                EntryCandidate(account_id=sample_accounts["Sales"].id, credit_amount=Decimal("30")),
            ],
        )
        txn = transaction_service.create_transaction(candidate)

        assert [e.account_id for e in txn.entries] == [
            sample_accounts["Sales"].id,
            sample_accounts["Cash"].id,
            sample_accounts["Sales"].id,
        ]
        assert [e.credit_amount for e in txn.entries] == [Decimal("70.00"), None, Decimal("30.00")]
        assert txn.entries[1].debit_amount == Decimal("100.00")

    def test_create_links_post(self, transaction_service, make_candidate, sample_post, temp_db):
        txn = transaction_service.create_transaction(make_candidate(post_id=sample_post.id))

        assert txn.post_id == sample_post.id
        assert temp_db.get_post_transaction_link(sample_post.id) == txn.id

    def test_invalid_candidate_is_not_stored(self, transaction_service, make_candidate, temp_db):
        with pytest.raises(ValidationError) as exc_info:
            transaction_service.create_transaction(make_candidate("100.00", credit_amount="90.00"))

        assert (
            "Transaction does not balance. Debits: $100.00, Credits: $90.00"
            in exc_info.value.errors
        )
        assert temp_db.list_transactions() == []

    def test_validation_error_lists_every_problem(self, transaction_service, sample_user):
        candidate = TransactionCandidate(
            description="",
            date=TODAY + timedelta(days=1),
            created_by=sample_user.id,
            entries=[EntryCandidate(account_id="x", debit_amount=Decimal("50.00"))],
        )
        with pytest.raises(ValidationError) as exc_info:
            transaction_service.create_transaction(candidate)

        assert exc_info.value.errors == [
            "Transaction description is required",
            "Transaction date cannot be in the future",
            "Transaction must have at least 2 entries",
        ]

    def test_unknown_account(self, transaction_service, sample_user, sample_accounts):
        candidate = TransactionCandidate(
            description="Mystery",
            date=TODAY,
            created_by=sample_user.id,
            entries=[
                EntryCandidate(account_id="missing-account", debit_amount=Decimal("5")),
                EntryCandidate(account_id=sample_accounts["Cash"].id, credit_amount=Decimal("5")),
            ],
        )
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            transaction_service.create_transaction(candidate)

        assert exc_info.value.errors == ["Invalid account ID: missing-account"]

    def test_inactive_account(self, transaction_service, make_candidate, account_service, sample_accounts):
        account_service.set_active(sample_accounts["Cash"].id, False)

        with pytest.raises(UnresolvedReferenceError) as exc_info:
            transaction_service.create_transaction(make_candidate())

        assert exc_info.value.errors == [f"Account {sample_accounts['Cash'].id} is inactive"]

    def test_unknown_creator(self, transaction_service, sample_accounts):
        candidate = TransactionCandidate(
            description="Ghost",
            date=TODAY,
            created_by="nobody",
            entries=[
                EntryCandidate(account_id=sample_accounts["Cash"].id, debit_amount=Decimal("5")),
                EntryCandidate(account_id=sample_accounts["Sales"].id, credit_amount=Decimal("5")),
            ],
        )
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            transaction_service.create_transaction(candidate)

        assert "Invalid user ID" in exc_info.value.errors

    def test_unknown_post(self, transaction_service, make_candidate):
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            transaction_service.create_transaction(make_candidate(post_id="no-such-post"))

        assert exc_info.value.errors == ["Invalid post ID"]

    def test_post_already_linked(self, transaction_service, make_candidate, sample_post, temp_db):
        first = transaction_service.create_transaction(make_candidate(post_id=sample_post.id))

        with pytest.raises(ConflictError, match="Post already has an associated transaction"):
            transaction_service.create_transaction(make_candidate("20.00", post_id=sample_post.id))

        assert temp_db.get_post_transaction_link(sample_post.id) == first.id
        assert len(temp_db.list_transactions()) == 1

    def test_failed_link_rolls_back_insert(
        self, transaction_service, make_candidate, sample_post, temp_db, monkeypatch
    ):
        """A store failure after the insert leaves neither transaction nor link behind."""

        def broken_link(post_id, transaction_id):
            raise OperationalError("UPDATE posts", {}, Exception("disk I/O error"))

        monkeypatch.setattr(temp_db, "link_post_to_transaction", broken_link)

        with pytest.raises(ConsistencyError):
            transaction_service.create_transaction(make_candidate(post_id=sample_post.id))

        monkeypatch.undo()
        assert temp_db.list_transactions() == []
        assert temp_db.get_post_transaction_link(sample_post.id) is None

    def test_stored_totals_match_validated_totals(
        self, transaction_service, sample_user, sample_accounts
    ):
        """Amounts are rounded per entry both when validated and when stored."""
        supplies = sample_accounts["Office Supplies"].id
        cash = sample_accounts["Cash"].id

        def candidate(credit_amount):
            return TransactionCandidate(
                description="Paper",
                date=TODAY,
                created_by=sample_user.id,
                entries=[EntryCandidate(account_id=supplies, debit_amount=Decimal("10.005"))] * 4
                + [EntryCandidate(account_id=cash, credit_amount=Decimal(credit_amount))],
            )

        with pytest.raises(ValidationError, match="does not balance"):
            transaction_service.create_transaction(candidate("40.02"))

        txn = transaction_service.create_transaction(candidate("40.04"))

        assert [e.debit_amount for e in txn.entries[:4]] == [Decimal("10.01")] * 4
        assert txn.total_debits == txn.total_credits == Decimal("40.04")

    def test_out_of_range_amount_is_a_validation_error(self, transaction_service, make_candidate):
        with pytest.raises(ValidationError) as exc_info:
            transaction_service.create_transaction(make_candidate("1e30", credit_amount="1"))

        assert "Entry 1: Debit amount must be between 0.01 and 999999999.99" in exc_info.value.errors

    def test_post_linked_after_check_is_not_relinked(
        self, transaction_service, make_candidate, sample_post, temp_db, monkeypatch
    ):
        """A post linked between the link check and the insert keeps its first transaction."""
        first = transaction_service.create_transaction(make_candidate(post_id=sample_post.id))
        monkeypatch.setattr(temp_db, "get_post_transaction_link", lambda post_id: None)

        with pytest.raises(ConflictError, match="Post already has an associated transaction"):
            transaction_service.create_transaction(make_candidate("20.00", post_id=sample_post.id))

        monkeypatch.undo()
        assert [t.id for t in temp_db.list_transactions()] == [first.id]
        assert temp_db.get_post_transaction_link(sample_post.id) == first.id

    def test_preview_reports_totals_without_storing(self, transaction_service, make_candidate, temp_db):
        validation = transaction_service.preview_transaction(make_candidate("100.00", credit_amount="90.00"))

        assert not validation.is_valid
        assert validation.total_debits == Decimal("100.00")
        assert validation.total_credits == Decimal("90.00")
        assert validation.balance == Decimal("10.00")
        assert temp_db.list_transactions() == []


class TestUpdateTransaction:
    """Tests for editing transactions."""

    def test_update_description_keeps_entries(self, transaction_service, make_candidate):
        txn = transaction_service.create_transaction(make_candidate())

        updated = transaction_service.update_transaction(
            txn.id, TransactionCandidate(description="Printer paper")
        )

        assert updated.description == "Printer paper"
        assert updated.total_debits == Decimal("100.00")
        assert len(updated.entries) == 2

    def test_update_replaces_entries(self, transaction_service, make_candidate, sample_accounts):
        txn = transaction_service.create_transaction(make_candidate())

        updated = transaction_service.update_transaction(
            txn.id,
            TransactionCandidate(
                entries=[
                    EntryCandidate(account_id=sample_accounts["Cash"].id, debit_amount=Decimal("250")),
                    EntryCandidate(account_id=sample_accounts["Sales"].id, credit_amount=Decimal("250")),
                ]
            ),
        )

        assert [e.account_id for e in updated.entries] == [
            sample_accounts["Cash"].id,
            sample_accounts["Sales"].id,
        ]
        assert updated.total_credits == Decimal("250.00")

    def test_editing_rejected_returns_to_pending(self, transaction_service, make_candidate):
        txn = transaction_service.create_transaction(make_candidate())
        transaction_service.reject_transaction(txn.id)

        updated = transaction_service.update_transaction(
            txn.id, TransactionCandidate(description="Fixed description")
        )

        assert updated.status == TransactionStatus.PENDING
        assert updated.approved_by is None

    def test_invalid_update_leaves_record_unchanged(self, transaction_service, make_candidate, sample_accounts):
        txn = transaction_service.create_transaction(make_candidate())

        with pytest.raises(ValidationError):
            transaction_service.update_transaction(
                txn.id,
                TransactionCandidate(
                    entries=[
                        EntryCandidate(account_id=sample_accounts["Cash"].id, debit_amount=Decimal("10")),
                    ]
                ),
            )

        assert transaction_service.get_transaction(txn.id) == txn

    def test_update_rejects_future_date(self, transaction_service, make_candidate):
        txn = transaction_service.create_transaction(make_candidate())

        with pytest.raises(ValidationError) as exc_info:
            transaction_service.update_transaction(
                txn.id, TransactionCandidate(date=TODAY + timedelta(days=3))
            )

        assert exc_info.value.errors == ["Transaction date cannot be in the future"]

    def test_update_missing_transaction(self, transaction_service):
        with pytest.raises(NotFoundError):
            transaction_service.update_transaction("missing", TransactionCandidate(description="x"))

    def test_post_cannot_change(self, transaction_service, make_candidate, sample_post):
        txn = transaction_service.create_transaction(make_candidate())

        with pytest.raises(ValidationError):
            transaction_service.update_transaction(txn.id, TransactionCandidate(post_id=sample_post.id))


class TestApproveAndReject:
    """Tests for approval transitions."""

    def test_approve(self, transaction_service, make_candidate, sample_approver):
        txn = transaction_service.create_transaction(make_candidate())

        approved = transaction_service.approve_transaction(txn.id, sample_approver.id)

        assert approved.status == TransactionStatus.APPROVED
        assert approved.approved_by == sample_approver.id

    def test_self_approval_allowed(self, transaction_service, make_candidate, sample_user):
        txn = transaction_service.create_transaction(make_candidate())

        approved = transaction_service.approve_transaction(txn.id, sample_user.id)

        assert approved.status == TransactionStatus.APPROVED
        assert approved.approved_by == sample_user.id

    def test_approver_required(self, transaction_service, make_candidate):
        txn = transaction_service.create_transaction(make_candidate())

        with pytest.raises(ValidationError, match="Approver ID is required"):
            transaction_service.approve_transaction(txn.id, "  ")

    def test_unknown_approver(self, transaction_service, make_candidate):
        txn = transaction_service.create_transaction(make_candidate())

        with pytest.raises(UnresolvedReferenceError):
            transaction_service.approve_transaction(txn.id, "nobody")

        assert transaction_service.get_transaction(txn.id).status == TransactionStatus.PENDING

    def test_approve_missing_transaction(self, transaction_service, sample_approver):
        with pytest.raises(NotFoundError):
            transaction_service.approve_transaction("missing", sample_approver.id)

    def test_approve_rejected_is_noop(self, transaction_service, make_candidate, sample_approver):
        txn = transaction_service.create_transaction(make_candidate())
        transaction_service.reject_transaction(txn.id)

        result = transaction_service.approve_transaction(txn.id, sample_approver.id)

        assert result.status == TransactionStatus.REJECTED
        assert result.approved_by is None

    def test_second_approval_does_not_change_approver(
        self, transaction_service, make_candidate, sample_user, sample_approver
    ):
        txn = transaction_service.create_transaction(make_candidate())
        transaction_service.approve_transaction(txn.id, sample_approver.id)

        result = transaction_service.approve_transaction(txn.id, sample_user.id)

        assert result.status == TransactionStatus.APPROVED
        assert result.approved_by == sample_approver.id

    def test_concurrent_approvals_only_one_applies(
        self, temp_db, transaction_service, make_candidate, sample_user, sample_approver
    ):
        """Two services on separate connections race to approve the same transaction."""
        from ledgerfeed.database.factories import create_sqlite_database

        txn = transaction_service.create_transaction(make_candidate())
        other_db = create_sqlite_database(database_path=temp_db.database_path)
        try:
            other = TransactionService(other_db, now=fixed_clock)
            first = temp_db.transition_transaction_status(
                txn.id, TransactionStatus.PENDING, TransactionStatus.APPROVED, sample_approver.id
            )
            second = other_db.transition_transaction_status(
                txn.id, TransactionStatus.PENDING, TransactionStatus.APPROVED, sample_user.id
            )
            assert first is True
            assert second is False
            assert other.get_transaction(txn.id).approved_by == sample_approver.id
        finally:
            other_db.disconnect()

    def test_reject(self, transaction_service, make_candidate):
        txn = transaction_service.create_transaction(make_candidate())

        rejected = transaction_service.reject_transaction(txn.id)

        assert rejected.status == TransactionStatus.REJECTED
        assert rejected.approved_by is None

    def test_reject_twice_is_idempotent(self, transaction_service, make_candidate):
        txn = transaction_service.create_transaction(make_candidate())

        transaction_service.reject_transaction(txn.id)
        again = transaction_service.reject_transaction(txn.id)

        assert again.status == TransactionStatus.REJECTED

    def test_reject_approved_is_noop(self, transaction_service, make_candidate, sample_approver):
        txn = transaction_service.create_transaction(make_candidate())
        transaction_service.approve_transaction(txn.id, sample_approver.id)

        result = transaction_service.reject_transaction(txn.id)

        assert result.status == TransactionStatus.APPROVED
        assert result.approved_by == sample_approver.id

    def test_reject_missing_transaction(self, transaction_service):
        with pytest.raises(NotFoundError):
            transaction_service.reject_transaction("missing")


class TestImmutability:
    """Approved transactions can no longer change."""

    def test_cannot_edit_approved(self, transaction_service, make_candidate, sample_approver):
        txn = transaction_service.create_transaction(make_candidate())
        approved = transaction_service.approve_transaction(txn.id, sample_approver.id)

        with pytest.raises(ImmutableStateError, match="Cannot edit approved transactions"):
            transaction_service.update_transaction(
                txn.id, TransactionCandidate(description="Sneaky edit")
            )

        assert transaction_service.get_transaction(txn.id) == approved

    def test_cannot_delete_approved(self, transaction_service, make_candidate, sample_approver, sample_post):
        """Create, approve, then delete fails and nothing changes."""
        txn = transaction_service.create_transaction(make_candidate(post_id=sample_post.id))
        assert txn.status == TransactionStatus.PENDING

        approved = transaction_service.approve_transaction(txn.id, sample_approver.id)
        assert approved.status == TransactionStatus.APPROVED

        with pytest.raises(ImmutableStateError, match="Cannot delete approved transactions"):
            transaction_service.delete_transaction(txn.id)

        assert transaction_service.get_transaction(txn.id) == approved
        assert transaction_service.db.get_post_transaction_link(sample_post.id) == txn.id

    def test_edit_loses_to_approval_on_other_connection(
        self, transaction_service, make_candidate, sample_approver, temp_db, monkeypatch
    ):
        """An approval committed between the edit's read and its write wins."""
        txn = transaction_service.create_transaction(make_candidate("100.00"))
        approve_on_other_connection_before(
            temp_db, monkeypatch, "update_transaction", sample_approver.id
        )

        with pytest.raises(ImmutableStateError, match="Cannot edit approved transactions"):
            transaction_service.update_transaction(
                txn.id, TransactionCandidate(description="Edited while approving")
            )

        monkeypatch.undo()
        stored = transaction_service.get_transaction(txn.id)
        assert stored.status == TransactionStatus.APPROVED
        assert stored.approved_by == sample_approver.id
        assert stored.description == "Office supplies"

    def test_delete_loses_to_approval_on_other_connection(
        self, transaction_service, make_candidate, sample_approver, sample_post, temp_db, monkeypatch
    ):
        """An approval committed between the delete's read and its write wins."""
        txn = transaction_service.create_transaction(make_candidate(post_id=sample_post.id))
        approve_on_other_connection_before(
            temp_db, monkeypatch, "delete_transaction", sample_approver.id
        )

        with pytest.raises(ImmutableStateError, match="Cannot delete approved transactions"):
            transaction_service.delete_transaction(txn.id)

        monkeypatch.undo()
        stored = transaction_service.get_transaction(txn.id)
        assert stored is not None
        assert stored.status == TransactionStatus.APPROVED
        assert temp_db.get_post_transaction_link(sample_post.id) == txn.id

    def test_immutable_error_is_distinct_from_validation(self):
        assert not issubclass(ImmutableStateError, ValidationError)


class TestDeleteTransaction:
    """Tests for deleting transactions."""

    def test_delete_pending(self, transaction_service, make_candidate, temp_db, sample_accounts):
        txn = transaction_service.create_transaction(make_candidate())

        transaction_service.delete_transaction(txn.id)

        assert transaction_service.get_transaction(txn.id) is None
        assert temp_db.get_account_entry_count(sample_accounts["Cash"].id) == 0

    def test_delete_clears_post_link(self, transaction_service, make_candidate, sample_post, temp_db):
        txn = transaction_service.create_transaction(make_candidate(post_id=sample_post.id))

        transaction_service.delete_transaction(txn.id)

        assert temp_db.get_post_transaction_link(sample_post.id) is None

    def test_post_can_be_relinked_after_delete(self, transaction_service, make_candidate, sample_post):
        first = transaction_service.create_transaction(make_candidate(post_id=sample_post.id))
        transaction_service.delete_transaction(first.id)

        second = transaction_service.create_transaction(make_candidate("42.00", post_id=sample_post.id))

        assert second.post_id == sample_post.id

    def test_delete_rejected(self, transaction_service, make_candidate):
        txn = transaction_service.create_transaction(make_candidate())
        transaction_service.reject_transaction(txn.id)

        transaction_service.delete_transaction(txn.id)

        assert transaction_service.get_transaction(txn.id) is None

    def test_delete_missing(self, transaction_service):
        with pytest.raises(NotFoundError):
            transaction_service.delete_transaction("missing")


class TestListTransactions:
    """Tests for listing transactions."""

    def test_filter_by_status(self, transaction_service, make_candidate, sample_approver):
        pending = transaction_service.create_transaction(make_candidate("10.00"))
        approved = transaction_service.create_transaction(make_candidate("20.00"))
        transaction_service.approve_transaction(approved.id, sample_approver.id)

        assert [t.id for t in transaction_service.list_transactions(status=TransactionStatus.PENDING)] == [
            pending.id
        ]
        assert [
            t.id for t in transaction_service.list_transactions(status=TransactionStatus.APPROVED)
        ] == [approved.id]
        assert len(transaction_service.list_transactions()) == 2

    def test_filter_by_post(self, transaction_service, make_candidate, sample_post):
        linked = transaction_service.create_transaction(make_candidate(post_id=sample_post.id))
        transaction_service.create_transaction(make_candidate("5.00"))

        result = transaction_service.list_transactions(post_id=sample_post.id)

        assert [t.id for t in result] == [linked.id]
