"""Transaction domain service.

Owns the approval lifecycle of a transaction:

    pending --approve--> approved   (terminal, immutable)
    pending --reject---> rejected   (editable; an edit returns it to pending)

Every write that touches more than one row runs inside ``db.atomic()`` so a
transaction is never observable with half of its entries, and a post never
points at a transaction that was not stored.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional
from ledgerfeed.domain.entities import (
    EntryCandidate,
    Transaction as TransactionEntity,
    TransactionCandidate,
    TransactionStatus,
    TransactionValidation,
)
from ledgerfeed.domain.errors import (
    CANNOT_DELETE_APPROVED,
    CANNOT_EDIT_APPROVED,
    POST_ALREADY_LINKED,
    ConflictError,
    ImmutableStateError,
    NotFoundError,
    ValidationError,
    inactive_account_reference,
    invalid_account_reference,
    references_unresolved,
    transaction_not_found,
    validation_failed,
)
from ledgerfeed.domain.validation import (
    Clock,
    as_calendar_date,
    stored_amount,
    validate_transaction,
)

if TYPE_CHECKING:
    from ledgerfeed.database.base import Database, EntryRow

logger = logging.getLogger(__name__)

# Statuses from which a transaction may still be edited or deleted
EDITABLE_STATUSES = (TransactionStatus.PENDING, TransactionStatus.REJECTED)


class TransactionService:
    """Service for creating transactions and moving them through approval."""

    def __init__(self, db: Database, now: Optional[Clock] = None):
        """Initialize transaction service.

        Args:
            db: Database instance
            now: Clock used for the future-date check; defaults to UTC system time
        """
        self.db = db
        self.now = now

    def preview_transaction(self, candidate: TransactionCandidate) -> TransactionValidation:
        """Validate a candidate without storing anything.

        Useful for showing running totals while a transaction is being edited.
        """
        return validate_transaction(candidate, now=self.now)

    def _check_references(self, candidate: TransactionCandidate) -> list[str]:
        """Resolve creator, accounts and post of a candidate that passed validation."""
        problems: list[str] = []

        if not self.db.user_exists(candidate.created_by):
            problems.append("Invalid user ID")

        seen: set[str] = set()
        for entry in candidate.entries or []:
            if entry.account_id in seen:
                continue
            seen.add(entry.account_id)
            account = self.db.get_account(entry.account_id)
            if account is None:
                problems.append(invalid_account_reference(entry.account_id))
            elif not account.is_active:
                problems.append(inactive_account_reference(entry.account_id))

        if candidate.post_id is not None and self.db.get_post(candidate.post_id) is None:
            problems.append("Invalid post ID")

        return problems

    def _validate_or_raise(self, candidate: TransactionCandidate) -> None:
        validation = validate_transaction(candidate, now=self.now)
        if not validation.is_valid:
            logger.info("Rejected transaction candidate: %s", validation.errors)
            raise validation_failed(validation.errors)

        problems = self._check_references(candidate)
        if problems:
            logger.info("Unresolved references in transaction candidate: %s", problems)
            raise references_unresolved(problems)

    @staticmethod
    def _entry_rows(entries: list[EntryCandidate]) -> list[EntryRow]:
        rows: list[EntryRow] = []
        for entry in entries:
            debit = stored_amount(entry.debit_amount)
            credit = stored_amount(entry.credit_amount)
            rows.append((entry.account_id, debit if debit > 0 else None, credit if credit > 0 else None))
        return rows

    def _require(self, transaction_id: str) -> TransactionEntity:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def _raise_locked_out(self, transaction_id: str, message: str) -> None:
        """Raise the error for a write that found the transaction gone or approved."""
        self._require(transaction_id)
        raise ImmutableStateError(message)

    def create_transaction(self, candidate: TransactionCandidate) -> TransactionEntity:
        """Validate and store a new transaction.

        The status of a new transaction is always pending. If the candidate
        names a post, the post is linked to the new transaction in the same
        atomic unit.

        Args:
            candidate: Candidate transaction

        Returns:
            The stored transaction

        Raises:
            ValidationError: If the candidate is invalid (lists every problem)
            UnresolvedReferenceError: If creator, accounts or post don't resolve
            ConflictError: If the post already has a transaction
            ConsistencyError: If the store failed part way; nothing was kept
        """
        self._validate_or_raise(candidate)

        with self.db.atomic():
            if candidate.post_id is not None:
                if self.db.get_post_transaction_link(candidate.post_id) is not None:
                    raise ConflictError(POST_ALREADY_LINKED)

            transaction_id = self.db.insert_transaction(
                description=candidate.description.strip(),
                date=as_calendar_date(candidate.date),
                status=TransactionStatus.PENDING,
                created_by=candidate.created_by,
                entries=self._entry_rows(candidate.entries),
                post_id=candidate.post_id,
                approved_by=None,
            )

            if candidate.post_id is not None:
                # A post linked since the check above rolls the insert back
                if not self.db.link_post_to_transaction(candidate.post_id, transaction_id):
                    raise ConflictError(POST_ALREADY_LINKED)

        logger.info(
            "Created transaction %s with %d entries", transaction_id, len(candidate.entries)
        )
        return self._require(transaction_id)

    def get_transaction(self, transaction_id: str) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        status: Optional[TransactionStatus] = None,
        post_id: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> list[TransactionEntity]:
        """List transactions with filters."""
        return self.db.list_transactions(status=status, post_id=post_id, created_by=created_by)

    def update_transaction(
        self, transaction_id: str, candidate: TransactionCandidate
    ) -> TransactionEntity:
        """Edit description, date or entries of a transaction.

        Fields left as None on the candidate keep their stored values. The
        merged document is validated again, and any successful edit sends the
        transaction back to pending for re-approval.

        Args:
            transaction_id: Transaction ID to update
            candidate: New values

        Returns:
            The updated transaction

        Raises:
            NotFoundError: If the transaction doesn't exist
            ImmutableStateError: If the transaction is approved
            ValidationError: If the merged transaction is invalid
        """
        existing = self._require(transaction_id)
        if existing.status == TransactionStatus.APPROVED:
            raise ImmutableStateError(CANNOT_EDIT_APPROVED)

        if candidate.post_id is not None and candidate.post_id != existing.post_id:
            raise ValidationError("The post of a transaction cannot be changed")

        entries = candidate.entries
        if entries is None:
            entries = [
                EntryCandidate(
                    account_id=e.account_id,
                    debit_amount=e.debit_amount,
                    credit_amount=e.credit_amount,
                )
                for e in existing.entries
            ]

        merged = TransactionCandidate(
            description=(
                candidate.description if candidate.description is not None else existing.description
            ),
            date=as_calendar_date(candidate.date) if candidate.date is not None else existing.date,
            created_by=existing.created_by,
            entries=entries,
            post_id=None,
        )
        self._validate_or_raise(merged)

        with self.db.atomic():
            updated = self.db.update_transaction(
                transaction_id=transaction_id,
                description=merged.description.strip(),
                date=merged.date,
                status=TransactionStatus.PENDING,
                entries=self._entry_rows(merged.entries),
                approved_by=None,
                from_statuses=EDITABLE_STATUSES,
            )
            if not updated:
                self._raise_locked_out(transaction_id, CANNOT_EDIT_APPROVED)

        logger.info(
            "Updated transaction %s (was %s, now pending)", transaction_id, existing.status.value
        )
        return self._require(transaction_id)

    def approve_transaction(self, transaction_id: str, approver_id: str) -> TransactionEntity:
        """Approve a pending transaction.

        The creator may approve their own transaction. Approving a transaction
        that is not pending changes nothing.

        Args:
            transaction_id: Transaction ID
            approver_id: ID of the approving user

        Returns:
            The transaction as stored after the call

        Raises:
            ValidationError: If approver_id is empty
            UnresolvedReferenceError: If approver_id is not a known user
            NotFoundError: If the transaction doesn't exist
        """
        if approver_id is None or not approver_id.strip():
            raise ValidationError("Approver ID is required")
        if not self.db.user_exists(approver_id):
            raise references_unresolved(["Invalid approver ID"])

        existing = self._require(transaction_id)

        with self.db.atomic():
            changed = self.db.transition_transaction_status(
                transaction_id,
                from_status=TransactionStatus.PENDING,
                to_status=TransactionStatus.APPROVED,
                approved_by=approver_id,
            )

        if changed:
            logger.info("Transaction %s approved by %s", transaction_id, approver_id)
        else:
            logger.info(
                "Approve ignored for transaction %s: status is %s",
                transaction_id,
                existing.status.value,
            )
        return self._require(transaction_id)

    def reject_transaction(self, transaction_id: str) -> TransactionEntity:
        """Reject a pending transaction.

        Rejecting a transaction that is not pending changes nothing, so
        rejecting twice leaves it rejected.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        existing = self._require(transaction_id)

        with self.db.atomic():
            changed = self.db.transition_transaction_status(
                transaction_id,
                from_status=TransactionStatus.PENDING,
                to_status=TransactionStatus.REJECTED,
                approved_by=None,
            )

        if changed:
            logger.info("Transaction %s rejected", transaction_id)
        else:
            logger.info(
                "Reject ignored for transaction %s: status is %s",
                transaction_id,
                existing.status.value,
            )
        return self._require(transaction_id)

    def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction, its entries and the link from its post.

        Args:
            transaction_id: Transaction ID to delete

        Raises:
            NotFoundError: If the transaction doesn't exist
            ImmutableStateError: If the transaction is approved
        """
        txn = self._require(transaction_id)
        if txn.status == TransactionStatus.APPROVED:
            raise ImmutableStateError(CANNOT_DELETE_APPROVED)

        with self.db.atomic():
            if not self.db.delete_transaction(transaction_id, from_statuses=EDITABLE_STATUSES):
                self._raise_locked_out(transaction_id, CANNOT_DELETE_APPROVED)
            if txn.post_id is not None:
                self.db.link_post_to_transaction(txn.post_id, None)

        logger.info("Deleted transaction %s", transaction_id)
