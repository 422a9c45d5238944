"""Shared domain error messages and error types."""

from typing import Iterable, Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling. Every domain error carries the
    full list of individual problems in ``errors``.
    """

    def __init__(self, message: str, errors: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.errors: list[str] = list(errors) if errors is not None else [message]


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class UnresolvedReferenceError(DomainError):
    """A user, account or post reference does not resolve."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class ImmutableStateError(DomainError):
    """Attempt to change a transaction that can no longer be changed."""


class PersistenceError(RuntimeError):
    """The backing store failed to carry out an operation."""


class ConsistencyError(PersistenceError):
    """An atomic unit of writes failed and was rolled back."""


def validation_failed(errors: list[str]) -> ValidationError:
    """Build a ValidationError that lists every problem."""
    return ValidationError("Validation failed: " + "; ".join(errors), errors)


def references_unresolved(errors: list[str]) -> UnresolvedReferenceError:
    """Build an UnresolvedReferenceError that lists every problem."""
    return UnresolvedReferenceError("Invalid references: " + "; ".join(errors), errors)


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def account_not_found(account_id: str) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def post_not_found(post_id: str) -> str:
    """Return message for missing post."""
    return f"Post {post_id} not found"


def invalid_account_reference(account_id: str) -> str:
    """Return message for an entry that points at an unknown account."""
    return f"Invalid account ID: {account_id}"


def inactive_account_reference(account_id: str) -> str:
    """Return message for an entry that points at a deactivated account."""
    return f"Account {account_id} is inactive"


CANNOT_EDIT_APPROVED = "Cannot edit approved transactions"
CANNOT_DELETE_APPROVED = "Cannot delete approved transactions"
POST_ALREADY_LINKED = "Post already has an associated transaction"
POST_DELETE_BLOCKED = (
    "Cannot delete post with associated transaction. Delete the transaction first."
)


def account_delete_blocked(account_id: str, entry_count: int) -> str:
    """Return message when account is referenced by transaction entries."""
    return (
        f"Cannot delete account {account_id}: it is used by "
        f"{entry_count} transaction entr{'ies' if entry_count != 1 else 'y'}. "
        "Deactivate it instead."
    )
