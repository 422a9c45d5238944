"""Abstract database interface.

Lookups report "not found" as None (or False); failures of the backing store
raise PersistenceError so the two can never be confused.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Iterable, Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from ledgerfeed.domain.entities import (
    User,
    Account,
    Post,
    Transaction,
    TransactionStatus,
)

# (account_id, debit_amount, credit_amount)
EntryRow = tuple[str, Optional[Decimal], Optional[Decimal]]


class Database(ABC):
    """Abstract database interface for ledgerfeed."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Group writes into one unit that commits together or not at all.

        Nested calls join the outermost unit. If anything inside raises, every
        write of the unit is rolled back; store failures surface as
        ConsistencyError.
        """
        pass

    # User operations
    @abstractmethod
    def create_user(self, name: str, email: str) -> str:
        """Create a user. Returns user ID."""
        pass

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email address."""
        pass

    @abstractmethod
    def list_users(self) -> list[User]:
        """List all users."""
        pass

    @abstractmethod
    def user_exists(self, user_id: str) -> bool:
        """Check whether a user ID resolves."""
        pass

    # Account operations
    @abstractmethod
    def create_account(self, name: str, account_type: str, category: str) -> str:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_name(self, name: str, account_type: str) -> Optional[Account]:
        """Get account by name and type."""
        pass

    @abstractmethod
    def list_accounts(self, active_only: bool = False) -> list[Account]:
        """List accounts, optionally only the active ones."""
        pass

    @abstractmethod
    def update_account(
        self,
        account_id: str,
        name: Optional[str] = None,
        category: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> None:
        """Update the mutable fields of an account. None leaves a field as is."""
        pass

    @abstractmethod
    def delete_account(self, account_id: str) -> None:
        """Delete an account."""
        pass

    @abstractmethod
    def account_exists(self, account_id: str) -> bool:
        """Check whether an account ID resolves."""
        pass

    @abstractmethod
    def get_account_entry_count(self, account_id: str) -> int:
        """Count transaction entries referencing an account."""
        pass

    # Post operations
    @abstractmethod
    def create_post(self, content: str, author_id: str, author_persona: str) -> str:
        """Create a post. Returns post ID."""
        pass

    @abstractmethod
    def get_post(self, post_id: str) -> Optional[Post]:
        """Get post by ID."""
        pass

    @abstractmethod
    def list_posts(self, author_id: Optional[str] = None) -> list[Post]:
        """List posts, newest first, optionally filtered by author."""
        pass

    @abstractmethod
    def delete_post(self, post_id: str) -> None:
        """Delete a post."""
        pass

    @abstractmethod
    def link_post_to_transaction(self, post_id: str, transaction_id: Optional[str]) -> bool:
        """Set or clear (None) the transaction link of a post.

        Setting a link only succeeds while the post has none. Returns True if
        the post was changed.
        """
        pass

    @abstractmethod
    def get_post_transaction_link(self, post_id: str) -> Optional[str]:
        """Get the transaction ID linked to a post, or None."""
        pass

    # Transaction operations
    @abstractmethod
    def insert_transaction(
        self,
        description: str,
        date: date,
        status: TransactionStatus,
        created_by: str,
        entries: list[EntryRow],
        post_id: Optional[str] = None,
        approved_by: Optional[str] = None,
    ) -> str:
        """Insert a transaction together with its entries. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID, including its entries."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        status: Optional[TransactionStatus] = None,
        post_id: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> list[Transaction]:
        """List transactions, newest date first, with optional filters."""
        pass

    @abstractmethod
    def update_transaction(
        self,
        transaction_id: str,
        description: str,
        date: date,
        status: TransactionStatus,
        entries: list[EntryRow],
        approved_by: Optional[str] = None,
        from_statuses: Optional[Iterable[TransactionStatus]] = None,
    ) -> bool:
        """Replace the fields and entries of a transaction.

        With from_statuses, the stored status is checked and the row locked in
        one step, so the edit applies only if the status is still one of them.
        Returns False if the transaction does not exist or is in another status.
        """
        pass

    @abstractmethod
    def transition_transaction_status(
        self,
        transaction_id: str,
        from_status: TransactionStatus,
        to_status: TransactionStatus,
        approved_by: Optional[str] = None,
    ) -> bool:
        """Move a transaction from one status to another.

        The change only applies if the stored status still equals from_status.
        Returns True if a row was changed.
        """
        pass

    @abstractmethod
    def delete_transaction(
        self,
        transaction_id: str,
        from_statuses: Optional[Iterable[TransactionStatus]] = None,
    ) -> bool:
        """Delete a transaction and its entries.

        from_statuses works as for update_transaction. Returns False if nothing
        was deleted.
        """
        pass
