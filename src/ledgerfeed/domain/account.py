"""Account domain service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional
from ledgerfeed.domain.entities import Account as AccountEntity, AccountType
from ledgerfeed.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    account_delete_blocked,
    account_not_found,
    validation_failed,
)
from ledgerfeed.domain.validation import validate_account

if TYPE_CHECKING:
    from ledgerfeed.database.base import Database

logger = logging.getLogger(__name__)


class AccountService:
    """Service for managing ledger accounts.

    The type of an account never changes once created. Name and category
    corrections and the active flag are the only edits allowed.
    """

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(self, name: str, account_type: AccountType | str, category: str) -> str:
        """Create a new account.

        Args:
            name: Account name
            account_type: One of asset, liability, equity, revenue, expense
            category: Free-text category

        Returns:
            Account ID

        Raises:
            ValidationError: If any field is invalid
            ConflictError: If an account with the same name and type exists
        """
        type_value = account_type.value if isinstance(account_type, AccountType) else account_type
        result = validate_account(name, type_value, category)
        if not result.is_valid:
            raise validation_failed(result.errors)

        name = name.strip()
        if self.db.get_account_by_name(name, type_value) is not None:
            raise ConflictError(f"Account '{name}' of type {type_value} already exists")

        account_id = self.db.create_account(
            name=name, account_type=type_value, category=category.strip()
        )
        logger.info("Created %s account %s (%s)", type_value, account_id, name)
        return account_id

    def get_account(self, account_id: str) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def require_account(self, account_id: str) -> AccountEntity:
        """Get account by ID or raise NotFoundError."""
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def list_accounts(self, active_only: bool = False) -> list[AccountEntity]:
        """List accounts.

        Args:
            active_only: If True, leave out deactivated accounts

        Returns:
            List of account entities
        """
        return self.db.list_accounts(active_only=active_only)

    def update_account(
        self, account_id: str, name: Optional[str] = None, category: Optional[str] = None
    ) -> None:
        """Correct the name or category of an account.

        Raises:
            NotFoundError: If account not found
            ValidationError: If the corrected account is invalid
            ConflictError: If the new name collides with another account of the same type
        """
        account = self.require_account(account_id)

        new_name = name.strip() if name is not None else account.name
        new_category = category.strip() if category is not None else account.category
        result = validate_account(new_name, account.account_type.value, new_category)
        if not result.is_valid:
            raise validation_failed(result.errors)

        existing = self.db.get_account_by_name(new_name, account.account_type.value)
        if existing is not None and existing.id != account_id:
            raise ConflictError(
                f"Account '{new_name}' of type {account.account_type.value} already exists"
            )

        self.db.update_account(account_id=account_id, name=new_name, category=new_category)

    def set_active(self, account_id: str, is_active: bool) -> None:
        """Activate or deactivate an account.

        Deactivated accounts keep their history but cannot be used by new or
        edited transactions.
        """
        self.require_account(account_id)
        self.db.update_account(account_id=account_id, is_active=is_active)
        logger.info("Account %s %s", account_id, "activated" if is_active else "deactivated")

    def delete_account(self, account_id: str) -> None:
        """Delete an account.

        Args:
            account_id: Account ID to delete

        Raises:
            NotFoundError: If account not found
            DependencyError: If any transaction entry references the account
        """
        self.require_account(account_id)

        entry_count = self.db.get_account_entry_count(account_id)
        if entry_count > 0:
            raise DependencyError(account_delete_blocked(account_id, entry_count))

        self.db.delete_account(account_id)
