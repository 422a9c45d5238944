"""User domain service."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional
from ledgerfeed.domain.entities import User as UserEntity
from ledgerfeed.domain.errors import ConflictError, validation_failed
from ledgerfeed.domain.validation import validate_user

if TYPE_CHECKING:
    from ledgerfeed.database.base import Database


class UserService:
    """Service for managing users."""

    def __init__(self, db: Database):
        """Initialize user service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_user(self, name: str, email: str) -> str:
        """Create a new user.

        Args:
            name: Display name
            email: Email address (unique)

        Returns:
            User ID

        Raises:
            ValidationError: If name or email is invalid
            ConflictError: If the email is already registered
        """
        result = validate_user(name, email)
        if not result.is_valid:
            raise validation_failed(result.errors)

        email = email.strip().lower()
        if self.db.get_user_by_email(email) is not None:
            raise ConflictError(f"User with email '{email}' already exists")

        return self.db.create_user(name=name.strip(), email=email)

    def get_user(self, user_id: str) -> Optional[UserEntity]:
        """Get user by ID."""
        return self.db.get_user(user_id)

    def list_users(self) -> list[UserEntity]:
        """List all users."""
        return self.db.list_users()
