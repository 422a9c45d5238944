"""Domain layer for ledgerfeed application."""

from ledgerfeed.domain.transaction import TransactionService
from ledgerfeed.domain.account import AccountService
from ledgerfeed.domain.post import PostService
from ledgerfeed.domain.user import UserService

__all__ = [
    "TransactionService",
    "AccountService",
    "PostService",
    "UserService",
]
