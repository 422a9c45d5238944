"""Domain model entities for ledgerfeed.

These are pure data classes representing business concepts, independent of
database schema. Candidate classes model input that has not been validated
yet: every field is optional. Only the lifecycle service turns a candidate
into a fully populated Transaction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class AccountType(str, Enum):
    """Classification of a ledger account."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class TransactionStatus(str, Enum):
    """Approval state of a transaction."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class User:
    """User domain entity."""

    id: str
    name: str
    email: str
    created_at: datetime


@dataclass(frozen=True)
class Account:
    """Ledger account domain entity."""

    id: str
    name: str
    account_type: AccountType
    category: str
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class Post:
    """Social feed post, optionally linked to one transaction."""

    id: str
    content: str
    author_id: str
    author_persona: str
    transaction_id: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class TransactionEntry:
    """A single debit or credit line of a transaction."""

    id: str
    transaction_id: str
    account_id: str
    debit_amount: Optional[Decimal]
    credit_amount: Optional[Decimal]


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity with its entries in display order."""

    id: str
    post_id: Optional[str]
    description: str
    date: date
    status: TransactionStatus
    created_by: str
    approved_by: Optional[str]
    created_at: datetime
    entries: tuple[TransactionEntry, ...] = ()

    @property
    def total_debits(self) -> Decimal:
        return sum((e.debit_amount or Decimal("0") for e in self.entries), Decimal("0"))

    @property
    def total_credits(self) -> Decimal:
        return sum((e.credit_amount or Decimal("0") for e in self.entries), Decimal("0"))


@dataclass(frozen=True)
class EntryCandidate:
    """Unvalidated entry line as supplied by a caller."""

    account_id: Optional[str] = None
    debit_amount: Optional[Decimal] = None
    credit_amount: Optional[Decimal] = None


@dataclass(frozen=True)
class TransactionCandidate:
    """Unvalidated transaction as supplied by a caller.

    On update, fields left as None keep their stored values.
    """

    description: Optional[str] = None
    date: Optional[date] = None
    created_by: Optional[str] = None
    entries: Optional[list[EntryCandidate]] = None
    post_id: Optional[str] = None


@dataclass(frozen=True)
class ValidationResult:
    """Verdict of a validator plus every problem found."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TransactionValidation:
    """Verdict of the transaction validator with running totals."""

    is_valid: bool
    errors: list[str]
    total_debits: Decimal
    total_credits: Decimal
    balance: Decimal
