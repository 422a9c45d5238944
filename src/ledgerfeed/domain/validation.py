"""Pure validators for ledgerfeed documents.

Validators never raise for invalid input and never touch the database. They
return a verdict together with every problem found so callers can report
everything wrong at once. Reference checks (does this account exist?) belong
to the services, which consult the repository.

Amounts are rounded to cents with ROUND_HALF_UP. Each amount is rounded before
it is added to a total, so totals match what a service stores. Amounts outside
the storable range never reach the totals.
"""

import re
from datetime import UTC, date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable, Optional

from ledgerfeed.domain.entities import (
    AccountType,
    EntryCandidate,
    TransactionCandidate,
    TransactionValidation,
    ValidationResult,
)

POST_MAX_LENGTH = 500
ACCOUNT_NAME_MAX_LENGTH = 100
USER_NAME_MAX_LENGTH = 50
PERSONA_NAME_MAX_LENGTH = 30
TRANSACTION_DESCRIPTION_MAX_LENGTH = 200
MIN_TRANSACTION_ENTRIES = 2
MIN_AMOUNT = Decimal("0.01")
MAX_AMOUNT = Decimal("999999999.99")
BALANCE_TOLERANCE = Decimal("0.01")

CENT = Decimal("0.01")
ZERO = Decimal("0")

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current UTC time. Default clock for date checks."""
    return datetime.now(UTC)


def round_currency(amount: Decimal) -> Decimal:
    """Round an amount to cents, half away from zero."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(amount: Decimal) -> str:
    """Format an amount as US dollars, e.g. $1,234.50 or -$5.00."""
    rounded = round_currency(amount)
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,.2f}"


def coerce_amount(value: Any) -> Optional[Decimal]:
    """Coerce a candidate amount to Decimal, or None if it is not a number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, (int, float)):
        value = str(value)
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return amount if amount.is_finite() else None


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def _amount_out_of_range(amount: Decimal) -> bool:
    return amount < MIN_AMOUNT or amount > MAX_AMOUNT


def stored_amount(value: Any) -> Decimal:
    """Return a candidate amount as it would be stored, rounded to cents.

    Values that are not numbers, or whose magnitude exceeds MAX_AMOUNT, count
    as zero. validate_entry reports those separately.
    """
    amount = coerce_amount(value)
    # copy_abs is exact; abs() would overflow on huge exponents
    if amount is None or amount.copy_abs() > MAX_AMOUNT:
        return ZERO
    return round_currency(amount)


def validate_entry(entry: EntryCandidate) -> ValidationResult:
    """Validate one debit or credit line.

    Rules are checked in order and every violation is collected:

    - the account reference must be present and non-empty;
    - exactly one of debit and credit must be a number greater than zero;
    - a present amount must lie within [0.01, 999999999.99].

    Args:
        entry: Candidate entry

    Returns:
        ValidationResult with every problem found
    """
    errors: list[str] = []

    if _is_blank(entry.account_id):
        errors.append("Account ID is required")

    debit = coerce_amount(entry.debit_amount)
    credit = coerce_amount(entry.credit_amount)
    has_debit = debit is not None and debit > 0
    has_credit = credit is not None and credit > 0

    if not has_debit and not has_credit:
        errors.append("Entry must have either a debit or credit amount")

    if has_debit and has_credit:
        errors.append("Entry cannot have both debit and credit amounts")

    if has_debit and _amount_out_of_range(debit):
        errors.append(f"Debit amount must be between {MIN_AMOUNT} and {MAX_AMOUNT}")

    if has_credit and _amount_out_of_range(credit):
        errors.append(f"Credit amount must be between {MIN_AMOUNT} and {MAX_AMOUNT}")

    return ValidationResult(is_valid=not errors, errors=errors)


def as_calendar_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return None


def validate_transaction(
    candidate: TransactionCandidate, now: Optional[Clock] = None
) -> TransactionValidation:
    """Validate a whole transaction and compute its running totals.

    Checks description, date, creator and entry count, runs validate_entry on
    every line (problems prefixed with "Entry N: ") and finally verifies that
    total debits equal total credits within BALANCE_TOLERANCE.

    Below the entry-count floor the per-entry and balance checks are skipped,
    but totals are still computed from whatever entries exist so a UI can
    show them while the user is still editing.

    Args:
        candidate: Candidate transaction
        now: Clock returning the current time; defaults to utc_now

    Returns:
        TransactionValidation with verdict, errors and rounded totals
    """
    clock = now or utc_now
    errors: list[str] = []

    description = candidate.description
    if _is_blank(description):
        errors.append("Transaction description is required")
    elif len(description) > TRANSACTION_DESCRIPTION_MAX_LENGTH:
        errors.append(
            f"Transaction description must be {TRANSACTION_DESCRIPTION_MAX_LENGTH} "
            "characters or less"
        )

    if _is_blank(candidate.date):
        errors.append("Transaction date is required")
    else:
        txn_date = as_calendar_date(candidate.date)
        if txn_date is None:
            errors.append("Transaction date must be a date")
        elif txn_date > clock().date():
            errors.append("Transaction date cannot be in the future")

    if _is_blank(candidate.created_by):
        errors.append("Transaction creator is required")

    entries = list(candidate.entries or [])
    enough_entries = len(entries) >= MIN_TRANSACTION_ENTRIES
    if not enough_entries:
        errors.append(
            f"Transaction must have at least {MIN_TRANSACTION_ENTRIES} entries"
        )
    else:
        for index, entry in enumerate(entries, start=1):
            result = validate_entry(entry)
            errors.extend(f"Entry {index}: {problem}" for problem in result.errors)

    total_debits = ZERO
    total_credits = ZERO
    for entry in entries:
        total_debits += stored_amount(entry.debit_amount)
        total_credits += stored_amount(entry.credit_amount)

    balance = abs(total_debits - total_credits)
    if enough_entries and balance > BALANCE_TOLERANCE:
        errors.append(
            f"Transaction does not balance. Debits: {format_currency(total_debits)}, "
            f"Credits: {format_currency(total_credits)}"
        )

    return TransactionValidation(
        is_valid=not errors,
        errors=errors,
        total_debits=total_debits,
        total_credits=total_credits,
        balance=balance,
    )


def validate_post(
    content: Optional[str], author_id: Optional[str], author_persona: Optional[str]
) -> ValidationResult:
    """Validate a feed post before it is stored."""
    errors: list[str] = []

    if _is_blank(content):
        errors.append("Post content is required")
    elif len(content) > POST_MAX_LENGTH:
        errors.append(f"Post content must be {POST_MAX_LENGTH} characters or less")

    if _is_blank(author_id):
        errors.append("Author ID is required")

    if _is_blank(author_persona):
        errors.append("Author persona is required")
    elif len(author_persona) > PERSONA_NAME_MAX_LENGTH:
        errors.append(
            f"Author persona must be {PERSONA_NAME_MAX_LENGTH} characters or less"
        )

    return ValidationResult(is_valid=not errors, errors=errors)


def validate_account(
    name: Optional[str], account_type: Optional[str], category: Optional[str]
) -> ValidationResult:
    """Validate an account definition."""
    errors: list[str] = []

    if _is_blank(name):
        errors.append("Account name is required")
    elif len(name) > ACCOUNT_NAME_MAX_LENGTH:
        errors.append(
            f"Account name must be {ACCOUNT_NAME_MAX_LENGTH} characters or less"
        )

    valid_types = [t.value for t in AccountType]
    if account_type not in valid_types:
        errors.append(f"Account type must be one of: {', '.join(valid_types)}")

    if _is_blank(category):
        errors.append("Account category is required")

    return ValidationResult(is_valid=not errors, errors=errors)


def validate_user(name: Optional[str], email: Optional[str]) -> ValidationResult:
    """Validate a user profile."""
    errors: list[str] = []

    if _is_blank(name):
        errors.append("User name is required")
    elif len(name) > USER_NAME_MAX_LENGTH:
        errors.append(f"User name must be {USER_NAME_MAX_LENGTH} characters or less")

    if _is_blank(email):
        errors.append("User email is required")
    elif not EMAIL_PATTERN.match(email):
        errors.append("User email must be a valid email address")

    return ValidationResult(is_valid=not errors, errors=errors)
