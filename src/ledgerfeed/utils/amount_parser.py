"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "1,234.56"

    Ledger amounts are never negative; the side of an entry (debit or credit)
    carries the direction.

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed or is negative
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    # Remove currency symbols, thousands separators and whitespace
    cleaned = re.sub(r"[$,\s]", "", amount_str)

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")

    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if amount < 0:
        raise ValueError(f"Amount cannot be negative: '{amount_str}'")
    return amount


def split_entry_option(option: str) -> tuple[str, Decimal]:
    """Split an entry given as ACCOUNT:AMOUNT.

    The account part may itself contain colons; the amount follows the last one.

    Examples:
        "Cash:100.00"          -> ("Cash", Decimal("100.00"))
        "Office Supplies:$45"  -> ("Office Supplies", Decimal("45"))

    Raises:
        ValueError: If the option has no account or no parsable amount
    """
    account, sep, amount = option.rpartition(":")
    if not sep or not account.strip():
        raise ValueError(f"Entry '{option}' must look like ACCOUNT:AMOUNT")
    return account.strip(), parse_amount(amount)
