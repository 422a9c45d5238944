"""Utility functions for ledgerfeed."""

from ledgerfeed.utils.date_parser import parse_date
from ledgerfeed.utils.amount_parser import parse_amount, split_entry_option
from ledgerfeed.utils.account_resolver import resolve_account

__all__ = ["parse_date", "parse_amount", "split_entry_option", "resolve_account"]
