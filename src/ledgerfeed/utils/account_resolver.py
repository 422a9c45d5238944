"""Utility for resolving account names to IDs."""

from ledgerfeed.domain.account import AccountService


def resolve_account(account_service: AccountService, account: str) -> str:
    """Resolve account name or ID to account ID.

    Args:
        account_service: AccountService instance
        account: Account ID, account name, or "name/type" when the same name
            exists for several account types (e.g. "Sales/revenue")

    Returns:
        Account ID

    Raises:
        ValueError: If account is not found or the name is ambiguous
    """
    account = account.strip()
    if account_service.get_account(account) is not None:
        return account

    name, _, account_type = account.partition("/")
    matches = [
        acc
        for acc in account_service.list_accounts()
        if acc.name == name.strip()
        and (not account_type or acc.account_type.value == account_type.strip().lower())
    ]

    if not matches:
        raise ValueError(f"Account '{account}' not found")
    if len(matches) > 1:
        types = ", ".join(f"{name}/{acc.account_type.value}" for acc in matches)
        raise ValueError(f"Account name '{name}' is ambiguous; use one of: {types}")
    return matches[0].id
