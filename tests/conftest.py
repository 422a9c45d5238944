"""Shared pytest fixtures for ledgerfeed tests."""

import tempfile
import os
from datetime import date, datetime, UTC
from decimal import Decimal
import pytest

from ledgerfeed.database.factories import create_sqlite_database
from ledgerfeed.domain.account import AccountService
from ledgerfeed.domain.entities import EntryCandidate, TransactionCandidate
from ledgerfeed.domain.post import PostService
from ledgerfeed.domain.transaction import TransactionService
from ledgerfeed.domain.user import UserService

FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)
TODAY = FIXED_NOW.date()


def fixed_clock() -> datetime:
    """Clock pinned to FIXED_NOW."""
    return FIXED_NOW


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def user_service(temp_db):
    """Create a UserService with a temporary database."""
    return UserService(temp_db)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def post_service(temp_db):
    """Create a PostService with a temporary database."""
    return PostService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService whose clock is pinned to FIXED_NOW."""
    return TransactionService(temp_db, now=fixed_clock)


@pytest.fixture
def sample_user(user_service):
    """Create the user who records transactions."""
    user_id = user_service.create_user(name="Casey Clerk", email="casey@example.com")
    return user_service.get_user(user_id)


@pytest.fixture
def sample_approver(user_service):
    """Create a second user who reviews transactions."""
    user_id = user_service.create_user(name="Riley Reviewer", email="riley@example.com")
    return user_service.get_user(user_id)


@pytest.fixture
def sample_accounts(account_service):
    """Create a small chart of accounts keyed by name."""
    accounts = {}
    for name, account_type, category in [
        ("Cash", "asset", "Current Assets"),
        ("Office Supplies", "expense", "Operating Expenses"),
        ("Sales", "revenue", "Operating Revenue"),
    ]:
        account_id = account_service.create_account(
            name=name, account_type=account_type, category=category
        )
        accounts[name] = account_service.get_account(account_id)
    return accounts


@pytest.fixture
def sample_post(post_service, sample_user):
    """Create a post that can be turned into a transaction."""
    post_id = post_service.create_post(
        content="Bought printer paper for the office",
        author_id=sample_user.id,
        author_persona="Bookkeeper",
    )
    return post_service.get_post(post_id)


@pytest.fixture
def make_candidate(sample_user, sample_accounts):
    """Build a balanced candidate: debit Office Supplies, credit Cash."""

    def _make(
        amount: str = "100.00",
        credit_amount: str | None = None,
        description: str = "Office supplies",
        txn_date: date = TODAY,
        post_id: str | None = None,
    ) -> TransactionCandidate:
        return TransactionCandidate(
            description=description,
            date=txn_date,
            created_by=sample_user.id,
            entries=[
                EntryCandidate(
                    account_id=sample_accounts["Office Supplies"].id,
                    debit_amount=Decimal(amount),
                ),
                EntryCandidate(
                    account_id=sample_accounts["Cash"].id,
                    credit_amount=Decimal(credit_amount or amount),
                ),
            ],
            post_id=post_id,
        )

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
