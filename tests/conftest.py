"""
Shared fixtures.

No test talks to a real backend: ledgers run on in-memory storage or on
the stub storages in tests/helpers.py.
"""

from datetime import date
from decimal import Decimal

import pytest

from src.config import get_settings
from src.ledger import LedgerStore
from src.models.transaction import DebitType, TransactionDraft
from src.services.storage import InMemoryTransactionStorage
from tests.helpers import ALICE


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    """Settings are cached per process; tests may change the environment."""
    monkeypatch.delenv("STORAGE_BACKEND", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def storage() -> InMemoryTransactionStorage:
    return InMemoryTransactionStorage()


@pytest.fixture
def store(storage) -> LedgerStore:
    return LedgerStore(storage, session=ALICE, timeout_seconds=1.0)


@pytest.fixture
def npsb_draft() -> TransactionDraft:
    return TransactionDraft(
        debit_amount=Decimal("1000"),
        debit_type=DebitType.NPSB,
        debit_date=date(2025, 2, 10),
    )


@pytest.fixture
def credit_draft() -> TransactionDraft:
    return TransactionDraft(
        credit_amount=Decimal("500"),
        credit_date=date(2025, 1, 5),
    )
