"""
Test helpers: identities, a transaction builder and stub storages that
fail, stall, or wait on a gate.
"""

import asyncio

from src.models.session import SessionIdentity
from src.models.transaction import Transaction
from src.services.storage import InMemoryTransactionStorage


ALICE = SessionIdentity(user_id="alice", email="alice@example.com")
BOB = SessionIdentity(user_id="bob", email="bob@example.com")


def make_transaction(
    id: str,
    credit_date=None,
    credit_amount=None,
    debit_date=None,
    debit_amount=None,
    debit_type=None,
    owner_id: str = "alice",
) -> Transaction:
    """Build a stored transaction without going through a ledger."""
    return Transaction(
        id=id,
        owner_id=owner_id,
        credit_date=credit_date,
        credit_amount=credit_amount,
        debit_date=debit_date,
        debit_amount=debit_amount,
        debit_type=debit_type,
    )


class FailingStorage(InMemoryTransactionStorage):
    """Every call raises while `failing` is set."""

    def __init__(self, error: Exception, failing: bool = True):
        super().__init__()
        self.error = error
        self.failing = failing

    async def fetch_all(self, session):
        if self.failing:
            raise self.error
        return await super().fetch_all(session)

    async def create(self, session, draft):
        if self.failing:
            raise self.error
        return await super().create(session, draft)

    async def update(self, session, transaction_id, draft):
        if self.failing:
            raise self.error
        return await super().update(session, transaction_id, draft)

    async def delete(self, session, transaction_id):
        if self.failing:
            raise self.error
        return await super().delete(session, transaction_id)


class SlowStorage(InMemoryTransactionStorage):
    """Every call takes longer than any test timeout."""

    async def fetch_all(self, session):
        await asyncio.sleep(5)
        return await super().fetch_all(session)

    async def create(self, session, draft):
        await asyncio.sleep(5)
        return await super().create(session, draft)


class GatedStorage(InMemoryTransactionStorage):
    """
    The first fetch (or create) does its work, then waits on a gate.

    Lets a test complete another operation while this one is in flight.
    """

    def __init__(self, gate_fetch: bool = True, gate_create: bool = False):
        super().__init__()
        self.gate = asyncio.Event()
        self.gate_fetch = gate_fetch
        self.gate_create = gate_create
        self.fetch_calls = 0
        self.create_calls = 0

    async def fetch_all(self, session):
        self.fetch_calls += 1
        snapshot = await super().fetch_all(session)
        if self.gate_fetch and self.fetch_calls == 1:
            await self.gate.wait()
        return snapshot

    async def create(self, session, draft):
        self.create_calls += 1
        created = await super().create(session, draft)
        if self.gate_create:
            self.gate_create = False
            await self.gate.wait()
        return created


class RequiresAuthStorage(InMemoryTransactionStorage):
    """In-memory storage that refuses anonymous sessions, like Sheets."""
    requires_authentication = True
