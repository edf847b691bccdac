"""
In-Memory Storage Implementation

Used when no remote backend is configured, and in tests.

Ids are assigned locally from a counter, so they are monotonic by
creation order. Records are kept per owner; a session never sees
another session's records.
"""

import itertools
from datetime import datetime

from src.models.session import SessionIdentity
from src.models.transaction import Transaction, TransactionDraft
from src.services.storage.interface import (
    NotFoundError,
    TransactionStorageInterface,
)


class InMemoryTransactionStorage(TransactionStorageInterface):
    """Process-local transaction storage."""

    def __init__(self):
        # Insertion order == creation order
        self._records: dict[str, Transaction] = {}
        self._ids = itertools.count(1)

    def _owned(self, session: SessionIdentity, transaction_id: str) -> Transaction:
        record = self._records.get(str(transaction_id))
        if record is None or record.owner_id != session.user_id:
            raise NotFoundError(f"Transaction not found: {transaction_id}")
        return record

    async def fetch_all(self, session: SessionIdentity) -> list[Transaction]:
        """All of the session's records, newest first."""
        return [
            record for record in reversed(self._records.values())
            if record.owner_id == session.user_id
        ]

    async def create(
        self,
        session: SessionIdentity,
        draft: TransactionDraft,
    ) -> Transaction:
        """Store a new record with the next local id."""
        record = Transaction(
            id=str(next(self._ids)),
            owner_id=session.user_id,
            created_at=datetime.utcnow(),
            **draft.editable_values(),
        )
        self._records[record.id] = record
        return record

    async def update(
        self,
        session: SessionIdentity,
        transaction_id: str,
        draft: TransactionDraft,
    ) -> Transaction:
        """Replace the editable fields; id and created_at are kept."""
        current = self._owned(session, transaction_id)
        record = current.model_copy(update=draft.editable_values())
        self._records[record.id] = record
        return record

    async def delete(self, session: SessionIdentity, transaction_id: str) -> None:
        """Remove the record."""
        record = self._owned(session, transaction_id)
        del self._records[record.id]
