"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for persistence.
This allows us to:
1. Run with no backend at all (in-memory storage)
2. Use Google Sheets (or a real database later) as the remote store
3. Use in-memory storage for testing
4. Keep the ledger decoupled from the storage implementation

The interface is intentionally small - four operations, every one of
them scoped to a session identity. A session may only read and write
its own records; the implementation enforces that.
"""

from abc import ABC, abstractmethod

from src.models.session import SessionIdentity
from src.models.transaction import Transaction, TransactionDraft


class TransactionStorageInterface(ABC):
    """
    Abstract interface for transaction persistence.

    Any storage implementation (in-memory, Google Sheets, PostgreSQL,
    etc.) must implement these methods.
    """

    # Backends that refuse anonymous sessions set this to True
    requires_authentication: bool = False

    @abstractmethod
    async def fetch_all(self, session: SessionIdentity) -> list[Transaction]:
        """
        Fetch every transaction owned by the session.

        Returns:
            Transactions ordered newest-created first

        Raises:
            RemoteUnavailableError: If the backend can't be reached
        """
        pass

    @abstractmethod
    async def create(
        self,
        session: SessionIdentity,
        draft: TransactionDraft,
    ) -> Transaction:
        """
        Create a record owned by the session.

        The backend assigns `id` and `created_at`.

        Returns:
            The canonical stored transaction

        Raises:
            PersistenceError: If the write is rejected
        """
        pass

    @abstractmethod
    async def update(
        self,
        session: SessionIdentity,
        transaction_id: str,
        draft: TransactionDraft,
    ) -> Transaction:
        """
        Replace the editable fields of a record owned by the session.

        Returns:
            The canonical updated transaction

        Raises:
            NotFoundError: If the record doesn't exist or isn't owned
            PersistenceError: If the write is rejected
        """
        pass

    @abstractmethod
    async def delete(self, session: SessionIdentity, transaction_id: str) -> None:
        """
        Delete a record owned by the session.

        Raises:
            NotFoundError: If the record doesn't exist or isn't owned
            PersistenceError: If the write is rejected
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Record not found, or not owned by the current session."""
    pass


class RemoteUnavailableError(StorageError):
    """Could not reach the storage backend (includes timeouts)."""
    pass


class PersistenceError(StorageError):
    """The backend rejected a write."""
    pass


class AuthenticationRequiredError(StorageError):
    """The backend refuses anonymous sessions."""
    pass
