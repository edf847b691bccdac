"""Services package."""

from src.services.session import SessionManager
from src.services.storage import (
    AuthenticationRequiredError,
    GoogleSheetsClient,
    GoogleSheetsTransactionStorage,
    InMemoryTransactionStorage,
    NotFoundError,
    PersistenceError,
    RemoteUnavailableError,
    StorageError,
    TransactionStorageInterface,
)

__all__ = [
    # Session
    "SessionManager",
    # Storage services
    "AuthenticationRequiredError",
    "GoogleSheetsClient",
    "GoogleSheetsTransactionStorage",
    "InMemoryTransactionStorage",
    "NotFoundError",
    "PersistenceError",
    "RemoteUnavailableError",
    "StorageError",
    "TransactionStorageInterface",
]
