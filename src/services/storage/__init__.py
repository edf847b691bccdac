"""
Storage Services Package

Provides the abstract persistence interface and its implementations.
Runs in memory when no backend is configured, or against Google Sheets.
"""

from src.services.storage.interface import (
    AuthenticationRequiredError,
    NotFoundError,
    PersistenceError,
    RemoteUnavailableError,
    StorageError,
    TransactionStorageInterface,
)
from src.services.storage.memory import InMemoryTransactionStorage
from src.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsTransactionStorage,
)

__all__ = [
    # Interface
    "TransactionStorageInterface",
    # Exceptions
    "AuthenticationRequiredError",
    "NotFoundError",
    "PersistenceError",
    "RemoteUnavailableError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsTransactionStorage",
    "InMemoryTransactionStorage",
]
