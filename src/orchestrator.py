"""
Application Wiring

This module builds the components the front end talks to:
1. A SessionManager (who is signed in)
2. A LedgerStore bound to one persistence backend

DESIGN DECISION: There is exactly one ledger and one storage interface.
Running with no backend, with a demo sign-in, or against Google Sheets
is a matter of which storage is plugged in, not a separate program.
"""

from typing import Optional

import structlog

from src.activity import ActivityLogger, configure_logging
from src.config import get_settings
from src.ledger import LedgerStore
from src.services.session import SessionManager
from src.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsTransactionStorage,
    InMemoryTransactionStorage,
    TransactionStorageInterface,
)
from src.validation import TransactionValidator


logger = structlog.get_logger(__name__)

STORAGE_BACKENDS = ("memory", "google_sheets")


def create_storage(backend: str) -> TransactionStorageInterface:
    """
    Build the storage backend by name.

    Args:
        backend: "memory" or "google_sheets"

    Raises:
        ValueError: Unknown backend name
    """
    if backend == "memory":
        return InMemoryTransactionStorage()
    if backend == "google_sheets":
        client = GoogleSheetsClient()
        client.bootstrap()
        return GoogleSheetsTransactionStorage(client)
    raise ValueError(f"Unknown storage backend: {backend}")


def create_ledger_components(
    backend: Optional[str] = None,
    storage: Optional[TransactionStorageInterface] = None,
) -> tuple[SessionManager, LedgerStore]:
    """
    Factory function to create the application components.

    Args:
        backend: Storage backend name; defaults to the configured one.
                 If the remote backend isn't configured we fall back to
                 in-memory storage.
        storage: A ready-made backend (tests); overrides `backend`.

    Returns:
        (session_manager, ledger_store)
    """
    app_settings = get_settings().app
    configure_logging(app_settings.log_level)

    if storage is None:
        backend = backend or app_settings.storage_backend
        if backend not in STORAGE_BACKENDS:
            raise ValueError(f"Unknown storage backend: {backend}")
        try:
            storage = create_storage(backend)
        except Exception as e:
            # Remote storage not configured - continue without it
            logger.warning("storage_fallback_to_memory", backend=backend, error=str(e))
            storage = InMemoryTransactionStorage()

    session_manager = SessionManager()
    store = LedgerStore(
        storage=storage,
        session=session_manager.identity,
        validator=TransactionValidator(),
        activity_logger=ActivityLogger(),
        timeout_seconds=app_settings.remote_timeout_seconds,
        max_reload_attempts=app_settings.max_reload_attempts,
    )
    session_manager.subscribe(store.on_session_changed)

    return session_manager, store
