"""Tests for session handling, settings and application wiring."""

import pytest
from datetime import date
from decimal import Decimal

from src.config import get_settings, validate_all_settings
from src.models.session import ANONYMOUS
from src.models.transaction import TransactionDraft
from src.orchestrator import create_ledger_components, create_storage
from src.services.session import SessionManager
from src.services.storage import InMemoryTransactionStorage


@pytest.fixture
def no_sheets_config(monkeypatch, tmp_path):
    monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
    monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.mark.asyncio
class TestSessionManager:
    """Tests for SessionManager."""

    async def test_sign_in_notifies(self):
        """Test listeners hear about a new identity."""
        manager = SessionManager()
        seen = []

        async def listener(identity):
            seen.append(identity)

        manager.subscribe(listener)
        identity = await manager.sign_in("alice", "alice@example.com")

        assert manager.is_authenticated
        assert seen == [identity]

    async def test_same_identity_is_not_a_change(self):
        """Test re-signing in as the same user notifies nobody."""
        manager = SessionManager()
        seen = []

        async def listener(identity):
            seen.append(identity)

        await manager.sign_in("alice")
        manager.subscribe(listener)
        await manager.sign_in("alice")

        assert seen == []

    async def test_unsubscribe(self):
        """Test an unsubscribed listener is not called."""
        manager = SessionManager()
        seen = []

        async def listener(identity):
            seen.append(identity)

        unsubscribe = manager.subscribe(listener)
        unsubscribe()
        await manager.sign_in("alice")

        assert seen == []

    async def test_anonymous_id_is_reserved(self):
        """Test nobody can sign in as the anonymous identity."""
        manager = SessionManager()
        seen = []

        async def listener(identity):
            seen.append(identity)

        manager.subscribe(listener)
        with pytest.raises(ValueError, match="reserved"):
            await manager.sign_in(" anonymous ")

        assert manager.identity == ANONYMOUS
        assert seen == []

    async def test_sign_out(self):
        """Test sign-out returns to the anonymous identity."""
        manager = SessionManager()
        await manager.sign_in("alice")
        await manager.sign_out()
        assert manager.identity == ANONYMOUS


@pytest.mark.asyncio
class TestWiring:
    """Tests for create_ledger_components."""

    async def test_session_changes_drive_the_store(self):
        """Test sign-in loads and sign-out clears the ledger."""
        storage = InMemoryTransactionStorage()
        manager, store = create_ledger_components(storage=storage)

        identity = await manager.sign_in("alice")
        created = await store.add(TransactionDraft(
            credit_date=date(2025, 1, 5), credit_amount=Decimal("500"),
        ))
        assert store.session == identity

        await manager.sign_out()
        assert store.transactions == ()

        await manager.sign_in("alice")
        assert store.transactions == (created,)

    async def test_unconfigured_sheets_falls_back_to_memory(self, no_sheets_config):
        """Test the app still runs when Google Sheets isn't configured."""
        _, store = create_ledger_components(backend="google_sheets")
        # Memory storage accepts the anonymous session; Sheets would refuse it
        created = await store.add(TransactionDraft(
            credit_date=date(2025, 1, 5), credit_amount=Decimal("500"),
        ))
        assert store.transactions == (created,)


class TestStorageFactory:
    """Tests for create_storage and settings."""

    def test_memory_backend(self):
        """Test the default backend."""
        assert isinstance(create_storage("memory"), InMemoryTransactionStorage)
        assert get_settings().app.storage_backend == "memory"

    def test_unknown_backend(self):
        """Test unknown backend names are rejected."""
        with pytest.raises(ValueError):
            create_storage("postgres")
        with pytest.raises(ValueError):
            create_ledger_components(backend="postgres")

    def test_backend_from_environment(self, monkeypatch):
        """Test the backend can be chosen through the environment."""
        monkeypatch.setenv("STORAGE_BACKEND", "google_sheets")
        get_settings.cache_clear()
        assert get_settings().app.storage_backend == "google_sheets"

    def test_validate_all_settings(self, no_sheets_config):
        """Test missing Sheets config is reported, not raised."""
        results = validate_all_settings()
        assert results["app"] is True
        assert results["google_sheets"] is False
