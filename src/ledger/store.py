"""
Ledger Store

The single source of truth for the session's transactions.

The store owns the in-memory collection (newest first) and is the only
thing that mutates it. Every write goes to the persistence backend first;
memory changes only after the backend has answered, using the record the
backend returned as ground truth.

CONCURRENCY:
- Operations run on one event loop but may be in flight together
  (a background reload and a user's add, for example).
- Remote calls run OUTSIDE the lock. Only the short step that changes the
  in-memory collection runs inside it, so completions never interleave.
- Every mutation bumps a counter when it is issued. A reload compares the
  counter before and after its fetch; if an edit was issued meanwhile the
  fetch may be stale, so it fetches again instead of overwriting.
- A write that completes after the session changed leaves the new
  session's collection alone.
- Every remote call has a timeout. A timeout is RemoteUnavailableError.
"""

import asyncio
from decimal import Decimal
from typing import Any, Awaitable, Mapping, Optional, TypeVar, Union

from src.activity import ActivityLogger
from src.ledger import aggregator, partition
from src.ledger.partition import PeriodValue
from src.models.session import ANONYMOUS, SessionIdentity
from src.models.transaction import (
    DebitType,
    LedgerTotals,
    PeriodSummary,
    Transaction,
    TransactionDraft,
)
from src.services.storage.interface import (
    NotFoundError,
    PersistenceError,
    RemoteUnavailableError,
    TransactionStorageInterface,
)
from src.validation import TransactionValidator, ValidationError


T = TypeVar("T")

DraftInput = Union[TransactionDraft, Mapping[str, Any]]

DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_RELOAD_ATTEMPTS = 3

# Banner texts for the presentation layer
LOAD_FAILED_MESSAGE = "Failed to load transactions. Please check your internet connection."
ADD_FAILED_MESSAGE = "Failed to add transaction. Please try again."
UPDATE_FAILED_MESSAGE = "Failed to update transaction. Please try again."
DELETE_FAILED_MESSAGE = "Failed to delete transaction. Please try again."
STALE_MESSAGE = "That transaction no longer exists. Please refresh."


class LedgerStore:
    """
    Session-scoped transaction ledger.

    Usage:
        store = LedgerStore(InMemoryTransactionStorage(), session=identity)
        await store.load()
        await store.add({"credit_amount": "500", "credit_date": "2025-01-05"})
    """

    def __init__(
        self,
        storage: TransactionStorageInterface,
        session: SessionIdentity = ANONYMOUS,
        validator: Optional[TransactionValidator] = None,
        activity_logger: Optional[ActivityLogger] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_reload_attempts: int = DEFAULT_RELOAD_ATTEMPTS,
    ):
        """
        Initialize the store.

        Args:
            storage: Persistence backend
            session: Identity every storage call is scoped to
            validator: Draft validator (default TransactionValidator)
            activity_logger: Structured logger (default ActivityLogger)
            timeout_seconds: Upper bound on each storage call
            max_reload_attempts: Fetches a load may make while racing edits
        """
        self._storage = storage
        self._session = session
        self._validator = validator or TransactionValidator()
        self._activity = activity_logger or ActivityLogger()
        self._timeout = timeout_seconds
        self._max_reload_attempts = max(1, max_reload_attempts)

        self._transactions: list[Transaction] = []
        self._lock = asyncio.Lock()
        self._mutation_version = 0
        self._last_error: Optional[str] = None

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        """Read-only snapshot, newest first."""
        return tuple(self._transactions)

    @property
    def session(self) -> SessionIdentity:
        return self._session

    @property
    def last_error(self) -> Optional[str]:
        """Message for the most recent failed operation, cleared on success."""
        return self._last_error

    def get(self, transaction_id: str) -> Optional[Transaction]:
        for transaction in self._transactions:
            if transaction.id == str(transaction_id):
                return transaction
        return None

    # =========================================================================
    # LOAD / SESSION
    # =========================================================================

    async def load(self) -> tuple[Transaction, ...]:
        """
        Replace the collection with the backend's records for the session.

        Raises:
            RemoteUnavailableError: Backend unreachable or timed out. The
                collection is left EMPTY, never partially merged.
        """
        session = self._session
        self._last_error = None

        if self._storage.requires_authentication and not session.is_authenticated:
            await self._reset(session, reason="anonymous_session")
            return self.transactions

        for attempt in range(1, self._max_reload_attempts + 1):
            issued_before = self._mutation_version
            try:
                fetched = await self._call(self._storage.fetch_all(session))
            except Exception as e:
                self._activity.storage_failed(session, "load", e)
                if self._session == session:
                    await self._reset(session, reason="load_failed")
                    self._last_error = LOAD_FAILED_MESSAGE
                if isinstance(e, RemoteUnavailableError):
                    raise
                raise RemoteUnavailableError(f"Could not load transactions: {e}") from e

            async with self._lock:
                if self._session != session:
                    # The session changed; the new session owns the collection
                    return self.transactions
                if self._mutation_version == issued_before:
                    self._transactions = self._unique(fetched)
                    self._activity.ledger_loaded(session, len(self._transactions), attempt)
                    return self.transactions

        self._activity.ledger_reload_abandoned(session, self._max_reload_attempts)
        return self.transactions

    async def on_session_changed(self, identity: SessionIdentity) -> None:
        """
        Session collaborator hook.

        Sign-out empties the collection. Sign-in switches identity and loads.
        """
        async with self._lock:
            self._session = identity
            self._mutation_version += 1
            self._transactions = []
        self._last_error = None
        self._activity.ledger_reset(identity, reason="session_changed")

        if identity.is_authenticated:
            await self.load()

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    async def add(self, draft: DraftInput) -> Transaction:
        """
        Validate, persist and prepend a new transaction.

        Raises:
            ValidationError: The draft is incomplete (nothing is sent)
            PersistenceError: The backend rejected the write (memory untouched)
        """
        session = self._session
        self._last_error = None
        draft = self._validated(session, "add", draft)

        self._mutation_version += 1
        try:
            created = await self._call(self._storage.create(session, draft))
        except PersistenceError as e:
            self._write_failed(session, "add", e, ADD_FAILED_MESSAGE)
            raise
        except Exception as e:
            self._write_failed(session, "add", e, ADD_FAILED_MESSAGE)
            raise PersistenceError(f"Could not save transaction: {e}") from e

        async with self._lock:
            if self._session != session:
                self._activity.mutation_discarded(session, "add", created.id)
                return created
            self._transactions = [created] + [
                t for t in self._transactions if t.id != created.id
            ]

        self._activity.transaction_added(session, created)
        return created

    async def update(self, transaction_id: str, changes: DraftInput) -> Transaction:
        """
        Replace a transaction's editable fields.

        `changes` is either a full TransactionDraft (full replacement) or a
        mapping merged over the current fields. A mapping needs the record
        in memory to merge over. The charge is recomputed.
        The transaction keeps its position in the collection.

        Raises:
            ValidationError: The merged draft is incomplete
            NotFoundError: No such record for this session, or a mapping for
                a record memory doesn't hold (memory untouched)
            PersistenceError: The backend rejected the write (memory untouched)
        """
        session = self._session
        transaction_id = str(transaction_id)
        self._last_error = None

        if isinstance(changes, TransactionDraft):
            data: DraftInput = changes
        else:
            current = self.get(transaction_id)
            if current is None:
                # Nothing to merge the partial changes over
                error = NotFoundError(f"Transaction not found: {transaction_id}")
                self._write_failed(session, "update", error, STALE_MESSAGE, transaction_id)
                raise error
            data = {**current.editable_values(), **dict(changes)}
        draft = self._validated(session, "update", data)

        self._mutation_version += 1
        try:
            updated = await self._call(
                self._storage.update(session, transaction_id, draft)
            )
        except NotFoundError as e:
            self._write_failed(session, "update", e, STALE_MESSAGE, transaction_id)
            raise
        except PersistenceError as e:
            self._write_failed(session, "update", e, UPDATE_FAILED_MESSAGE, transaction_id)
            raise
        except Exception as e:
            self._write_failed(session, "update", e, UPDATE_FAILED_MESSAGE, transaction_id)
            raise PersistenceError(f"Could not update transaction: {e}") from e

        async with self._lock:
            if self._session != session:
                self._activity.mutation_discarded(session, "update", transaction_id)
                return updated
            for index, transaction in enumerate(self._transactions):
                if transaction.id == updated.id:
                    self._transactions[index] = updated
                    break
            else:
                # A reload dropped it from memory while the write was in flight
                self._transactions.insert(0, updated)

        self._activity.transaction_updated(session, updated)
        return updated

    async def remove(self, transaction_id: str) -> None:
        """
        Delete a transaction.

        Raises:
            NotFoundError: No such record for this session (memory untouched)
            PersistenceError: The backend rejected the delete (memory untouched)
        """
        session = self._session
        transaction_id = str(transaction_id)
        self._last_error = None

        self._mutation_version += 1
        try:
            await self._call(self._storage.delete(session, transaction_id))
        except NotFoundError as e:
            self._write_failed(session, "remove", e, STALE_MESSAGE, transaction_id)
            raise
        except PersistenceError as e:
            self._write_failed(session, "remove", e, DELETE_FAILED_MESSAGE, transaction_id)
            raise
        except Exception as e:
            self._write_failed(session, "remove", e, DELETE_FAILED_MESSAGE, transaction_id)
            raise PersistenceError(f"Could not delete transaction: {e}") from e

        async with self._lock:
            if self._session != session:
                self._activity.mutation_discarded(session, "remove", transaction_id)
                return
            self._transactions = [
                t for t in self._transactions if t.id != transaction_id
            ]

        self._activity.transaction_removed(session, transaction_id)

    # =========================================================================
    # VIEWS
    # =========================================================================

    def available_years(self) -> list[int]:
        return partition.available_years(self._transactions)

    def filtered(
        self,
        year: PeriodValue = None,
        month: PeriodValue = None,
    ) -> list[Transaction]:
        return partition.filter_transactions(self._transactions, year, month)

    def totals(self, year: PeriodValue = None, month: PeriodValue = None) -> LedgerTotals:
        return aggregator.totals(self.filtered(year, month))

    def debit_type_breakdown(
        self,
        year: PeriodValue = None,
        month: PeriodValue = None,
    ) -> dict[DebitType, Decimal]:
        return aggregator.debit_type_breakdown(self.filtered(year, month))

    def monthly_series(
        self,
        year: PeriodValue = None,
        month: PeriodValue = None,
    ) -> list[PeriodSummary]:
        return aggregator.monthly_series(self.filtered(year, month))

    def yearly_series(self) -> list[PeriodSummary]:
        return aggregator.yearly_series(self._transactions)

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _call(self, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise RemoteUnavailableError(
                f"Storage did not respond within {self._timeout:g}s"
            ) from e

    def _validated(
        self,
        session: SessionIdentity,
        operation: str,
        data: DraftInput,
    ) -> TransactionDraft:
        try:
            return self._validator.validate(data)
        except ValidationError as e:
            self._activity.validation_failed(session, operation, e.missing_fields)
            raise

    def _write_failed(
        self,
        session: SessionIdentity,
        operation: str,
        error: Exception,
        message: str,
        transaction_id: Optional[str] = None,
    ) -> None:
        self._activity.storage_failed(session, operation, error, transaction_id)
        self._last_error = message

    async def _reset(self, session: SessionIdentity, reason: str) -> None:
        async with self._lock:
            self._transactions = []
        self._activity.ledger_reset(session, reason=reason)

    @staticmethod
    def _unique(fetched: list[Transaction]) -> list[Transaction]:
        seen: set[str] = set()
        unique = []
        for transaction in fetched:
            if transaction.id in seen:
                continue
            seen.add(transaction.id)
            unique.append(transaction)
        return unique
