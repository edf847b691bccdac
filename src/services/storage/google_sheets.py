"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the remote backend because:
1. Non-technical users can view their ledger directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions (the ledger trusts each returned row as canonical)
- Limited query capabilities (we filter in Python)

Every row carries an owner_id column. Reads and writes only ever touch
rows owned by the calling session.

gspread is synchronous; calls run in a worker thread so the event loop
(and the ledger's timeouts) keep working while a request is in flight.
"""

import asyncio
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import uuid4

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.config import get_settings
from src.models.session import SessionIdentity
from src.models.transaction import DebitType, Transaction, TransactionDraft
from src.services.storage.interface import (
    AuthenticationRequiredError,
    NotFoundError,
    PersistenceError,
    RemoteUnavailableError,
    StorageError,
    TransactionStorageInterface,
)


# Column mappings for the Transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "owner_id",
    "created_at",
    "credit_date",
    "credit_amount",
    "debit_date",
    "debit_amount",
    "debit_type",
    "charge",
]

_transient = retry(
    retry=retry_if_exception_type(gspread.exceptions.APIError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets
        self._logger = structlog.get_logger(__name__)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise RemoteUnavailableError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise RemoteUnavailableError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise RemoteUnavailableError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_transactions_sheet(self) -> gspread.Worksheet:
        """Get or create the Transactions worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.transactions_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.transactions_sheet_name,
                rows=1000,
                cols=len(TRANSACTION_COLUMNS),
            )
            sheet.append_row(TRANSACTION_COLUMNS)
        return sheet

    def bootstrap(self) -> bool:
        """
        Make sure the worksheet and its header row exist.

        Failure here is logged and ignored: it does not affect reading or
        writing a worksheet that already exists.
        """
        try:
            self.get_transactions_sheet()
            return True
        except Exception as e:
            self._logger.warning("sheet_bootstrap_failed", error=str(e))
            return False


class GoogleSheetsTransactionStorage(TransactionStorageInterface):
    """
    Google Sheets implementation of transaction storage.

    Transactions are stored as rows in a worksheet, one transaction per
    row. The charge column is written for people reading the sheet; it
    is never read back (the model recomputes it).
    """

    requires_authentication = True

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _transaction_to_row(self, transaction: Transaction) -> list:
        """Convert a Transaction to a spreadsheet row."""
        return [
            transaction.id,
            transaction.owner_id,
            transaction.created_at.isoformat(),
            transaction.credit_date.isoformat() if transaction.credit_date else "",
            str(transaction.credit_amount) if transaction.credit_amount is not None else "",
            transaction.debit_date.isoformat() if transaction.debit_date else "",
            str(transaction.debit_amount) if transaction.debit_amount is not None else "",
            transaction.debit_type.value if transaction.debit_type else "",
            str(transaction.charge),
        ]

    def _row_to_transaction(self, row: list) -> Transaction:
        """Convert a spreadsheet row to a Transaction."""
        # Handle missing columns gracefully
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return Transaction(
            id=safe_get(0),
            owner_id=safe_get(1),
            created_at=datetime.fromisoformat(safe_get(2)),
            credit_date=date.fromisoformat(safe_get(3)) if safe_get(3) else None,
            credit_amount=Decimal(safe_get(4)) if safe_get(4) else None,
            debit_date=date.fromisoformat(safe_get(5)) if safe_get(5) else None,
            debit_amount=Decimal(safe_get(6)) if safe_get(6) else None,
            debit_type=DebitType(safe_get(7)) if safe_get(7) else None,
        )

    def _require_identity(self, session: SessionIdentity) -> None:
        if not session.is_authenticated:
            raise AuthenticationRequiredError("Sign in to use the Google Sheets ledger")

    def _find_row(self, sheet, session: SessionIdentity, transaction_id: str):
        """Return (sheet_row_number, row) of an owned record."""
        all_rows = sheet.get_all_values()
        # Start from 2 (row 1 is header)
        for idx, row in enumerate(all_rows[1:], start=2):
            if row and row[0] == str(transaction_id):
                if len(row) > 1 and row[1] == session.user_id:
                    return idx, row
                break
        raise NotFoundError(f"Transaction not found: {transaction_id}")

    # -- sync workers (run in a thread) --------------------------------------

    @_transient
    def _fetch_rows(self) -> list[list]:
        return self._client.get_transactions_sheet().get_all_values()[1:]

    @_transient
    def _append(self, transaction: Transaction) -> None:
        sheet = self._client.get_transactions_sheet()
        sheet.append_row(self._transaction_to_row(transaction), value_input_option="RAW")

    @_transient
    def _replace(
        self,
        session: SessionIdentity,
        transaction_id: str,
        draft: TransactionDraft,
    ) -> Transaction:
        sheet = self._client.get_transactions_sheet()
        idx, row = self._find_row(sheet, session, transaction_id)
        current = self._row_to_transaction(row)
        updated = current.model_copy(update=draft.editable_values())
        sheet.update(
            range_name=f"A{idx}",
            values=[self._transaction_to_row(updated)],
            value_input_option="RAW",
        )
        return updated

    @_transient
    def _remove(self, session: SessionIdentity, transaction_id: str) -> None:
        sheet = self._client.get_transactions_sheet()
        idx, _ = self._find_row(sheet, session, transaction_id)
        sheet.delete_rows(idx)

    # -- interface -----------------------------------------------------------

    async def fetch_all(self, session: SessionIdentity) -> list[Transaction]:
        """All rows owned by the session, newest first."""
        self._require_identity(session)
        try:
            rows = await asyncio.to_thread(self._fetch_rows)
        except StorageError:
            raise
        except Exception as e:
            raise RemoteUnavailableError(f"Failed to fetch transactions: {e}")

        transactions = []
        for row in rows:
            if not row or not row[0]:  # Skip empty rows
                continue
            if len(row) < 2 or row[1] != session.user_id:
                continue
            transactions.append(self._row_to_transaction(row))

        # Sort by creation descending (newest first)
        transactions.sort(key=lambda t: t.created_at, reverse=True)
        return transactions

    async def create(
        self,
        session: SessionIdentity,
        draft: TransactionDraft,
    ) -> Transaction:
        """Append a new row."""
        self._require_identity(session)
        transaction = Transaction(
            id=str(uuid4()),
            owner_id=session.user_id,
            created_at=datetime.utcnow(),
            **draft.editable_values(),
        )
        try:
            await asyncio.to_thread(self._append, transaction)
        except StorageError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to save transaction: {e}")
        return transaction

    async def update(
        self,
        session: SessionIdentity,
        transaction_id: str,
        draft: TransactionDraft,
    ) -> Transaction:
        """Rewrite the owned row in place."""
        self._require_identity(session)
        try:
            return await asyncio.to_thread(self._replace, session, transaction_id, draft)
        except StorageError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to update transaction: {e}")

    async def delete(self, session: SessionIdentity, transaction_id: str) -> None:
        """Delete the owned row."""
        self._require_identity(session)
        try:
            await asyncio.to_thread(self._remove, session, transaction_id)
        except StorageError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to delete transaction: {e}")
