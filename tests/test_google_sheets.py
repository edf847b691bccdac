"""
Tests for the Google Sheets backend.

The gspread worksheet is replaced by an in-memory fake; no API calls.
"""

import gspread
import pytest
from datetime import date
from decimal import Decimal

from src.models.session import ANONYMOUS
from src.models.transaction import DebitType, TransactionDraft
from src.services.storage import (
    AuthenticationRequiredError,
    GoogleSheetsClient,
    GoogleSheetsTransactionStorage,
    NotFoundError,
    PersistenceError,
    RemoteUnavailableError,
)
from src.services.storage.google_sheets import TRANSACTION_COLUMNS
from tests.helpers import ALICE, BOB


class FakeWorksheet:
    """Just enough of gspread.Worksheet for the storage."""

    def __init__(self, rows=None):
        self.rows = [list(row) for row in (rows or [])]

    def get_all_values(self):
        return [list(row) for row in self.rows]

    def append_row(self, values, value_input_option=None):
        self.rows.append(list(values))

    def update(self, range_name=None, values=None, value_input_option=None):
        index = int(range_name[1:]) - 1
        self.rows[index] = list(values[0])

    def delete_rows(self, index):
        del self.rows[index - 1]


class FakeClient:
    def __init__(self, sheet=None, error=None):
        self.sheet = sheet or FakeWorksheet([TRANSACTION_COLUMNS])
        self.error = error

    def get_transactions_sheet(self):
        if self.error:
            raise self.error
        return self.sheet


class FakeSpreadsheet:
    def __init__(self):
        self.added = None

    def worksheet(self, title):
        raise gspread.WorksheetNotFound(title)

    def add_worksheet(self, title, rows, cols):
        self.added = FakeWorksheet()
        return self.added


@pytest.fixture
def client():
    return FakeClient()


@pytest.fixture
def sheets(client):
    return GoogleSheetsTransactionStorage(client)


@pytest.fixture
def sheets_env(monkeypatch, tmp_path):
    credentials = tmp_path / "credentials.json"
    credentials.write_text("{}")
    monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", str(credentials))
    monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "sheet-123")


@pytest.mark.asyncio
class TestGoogleSheetsStorage:
    """Tests for GoogleSheetsTransactionStorage."""

    async def test_create_appends_row(self, sheets, client):
        """Test a new transaction becomes one row with the charge column filled."""
        created = await sheets.create(ALICE, TransactionDraft(
            debit_date=date(2025, 2, 10),
            debit_amount=Decimal("1000"),
            debit_type=DebitType.NPSB,
        ))

        row = client.sheet.rows[1]
        assert row[0] == created.id
        assert row[1] == "alice"
        assert row[3:] == ["", "", "2025-02-10", "1000", "NPSB", "10"]

    async def test_fetch_round_trip(self, sheets):
        """Test rows come back as equal transactions, newest first."""
        first = await sheets.create(ALICE, TransactionDraft(
            credit_date=date(2025, 1, 5), credit_amount=Decimal("500"),
        ))
        second = await sheets.create(ALICE, TransactionDraft(
            credit_date=date(2025, 1, 6), credit_amount=Decimal("600"),
        ))
        fetched = await sheets.fetch_all(ALICE)
        assert sorted(fetched, key=lambda t: t.credit_date) == [first, second]
        assert fetched[0].created_at >= fetched[1].created_at

    async def test_fetch_filters_by_owner(self, sheets):
        """Test a session only sees its own rows."""
        await sheets.create(BOB, TransactionDraft(
            credit_date=date(2025, 1, 5), credit_amount=Decimal("500"),
        ))
        assert await sheets.fetch_all(ALICE) == []

    async def test_stored_charge_is_ignored(self, client, sheets):
        """Test the charge is recomputed, whatever the sheet says."""
        client.sheet.rows.append([
            "abc", "alice", "2025-01-01T00:00:00", "", "", "2025-01-01", "50", "RTGS", "999",
        ])
        [transaction] = await sheets.fetch_all(ALICE)
        assert transaction.charge == Decimal("100")

    async def test_update_rewrites_row(self, sheets, client):
        """Test an edit rewrites the row in place."""
        created = await sheets.create(ALICE, TransactionDraft(
            debit_date=date(2025, 2, 10),
            debit_amount=Decimal("1000"),
            debit_type=DebitType.NPSB,
        ))
        updated = await sheets.update(ALICE, created.id, TransactionDraft(
            debit_date=date(2025, 2, 10),
            debit_amount=Decimal("1000"),
            debit_type=DebitType.RTGS,
        ))

        assert updated.charge == Decimal("100")
        assert updated.created_at == created.created_at
        assert len(client.sheet.rows) == 2
        assert client.sheet.rows[1][7:] == ["RTGS", "100"]

    async def test_delete_removes_row(self, sheets, client):
        """Test a delete removes the row."""
        created = await sheets.create(ALICE, TransactionDraft(
            credit_date=date(2025, 1, 5), credit_amount=Decimal("500"),
        ))
        await sheets.delete(ALICE, created.id)
        assert client.sheet.rows == [TRANSACTION_COLUMNS]

    async def test_other_owner_is_not_found(self, sheets):
        """Test rows owned by someone else can't be touched."""
        created = await sheets.create(BOB, TransactionDraft(
            credit_date=date(2025, 1, 5), credit_amount=Decimal("500"),
        ))
        with pytest.raises(NotFoundError):
            await sheets.delete(ALICE, created.id)

    async def test_anonymous_is_refused(self, sheets):
        """Test the backend requires a signed-in session."""
        assert sheets.requires_authentication is True
        with pytest.raises(AuthenticationRequiredError):
            await sheets.fetch_all(ANONYMOUS)

    async def test_fetch_failure(self):
        """Test an unreachable sheet is RemoteUnavailableError."""
        sheets = GoogleSheetsTransactionStorage(FakeClient(error=RuntimeError("offline")))
        with pytest.raises(RemoteUnavailableError):
            await sheets.fetch_all(ALICE)

    async def test_write_failure(self):
        """Test a failed append is PersistenceError."""
        sheets = GoogleSheetsTransactionStorage(FakeClient(error=RuntimeError("quota")))
        with pytest.raises(PersistenceError):
            await sheets.create(ALICE, TransactionDraft(
                credit_date=date(2025, 1, 5), credit_amount=Decimal("500"),
            ))


class TestGoogleSheetsClient:
    """Tests for GoogleSheetsClient setup."""

    def test_missing_sheet_is_created_with_header(self, sheets_env, monkeypatch):
        """Test the worksheet is created with a header row."""
        spreadsheet = FakeSpreadsheet()
        client = GoogleSheetsClient()
        monkeypatch.setattr(client, "get_spreadsheet", lambda: spreadsheet)

        client.get_transactions_sheet()

        assert spreadsheet.added.rows == [TRANSACTION_COLUMNS]

    def test_bootstrap_failure_is_not_fatal(self, sheets_env, monkeypatch):
        """Test bootstrap reports failure instead of raising."""
        client = GoogleSheetsClient()

        def unreachable():
            raise RemoteUnavailableError("offline")

        monkeypatch.setattr(client, "get_transactions_sheet", unreachable)
        assert client.bootstrap() is False

    def test_bootstrap_success(self, sheets_env, monkeypatch):
        """Test bootstrap succeeds when the sheet is reachable."""
        client = GoogleSheetsClient()
        monkeypatch.setattr(client, "get_transactions_sheet", lambda: FakeWorksheet())
        assert client.bootstrap() is True
