"""
CSV Export

Serializes transactions to CSV for download.

Fixed column order, header row first, one row per transaction, missing
values as empty cells. Values containing the delimiter, quotes or
newlines are quoted by the csv module.
"""

import csv
import io
from enum import Enum
from typing import Iterable, Sequence

from pydantic import BaseModel, Field

from src.ledger.partition import MONTH_NAMES, PeriodValue, filter_transactions
from src.models.transaction import TransactionFields


CSV_MIME_TYPE = "text/csv"

CSV_HEADERS = [
    "Credit Date",
    "Credit Amount",
    "Debit Date",
    "Debit Amount",
    "Debit Type",
    "Charge",
]


class NothingToExportError(ValueError):
    """The selected period has no transactions."""
    pass


class CsvExport(BaseModel):
    """A ready-to-download CSV file."""

    filename: str
    mime_type: str = CSV_MIME_TYPE
    content: str
    row_count: int = Field(ge=0)


def _cell(value) -> str:
    if value is None:
        return ""
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return str(value)


def _row(transaction: TransactionFields) -> list[str]:
    return [
        _cell(transaction.credit_date),
        _cell(transaction.credit_amount),
        _cell(transaction.debit_date),
        _cell(transaction.debit_amount),
        _cell(transaction.debit_type),
        _cell(transaction.charge),
    ]


def encode_csv(collection: Iterable[TransactionFields]) -> str:
    """Encode transactions as CSV text (header + one row each)."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for transaction in collection:
        writer.writerow(_row(transaction))
    return buffer.getvalue()


def month_export_filename(product: str, year: int, month: int) -> str:
    """e.g. bDesh2bKash_January_2025.csv"""
    return f"{product}_{MONTH_NAMES[int(month) - 1]}_{int(year)}.csv"


def year_export_filename(product: str, year: int) -> str:
    """e.g. bDesh2bKash_2025.csv"""
    return f"{product}_{int(year)}.csv"


def _build(filename: str, selected: Sequence[TransactionFields]) -> CsvExport:
    if not selected:
        raise NothingToExportError("No data to export")
    return CsvExport(
        filename=filename,
        content=encode_csv(selected),
        row_count=len(selected),
    )


def build_month_export(
    collection: Sequence[TransactionFields],
    product: str,
    year: PeriodValue,
    month: PeriodValue,
) -> CsvExport:
    """
    Export one year-month.

    Raises:
        NothingToExportError: No transactions fall in that month
    """
    selected = filter_transactions(collection, year=year, month=month)
    return _build(month_export_filename(product, int(year), int(month)), selected)


def build_year_export(
    collection: Sequence[TransactionFields],
    product: str,
    year: PeriodValue,
) -> CsvExport:
    """
    Export a whole year.

    Raises:
        NothingToExportError: No transactions fall in that year
    """
    selected = filter_transactions(collection, year=year)
    return _build(year_export_filename(product, int(year)), selected)
