"""
Ledger engine package.

Charge policy, date partitioning, aggregation, the session ledger
store and CSV export.
"""

from src.ledger.aggregator import (
    debit_type_breakdown,
    monthly_series,
    totals,
    yearly_series,
)
from src.ledger.charges import FIXED_CHARGES, calculate_charge
from src.ledger.export import (
    CSV_MIME_TYPE,
    CsvExport,
    NothingToExportError,
    build_month_export,
    build_year_export,
    encode_csv,
    month_export_filename,
    year_export_filename,
)
from src.ledger.partition import (
    MONTH_NAMES,
    available_years,
    effective_date,
    filter_transactions,
    group_by_month,
    group_by_year,
    month_key_of,
    month_label,
    year_of,
)
from src.ledger.store import LedgerStore

__all__ = [
    # Charge policy
    "FIXED_CHARGES",
    "calculate_charge",
    # Date partitions
    "MONTH_NAMES",
    "available_years",
    "effective_date",
    "filter_transactions",
    "group_by_month",
    "group_by_year",
    "month_key_of",
    "month_label",
    "year_of",
    # Aggregation
    "debit_type_breakdown",
    "monthly_series",
    "totals",
    "yearly_series",
    # Store
    "LedgerStore",
    # Export
    "CSV_MIME_TYPE",
    "CsvExport",
    "NothingToExportError",
    "build_month_export",
    "build_year_export",
    "encode_csv",
    "month_export_filename",
    "year_export_filename",
]
