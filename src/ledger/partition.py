"""
Date Partition Index

Derives year and month keys from a transaction and filters/groups
collections by them.

A transaction is placed in time by its EFFECTIVE DATE: the credit date
if present, else the debit date. Transactions with neither are left out
of every partitioned view but stay in the raw collection.

IMPORTANT: Filtering is looser than grouping. A transaction passes a
year/month filter when EITHER of its dates matches, not only the
effective date. An edit that moves the credit leg out of the selected
month must not hide a debit leg that is still inside it.
"""

from datetime import date
from typing import Iterable, Optional, Sequence, Union

from src.models.transaction import TransactionFields


MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

PeriodValue = Union[int, str, None]


def effective_date(transaction: TransactionFields) -> Optional[date]:
    """Credit date if present, else debit date."""
    return transaction.credit_date or transaction.debit_date


def year_of(transaction: TransactionFields) -> Optional[int]:
    eff = effective_date(transaction)
    return eff.year if eff else None


def month_key_of(transaction: TransactionFields) -> Optional[str]:
    """The "YYYY-MM" key of the effective date."""
    eff = effective_date(transaction)
    return eff.strftime("%Y-%m") if eff else None


def month_label(month_key: str) -> str:
    """'2025-01' -> 'Jan 2025'."""
    year, month = month_key.split("-")
    return f"{MONTH_NAMES[int(month) - 1][:3]} {year}"


def _normalize(value: PeriodValue, upper: Optional[int] = None) -> Optional[int]:
    """Accept 2025, "2025", "02" or blank; return an int or None."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    number = int(value)
    if upper is not None and not 1 <= number <= upper:
        raise ValueError(f"Month must be between 1 and {upper}, got {number}")
    return number


def _date_matches(d: Optional[date], year: Optional[int], month: Optional[int]) -> bool:
    if d is None:
        return False
    if year is not None and d.year != year:
        return False
    if month is not None and d.month != month:
        return False
    return True


def available_years(collection: Iterable[TransactionFields]) -> list[int]:
    """
    Distinct years of either date, newest first.

    Matches the filter: any year a record can be filtered into is listed.
    """
    years = set()
    for t in collection:
        if t.credit_date:
            years.add(t.credit_date.year)
        if t.debit_date:
            years.add(t.debit_date.year)
    return sorted(years, reverse=True)


def filter_transactions(
    collection: Sequence[TransactionFields],
    year: PeriodValue = None,
    month: PeriodValue = None,
) -> list:
    """
    Keep transactions falling in the given year and/or month.

    - No filters: the whole collection.
    - Year only: that year, any month.
    - Month only: that month in ANY year.
    - Both: that exact year-month.

    Original relative order is preserved.
    """
    year = _normalize(year)
    month = _normalize(month, upper=12)

    if year is None and month is None:
        return list(collection)

    return [
        t for t in collection
        if _date_matches(t.credit_date, year, month)
        or _date_matches(t.debit_date, year, month)
    ]


def group_by_month(
    collection: Iterable[TransactionFields],
    newest_first: bool = False,
) -> dict[str, list]:
    """
    Group by "YYYY-MM" of the effective date.

    Keys are ordered ascending (descending with newest_first). Each group
    keeps the collection's order. Undated transactions are skipped.
    """
    groups: dict[str, list] = {}
    for transaction in collection:
        key = month_key_of(transaction)
        if key is None:
            continue
        groups.setdefault(key, []).append(transaction)

    return {key: groups[key] for key in sorted(groups, reverse=newest_first)}


def group_by_year(collection: Iterable[TransactionFields]) -> dict[int, list]:
    """Group by effective-date year, years ascending."""
    groups: dict[int, list] = {}
    for transaction in collection:
        year = year_of(transaction)
        if year is None:
            continue
        groups.setdefault(year, []).append(transaction)

    return {year: groups[year] for year in sorted(groups)}
