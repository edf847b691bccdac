"""
Aggregator

Computes totals over any collection of transactions, globally and per
time partition.

GUARANTEES:
- Deterministic and order-independent (plain sums)
- Absent amounts count as zero
- An empty collection gives all-zero totals, never an error
"""

from decimal import Decimal
from typing import Iterable

from src.ledger.partition import group_by_month, group_by_year, month_label
from src.models.transaction import (
    DebitType,
    LedgerTotals,
    PeriodSummary,
    TransactionFields,
)


ZERO = Decimal("0")


def totals(collection: Iterable[TransactionFields]) -> LedgerTotals:
    """
    Total credit, debit and charge, and the resulting net balance.

    net_balance = total_credit - total_debit - total_charge
    """
    total_credit = ZERO
    total_debit = ZERO
    total_charge = ZERO

    for transaction in collection:
        total_credit += transaction.credit_amount or ZERO
        total_debit += transaction.debit_amount or ZERO
        total_charge += transaction.charge

    return LedgerTotals(
        total_credit=total_credit,
        total_debit=total_debit,
        total_charge=total_charge,
        net_balance=total_credit - total_debit - total_charge,
    )


def debit_type_breakdown(
    collection: Iterable[TransactionFields],
) -> dict[DebitType, Decimal]:
    """Summed debit amount per transfer channel."""
    breakdown: dict[DebitType, Decimal] = {}
    for transaction in collection:
        if transaction.debit_type is None or not transaction.debit_amount:
            continue
        breakdown[transaction.debit_type] = (
            breakdown.get(transaction.debit_type, ZERO) + transaction.debit_amount
        )
    return breakdown


def monthly_series(collection: Iterable[TransactionFields]) -> list[PeriodSummary]:
    """Totals per "YYYY-MM", ascending. Undated transactions are skipped."""
    return [
        PeriodSummary(
            key=key,
            label=month_label(key),
            transaction_count=len(group),
            totals=totals(group),
        )
        for key, group in group_by_month(collection).items()
    ]


def yearly_series(collection: Iterable[TransactionFields]) -> list[PeriodSummary]:
    """Totals per year, ascending."""
    return [
        PeriodSummary(
            key=str(year),
            label=str(year),
            transaction_count=len(group),
            totals=totals(group),
        )
        for year, group in group_by_year(collection).items()
    ]
