"""
Data Models Package

This package contains all Pydantic models used by the ledger.
All data flowing through the system must conform to these schemas.
"""

from src.models.session import ANONYMOUS, SessionIdentity
from src.models.transaction import (
    EDITABLE_FIELDS,
    DebitType,
    LedgerTotals,
    PeriodSummary,
    Transaction,
    TransactionDraft,
    TransactionFields,
    ValidationIssue,
)

__all__ = [
    # Session
    "ANONYMOUS",
    "SessionIdentity",
    # Transaction models
    "EDITABLE_FIELDS",
    "DebitType",
    "LedgerTotals",
    "PeriodSummary",
    "Transaction",
    "TransactionDraft",
    "TransactionFields",
    "ValidationIssue",
]
