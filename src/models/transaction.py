"""
Core Data Models for the Ledger

These models define the strict schemas for every transaction flowing
through the system. They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and logging
4. Keep derived values (the service charge) impossible to get out of sync

DESIGN DECISION: `charge` is a computed field. Callers never set it and
storage backends never need to trust a stored copy of it. It is always
recomputed from (debit_amount, debit_type) by the charge policy.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class DebitType(str, Enum):
    """
    Supported transfer channels for a debit.

    Each channel carries a flat service charge (see src.ledger.charges).
    """
    BEFTN = "BEFTN"
    NPSB = "NPSB"
    RTGS = "RTGS"


EDITABLE_FIELDS = (
    "credit_date",
    "credit_amount",
    "debit_date",
    "debit_amount",
    "debit_type",
)


# =============================================================================
# TRANSACTION MODELS
# =============================================================================

class TransactionFields(BaseModel):
    """
    The editable fields shared by drafts and stored transactions.

    Every field is optional at this level; the "at least one date and
    one amount" rule is checked by the validator before anything is
    accepted into the ledger.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    credit_date: Optional[date] = Field(
        default=None,
        description="Date the credit landed"
    )
    credit_amount: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Credited amount"
    )
    debit_date: Optional[date] = Field(
        default=None,
        description="Date the debit left"
    )
    debit_amount: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Debited amount"
    )
    debit_type: Optional[DebitType] = Field(
        default=None,
        description="Transfer channel used for the debit"
    )

    @field_validator(*EDITABLE_FIELDS, mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Form inputs send empty strings for untouched fields."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @computed_field
    @property
    def charge(self) -> Decimal:
        """Flat service charge for the debit leg."""
        # Imported here: the charge policy imports DebitType from this module
        from src.ledger.charges import calculate_charge

        return calculate_charge(self.debit_amount, self.debit_type)

    def editable_values(self) -> dict[str, Any]:
        """The editable fields as a plain dict."""
        return {name: getattr(self, name) for name in EDITABLE_FIELDS}


class TransactionDraft(TransactionFields):
    """
    A transaction as entered by the user, before it is persisted.

    CRITICAL: A debit amount without a debit type is rejected right here,
    at the boundary where the draft is constructed.
    """

    @model_validator(mode="after")
    def require_debit_type(self) -> "TransactionDraft":
        """A debit amount must say which channel it went through."""
        if self.debit_amount is not None and self.debit_type is None:
            raise ValueError("Debit type is required when a debit amount is entered")
        return self


class Transaction(TransactionFields):
    """
    A transaction as returned by the persistence layer.

    This is the canonical record. The ledger stores these and hands out
    read-only snapshots of them.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Identifier assigned by the persistence layer"
    )
    owner_id: str = Field(
        ...,
        min_length=1,
        description="Session identity that owns this record"
    )
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the record was created (never changes)"
    )


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


# =============================================================================
# SUMMARY MODELS
# =============================================================================

class LedgerTotals(BaseModel):
    """Summed amounts over a collection of transactions."""

    total_credit: Decimal = Decimal("0")
    total_debit: Decimal = Decimal("0")
    total_charge: Decimal = Decimal("0")
    net_balance: Decimal = Decimal("0")


class PeriodSummary(BaseModel):
    """Totals for one month ("YYYY-MM") or one year ("YYYY")."""

    key: str = Field(
        ...,
        description="Partition key"
    )
    label: str = Field(
        ...,
        description="Display label, e.g. 'Jan 2025'"
    )
    transaction_count: int = Field(
        default=0,
        ge=0
    )
    totals: LedgerTotals = Field(default_factory=LedgerTotals)
