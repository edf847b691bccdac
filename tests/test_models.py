"""
Tests for bDesh2bKash

Test strategy:
1. Unit tests for individual components (models, charges, partitions)
2. Ledger flows against in-memory and stub storages
3. No real API calls in tests (Google Sheets is faked)
"""

import pytest
from datetime import date
from decimal import Decimal

from src.models.session import ANONYMOUS, SessionIdentity
from src.models.transaction import (
    DebitType,
    LedgerTotals,
    PeriodSummary,
    Transaction,
    TransactionDraft,
)


class TestTransactionModels:
    """Tests for transaction Pydantic models."""

    def test_draft_creation(self):
        """Test TransactionDraft creation from form strings."""
        draft = TransactionDraft(
            credit_date="2025-01-05",
            credit_amount="500",
            debit_date="2025-01-06",
            debit_amount="1000",
            debit_type="NPSB",
        )
        assert draft.credit_date == date(2025, 1, 5)
        assert draft.credit_amount == Decimal("500")
        assert draft.debit_type == DebitType.NPSB

    def test_blank_strings_become_none(self):
        """Test that untouched form fields are treated as absent."""
        draft = TransactionDraft(
            credit_date="2025-01-05",
            credit_amount="500",
            debit_date="",
            debit_amount="  ",
            debit_type="",
        )
        assert draft.debit_date is None
        assert draft.debit_amount is None
        assert draft.debit_type is None

    def test_draft_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            TransactionDraft(credit_amount=Decimal("-1"), credit_date=date(2025, 1, 1))

    def test_draft_rejects_unknown_debit_type(self):
        """Test that only known channels are accepted."""
        with pytest.raises(ValueError):
            TransactionDraft(debit_amount=Decimal("10"), debit_type="SWIFT")

    def test_debit_amount_requires_debit_type(self):
        """Test that a debit amount without a channel is rejected."""
        with pytest.raises(ValueError, match="Debit type is required"):
            TransactionDraft(debit_amount=Decimal("1000"), debit_date=date(2025, 2, 1))

    def test_charge_is_computed(self):
        """Test that the charge follows the debit type."""
        draft = TransactionDraft(debit_amount=Decimal("5000"), debit_type=DebitType.RTGS)
        assert draft.charge == Decimal("100")
        assert draft.model_dump()["charge"] == Decimal("100")

    def test_charge_zero_without_debit(self):
        """Test that a credit-only draft carries no charge."""
        draft = TransactionDraft(credit_amount=Decimal("500"), credit_date=date(2025, 1, 5))
        assert draft.charge == Decimal("0")

    def test_transaction_is_frozen(self):
        """Test that stored transactions cannot be mutated in place."""
        transaction = Transaction(id="1", owner_id="alice", credit_amount=Decimal("5"))
        with pytest.raises(ValueError):
            transaction.credit_amount = Decimal("6")


class TestSummaryModels:
    """Tests for summary models."""

    def test_totals_default_to_zero(self):
        """Test that LedgerTotals starts at zero."""
        totals = LedgerTotals()
        assert totals.total_credit == Decimal("0")
        assert totals.net_balance == Decimal("0")

    def test_period_summary_rejects_negative_count(self):
        """Test transaction_count must be non-negative."""
        with pytest.raises(ValueError):
            PeriodSummary(key="2025-01", label="Jan 2025", transaction_count=-1)


class TestSessionIdentity:
    """Tests for the session identity."""

    def test_anonymous_identity(self):
        """Test the anonymous identity is not authenticated."""
        assert ANONYMOUS.is_authenticated is False

    def test_display_name(self):
        """Test display name falls back to the user id."""
        assert SessionIdentity(user_id="u1", email="a@b.c").display_name == "a@b.c"
        assert SessionIdentity(user_id="u1").display_name == "u1"

    def test_identities_compare_by_value(self):
        """Test that equal identities are equal."""
        assert SessionIdentity(user_id="u1") == SessionIdentity(user_id="u1")
        assert SessionIdentity(user_id="u1") != SessionIdentity(user_id="u2")
