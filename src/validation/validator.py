"""
Transaction Validation

DESIGN DECISION: Validation happens at two boundaries:

1. DRAFT CONSTRUCTION (pydantic):
- Type checking (dates, non-negative amounts, known debit types)
- A debit amount requires a debit type

2. LEDGER ACCEPTANCE (this module):
- At least one date (credit or debit)
- At least one amount (credit or debit)

A draft can be half-filled while the user is still typing; it only has
to be complete when it is handed to the ledger.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the user can correct the entry.
"""

from typing import Any, Mapping, Union

import pydantic

from src.models.transaction import TransactionDraft, ValidationIssue


class ValidationError(Exception):
    """A draft is not acceptable to the ledger."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__("; ".join(issue.message for issue in issues))

    @property
    def missing_fields(self) -> list[str]:
        """Every field named by an error-level issue."""
        fields: list[str] = []
        for issue in self.issues:
            if issue.severity != "error":
                continue
            for name in issue.field.split("|"):
                if name not in fields:
                    fields.append(name)
        return fields


class TransactionValidator:
    """Checks that a draft can be accepted into the ledger."""

    def coerce_draft(
        self,
        data: Union[TransactionDraft, Mapping[str, Any]],
    ) -> TransactionDraft:
        """
        Build a draft from form data.

        Pydantic errors are turned into a ValidationError that names the
        offending fields.
        """
        if isinstance(data, TransactionDraft):
            return data
        try:
            return TransactionDraft.model_validate(dict(data))
        except pydantic.ValidationError as e:
            issues = []
            for error in e.errors():
                loc = [str(part) for part in error.get("loc", ())]
                field = "|".join(loc) if loc else "debit_type"
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="invalid_value",
                    message=error.get("msg", "Invalid value"),
                    severity="error",
                ))
            raise ValidationError(issues) from e

    def check(self, draft: TransactionDraft) -> list[ValidationIssue]:
        """
        Return every issue that keeps the draft out of the ledger.

        An empty list means the draft is acceptable.
        """
        issues = []

        if draft.credit_date is None and draft.debit_date is None:
            issues.append(ValidationIssue(
                field="credit_date|debit_date",
                issue_type="missing",
                message="Please enter at least one date (Credit or Debit)",
                severity="error",
            ))

        if draft.credit_amount is None and draft.debit_amount is None:
            issues.append(ValidationIssue(
                field="credit_amount|debit_amount",
                issue_type="missing",
                message="Please enter at least one amount (Credit or Debit)",
                severity="error",
            ))

        # Unreachable through TransactionDraft, but drafts built with
        # model_construct skip validators
        if draft.debit_amount is not None and draft.debit_type is None:
            issues.append(ValidationIssue(
                field="debit_type",
                issue_type="missing",
                message="Please select a debit type when entering debit amount",
                severity="error",
            ))

        if draft.debit_amount is not None and draft.debit_date is None:
            issues.append(ValidationIssue(
                field="debit_date",
                issue_type="missing",
                message="Debit amount has no debit date",
                severity="warning",
                suggested_fix="Add the date the debit left so it shows up in monthly views",
            ))

        return issues

    def validate(
        self,
        data: Union[TransactionDraft, Mapping[str, Any]],
    ) -> TransactionDraft:
        """
        Coerce and check a draft.

        Raises:
            ValidationError: If any error-level issue is found
        """
        draft = self.coerce_draft(data)
        issues = self.check(draft)
        if any(issue.severity == "error" for issue in issues):
            raise ValidationError(issues)
        return draft

    def get_user_friendly_summary(self, issues: list[ValidationIssue]) -> str:
        """
        Generate a user-friendly summary of validation issues.

        This is what we show next to the entry form.
        """
        if not issues:
            return "✅ Looks good."

        lines = []
        errors = [issue for issue in issues if issue.severity == "error"]
        warnings = [issue for issue in issues if issue.severity == "warning"]

        if errors:
            lines.append("❌ This entry can't be saved yet:")
            for issue in errors:
                lines.append(f"   • {issue.message}")

        if warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for issue in warnings:
                lines.append(f"   • {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"     💡 {issue.suggested_fix}")

        return "\n".join(lines)
