"""
Two-Stage Validation Pipeline

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Required field presence (date, description, amount, type)
- Non-negative amount with at most two decimal places
- Description and notes within their length limits
- Any error here blocks the ledger add

STAGE 2 - SEMANTIC VALIDATION:
- Future date detection
- Absurd amount detection
- Only warnings; the user may really have spent that much

IMPORTANT: Validation NEVER silently fixes issues.
It reports them and lets the caller decide.
"""

from collections.abc import Callable
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from bookkeeping.config import get_settings
from bookkeeping.models.report import ValidationIssue, ValidationResult
from bookkeeping.models.transaction import (
    DESCRIPTION_MAX_LENGTH,
    NOTES_MAX_LENGTH,
    TransactionDraft,
)

REQUIRED_FIELDS = ("date", "description", "amount", "type")


class TransactionValidator:
    """
    Validates a TransactionDraft before it may enter the ledger.

    Stage 1: Schema validation (blocking)
    Stage 2: Semantic validation (warnings only)
    """

    def __init__(
        self,
        max_amount: Optional[Decimal] = None,
        future_date_tolerance_days: Optional[int] = None,
        today: Callable[[], date] = date.today,
    ):
        """
        Initialize validator.

        Args:
            max_amount: Amounts above this are flagged.
                        Defaults to AppSettings.max_transaction_amount.
            future_date_tolerance_days: Days ahead a date may be before it is flagged.
                        Defaults to AppSettings.future_date_tolerance_days.
            today: Clock used for the future-date check
        """
        if max_amount is None or future_date_tolerance_days is None:
            app_settings = get_settings().app
            if max_amount is None:
                max_amount = app_settings.max_transaction_amount
            if future_date_tolerance_days is None:
                future_date_tolerance_days = app_settings.future_date_tolerance_days
        self._max_amount = Decimal(max_amount)
        self._future_days = future_date_tolerance_days
        self._today = today

    def _validate_schema(
        self,
        draft: TransactionDraft,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if draft.date is None:
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="Date is required",
                severity="error",
                suggested_fix="Pick the date of the expense",
            ))

        if not draft.description:
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message="Description is required",
                severity="error",
                suggested_fix="Describe what the money was spent on",
            ))
        elif len(draft.description) > DESCRIPTION_MAX_LENGTH:
            issues.append(ValidationIssue(
                field="description",
                issue_type="too_long",
                message=f"Description is limited to {DESCRIPTION_MAX_LENGTH} characters",
                severity="error",
                suggested_fix="Shorten the description and move details to the notes",
            ))

        if draft.notes is not None and len(draft.notes) > NOTES_MAX_LENGTH:
            issues.append(ValidationIssue(
                field="notes",
                issue_type="too_long",
                message=f"Notes are limited to {NOTES_MAX_LENGTH} characters",
                severity="error",
                suggested_fix="Shorten the notes",
            ))

        if draft.amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
                suggested_fix="Enter the amount spent",
            ))
        elif not draft.amount.is_finite() or draft.amount < 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message=f"Amount must be zero or more (got {draft.amount})",
                severity="error",
                suggested_fix="Enter the amount without a minus sign",
            ))
        elif draft.amount.as_tuple().exponent < -2:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"Amount can have at most two decimal places (got {draft.amount})",
                severity="error",
                suggested_fix="Round the amount to the cent",
            ))

        if draft.type is None:
            issues.append(ValidationIssue(
                field="type",
                issue_type="missing",
                message="Category is required",
                severity="error",
                suggested_fix="Choose a category (use Other if nothing fits)",
            ))

        # Schema is valid if no errors (warnings are okay)
        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def _validate_semantic(
        self,
        draft: TransactionDraft,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Checks:
        - Future dates
        - Absurd amounts

        Returns: (is_valid, list_of_issues)
        """
        issues = []
        today = self._today()

        # Future date check (with tolerance)
        max_future_date = today + timedelta(days=self._future_days)

        if draft.date and draft.date > max_future_date:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date ({draft.date.isoformat()}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        # Absurd amount check
        if draft.amount is not None and draft.amount > self._max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({draft.amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        # Semantic validation passes if no errors
        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def validate(self, draft: TransactionDraft) -> ValidationResult:
        """
        Run full two-stage validation pipeline.

        Args:
            draft: The draft about to be added

        Returns:
            ValidationResult with all issues found
        """
        all_issues = []

        # Stage 1: Schema validation
        schema_valid, schema_issues = self._validate_schema(draft)
        all_issues.extend(schema_issues)

        # Only run stage 2 if stage 1 passes
        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(draft)
            all_issues.extend(semantic_issues)

        warnings = [issue.message for issue in all_issues if issue.severity == "warning"]

        return ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            issues=all_issues,
            warnings=warnings,
        )

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """Generate a short summary of validation results for the form."""
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []

        if not result.schema_valid:
            lines.append("Please fix the following before saving:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"- {issue.message}")

        if result.warnings:
            lines.append("Please verify the following:")
            for warning in result.warnings:
                lines.append(f"- {warning}")

        return "\n".join(lines)
