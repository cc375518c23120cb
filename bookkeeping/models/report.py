"""
Query, Report and Validation Models

FilterSpec and ExpenseSummary are ephemeral: they are rebuilt for every
render from the current ledger contents and never stored.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bookkeeping.models.transaction import TransactionType


class ViewMode(str, Enum):
    """Which page the user is looking at."""
    TRANSACTIONS = "transactions"
    REPORTS = "reports"

    def toggled(self) -> "ViewMode":
        if self is ViewMode.TRANSACTIONS:
            return ViewMode.REPORTS
        return ViewMode.TRANSACTIONS


# =============================================================================
# QUERY MODELS
# =============================================================================

class FilterSpec(BaseModel):
    """
    User-specified criteria narrowing which transactions are considered.

    Every field is optional; an empty FilterSpec matches everything.
    """
    model_config = ConfigDict(frozen=True)

    search: str = Field(
        default="",
        description="Case-insensitive text matched against description or category"
    )
    start_date: Optional[date] = Field(
        default=None,
        description="Only transactions on or after this date"
    )
    end_date: Optional[date] = Field(
        default=None,
        description="Only transactions on or before this date"
    )
    type: Optional[TransactionType] = Field(
        default=None,
        description="Only transactions of exactly this category"
    )

    @field_validator('search', mode='before')
    @classmethod
    def none_search_to_empty(cls, v):
        return "" if v is None else v

    @field_validator('start_date', 'end_date', 'type', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def is_empty(self) -> bool:
        return (
            not self.search
            and self.start_date is None
            and self.end_date is None
            and self.type is None
        )

    def describe(self) -> str:
        """Human-readable description of the active filters."""
        desc_parts = []
        if self.type:
            desc_parts.append(self.type.value)
        if self.search:
            desc_parts.append(f'matching "{self.search}"')
        date_str = _date_range_str(self.start_date, self.end_date)
        if date_str:
            desc_parts.append(date_str)
        if not desc_parts:
            return "All transactions"
        return " | ".join(desc_parts)


def _date_range_str(
    date_from: Optional[date],
    date_to: Optional[date],
) -> str:
    """Format date range for description."""
    if date_from and date_to:
        if date_from == date_to:
            return f"on {date_from.strftime('%d %b %Y')}"
        elif date_from.month == date_to.month and date_from.year == date_to.year:
            return f"in {date_from.strftime('%B %Y')}"
        elif date_from.year == date_to.year:
            return f"from {date_from.strftime('%b')} to {date_to.strftime('%b %Y')}"
        else:
            return f"from {date_from.strftime('%b %Y')} to {date_to.strftime('%b %Y')}"
    elif date_from:
        return f"from {date_from.strftime('%d %b %Y')}"
    elif date_to:
        return f"until {date_to.strftime('%d %b %Y')}"
    return ""


class ExpenseSummary(BaseModel):
    """
    Category-wise and overall totals for a set of transactions.

    by_category only contains categories that actually occur in the
    summarized set, in order of first appearance. There are no zero rows.
    """

    by_category: dict[str, Decimal] = Field(default_factory=dict)
    by_month: dict[str, Decimal] = Field(default_factory=dict)
    total: Decimal = Decimal("0")
    count: int = Field(default=0, ge=0)

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def share(self, label: str) -> Decimal:
        """Whole-percent share of a category in the total (0 when total is zero)."""
        amount = self.by_category.get(label, Decimal("0"))
        if not self.total:
            return Decimal("0")
        return (amount * 100 / self.total).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


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
        description="Type of issue (e.g., 'missing', 'invalid_value', 'future_date')"
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


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation.

    Stage 1: Schema validation (required fields present and well-formed)
    Stage 2: Semantic validation (suspicious but allowed values)
    """

    schema_valid: bool = Field(
        ...,
        description="Did schema validation pass?"
    )
    semantic_valid: bool = Field(
        ...,
        description="Did semantic validation pass?"
    )

    # Issues found
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    # Warnings don't block but should be shown
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    @property
    def is_valid(self) -> bool:
        return self.schema_valid and self.semantic_valid

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def error_fields(self) -> list[str]:
        """Fields with error-level issues, in the order they were found."""
        fields: list[str] = []
        for issue in self.issues:
            if issue.severity == "error" and issue.field not in fields:
                fields.append(issue.field)
        return fields
