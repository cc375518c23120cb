"""Tests for the two-stage transaction validator."""

from datetime import date, timedelta
from decimal import Decimal

from bookkeeping.models import TransactionDraft, TransactionType

FIXED_TODAY = date(2024, 1, 5)


class TestSchemaValidation:
    """Stage 1: blocking checks."""

    def test_complete_draft_passes(self, validator, make_draft):
        """Test that a complete draft has no issues."""
        result = validator.validate(make_draft())
        assert result.is_valid
        assert result.issues == []

    def test_empty_draft_lists_missing_fields(self, validator):
        """Test that every missing required field is reported."""
        result = validator.validate(TransactionDraft())
        assert not result.schema_valid
        assert result.error_fields == ["date", "description", "amount"]

    def test_whitespace_description_is_missing(self, validator, make_draft):
        """Test that a whitespace-only description counts as missing."""
        result = validator.validate(make_draft(description="   "))
        assert result.error_fields == ["description"]

    def test_negative_amount(self, validator, make_draft):
        """Test that a negative amount is an error."""
        result = validator.validate(make_draft(amount=Decimal("-5.00")))
        assert result.error_fields == ["amount"]
        assert result.issues[0].issue_type == "invalid_value"

    def test_zero_amount_allowed(self, validator, make_draft):
        """Test that zero is a valid amount."""
        assert validator.validate(make_draft(amount=Decimal("0"))).is_valid

    def test_too_many_decimal_places(self, validator, make_draft):
        """Test that sub-cent amounts are rejected."""
        result = validator.validate(make_draft(amount=Decimal("1.005")))
        assert result.issues[0].issue_type == "invalid_format"

    def test_description_too_long(self, validator, make_draft):
        """Test that descriptions over 500 characters are rejected."""
        assert validator.validate(make_draft(description="x" * 500)).is_valid
        result = validator.validate(make_draft(description="x" * 501))
        assert result.error_fields == ["description"]
        assert result.issues[0].issue_type == "too_long"

    def test_notes_too_long(self, validator, make_draft):
        """Test that notes over 1000 characters are rejected."""
        assert validator.validate(make_draft(notes="n" * 1000)).is_valid
        result = validator.validate(make_draft(notes="n" * 1001))
        assert result.error_fields == ["notes"]
        assert result.issues[0].issue_type == "too_long"

    def test_semantic_checks_skipped_on_schema_failure(self, validator):
        """Test that stage 2 only runs when stage 1 passes."""
        draft = TransactionDraft(amount=Decimal("999999"))
        result = validator.validate(draft)
        assert not result.semantic_valid
        assert result.warnings == []


class TestSemanticValidation:
    """Stage 2: warnings only."""

    def test_future_date_warns(self, validator, make_draft):
        """Test that dates beyond the tolerance produce a warning."""
        result = validator.validate(make_draft(date=FIXED_TODAY + timedelta(days=30)))
        assert result.schema_valid
        assert not result.has_errors
        assert len(result.warnings) == 1
        assert "future" in result.warnings[0]

    def test_date_within_tolerance(self, validator, make_draft):
        """Test that a date a few days ahead is accepted silently."""
        result = validator.validate(make_draft(date=FIXED_TODAY + timedelta(days=7)))
        assert result.warnings == []

    def test_large_amount_warns(self, validator, make_draft):
        """Test that unusually high amounts are flagged, not rejected."""
        result = validator.validate(make_draft(amount=Decimal("250000.00")))
        assert result.is_valid
        assert len(result.warnings) == 1


class TestSummary:
    """Tests for the user-facing summary."""

    def test_all_passed(self, validator, make_draft):
        """Test the summary for a clean draft."""
        result = validator.validate(make_draft())
        assert validator.get_user_friendly_summary(result) == "All checks passed."

    def test_lists_errors(self, validator):
        """Test that the summary lists every error message."""
        result = validator.validate(TransactionDraft(description="Lunch", type=TransactionType.MEALS))
        summary = validator.get_user_friendly_summary(result)
        assert "Date is required" in summary
        assert "Amount is required" in summary

    def test_defaults_from_settings(self, monkeypatch):
        """Test that thresholds come from AppSettings when not given."""
        from bookkeeping.config import get_settings
        from bookkeeping.validation import TransactionValidator

        monkeypatch.setenv("MAX_TRANSACTION_AMOUNT", "50")
        get_settings.cache_clear()
        strict = TransactionValidator(today=lambda: FIXED_TODAY)
        draft = TransactionDraft(
            date=date(2024, 1, 5), description="Taxi", amount=Decimal("60"),
            type=TransactionType.TRAVEL,
        )
        assert len(strict.validate(draft).warnings) == 1
