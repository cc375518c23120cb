"""
Core Data Models for the Bookkeeping System

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and logging

DESIGN DECISION: A Transaction is frozen. The ledger only ever appends
or removes whole records; nothing edits a stored transaction in place.
"""

from datetime import date as Date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """
    Supported expense categories.

    DESIGN DECISION: Using explicit categories rather than free text ensures
    consistent categorization and enables reliable reporting.
    The value is the label shown to the user and written to storage.
    """
    ADVERTISING = "Advertising"
    BANK_CHARGES = "Bank Charges & Interest"
    INSURANCE = "Insurance"
    MEALS = "Meals & Entertainment"
    PROFESSIONAL_FEES = "Professional Fees"
    TRAVEL = "Travel"
    OFFICE_SUPPLIES = "Office Supplies"
    UTILITIES = "Utilities"
    RENT = "Rent"
    OTHER = "Other"  # Catch-all

    @classmethod
    def parse(cls, label: Optional[str]) -> "TransactionType":
        """
        Leniently map text onto a category.

        Matches labels case-insensitively; anything unrecognized
        (including empty input) becomes OTHER.
        """
        if isinstance(label, cls):
            return label
        if not label:
            return cls.OTHER
        wanted = str(label).strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        return cls.OTHER


DESCRIPTION_MAX_LENGTH = 500
NOTES_MAX_LENGTH = 1000


def _blank_to_none(value: Any) -> Any:
    """Form inputs arrive as empty strings; treat them as absent."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _float_to_decimal(value: Any) -> Any:
    """Go through str() so 129.99 becomes Decimal('129.99'), not its binary expansion."""
    if isinstance(value, float):
        return Decimal(str(value))
    return value


# =============================================================================
# CORE TRANSACTION MODEL
# =============================================================================

class Transaction(BaseModel):
    """
    One recorded expense.

    CRITICAL: Only the Ledger creates these, after validation.
    Every stored Transaction satisfies all the required-field constraints.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: int = Field(
        ...,
        ge=0,
        description="Unique, strictly increasing identifier"
    )
    date: Date = Field(
        ...,
        description="Date of the expense"
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=DESCRIPTION_MAX_LENGTH,
        description="What the money was spent on"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        decimal_places=2,
        description="Amount spent"
    )
    type: TransactionType = Field(
        ...,
        description="Expense category"
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=NOTES_MAX_LENGTH,
        description="Free-text notes"
    )

    @field_validator('notes', mode='before')
    @classmethod
    def empty_notes_to_none(cls, v):
        return _blank_to_none(v)

    @field_validator('amount', mode='before')
    @classmethod
    def amount_from_float(cls, v):
        return _float_to_decimal(v)

    def to_record(self) -> dict:
        """Convert to the JSON record written to storage."""
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "description": self.description,
            "amount": str(self.amount),
            "type": self.type.value,
            "notes": self.notes,
        }


class TransactionDraft(BaseModel):
    """
    The expense form before it is submitted.

    All fields are optional because the user (or a scanned receipt)
    fills them in one by one. Validation happens in the Ledger, not here,
    so that a half-filled draft can always be represented.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    date: Optional[Date] = None
    description: str = ""
    amount: Optional[Decimal] = None
    type: TransactionType = TransactionType.OTHER
    notes: Optional[str] = None

    @field_validator('date', 'amount', 'notes', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        return _blank_to_none(v)

    @field_validator('description', mode='before')
    @classmethod
    def none_description_to_empty(cls, v):
        return "" if v is None else v

    @field_validator('amount', mode='before')
    @classmethod
    def amount_from_float(cls, v):
        return _float_to_decimal(v)

    @field_validator('type', mode='before')
    @classmethod
    def default_type(cls, v):
        return TransactionType.OTHER if v is None or v == "" else v


# =============================================================================
# RECEIPT EXTRACTION
# =============================================================================

class ReceiptExtraction(BaseModel):
    """
    Data recovered from a scanned receipt.

    CRITICAL: This is PROPOSED data, NOT verified, and never stored.
    It can only pre-fill a TransactionDraft, which the user then submits.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    total_amount: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Total amount on the receipt"
    )
    date: Optional[Date] = Field(
        default=None,
        description="Date on the receipt"
    )
    merchant_name: str = Field(
        default="",
        max_length=500,
        description="Who issued the receipt"
    )
    category: TransactionType = Field(
        default=TransactionType.OTHER,
        description="Suggested category"
    )

    # Best-effort fallbacks applied while reading the response
    warnings: list[str] = Field(default_factory=list)

    @property
    def can_autofill(self) -> bool:
        """A draft is only pre-filled when both total and date were recovered."""
        return bool(self.total_amount) and self.date is not None
