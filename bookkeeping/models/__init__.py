"""
Data Models Package

This package contains all Pydantic models used in the Bookkeeping System.
All data flowing through the system must conform to these schemas.
"""

from bookkeeping.models.transaction import (
    ReceiptExtraction,
    Transaction,
    TransactionDraft,
    TransactionType,
)
from bookkeeping.models.report import (
    ExpenseSummary,
    FilterSpec,
    ValidationIssue,
    ValidationResult,
    ViewMode,
)

__all__ = [
    # Transaction models
    "ReceiptExtraction",
    "Transaction",
    "TransactionDraft",
    "TransactionType",
    # Report models
    "ExpenseSummary",
    "FilterSpec",
    "ValidationIssue",
    "ValidationResult",
    "ViewMode",
]
