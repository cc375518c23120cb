"""Validation package."""

from bookkeeping.validation.validator import REQUIRED_FIELDS, TransactionValidator

__all__ = ["REQUIRED_FIELDS", "TransactionValidator"]
