"""Ledger package."""

from bookkeeping.ledger.ledger import Ledger, TransactionValidationError

__all__ = ["Ledger", "TransactionValidationError"]
