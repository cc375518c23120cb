"""Shared fixtures for the bookkeeping tests."""

from datetime import date
from decimal import Decimal

import pytest

from bookkeeping.config import get_settings
from bookkeeping.diagnostics import reset_logging
from bookkeeping.ledger import Ledger
from bookkeeping.models import TransactionDraft, TransactionType
from bookkeeping.services.storage import InMemorySlotStorage, LedgerPersistence
from bookkeeping.validation import TransactionValidator

FIXED_NOW = 1704412800.0  # 2024-01-05T00:00:00Z
FIXED_TODAY = date(2024, 1, 5)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Fresh settings and default structlog config for every test."""
    for name in ("MINDEE_API_KEY", "STORAGE_BACKEND", "STORAGE_DATA_DIR", "STORAGE_LEDGER_SLOT"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    reset_logging()
    yield
    get_settings.cache_clear()
    reset_logging()


@pytest.fixture
def validator():
    return TransactionValidator(
        max_amount=Decimal("100000"),
        future_date_tolerance_days=7,
        today=lambda: FIXED_TODAY,
    )


@pytest.fixture
def storage():
    return InMemorySlotStorage()


@pytest.fixture
def persistence(storage):
    return LedgerPersistence(storage)


@pytest.fixture
def ledger(persistence, validator):
    return Ledger(persistence=persistence, validator=validator, clock=lambda: FIXED_NOW)


@pytest.fixture
def make_draft():
    def _make(**overrides):
        fields = {
            "date": date(2024, 1, 5),
            "description": "Office chair",
            "amount": Decimal("129.99"),
            "type": TransactionType.OFFICE_SUPPLIES,
        }
        fields.update(overrides)
        return TransactionDraft(**fields)
    return _make
