"""Tests for settings and logging configuration."""

from decimal import Decimal
from pathlib import Path

import pytest
import structlog

from bookkeeping.config import get_settings, validate_all_settings
from bookkeeping.diagnostics import configure_logging, reset_logging


class TestSettings:
    """Tests for pydantic-settings loading."""

    def test_defaults(self):
        """Test default values without any environment."""
        settings = get_settings()
        assert settings.storage.backend == "local"
        assert settings.storage.ledger_slot == "transactions"
        assert settings.storage.data_dir.is_absolute()
        assert settings.app.currency_symbol == "$"
        assert settings.app.max_transaction_amount == Decimal("100000")

    def test_environment_overrides(self, monkeypatch, tmp_path):
        """Test reading settings from environment variables."""
        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("LOG_LEVEL", "debug")
        settings = get_settings()
        assert settings.storage.backend == "memory"
        assert settings.storage.data_dir == Path(tmp_path).resolve()
        assert settings.app.log_level == "DEBUG"

    def test_invalid_backend(self, monkeypatch):
        """Test that an unknown backend is rejected."""
        monkeypatch.setenv("STORAGE_BACKEND", "postgres")
        with pytest.raises(ValueError):
            get_settings().storage

    def test_supported_formats(self):
        """Test the parsed list of upload formats."""
        formats = get_settings().app.supported_formats_list
        assert "pdf" in formats
        assert "jpg" in formats

    def test_settings_are_cached(self):
        """Test that get_settings returns the same object."""
        assert get_settings() is get_settings()


class TestValidateAllSettings:
    """Tests for the startup status check."""

    def test_missing_mindee_key(self):
        """Test that a missing API key is reported, not raised."""
        status = validate_all_settings()
        assert status["mindee"] is False
        assert "mindee_error" in status
        assert status["storage"] is True
        assert "google_sheets" not in status

    def test_mindee_key_present(self, monkeypatch):
        """Test a configured API key."""
        monkeypatch.setenv("MINDEE_API_KEY", "test-key")
        assert validate_all_settings()["mindee"] is True

    def test_sheets_checked_when_selected(self, monkeypatch):
        """Test that Sheets settings are only checked for that backend."""
        monkeypatch.setenv("STORAGE_BACKEND", "google_sheets")
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
        status = validate_all_settings()
        assert status["google_sheets"] is False


class TestLogging:
    """Tests for structlog configuration."""

    def test_configure_once(self):
        """Test that only the first configure_logging call takes effect."""
        configure_logging(level="INFO", json_output=True)
        configure_logging(level="DEBUG", json_output=False)
        assert structlog.is_configured()
        renderer = structlog.get_config()["processors"][-1]
        assert isinstance(renderer, structlog.processors.JSONRenderer)

    def test_reset(self):
        """Test that reset_logging allows reconfiguration."""
        configure_logging(json_output=True)
        reset_logging()
        configure_logging(json_output=False)
        renderer = structlog.get_config()["processors"][-1]
        assert isinstance(renderer, structlog.dev.ConsoleRenderer)

    def test_get_logger(self):
        """Test that module loggers emit structured events."""
        from structlog.testing import capture_logs
        from bookkeeping.diagnostics import get_logger

        with capture_logs() as logs:
            get_logger("bookkeeping.test").info("ledger_loaded", transaction_count=3)
        assert logs == [{"event": "ledger_loaded", "transaction_count": 3, "log_level": "info"}]
