"""
Configuration Management for the Bookkeeping System

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MindeeSettings(BaseSettings):
    """Mindee receipt recognition configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MINDEE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        min_length=1,
        description="Mindee API key"
    )


class StorageSettings(BaseSettings):
    """Ledger persistence configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: str = Field(
        default="local",
        pattern="^(local|google_sheets|memory)$",
        description="Which key-value store holds the ledger slot"
    )
    data_dir: Path = Field(
        default=Path("./data"),
        description="Directory for the local slot store"
    )
    ledger_slot: str = Field(
        default="transactions",
        min_length=1,
        description="Name of the slot holding the serialized ledger"
    )

    @field_validator('data_dir')
    @classmethod
    def resolve_data_dir(cls, v: Path) -> Path:
        """Always resolve to an absolute path so a changed cwd does not move the store."""
        return v.expanduser().resolve()


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets slot store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )
    slot_sheet_name: str = Field(
        default="Ledger",
        description="Worksheet holding one row per slot"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level written to the log"
    )
    log_json: bool = Field(
        default=True,
        description="Render log lines as JSON (False for console output)"
    )

    # Display
    currency_symbol: str = Field(
        default="$",
        max_length=5,
        description="Symbol used when formatting amounts"
    )

    # File upload limits
    max_upload_size_mb: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum receipt upload size in MB"
    )
    supported_receipt_formats: str = Field(
        default="jpg,jpeg,png,webp,pdf",
        description="Comma-separated list of supported receipt formats"
    )

    # Validation thresholds
    max_transaction_amount: Decimal = Field(
        default=Decimal("100000"),
        gt=0,
        description="Amounts above this are flagged for review (not rejected)"
    )
    future_date_tolerance_days: int = Field(
        default=7,
        ge=0,
        description="How many days in the future a transaction date can be"
    )

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v):
        return v.strip().upper() if isinstance(v, str) else v

    @property
    def supported_formats_list(self) -> list[str]:
        """Get supported formats as a list."""
        return [fmt.strip().lower() for fmt in self.supported_receipt_formats.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily so a missing Mindee key
    # does not stop the ledger from working.

    @property
    def mindee(self) -> MindeeSettings:
        return MindeeSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, object]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    "<name>_error" entry for each section that failed.
    Useful for startup checks.
    """
    results: dict[str, object] = {}

    settings = get_settings()

    sections = {
        "mindee": lambda: settings.mindee,
        "storage": lambda: settings.storage,
        "app": lambda: settings.app,
    }

    # Sheets credentials only matter when that backend is selected
    try:
        uses_sheets = settings.storage.backend == "google_sheets"
    except Exception:
        uses_sheets = False  # reported under "storage" below
    if uses_sheets:
        sections["google_sheets"] = lambda: settings.google_sheets

    for name, load in sections.items():
        try:
            load()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
