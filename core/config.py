"""
Centralized configuration for the Valhalla dashboard.

This module provides a single source of truth for all configuration values.
Configuration is loaded from environment variables with sensible defaults.

Usage:
    from core.config import config

    sheet_id = config.sheets.sales_sheet_id
    cache_ttl = config.cache.ttl_seconds
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parent.parent


@dataclass(frozen=True)
class SheetsConfig:
    """Google Sheets access configuration."""

    service_account_email: str = field(
        default_factory=lambda: os.getenv("GOOGLE_SERVICE_ACCOUNT_EMAIL", "")
    )
    # Private keys pasted into .env files carry literal "\n" sequences
    private_key: str = field(
        default_factory=lambda: os.getenv("GOOGLE_PRIVATE_KEY", "").replace("\\n", "\n")
    )
    sales_sheet_id: str = field(default_factory=lambda: os.getenv("SHEET_ID", ""))
    lead_flow_sheet_id: str = field(default_factory=lambda: os.getenv("LEAD_FLOW_SHEET_ID", ""))
    scopes: Tuple[str, ...] = (
        "https://www.googleapis.com/auth/spreadsheets.readonly",
    )

    @property
    def has_credentials(self) -> bool:
        return bool(self.service_account_email and self.private_key)


@dataclass(frozen=True)
class CacheConfig:
    """In-memory sheet cache configuration."""

    ttl_seconds: int = field(
        default_factory=lambda: int(os.getenv("CACHE_TTL_SECONDS", "60"))
    )


@dataclass(frozen=True)
class WebConfig:
    """Web dashboard configuration."""

    host: str = field(default_factory=lambda: os.getenv("WEB_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("WEB_PORT", "8080")))

    # Rate limiting
    rate_limit_per_minute: int = 30


@dataclass(frozen=True)
class DashboardConfig:
    """Filtering and display settings shared by every page."""

    # "Now" for presets is read in this timezone
    timezone: str = field(
        default_factory=lambda: os.getenv("DASHBOARD_TIMEZONE", "America/New_York")
    )

    # Query keys passed through as exact-match filters
    sales_filter_keys: Tuple[str, ...] = ("platform", "closer", "setter")
    lead_flow_filter_keys: Tuple[str, ...] = ("source", "goal")

    recent_rows_limit: int = 20

    # Longest chart axis; wider ranges keep their most recent days
    max_trend_days: int = field(
        default_factory=lambda: int(os.getenv("MAX_TREND_DAYS", "366"))
    )

    # Outcome keywords used to classify sales calls
    mrr_keyword: str = "mrr"
    non_appointment_keywords: Tuple[str, ...] = ("mrr", "downsell")
    test_prospect_keyword: str = "test"
    not_taken_keywords: Tuple[str, ...] = ("no show", "rescheduled", "cancelled")
    closed_keywords: Tuple[str, ...] = ("closed", "deposit collected", "paid", "full pay")

    # Lead funds values that do not count as qualified
    unqualified_funds: Tuple[str, ...] = ("$0-$500", "0-500", "Unknown")


@dataclass(frozen=True)
class AttributionConfig:
    """YouTube attribution settings."""

    default_landing_url: str = field(
        default_factory=lambda: os.getenv("DEFAULT_LANDING_URL", "https://your-landing-page.com")
    )
    utm_source: str = "youtube"
    utm_medium: str = "organic"
    archive_db_path: Path = field(
        default_factory=lambda: Path(
            os.getenv("ARCHIVE_DB_PATH", str(PROJECT_ROOT / "data" / "archive.db"))
        )
    )


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""

    version: str = "1.0.0"
    sheets: SheetsConfig = field(default_factory=SheetsConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    web: WebConfig = field(default_factory=WebConfig)
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)
    attribution: AttributionConfig = field(default_factory=AttributionConfig)


# Global config instance
config = AppConfig()


# ─── Convenience Exports ───────────────────────────────────────────────────────
VERSION = config.version


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def validate_config(require_sheets: bool = True, app_config: AppConfig = None) -> None:
    """
    Validate that all required configuration is present.

    Call this on application startup to fail fast with clear error messages
    instead of empty dashboards.

    Args:
        require_sheets: If True, validate spreadsheet ids and credentials
        app_config: Config to check (defaults to the global instance)

    Raises:
        ConfigurationError: If required configuration is missing
    """
    cfg = app_config or config
    errors = []

    if require_sheets:
        if not cfg.sheets.sales_sheet_id:
            errors.append("SHEET_ID is required but not set")
        if not cfg.sheets.lead_flow_sheet_id:
            errors.append("LEAD_FLOW_SHEET_ID is required but not set")
        if not cfg.sheets.service_account_email:
            errors.append("GOOGLE_SERVICE_ACCOUNT_EMAIL is required but not set")
        if not cfg.sheets.private_key:
            errors.append("GOOGLE_PRIVATE_KEY is required but not set")

    if cfg.sheets.private_key and "PRIVATE KEY" not in cfg.sheets.private_key:
        errors.append("GOOGLE_PRIVATE_KEY appears to be invalid (expected a PEM block)")

    if cfg.cache.ttl_seconds < 0:
        errors.append("CACHE_TTL_SECONDS cannot be negative")

    if cfg.dashboard.max_trend_days < 1:
        errors.append("MAX_TREND_DAYS must be at least 1")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(error_msg)
