"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.

The same variables the restaurant deployment already uses are honoured
(``ADMIN_USER``/``ADMIN_PASS`` for the admin role, ``PORT``-style overrides
via ``API_PORT``), plus the archive scheduler and report settings.

Usage:
    from orderdesk.core.config import get_settings

    settings = get_settings()
    print(settings.history_path)
"""

import logging
import re
import sys
from datetime import timedelta, tzinfo
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local testing, missing credentials are tolerated
        PRODUCTION: Live restaurant deployment
        STAGING: Pre-production deployment
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class ReportDispatch(str, Enum):
    """Where the daily Excel report is generated."""
    INLINE = "inline"
    CELERY = "celery"


ARCHIVE_AT_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    Role credentials should NEVER be committed to version control.

    Attributes:
        env_mode: Current environment (development/production/staging)
        debug: Enable verbose logging and error details

        # Storage
        data_directory: Root directory for menu, history and reports
        menu_filename: Menu catalog JSON file
        history_filename: Archived orders JSON file
        reports_subdirectory: Directory (inside data_directory) for Excel reports

        # Roles
        admin_user / admin_pass: Credentials for menu and history endpoints
        cook_user / cook_pass: Optional credentials for status updates

        # Archive
        archive_interval_hours: Period between archive cycles
        archive_at: Optional "HH:MM" wall-clock anchor for the cycle
        report_dispatch: inline (thread pool) or celery
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================

    env_mode: EnvironmentMode = Field(
        default=EnvironmentMode.DEVELOPMENT,
        description="Application environment mode"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )

    # ==========================================================================
    # APPLICATION
    # ==========================================================================

    app_name: str = Field(
        default="OrderDesk Restaurant Backend",
        description="Application display name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    api_port: int = Field(
        default=3000,
        description="API server port"
    )
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins"
    )

    # ==========================================================================
    # FILE STORAGE
    # ==========================================================================

    data_directory: str = Field(
        default="data",
        description="Directory for data files"
    )
    menu_filename: str = Field(
        default="menu.json",
        description="Menu catalog file"
    )
    history_filename: str = Field(
        default="history.json",
        description="Archived order history file"
    )
    reports_subdirectory: str = Field(
        default="reports",
        description="Directory for daily Excel reports"
    )
    report_lock_timeout: int = Field(
        default=30,
        description="Seconds to wait for the report file lock"
    )

    # ==========================================================================
    # ROLE CREDENTIALS
    # ==========================================================================

    admin_user: Optional[str] = Field(
        default=None,
        description="Admin username (menu management, history)"
    )
    admin_pass: Optional[str] = Field(
        default=None,
        description="Admin password"
    )
    cook_user: Optional[str] = Field(
        default=None,
        description="Kitchen username; status updates are open when unset"
    )
    cook_pass: Optional[str] = Field(
        default=None,
        description="Kitchen password"
    )

    # ==========================================================================
    # ARCHIVE SCHEDULER
    # ==========================================================================

    timezone: str = Field(
        default="America/Bogota",
        description="Restaurant time zone for arrival times and archive dates"
    )
    archive_enabled: bool = Field(
        default=True,
        description="Start the archive scheduler with the application"
    )
    archive_interval_hours: float = Field(
        default=24.0,
        gt=0,
        description="Hours between archive cycles"
    )
    archive_at: Optional[str] = Field(
        default=None,
        description="Optional HH:MM local time to anchor archive cycles to"
    )
    report_dispatch: ReportDispatch = Field(
        default=ReportDispatch.INLINE,
        description="Generate reports inline or on the Celery worker"
    )

    # ==========================================================================
    # REDIS / CELERY
    # ==========================================================================

    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL"
    )

    # ==========================================================================
    # REAL-TIME CHANNEL
    # ==========================================================================

    broadcast_send_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Seconds before a slow viewer is dropped"
    )

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator("env_mode", mode="before")
    @classmethod
    def validate_env_mode(cls, v: str) -> EnvironmentMode:
        """Convert string to EnvironmentMode enum."""
        if isinstance(v, EnvironmentMode):
            return v
        try:
            return EnvironmentMode(v.lower())
        except ValueError:
            valid = [e.value for e in EnvironmentMode]
            raise ValueError(f"Invalid env_mode. Must be one of: {valid}")

    @field_validator("report_dispatch", mode="before")
    @classmethod
    def validate_report_dispatch(cls, v: str) -> ReportDispatch:
        """Convert string to ReportDispatch enum."""
        if isinstance(v, ReportDispatch):
            return v
        try:
            return ReportDispatch(v.lower())
        except ValueError:
            valid = [e.value for e in ReportDispatch]
            raise ValueError(f"Invalid report_dispatch. Must be one of: {valid}")

    @field_validator("archive_at")
    @classmethod
    def validate_archive_at(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        if not ARCHIVE_AT_PATTERN.match(v):
            raise ValueError("archive_at must use the 24h HH:MM format")
        return v

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env_mode == EnvironmentMode.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env_mode == EnvironmentMode.PRODUCTION

    @property
    def data_path(self) -> Path:
        return Path(self.data_directory)

    @property
    def menu_path(self) -> Path:
        return self.data_path / self.menu_filename

    @property
    def history_path(self) -> Path:
        return self.data_path / self.history_filename

    @property
    def reports_path(self) -> Path:
        return self.data_path / self.reports_subdirectory

    @property
    def tzinfo(self) -> tzinfo:
        return ZoneInfo(self.timezone)

    @property
    def archive_period(self) -> timedelta:
        return timedelta(hours=self.archive_interval_hours)

    @property
    def cors_origins_list(self) -> list[str]:
        """Get allowed CORS origins as a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def cook_auth_enabled(self) -> bool:
        return bool(self.cook_user and self.cook_pass)

    # ==========================================================================
    # VALIDATION METHODS
    # ==========================================================================

    def validate_production_config(self) -> list[str]:
        """
        Validate that all required production settings are configured.

        Returns:
            List of missing configuration keys (empty if all present)
        """
        missing = []

        if not self.is_development:
            if not self.admin_user:
                missing.append("ADMIN_USER")
            if not self.admin_pass:
                missing.append("ADMIN_PASS")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are loaded only once and stay
    consistent across the application lifecycle.

    Returns:
        Settings: Configured application settings
    """
    return Settings()


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured package logger
    """
    settings = get_settings()

    if settings.debug:
        level = logging.DEBUG

    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("filelock").setLevel(logging.WARNING)
    logging.getLogger("celery").setLevel(logging.WARNING)

    return logging.getLogger("orderdesk")
