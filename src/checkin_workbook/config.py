"""Configuration management for the check-in workbook engine.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
CKW_ prefix, or via a .env file in the project root.

Environment Variables:
    CKW_MAX_FILE_SIZE_MB: Maximum workbook upload size in MB (default: 10)
    CKW_DEFAULT_COLUMN_WIDTH: Width given to padded columns (default: 15)
    CKW_CHECKIN_COLUMN_WIDTH: Width of an appended column (default: 20)
    CKW_CHECKIN_HEADER: Header text of the check-in column (default: Checked-In At)
    CKW_CHECKIN_TIME_FORMAT: strftime format for check-in times
    CKW_OUTPUT_BOOK_TYPE: Container written on export, xlsx or xlsm (default: xlsx)
    CKW_COMPRESS_OUTPUT: Deflate the exported container (default: true)
    CKW_LOG_LEVEL: Logging level (default: INFO)
    CKW_DEBUG: Enable debug mode (default: false)
    CKW_CORS_ORIGINS: Comma-separated CORS origins (default: *)
    CKW_SERVER_HOST: Server bind host (default: 0.0.0.0)
    CKW_SERVER_PORT: Server bind port (default: 8000)
"""

import logging
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SUPPORTED_BOOK_TYPES = ("xlsx", "xlsm")

# Upper bound openpyxl and spreadsheet applications accept for a column width.
MAX_COLUMN_WIDTH = 255.0


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables prefixed with CKW_
    or via a .env file.

    Example .env file:
        CKW_CHECKIN_HEADER=Arrived
        CKW_LOG_LEVEL=DEBUG
        CKW_OUTPUT_BOOK_TYPE=xlsm
    """

    model_config = SettingsConfigDict(
        env_prefix="CKW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # File Upload Settings
    # =========================================================================

    max_file_size_mb: int = 10
    """Maximum workbook upload size in megabytes."""

    # =========================================================================
    # Column Layout Settings
    # =========================================================================

    default_column_width: float = 15.0
    """Width used when padding column specs up to an appended column."""

    checkin_column_width: float = 20.0
    """Width of a newly appended column."""

    # =========================================================================
    # Check-in Export Settings
    # =========================================================================

    checkin_header: str = "Checked-In At"
    """Header text of the check-in column."""

    checkin_time_format: str = "%Y-%m-%d %H:%M:%S"
    """strftime format used to render check-in timestamps."""

    output_book_type: str = "xlsx"
    """Container type written on export (xlsx or xlsm)."""

    compress_output: bool = True
    """Deflate the exported container. False stores entries uncompressed."""

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL."""

    debug: bool = False
    """Enable debug mode with additional logging and error details."""

    # =========================================================================
    # Server Settings
    # =========================================================================

    cors_origins: str = "*"
    """Comma-separated list of allowed CORS origins, or * for all."""

    server_host: str = "0.0.0.0"
    """Host address for the server to bind to."""

    server_port: int = 8000
    """Port for the server to listen on."""

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return upper_v

    @field_validator("default_column_width", "checkin_column_width")
    @classmethod
    def validate_column_width(cls, v: float) -> float:
        """Validate a column width is positive and within the format limit."""
        if not 0 < v <= MAX_COLUMN_WIDTH:
            raise ValueError(
                f"Column width must be between 0 and {MAX_COLUMN_WIDTH:g}, got {v}"
            )
        return v

    @field_validator("checkin_header")
    @classmethod
    def validate_checkin_header(cls, v: str) -> str:
        """Validate the check-in header is non-empty."""
        if not v.strip():
            raise ValueError("checkin_header must be a non-empty string")
        return v

    @field_validator("output_book_type")
    @classmethod
    def validate_book_type(cls, v: str) -> str:
        """Validate the export container type."""
        lower_v = v.lower()
        if lower_v not in SUPPORTED_BOOK_TYPES:
            raise ValueError(
                f"Invalid output_book_type: {v}. "
                f"Must be one of: {', '.join(SUPPORTED_BOOK_TYPES)}"
            )
        return lower_v

    @field_validator("max_file_size_mb")
    @classmethod
    def validate_file_size(cls, v: int) -> int:
        """Validate file size is positive and reasonable."""
        if not 1 <= v <= 500:
            raise ValueError(f"max_file_size_mb must be between 1 and 500, got {v}")
        return v

    @field_validator("server_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError(f"server_port must be between 1 and 65535, got {v}")
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level

    def to_safe_dict(self) -> dict[str, Any]:
        """Convert settings to a dictionary suitable for logging.

        Returns:
            Dictionary representation of all settings.
        """
        return {
            "max_file_size_mb": self.max_file_size_mb,
            "default_column_width": self.default_column_width,
            "checkin_column_width": self.checkin_column_width,
            "checkin_header": self.checkin_header,
            "checkin_time_format": self.checkin_time_format,
            "output_book_type": self.output_book_type,
            "compress_output": self.compress_output,
            "log_level": self.log_level,
            "debug": self.debug,
            "cors_origins": self.cors_origins,
            "server_host": self.server_host,
            "server_port": self.server_port,
        }


def validate_settings_on_startup(s: Settings) -> None:
    """Validate settings on application startup.

    Args:
        s: Settings instance to validate.
    """
    logger = logging.getLogger(__name__)

    # Warn about permissive CORS in non-debug mode
    if s.cors_origins == "*" and not s.debug:
        logger.warning(
            "CORS is configured to allow all origins (*). "
            "Consider restricting this in production."
        )

    if s.output_book_type == "xlsx":
        logger.debug(
            "Exports are written as xlsx; macro payloads of xlsm uploads are dropped."
        )

    logger.info(
        f"Configuration loaded: log_level={s.log_level}, debug={s.debug}, "
        f"max_file_size_mb={s.max_file_size_mb}, "
        f"output_book_type={s.output_book_type}"
    )


# Create the global settings instance
settings = Settings()
