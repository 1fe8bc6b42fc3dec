"""Utilities package for the check-in workbook engine.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
"""

from checkin_workbook.utils.exceptions import (
    CheckInError,
    CheckinWorkbookError,
    ErrorCode,
    FileError,
    HTTPStatusMixin,
    InvalidSheetError,
    SheetNotFoundError,
    UnsupportedFormatError,
    ValidationError,
    WorkbookModelError,
)
from checkin_workbook.utils.logging import (
    LogContext,
    StructuredLogger,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Exceptions
    "CheckInError",
    "CheckinWorkbookError",
    "ErrorCode",
    "FileError",
    "HTTPStatusMixin",
    "InvalidSheetError",
    "SheetNotFoundError",
    "UnsupportedFormatError",
    "ValidationError",
    "WorkbookModelError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "get_logger",
    "get_request_id",
    "set_request_id",
]
