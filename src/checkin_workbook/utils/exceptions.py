"""Centralized exception classes for the check-in workbook engine.

This module provides a hierarchy of custom exceptions with error codes,
HTTP status code mapping, and structured error details for consistent
error handling throughout the application.

Exception Hierarchy:
    CheckinWorkbookError (base)
    ├── FileError
    │   ├── FileTooLargeError
    │   ├── UnsupportedFormatError
    │   ├── WorkbookDecodeError
    │   └── WorkbookEncodeError
    ├── WorkbookModelError
    │   ├── InvalidSheetError
    │   ├── SheetNotFoundError
    │   ├── DuplicateSheetError
    │   ├── MergeOverlapError
    │   └── InvalidAddressError
    ├── CheckInError
    │   └── InvalidCheckInError
    └── ValidationError

Error Codes:
    All errors have a unique error code (e.g., "E1001") that can be used
    for programmatic error handling and documentation.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Enumeration of all error codes used in the application.

    Error codes are grouped by category:
    - E1xxx: File/container errors
    - E2xxx: Workbook model errors
    - E3xxx: Check-in errors
    - E4xxx: Request validation errors
    - E9xxx: Internal/unexpected errors
    """

    # File errors (E1xxx)
    FILE_TOO_LARGE = "E1002"
    UNSUPPORTED_FORMAT = "E1003"
    FILE_READ_ERROR = "E1004"
    FILE_WRITE_ERROR = "E1005"

    # Workbook model errors (E2xxx)
    INVALID_SHEET = "E2001"
    SHEET_NOT_FOUND = "E2002"
    DUPLICATE_SHEET = "E2003"
    MERGE_OVERLAP = "E2004"
    INVALID_ADDRESS = "E2005"

    # Check-in errors (E3xxx)
    CHECK_IN_FAILED = "E3001"
    INVALID_CHECK_IN = "E3002"

    # Validation errors (E4xxx)
    VALIDATION_ERROR = "E4001"

    # Internal errors (E9xxx)
    INTERNAL_ERROR = "E9001"
    CONFIGURATION_ERROR = "E9002"
    UNEXPECTED_ERROR = "E9999"


class HTTPStatusMixin:
    """Mixin that provides HTTP status code for exceptions.

    This mixin allows exceptions to declare their appropriate HTTP status code
    for API responses. Subclasses should set the `http_status` class attribute.
    """

    http_status: int = 500

    def get_http_status(self) -> int:
        """Get the HTTP status code for this exception.

        Returns:
            HTTP status code appropriate for this error.
        """
        return self.http_status


class CheckinWorkbookError(Exception, HTTPStatusMixin):
    """Base exception for all check-in workbook errors.

    All custom exceptions in the application should inherit from this class.
    It provides:
    - Unique error codes for programmatic handling
    - HTTP status code mapping for API responses
    - Structured error details for logging and debugging

    Attributes:
        message: Human-readable error message.
        error_code: Unique error code from ErrorCode enum.
        details: Optional dictionary with additional error details.
        http_status: HTTP status code for API responses (default 500).
    """

    http_status: int = 500

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Error code from ErrorCode enum.
            details: Optional additional details about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary for API responses.

        Returns:
            Dictionary with error information.
        """
        result: dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code.value}] {self.message}"


# =============================================================================
# File Errors (E1xxx)
# =============================================================================


class FileError(CheckinWorkbookError):
    """Base class for file and container errors."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.FILE_READ_ERROR,
        filename: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with filename information.

        Args:
            message: Error message.
            error_code: Error code.
            filename: Name of the problematic file.
            details: Additional details.
        """
        details = details or {}
        if filename:
            details["filename"] = filename
        super().__init__(message, error_code, details)
        self.filename = filename


class FileTooLargeError(FileError):
    """Raised when an upload exceeds the maximum allowed size."""

    http_status: int = 413

    def __init__(
        self,
        file_size: int,
        max_size: int,
        filename: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with size information.

        Args:
            file_size: Actual file size in bytes.
            max_size: Maximum allowed size in bytes.
            filename: Optional filename.
            details: Additional details.
        """
        details = details or {}
        details["file_size_bytes"] = file_size
        details["max_size_bytes"] = max_size
        message = (
            f"File size ({file_size} bytes) exceeds maximum "
            f"allowed size ({max_size} bytes)"
        )
        super().__init__(
            message=message,
            error_code=ErrorCode.FILE_TOO_LARGE,
            filename=filename,
            details=details,
        )
        self.file_size = file_size
        self.max_size = max_size


class UnsupportedFormatError(FileError):
    """Raised when data is not a supported spreadsheet container."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        book_type: str | None = None,
        filename: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with format information.

        Args:
            message: Error message.
            book_type: Container format that was requested or detected.
            filename: Optional filename.
            details: Additional details.
        """
        details = details or {}
        if book_type:
            details["book_type"] = book_type
        super().__init__(
            message=message,
            error_code=ErrorCode.UNSUPPORTED_FORMAT,
            filename=filename,
            details=details,
        )
        self.book_type = book_type


class WorkbookDecodeError(FileError):
    """Raised when a spreadsheet container cannot be read."""

    http_status: int = 422

    def __init__(
        self,
        message: str,
        filename: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=ErrorCode.FILE_READ_ERROR,
            filename=filename,
            details=details,
        )


class WorkbookEncodeError(FileError):
    """Raised when a workbook cannot be written to a spreadsheet container."""

    http_status: int = 500

    def __init__(
        self,
        message: str,
        filename: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=ErrorCode.FILE_WRITE_ERROR,
            filename=filename,
            details=details,
        )


# =============================================================================
# Workbook Model Errors (E2xxx)
# =============================================================================


class WorkbookModelError(CheckinWorkbookError):
    """Base class for errors raised by the workbook model."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INVALID_SHEET,
        sheet_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the affected sheet name.

        Args:
            message: Error message.
            error_code: Error code.
            sheet_name: Name of the affected sheet.
            details: Additional details.
        """
        details = details or {}
        if sheet_name:
            details["sheet_name"] = sheet_name
        super().__init__(message, error_code, details)
        self.sheet_name = sheet_name


class InvalidSheetError(WorkbookModelError):
    """Raised when an operation receives something that is not a Sheet."""

    http_status: int = 500

    def __init__(
        self,
        message: str | None = None,
        received_type: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the type that was received.

        Args:
            message: Optional custom message.
            received_type: Name of the type passed instead of a Sheet.
            details: Additional details.
        """
        details = details or {}
        if received_type:
            details["received_type"] = received_type
        message = message or f"Expected a Sheet, got {received_type or 'nothing'}"
        super().__init__(
            message=message,
            error_code=ErrorCode.INVALID_SHEET,
            details=details,
        )
        self.received_type = received_type


class SheetNotFoundError(WorkbookModelError):
    """Raised when a named sheet does not exist in the workbook."""

    http_status: int = 404

    def __init__(
        self,
        sheet_name: str,
        available: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the missing sheet name.

        Args:
            sheet_name: The sheet name that was not found.
            available: Sheet names that do exist.
            details: Additional details.
        """
        details = details or {}
        if available is not None:
            details["available_sheets"] = available
        super().__init__(
            message=f"Sheet '{sheet_name}' not found in workbook",
            error_code=ErrorCode.SHEET_NOT_FOUND,
            sheet_name=sheet_name,
            details=details,
        )


class DuplicateSheetError(WorkbookModelError):
    """Raised when a sheet name is added to a workbook twice."""

    def __init__(
        self,
        sheet_name: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=f"Sheet '{sheet_name}' already exists in workbook",
            error_code=ErrorCode.DUPLICATE_SHEET,
            sheet_name=sheet_name,
            details=details,
        )


class MergeOverlapError(WorkbookModelError):
    """Raised when a merge range overlaps an existing merge range."""

    def __init__(
        self,
        new_range: str,
        existing_range: str,
        sheet_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with both ranges.

        Args:
            new_range: The range being merged, in A1 notation.
            existing_range: The merged range it collides with.
            sheet_name: Owning sheet.
            details: Additional details.
        """
        details = details or {}
        details["new_range"] = new_range
        details["existing_range"] = existing_range
        super().__init__(
            message=f"Merge {new_range} overlaps existing merge {existing_range}",
            error_code=ErrorCode.MERGE_OVERLAP,
            sheet_name=sheet_name,
            details=details,
        )


class InvalidAddressError(WorkbookModelError):
    """Raised when a cell or range reference cannot be parsed."""

    def __init__(
        self,
        reference: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["reference"] = reference
        super().__init__(
            message=message or f"Invalid cell reference: {reference!r}",
            error_code=ErrorCode.INVALID_ADDRESS,
            details=details,
        )
        self.reference = reference


# =============================================================================
# Check-in Errors (E3xxx)
# =============================================================================


class CheckInError(CheckinWorkbookError):
    """Base class for check-in export errors."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CHECK_IN_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, details)


class InvalidCheckInError(CheckInError):
    """Raised when a check-in points at a row that cannot hold attendee data."""

    def __init__(
        self,
        row_number: int,
        header_row: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the offending row.

        Args:
            row_number: 1-based row number of the check-in.
            header_row: 1-based row number of the header row.
            details: Additional details.
        """
        details = details or {}
        details["row_number"] = row_number
        details["header_row"] = header_row
        super().__init__(
            message=(
                f"Check-in row {row_number} must be below the header row "
                f"{header_row}"
            ),
            error_code=ErrorCode.INVALID_CHECK_IN,
            details=details,
        )
        self.row_number = row_number
        self.header_row = header_row


# =============================================================================
# Validation Errors (E4xxx)
# =============================================================================


class ValidationError(CheckinWorkbookError):
    """Raised when request input validation fails."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with field information.

        Args:
            message: Error message.
            field: Name of the field that failed validation.
            details: Additional details.
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(
            message=message,
            error_code=ErrorCode.VALIDATION_ERROR,
            details=details,
        )
        self.field = field
