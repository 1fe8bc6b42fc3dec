"""Pydantic models for API requests and responses."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from checkin_workbook.utils.exceptions import ErrorCode


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: str
    version: str


class FormattingDetails(BaseModel):
    """Breakdown of the formatting found on one sheet."""

    has_column_widths: bool = Field(
        default=False, description="Whether any column carries a layout override"
    )
    has_row_heights: bool = Field(
        default=False, description="Whether any row carries a layout override"
    )
    has_merged_cells: bool = Field(
        default=False, description="Whether the sheet has merged regions"
    )
    has_styled_cells: bool = Field(
        default=False,
        description="Whether any cell has a style, number format, link or comment",
    )
    has_protection: bool = Field(
        default=False, description="Whether sheet protection is set"
    )
    sample_address: str | None = Field(
        default=None, description="A1 reference of the first formatted cell"
    )
    sample_style: dict[str, Any] | None = Field(
        default=None, description="Style record of the first formatted cell"
    )


class SheetAnalysis(BaseModel):
    """Size and formatting summary of one sheet."""

    sheet_name: str = Field(..., description="Name of the analyzed sheet")
    row_count: int = Field(..., description="Rows spanned by the used range")
    column_count: int = Field(..., description="Columns spanned by the used range")
    has_formatting: bool = Field(
        ..., description="Whether the sheet carries any formatting"
    )
    formatting: FormattingDetails = Field(
        default_factory=FormattingDetails, description="Formatting breakdown"
    )


class WorkbookAnalysisResponse(BaseModel):
    """Response model for the workbook analysis endpoint."""

    filename: str | None = Field(default=None, description="Uploaded filename")
    sheet_names: list[str] = Field(..., description="Sheet names in workbook order")
    has_formatting: bool = Field(
        ..., description="Whether any sheet carries formatting"
    )
    has_macros: bool = Field(
        default=False, description="Whether the upload carried a VBA project"
    )
    sheets: list[SheetAnalysis] = Field(
        default_factory=list, description="Per-sheet analysis"
    )


class SheetRecordsResponse(BaseModel):
    """Response model for the sheet records endpoint."""

    sheet_name: str = Field(..., description="Name of the sheet that was read")
    headers: list[str] = Field(..., description="Column headers")
    header_row: int | None = Field(
        default=None, description="1-based row number of the header row"
    )
    rows: list[dict[str, Any]] = Field(
        default_factory=list,
        description="One record per data row, including its 1-based row_number",
    )
    row_count: int = Field(..., description="Number of data rows")


class CheckInEntry(BaseModel):
    """One check-in submitted for export."""

    row_number: int = Field(
        ..., ge=1, description="1-based spreadsheet row of the attendee"
    )
    checked_in_at: datetime | str = Field(
        ..., description="Check-in time, or an already formatted string"
    )


class ErrorDetail(BaseModel):
    """Error detail model for API error responses.

    This model provides structured error responses with:
    - Human-readable error message
    - Machine-readable error code
    - Optional additional details for debugging
    - Optional request ID for correlation
    """

    detail: str = Field(..., description="Human-readable error message")
    error_code: str | None = Field(
        default=None,
        description="Machine-readable error code (e.g., 'E2002')",
    )
    details: dict[str, Any] | None = Field(
        default=None,
        description="Additional error details for debugging",
    )
    request_id: str | None = Field(
        default=None,
        description="Request ID for error correlation",
    )

    @classmethod
    def from_error_code(
        cls,
        error_code: ErrorCode,
        detail: str,
        details: dict[str, Any] | None = None,
        request_id: str | None = None,
    ) -> "ErrorDetail":
        """Create an ErrorDetail from an ErrorCode enum value.

        Args:
            error_code: The error code enum.
            detail: Human-readable error message.
            details: Optional additional details.
            request_id: Optional request ID.

        Returns:
            ErrorDetail instance.
        """
        return cls(
            detail=detail,
            error_code=error_code.value,
            details=details,
            request_id=request_id,
        )
