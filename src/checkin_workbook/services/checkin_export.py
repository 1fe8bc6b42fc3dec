"""Export an uploaded workbook with a check-in time column.

The workbook goes through the whole engine: decode, formatting check,
clone, column append (or in-place update when the column already exists
from an earlier export), style inheritance, encode.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from checkin_workbook.config import settings
from checkin_workbook.services.cell_formatting import inherit_style, set_cell_value
from checkin_workbook.services.cloner import clone_workbook
from checkin_workbook.services.codec import (
    DecodeOptions,
    EncodeOptions,
    decode_workbook,
    encode_workbook,
)
from checkin_workbook.services.column_appender import append_column
from checkin_workbook.services.formatting_detector import has_formatting
from checkin_workbook.services.sheet_reader import cell_display_value
from checkin_workbook.utils.exceptions import InvalidCheckInError
from checkin_workbook.utils.logging import LogContext, get_logger
from checkin_workbook.workbook import CellAddress, Sheet

logger = get_logger(__name__)


@dataclass
class CheckInRecord:
    """A check-in for the attendee on a 1-based spreadsheet row."""

    row_number: int
    checked_in_at: date | str


def format_check_in_time(value: date | str, time_format: str) -> str:
    if isinstance(value, date):
        return value.strftime(time_format)
    return str(value)


def find_header_column(sheet: Sheet, header: str) -> int | None:
    """Return the zero-based column whose header cell reads ``header``."""
    used = sheet.used_range
    if used is None:
        return None
    for col in range(used.min_col, used.max_col + 1):
        cell = sheet.get_cell(CellAddress(used.min_row, col))
        if cell_display_value(cell).strip() == header:
            return col
    return None


def apply_check_ins(
    sheet: Sheet,
    check_ins: Iterable[CheckInRecord],
    *,
    header: str | None = None,
    time_format: str | None = None,
    inherit_styles: bool = True,
) -> int:
    """Write check-in times into ``sheet``.

    If the header row already has a ``header`` column its cells are updated
    in place; otherwise a new column is appended with one value per data
    row, blank for attendees who have not checked in.

    Returns:
        Zero-based index of the check-in column.

    Raises:
        InvalidCheckInError: If a check-in targets the header row or above.
    """
    header = header or settings.checkin_header
    time_format = time_format or settings.checkin_time_format
    used = sheet.used_range
    header_row = used.min_row if used is not None else 0

    times: dict[int, str] = {}
    for record in check_ins:
        if record.row_number <= header_row + 1:
            raise InvalidCheckInError(record.row_number, header_row + 1)
        times[record.row_number - 1] = format_check_in_time(
            record.checked_in_at, time_format
        )

    column = find_header_column(sheet, header)
    if column is None:
        last_row = max(used.max_row if used is not None else 0, *times, header_row)
        values = [times.get(row, "") for row in range(header_row + 1, last_row + 1)]
        append_column(sheet, header, values)
        assert sheet.used_range is not None
        column = sheet.used_range.max_col
    else:
        logger.info("Updating existing check-in column", column=column)
        for row, text in times.items():
            set_cell_value(sheet, CellAddress(row, column), text)

    if inherit_styles:
        assert sheet.used_range is not None
        first_col = sheet.used_range.min_col
        for row in [header_row, *times]:
            target = CellAddress(row, column)
            existing = sheet.get_cell(target)
            if existing is not None and not existing.style:
                inherit_style(sheet, target, CellAddress(row, first_col))

    logger.info("Check-ins applied", column=column, check_ins=len(times))
    return column


def export_with_check_ins(
    data: bytes,
    sheet_name: str,
    check_ins: Iterable[CheckInRecord],
    *,
    header: str | None = None,
    time_format: str | None = None,
    inherit_styles: bool = True,
    encode_options: EncodeOptions | None = None,
) -> bytes:
    """Decode ``data``, add check-in times to ``sheet_name`` and re-encode.

    Raises:
        UnsupportedFormatError: If ``data`` is not a spreadsheet container.
        WorkbookDecodeError: If the container cannot be read.
        SheetNotFoundError: If the workbook has no such sheet.
        InvalidCheckInError: If a check-in targets the header row or above.
    """
    with LogContext(sheet=sheet_name, operation="export_check_ins"):
        workbook = decode_workbook(data, DecodeOptions())
        logger.info(
            "Workbook loaded for export",
            has_formatting=has_formatting(workbook),
        )

        working = clone_workbook(workbook)
        if working is workbook:
            logger.warning("Clone fell back to the decoded workbook")

        sheet = working.get_sheet(sheet_name)
        apply_check_ins(
            sheet,
            check_ins,
            header=header,
            time_format=time_format,
            inherit_styles=inherit_styles,
        )
        return encode_workbook(working, encode_options)
