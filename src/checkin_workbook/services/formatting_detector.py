"""Formatting detection for decoded workbooks.

Answers whether a workbook carries any visual formatting worth preserving,
and produces a per-sheet breakdown for diagnostics. Nothing here mutates
the workbook.
"""

from typing import Any

from checkin_workbook.models import FormattingDetails, SheetAnalysis
from checkin_workbook.utils.exceptions import SheetNotFoundError
from checkin_workbook.utils.logging import get_logger
from checkin_workbook.workbook import Sheet, Workbook

logger = get_logger(__name__)

__all__ = [
    "FormattingDetails",
    "SheetAnalysis",
    "analyze_sheet",
    "analyze_workbook",
    "has_formatting",
    "sheet_has_formatting",
]


def sheet_has_formatting(sheet: Sheet) -> bool:
    """Return True if a single sheet carries layout or cell formatting."""
    if sheet.column_specs or sheet.row_specs or sheet.merges:
        return True
    if sheet.protection or sheet.autofilter_range or sheet.margins:
        return True
    return any(cell.has_formatting() for cell in sheet.cells.values())


def has_formatting(workbook: Any) -> bool:
    """Return True if any sheet of ``workbook`` carries formatting.

    ``None`` or a non-workbook input yields False. Entries of
    ``workbook.sheets`` that are not sheets are skipped. If scanning fails
    for any other reason the answer is True, so callers keep whatever
    formatting might be there instead of stripping it.
    """
    if workbook is None or not isinstance(workbook, Workbook):
        return False

    try:
        for name in workbook.sheet_order:
            sheet = workbook.sheets.get(name)
            if not isinstance(sheet, Sheet):
                logger.warning(
                    "Skipping malformed sheet entry",
                    sheet=name,
                    received_type=type(sheet).__name__,
                )
                continue
            if sheet_has_formatting(sheet):
                logger.debug("Formatting detected", sheet=name)
                return True
    except Exception as e:
        logger.error(
            "Formatting scan failed, assuming formatting is present",
            exc_info=True,
            error=str(e),
        )
        return True

    return False


def analyze_sheet(workbook: Workbook, sheet_name: str) -> SheetAnalysis:
    """Summarise the size and formatting of one sheet.

    Raises:
        SheetNotFoundError: If the workbook has no sheet with that name.
    """
    sheet = workbook.sheets.get(sheet_name)
    if sheet_name not in workbook.sheets or not isinstance(sheet, Sheet):
        raise SheetNotFoundError(sheet_name, available=workbook.sheet_names)

    details = FormattingDetails(
        has_column_widths=any(
            spec is not None and spec.width is not None for spec in sheet.column_specs
        ),
        has_row_heights=any(
            spec is not None and spec.height is not None for spec in sheet.row_specs
        ),
        has_merged_cells=bool(sheet.merges),
        has_protection=bool(sheet.protection),
    )
    for address, cell in sheet.iter_cells():
        if cell.has_formatting():
            details.has_styled_cells = True
            details.sample_address = address.to_a1()
            details.sample_style = cell.style
            break

    used = sheet.used_range
    return SheetAnalysis(
        sheet_name=sheet.name,
        row_count=used.max_row + 1 if used else 0,
        column_count=used.max_col + 1 if used else 0,
        has_formatting=sheet_has_formatting(sheet),
        formatting=details,
    )


def analyze_workbook(workbook: Workbook) -> list[SheetAnalysis]:
    """Analyze every well-formed sheet in workbook order."""
    return [
        analyze_sheet(workbook, name)
        for name in workbook.sheet_order
        if isinstance(workbook.sheets.get(name), Sheet)
    ]
