"""Append a text column to the right edge of a sheet."""

from collections.abc import Iterable
from typing import Any

from checkin_workbook.config import settings
from checkin_workbook.utils.exceptions import InvalidSheetError
from checkin_workbook.utils.logging import get_logger
from checkin_workbook.workbook import (
    Cell,
    CellAddress,
    CellRange,
    ColumnSpec,
    Sheet,
    ValueType,
)

logger = get_logger(__name__)


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def append_column(
    sheet: Sheet,
    header: str,
    values: Iterable[Any],
    *,
    width: float | None = None,
    default_width: float | None = None,
) -> Sheet:
    """Append a header and one value per data row after the last used column.

    The header goes on the first row of the used range and ``values[i]`` on
    the i-th row below it. Every value is stored as a string cell, so an
    empty string still produces a cell. ``column_specs`` is padded up to the
    new column with ``default_width`` and the new column gets ``width``.

    The empty-string cells exist only in the model. openpyxl writes ``""``
    as a blank cell, so after an encode/decode round trip those addresses
    read back as absent, the same as rows the column never reached.

    Args:
        sheet: Sheet to mutate in place.
        header: Header text.
        values: One value per data row; ``None`` is written as ``""``.
        width: Width of the new column (defaults to the configured
            check-in column width).
        default_width: Width for padded columns (defaults to the
            configured default column width).

    Returns:
        The same sheet object.

    Raises:
        InvalidSheetError: If ``sheet`` is not a Sheet.
    """
    if not isinstance(sheet, Sheet):
        raise InvalidSheetError(received_type=type(sheet).__name__)

    width = settings.checkin_column_width if width is None else width
    default_width = (
        settings.default_column_width if default_width is None else default_width
    )
    texts = [_as_text(value) for value in values]

    used = sheet.used_range if sheet.used_range is not None else CellRange(0, 0, 0, 0)
    target = used.max_col + 1
    header_row = used.min_row

    sheet.cells[CellAddress(header_row, target)] = Cell(
        value=_as_text(header), value_type=ValueType.STRING
    )
    for offset, text in enumerate(texts, start=1):
        sheet.cells[CellAddress(header_row + offset, target)] = Cell(
            value=text, value_type=ValueType.STRING
        )

    used.max_col = target
    used.max_row = max(used.max_row, header_row + len(texts))
    sheet.used_range = used

    while len(sheet.column_specs) < target:
        sheet.column_specs.append(ColumnSpec(width=default_width))
    new_spec = ColumnSpec(width=width, custom_width=True)
    if len(sheet.column_specs) == target:
        sheet.column_specs.append(new_spec)
    else:
        sheet.column_specs[target] = new_spec

    logger.info(
        "Column appended",
        sheet=sheet.name,
        column=target,
        header=header,
        rows=len(texts),
    )
    return sheet
