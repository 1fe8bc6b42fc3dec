"""Read a sheet as header-keyed records for display and check-in lookup."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any

import pandas as pd

from checkin_workbook.workbook import Cell, CellAddress, Sheet, ValueType


@dataclass
class SheetRow:
    """One data row keyed by header, with its 1-based spreadsheet row."""

    row_number: int
    values: dict[str, str]


@dataclass
class SheetRecords:
    """Headers and data rows read from a sheet."""

    sheet_name: str
    headers: list[str] = field(default_factory=list)
    header_row: int | None = None
    rows: list[SheetRow] = field(default_factory=list)


def cell_display_value(cell: Cell | None) -> str:
    """Render a cell the way it should appear in a record."""
    if cell is None or cell.value_type == ValueType.STUB:
        return ""
    if cell.display_text is not None:
        return cell.display_text
    value = cell.value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        if value.time() == time(0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)


def _headers(sheet: Sheet) -> list[str]:
    assert sheet.used_range is not None
    used = sheet.used_range
    headers: list[str] = []
    seen: dict[str, int] = {}
    for col in range(used.min_col, used.max_col + 1):
        text = cell_display_value(sheet.get_cell(CellAddress(used.min_row, col)))
        header = text.strip() or f"Column{col + 1}"
        # Repeated headers get a numeric suffix so no column is shadowed
        if header in seen:
            seen[header] += 1
            header = f"{header}_{seen[header]}"
        else:
            seen[header] = 0
        headers.append(header)
    return headers


def sheet_to_records(sheet: Sheet) -> SheetRecords:
    """Read headers from the first used row and one record per data row.

    Rows whose cells are all blank are skipped; ``row_number`` keeps the
    remaining records aligned with their spreadsheet rows.
    """
    records = SheetRecords(sheet_name=sheet.name)
    used = sheet.used_range
    if used is None:
        return records

    records.headers = _headers(sheet)
    records.header_row = used.min_row + 1
    for row in range(used.min_row + 1, used.max_row + 1):
        values = {
            header: cell_display_value(sheet.get_cell(CellAddress(row, col)))
            for header, col in zip(
                records.headers, range(used.min_col, used.max_col + 1), strict=True
            )
        }
        if any(values.values()):
            records.rows.append(SheetRow(row_number=row + 1, values=values))
    return records


def sheet_to_dataframe(sheet: Sheet) -> pd.DataFrame:
    """Read a sheet into a DataFrame of raw cell values indexed by row number."""
    used = sheet.used_range
    if used is None:
        return pd.DataFrame()

    headers = _headers(sheet)
    data: list[list[Any]] = []
    index: list[int] = []
    for row in range(used.min_row + 1, used.max_row + 1):
        cells = [
            sheet.get_cell(CellAddress(row, col))
            for col in range(used.min_col, used.max_col + 1)
        ]
        if all(cell is None or cell.value is None for cell in cells):
            continue
        data.append([cell.value if cell is not None else None for cell in cells])
        index.append(row + 1)
    return pd.DataFrame(data, columns=headers, index=pd.Index(index, name="row_number"))
