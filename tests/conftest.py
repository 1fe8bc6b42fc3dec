from __future__ import annotations

import io
from copy import deepcopy
from datetime import datetime

import pytest
from openpyxl import Workbook as OpenpyxlWorkbook
from openpyxl.comments import Comment
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from checkin_workbook.workbook import (
    Cell,
    CellAddress,
    CellRange,
    ColumnSpec,
    RowSpec,
    Sheet,
    ValueType,
    Workbook,
)

HEADER_STYLE = {
    "font": {"name": "Calibri", "size": 11.0, "bold": True},
    "fill": {
        "type": "pattern",
        "pattern_type": "solid",
        "fg_color": {"rgb": "FFFFFF00"},
        "bg_color": {"indexed": 64},
    },
}


def _text(value: str) -> Cell:
    return Cell(value=value, value_type=ValueType.STRING)


@pytest.fixture
def plain_sheet() -> Sheet:
    """Attendee sheet with values only."""
    sheet = Sheet(name="Attendees")
    rows = [
        ["Name", "Email"],
        ["Alice", "alice@example.com"],
        ["Bob", "bob@example.com"],
    ]
    for r, row in enumerate(rows):
        for c, value in enumerate(row):
            sheet.set_cell(CellAddress(r, c), _text(value))
    return sheet


@pytest.fixture
def plain_workbook(plain_sheet: Sheet) -> Workbook:
    workbook = Workbook()
    workbook.add_sheet(plain_sheet)
    return workbook


@pytest.fixture
def formatted_sheet() -> Sheet:
    """Attendee sheet with header styling, widths, a merge and a link."""
    sheet = Sheet(name="Attendees")
    for col, header in enumerate(["Name", "Email"]):
        sheet.set_cell(
            CellAddress(0, col), Cell(value=header, style=deepcopy(HEADER_STYLE))
        )
    sheet.set_cell(CellAddress(1, 0), _text("Alice"))
    sheet.set_cell(
        CellAddress(1, 1),
        Cell(
            value="alice@example.com",
            hyperlink={"target": "mailto:alice@example.com"},
        ),
    )
    sheet.set_cell(
        CellAddress(2, 0),
        Cell(value=12.5, value_type=ValueType.NUMBER, number_format="0.00"),
    )
    sheet.column_specs = [ColumnSpec(width=30.0, custom_width=True), None]
    sheet.row_specs = [RowSpec(height=24.0)]
    sheet.add_merge(CellRange(3, 0, 3, 1))
    return sheet


@pytest.fixture
def formatted_workbook(formatted_sheet: Sheet) -> Workbook:
    workbook = Workbook(
        document_properties={"title": "Guest list", "creator": "Events team"},
        custom_properties={"event": "Launch"},
    )
    workbook.add_sheet(formatted_sheet)
    notes = Sheet(name="Notes")
    notes.set_cell(CellAddress(0, 0), _text("internal"))
    workbook.add_sheet(notes, visibility="hidden")
    return workbook


def _build_formatted_xlsx() -> bytes:
    wb = OpenpyxlWorkbook()
    ws = wb.active
    ws.title = "Attendees"
    ws["A1"] = "Name"
    ws["B1"] = "Email"
    ws["C1"] = "Tickets"
    for cell in (ws["A1"], ws["B1"], ws["C1"]):
        cell.font = Font(bold=True, color="FF1F4E79")
        cell.fill = PatternFill(fill_type="solid", fgColor="FFDDEBF7")
        cell.border = Border(bottom=Side(style="thin"))
        cell.alignment = Alignment(horizontal="center")

    ws["A2"] = "Alice"
    ws["B2"] = "alice@example.com"
    ws["B2"].hyperlink = "mailto:alice@example.com"
    ws["C2"] = 2
    ws["A3"] = "Bob"
    ws["B3"] = "bob@example.com"
    ws["B3"].comment = Comment("VIP guest", "Front desk")
    ws["C3"] = 3
    ws["A4"] = "Total"
    ws["C4"] = "=SUM(C2:C3)"
    ws["D2"] = datetime(2024, 5, 1, 9, 30)
    ws["D2"].number_format = "yyyy-mm-dd hh:mm"

    ws.column_dimensions["A"].width = 28
    ws.column_dimensions["B"].width = 34
    ws.row_dimensions[1].height = 22
    ws.merge_cells("A6:C6")
    ws["A6"] = "Doors open at 9"
    ws.auto_filter.ref = "A1:C3"

    notes = wb.create_sheet("Notes")
    notes["A1"] = "Staff only"
    notes.sheet_state = "hidden"

    wb.properties.title = "Guest list"
    wb.properties.creator = "Events team"

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def _build_plain_xlsx() -> bytes:
    wb = OpenpyxlWorkbook()
    ws = wb.active
    ws.title = "Attendees"
    for row in [
        ["Name", "Email"],
        ["Alice", "alice@example.com"],
        ["Bob", "bob@example.com"],
        ["Carol", "carol@example.com"],
    ]:
        ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def formatted_xlsx_bytes() -> bytes:
    """An xlsx built by openpyxl with styles, layout and metadata."""
    return _build_formatted_xlsx()


@pytest.fixture
def plain_xlsx_bytes() -> bytes:
    """An xlsx built by openpyxl with values only."""
    return _build_plain_xlsx()
