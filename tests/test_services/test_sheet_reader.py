"""Tests for reading sheets as records."""

from datetime import date, datetime, time

import pandas as pd
import pytest

from checkin_workbook.services.codec import decode_workbook
from checkin_workbook.services.sheet_reader import (
    cell_display_value,
    sheet_to_dataframe,
    sheet_to_records,
)
from checkin_workbook.workbook import Cell, CellAddress, Sheet, ValueType


@pytest.mark.parametrize(
    "cell,expected",
    [
        (None, ""),
        (Cell(value=None), ""),
        (Cell(value_type=ValueType.STUB, style={"font": {"bold": True}}), ""),
        (Cell(value="Alice"), "Alice"),
        (Cell(value=3.0, value_type=ValueType.NUMBER), "3"),
        (Cell(value=2.5, value_type=ValueType.NUMBER), "2.5"),
        (Cell(value=7, value_type=ValueType.NUMBER), "7"),
        (Cell(value=True, value_type=ValueType.BOOLEAN), "TRUE"),
        (Cell(value=False, value_type=ValueType.BOOLEAN), "FALSE"),
        (Cell(value=datetime(2024, 5, 1), value_type=ValueType.DATE), "2024-05-01"),
        (
            Cell(value=datetime(2024, 5, 1, 9, 30), value_type=ValueType.DATE),
            "2024-05-01 09:30:00",
        ),
        (Cell(value=date(2024, 5, 1), value_type=ValueType.DATE), "2024-05-01"),
        (Cell(value=time(9, 30), value_type=ValueType.DATE), "09:30:00"),
        (Cell(value=0.5, value_type=ValueType.NUMBER, display_text="50%"), "50%"),
    ],
)
def test_cell_display_value(cell: Cell | None, expected: str) -> None:
    assert cell_display_value(cell) == expected


class TestSheetToRecords:
    def test_plain_sheet(self, plain_sheet: Sheet) -> None:
        records = sheet_to_records(plain_sheet)

        assert records.sheet_name == "Attendees"
        assert records.headers == ["Name", "Email"]
        assert records.header_row == 1
        assert [row.row_number for row in records.rows] == [2, 3]
        assert records.rows[0].values == {
            "Name": "Alice",
            "Email": "alice@example.com",
        }

    def test_blank_and_duplicate_headers(self) -> None:
        sheet = Sheet(name="S")
        for col, header in enumerate(["Name", "", "Name"]):
            if header:
                sheet.set_cell(CellAddress(0, col), Cell(value=header))
        sheet.set_cell(CellAddress(1, 1), Cell(value="x"))

        records = sheet_to_records(sheet)

        assert records.headers == ["Name", "Column2", "Name_1"]
        assert records.rows[0].values == {"Name": "", "Column2": "x", "Name_1": ""}

    def test_blank_rows_are_skipped(self, plain_sheet: Sheet) -> None:
        plain_sheet.set_cell(CellAddress(5, 0), Cell(value="Dave"))

        records = sheet_to_records(plain_sheet)

        assert [row.row_number for row in records.rows] == [2, 3, 6]

    def test_empty_sheet(self) -> None:
        records = sheet_to_records(Sheet(name="Empty"))

        assert records.headers == []
        assert records.header_row is None
        assert records.rows == []

    def test_decoded_workbook(self, formatted_xlsx_bytes: bytes) -> None:
        sheet = decode_workbook(formatted_xlsx_bytes).get_sheet("Attendees")

        records = sheet_to_records(sheet)

        assert records.headers == ["Name", "Email", "Tickets", "Column4"]
        first = records.rows[0]
        assert first.row_number == 2
        assert first.values["Tickets"] == "2"
        assert first.values["Column4"] == "2024-05-01 09:30:00"


def test_sheet_to_dataframe(plain_sheet: Sheet) -> None:
    plain_sheet.set_cell(CellAddress(4, 1), Cell(value="late@example.com"))

    df = sheet_to_dataframe(plain_sheet)

    assert isinstance(df, pd.DataFrame)
    assert list(df.columns) == ["Name", "Email"]
    assert list(df.index) == [2, 3, 5]
    assert df.index.name == "row_number"
    assert df.loc[2, "Name"] == "Alice"
    assert pd.isna(df.loc[5, "Name"])


def test_sheet_to_dataframe_empty() -> None:
    assert sheet_to_dataframe(Sheet(name="Empty")).empty
