"""Tests for the check-in export workflow."""

from datetime import datetime
from unittest.mock import patch

import pytest

from checkin_workbook.services.checkin_export import (
    CheckInRecord,
    apply_check_ins,
    export_with_check_ins,
    find_header_column,
    format_check_in_time,
)
from checkin_workbook.services.codec import (
    EncodeOptions,
    decode_workbook,
    encode_workbook,
)
from checkin_workbook.services.formatting_detector import has_formatting
from checkin_workbook.utils.exceptions import InvalidCheckInError, SheetNotFoundError
from checkin_workbook.workbook import Cell, CellAddress, Sheet, Workbook

HEADER = "Checked-In At"
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def test_format_check_in_time() -> None:
    moment = datetime(2024, 5, 1, 9, 30, 5)
    assert format_check_in_time(moment, TIME_FORMAT) == "2024-05-01 09:30:05"
    assert format_check_in_time("already text", TIME_FORMAT) == "already text"


def test_find_header_column(plain_sheet: Sheet) -> None:
    assert find_header_column(plain_sheet, "Email") == 1
    assert find_header_column(plain_sheet, HEADER) is None
    assert find_header_column(Sheet(name="Empty"), HEADER) is None


class TestApplyCheckIns:
    def test_appends_column_with_blank_rows(self, plain_sheet: Sheet) -> None:
        column = apply_check_ins(
            plain_sheet,
            [CheckInRecord(row_number=3, checked_in_at=datetime(2024, 5, 1, 9, 0))],
            header=HEADER,
            time_format=TIME_FORMAT,
        )

        assert column == 2
        assert plain_sheet.get_cell(CellAddress(0, 2)).value == HEADER
        assert plain_sheet.get_cell(CellAddress(1, 2)).value == ""
        assert plain_sheet.get_cell(CellAddress(2, 2)).value == "2024-05-01 09:00:00"
        assert plain_sheet.column_specs[2].width == 20.0

    def test_rows_beyond_data_grow_range(self, plain_sheet: Sheet) -> None:
        apply_check_ins(
            plain_sheet,
            [CheckInRecord(row_number=6, checked_in_at="late")],
            header=HEADER,
        )

        assert plain_sheet.get_cell(CellAddress(5, 2)).value == "late"
        assert plain_sheet.used_range.max_row == 5

    def test_existing_column_is_updated(self, plain_sheet: Sheet) -> None:
        apply_check_ins(plain_sheet, [CheckInRecord(2, "first")], header=HEADER)
        styled = plain_sheet.get_cell(CellAddress(1, 2))
        styled.style = {"font": {"italic": True}}

        column = apply_check_ins(
            plain_sheet,
            [CheckInRecord(2, "second"), CheckInRecord(3, "third")],
            header=HEADER,
        )

        assert column == 2
        assert plain_sheet.used_range.max_col == 2
        updated = plain_sheet.get_cell(CellAddress(1, 2))
        assert updated.value == "second"
        assert updated.style == {"font": {"italic": True}}
        assert plain_sheet.get_cell(CellAddress(2, 2)).value == "third"

    def test_styles_inherited_from_first_column(self, formatted_sheet: Sheet) -> None:
        apply_check_ins(formatted_sheet, [CheckInRecord(2, "x")], header=HEADER)

        header = formatted_sheet.get_cell(CellAddress(0, 2))
        assert header.style == formatted_sheet.get_cell(CellAddress(0, 0)).style
        assert header.style is not formatted_sheet.get_cell(CellAddress(0, 0)).style

    def test_style_inheritance_can_be_disabled(self, formatted_sheet: Sheet) -> None:
        apply_check_ins(
            formatted_sheet,
            [CheckInRecord(2, "x")],
            header=HEADER,
            inherit_styles=False,
        )

        assert formatted_sheet.get_cell(CellAddress(0, 2)).style is None

    @pytest.mark.parametrize("row_number", [0, 1])
    def test_rejects_header_row(self, plain_sheet: Sheet, row_number: int) -> None:
        cells_before = dict(plain_sheet.cells)

        with pytest.raises(InvalidCheckInError) as exc_info:
            apply_check_ins(plain_sheet, [CheckInRecord(row_number, "x")])

        assert exc_info.value.details["header_row"] == 1
        assert plain_sheet.cells == cells_before

    def test_header_from_settings(self, plain_sheet: Sheet) -> None:
        with patch(
            "checkin_workbook.services.checkin_export.settings.checkin_header",
            "Arrived",
        ):
            column = apply_check_ins(plain_sheet, [CheckInRecord(2, "yes")])

        assert plain_sheet.get_cell(CellAddress(0, column)).value == "Arrived"


class TestExportWithCheckIns:
    def test_formatted_round_trip(self, formatted_xlsx_bytes: bytes) -> None:
        original = decode_workbook(formatted_xlsx_bytes)

        output = export_with_check_ins(
            formatted_xlsx_bytes,
            "Attendees",
            [CheckInRecord(2, datetime(2024, 5, 1, 9, 15))],
            header=HEADER,
            time_format=TIME_FORMAT,
        )

        exported = decode_workbook(output)
        sheet = exported.get_sheet("Attendees")
        source = original.get_sheet("Attendees")
        assert has_formatting(exported) is True
        assert exported.sheet_visibility == original.sheet_visibility
        assert sheet.merges == source.merges
        assert sheet.column_specs[0].width == source.column_specs[0].width
        assert sheet.get_cell(CellAddress(0, 0)) == source.get_cell(CellAddress(0, 0))

        # The check-in column lands after column D
        assert sheet.get_cell(CellAddress(0, 4)).value == HEADER
        assert sheet.get_cell(CellAddress(1, 4)).value == "2024-05-01 09:15:00"
        # Blank check-ins are empty strings, which openpyxl stores as blank cells
        assert sheet.get_cell(CellAddress(2, 4)) is None
        assert sheet.column_specs[4].width == 20.0
        assert sheet.column_specs[2].width == 15.0
        header_style = sheet.get_cell(CellAddress(0, 4)).style
        assert header_style == source.get_cell(CellAddress(0, 0)).style

    def test_re_export_reuses_column(self, plain_xlsx_bytes: bytes) -> None:
        first = export_with_check_ins(
            plain_xlsx_bytes, "Attendees", [CheckInRecord(2, "09:00")], header=HEADER
        )
        second = export_with_check_ins(
            first, "Attendees", [CheckInRecord(4, "09:05")], header=HEADER
        )

        sheet = decode_workbook(second).get_sheet("Attendees")
        assert sheet.used_range.max_col == 2
        assert sheet.get_cell(CellAddress(1, 2)).value == "09:00"
        assert sheet.get_cell(CellAddress(3, 2)).value == "09:05"

    def test_plain_workbook_export(self, plain_xlsx_bytes: bytes) -> None:
        output = export_with_check_ins(plain_xlsx_bytes, "Attendees", [], header=HEADER)

        sheet = decode_workbook(output).get_sheet("Attendees")
        assert sheet.get_cell(CellAddress(0, 2)).value == HEADER
        assert all(sheet.get_cell(CellAddress(row, 2)) is None for row in range(1, 4))
        assert sheet.column_specs[2].width == 20.0

    def test_unknown_sheet(self, plain_xlsx_bytes: bytes) -> None:
        with pytest.raises(SheetNotFoundError):
            export_with_check_ins(plain_xlsx_bytes, "Missing", [])

    def test_empty_sheet(self) -> None:
        workbook = Workbook()
        workbook.add_sheet(Sheet(name="Empty"))
        data = encode_workbook(workbook)

        output = export_with_check_ins(data, "Empty", [], header=HEADER)

        sheet = decode_workbook(output).get_sheet("Empty")
        assert sheet.get_cell(CellAddress(0, 1)).value == HEADER

    def test_xlsm_output(self, plain_xlsx_bytes: bytes) -> None:
        output = export_with_check_ins(
            plain_xlsx_bytes,
            "Attendees",
            [CheckInRecord(2, "x")],
            encode_options=EncodeOptions(book_type="xlsm"),
        )
        assert decode_workbook(output).get_sheet("Attendees") is not None

    def test_clone_fallback_still_exports(self, plain_xlsx_bytes: bytes) -> None:
        with patch(
            "checkin_workbook.services.checkin_export.clone_workbook",
            side_effect=lambda workbook: workbook,
        ):
            output = export_with_check_ins(
                plain_xlsx_bytes, "Attendees", [CheckInRecord(2, "x")], header=HEADER
            )

        sheet = decode_workbook(output).get_sheet("Attendees")
        assert sheet.get_cell(CellAddress(1, 2)) == Cell(value="x")
