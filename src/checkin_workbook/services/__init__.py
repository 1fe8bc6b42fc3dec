"""Services for the check-in workbook engine."""

from checkin_workbook.services.cell_formatting import (
    inherit_style,
    set_cell_value,
    with_preserved_formatting,
)
from checkin_workbook.services.checkin_export import (
    CheckInRecord,
    apply_check_ins,
    export_with_check_ins,
)
from checkin_workbook.services.cloner import clone_sheet, clone_workbook, copy_record
from checkin_workbook.services.codec import (
    DecodeOptions,
    EncodeOptions,
    WorkbookCodec,
    decode_workbook,
    encode_workbook,
)
from checkin_workbook.services.column_appender import append_column
from checkin_workbook.services.formatting_detector import (
    analyze_sheet,
    analyze_workbook,
    has_formatting,
)
from checkin_workbook.services.sheet_reader import (
    SheetRecords,
    SheetRow,
    cell_display_value,
    sheet_to_dataframe,
    sheet_to_records,
)

__all__ = [
    "CheckInRecord",
    "DecodeOptions",
    "EncodeOptions",
    "SheetRecords",
    "SheetRow",
    "WorkbookCodec",
    "analyze_sheet",
    "analyze_workbook",
    "append_column",
    "apply_check_ins",
    "cell_display_value",
    "clone_sheet",
    "clone_workbook",
    "copy_record",
    "decode_workbook",
    "encode_workbook",
    "export_with_check_ins",
    "has_formatting",
    "inherit_style",
    "set_cell_value",
    "sheet_to_dataframe",
    "sheet_to_records",
    "with_preserved_formatting",
]
