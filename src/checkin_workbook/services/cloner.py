"""Deep copy of the workbook model.

The copy is an explicit walk over the typed model rather than
``copy.deepcopy``: every opaque record goes through ``copy_record``, which
only accepts plain containers and immutable scalars. A cell or sheet that
cannot be copied is kept by reference and the walk carries on, so a single
damaged unit never costs the whole clone.
"""

from dataclasses import replace
from datetime import date, time, timedelta
from decimal import Decimal
from typing import Any

from checkin_workbook.utils.logging import (
    PerformanceMetrics,
    get_logger,
    timed_operation,
)
from checkin_workbook.workbook import Cell, Sheet, Workbook

logger = get_logger(__name__)

# datetime is a subclass of date
_SCALAR_TYPES = (
    str,
    int,
    float,
    bool,
    type(None),
    Decimal,
    bytes,
    date,
    time,
    timedelta,
)


def copy_record(value: Any) -> Any:
    """Recursively copy a record of dicts, lists and tuples.

    Raises:
        TypeError: If a leaf is not one of the accepted immutable scalars.
    """
    if isinstance(value, dict):
        return {key: copy_record(item) for key, item in value.items()}
    if isinstance(value, list):
        return [copy_record(item) for item in value]
    if isinstance(value, tuple):
        return tuple(copy_record(item) for item in value)
    if isinstance(value, _SCALAR_TYPES):
        return value
    raise TypeError(f"Cannot copy value of type {type(value).__name__}")


def _copy_cell(cell: Cell) -> Cell:
    if not isinstance(cell, Cell):
        raise TypeError(f"Expected a Cell, got {type(cell).__name__}")
    return Cell(
        value=copy_record(cell.value),
        value_type=cell.value_type,
        formula=cell.formula,
        style=copy_record(cell.style),
        number_format=cell.number_format,
        hyperlink=copy_record(cell.hyperlink),
        comment=copy_record(cell.comment),
        display_text=cell.display_text,
    )


def _copy_sheet(sheet: Sheet, metrics: PerformanceMetrics) -> Sheet:
    if not isinstance(sheet, Sheet):
        raise TypeError(f"Expected a Sheet, got {type(sheet).__name__}")

    cells: dict[Any, Cell] = {}
    for address, cell in sheet.cells.items():
        try:
            cells[address] = _copy_cell(cell)
        except Exception as e:
            logger.warning(
                "Cell copy failed, keeping original reference",
                sheet=sheet.name,
                address=address,
                error=str(e),
            )
            cells[address] = cell
            metrics.fallbacks += 1
        metrics.cells_processed += 1

    return Sheet(
        name=sheet.name,
        cells=cells,
        used_range=replace(sheet.used_range) if sheet.used_range else None,
        column_specs=[
            replace(spec) if spec is not None else None for spec in sheet.column_specs
        ],
        row_specs=[
            replace(spec) if spec is not None else None for spec in sheet.row_specs
        ],
        merges=[replace(merge) for merge in sheet.merges],
        autofilter_range=sheet.autofilter_range,
        protection=copy_record(sheet.protection),
        margins=copy_record(sheet.margins),
    )


def _copy_macro_payload(
    payload: bytes | bytearray | None,
) -> bytes | bytearray | None:
    if payload is None or isinstance(payload, bytes):
        return payload
    if isinstance(payload, bytearray):
        return bytearray(payload)
    raise TypeError(f"Unsupported macro payload type {type(payload).__name__}")


def _copy_workbook(workbook: Workbook, metrics: PerformanceMetrics) -> Workbook:
    if not isinstance(workbook, Workbook):
        raise TypeError(f"Expected a Workbook, got {type(workbook).__name__}")

    sheets: dict[str, Any] = {}
    for name, sheet in workbook.sheets.items():
        try:
            sheets[name] = _copy_sheet(sheet, metrics)
            metrics.sheets_processed += 1
        except Exception as e:
            logger.warning(
                "Sheet copy failed, keeping original reference",
                sheet=name,
                error=str(e),
            )
            sheets[name] = sheet
            metrics.fallbacks += 1

    return Workbook(
        sheet_order=list(workbook.sheet_order),
        sheets=sheets,
        document_properties=copy_record(workbook.document_properties),
        custom_properties=copy_record(workbook.custom_properties),
        sheet_visibility=dict(workbook.sheet_visibility),
        macro_payload=_copy_macro_payload(workbook.macro_payload),
    )


def clone_workbook(workbook: Workbook) -> Workbook:
    """Return an independent deep copy of ``workbook``.

    If the workbook as a whole cannot be copied the original object is
    returned unchanged; callers can detect this with an identity check.
    """
    with timed_operation(logger, "clone_workbook") as metrics:
        try:
            return _copy_workbook(workbook, metrics)
        except Exception as e:
            logger.error(
                "Workbook clone failed, returning original",
                exc_info=True,
                error=str(e),
            )
            metrics.fallbacks += 1
            return workbook


def clone_sheet(sheet: Sheet) -> Sheet:
    """Return a deep copy of one sheet, or the sheet itself if copying fails."""
    metrics = PerformanceMetrics(operation="clone_sheet")
    try:
        return _copy_sheet(sheet, metrics)
    except Exception as e:
        logger.error("Sheet clone failed, returning original", error=str(e))
        return sheet
