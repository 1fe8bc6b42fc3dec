"""Replace cell values without losing the formatting already on the cell."""

from dataclasses import replace
from typing import Any

from checkin_workbook.services.cloner import copy_record
from checkin_workbook.utils.logging import get_logger
from checkin_workbook.workbook import Cell, CellAddress, Sheet, ValueType

logger = get_logger(__name__)


def with_preserved_formatting(
    existing_cell: Cell | None,
    new_value: Any,
    new_type: ValueType = ValueType.STRING,
) -> Cell:
    """Build a cell holding ``new_value`` with the formatting of ``existing_cell``.

    Style, number format, hyperlink, comment, cached display text and formula
    are copied from ``existing_cell``. A missing or malformed source, or a
    record that cannot be copied, yields a bare cell instead. Never raises.
    """
    if not isinstance(existing_cell, Cell):
        return Cell(value=new_value, value_type=new_type)
    try:
        return Cell(
            value=new_value,
            value_type=new_type,
            formula=existing_cell.formula,
            style=copy_record(existing_cell.style),
            number_format=existing_cell.number_format,
            hyperlink=copy_record(existing_cell.hyperlink),
            comment=copy_record(existing_cell.comment),
            display_text=existing_cell.display_text,
        )
    except Exception as e:
        logger.warning("Could not preserve cell formatting", error=str(e))
        return Cell(value=new_value, value_type=new_type)


def set_cell_value(
    sheet: Sheet,
    address: CellAddress,
    value: Any,
    value_type: ValueType = ValueType.STRING,
) -> Cell:
    """Overwrite the value at ``address`` keeping the cell's formatting.

    Cached display text and the formula of the old value are dropped unless
    the new value is itself a formula.
    """
    cell = with_preserved_formatting(sheet.get_cell(address), value, value_type)
    if value_type != ValueType.FORMULA:
        cell = replace(cell, formula=None, display_text=None)
    sheet.set_cell(address, cell)
    return cell


def inherit_style(sheet: Sheet, target: CellAddress, source: CellAddress) -> bool:
    """Copy the style record of ``source`` onto the existing cell at ``target``.

    Returns:
        True if a style was copied.
    """
    source_cell = sheet.get_cell(source)
    target_cell = sheet.get_cell(target)
    if source_cell is None or target_cell is None or not source_cell.style:
        return False
    try:
        target_cell.style = copy_record(source_cell.style)
    except TypeError as e:
        logger.warning(
            "Could not inherit style",
            sheet=sheet.name,
            source=source.to_a1(),
            error=str(e),
        )
        return False
    return True
