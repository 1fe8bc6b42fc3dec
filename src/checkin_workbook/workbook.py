"""Dataclasses representing an in-memory spreadsheet workbook.

The model is sparse: a sheet only stores cells that hold a value or carry
formatting, keyed by zero-based ``CellAddress``. Styles, hyperlinks,
comments and the other pass-through records are plain nested dicts and
lists so they can be copied without knowing their schema.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple

from openpyxl.utils.cell import (
    column_index_from_string,
    coordinate_from_string,
    get_column_letter,
    range_boundaries,
)
from openpyxl.utils.exceptions import CellCoordinatesException

from checkin_workbook.utils.exceptions import (
    DuplicateSheetError,
    InvalidAddressError,
    InvalidSheetError,
    MergeOverlapError,
    SheetNotFoundError,
    WorkbookModelError,
)

SHEET_VISIBILITY = ("visible", "hidden", "veryHidden")


class ValueType(str, Enum):
    """Kind of value a cell holds."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    ERROR = "error"
    FORMULA = "formula"
    STUB = "stub"


class CellAddress(NamedTuple):
    """Zero-based (row, column) position of a cell."""

    row: int
    col: int

    @classmethod
    def from_a1(cls, reference: str) -> CellAddress:
        """Parse an A1-style reference such as ``"B3"`` or ``"$B$3"``."""
        try:
            letters, row = coordinate_from_string(reference.strip())
            col = column_index_from_string(letters)
        except (CellCoordinatesException, ValueError, AttributeError) as e:
            raise InvalidAddressError(str(reference)) from e
        return cls(row - 1, col - 1)

    def to_a1(self) -> str:
        if self.row < 0 or self.col < 0:
            raise InvalidAddressError(repr(tuple(self)), "Address is negative")
        return f"{get_column_letter(self.col + 1)}{self.row + 1}"


@dataclass
class CellRange:
    """Inclusive, zero-based rectangular range of cells."""

    min_row: int
    min_col: int
    max_row: int
    max_col: int

    def __post_init__(self) -> None:
        if self.min_row > self.max_row or self.min_col > self.max_col:
            raise InvalidAddressError(
                repr((self.min_row, self.min_col, self.max_row, self.max_col)),
                "Range start must not be after its end",
            )

    @classmethod
    def from_a1(cls, reference: str) -> CellRange:
        """Parse ``"A1:C3"`` (or a single cell reference) into a range."""
        try:
            min_col, min_row, max_col, max_row = range_boundaries(reference.strip())
        except (CellCoordinatesException, ValueError, TypeError, AttributeError) as e:
            raise InvalidAddressError(str(reference)) from e
        if None in (min_col, min_row, max_col, max_row):
            raise InvalidAddressError(
                reference, "Whole-row and whole-column ranges are not supported"
            )
        return cls(min_row - 1, min_col - 1, max_row - 1, max_col - 1)

    @classmethod
    def single(cls, address: CellAddress) -> CellRange:
        return cls(address.row, address.col, address.row, address.col)

    def to_a1(self) -> str:
        start = CellAddress(self.min_row, self.min_col).to_a1()
        if (self.min_row, self.min_col) == (self.max_row, self.max_col):
            return start
        return f"{start}:{CellAddress(self.max_row, self.max_col).to_a1()}"

    @property
    def row_count(self) -> int:
        return self.max_row - self.min_row + 1

    @property
    def column_count(self) -> int:
        return self.max_col - self.min_col + 1

    def contains(self, address: CellAddress) -> bool:
        return (
            self.min_row <= address.row <= self.max_row
            and self.min_col <= address.col <= self.max_col
        )

    def contains_range(self, other: CellRange) -> bool:
        return self.contains(CellAddress(other.min_row, other.min_col)) and (
            self.contains(CellAddress(other.max_row, other.max_col))
        )

    def overlaps(self, other: CellRange) -> bool:
        return not (
            other.max_row < self.min_row
            or other.min_row > self.max_row
            or other.max_col < self.min_col
            or other.min_col > self.max_col
        )

    def expand_to(self, address: CellAddress) -> None:
        """Grow the range in place so it covers ``address``."""
        self.min_row = min(self.min_row, address.row)
        self.min_col = min(self.min_col, address.col)
        self.max_row = max(self.max_row, address.row)
        self.max_col = max(self.max_col, address.col)

    def expand_to_range(self, other: CellRange) -> None:
        self.expand_to(CellAddress(other.min_row, other.min_col))
        self.expand_to(CellAddress(other.max_row, other.max_col))


@dataclass
class ColumnSpec:
    """Per-column layout override. Width is in character units."""

    width: float | None = None
    hidden: bool = False
    custom_width: bool = False


@dataclass
class RowSpec:
    """Per-row layout override. Height is in points."""

    height: float | None = None
    hidden: bool = False


@dataclass
class Cell:
    """A single non-blank cell.

    ``style``, ``hyperlink`` and ``comment`` are opaque records: nested dicts
    and lists of str/number/bool leaves that the core only ever copies.
    """

    value: Any = None
    value_type: ValueType = ValueType.STRING
    formula: str | None = None
    style: dict[str, Any] | None = None
    number_format: str | None = None
    hyperlink: dict[str, Any] | None = None
    comment: list[dict[str, Any]] | None = None
    display_text: str | None = None

    def has_formatting(self) -> bool:
        return bool(
            self.style or self.number_format or self.hyperlink or self.comment
        )

    @property
    def is_stub(self) -> bool:
        return self.value_type == ValueType.STUB


@dataclass
class Sheet:
    """One worksheet: sparse cells plus layout and pass-through metadata.

    ``column_specs`` and ``row_specs`` are indexed by zero-based column/row.
    A ``None`` entry is an explicit "no override" placeholder and a list
    shorter than the sheet means default sizing for the missing tail.
    ``used_range`` always covers every stored cell and every merge.
    """

    name: str
    cells: dict[CellAddress, Cell] = field(default_factory=dict)
    used_range: CellRange | None = None
    column_specs: list[ColumnSpec | None] = field(default_factory=list)
    row_specs: list[RowSpec | None] = field(default_factory=list)
    merges: list[CellRange] = field(default_factory=list)
    autofilter_range: str | None = None
    protection: dict[str, Any] | None = None
    margins: dict[str, Any] | None = None

    def get_cell(self, address: CellAddress) -> Cell | None:
        return self.cells.get(address)

    def set_cell(self, address: CellAddress, cell: Cell) -> None:
        """Store ``cell`` at ``address`` and grow ``used_range`` to cover it."""
        if address.row < 0 or address.col < 0:
            raise InvalidAddressError(repr(tuple(address)), "Address is negative")
        self.cells[address] = cell
        self._include(CellRange.single(address))

    def add_merge(self, cell_range: CellRange) -> None:
        """Register a merged region.

        Raises:
            MergeOverlapError: If the region overlaps an existing merge.
        """
        for existing in self.merges:
            if existing.overlaps(cell_range):
                raise MergeOverlapError(
                    cell_range.to_a1(), existing.to_a1(), sheet_name=self.name
                )
        self.merges.append(cell_range)
        self._include(cell_range)

    def iter_cells(self) -> Iterator[tuple[CellAddress, Cell]]:
        """Iterate cells in row-major order."""
        for address in sorted(self.cells):
            yield address, self.cells[address]

    def _include(self, cell_range: CellRange) -> None:
        if self.used_range is None:
            self.used_range = CellRange(
                cell_range.min_row,
                cell_range.min_col,
                cell_range.max_row,
                cell_range.max_col,
            )
        else:
            self.used_range.expand_to_range(cell_range)


@dataclass
class Workbook:
    """An ordered collection of sheets with workbook-level metadata.

    ``sheets`` may hold a non-``Sheet`` entry when a workbook was assembled
    from damaged input; readers are expected to skip such entries.
    ``macro_payload`` is the raw VBA project and is never interpreted.
    """

    sheet_order: list[str] = field(default_factory=list)
    sheets: dict[str, Any] = field(default_factory=dict)
    document_properties: dict[str, Any] = field(default_factory=dict)
    custom_properties: dict[str, Any] = field(default_factory=dict)
    sheet_visibility: dict[str, str] = field(default_factory=dict)
    macro_payload: bytes | bytearray | None = None

    def add_sheet(self, sheet: Sheet, visibility: str = "visible") -> Sheet:
        """Append a sheet to the workbook.

        Raises:
            DuplicateSheetError: If a sheet with the same name exists.
            WorkbookModelError: If ``visibility`` is not a known state.
        """
        if sheet.name in self.sheets:
            raise DuplicateSheetError(sheet.name)
        if visibility not in SHEET_VISIBILITY:
            raise WorkbookModelError(
                f"Unknown sheet visibility '{visibility}'", sheet_name=sheet.name
            )
        self.sheet_order.append(sheet.name)
        self.sheets[sheet.name] = sheet
        self.sheet_visibility[sheet.name] = visibility
        return sheet

    def get_sheet(self, name: str) -> Sheet:
        """Look up a sheet by name.

        Raises:
            SheetNotFoundError: If no sheet has that name.
            InvalidSheetError: If the entry under that name is not a sheet.
        """
        if name not in self.sheets:
            raise SheetNotFoundError(name, available=self.sheet_names)
        sheet = self.sheets[name]
        if not isinstance(sheet, Sheet):
            raise InvalidSheetError(received_type=type(sheet).__name__)
        return sheet

    @property
    def sheet_names(self) -> list[str]:
        return list(self.sheet_order)

    def __iter__(self) -> Iterator[Any]:
        for name in self.sheet_order:
            yield self.sheets.get(name)

    def __len__(self) -> int:
        return len(self.sheet_order)
