"""Translate between OOXML spreadsheet bytes and the workbook model.

openpyxl does the container work. This module maps its objects to the
model's plain records and back: 1-based openpyxl rows and columns become
zero-based ``CellAddress`` keys, and style objects become nested dicts
holding only the parts that differ from openpyxl's defaults.
"""

from __future__ import annotations

import io
import zipfile
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any

from openpyxl import Workbook as OpenpyxlWorkbook
from openpyxl import load_workbook
from openpyxl.cell.cell import Cell as OpenpyxlCell
from openpyxl.cell.cell import MergedCell
from openpyxl.comments import Comment
from openpyxl.packaging.custom import (
    BoolProperty,
    DateTimeProperty,
    FloatProperty,
    IntProperty,
    StringProperty,
)
from openpyxl.styles import (
    Alignment,
    Border,
    Color,
    Font,
    GradientFill,
    PatternFill,
    Protection,
    Side,
)
from openpyxl.styles.fills import Stop
from openpyxl.styles.fonts import DEFAULT_FONT
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.hyperlink import Hyperlink
from openpyxl.worksheet.page import PageMargins
from openpyxl.worksheet.protection import SheetProtection
from openpyxl.worksheet.worksheet import Worksheet
from openpyxl.xml.constants import ARC_CONTENT_TYPES, ARC_ROOT_RELS, XLSM, XLSX

from checkin_workbook.config import SUPPORTED_BOOK_TYPES, settings
from checkin_workbook.utils.exceptions import (
    CheckinWorkbookError,
    MergeOverlapError,
    UnsupportedFormatError,
    WorkbookDecodeError,
    WorkbookEncodeError,
)
from checkin_workbook.utils.logging import (
    PerformanceMetrics,
    get_logger,
    timed_operation,
)
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

logger = get_logger(__name__)

VBA_PART = "xl/vbaProject.bin"
CONTENT_TYPES_PART = ARC_CONTENT_TYPES
ROOT_RELS_PART = ARC_ROOT_RELS
_VBA_CONTENT_TYPES = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
    '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
    '<Override PartName="/xl/vbaProject.bin" '
    'ContentType="application/vnd.ms-office.vbaProject"/>'
    "</Types>"
)
_EMPTY_ROOT_RELS = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
    "<Relationships "
    'xmlns="http://schemas.openxmlformats.org/package/2006/relationships"/>'
)

GENERAL_FORMAT = "General"

DOCUMENT_PROPERTY_FIELDS = (
    "creator",
    "title",
    "subject",
    "description",
    "keywords",
    "category",
    "lastModifiedBy",
    "created",
    "modified",
    "language",
    "revision",
    "version",
    "contentStatus",
    "identifier",
)

PROTECTION_FLAGS = (
    "sheet",
    "objects",
    "scenarios",
    "formatCells",
    "formatRows",
    "formatColumns",
    "insertColumns",
    "insertRows",
    "insertHyperlinks",
    "deleteColumns",
    "deleteRows",
    "selectLockedCells",
    "selectUnlockedCells",
    "sort",
    "autoFilter",
    "pivotTables",
)
PROTECTION_HASH_FIELDS = ("algorithmName", "hashValue", "saltValue", "spinCount")

MARGIN_FIELDS = ("left", "right", "top", "bottom", "header", "footer")
BORDER_SIDES = ("left", "right", "top", "bottom", "diagonal")


@dataclass
class DecodeOptions:
    """Options controlling workbook decoding."""

    retain_styles: bool = True
    decode_values: bool = True
    retain_macros: bool = True
    include_stub_cells: bool = True


@dataclass
class EncodeOptions:
    """Options controlling workbook encoding.

    ``book_type`` and ``compress`` fall back to the configured defaults
    when left as None.
    """

    book_type: str | None = None
    retain_styles: bool = True
    retain_macros: bool = True
    compress: bool | None = None


# ---------------------------------------------------------------------- #
# Style records
# ---------------------------------------------------------------------- #


def _color_record(color: Color | None) -> dict[str, Any] | None:
    if color is None:
        return None
    record: dict[str, Any]
    if color.type == "rgb":
        record = {"rgb": color.rgb}
    elif color.type == "theme":
        record = {"theme": color.theme}
    elif color.type == "indexed":
        record = {"indexed": color.indexed}
    else:
        record = {"auto": True}
    if color.tint:
        record["tint"] = color.tint
    return record


def _build_color(record: dict[str, Any] | None) -> Color | None:
    if not record:
        return None
    tint = record.get("tint", 0.0)
    if "rgb" in record:
        return Color(rgb=record["rgb"], tint=tint)
    if "theme" in record:
        return Color(theme=record["theme"], tint=tint)
    if "indexed" in record:
        return Color(indexed=record["indexed"], tint=tint)
    return Color(auto=True, tint=tint)


def _compact(record: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in record.items() if value not in (None, False)}


def _font_record(font: Font) -> dict[str, Any]:
    return _compact(
        {
            "name": font.name,
            "size": font.sz,
            "bold": font.b,
            "italic": font.i,
            "underline": font.u,
            "strike": font.strike,
            "vert_align": font.vertAlign,
            "color": _color_record(font.color),
            "family": font.family,
            "scheme": font.scheme,
        }
    )


def _build_font(record: dict[str, Any]) -> Font:
    return Font(
        name=record.get("name"),
        size=record.get("size"),
        bold=record.get("bold", False),
        italic=record.get("italic", False),
        underline=record.get("underline"),
        strike=record.get("strike", False),
        vertAlign=record.get("vert_align"),
        color=_build_color(record.get("color")),
        family=record.get("family"),
        scheme=record.get("scheme"),
    )


def _fill_record(fill: Any) -> dict[str, Any] | None:
    # Cells hand out fills wrapped in a StyleProxy, so dispatch on the tag
    tagname = getattr(fill, "tagname", None)
    if tagname == GradientFill.tagname:
        return {
            "type": "gradient",
            "gradient_type": fill.type,
            "degree": fill.degree,
            "left": fill.left,
            "right": fill.right,
            "top": fill.top,
            "bottom": fill.bottom,
            "stops": [
                {"position": stop.position, "color": _color_record(stop.color)}
                for stop in fill.stop
            ],
        }
    if tagname == PatternFill.tagname and fill.patternType is not None:
        return {
            "type": "pattern",
            "pattern_type": fill.patternType,
            "fg_color": _color_record(fill.fgColor),
            "bg_color": _color_record(fill.bgColor),
        }
    return None


def _build_fill(record: dict[str, Any]) -> PatternFill | GradientFill:
    if record.get("type") == "gradient":
        return GradientFill(
            type=record.get("gradient_type", "linear"),
            degree=record.get("degree", 0),
            left=record.get("left", 0),
            right=record.get("right", 0),
            top=record.get("top", 0),
            bottom=record.get("bottom", 0),
            stop=[
                Stop(_build_color(stop["color"]), stop["position"])
                for stop in record.get("stops", [])
            ],
        )
    kwargs: dict[str, Any] = {"patternType": record.get("pattern_type")}
    fg_color = _build_color(record.get("fg_color"))
    bg_color = _build_color(record.get("bg_color"))
    if fg_color is not None:
        kwargs["fgColor"] = fg_color
    if bg_color is not None:
        kwargs["bgColor"] = bg_color
    return PatternFill(**kwargs)


def _border_record(border: Border) -> dict[str, Any] | None:
    record: dict[str, Any] = {}
    for side_name in BORDER_SIDES:
        side = getattr(border, side_name)
        if side is not None and side.style is not None:
            record[side_name] = _compact(
                {"style": side.style, "color": _color_record(side.color)}
            )
    if border.diagonalUp:
        record["diagonal_up"] = True
    if border.diagonalDown:
        record["diagonal_down"] = True
    if record and not border.outline:
        record["outline"] = False
    return record or None


def _build_border(record: dict[str, Any]) -> Border:
    sides = {
        side_name: Side(
            style=record[side_name].get("style"),
            color=_build_color(record[side_name].get("color")),
        )
        for side_name in BORDER_SIDES
        if side_name in record
    }
    return Border(
        diagonalUp=record.get("diagonal_up", False),
        diagonalDown=record.get("diagonal_down", False),
        outline=record.get("outline", True),
        **sides,
    )


def _alignment_record(alignment: Alignment) -> dict[str, Any] | None:
    record = _compact(
        {
            "horizontal": alignment.horizontal,
            "vertical": alignment.vertical,
            "wrap_text": alignment.wrap_text,
            "shrink_to_fit": alignment.shrink_to_fit,
            "indent": alignment.indent or None,
            "text_rotation": alignment.text_rotation or None,
        }
    )
    return record or None


def _protection_record(protection: Protection) -> dict[str, Any] | None:
    record: dict[str, Any] = {}
    if protection.locked is False:
        record["locked"] = False
    if protection.hidden:
        record["hidden"] = True
    return record or None


def style_record(cell: OpenpyxlCell | MergedCell) -> dict[str, Any] | None:
    """Describe the non-default style components of an openpyxl cell."""
    if not cell.has_style:
        return None
    record: dict[str, Any] = {}
    if cell.font != DEFAULT_FONT:
        record["font"] = _font_record(cell.font)
    components = (
        ("fill", _fill_record(cell.fill)),
        ("border", _border_record(cell.border)),
        ("alignment", _alignment_record(cell.alignment)),
        ("protection", _protection_record(cell.protection)),
    )
    for key, value in components:
        if value:
            record[key] = value
    return record or None


def apply_style_record(cell: OpenpyxlCell | MergedCell, record: dict[str, Any]) -> None:
    """Apply a record produced by ``style_record`` to an openpyxl cell."""
    if "font" in record:
        cell.font = _build_font(record["font"])
    if "fill" in record:
        cell.fill = _build_fill(record["fill"])
    if "border" in record:
        cell.border = _build_border(record["border"])
    if "alignment" in record:
        cell.alignment = Alignment(**record["alignment"])
    if "protection" in record:
        cell.protection = Protection(**record["protection"])


# ---------------------------------------------------------------------- #
# Codec
# ---------------------------------------------------------------------- #


class WorkbookCodec:
    """Decode spreadsheet bytes into a Workbook and encode it back."""

    def decode(self, data: bytes, options: DecodeOptions | None = None) -> Workbook:
        """Decode xlsx/xlsm bytes.

        Args:
            data: Raw container bytes.
            options: Decoding options.

        Returns:
            The decoded workbook.

        Raises:
            UnsupportedFormatError: If the data is empty or not a zip container.
            WorkbookDecodeError: If openpyxl cannot read the container.
        """
        opts = options or DecodeOptions()
        if not data:
            raise UnsupportedFormatError("Workbook data is empty")
        if not zipfile.is_zipfile(io.BytesIO(data)):
            raise UnsupportedFormatError(
                "Data is not an OOXML spreadsheet container (expected xlsx or xlsm)"
            )

        with timed_operation(logger, "decode_workbook") as metrics:
            try:
                # Load twice: once to capture formulas, once for cached values
                source = load_workbook(
                    io.BytesIO(data), data_only=False, keep_vba=opts.retain_macros
                )
                computed = (
                    load_workbook(io.BytesIO(data), data_only=True)
                    if opts.decode_values
                    else None
                )
            except Exception as e:
                raise WorkbookDecodeError(f"Could not read workbook: {e}") from e

            workbook = Workbook(
                document_properties=self._read_properties(source),
                custom_properties=self._read_custom_properties(source),
                macro_payload=(
                    self._read_macro_payload(source) if opts.retain_macros else None
                ),
            )
            if source.vba_archive is not None:
                source.vba_archive.close()
                source.vba_archive = None
            for ws in source.worksheets:
                computed_ws = computed[ws.title] if computed is not None else None
                sheet = self._read_sheet(ws, computed_ws, opts, metrics)
                workbook.add_sheet(sheet, visibility=ws.sheet_state)
                metrics.sheets_processed += 1

        logger.info(
            "Workbook decoded",
            sheets=len(workbook),
            has_macros=workbook.macro_payload is not None,
        )
        return workbook

    def encode(
        self, workbook: Workbook, options: EncodeOptions | None = None
    ) -> bytes:
        """Encode a workbook into xlsx/xlsm bytes.

        Args:
            workbook: Workbook to encode. Entries that are not sheets are skipped.
            options: Encoding options.

        Returns:
            Container bytes.

        Raises:
            UnsupportedFormatError: If the requested book type is unknown.
            WorkbookEncodeError: If the workbook cannot be written.
        """
        opts = options or EncodeOptions()
        book_type = (opts.book_type or settings.output_book_type).lower()
        if book_type not in SUPPORTED_BOOK_TYPES:
            raise UnsupportedFormatError(
                f"Unsupported book type '{book_type}'", book_type=book_type
            )
        compress = settings.compress_output if opts.compress is None else opts.compress
        if not isinstance(workbook, Workbook):
            raise WorkbookEncodeError(
                f"Expected a Workbook, got {type(workbook).__name__}"
            )

        with timed_operation(logger, "encode_workbook") as metrics:
            try:
                target = OpenpyxlWorkbook()
                target.remove(target.active)
                for name in workbook.sheet_order:
                    sheet = workbook.sheets.get(name)
                    if not isinstance(sheet, Sheet):
                        logger.warning(
                            "Skipping malformed sheet entry on encode",
                            sheet=name,
                            received_type=type(sheet).__name__,
                        )
                        continue
                    ws = target.create_sheet(title=name)
                    self._write_sheet(ws, sheet, opts, metrics)
                    ws.sheet_state = workbook.sheet_visibility.get(name, "visible")
                    metrics.sheets_processed += 1
                if not target.worksheets:
                    target.create_sheet()

                self._write_properties(target, workbook)
                payload = workbook.macro_payload if opts.retain_macros else None
                if book_type == "xlsm" and payload:
                    target.vba_archive = self._macro_archive(payload)
                elif payload:
                    logger.debug("Macro payload dropped", book_type=book_type)

                buffer = io.BytesIO()
                try:
                    target.save(buffer)
                finally:
                    if target.vba_archive is not None:
                        target.vba_archive.close()
                data = buffer.getvalue()

                replacements: dict[str, bytes] = {}
                if book_type == "xlsm" and target.vba_archive is None:
                    # openpyxl marks the workbook part macro-enabled only when
                    # a VBA archive is attached
                    replacements[CONTENT_TYPES_PART] = self._macro_enabled_manifest(
                        data
                    )
                if replacements or not compress:
                    data = self._repack(
                        data,
                        zipfile.ZIP_DEFLATED if compress else zipfile.ZIP_STORED,
                        replacements,
                    )
            except CheckinWorkbookError:
                raise
            except Exception as e:
                raise WorkbookEncodeError(f"Could not write workbook: {e}") from e

        logger.info("Workbook encoded", book_type=book_type, size_bytes=len(data))
        return data

    # ------------------------------------------------------------------ #
    # Decoding helpers
    # ------------------------------------------------------------------ #

    def _read_sheet(
        self,
        ws: Worksheet,
        computed_ws: Worksheet | None,
        opts: DecodeOptions,
        metrics: PerformanceMetrics,
    ) -> Sheet:
        sheet = Sheet(name=ws.title)

        for merged in ws.merged_cells.ranges:
            cell_range = CellRange(
                merged.min_row - 1,
                merged.min_col - 1,
                merged.max_row - 1,
                merged.max_col - 1,
            )
            try:
                sheet.add_merge(cell_range)
            except MergeOverlapError as e:
                logger.warning("Skipping overlapping merge", error=str(e))

        for row in ws.iter_rows():
            for source_cell in row:
                computed_value = None
                if computed_ws is not None and source_cell.data_type == "f":
                    computed_value = computed_ws[source_cell.coordinate].value
                cell = self._read_cell(source_cell, computed_value, opts)
                if cell is not None:
                    sheet.set_cell(
                        CellAddress(source_cell.row - 1, source_cell.column - 1), cell
                    )
                    metrics.cells_processed += 1

        sheet.column_specs = self._read_column_specs(ws)
        sheet.row_specs = self._read_row_specs(ws)
        sheet.autofilter_range = ws.auto_filter.ref or None
        sheet.protection = self._read_protection(ws)
        sheet.margins = self._read_margins(ws)
        return sheet

    def _read_cell(
        self,
        source: OpenpyxlCell | MergedCell,
        computed_value: Any,
        opts: DecodeOptions,
    ) -> Cell | None:
        value = source.value
        formula = None
        if source.data_type == "f":
            formula = getattr(value, "text", None) or str(value)
            value = computed_value
            value_type = ValueType.FORMULA
        elif value is None:
            value_type = ValueType.STUB
        elif source.data_type == "e":
            value_type = ValueType.ERROR
        elif isinstance(value, bool):
            value_type = ValueType.BOOLEAN
        elif isinstance(value, (int, float, Decimal)):
            value_type = ValueType.NUMBER
        elif isinstance(value, (datetime, date, time, timedelta)):
            value_type = ValueType.DATE
        else:
            value = str(value)
            value_type = ValueType.STRING

        cell = Cell(value=value, value_type=value_type, formula=formula)
        if opts.retain_styles:
            cell.style = style_record(source)
            if source.number_format and source.number_format != GENERAL_FORMAT:
                cell.number_format = source.number_format
        if source.hyperlink is not None:
            link = source.hyperlink
            cell.hyperlink = _compact(
                {
                    "target": link.target,
                    "location": link.location,
                    "tooltip": link.tooltip,
                    "display": link.display,
                }
            )
        if source.comment is not None:
            cell.comment = [
                {"author": source.comment.author, "text": source.comment.text}
            ]

        if value_type == ValueType.STUB and (
            not opts.include_stub_cells or not cell.has_formatting()
        ):
            return None
        return cell

    @staticmethod
    def _read_column_specs(ws: Worksheet) -> list[ColumnSpec | None]:
        specs: list[ColumnSpec | None] = []
        for dim in list(ws.column_dimensions.values()):
            if not dim.customWidth and not dim.hidden:
                continue
            first = dim.min or 1
            last = dim.max or first
            for index in range(first - 1, last):
                if len(specs) <= index:
                    specs.extend([None] * (index + 1 - len(specs)))
                specs[index] = ColumnSpec(
                    width=dim.width if dim.customWidth else None,
                    hidden=bool(dim.hidden),
                    custom_width=bool(dim.customWidth),
                )
        return specs

    @staticmethod
    def _read_row_specs(ws: Worksheet) -> list[RowSpec | None]:
        specs: list[RowSpec | None] = []
        for index, dim in sorted(ws.row_dimensions.items()):
            if dim.ht is None and not dim.hidden:
                continue
            if len(specs) < index:
                specs.extend([None] * (index - len(specs)))
            specs[index - 1] = RowSpec(height=dim.ht, hidden=bool(dim.hidden))
        return specs

    @staticmethod
    def _read_protection(ws: Worksheet) -> dict[str, Any] | None:
        protection = ws.protection
        if not protection.sheet:
            return None
        record: dict[str, Any] = {
            flag: bool(getattr(protection, flag)) for flag in PROTECTION_FLAGS
        }
        for field_name in PROTECTION_HASH_FIELDS:
            value = getattr(protection, field_name, None)
            if value is not None:
                record[field_name] = value
        if protection.password:
            record["password"] = protection.password
        return record

    @staticmethod
    def _read_margins(ws: Worksheet) -> dict[str, Any] | None:
        defaults = PageMargins()
        margins = ws.page_margins
        record = {name: getattr(margins, name) for name in MARGIN_FIELDS}
        if all(record[name] == getattr(defaults, name) for name in MARGIN_FIELDS):
            return None
        return record

    @staticmethod
    def _read_properties(source: OpenpyxlWorkbook) -> dict[str, Any]:
        props = source.properties
        return {
            name: getattr(props, name)
            for name in DOCUMENT_PROPERTY_FIELDS
            if getattr(props, name, None) is not None
        }

    @staticmethod
    def _read_custom_properties(source: OpenpyxlWorkbook) -> dict[str, Any]:
        return {prop.name: prop.value for prop in source.custom_doc_props}

    @staticmethod
    def _read_macro_payload(source: OpenpyxlWorkbook) -> bytes | None:
        archive = source.vba_archive
        if archive is None or VBA_PART not in archive.namelist():
            return None
        return archive.read(VBA_PART)

    # ------------------------------------------------------------------ #
    # Encoding helpers
    # ------------------------------------------------------------------ #

    def _write_sheet(
        self,
        ws: Worksheet,
        sheet: Sheet,
        opts: EncodeOptions,
        metrics: PerformanceMetrics,
    ) -> None:
        # Merge first so covered cells exist as MergedCell before styling
        for merge in sheet.merges:
            ws.merge_cells(
                start_row=merge.min_row + 1,
                start_column=merge.min_col + 1,
                end_row=merge.max_row + 1,
                end_column=merge.max_col + 1,
            )

        for address, cell in sheet.iter_cells():
            target = ws.cell(row=address.row + 1, column=address.col + 1)
            if not isinstance(target, MergedCell):
                self._write_value(target, cell)
            self._write_formatting(target, cell, opts)
            metrics.cells_written += 1

        for index, column_spec in enumerate(sheet.column_specs):
            if column_spec is None:
                continue
            dim = ws.column_dimensions[get_column_letter(index + 1)]
            if column_spec.width is not None:
                dim.width = column_spec.width
            dim.hidden = column_spec.hidden

        for index, row_spec in enumerate(sheet.row_specs):
            if row_spec is None:
                continue
            row_dim = ws.row_dimensions[index + 1]
            row_dim.height = row_spec.height
            row_dim.hidden = row_spec.hidden

        if sheet.autofilter_range:
            ws.auto_filter.ref = sheet.autofilter_range
        if sheet.protection:
            self._write_protection(ws, sheet.protection)
        if sheet.margins:
            ws.page_margins = PageMargins(**sheet.margins)

    @staticmethod
    def _write_value(target: OpenpyxlCell, cell: Cell) -> None:
        if cell.value_type == ValueType.FORMULA and cell.formula:
            formula = cell.formula
            target.value = formula if formula.startswith("=") else f"={formula}"
        elif cell.value_type == ValueType.STUB or cell.value is None:
            return
        elif cell.value_type == ValueType.STRING:
            target.value = str(cell.value)
            # Keep text such as "=1+1" literal instead of turning it into a formula
            target.data_type = "s"
        elif cell.value_type == ValueType.ERROR:
            target.value = str(cell.value)
            target.data_type = "e"
        else:
            target.value = cell.value

    @staticmethod
    def _write_formatting(
        target: OpenpyxlCell | MergedCell, cell: Cell, opts: EncodeOptions
    ) -> None:
        if opts.retain_styles:
            if cell.style:
                apply_style_record(target, cell.style)
            if cell.number_format:
                target.number_format = cell.number_format
        if isinstance(target, MergedCell):
            return
        if cell.hyperlink:
            target.hyperlink = Hyperlink(
                ref=target.coordinate,
                target=cell.hyperlink.get("target"),
                location=cell.hyperlink.get("location"),
                tooltip=cell.hyperlink.get("tooltip"),
                display=cell.hyperlink.get("display"),
            )
        if cell.comment:
            text = "\n".join(str(entry.get("text") or "") for entry in cell.comment)
            target.comment = Comment(text, cell.comment[0].get("author") or "")

    @staticmethod
    def _write_protection(ws: Worksheet, record: dict[str, Any]) -> None:
        kwargs = {flag: record[flag] for flag in PROTECTION_FLAGS if flag in record}
        kwargs.update(
            {
                field_name: record[field_name]
                for field_name in PROTECTION_HASH_FIELDS
                if field_name in record
            }
        )
        ws.protection = SheetProtection(**kwargs)
        if record.get("password"):
            ws.protection.set_password(record["password"], already_hashed=True)

    @staticmethod
    def _write_properties(target: OpenpyxlWorkbook, workbook: Workbook) -> None:
        for name, value in workbook.document_properties.items():
            if name in DOCUMENT_PROPERTY_FIELDS:
                setattr(target.properties, name, value)
        for name, value in workbook.custom_properties.items():
            target.custom_doc_props.append(_custom_property(name, value))

    @staticmethod
    def _macro_archive(payload: bytes | bytearray) -> zipfile.ZipFile:
        # openpyxl reads the content types and package relationships of the
        # archive and copies the VBA project part from it
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
            archive.writestr(CONTENT_TYPES_PART, _VBA_CONTENT_TYPES)
            archive.writestr(ROOT_RELS_PART, _EMPTY_ROOT_RELS)
            archive.writestr(VBA_PART, bytes(payload))
        return zipfile.ZipFile(io.BytesIO(buffer.getvalue()))

    @staticmethod
    def _macro_enabled_manifest(data: bytes) -> bytes:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            manifest = archive.read(CONTENT_TYPES_PART).decode("utf-8")
        return manifest.replace(XLSX, XLSM).encode("utf-8")

    @staticmethod
    def _repack(
        data: bytes, compression: int, replacements: dict[str, bytes]
    ) -> bytes:
        output = io.BytesIO()
        with (
            zipfile.ZipFile(io.BytesIO(data)) as source,
            zipfile.ZipFile(output, "w", compression) as repacked,
        ):
            for info in source.infolist():
                content = replacements.get(info.filename)
                if content is None:
                    content = source.read(info.filename)
                repacked.writestr(info.filename, content)
        return output.getvalue()


def _custom_property(name: str, value: Any) -> Any:
    if isinstance(value, bool):
        return BoolProperty(name=name, value=value)
    if isinstance(value, int):
        return IntProperty(name=name, value=value)
    if isinstance(value, float):
        return FloatProperty(name=name, value=value)
    if isinstance(value, datetime):
        return DateTimeProperty(name=name, value=value)
    return StringProperty(name=name, value=str(value))


_codec = WorkbookCodec()


def decode_workbook(data: bytes, options: DecodeOptions | None = None) -> Workbook:
    """Decode spreadsheet bytes with the shared codec."""
    return _codec.decode(data, options)


def encode_workbook(workbook: Workbook, options: EncodeOptions | None = None) -> bytes:
    """Encode a workbook with the shared codec."""
    return _codec.encode(workbook, options)
