"""
Excel workbook export and import for yedxtract.

The workbook has a content sheet with one row per node and edge, and a
metadata sheet with the provenance of the export and the field schema needed
to merge the rows back.
"""

import io
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple
from zipfile import BadZipFile

from openpyxl import Workbook, load_workbook
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException
from pydantic import ValidationError

from .. import __version__
from ..config import config
from ..errors import WorkbookError
from ..models.tree import FieldAction
from ..models.units import FieldSchema, FieldValue, Metadata, OutputUnit, XlsxOptions

ExcelRow = Dict[str, Any]
PostProcess = Callable[[OutputUnit], Optional[OutputUnit]]

METADATA_COLUMN_WIDTHS = (15, 45)
# Excel shows column widths 0.7 narrower than stored
WIDTH_PADDING = 0.7


def create_xlsx(units: List[OutputUnit], metadata: Metadata,
                options: Optional[XlsxOptions] = None) -> bytes:
    """
    Create an Excel workbook from output rows.

    Args:
        units: Rows to write
        metadata: Provenance of the rows and the field schema used
        options: Columns to include or exclude

    Returns:
        The workbook as xlsx bytes
    """
    options = options or XlsxOptions()
    logging.info(f"Creating Excel file ({len(units)} rows)")

    rows = [_unit_to_row(unit, options) for unit in units]

    # Default columns and their widths come first, in configured order
    default_columns = config.column_widths
    columns_present = _get_all_column_names(rows)
    columns = [(c, w) for c, w in default_columns.items() if c in columns_present]
    columns += [(c, config.default_column_width) for c in columns_present if c not in default_columns]
    header = [c for c, _ in columns]

    workbook = Workbook()
    ws = workbook.active
    ws.title = config.content_sheet

    ws.append(header)
    for row_idx, row in enumerate(rows, start=2):
        for col_idx, column in enumerate(header, start=1):
            _write_cell(ws, row_idx, col_idx, row.get(column))

    for col_idx, (_, width) in enumerate(columns, start=1):
        ws.column_dimensions[get_column_letter(col_idx)].width = width + WIDTH_PADDING

    ws_metadata = workbook.create_sheet(config.metadata_sheet)
    for key, value in (
        ("yedxtractVersion", metadata.yedxtract_version or __version__),
        ("yedFilename", metadata.yed_filename),
        ("yedHash", metadata.yed_hash),
        ("extractedFields", metadata.extracted_fields.to_json()),
    ):
        ws_metadata.append([key, value])

    for col_idx, width in enumerate(METADATA_COLUMN_WIDTHS, start=1):
        ws_metadata.column_dimensions[get_column_letter(col_idx)].width = width + WIDTH_PADDING

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def import_xlsx(xlsx: bytes, options: Optional[XlsxOptions] = None,
                post_process: Optional[PostProcess] = None) -> Tuple[List[OutputUnit], Metadata]:
    """
    Import an Excel workbook to update yEd values.

    Empty cells are skipped. To set an empty string to a node or edge field,
    set the corresponding cell to the clear marker (``#NULL!`` by default).

    Args:
        xlsx: Excel file contents
        options: Columns to include or exclude
        post_process: Optional callback applied to every row; returning None drops the row

    Returns:
        Rows for nodes and edges, and the workbook metadata

    Raises:
        WorkbookError: If the workbook cannot be read or has invalid content
    """
    options = options or XlsxOptions()
    logging.info("Importing Excel file")

    try:
        workbook = load_workbook(io.BytesIO(xlsx), data_only=True)
    except (BadZipFile, InvalidFileException, KeyError, OSError) as e:
        raise WorkbookError(f"Could not read Excel file: {e}") from e

    metadata = _read_metadata(workbook)

    if config.content_sheet not in workbook.sheetnames:
        raise WorkbookError(f'"{config.content_sheet}"-sheet not present')

    rows = _read_rows(workbook[config.content_sheet])
    included_columns = set(options.filter(_get_all_column_names(rows)))

    units = []
    for row in rows:
        filtered = {k: v for k, v in row.items() if k in included_columns}
        units.append(_validate_row(filtered, metadata.extracted_fields))

    if post_process is not None:
        logging.debug("Postprocessing excel units")
        units = [u for u in (post_process(unit) for unit in units) if u is not None]

    return units, metadata


def _unit_to_row(unit: OutputUnit, options: XlsxOptions) -> ExcelRow:
    all_fields: ExcelRow = dict(unit.fields)
    all_fields.update({
        "id": unit.id,
        "type": unit.type,
        "unitType": unit.unit_type,
    })
    # A schema field named "label" fills the label column
    if "label" not in unit.fields:
        all_fields["label"] = unit.label
    if unit.type == "edge":
        all_fields["source"] = unit.source
        all_fields["target"] = unit.target

    return {prop: all_fields[prop] for prop in options.filter(list(all_fields))}


def _write_cell(ws, row: int, column: int, value: Any) -> None:
    if value is FieldAction.CLEAR:
        value = config.clear_marker
    cell = ws.cell(row=row, column=column, value=value)
    if isinstance(value, str) and value.startswith("="):
        # Label text is never a formula
        cell.data_type = "s"


def _get_all_column_names(rows: List[ExcelRow]) -> List[str]:
    columns: Dict[str, None] = {}
    for row in rows:
        columns.update(dict.fromkeys(row))
    return list(columns)


def _read_metadata(workbook) -> Metadata:
    sheet_name = config.metadata_sheet
    if sheet_name not in workbook.sheetnames:
        logging.debug(f'"{sheet_name}"-sheet not present')
        raise WorkbookError(f'"{sheet_name}"-sheet not present')

    values = {
        row[0]: row[1] if len(row) > 1 else None
        for row in workbook[sheet_name].iter_rows(values_only=True)
        if row and row[0] is not None
    }

    try:
        values["extractedFields"] = json.loads(values.get("extractedFields") or "{}")
        return Metadata.model_validate(values)
    except (TypeError, ValueError, ValidationError) as e:
        raise WorkbookError(f"Invalid metadata sheet: {e}") from e


def _read_rows(ws) -> List[ExcelRow]:
    """Read sheet rows as dictionaries keyed by header, leaving out empty cells."""
    sheet_rows = ws.iter_rows(values_only=True)
    header = next(sheet_rows, None)
    if header is None:
        return []

    rows = []
    for values in sheet_rows:
        row = {
            str(name): value
            for name, value in zip(header, values)
            if name is not None and value is not None and value != ""
        }
        if row:
            rows.append(row)
    return rows


def _validate_row(row: ExcelRow, schema: FieldSchema) -> OutputUnit:
    row = dict(row)
    unit_id = row.pop("id", None)
    row_type = row.pop("type", None)
    source = row.pop("source", None)
    target = row.pop("target", None)
    unit_type = row.pop("unitType", None)
    label = row.pop("label", None)

    if isinstance(unit_id, (int, float)) and not isinstance(unit_id, bool):
        unit_id = str(unit_id)
    if not isinstance(unit_id, str):
        raise WorkbookError("Mandatory id column is missing")

    if row_type in ("node", "edge"):
        deduced_type = row_type
    elif unit_id[:1] == "n":
        deduced_type = "node"
    elif unit_id[:1] == "e":
        deduced_type = "edge"
    else:
        raise WorkbookError("Type column is missing and not possible to deduce type from id")

    for name, value in (("source", source), ("target", target)):
        if value is not None and not isinstance(value, str):
            raise WorkbookError(f"Invalid {name} column type in row {unit_id}, must be text")

    if label is not None and "label" in schema.fields_for(deduced_type):
        # The label column holds the schema field of the same name
        row["label"] = label
        label = None

    return OutputUnit(
        id=unit_id,
        type=deduced_type,
        source=source,
        target=target,
        unit_type=unit_type if isinstance(unit_type, str) else None,
        label=_cell_value("label", label),
        fields={field: _cell_value(field, value) for field, value in row.items()},
    )


def _cell_value(field: str, value: Any) -> FieldValue:
    if value is None:
        return None
    if value == config.clear_marker:
        return FieldAction.CLEAR
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise WorkbookError(f"Invalid type in {field} column")
