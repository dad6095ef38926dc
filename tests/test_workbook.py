import io
from pathlib import Path

import pytest
from openpyxl import Workbook, load_workbook

from yedxtract import __version__
from yedxtract.errors import WorkbookError
from yedxtract.excel import create_xlsx, import_xlsx
from yedxtract.graphml import get_units_from_graph, parse_graphml_format, update_graph
from yedxtract.models import FieldAction, FieldSchema, Metadata, OutputUnit, XlsxOptions

DATA_DIR = Path(__file__).parent / "data"

SCHEMA = FieldSchema(
    node={"fill": ["y:Fill", "[0]", "$", "color"], "shape": ["y:Shape", "[0]", "$", "type"]},
    edge={"lineColor": ["y:LineStyle", "[0]", "$", "color"]},
)


@pytest.fixture
def units():
    graph = parse_graphml_format((DATA_DIR / "simple.graphml").read_text(encoding="utf-8"))
    return get_units_from_graph(graph, SCHEMA)


@pytest.fixture
def metadata():
    return Metadata(yed_filename="simple.graphml", yed_hash="0123abcd", extracted_fields=SCHEMA)


def edit_cells(xlsx, edits):
    """Set content sheet cells by (row id, column name) and return the new workbook bytes."""
    workbook = load_workbook(io.BytesIO(xlsx))
    ws = workbook["Content"]
    header = [cell.value for cell in ws[1]]
    ids = {ws.cell(row=r, column=header.index("id") + 1).value: r for r in range(2, ws.max_row + 1)}
    for (unit_id, column), value in edits.items():
        ws.cell(row=ids[unit_id], column=header.index(column) + 1).value = value
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def test_create_xlsx_layout(units, metadata):
    workbook = load_workbook(io.BytesIO(create_xlsx(units, metadata)))

    assert workbook.sheetnames == ["Content", "Metadata"]
    ws = workbook["Content"]
    header = [cell.value for cell in ws[1]]
    assert header == ["type", "id", "source", "target", "unitType", "label", "fill", "shape", "lineColor"]
    assert ws.max_row == len(units) + 1
    assert [c.value for c in ws[2]][:6] == ["node", "n0", None, None, "y:ShapeNode", "Start"]
    assert ws.column_dimensions["F"].width == pytest.approx(30.7)
    assert ws.column_dimensions["G"].width == pytest.approx(10.7)

    meta = {row[0]: row[1] for row in workbook["Metadata"].iter_rows(values_only=True)}
    assert meta["yedxtractVersion"] == __version__
    assert meta["yedFilename"] == "simple.graphml"
    assert meta["yedHash"] == "0123abcd"
    assert FieldSchema.from_json(meta["extractedFields"]) == SCHEMA


def test_create_xlsx_excludes_columns(units, metadata):
    xlsx = create_xlsx(units, metadata, XlsxOptions(exclude=["unitType", "shape"]))
    header = [cell.value for cell in load_workbook(io.BytesIO(xlsx))["Content"][1]]
    assert "unitType" not in header
    assert "shape" not in header
    assert "fill" in header


def test_import_round_trip(units, metadata):
    rows, imported_metadata = import_xlsx(create_xlsx(units, metadata))

    assert imported_metadata.yed_hash == "0123abcd"
    assert imported_metadata.extracted_fields == SCHEMA
    assert [(r.id, r.type) for r in rows] == [(u.id, u.type) for u in units]

    by_id = {r.id: r for r in rows}
    assert by_id["n0"].label == "Start"
    assert by_id["n0"].unit_type == "y:ShapeNode"
    assert by_id["n0"].fields == {"fill": "#FFCC00", "shape": "rectangle"}
    # Empty cells are left out so they do not overwrite anything
    assert by_id["n1"].fields == {"fill": "#E8EEF7"}
    assert by_id["n2"].label is None
    assert (by_id["e1"].source, by_id["e1"].target) == ("n1", "n2::n0")


def test_import_clear_marker_and_numbers(units, metadata):
    xlsx = edit_cells(create_xlsx(units, metadata), {
        ("n0", "label"): "#NULL!",
        ("n1", "label"): 42,
        ("n0", "fill"): None,
    })
    rows = {r.id: r for r in import_xlsx(xlsx)[0]}

    assert rows["n0"].label is FieldAction.CLEAR
    assert rows["n1"].label == "42"
    assert "fill" not in rows["n0"].fields


def test_clear_action_is_written_as_marker(metadata):
    unit = OutputUnit(id="n0", type="node", label=FieldAction.CLEAR)
    rows, _ = import_xlsx(create_xlsx([unit], metadata))
    assert rows[0].label is FieldAction.CLEAR


def test_formula_like_text_stays_text(metadata):
    unit = OutputUnit(id="n0", type="node", label="=A1+1")
    rows, _ = import_xlsx(create_xlsx([unit], metadata))
    assert rows[0].label == "=A1+1"


def test_import_include_deduces_type_from_id(units, metadata):
    rows, _ = import_xlsx(create_xlsx(units, metadata), XlsxOptions(include=["id", "label"]))

    by_id = {r.id: r for r in rows}
    assert by_id["n0"].type == "node"
    assert by_id["e0"].type == "edge"
    assert by_id["e0"].source is None
    assert all(r.fields == {} for r in rows)


def test_import_post_process(units, metadata):
    rows, _ = import_xlsx(
        create_xlsx(units, metadata),
        post_process=lambda row: row if row.type == "edge" else None,
    )
    assert [r.id for r in rows] == ["e0", "e1"]


def test_import_type_cannot_be_deduced(metadata):
    unit = OutputUnit(id="x1", type="node")
    xlsx = create_xlsx([unit], metadata)
    with pytest.raises(WorkbookError):
        import_xlsx(xlsx, XlsxOptions(exclude=["type"]))


def test_import_missing_metadata_sheet():
    workbook = Workbook()
    workbook.active.title = "Content"
    buffer = io.BytesIO()
    workbook.save(buffer)

    with pytest.raises(WorkbookError, match="Metadata"):
        import_xlsx(buffer.getvalue())


def test_import_invalid_metadata(units, metadata):
    workbook = load_workbook(io.BytesIO(create_xlsx(units, metadata)))
    workbook["Metadata"]["B4"] = "{not json"
    buffer = io.BytesIO()
    workbook.save(buffer)

    with pytest.raises(WorkbookError, match="Invalid metadata"):
        import_xlsx(buffer.getvalue())


def test_import_not_a_workbook():
    with pytest.raises(WorkbookError):
        import_xlsx(b"not an xlsx file")


def test_schema_label_field_uses_label_column():
    schema = FieldSchema(
        node={"color": ["y:Fill", "[0]", "$", "color"]},
        common={"label": ["y:Label", "[0]", "_"]},
    )
    graph = parse_graphml_format((DATA_DIR / "scenario.graphml").read_text(encoding="utf-8"))
    metadata = Metadata(yed_filename="scenario.graphml", yed_hash="0123abcd", extracted_fields=schema)

    xlsx = create_xlsx(get_units_from_graph(graph, schema), metadata)
    ws = load_workbook(io.BytesIO(xlsx))["Content"]
    header = [cell.value for cell in ws[1]]
    assert header.count("label") == 1
    assert [row[header.index("label")] for row in ws.iter_rows(min_row=2, values_only=True)] == \
        ["First", "Second", "Link"]

    rows, imported_metadata = import_xlsx(edit_cells(xlsx, {("n1", "label"): "Renamed"}))
    by_id = {r.id: r for r in rows}
    assert by_id["n1"].label is None
    assert by_id["n1"].fields == {"color": "#FF0000", "label": "Renamed"}
    assert by_id["e1"].fields == {"label": "Link"}

    report = update_graph(graph, rows, imported_metadata.extracted_fields)
    assert report.warnings == []

    merged = {r.id: r for r in get_units_from_graph(graph, schema)}
    assert merged["n1"].fields["label"] == "Renamed"
    assert merged["n2"].fields["label"] == "Second"
    assert merged["e1"].fields["label"] == "Link"


def test_import_rejects_schema_with_fixed_column_name(units, metadata):
    workbook = load_workbook(io.BytesIO(create_xlsx(units, metadata)))
    workbook["Metadata"]["B4"] = '{"node": {"id": ["y:Fill", "[0]", "$", "color"]}}'
    buffer = io.BytesIO()
    workbook.save(buffer)

    with pytest.raises(WorkbookError, match="Invalid metadata"):
        import_xlsx(buffer.getvalue())
