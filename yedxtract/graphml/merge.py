"""
Merging of edited rows back into a parsed graphml document.

Values are only ever written with ``set_nested_property`` at schema paths, so
any part of the tree not addressed by an edited row keeps its original
content. The tree is modified in place; callers needing the original must
deep-copy it before merging.
"""

import logging
from typing import Dict, List, Optional, Tuple, Union

from ..config import config
from ..errors import PathError
from ..models.tree import FieldAction, FieldMap
from ..models.units import FieldSchema, FieldValue, GraphUnit, MergeReport, OutputUnit, SchemaPath
from .nested import set_nested_property
from .units import get_all_graph_units


def update_graph(graph: FieldMap, new_units: List[OutputUnit],
                 extracted_fields: Union[FieldSchema, Dict],
                 label_paths: Optional[Dict[str, SchemaPath]] = None) -> MergeReport:
    """
    Update the graph by merging ``new_units`` into it.

    Args:
        graph: Parsed graphml document, modified in place
        new_units: Updated values for nodes and edges
        extracted_fields: Field schema the rows were exported with
        label_paths: Label path per unit type (default from config)

    Returns:
        Summary of the merge
    """
    schema = FieldSchema.model_validate(extracted_fields)
    return merge_units(get_all_graph_units(graph), new_units, schema, label_paths)


def merge_units(units: List[GraphUnit], new_units: List[OutputUnit], schema: FieldSchema,
                label_paths: Optional[Dict[str, SchemaPath]] = None) -> MergeReport:
    """
    Write edited rows into the units they were exported from.

    Rows are matched to units by type and id. Rows without a matching unit and
    fields without a schema entry are skipped with a warning. A field value of
    None leaves the unit unchanged and ``FieldAction.CLEAR`` writes an empty
    string. A label for a unit without a label element is skipped with a
    warning.

    Args:
        units: Units collected from the graph being updated
        new_units: Edited rows
        schema: Field schema the rows were exported with
        label_paths: Label path per unit type (default from config)

    Returns:
        Summary of the merge

    Raises:
        PathError: If a schema field path cannot be written because one of
                   its intermediate segments is missing
    """
    label_paths = label_paths or {}
    index: Dict[Tuple[str, str], GraphUnit] = {(u.type, u.id): u for u in units}
    report = MergeReport()

    def warn(message: str) -> None:
        logging.warning(message)
        report.warnings.append(message)

    for row in new_units:
        unit = index.get((row.type, row.id))
        if unit is None:
            warn(f"Unknown input row (id={row.id})")
            report.skipped += 1
            continue

        # Endpoints live on the unit's own attributes
        for endpoint in ("source", "target"):
            value = getattr(row, endpoint)
            if value is None:
                continue
            if unit.type != "edge":
                warn(f"Ignoring {endpoint} of node {unit.id}")
                continue
            unit.attributes[endpoint] = value
            setattr(unit, endpoint, value)

        if row.label is not None:
            label_path = label_paths.get(unit.type) or config.label_path(unit.type)
            try:
                set_nested_property(unit.visual_block, label_path, _to_text(row.label))
            except PathError as e:
                warn(f"Label not written for {unit.type} {unit.id}, no label element ({e})")

        fields = schema.fields_for(unit.type)
        for field, value in row.fields.items():
            if value is None:
                continue
            path = fields.get(field)
            if path is None:
                warn(f"Field without entry in extractedFields metadata, skipping ({field})")
                continue
            set_nested_property(unit.visual_block, path, _to_text(value))

        report.updated += 1

    logging.info(f"Merged {report.updated} rows, skipped {report.skipped}")
    return report


def _to_text(value: FieldValue) -> str:
    if value is FieldAction.CLEAR:
        return ""
    return value


def check_source_hash(expected_hash: Optional[str], actual_hash: str) -> bool:
    """
    Compare the hash stored at export time with the hash of the current file.

    A mismatch is only reported: the graph may have legitimately changed
    since the export.

    Returns:
        True if the hashes match
    """
    if expected_hash == actual_hash:
        return True
    logging.warning(
        f"Graphml file has changed since the export (expected hash {expected_hash}, got {actual_hash})"
    )
    return False
