"""
Projection of graph units into flat output rows.
"""

import logging
from typing import Callable, Dict, List, Optional, Union

from ..config import config
from ..errors import InvalidSegmentError
from ..models.tree import FieldMap
from ..models.units import FieldSchema, GraphUnit, OutputUnit, SchemaPath
from .nested import try_get_nested_string
from .units import get_all_graph_units

PostProcess = Callable[[OutputUnit], Optional[OutputUnit]]


def get_units_from_graph(graph: FieldMap,
                         fields_to_export: Optional[Union[FieldSchema, Dict]] = None,
                         post_process: Optional[PostProcess] = None) -> List[OutputUnit]:
    """
    Get the specified node and edge fields from the graph.

    Args:
        graph: Parsed graphml document
        fields_to_export: Fields to export (default from config)
        post_process: Optional callback applied to every row; returning None drops the row

    Returns:
        One row per node and edge
    """
    logging.info("Getting node and edge fields")

    if fields_to_export is None:
        fields_to_export = config.export_fields
    schema = FieldSchema.model_validate(fields_to_export)

    units = extract_fields(get_all_graph_units(graph), schema)

    if post_process is not None:
        logging.debug("Postprocessing graph units")
        units = apply_post_process(units, post_process)

    return units


def apply_post_process(units: List[OutputUnit], post_process: PostProcess) -> List[OutputUnit]:
    processed = []
    for unit in units:
        result = post_process(unit)
        if result is not None:
            processed.append(result)
    return processed


def extract_fields(units: List[GraphUnit], schema: FieldSchema,
                   label_paths: Optional[Dict[str, SchemaPath]] = None) -> List[OutputUnit]:
    """
    Extract the schema fields of every unit.

    A field whose path does not resolve for a unit, or is malformed, is None
    for that unit only; the other fields and units are unaffected.

    Args:
        units: Units collected from the graph
        schema: Output field names and their paths
        label_paths: Label path per unit type (default from config)

    Returns:
        Output rows in the order of ``units``
    """
    label_paths = label_paths or {}
    output = []

    for unit in units:
        fields = {
            name: _extract_value(unit, name, path)
            for name, path in schema.fields_for(unit.type).items()
        }

        label_path = label_paths.get(unit.type) or config.label_path(unit.type)

        row = OutputUnit(
            id=unit.id,
            type=unit.type,
            unit_type=unit.unit_type,
            label=_extract_value(unit, "label", label_path),
            fields=fields,
        )

        if unit.type == "edge":
            row.source = unit.source
            row.target = unit.target

        output.append(row)

    logging.info(f"Extracted fields from {len(output)} units")
    return output


def _extract_value(unit: GraphUnit, name: str, path: SchemaPath) -> Optional[str]:
    try:
        result = try_get_nested_string(unit.visual_block, path)
    except InvalidSegmentError as e:
        logging.warning(f"Invalid path for field {name}, skipping for {unit.id}: {e}")
        return None
    if not result.ok:
        logging.debug(f"Field {name} not available for {unit.id}: {result.error}")
        return None
    return result.value
