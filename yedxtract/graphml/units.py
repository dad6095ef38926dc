"""
Collection of nodes and edges from a parsed graphml document.

Each collected GraphUnit references the unit's own attributes and its
graphics data inside the source tree, so the merge step can write through
them.
"""

import logging
from typing import Any, Iterator, List, Optional, Tuple

from ..config import config
from ..errors import DataBlockAmbiguityError
from ..models.tree import ATTRIBUTES_KEY, TEXT_KEY, FieldMap
from ..models.units import GraphUnit, UnitType
from .keys import find_graphics_key_id
from .nested import get_nested_field_map, get_nested_list, get_nested_string, try_get_nested_string

GRAPHS_PATH = ["graphml", "graph"]
UNIT_TYPES: Tuple[UnitType, ...] = ("node", "edge")


def get_all_graph_units(graph: FieldMap, include_nested: Optional[bool] = None) -> List[GraphUnit]:
    """
    Get all nodes followed by all edges of the graph.

    Args:
        graph: Parsed graphml document
        include_nested: Whether to collect units of nested graphs (default from config)

    Returns:
        Collected nodes and edges in document order
    """
    units: List[GraphUnit] = []
    for unit_type in UNIT_TYPES:
        units.extend(get_graph_units(graph, unit_type, include_nested))
    return units


def get_graph_units(graph: FieldMap, unit_type: UnitType,
                    include_nested: Optional[bool] = None) -> List[GraphUnit]:
    """
    Get all units of a type. Only the data element tagged with the type's
    graphics key is kept for each unit.

    Args:
        graph: Parsed graphml document
        unit_type: Type of the units to get ('node' or 'edge')
        include_nested: Whether to collect units of nested graphs (default from config)

    Returns:
        All units of the type in document order

    Raises:
        KeyNotFoundError: If the graphics key of the type is not declared
        TraversalError: If the graph element, a unit id or an edge endpoint is missing
        DataBlockAmbiguityError: If a unit has no single graphics data element
    """
    if include_nested is None:
        include_nested = config.include_nested_graphs

    # Key value used to identify the unit's graphics data in <data key="">
    data_key = find_graphics_key_id(graph, unit_type)
    graphs = get_nested_list(graph, GRAPHS_PATH)

    units = [
        _collect_unit(element, unit_type, data_key)
        for element in _iter_unit_elements(graphs, unit_type, include_nested)
    ]
    logging.info(f"Collected {len(units)} {unit_type}s")
    return units


def _children(element: Any, tag: str) -> List[Any]:
    if isinstance(element, dict):
        children = element.get(tag, [])
        if isinstance(children, list):
            return children
    return []


def _iter_unit_elements(graphs: List[Any], unit_type: UnitType, include_nested: bool) -> Iterator[Any]:
    for graph in graphs:
        for node in _children(graph, "node"):
            if unit_type == "node":
                yield node
            if include_nested:
                # Group nodes hold their members in a nested <graph>
                yield from _iter_unit_elements(_children(node, "graph"), unit_type, include_nested)
        if unit_type == "edge":
            yield from _children(graph, "edge")


def _collect_unit(element: Any, unit_type: UnitType, data_key: str) -> GraphUnit:
    attributes = get_nested_field_map(element, [ATTRIBUTES_KEY])

    # Unit id, e.g. n10 or e10
    unit_id = get_nested_string(attributes, ["id"])

    data_blocks = [
        data for data in _children(element, "data")
        if try_get_nested_string(data, [ATTRIBUTES_KEY, "key"]).value == data_key
    ]
    if len(data_blocks) != 1:
        raise DataBlockAmbiguityError(
            f"Single data field with {data_key} key not found for {unit_type} {unit_id} "
            f"(found {len(data_blocks)})"
        )

    data_block = data_blocks[0]
    graphics_type, visual_block = _unwrap_graphics(data_block, unit_id)

    unit = GraphUnit(
        id=unit_id,
        type=unit_type,
        data_block=data_block,
        visual_block=visual_block,
        attributes=attributes,
        unit_type=graphics_type,
    )

    if unit_type == "edge":
        unit.source = get_nested_string(attributes, ["source"])
        unit.target = get_nested_string(attributes, ["target"])

    return unit


def _unwrap_graphics(data_block: FieldMap, unit_id: str) -> Tuple[str, FieldMap]:
    """
    Get the single graphics element (e.g. y:ShapeNode) of a data block.
    """
    child_types = [k for k in data_block if k not in (ATTRIBUTES_KEY, TEXT_KEY)]
    if len(child_types) != 1:
        raise DataBlockAmbiguityError(
            f"Expected one graphics element type in {unit_id}, found {len(child_types)}"
        )

    graphics_type = child_types[0]
    instances = data_block[graphics_type]
    if not isinstance(instances, list) or len(instances) != 1 or not isinstance(instances[0], dict):
        raise DataBlockAmbiguityError(
            f"Expected a single {graphics_type} element in {unit_id}"
        )

    return graphics_type, instances[0]
