"""Graphml parsing, unit collection, field extraction and merging."""

from .codec import parse_graphml_format, convert_to_graphml_format
from .extract import get_units_from_graph, extract_fields
from .keys import find_key_id, find_graphics_key_id
from .merge import update_graph, merge_units, check_source_hash
from .nested import (
    PathResult,
    get_nested_property,
    get_nested_string,
    get_nested_list,
    set_nested_property,
    resolve,
)
from .units import get_graph_units, get_all_graph_units

__all__ = [
    "parse_graphml_format",
    "convert_to_graphml_format",
    "get_units_from_graph",
    "extract_fields",
    "find_key_id",
    "find_graphics_key_id",
    "update_graph",
    "merge_units",
    "check_source_hash",
    "PathResult",
    "get_nested_property",
    "get_nested_string",
    "get_nested_list",
    "set_nested_property",
    "resolve",
    "get_graph_units",
    "get_all_graph_units",
]
