"""
Lookup of the <key> declarations of a graphml document.

yEd tags the data element holding a unit's graphics with a key id declared in
the document header, e.g. ``<key for="node" id="d6" yfiles.type="nodegraphics"/>``.
"""

import logging
from typing import Any, List, Optional

from ..config import config
from ..errors import KeyNotFoundError
from ..models.tree import ATTRIBUTES_KEY, FieldMap
from .nested import try_get_nested_list, try_get_nested_string

KEYS_PATH = ["graphml", "key"]


def get_graph_keys(graph: FieldMap) -> List[Any]:
    """
    Get the key declarations of a parsed graphml document.

    Raises:
        KeyNotFoundError: If the document declares no keys
    """
    result = try_get_nested_list(graph, KEYS_PATH)
    if not result.ok:
        raise KeyNotFoundError("Key attributes are missing")
    return result.value


def find_key_id(keys: List[Any], key_attribute: str, key_value: str) -> str:
    """
    Get the id of the first key whose ``key_attribute`` equals ``key_value``.

    Args:
        keys: Key elements from the graph
        key_attribute: Key attribute to check to find the correct key
        key_value: Value of ``key_attribute`` for the correct key

    Returns:
        The value of the ``id`` attribute of the matching key

    Raises:
        KeyNotFoundError: If no key matches or the matching key has no id
    """
    for key in keys:
        value = try_get_nested_string(key, [ATTRIBUTES_KEY, key_attribute])
        if value.ok and value.value == key_value:
            key_id = try_get_nested_string(key, [ATTRIBUTES_KEY, "id"])
            if not key_id.ok:
                break
            return key_id.value

    raise KeyNotFoundError(f"{key_value} key missing")


def find_graphics_key_id(graph: FieldMap, unit_type: str,
                         key_attribute: Optional[str] = None,
                         key_value_template: Optional[str] = None) -> str:
    """
    Resolve the key id tagging the graphics data of a unit type.

    Args:
        graph: Parsed graphml document
        unit_type: 'node' or 'edge'
        key_attribute: Attribute naming the key purpose (default from config)
        key_value_template: Purpose value, formatted with ``kind`` (default from config)

    Returns:
        Key id used in ``<data key="...">`` of the unit type
    """
    key_attribute = key_attribute or config.key_attribute
    key_value = (key_value_template or config.key_value_template).format(kind=unit_type)

    key_id = find_key_id(get_graph_keys(graph), key_attribute, key_value)
    logging.debug(f"Resolved {key_value} key id: {key_id}")
    return key_id
