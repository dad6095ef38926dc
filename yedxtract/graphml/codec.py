"""
Conversion between graphml text and the generic tree.

Elements become field maps: attributes (including namespace declarations)
under ``$``, child elements grouped by tag into lists, and non-blank text
under ``_``. An element with neither attributes nor children is just its
text. Tags and attribute names keep the prefixes used in the document
(``y:ShapeNode``), so paths can be written the way the file reads.
"""

import io
import logging
import xml.etree.ElementTree as ET
from typing import Dict, List, Tuple

from ..errors import GraphmlParseError
from ..models.tree import ATTRIBUTES_KEY, TEXT_KEY, FieldMap, TreeValue

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="no"?>'


def parse_graphml_format(graphml_file: str) -> FieldMap:
    """
    Parse yEd editor's graphml (XML) into a tree.

    Args:
        graphml_file: yEd editor's graphml file as a string

    Returns:
        Parsed graphml file as a tree rooted at ``{"graphml": ...}``

    Raises:
        GraphmlParseError: If the text is not well-formed XML
    """
    logging.debug("Parsing graphml XML string to tree")

    prefixes: Dict[str, str] = {XML_NAMESPACE: "xml"}
    declarations: Dict[ET.Element, List[Tuple[str, str]]] = {}
    pending: List[Tuple[str, str]] = []
    root = None

    try:
        for event, item in ET.iterparse(io.StringIO(graphml_file), events=("start-ns", "start")):
            if event == "start-ns":
                prefix, uri = item
                prefixes.setdefault(uri, prefix)
                pending.append((prefix, uri))
                continue
            if pending:
                declarations[item] = pending
                pending = []
            if root is None:
                root = item
    except ET.ParseError as e:
        raise GraphmlParseError(f"Invalid graphml file: {e}") from e

    if root is None:
        raise GraphmlParseError("Invalid graphml file: no root element")

    def qualify(name: str) -> str:
        if not name.startswith("{"):
            return name
        uri, local = name[1:].split("}", 1)
        prefix = prefixes.get(uri)
        if prefix is None:
            return name
        return f"{prefix}:{local}" if prefix else local

    def convert(element: ET.Element) -> TreeValue:
        attributes: Dict[str, str] = {}
        for prefix, uri in declarations.get(element, []):
            attributes[f"xmlns:{prefix}" if prefix else "xmlns"] = uri
        for name, value in element.attrib.items():
            attributes[qualify(name)] = value

        node: FieldMap = {}
        if attributes:
            node[ATTRIBUTES_KEY] = attributes

        text = element.text or ""
        for child in element:
            node.setdefault(qualify(child.tag), []).append(convert(child))
            text += child.tail or ""

        if len(node) == 0:
            return text if text.strip() else ""
        if text.strip():
            node[TEXT_KEY] = text
        return node

    return {qualify(root.tag): convert(root)}


def convert_to_graphml_format(graph: FieldMap) -> str:
    """
    Convert a tree back to yEd editor's graphml (XML).

    Args:
        graph: Tree with a single root element

    Returns:
        Graphml XML string with an XML declaration
    """
    logging.debug("Converting tree to graphml XML string")

    if not isinstance(graph, dict) or len(graph) != 1:
        raise GraphmlParseError("Graph must have exactly one root element")

    (tag, value), = graph.items()
    root = _to_element(tag, value)
    return XML_DECLARATION + ET.tostring(root, encoding="unicode")


def _to_element(tag: str, value: TreeValue) -> ET.Element:
    element = ET.Element(tag)

    if isinstance(value, str):
        element.text = value
        return element

    for key, child in value.items():
        if key == ATTRIBUTES_KEY:
            for name, attribute in child.items():
                element.set(name, attribute)
        elif key == TEXT_KEY:
            element.text = child
        else:
            for item in child if isinstance(child, list) else [child]:
                element.append(_to_element(key, item))

    return element
