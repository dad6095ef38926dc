"""
yedxtract: Extract texts from yEd graph editor to Excel and back.

Exports selected node and edge fields of a graphml diagram into a workbook,
and merges edited workbook rows back into the diagram.
"""

__version__ = "0.2.2"
__author__ = "yedxtract Project"

# Import main components
from .errors import YedxtractError
from .models import FieldAction, FieldSchema, GraphUnit, Metadata, OutputUnit, XlsxOptions
from .graphml import (
    parse_graphml_format,
    convert_to_graphml_format,
    get_units_from_graph,
    update_graph,
    check_source_hash,
)
from .excel import create_xlsx, import_xlsx
from .files import read_file

__all__ = [
    "YedxtractError",
    "FieldAction",
    "FieldSchema",
    "GraphUnit",
    "Metadata",
    "OutputUnit",
    "XlsxOptions",
    "parse_graphml_format",
    "convert_to_graphml_format",
    "get_units_from_graph",
    "update_graph",
    "check_source_hash",
    "create_xlsx",
    "import_xlsx",
    "read_file",
]
