"""Data models for yedxtract."""

from .tree import (
    ATTRIBUTES_KEY,
    TEXT_KEY,
    SINGLETON,
    SINGLETON_TOKEN,
    FieldAction,
    FieldMap,
    Path,
    Segment,
    TreeValue,
)
from .units import (
    Endpoints,
    FieldSchema,
    GraphUnit,
    MergeReport,
    Metadata,
    OutputUnit,
    XlsxOptions,
)

__all__ = [
    "ATTRIBUTES_KEY",
    "TEXT_KEY",
    "SINGLETON",
    "SINGLETON_TOKEN",
    "FieldAction",
    "FieldMap",
    "Path",
    "Segment",
    "TreeValue",
    "Endpoints",
    "FieldSchema",
    "GraphUnit",
    "MergeReport",
    "Metadata",
    "OutputUnit",
    "XlsxOptions",
]
