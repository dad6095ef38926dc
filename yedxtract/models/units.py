"""
Graph unit and tabular record models for yedxtract.

This module defines the structures that flow between the graphml document,
the extraction/merge engine and the Excel workbook.
"""

import json
from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .tree import FieldAction, FieldMap

UnitType = Literal["node", "edge"]
SchemaPath = List[Union[int, str]]
FieldValue = Union[str, None, FieldAction]

# Fixed workbook columns a schema field cannot be named after. A schema field
# named "label" is allowed and takes the place of the configured label path.
RESERVED_FIELD_NAMES = ("id", "type", "source", "target", "unitType")


class Endpoints(BaseModel):
    """
    Source and target node identifiers of an edge.
    """

    source: Optional[str] = Field(
        None,
        description="Identifier of the node the edge starts from"
    )

    target: Optional[str] = Field(
        None,
        description="Identifier of the node the edge ends at"
    )


@dataclass
class GraphUnit:
    """
    A node or an edge collected from a parsed graphml tree.

    The dictionaries are references into the source tree, not copies, so
    writes through them land in the document that is later serialized.
    """
    id: str
    type: UnitType
    data_block: FieldMap
    visual_block: FieldMap
    attributes: FieldMap
    unit_type: str
    source: Optional[str] = None
    target: Optional[str] = None

    @property
    def endpoints(self) -> Optional[Endpoints]:
        if self.type != "edge":
            return None
        return Endpoints(source=self.source, target=self.target)


class FieldSchema(BaseModel):
    """
    Output field names mapped to paths inside a unit's visual block.

    Paths use ``"[0]"`` to select the only element of a singleton list.
    """

    node: Dict[str, SchemaPath] = Field(
        default_factory=dict,
        description="Fields exported for nodes only"
    )

    edge: Dict[str, SchemaPath] = Field(
        default_factory=dict,
        description="Fields exported for edges only"
    )

    common: Dict[str, SchemaPath] = Field(
        default_factory=dict,
        description="Fields exported for both nodes and edges"
    )

    @field_validator("node", "edge", "common")
    @classmethod
    def check_field_names(cls, fields: Dict[str, SchemaPath]) -> Dict[str, SchemaPath]:
        reserved = sorted(set(fields) & set(RESERVED_FIELD_NAMES))
        if reserved:
            raise ValueError(f"Field names clash with fixed columns: {', '.join(reserved)}")
        return fields

    def fields_for(self, unit_type: UnitType) -> Dict[str, SchemaPath]:
        """
        Get the effective fields of a unit type.

        Kind-specific entries win over common entries with the same name.
        """
        fields = dict(self.common)
        fields.update(getattr(self, unit_type))
        return fields

    def to_json(self) -> str:
        return json.dumps(self.model_dump(), ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> "FieldSchema":
        return cls.model_validate(json.loads(text))


class OutputUnit(BaseModel):
    """
    One flat row of the tabular representation.

    Field values of ``None`` mean that the path did not resolve on export and
    "leave unchanged" on import. ``FieldAction.CLEAR`` sets the value to an
    empty string.
    """

    id: str = Field(..., description="Identifier of the node or edge")

    type: UnitType = Field(..., description="Either 'node' or 'edge'")

    source: Optional[str] = Field(
        None,
        description="Source node id, edges only"
    )

    target: Optional[str] = Field(
        None,
        description="Target node id, edges only"
    )

    unit_type: Optional[str] = Field(
        None,
        description="Graphics element of the unit (e.g. y:ShapeNode)"
    )

    label: FieldValue = Field(
        None,
        description="Text of the unit's label"
    )

    fields: Dict[str, FieldValue] = Field(
        default_factory=dict,
        description="User defined fields by output name"
    )

    @property
    def endpoints(self) -> Optional[Endpoints]:
        if self.source is None and self.target is None:
            return None
        return Endpoints(source=self.source, target=self.target)


class Metadata(BaseModel):
    """
    Provenance information stored next to the exported rows.
    """

    model_config = ConfigDict(populate_by_name=True)

    yedxtract_version: Optional[str] = Field(
        None,
        alias="yedxtractVersion",
        description="Version of yedxtract that wrote the workbook"
    )

    yed_filename: str = Field(
        ...,
        alias="yedFilename",
        description="Name of the graphml file the rows were exported from"
    )

    yed_hash: str = Field(
        ...,
        alias="yedHash",
        description="Content hash of the exported graphml file"
    )

    extracted_fields: FieldSchema = Field(
        default_factory=FieldSchema,
        alias="extractedFields",
        description="Field schema used for the export"
    )


class XlsxOptions(BaseModel):
    """
    Column filter used when writing or reading a workbook.

    ``include`` takes precedence over ``exclude``.
    """

    include: Optional[List[str]] = None
    exclude: Optional[List[str]] = None

    def filter(self, columns: List[str]) -> List[str]:
        if self.include is not None:
            return [c for c in columns if c in self.include]
        if self.exclude is not None:
            return [c for c in columns if c not in self.exclude]
        return list(columns)


class MergeReport(BaseModel):
    """
    Outcome of merging edited rows back into a graph.
    """

    updated: int = Field(0, description="Rows merged into a matching unit")
    skipped: int = Field(0, description="Rows without a matching unit")
    warnings: List[str] = Field(
        default_factory=list,
        description="Non-fatal problems found while merging"
    )
