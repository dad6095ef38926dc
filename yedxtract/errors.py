"""
Error taxonomy for yedxtract.

Path errors describe a single failed lookup inside the generic tree. Graph
structure errors mean the document itself is malformed and no partial result
can be trusted.
"""


class YedxtractError(Exception):
    """Base class for all yedxtract errors."""


class PathError(YedxtractError):
    """A path could not be resolved against a tree value."""


class TraversalError(PathError):
    """A path segment does not exist in the current value."""


class SingletonViolationError(PathError):
    """A list expected to hold exactly one element does not."""


class TypeMismatchError(PathError):
    """The resolved value does not have the expected shape."""


class InvalidSegmentError(PathError):
    """A path segment cannot be applied to the current value."""


class GraphStructureError(YedxtractError):
    """The graph document violates a structural assumption."""


class DataBlockAmbiguityError(GraphStructureError):
    """An entity does not have exactly one visual data block."""


class KeyNotFoundError(GraphStructureError):
    """The document does not declare a type key that is needed."""


class GraphmlParseError(YedxtractError):
    """The graphml text could not be parsed."""


class WorkbookError(YedxtractError):
    """The Excel workbook is missing data or has invalid content."""
