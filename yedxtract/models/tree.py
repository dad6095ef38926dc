"""
Generic tree value model.

A parsed graphml document is a tree made of three kinds of values: string
leaves, ordered lists and field maps. Attributes of an element are kept in
the reserved ``$`` key of its field map and element text in ``_``.
"""

from enum import Enum
from typing import Any, Dict, List, Union


ATTRIBUTES_KEY = "$"
TEXT_KEY = "_"

# Recursive in spirit: Leaf | List[TreeValue] | Dict[str, TreeValue]
Leaf = str
TreeList = List[Any]
FieldMap = Dict[str, Any]
TreeValue = Union[Leaf, TreeList, FieldMap]


class _SingletonSelector:
    """Path segment selecting the only element of a one-element list."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SINGLETON"

    def __reduce__(self):
        return (_SingletonSelector, ())


SINGLETON = _SingletonSelector()

# Textual form of the singleton selector in schemas and metadata sheets
SINGLETON_TOKEN = "[0]"

Segment = Union[str, int, _SingletonSelector]
Path = List[Segment]


class FieldAction(Enum):
    """Out-of-band edit instructions for a field value."""

    CLEAR = "clear"
