"""
Path-addressed access to parsed graphml trees.

A path is a short list of segments applied left to right: a string selects a
key of a field map, an integer indexes a list and ``SINGLETON`` (written
``"[0]"`` in schemas) descends into a list that must hold exactly one element.

Lookups come in two flavours. ``resolve`` and the ``try_get_*`` functions
return a ``PathResult`` so that callers treating a path as optional can
degrade without catching exceptions, while ``get_*`` raise the path error
for mandatory lookups.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from ..errors import (
    InvalidSegmentError,
    PathError,
    SingletonViolationError,
    TraversalError,
    TypeMismatchError,
)
from ..models.tree import SINGLETON, SINGLETON_TOKEN, FieldMap, Path, TreeValue


@dataclass
class PathResult:
    """Outcome of resolving a path: either a value or the error that stopped it."""
    value: Any = None
    error: Optional[PathError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.value


def parse_path(path: Iterable[Any]) -> Path:
    """
    Convert a schema path into path segments.

    Args:
        path: Sequence of keys, indices and ``"[0]"`` singleton tokens

    Returns:
        List of segments with singleton tokens replaced by ``SINGLETON``

    Raises:
        InvalidSegmentError: If a segment is of an unsupported type
    """
    if isinstance(path, str):
        raise InvalidSegmentError(f"Path must be a sequence of segments, not a string: {path!r}")

    segments: Path = []
    for segment in path:
        if segment is SINGLETON or segment == SINGLETON_TOKEN:
            segments.append(SINGLETON)
        elif isinstance(segment, bool) or not isinstance(segment, (str, int)):
            raise InvalidSegmentError(f"Invalid path segment {segment!r}")
        else:
            segments.append(segment)
    return segments


def format_path(path: Iterable[Any]) -> str:
    """Render a path for log and error messages."""
    return "/".join(SINGLETON_TOKEN if s is SINGLETON else str(s) for s in path)


def _is_index(segment: Any) -> bool:
    return isinstance(segment, int) and not isinstance(segment, bool)


def _step(value: TreeValue, segment: Any, position: str) -> TreeValue:
    if isinstance(value, str):
        raise TraversalError(f"String encountered before end of path at '{position}'")

    if isinstance(value, list):
        if segment is SINGLETON:
            if len(value) != 1:
                raise SingletonViolationError(
                    f"Expected a singleton list at '{position}', found {len(value)} elements"
                )
            return value[0]
        if _is_index(segment):
            if not 0 <= segment < len(value):
                raise TraversalError(f"Index {segment} out of range at '{position}'")
            return value[segment]
    elif isinstance(value, dict):
        if isinstance(segment, str):
            if segment not in value:
                raise TraversalError(f"Key '{segment}' not found at '{position}'")
            return value[segment]
    else:
        raise TypeMismatchError(f"Unexpected {type(value).__name__} value at '{position}'")

    raise InvalidSegmentError(
        f"Segment {segment!r} cannot be applied to a {type(value).__name__} at '{position}'"
    )


def resolve(data: TreeValue, path: Iterable[Any]) -> PathResult:
    """
    Resolve a path without raising for missing values.

    Traversal, singleton and type errors are returned in the result.
    ``InvalidSegmentError`` is still raised since it means the path is wrong,
    not that the tree lacks a value.
    """
    segments = parse_path(path)
    value = data
    for i, segment in enumerate(segments):
        try:
            value = _step(value, segment, format_path(segments[:i + 1]))
        except InvalidSegmentError:
            raise
        except PathError as e:
            return PathResult(error=e)
    return PathResult(value=value)


def _expect(result: PathResult, kind: type, name: str, path: Iterable[Any]) -> PathResult:
    if result.ok and not isinstance(result.value, kind):
        return PathResult(error=TypeMismatchError(
            f"Property at '{format_path(path)}' is not {name}"
        ))
    return result


def try_get_nested_string(data: TreeValue, path: List[Any]) -> PathResult:
    return _expect(resolve(data, path), str, "a string", path)


def try_get_nested_list(data: TreeValue, path: List[Any]) -> PathResult:
    return _expect(resolve(data, path), list, "a list", path)


def try_get_nested_field_map(data: TreeValue, path: List[Any]) -> PathResult:
    return _expect(resolve(data, path), dict, "a field map", path)


def get_nested_property(data: TreeValue, path: List[Any]) -> TreeValue:
    """
    Get the value at ``path``.

    Raises:
        PathError: If the path does not resolve
    """
    return resolve(data, path).unwrap()


def get_nested_string(data: TreeValue, path: List[Any]) -> str:
    return try_get_nested_string(data, path).unwrap()


def get_nested_list(data: TreeValue, path: List[Any]) -> list:
    return try_get_nested_list(data, path).unwrap()


def get_nested_field_map(data: TreeValue, path: List[Any]) -> FieldMap:
    return try_get_nested_field_map(data, path).unwrap()


def set_nested_property(data: TreeValue, path: List[Any], value: TreeValue) -> None:
    """
    Write ``value`` at ``path``, modifying ``data`` in place.

    All segments but the last must already exist. The last one is created
    when missing: a new key in a field map, or an append when the index
    equals the list length.

    Args:
        data: Tree to modify
        path: Path of the value to write
        value: New value

    Raises:
        PathError: If the parent of the final segment cannot be resolved or
                   the final segment cannot be written
    """
    segments = parse_path(path)
    if not segments:
        raise InvalidSegmentError("Path cannot be empty")

    last = segments[-1]
    parent = get_nested_property(data, segments[:-1])
    position = format_path(segments)

    if isinstance(parent, dict):
        if not isinstance(last, str):
            raise InvalidSegmentError(f"Segment {last!r} cannot be set on a field map at '{position}'")
        parent[last] = value
    elif isinstance(parent, list):
        if last is SINGLETON:
            if len(parent) != 1:
                raise SingletonViolationError(
                    f"Expected a singleton list at '{position}', found {len(parent)} elements"
                )
            parent[0] = value
        elif _is_index(last):
            if 0 <= last < len(parent):
                parent[last] = value
            elif last == len(parent):
                parent.append(value)
            else:
                raise TraversalError(f"Index {last} out of range at '{position}'")
        else:
            raise InvalidSegmentError(f"Segment {last!r} cannot be set on a list at '{position}'")
    else:
        raise TypeMismatchError(f"Cannot set a value below a string at '{position}'")
