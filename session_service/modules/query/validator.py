"""
Field path validation.

A field path is a dotted string naming a location inside a stored
document (e.g. ``data.portal-session.title``). Paths are rejected when
they could smuggle store operator syntax into a filter expression.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Union

NUL = "\x00"
OPERATOR_PREFIX = "$"


@dataclass(frozen=True)
class ValidPath:
    """Field path accepted for use in a store filter."""

    path: str


@dataclass(frozen=True)
class RejectedPath:
    """Field path refused by the validator."""

    path: str
    reason: str

    @property
    def message(self) -> str:
        return f"Invalid query field {self.path!r}: {self.reason}"


PathCheck = Union[ValidPath, RejectedPath]


def check_field_path(path: str) -> PathCheck:
    """
    Validate a single field path.

    Rules:
    - Must be a non-empty string
    - Must not contain a NUL character anywhere
    - No dot-separated segment may begin with '$'

    Returns:
        ValidPath with the path unchanged, or RejectedPath with a reason
    """
    if not isinstance(path, str):
        return RejectedPath(repr(path), "field path must be a string")
    if not path:
        return RejectedPath(path, "field path must not be empty")
    if NUL in path:
        return RejectedPath(path, "field path contains a null character")
    for segment in path.split("."):
        if segment.startswith(OPERATOR_PREFIX):
            return RejectedPath(path, f"path segment {segment!r} starts with '$'")
    return ValidPath(path)


def check_filter(filter_doc: Any) -> Optional[RejectedPath]:
    """
    Validate every key of a filter document, at every nesting level.

    The walk is iterative: each stack entry holds a node and the location
    of that node inside the filter, so a rejection names where the
    offending key sits (e.g. ``data.nested[1].$ne``).

    Returns:
        The first RejectedPath found, or None if the whole filter is valid
    """
    if not isinstance(filter_doc, dict):
        return RejectedPath(type(filter_doc).__name__, "query must be a JSON object")

    stack: List[Tuple[Any, str]] = [(filter_doc, "")]
    while stack:
        node, location = stack.pop()
        if isinstance(node, dict):
            for key, value in node.items():
                result = check_field_path(key)
                if isinstance(result, RejectedPath):
                    where = f"{location}.{key}" if location else str(key)
                    return RejectedPath(where, result.reason)
                stack.append((value, f"{location}.{key}" if location else key))
        elif isinstance(node, list):
            for index, item in enumerate(node):
                stack.append((item, f"{location}[{index}]"))
    return None
