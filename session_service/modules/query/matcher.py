"""
In-process evaluation of validated filters against stored documents.

Semantics follow document database equality queries: every key of the
filter is a dotted path, all keys must hold, and a path that walks into
a list is applied to each element.
"""

from typing import Any, Dict, List

_MISSING = object()


def resolve_path(document: Any, path: str) -> List[Any]:
    """
    Collect every value reachable from ``document`` by a dotted path.

    Numeric segments index into lists; other segments applied to a list
    fan out over its elements.
    """
    current = [document]
    for segment in path.split("."):
        reached = []
        for node in current:
            reached.extend(_step(node, segment))
        if not reached:
            return []
        current = reached
    return current


def _step(node: Any, segment: str) -> List[Any]:
    if isinstance(node, dict):
        value = node.get(segment, _MISSING)
        return [] if value is _MISSING else [value]
    if isinstance(node, list):
        if segment.isdigit():
            index = int(segment)
            return [node[index]] if index < len(node) else []
        reached = []
        for item in node:
            if isinstance(item, dict) and segment in item:
                reached.append(item[segment])
        return reached
    return []


def _equal(actual: Any, expected: Any) -> bool:
    # JSON true is not the number 1
    if isinstance(actual, bool) != isinstance(expected, bool):
        return False
    return actual == expected


def _value_matches(actual: Any, expected: Any) -> bool:
    if _equal(actual, expected):
        return True
    if isinstance(actual, list) and not isinstance(expected, list):
        return any(_equal(item, expected) for item in actual)
    return False


def matches(document: Dict[str, Any], criteria: Dict[str, Any]) -> bool:
    """Return True when the document satisfies every criterion."""
    for path, expected in criteria.items():
        if not any(_value_matches(value, expected) for value in resolve_path(document, path)):
            return False
    return True
