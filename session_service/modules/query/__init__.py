"""
Query Module - Black Box Interface

Purpose: Screen field paths before they reach the document store
Interface: check_field_path(), check_filter(), matches()
Hidden: Path syntax rules, filter tree traversal, document matching

Validation is pure and returns tagged results (ValidPath / RejectedPath);
raising is left to the caller.
"""

from .matcher import matches, resolve_path
from .validator import PathCheck, RejectedPath, ValidPath, check_field_path, check_filter

__all__ = [
    "PathCheck",
    "ValidPath",
    "RejectedPath",
    "check_field_path",
    "check_filter",
    "matches",
    "resolve_path",
]
