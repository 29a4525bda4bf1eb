"""
Session Module - Black Box Interface

Purpose: Store and query JSON sessions scoped by (source, type)
Interface: create(), list_all(), get_by_id(), get_by_field(), fetch_by_query(), replace(), delete()
Hidden: Identity derivation, query validation, document store access

Replaceable with any backend offering insert/find/replace/delete of documents.
"""

from .errors import (
    SessionInvalidError,
    SessionNotFoundError,
    SessionQueryInvalidError,
    SessionServiceError,
)
from .session import Session, SessionRepository, parse_payload

__all__ = [
    "Session",
    "SessionRepository",
    "parse_payload",
    "SessionServiceError",
    "SessionNotFoundError",
    "SessionInvalidError",
    "SessionQueryInvalidError",
]
