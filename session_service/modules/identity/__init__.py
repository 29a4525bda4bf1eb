"""
Identity Module - Black Box Interface

Purpose: Derive stable session identifiers from content
Interface: generate_session_id(), canonical_json(), is_session_id()
Hidden: Hash algorithm, canonical serialization rules

Pure functions: no network or store access.
"""

from .identity import SESSION_ID_LENGTH, canonical_json, generate_session_id, is_session_id

__all__ = ["generate_session_id", "canonical_json", "is_session_id", "SESSION_ID_LENGTH"]
