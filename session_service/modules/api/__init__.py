"""
API Module - Black Box Interface

Purpose: HTTP request and response models
Interface: SessionType, SessionResponse, SessionIdResponse, ErrorResponse

The API layer only orchestrates - it contains no business logic.
All logic is delegated to the session module.
"""

from .models import ErrorResponse, SessionIdResponse, SessionResponse, SessionType, to_responses

__all__ = [
    "SessionType",
    "SessionResponse",
    "SessionIdResponse",
    "ErrorResponse",
    "to_responses",
]
