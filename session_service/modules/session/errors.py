"""
Caller-input errors raised by the session repository.

All three are deterministic rejections: none is retried, and each is
surfaced unchanged to the HTTP boundary, which picks the status code.
Store connectivity failures are not part of this hierarchy.
"""


class SessionServiceError(Exception):
    """Base class for session errors."""

    code = "session_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SessionNotFoundError(SessionServiceError):
    """(source, type, id) does not resolve to a stored session."""

    code = "session_not_found"

    def __init__(self, source: str, session_type: str, session_id: str):
        super().__init__(
            f"Session not found: source={source!r} type={session_type!r} id={session_id!r}"
        )
        self.source = source
        self.session_type = session_type
        self.session_id = session_id


class SessionInvalidError(SessionServiceError):
    """Session payload is absent, not valid JSON, or not a JSON object."""

    code = "session_invalid"


class SessionQueryInvalidError(SessionServiceError):
    """A query field path or filter document failed validation."""

    code = "session_query_invalid"
