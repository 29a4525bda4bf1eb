import hashlib
import json
import re
from typing import Any

# SHA-256 rendered as lowercase hex
SESSION_ID_LENGTH = 64

_SESSION_ID_PATTERN = re.compile(r"[0-9a-f]{64}")


def canonical_json(value: Any) -> str:
    """
    Serialize a JSON value so that structurally equal values serialize identically.

    Object keys are sorted at every level and separators carry no whitespace.
    Non-ASCII text is kept as-is and encoded as UTF-8 by the caller.
    """
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def generate_session_id(source: str, session_type: str, data: Any) -> str:
    """
    Generate the content-addressed identifier for a session.

    Args:
        source: Namespace of the session, compared case-sensitively
        session_type: Sub-namespace of the session
        data: Parsed JSON session payload

    Returns:
        64 character lowercase hex digest

    The triple is serialized as one JSON array, so a value can never
    bleed from one component into the next (("ab", "c") != ("a", "bc")).
    """
    payload = canonical_json([source, session_type, data])
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def is_session_id(value: str) -> bool:
    """Check whether a string has the shape of a generated identifier."""
    return isinstance(value, str) and _SESSION_ID_PATTERN.fullmatch(value) is not None
