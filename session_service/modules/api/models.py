"""
Session service shared data models.

These models define the structure of all data passed across the
HTTP boundary.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from session_service.modules.session import Session

# Enums


class SessionType(str, Enum):
    """Session sub-namespaces accepted by the API."""

    MAIN_SESSION = "main_session"
    VIRTUAL_STUDY = "virtual_study"
    GROUP = "group"
    COMPARISON_SESSION = "comparison_session"
    SETTINGS = "settings"
    CUSTOM_DATA = "custom_data"
    GENOMIC_CHART = "genomic_chart"
    CUSTOM_GENE_LIST = "custom_gene_list"


# Response Models (API Output)


class SessionResponse(BaseModel):
    """A stored session. Field order is the serialized order."""

    id: str = Field(..., description="Content-addressed session identifier")
    data: Dict[str, Any] = Field(default_factory=dict, description="Session payload")
    source: str = Field(..., description="Session namespace")
    type: str = Field(..., description="Session sub-namespace")

    @classmethod
    def from_session(cls, session: Session) -> "SessionResponse":
        return cls(id=session.id, data=session.data, source=session.source, type=session.type)


class SessionIdResponse(BaseModel):
    """Response to a create request."""

    id: str = Field(..., description="Identifier of the new or existing session")


def to_responses(sessions: List[Session]) -> List[SessionResponse]:
    return [SessionResponse.from_session(session) for session in sessions]


# Error Models


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error message")
    exception: Optional[str] = Field(default=None, description="Name of the raised exception")
    details: Optional[Any] = Field(default=None, description="Additional error details")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
