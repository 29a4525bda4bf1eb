import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any, Dict, List, Type, Union

from session_service.modules.identity import generate_session_id, is_session_id
from session_service.modules.query import RejectedPath, check_field_path, check_filter

from .errors import SessionInvalidError, SessionNotFoundError, SessionQueryInvalidError, SessionServiceError

logger = logging.getLogger("session_service.session")

EVENTS_CHANNEL = "events:session"

Payload = Union[str, bytes, Dict[str, Any], None]


def _reject_constant(error_cls: Type[SessionServiceError]):
    # NaN, Infinity and -Infinity are accepted by json.loads but are not JSON
    def reject(name: str):
        raise error_cls(f"Request body is not valid JSON: {name} is not a JSON value")

    return reject


@dataclass
class Session:
    """A stored JSON document keyed by (source, type, id)."""

    id: str
    data: Dict[str, Any] = field(default_factory=dict)
    source: str = ""
    type: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Session":
        """Create from a stored document."""
        return cls(
            id=data["id"],
            data=data.get("data", {}),
            source=data.get("source", ""),
            type=data.get("type", ""),
        )


def parse_payload(
    payload: Payload,
    error_cls: Type[SessionServiceError] = SessionInvalidError,
    strict: bool = True,
) -> Dict[str, Any]:
    """
    Turn a request payload into a JSON object.

    An absent payload (None or empty body) is rejected; an empty JSON
    object is accepted.

    Args:
        payload: Raw JSON text/bytes, or an already parsed dict
        error_cls: Error raised on rejection
        strict: When False, raw control characters are allowed inside strings

    Raises:
        error_cls: If the payload is absent, malformed, or not a JSON object
    """
    if payload is None:
        raise error_cls("Required request body is missing")

    if isinstance(payload, (str, bytes, bytearray)):
        if isinstance(payload, (bytes, bytearray)):
            try:
                payload = payload.decode("utf-8")
            except UnicodeDecodeError as e:
                raise error_cls(f"Request body is not valid UTF-8: {e}") from e
        if not payload.strip():
            raise error_cls("Required request body is missing")
        try:
            payload = json.loads(payload, strict=strict, parse_constant=_reject_constant(error_cls))
        except json.JSONDecodeError as e:
            raise error_cls(f"Request body is not valid JSON: {e.msg} at position {e.pos}") from e

    if not isinstance(payload, dict):
        raise error_cls(f"Request body must be a JSON object, got {type(payload).__name__}")
    return payload


class SessionRepository:
    def __init__(self, store, publish_events: bool = True):
        """
        Initialize session repository.

        Args:
            store: Document store (see RedisDocumentStore)
            publish_events: Publish lifecycle events for monitoring
        """
        self.store = store
        self.publish_events = publish_events

    async def create(self, source: str, session_type: str, payload: Payload) -> Session:
        """
        Create a session, or return the one already holding identical content.

        Args:
            source: Session namespace
            session_type: Session sub-namespace
            payload: JSON object (raw or parsed); may be empty

        Returns:
            The newly stored session, or the existing one unchanged

        Raises:
            SessionInvalidError: If the payload is absent or not a JSON object

        Logic:
        1. Parse and validate payload before touching storage
        2. Derive id from (source, type, data)
        3. Insert atomically unless the id already exists in scope
        """
        self._check_scope(source, session_type)
        data = parse_payload(payload)

        session = Session(
            id=generate_session_id(source, session_type, data),
            data=data,
            source=source,
            type=session_type,
        )

        existing = await self.store.insert_if_absent(session.to_dict())
        if existing is not None:
            logger.debug(f"Session {session.id} already exists in {source}/{session_type}")
            return Session.from_dict(existing)

        logger.info(f"Created session {session.id} in {source}/{session_type}")
        await self._publish_event("session.created", session)
        return session

    async def list_all(self, source: str, session_type: str) -> List[Session]:
        """Get every session in scope, in insertion order."""
        self._check_scope(source, session_type)
        documents = await self.store.find_all(source, session_type)
        return [Session.from_dict(doc) for doc in documents]

    async def get_by_id(self, source: str, session_type: str, session_id: str) -> Session:
        """
        Get a single session.

        Raises:
            SessionNotFoundError: If the id is unknown in this scope
        """
        self._check_scope(source, session_type)
        self._check_id(source, session_type, session_id)
        document = await self.store.find_one(source, session_type, session_id)
        if document is None:
            raise SessionNotFoundError(source, session_type, session_id)
        return Session.from_dict(document)

    async def get_by_field(
        self, source: str, session_type: str, field_path: str, value: Any
    ) -> List[Session]:
        """
        Get sessions in scope whose field equals a literal value.

        Raises:
            SessionQueryInvalidError: If the field path fails validation
        """
        self._check_scope(source, session_type)
        result = check_field_path(field_path)
        if isinstance(result, RejectedPath):
            self._reject_query(result)

        documents = await self.store.find(source, session_type, {result.path: value})
        return [Session.from_dict(doc) for doc in documents]

    async def fetch_by_query(self, source: str, session_type: str, filter_doc: Payload) -> List[Session]:
        """
        Get sessions in scope matching a filter document.

        Every key of the filter, at every nesting level, is validated.

        Raises:
            SessionQueryInvalidError: If the filter is not a JSON object or any key is rejected
        """
        self._check_scope(source, session_type)
        criteria = parse_payload(filter_doc, error_cls=SessionQueryInvalidError, strict=False)

        rejected = check_filter(criteria)
        if rejected is not None:
            self._reject_query(rejected)

        documents = await self.store.find(source, session_type, criteria)
        return [Session.from_dict(doc) for doc in documents]

    async def replace(
        self, source: str, session_type: str, session_id: str, payload: Payload
    ) -> Session:
        """
        Replace the data of an existing session.

        The id is not recomputed: identity is assigned once at creation.

        Raises:
            SessionInvalidError: If the payload is absent or not a JSON object
            SessionNotFoundError: If the id is unknown in this scope
        """
        self._check_scope(source, session_type)
        data = parse_payload(payload)

        self._check_id(source, session_type, session_id)
        session = Session(id=session_id, data=data, source=source, type=session_type)
        if not await self.store.replace(session.to_dict()):
            raise SessionNotFoundError(source, session_type, session_id)

        logger.info(f"Replaced session {session_id} in {source}/{session_type}")
        await self._publish_event("session.updated", session)
        return session

    async def delete(self, source: str, session_type: str, session_id: str) -> None:
        """
        Delete a session permanently.

        Raises:
            SessionNotFoundError: If the id is unknown in this scope
        """
        self._check_scope(source, session_type)
        self._check_id(source, session_type, session_id)
        if not await self.store.delete(source, session_type, session_id):
            raise SessionNotFoundError(source, session_type, session_id)

        logger.info(f"Deleted session {session_id} from {source}/{session_type}")
        await self._publish_event(
            "session.deleted", Session(id=session_id, source=source, type=session_type)
        )

    @staticmethod
    def _check_scope(source: str, session_type: str) -> None:
        if not source:
            raise ValueError("source must be a non-empty string")
        if not session_type:
            raise ValueError("type must be a non-empty string")

    @staticmethod
    def _check_id(source: str, session_type: str, session_id: str) -> None:
        # Anything that is not a generated id cannot name a stored session
        if not is_session_id(session_id):
            raise SessionNotFoundError(source, session_type, session_id)

    @staticmethod
    def _reject_query(rejected: RejectedPath) -> None:
        logger.warning(rejected.message)
        raise SessionQueryInvalidError(rejected.message)

    async def _publish_event(self, event_type: str, session: Session):
        """Publish session event for monitoring"""
        if not self.publish_events:
            return

        event = {
            "type": event_type,
            "timestamp": datetime.now(UTC).isoformat(),
            "data": {"id": session.id, "source": session.source, "type": session.type},
        }
        await self.store.publish(EVENTS_CHANNEL, event)
