import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from session_service.modules.query import matches

logger = logging.getLogger("session_service.storage")


def _encode(part: str) -> str:
    return quote(part, safe="")


class RedisDocumentStore:
    """
    Document database on top of Redis.

    Every document is addressed by (source, type, id). Key layout, with
    each component percent-encoded so a ':' inside one cannot shift
    the boundaries between them:

        {prefix}:doc:{source}:{type}:{id}   JSON document
        {prefix}:index:{source}:{type}      sorted set of ids, scored by insertion sequence
        {prefix}:seq                        insertion sequence counter

    Documents are the serialized session: {"id", "data", "source", "type"}.
    """

    def __init__(self, redis_client, key_prefix: str = "sessions"):
        """
        Initialize document store.

        Args:
            redis_client: Async Redis client (decode_responses=True)
            key_prefix: Prefix applied to every key this store writes
        """
        self.redis = redis_client
        self.key_prefix = key_prefix

    def document_key(self, source: str, session_type: str, doc_id: str) -> str:
        return f"{self.key_prefix}:doc:{_encode(source)}:{_encode(session_type)}:{_encode(doc_id)}"

    def index_key(self, source: str, session_type: str) -> str:
        return f"{self.key_prefix}:index:{_encode(source)}:{_encode(session_type)}"

    @property
    def sequence_key(self) -> str:
        return f"{self.key_prefix}:seq"

    async def insert_if_absent(self, document: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Insert a document unless one already exists under the same (source, type, id).

        Args:
            document: Document with 'id', 'source' and 'type' fields

        Returns:
            None if the document was inserted, otherwise the stored document

        Logic:
        1. Reserve an insertion sequence number
        2. SET NX the document and ZADD NX the index in one MULTI/EXEC
        3. If SET NX lost, read back the document that won
        """
        source, session_type, doc_id = document["source"], document["type"], document["id"]
        key = self.document_key(source, session_type, doc_id)

        sequence = await self.redis.incr(self.sequence_key)

        pipe = self.redis.pipeline(transaction=True)
        pipe.set(key, json.dumps(document), nx=True)
        pipe.zadd(self.index_key(source, session_type), {doc_id: sequence}, nx=True)
        inserted, _ = await pipe.execute()

        if inserted:
            return None

        existing = await self.redis.get(key)
        if existing is None:
            # Deleted between the two round trips; the content is identical by construction
            return document
        return json.loads(existing)

    async def find_one(self, source: str, session_type: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Get a single document, or None if absent in this scope."""
        data = await self.redis.get(self.document_key(source, session_type, doc_id))
        if data is None:
            return None
        return json.loads(data)

    async def find_all(self, source: str, session_type: str) -> List[Dict[str, Any]]:
        """
        Get every document in a scope, in insertion order.

        Ids whose document vanished between ZRANGE and MGET (a concurrent
        delete) are skipped. Delete drops the document and its index entry
        in one transaction, so the index is never left stale.
        """
        index_key = self.index_key(source, session_type)
        doc_ids = await self.redis.zrange(index_key, 0, -1)
        if not doc_ids:
            return []

        keys = [self.document_key(source, session_type, doc_id) for doc_id in doc_ids]
        values = await self.redis.mget(keys)

        documents = []
        for doc_id, value in zip(doc_ids, values):
            if value is None:
                logger.debug(f"Session {doc_id} deleted while listing {index_key}")
                continue
            documents.append(json.loads(value))
        return documents

    async def find(
        self, source: str, session_type: str, criteria: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        """
        Get the documents in a scope that satisfy a validated filter.

        Criteria are ANDed with the scope; a filter can never reach
        documents stored under another (source, type).
        """
        documents = await self.find_all(source, session_type)
        return [doc for doc in documents if matches(doc, criteria)]

    async def replace(self, document: Dict[str, Any]) -> bool:
        """
        Overwrite an existing document.

        Returns:
            True if the document existed and was replaced
        """
        key = self.document_key(document["source"], document["type"], document["id"])
        replaced = await self.redis.set(key, json.dumps(document), xx=True)
        return bool(replaced)

    async def delete(self, source: str, session_type: str, doc_id: str) -> bool:
        """
        Delete a document and its index entry in one transaction.

        Returns:
            True if a document was deleted
        """
        pipe = self.redis.pipeline(transaction=True)
        pipe.delete(self.document_key(source, session_type, doc_id))
        pipe.zrem(self.index_key(source, session_type), doc_id)
        deleted, _ = await pipe.execute()
        return deleted > 0

    async def publish(self, channel: str, message: Dict[str, Any]) -> None:
        """Publish a message on a pub/sub channel."""
        await self.redis.publish(channel, json.dumps(message))

    async def ping(self) -> bool:
        return bool(await self.redis.ping())
