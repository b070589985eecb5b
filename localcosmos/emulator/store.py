"""
Document Store.

Per-container in-memory storage keyed by document id and partition key
value. Documents are cloned on the way in and on the way out.

Author: LocalCosmos Team
Date: 2026-10-17
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .exceptions import BadRequestError, DocumentNotFoundError, InvalidPartitionKeyError
from .paths import (
    MISSING,
    clone,
    is_json_value,
    is_partition_key_value,
    json_equals,
    resolve_path,
    serialize,
)

logger = logging.getLogger(__name__)

StorageKey = Tuple[str, str]


@dataclass
class StoredDocument:
    """A document together with its resolved partition key value."""

    id: str
    partition_key: Any
    document: Dict[str, Any]


class DocumentStore:
    """In-memory document storage for one container.

    Storage structure:
        {(document_id, serialized_partition_key): StoredDocument}

    The same id may exist once per partition key value. All access goes
    through a re-entrant lock so the store can be shared between threads.

    Attributes:
        partition_key_field: Dotted path of the partition key inside documents
    """

    def __init__(self, partition_key_field: str) -> None:
        """Initialize an empty store.

        Args:
            partition_key_field: Dotted path of the partition key
        """
        self.partition_key_field = partition_key_field
        self._rows: Dict[StorageKey, StoredDocument] = {}
        self._lock = threading.RLock()

    @staticmethod
    def _make_key(document_id: str, partition_key: Any) -> StorageKey:
        return (document_id, serialize(partition_key))

    def _find(self, document_id: str, partition_key: Any) -> Optional[StorageKey]:
        if partition_key is not MISSING:
            key = self._make_key(document_id, partition_key)
            return key if key in self._rows else None

        # No partition key: scan, first match wins
        for key, row in self._rows.items():
            if row.id == document_id:
                return key
        return None

    def partition_key_of(self, document: Dict[str, Any]) -> Any:
        """Resolve the partition key value of a document (MISSING if absent)."""
        return resolve_path(document, self.partition_key_field)

    def upsert(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Create or replace a document.

        Args:
            document: Document with a string id and a partition key value

        Returns:
            Clone of the stored document

        Raises:
            BadRequestError: If the id is missing or empty, or the item holds
                values that are not JSON-compatible
            InvalidPartitionKeyError: If the partition key value is missing or
                not of an allowed type
        """
        if not isinstance(document, dict):
            raise BadRequestError("Upsert requires a JSON object")

        document_id = document.get("id")
        if not isinstance(document_id, str) or not document_id:
            raise BadRequestError("Upsert requires item.id")

        if not is_json_value(document):
            raise BadRequestError("Upsert requires a JSON-compatible item")

        partition_key = self.partition_key_of(document)
        if not is_partition_key_value(partition_key):
            raise InvalidPartitionKeyError(
                f'Upsert requires partition key value at path "{self.partition_key_field}"',
                partition_key_path=self.partition_key_field
            )

        stored = clone(document)
        key = self._make_key(document_id, partition_key)
        with self._lock:
            self._rows[key] = StoredDocument(
                id=document_id,
                partition_key=clone(partition_key),
                document=stored
            )
        logger.debug(f"Upserted document '{document_id}' in partition {key[1]}")
        return clone(stored)

    def read(self, document_id: str, partition_key: Any = MISSING) -> Optional[Dict[str, Any]]:
        """Read a document.

        Args:
            document_id: Document identifier
            partition_key: Partition key value; omit to scan all partitions

        Returns:
            Clone of the document, or None when not found
        """
        with self._lock:
            key = self._find(document_id, partition_key)
            if key is None:
                return None
            return clone(self._rows[key].document)

    def delete(self, document_id: str, partition_key: Any = MISSING) -> Dict[str, Any]:
        """Delete a document.

        Args:
            document_id: Document identifier
            partition_key: Partition key value; omit to scan all partitions

        Returns:
            Clone of the removed document

        Raises:
            DocumentNotFoundError: If no document matches
        """
        with self._lock:
            key = self._find(document_id, partition_key)
            if key is None:
                shown = "" if partition_key is MISSING else serialize(partition_key)
                raise DocumentNotFoundError(
                    "Item not found",
                    document_id=document_id,
                    partition_key=shown
                )
            row = self._rows.pop(key)
        logger.debug(f"Deleted document '{document_id}' from partition {key[1]}")
        return clone(row.document)

    def list_by_partition(self, partition_key: Any = MISSING) -> List[Dict[str, Any]]:
        """List documents, optionally limited to one partition key value.

        Args:
            partition_key: Partition key value; omit to list everything

        Returns:
            Clones of the matching documents in insertion order
        """
        with self._lock:
            rows = list(self._rows.values())
        if partition_key is MISSING:
            return [clone(row.document) for row in rows]
        return [
            clone(row.document)
            for row in rows
            if json_equals(row.partition_key, partition_key)
        ]

    def count(self) -> int:
        """Number of stored documents."""
        with self._lock:
            return len(self._rows)

    def clear(self) -> None:
        """Remove all documents.

        Used for testing purposes.
        """
        with self._lock:
            self._rows.clear()
