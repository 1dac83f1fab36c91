"""Document store on top of SQLite.

Documents are JSON objects grouped by collection and addressed by an opaque,
store-assigned id. The store offers the small set of primitives the services
and the reconciliation engines are written against: get-by-id,
query-by-field, create, update (merge), delete, and atomic write batches.

Every sqlite3 failure surfaces as StoreUnavailable. Nothing is retried here;
callers decide whether to re-run an operation.
"""

import json
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from errors import NotFound, StoreUnavailable
from logger import get_logger

logger = get_logger(__name__)


def new_document_id() -> str:
    """Generate a fresh opaque document id."""
    return uuid.uuid4().hex


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string, the store's timestamp format."""
    return datetime.now(timezone.utc).isoformat()


def _to_document(row: Tuple[str, str]) -> Dict[str, Any]:
    doc = json.loads(row[1])
    doc["id"] = row[0]
    return doc


def _dump(data: Dict[str, Any]) -> str:
    payload = {k: v for k, v in data.items() if k != "id"}
    return json.dumps(payload, ensure_ascii=False)


def _insert(conn, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
    conn.execute(
        "INSERT INTO documents (collection, id, data) VALUES (?, ?, ?)",
        (collection, doc_id, _dump(data)),
    )


def _merge(conn, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
    row = conn.execute(
        "SELECT id, data FROM documents WHERE collection = ? AND id = ?",
        (collection, doc_id),
    ).fetchone()
    if row is None:
        raise NotFound(f"{collection}/{doc_id} not found")

    doc = _to_document(row)
    doc.update({k: v for k, v in fields.items() if k != "id"})
    conn.execute(
        "UPDATE documents SET data = ? WHERE collection = ? AND id = ?",
        (_dump(doc), collection, doc_id),
    )


def _remove(conn, collection: str, doc_id: str) -> int:
    cursor = conn.execute(
        "DELETE FROM documents WHERE collection = ? AND id = ?",
        (collection, doc_id),
    )
    return cursor.rowcount


class DocumentStore:
    """Collection-oriented access to JSON documents.

    Args:
        db_manager: Database manager providing connect().
    """

    def __init__(self, db_manager):
        self.db_manager = db_manager

    @contextmanager
    def _connection(self):
        try:
            with self.db_manager.connect() as conn:
                yield conn
        except sqlite3.Error as e:
            logger.error(f"Document store error: {e}")
            raise StoreUnavailable(f"Document store unavailable: {e}") from e

    @contextmanager
    def _transaction(self):
        with self._connection() as conn:
            try:
                yield conn
                conn.commit()
            except Exception:
                conn.rollback()
                raise

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Fetch a single document by id.

        Returns:
            The document (with its "id" key) or None if absent.
        """
        with self._connection() as conn:
            row = conn.execute(
                "SELECT id, data FROM documents WHERE collection = ? AND id = ?",
                (collection, doc_id),
            ).fetchone()

        return _to_document(row) if row else None

    def query(self, collection: str, field: str, value: Any) -> List[Dict[str, Any]]:
        """Fetch every document of a collection whose field equals value.

        Results come back in insertion order, which is an implementation
        detail; callers sort whatever they need sorted.
        """
        with self._connection() as conn:
            rows = conn.execute(
                """
                SELECT id, data FROM documents
                WHERE collection = ? AND json_extract(data, ?) = ?
                ORDER BY rowid
                """,
                (collection, f"$.{field}", value),
            ).fetchall()

        return [_to_document(row) for row in rows]

    def create(self, collection: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a new document, assigning its id and created_at.

        Returns:
            The stored document including its new id.
        """
        doc = {k: v for k, v in data.items() if k != "id"}
        doc.setdefault("created_at", utc_now())
        doc_id = new_document_id()

        with self._transaction() as conn:
            _insert(conn, collection, doc_id, doc)

        logger.debug(f"Created {collection}/{doc_id}")
        doc["id"] = doc_id
        return doc

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        """Merge fields into an existing document.

        Raises:
            NotFound: If the document does not exist.
        """
        with self._transaction() as conn:
            _merge(conn, collection, doc_id, fields)

        logger.debug(f"Updated {collection}/{doc_id}: {sorted(fields)}")

    def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document by id.

        Returns:
            True if a document was deleted, False if it did not exist.
        """
        with self._transaction() as conn:
            deleted = _remove(conn, collection, doc_id) > 0

        if deleted:
            logger.debug(f"Deleted {collection}/{doc_id}")
        return deleted

    def batch(self) -> "WriteBatch":
        """Start a new atomic write batch."""
        return WriteBatch(self)

    def _apply(self, operations: List[tuple]) -> None:
        with self._transaction() as conn:
            for op, collection, doc_id, data in operations:
                if op == "create":
                    _insert(conn, collection, doc_id, data)
                elif op == "update":
                    _merge(conn, collection, doc_id, data)
                elif op == "delete":
                    _remove(conn, collection, doc_id)


class WriteBatch:
    """A group of writes committed together in one transaction.

    Ids for created documents are handed out immediately so that later
    writes (in this batch or a following one) can reference them.
    """

    def __init__(self, store: DocumentStore):
        self._store = store
        self._operations: List[tuple] = []

    def __len__(self) -> int:
        return len(self._operations)

    def create(self, collection: str, data: Dict[str, Any]) -> str:
        doc = {k: v for k, v in data.items() if k != "id"}
        doc.setdefault("created_at", utc_now())
        doc_id = new_document_id()
        self._operations.append(("create", collection, doc_id, doc))
        return doc_id

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        self._operations.append(("update", collection, doc_id, dict(fields)))

    def delete(self, collection: str, doc_id: str) -> None:
        self._operations.append(("delete", collection, doc_id, None))

    def commit(self) -> int:
        """Apply every queued write atomically.

        Returns:
            Number of writes applied (0 for an empty batch, which is a no-op).

        Raises:
            NotFound: If an update targets a missing document; nothing is applied.
            StoreUnavailable: If the database fails; nothing is applied.
        """
        if not self._operations:
            return 0

        operations, self._operations = self._operations, []
        self._store._apply(operations)
        logger.debug(f"Committed batch of {len(operations)} write(s)")
        return len(operations)
