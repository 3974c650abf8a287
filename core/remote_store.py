"""
Remote durable document store on PostgreSQL.

Documents live in one table keyed by (collection, doc_id); a collection is a
path such as 'clients' or 'invoices/<id>/invoiceImages'. Listing a
collection returns an unordered set: callers needing an order must encode it
in the document id.

Writes go through commit(): every document is size-checked up front, then
the writes are committed in atomic batches of at most `max_batch_writes`.
All driver failures are translated into RemoteUnavailableError or
PayloadTooLargeError so callers never see psycopg2 types.
"""

import json
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Sequence

import psycopg2
import psycopg2.errors
import psycopg2.extras

from clients.postgres_client import PostgresClient
from core.config import StoreLimits
from core.exceptions import PayloadTooLargeError, RemoteUnavailableError

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS documents (
    collection TEXT NOT NULL,
    doc_id TEXT NOT NULL,
    data JSONB NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    PRIMARY KEY (collection, doc_id)
)
"""

_UPSERT = """
INSERT INTO documents (collection, doc_id, data, updated_at)
VALUES (%s, %s, %s, now())
ON CONFLICT (collection, doc_id)
DO UPDATE SET data = EXCLUDED.data, updated_at = EXCLUDED.updated_at
"""

_DELETE = "DELETE FROM documents WHERE collection = %s AND doc_id = %s"


@dataclass(frozen=True)
class DocumentWrite:
    """A set (data is a dict) or delete (data is None) of one document."""

    collection: str
    doc_id: str
    data: dict[str, Any] | None = None

    @property
    def path(self) -> str:
        return f"{self.collection}/{self.doc_id}"

    @property
    def is_delete(self) -> bool:
        return self.data is None


def document_size(data: dict[str, Any]) -> int:
    """Serialized size in bytes, as the store will see it."""
    return len(json.dumps(data, separators=(",", ":")).encode("utf-8"))


def partition(writes: Sequence[DocumentWrite], batch_size: int) -> list[list[DocumentWrite]]:
    """Split writes into consecutive batches of at most batch_size, in order."""
    return [list(writes[i:i + batch_size]) for i in range(0, len(writes), batch_size)]


class RemoteStore:
    """
    Document store over PostgresClient.

    The Postgres client is created lazily on first use so that an unreachable
    server surfaces as RemoteUnavailableError at the first operation, not at
    construction.
    """

    def __init__(
        self,
        database_url: str | None = None,
        limits: StoreLimits | None = None,
        postgres: PostgresClient | None = None,
    ):
        if database_url is None and postgres is None:
            raise ValueError("RemoteStore needs a database_url or a PostgresClient")
        self._database_url = database_url
        self._postgres = postgres
        self.limits = limits or StoreLimits()

    @contextmanager
    def _translate_errors(self, path: str) -> Iterator[None]:
        try:
            yield
        except psycopg2.errors.ProgramLimitExceeded:
            raise PayloadTooLargeError(path)
        except psycopg2.Error as e:
            raise RemoteUnavailableError(f"Remote store failure at '{path}': {e}") from e
        except RuntimeError as e:
            # No connection available from the pool
            raise RemoteUnavailableError(f"Remote store failure at '{path}': {e}") from e

    def _db(self) -> PostgresClient:
        if self._postgres is None:
            self._postgres = PostgresClient(self._database_url)
        return self._postgres

    def close(self) -> None:
        """Release the connection pool, if one was ever opened."""
        if self._postgres is not None:
            self._postgres.close()

    def ensure_schema(self) -> None:
        """Create the documents table if missing."""
        with self._translate_errors("documents"):
            self._db().execute(_SCHEMA)

    def get_document(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Document data, or None if it doesn't exist."""
        with self._translate_errors(f"{collection}/{doc_id}"):
            row = self._db().execute_single(
                "SELECT data FROM documents WHERE collection = %s AND doc_id = %s",
                (collection, doc_id),
            )
        return row["data"] if row else None

    def list_documents(self, collection: str) -> dict[str, dict[str, Any]]:
        """All documents of a collection as {doc_id: data}. No defined order."""
        with self._translate_errors(collection):
            rows = self._db().execute(
                "SELECT doc_id, data FROM documents WHERE collection = %s",
                (collection,),
            )
        return {row["doc_id"]: row["data"] for row in rows}

    def list_ids(self, collection: str) -> set[str]:
        """Ids of every document in a collection."""
        with self._translate_errors(collection):
            rows = self._db().execute(
                "SELECT doc_id FROM documents WHERE collection = %s",
                (collection,),
            )
        return {row["doc_id"] for row in rows}

    def set_document(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self.commit([DocumentWrite(collection, doc_id, data)])

    def delete_document(self, collection: str, doc_id: str) -> None:
        self.commit([DocumentWrite(collection, doc_id)])

    def check_sizes(self, writes: Sequence[DocumentWrite]) -> None:
        """Raise PayloadTooLargeError for the first oversized document."""
        limit = self.limits.max_document_bytes
        for write in writes:
            if write.is_delete:
                continue
            size = document_size(write.data)
            if size > limit:
                raise PayloadTooLargeError(write.path, size, limit)

    def commit(self, writes: Sequence[DocumentWrite]) -> int:
        """
        Apply writes in order, in atomic batches.

        Nothing is written if any document is oversized. A failure part way
        leaves earlier batches committed and later ones unapplied.

        Returns:
            Number of batches committed.

        Raises:
            PayloadTooLargeError: A document exceeds max_document_bytes
            RemoteUnavailableError: The database failed
        """
        if not writes:
            return 0

        self.check_sizes(writes)

        batches = partition(writes, self.limits.max_batch_writes)
        for number, batch in enumerate(batches, start=1):
            self._write_batch(batch)
            logger.info(f"Committed batch {number}/{len(batches)} ({len(batch)} writes)")
        return len(batches)

    def _write_batch(self, batch: list[DocumentWrite]) -> None:
        statements = []
        for write in batch:
            if write.is_delete:
                statements.append((_DELETE, (write.collection, write.doc_id)))
            else:
                statements.append(
                    (_UPSERT, (write.collection, write.doc_id, psycopg2.extras.Json(write.data)))
                )

        with self._translate_errors(batch[0].path):
            self._db().execute_batch(statements)
