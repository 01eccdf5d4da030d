"""Per-user document persistence

Documents are whole JSON objects addressed by (collection, key), where the
key is the user id. Writes replace the full document: two sessions writing
the same document race and the last writer wins.
"""
import copy
import logging
from typing import Optional, Protocol

import psycopg
from psycopg.types.json import Jsonb

from skincare_tracker.db.connection import Database
from skincare_tracker.exceptions import DocumentWriteError, wrap_external_exception

logger = logging.getLogger(__name__)

PROGRESS_COLLECTION = "progress"
ROUTINES_COLLECTION = "routines"


class DocumentStore(Protocol):
    """Read/write whole documents keyed by user identity"""

    async def read(self, collection: str, key: str) -> Optional[dict]:
        ...

    async def write(self, collection: str, key: str, document: dict) -> None:
        ...


class InMemoryDocumentStore:
    """Process-local document store (tests, offline use)"""

    def __init__(self):
        self._documents: dict[tuple[str, str], dict] = {}

    async def read(self, collection: str, key: str) -> Optional[dict]:
        document = self._documents.get((collection, key))
        # Callers mutate what they read; hand out copies
        return copy.deepcopy(document) if document is not None else None

    async def write(self, collection: str, key: str, document: dict) -> None:
        self._documents[(collection, key)] = copy.deepcopy(document)
        logger.debug(f"Wrote {collection}/{key} to in-memory store")


SCHEMA = """
CREATE TABLE IF NOT EXISTS documents (
    collection TEXT NOT NULL,
    key TEXT NOT NULL,
    body JSONB NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    PRIMARY KEY (collection, key)
)
"""


class PostgresDocumentStore:
    """Document store backed by a single JSONB table (see SCHEMA)"""

    def __init__(self, database: Database):
        self.database = database

    async def ensure_schema(self) -> None:
        """Create the documents table if it does not exist yet"""
        try:
            async with self.database.connection() as conn:
                await conn.execute(SCHEMA)
                await conn.commit()
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="ensure_schema")
        logger.info("Document store schema ready")

    async def read(self, collection: str, key: str) -> Optional[dict]:
        try:
            async with self.database.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        "SELECT body FROM documents WHERE collection = %s AND key = %s",
                        (collection, key)
                    )
                    row = await cur.fetchone()
        except psycopg.Error as e:
            raise wrap_external_exception(
                e,
                operation="read_document",
                user_id=key,
                context={"collection": collection}
            )

        if not row:
            return None
        return row["body"]

    async def write(self, collection: str, key: str, document: dict) -> None:
        try:
            async with self.database.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        INSERT INTO documents (collection, key, body, updated_at)
                        VALUES (%s, %s, %s, now())
                        ON CONFLICT (collection, key)
                        DO UPDATE SET body = EXCLUDED.body, updated_at = now()
                        """,
                        (collection, key, Jsonb(document))
                    )
                    if cur.rowcount != 1:
                        raise DocumentWriteError(
                            f"Write to {collection}/{key} affected {cur.rowcount} rows",
                            collection=collection,
                            key=key,
                            user_id=key,
                            operation="write_document"
                        )
                await conn.commit()
        except psycopg.Error as e:
            raise wrap_external_exception(
                e,
                operation="write_document",
                user_id=key,
                context={"collection": collection}
            )

        logger.debug(f"Wrote {collection}/{key} to database")
