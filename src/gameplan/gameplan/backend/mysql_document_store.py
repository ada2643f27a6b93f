from __future__ import annotations

import json
import uuid
from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json_column
from .documents import deep_merge, require_field_name
from .repository import DocumentStore


class MySQLDocumentStore(DocumentStore):
    """Document collections kept as JSON rows in a single ``documents`` table."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_document(self, collection: str, doc_id: str) -> Optional[dict]:
        with db_cursor(self._conn_factory, operation="get_document") as (_, cur):
            cur.execute(
                "SELECT data FROM documents WHERE collection=%s AND doc_id=%s",
                (collection, str(doc_id)),
            )
            r = fetchone(cur)
            if not r:
                return None
            return load_json_column(r["data"])

    def set_document(self, collection: str, doc_id: str, data: dict, *, merge: bool = False) -> None:
        with db_cursor(self._conn_factory, operation="set_document") as (_, cur):
            payload = dict(data)
            if merge:
                cur.execute(
                    "SELECT data FROM documents WHERE collection=%s AND doc_id=%s FOR UPDATE",
                    (collection, str(doc_id)),
                )
                r = fetchone(cur)
                if r:
                    payload = deep_merge(load_json_column(r["data"]), data)

            cur.execute(
                """
                INSERT INTO documents (collection, doc_id, data)
                VALUES (%s, %s, %s)
                ON DUPLICATE KEY UPDATE data=VALUES(data)
                """,
                (collection, str(doc_id), json.dumps(payload)),
            )

    def add_document(self, collection: str, data: dict) -> str:
        doc_id = uuid.uuid4().hex[:20]
        self.set_document(collection, doc_id, data)
        return doc_id

    def query_documents(self, collection: str, field: str, value: Any) -> Sequence[dict]:
        path = f'$."{require_field_name(field)}"'
        with db_cursor(self._conn_factory, operation="query_documents") as (_, cur):
            cur.execute(
                """
                SELECT doc_id, data
                FROM documents
                WHERE collection=%s AND JSON_EXTRACT(data, %s) = CAST(%s AS JSON)
                ORDER BY doc_id
                """,
                (collection, path, json.dumps(value)),
            )
            rows = fetchall(cur)
            return [{**load_json_column(r["data"]), "id": r["doc_id"]} for r in rows]
