from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import BackendUnreachableError, PermissionDeniedError
from ..logging_config import get_logger
from .connection import DatabaseConnection

logger = get_logger(__name__)

_ACCESS_DENIED_CODES = {
    errorcode.ER_ACCESS_DENIED_ERROR,
    errorcode.ER_DBACCESS_DENIED_ERROR,
    errorcode.ER_TABLEACCESS_DENIED_ERROR,
    errorcode.ER_SPECIFIC_ACCESS_DENIED_ERROR,
}


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Map connector failures onto the backend error taxonomy."""
    try:
        yield
    except mysql.connector.Error as e:
        logger.error("Backend %s failed: %s", operation, e)
        if getattr(e, "errno", None) in _ACCESS_DENIED_CODES:
            raise PermissionDeniedError("You do not have permission to perform this operation.") from e
        if isinstance(e, (mysql.connector.errors.InterfaceError, mysql.connector.errors.OperationalError)):
            raise BackendUnreachableError("The server could not be reached. Please try again later.") from e
        raise


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, operation: str, dictionary: bool = True):
    with translate_errors(operation):
        conn = conn_factory.connect()
        try:
            cur = conn.cursor(dictionary=dictionary)
            try:
                yield conn, cur
                conn.commit()
            finally:
                cur.close()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def load_json_column(value: Any) -> dict:
    """Decode a JSON column; the connector may hand back str, bytes or dict."""
    if value is None:
        return {}
    if isinstance(value, dict):
        return value
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    data = json.loads(value)
    return data if isinstance(data, dict) else {}
