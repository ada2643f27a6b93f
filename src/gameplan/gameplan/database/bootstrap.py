from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

import mysql.connector

from ..logging_config import get_logger
from .connection import DBConfig

logger = get_logger(__name__)


def _strip_create_db_and_use(sql: str) -> str:
    # The target database comes from DB_CONFIG, not from the schema file.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Schema statements carry no string literals with ';', a plain split is enough.
    lines = [line for line in sql.splitlines() if not line.strip().startswith("--")]
    for stmt in "\n".join(lines).split(";"):
        stmt = stmt.strip()
        if stmt:
            yield stmt


def _server_connect(config: DBConfig, *, with_database: bool):
    kwargs = dict(host=config.host, port=int(config.port), user=config.user, password=config.password, use_pure=True)
    if with_database:
        kwargs["database"] = config.database
    return mysql.connector.connect(**kwargs)


def ensure_database_exists(config: DBConfig) -> None:
    conn = _server_connect(config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(config: DBConfig, *, schema_path: str | Path) -> None:
    """Create the documents/accounts tables (idempotent: CREATE IF NOT EXISTS)."""
    ensure_database_exists(config)

    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))
    conn = _server_connect(config, with_database=True)
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied to %s", config.database)


def list_tables(config: DBConfig) -> list[str]:
    conn = _server_connect(config, with_database=True)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
