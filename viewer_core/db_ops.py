# viewer_core/db_ops.py
from __future__ import annotations
import logging
import sqlite3
from pathlib import Path
from typing import List, Tuple

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from viewer_core.errors import DatabaseOpenError, QueryFailed, ReadOnlyViolation
from viewer_core.table_ops import ResultTable

logger = logging.getLogger("db_ops")


def make_engine(db_path: str | Path) -> Engine:
    """Read-only engine for a local SQLite file. Never creates a missing file."""
    uri = Path(db_path).expanduser().resolve().as_uri() + "?mode=ro"
    return create_engine(
        "sqlite://",
        creator=lambda: sqlite3.connect(uri, uri=True),
        future=True,
    )


def open_database(db_path: str | Path) -> Tuple[Engine, List[str]]:
    """Engine plus its table names. Bad or missing files raise DatabaseOpenError."""
    engine = make_engine(db_path)
    try:
        # sqlite connects lazily; reading the catalog surfaces bad files now
        tables = list_tables(engine)
    except SQLAlchemyError as e:
        engine.dispose()
        logger.warning("Cannot open %s: %s", db_path, e)
        raise DatabaseOpenError() from e
    logger.info("Opened database %s (%d tables)", db_path, len(tables))
    return engine, tables


def list_tables(engine: Engine) -> List[str]:
    return inspect(engine).get_table_names()


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def select_all_sql(table: str) -> str:
    return f"SELECT * FROM {quote_identifier(table)}"


def is_read_query(sql: str) -> bool:
    # textual prefix test only; a comment or "(" before SELECT is rejected
    return (sql or "").lstrip().lower().startswith("select")


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.hex()
    return str(value)


def run_query(engine: Engine, sql: str) -> ResultTable:
    if not is_read_query(sql):
        logger.warning("Rejected non-SELECT statement: %r", sql[:80])
        raise ReadOnlyViolation()
    try:
        with engine.connect() as conn:
            res = conn.exec_driver_sql(sql)
            header = [str(k) for k in res.keys()]
            rows = [[_cell(v) for v in r] for r in res]
    except SQLAlchemyError as e:
        logger.warning("Query failed: %s", e)
        raise QueryFailed() from e
    if not rows:
        logger.info("Query returned no rows: %r", sql[:80])
        raise QueryFailed()
    logger.info("Query returned %d rows x %d columns", len(rows), len(header))
    return ResultTable(header=header, rows=rows)
