from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional, Sequence

from zmes_parser.ingest.errors import MissingSchemaError, SchemaError


class ZmesDatabase:
    """
    Read-only query interface over an in-memory copy of a .zmes SQLite snapshot.

    The whole file is deserialized into memory (no streaming). Any SQLite error
    raised by a query is reported as MissingSchemaError: for a read-only SELECT on
    a valid database this means a required table or column does not exist.

    Use as a context manager; close() is idempotent.
    """

    def __init__(self, connection: sqlite3.Connection):
        self._connection: Optional[sqlite3.Connection] = connection
        self._connection.row_factory = sqlite3.Row

    @property
    def closed(self) -> bool:
        return self._connection is None

    def _conn(self) -> sqlite3.Connection:
        if self._connection is None:
            raise RuntimeError("Database is closed.")
        return self._connection

    def select_all(self, query: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        try:
            rows = self._conn().execute(query, tuple(params)).fetchall()
        except sqlite3.DatabaseError as e:
            raise MissingSchemaError(f"Query failed ({e}): {_first_line(query)}") from e
        return [dict(r) for r in rows]

    def select_scalar(self, query: str, params: Sequence[Any] = ()) -> Any:
        try:
            row = self._conn().execute(query, tuple(params)).fetchone()
        except sqlite3.DatabaseError as e:
            raise MissingSchemaError(f"Query failed ({e}): {_first_line(query)}") from e
        if row is None:
            return None
        return row[0]

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def __enter__(self) -> "ZmesDatabase":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False


def _first_line(query: str) -> str:
    return " ".join(query.split())[:120]


def open_database(data: bytes) -> ZmesDatabase:
    """
    Deserialize raw .zmes bytes into an in-memory SQLite database.

    Raises SchemaError if the bytes are not an SQLite database.
    """
    conn = sqlite3.connect(":memory:")
    try:
        conn.deserialize(bytes(data))
        # deserialize() accepts any bytes; the header is only checked on first read.
        conn.execute("SELECT count(*) FROM sqlite_master").fetchone()
    except sqlite3.DatabaseError as e:
        conn.close()
        raise SchemaError(f"Not an SQLite database ({e}).") from e
    return ZmesDatabase(conn)
