"""
SQLite-backed KeyValue store for blockrand.

Features
--------
- Simple byte-oriented KV: (key BLOB PRIMARY KEY, value BLOB NOT NULL)
- Transactions via context manager: `with kv.transaction(): ...`
  (nested blocks join the outermost one, so an engine call that spans several
  helpers commits or rolls back as one unit)
- Prefix iteration using range scans (lower/upper bound)
- Pragmas tuned for node workloads (WAL, synchronous=NORMAL)

Keys are arbitrary bytes. Prefix iteration relies on lexicographic byte
ordering of BLOBs: to iterate prefix `p` we select
``key >= p AND key < next_prefix(p)``.
"""

from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Generator, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)


# --- Helpers -----------------------------------------------------------------

def _ensure_dir(path: str) -> None:
    if path == ":memory:":
        return
    d = os.path.dirname(os.path.abspath(path))
    if d and not os.path.exists(d):
        os.makedirs(d, exist_ok=True)


def _apply_pragmas(conn: sqlite3.Connection) -> None:
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    conn.execute("PRAGMA temp_store=MEMORY;")


def _init_schema(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS kv (
            key   BLOB PRIMARY KEY,
            value BLOB NOT NULL
        );
        """
    )


def _next_prefix(prefix: bytes) -> Optional[bytes]:
    """
    Smallest byte-string strictly greater than all keys starting with `prefix`,
    or None if no such bound exists (empty or all-0xFF prefix).
    """
    if not prefix:
        return None
    b = bytearray(prefix)
    for i in range(len(b) - 1, -1, -1):
        if b[i] != 0xFF:
            b[i] += 1
            return bytes(b[: i + 1])
    return None


# --- Implementation -----------------------------------------------------------

class SQLiteKeyValue:
    """
    SQLite-backed implementation of the `KeyValue` protocol.

    Example
    -------
    >>> kv = SQLiteKeyValue("/tmp/blockrand.db")
    >>> with kv.transaction():
    ...     kv.put(b"hello", b"world")
    >>> kv.get(b"hello")
    b'world'
    >>> kv.close()
    """

    def __init__(self, path: str) -> None:
        self.path = path
        _ensure_dir(path)
        # isolation_level=None -> autocommit; BEGIN/COMMIT are issued explicitly.
        # Calls are serialized by the engine's host, so the connection may be
        # handed between threads (e.g. an ASGI server's worker thread).
        self._conn = sqlite3.connect(
            path, isolation_level=None, timeout=30.0, check_same_thread=False
        )
        _apply_pragmas(self._conn)
        _init_schema(self._conn)
        self._depth = 0
        logger.debug("opened sqlite store at %s", path)

    def __enter__(self) -> "SQLiteKeyValue":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --- KV API --------------------------------------------------------------

    def put(self, key: bytes, value: bytes) -> None:
        if not isinstance(key, (bytes, bytearray)) or not isinstance(value, (bytes, bytearray)):
            raise TypeError("key and value must be bytes")
        self._conn.execute(
            "INSERT OR REPLACE INTO kv(key, value) VALUES(?, ?)", (bytes(key), bytes(value))
        )

    def get(self, key: bytes) -> Optional[bytes]:
        row = self._conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return bytes(row[0]) if row else None

    def delete(self, key: bytes) -> None:
        self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))

    def has(self, key: bytes) -> bool:
        row = self._conn.execute("SELECT 1 FROM kv WHERE key = ?", (key,)).fetchone()
        return row is not None

    def iter_prefix(self, prefix: bytes) -> Iterable[Tuple[bytes, bytes]]:
        upper = _next_prefix(prefix)
        if upper is not None:
            sql = "SELECT key, value FROM kv WHERE key >= ? AND key < ? ORDER BY key ASC"
            args: Tuple[bytes, ...] = (prefix, upper)
        else:
            sql = "SELECT key, value FROM kv WHERE key >= ? ORDER BY key ASC"
            args = (prefix,)
        rows = self._conn.execute(sql, args).fetchall()
        return iter([(bytes(k), bytes(v)) for k, v in rows if bytes(k).startswith(prefix)])

    # --- Transactions --------------------------------------------------------

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        """
        Begin a write transaction (IMMEDIATE). Commits on success, rolls back on error.
        """
        if self._depth > 0:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        self._conn.execute("BEGIN IMMEDIATE;")
        self._depth = 1
        try:
            yield
        except BaseException:
            self._conn.execute("ROLLBACK;")
            raise
        else:
            self._conn.execute("COMMIT;")
        finally:
            self._depth = 0

    def close(self) -> None:
        self._conn.close()


__all__ = ["SQLiteKeyValue"]
