"""
blockrand.store
===============

Package marker and light abstractions for the storage backends behind the
engine's durable state (seed registry, captured block hashes, recovery queue,
pending slot, counter and roles).

Backends are pluggable (in-memory, SQLite). Higher layers depend only on the
`KeyValue` protocol below; `open_store(uri)` picks a concrete backend.

Only bytes go in/out; callers perform their own encoding.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Iterable, Optional, Protocol, Tuple


class KeyValue(Protocol):
    """Minimal byte-oriented KV interface with atomic write batches.

    Namespaces are handled by the caller via prefixed keys
    (see `blockrand.store.kv.RandomnessBuckets`).
    """

    def get(self, key: bytes) -> Optional[bytes]:
        """Return value for key, or None if missing."""
        ...

    def put(self, key: bytes, value: bytes) -> None:
        """Insert or replace key with value."""
        ...

    def delete(self, key: bytes) -> None:
        """Remove key if present (no-op if absent)."""
        ...

    def has(self, key: bytes) -> bool:
        """Return True if key exists."""
        ...

    def iter_prefix(self, prefix: bytes) -> Iterable[Tuple[bytes, bytes]]:
        """Yield (key, value) pairs whose keys start with prefix."""
        ...

    def transaction(self) -> AbstractContextManager[None]:
        """Commit every write in the block on success, discard them all on error."""
        ...

    def close(self) -> None:
        ...


def open_store(uri: str) -> KeyValue:
    """
    Open a backend from a URI:

      - ``memory://``            → MemoryKeyValue (process-local)
      - ``sqlite:///path/db``    → SQLiteKeyValue at ``/path/db``
      - ``sqlite://relative.db`` → SQLiteKeyValue at ``relative.db``
    """
    if uri.startswith("memory://"):
        from .memory import MemoryKeyValue

        return MemoryKeyValue()
    if uri.startswith("sqlite://"):
        from .sqlite import SQLiteKeyValue

        path = uri[len("sqlite://"):]
        if not path:
            raise ValueError("sqlite:// URI needs a database path")
        return SQLiteKeyValue(path)
    raise ValueError(f"unsupported storage URI: {uri!r}")


__all__ = [
    "KeyValue",
    "open_store",
]
