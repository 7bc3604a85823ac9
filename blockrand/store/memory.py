"""
In-memory KeyValue store with journaled transactions.

Writes inside `transaction()` record the previous value of every touched key
the first time it is written; an exception inside the block replays that
journal so the store ends up exactly as it was before the block. Nested
`transaction()` blocks join the outermost one.

Useful for unit tests, the CLI simulator and single-process hosts.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Generator, Iterable, Optional, Tuple

_MISSING = object()


class MemoryKeyValue:
    """Dict-backed implementation of the `KeyValue` protocol."""

    def __init__(self) -> None:
        self._d: Dict[bytes, bytes] = {}
        self._journal: Optional[Dict[bytes, object]] = None
        self._depth = 0

    # --- KV API --------------------------------------------------------------

    def get(self, key: bytes) -> Optional[bytes]:
        return self._d.get(key)

    def put(self, key: bytes, value: bytes) -> None:
        if not isinstance(key, (bytes, bytearray)) or not isinstance(value, (bytes, bytearray)):
            raise TypeError("key and value must be bytes")
        self._remember(bytes(key))
        self._d[bytes(key)] = bytes(value)

    def delete(self, key: bytes) -> None:
        if key in self._d:
            self._remember(key)
            del self._d[key]

    def has(self, key: bytes) -> bool:
        return key in self._d

    def iter_prefix(self, prefix: bytes) -> Iterable[Tuple[bytes, bytes]]:
        # Snapshot so callers may mutate while iterating.
        items = sorted((k, v) for k, v in self._d.items() if k.startswith(prefix))
        return iter(items)

    # --- Transactions --------------------------------------------------------

    def _remember(self, key: bytes) -> None:
        if self._journal is not None and key not in self._journal:
            self._journal[key] = self._d.get(key, _MISSING)

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        if self._depth > 0:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        self._journal = {}
        self._depth = 1
        try:
            yield
        except BaseException:
            for key, prev in self._journal.items():
                if prev is _MISSING:
                    self._d.pop(key, None)
                else:
                    self._d[key] = prev  # type: ignore[assignment]
            raise
        finally:
            self._journal = None
            self._depth = 0

    def close(self) -> None:
        pass


__all__ = ["MemoryKeyValue"]
