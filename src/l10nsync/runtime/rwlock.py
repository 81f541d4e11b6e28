"""Readers-writer lock guarding the bundle cache slot table.

Allows:
- Multiple concurrent readers (slot lookups from formatting callers)
- Exclusive writer access (slot creation by load workers)
- Writer preference, so a burst of lookups cannot starve slot creation
- Reentrant reads (the same thread may nest read() calls)

Read-to-write upgrades and nested writes are rejected with RuntimeError;
BundleCache releases its read lock before taking the write lock
(double-checked locking), so neither is needed.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

__all__ = ["RWLock"]

class RWLock:
    """Readers-writer lock with writer preference.

    Example:
        >>> lock = RWLock()
        >>> with lock.read():
        ...     pass
        >>> with lock.write():
        ...     pass
    """

    __slots__ = ("_condition", "_pending_writers", "_readers", "_writer")

    def __init__(self) -> None:
        self._condition = threading.Condition(threading.Lock())
        # thread id -> nested read depth
        self._readers: dict[int, int] = {}
        self._writer: int | None = None
        self._pending_writers = 0

    def holders(self) -> tuple[int, bool]:
        """Snapshot of (reading thread count, write lock held)."""
        with self._condition:
            return len(self._readers), self._writer is not None

    @contextmanager
    def read(self) -> Generator[None]:
        """Hold the lock in shared mode for the duration of the block.

        Raises:
            RuntimeError: If the calling thread holds the write lock
        """
        me = threading.get_ident()
        with self._condition:
            if self._writer == me:
                msg = "Cannot take a read lock while holding the write lock"
                raise RuntimeError(msg)
            if me not in self._readers:
                self._condition.wait_for(
                    lambda: self._writer is None and not self._pending_writers
                )
            self._readers[me] = self._readers.get(me, 0) + 1
        try:
            yield
        finally:
            with self._condition:
                depth = self._readers.pop(me) - 1
                if depth:
                    self._readers[me] = depth
                elif not self._readers:
                    self._condition.notify_all()

    @contextmanager
    def write(self) -> Generator[None]:
        """Hold the lock exclusively for the duration of the block.

        Raises:
            RuntimeError: If the calling thread already holds a read or write lock
        """
        me = threading.get_ident()
        with self._condition:
            if me in self._readers:
                msg = "Cannot upgrade a read lock to the write lock"
                raise RuntimeError(msg)
            if self._writer == me:
                msg = "Write lock is not reentrant: already holding it"
                raise RuntimeError(msg)
            self._pending_writers += 1
            try:
                self._condition.wait_for(lambda: self._writer is None and not self._readers)
                self._writer = me
            finally:
                self._pending_writers -= 1
                self._condition.notify_all()
        try:
            yield
        finally:
            with self._condition:
                self._writer = None
                self._condition.notify_all()
