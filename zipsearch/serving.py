"""
Serving state: the one index a process serves, behind a reader/writer lock.

Readers (query handlers) never block each other. A writer only holds the
lock for the swap itself; the slow part of a rebuild runs before the lock is
taken, so readers see either the old index or the new one, never a mix.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from .bm25.index import Index

logger = logging.getLogger(__name__)


class ReadWriteLock:
    """Many readers or one writer. Waiting writers hold off new readers."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class ServingState:
    """Holds the served Index for the lifetime of the process"""

    def __init__(self, index: Index, source: Optional[str] = None):
        """
        Args:
            index: Fully built or loaded index
            source: Where the index came from (file path), for reporting
        """
        self._index = index
        self._lock = ReadWriteLock()
        self.source = source

    @contextmanager
    def read(self) -> Iterator[Index]:
        """Yield the current index snapshot; a concurrent swap waits until the block exits"""
        with self._lock.read_locked():
            yield self._index

    @property
    def index(self) -> Index:
        with self.read() as index:
            return index

    def swap(self, new_index: Index, source: Optional[str] = None) -> Index:
        """
        Atomically replace the served index.

        Returns:
            The index that was being served before the swap
        """
        with self._lock.write_locked():
            old_index = self._index
            self._index = new_index
            if source is not None:
                self.source = source

        logger.info(
            f"Swapped served index: {old_index.document_count} → {new_index.document_count} documents"
        )
        return old_index

    def rebuild_and_swap(self, build: Callable[[], Index], source: Optional[str] = None) -> Index:
        """
        Build a new index without holding the lock, then swap it in.

        If build() raises, the current index keeps being served.

        Returns:
            The index that was being served before the swap
        """
        new_index = build()
        return self.swap(new_index, source=source)
