"""Thread-safe holder of a collector's latest published snapshot."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterable, Iterator

from .base import MetricRecord, Snapshot


class ReadWriteLock:
    """Many concurrent readers or one writer.

    Writers are preferred: once a writer is waiting, new readers queue
    behind it so a steady stream of reads cannot starve publication.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
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
    def write(self) -> Iterator[None]:
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


class SnapshotStore:
    """Latest complete metric sequence of one collector.

    :meth:`publish` swaps the whole sequence under the write lock; readers
    get the immutable tuple that was current when they asked.
    """

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._records: Snapshot = ()

    def metrics(self) -> Snapshot:
        with self._lock.read():
            return self._records

    def publish(self, records: Iterable[MetricRecord]) -> None:
        snapshot = tuple(records)
        with self._lock.write():
            self._records = snapshot
