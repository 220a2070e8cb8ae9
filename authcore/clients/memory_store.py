"""Process-local credential store for stateless runs (e.g. serverless workers)."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List

from authcore.core.errors import NotFoundError


class ReadWriteLock:
    """Many concurrent readers or one writer; waiting writers block new readers."""

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
                if not self._readers:
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


class MemoryStore:
    """In-memory key/value map guarded by a reader/writer lock."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}
        self._lock = ReadWriteLock()

    def set(self, key: str, value: str) -> None:
        with self._lock.write():
            self._data[key] = value

    def get(self, key: str) -> str:
        with self._lock.read():
            try:
                return self._data[key]
            except KeyError:
                raise NotFoundError(key) from None

    def delete(self, key: str) -> None:
        with self._lock.write():
            self._data.pop(key, None)

    def exists(self, key: str) -> bool:
        with self._lock.read():
            return key in self._data

    def keys(self) -> List[str]:
        with self._lock.read():
            return sorted(self._data)

    def clear(self) -> None:
        with self._lock.write():
            self._data.clear()


__all__ = ["MemoryStore", "ReadWriteLock"]
