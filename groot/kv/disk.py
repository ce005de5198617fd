"""Disk-backed KV store using diskcache."""

import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterable, cast

from .base import KVStore

if TYPE_CHECKING:
    from diskcache import Cache as DiskCache
    from diskcache import RLock

LOCK_KEY = "__lock__"


class Disk(KVStore):
    """KV store backed by diskcache (SQLite + mmap).

    Eviction is disabled: objects referenced by commits must never be
    culled. The cache is opened on the first write or lock, so reading
    a missing directory does not create one.
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self.directory = os.fspath(directory)
        self._store: "DiskCache | None" = None
        self._lock: "RLock | None" = None

    @property
    def store(self) -> "DiskCache":
        if self._store is None:
            from diskcache import Cache as DiskCache

            self._store = DiskCache(self.directory, eviction_policy="none")
        return self._store

    def _exists(self) -> bool:
        return self._store is not None or os.path.isdir(self.directory)

    def get(self, key: str) -> bytes | None:
        if not self._exists():
            return None
        return cast(bytes | None, self.store.get(key))

    def set(self, key: str, value: bytes) -> None:
        if not isinstance(value, bytes):
            raise TypeError(f"Expected bytes, got {type(value).__name__}")
        self.store[key] = value

    def keys(self) -> Iterable[str]:
        if not self._exists():
            return
        for key in self.store.iterkeys():
            if key != LOCK_KEY:
                yield str(key)

    def __contains__(self, key: str) -> bool:
        if key == LOCK_KEY or not self._exists():
            return False
        return key in self.store

    def cas(self, key: str, value: bytes, expected: bytes | None) -> bool:
        if not isinstance(value, bytes):
            raise TypeError(f"Expected bytes, got {type(value).__name__}")
        with self.store.transact():
            current = cast(bytes | None, self.store.get(key))
            if current == expected:
                self.store[key] = value
                return True
            return False

    @contextmanager
    def lock(self) -> Iterator[None]:
        if self._lock is None:
            from diskcache import RLock

            self._lock = RLock(self.store, LOCK_KEY)
        with self._lock:
            yield

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
            self._store = None
            self._lock = None
