"""StagingIndex: the ordered list of changes queued for the next commit."""

import logging
import os
from pathlib import Path

from .kv.base import KVStore
from .objects import ObjectStore
from .records import StagingEntry, decode_index, encode_index

logger = logging.getLogger(__name__)

INDEX_KEY = "index"


class StagingIndex:
    """Persisted, append-only list of ``StagingEntry`` values.

    Entries keep their append order and are never deduplicated: adding
    the same path twice stages two entries. Every read-modify-write
    runs under the backend lock.
    """

    def __init__(self, store: KVStore, objects: ObjectStore) -> None:
        self.store = store
        self.objects = objects

    # -- Read operations --

    def load(self) -> list[StagingEntry]:
        """The current entries, oldest first (empty if uninitialized)."""
        raw = self.store.get(INDEX_KEY)
        if raw is None:
            return []
        return decode_index(raw)

    def __len__(self) -> int:
        return len(self.load())

    @property
    def has_changes(self) -> bool:
        """Whether anything is staged."""
        return bool(self.load())

    # -- Write operations --

    def append(self, path: str, digest: str) -> StagingEntry:
        """Append ``(path, digest)`` to the index."""
        entry = StagingEntry(path=path, digest=digest)
        with self.store.lock():
            entries = self.load()
            entries.append(entry)
            self.store.set(INDEX_KEY, encode_index(entries))
        logger.debug("Staged %s -> %s", path, digest)
        return entry

    def clear(self) -> None:
        """Reset the index to empty."""
        with self.store.lock():
            self.store.set(INDEX_KEY, encode_index([]))

    def add(self, path: str | os.PathLike[str]) -> StagingEntry:
        """Read a file, store its content, and stage it.

        Raises:
            OSError: If ``path`` cannot be read.
        """
        content = Path(path).read_bytes()
        digest = self.objects.put(content)
        return self.append(os.fspath(path), digest)
