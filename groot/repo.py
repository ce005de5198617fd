"""Repository handle and factory function."""

import logging
import os
from typing import Callable, Iterator, Literal

from .errors import AlreadyInitialized, NotInitialized
from .graph import HEAD_KEY, CommitGraph, utc_timestamp
from .history import CommitReport, History
from .kv.base import KVStore
from .kv.memory import Memory
from .objects import ObjectStore
from .records import Commit, CommitSummary, StagingEntry, encode_index
from .staging import INDEX_KEY, StagingIndex

logger = logging.getLogger(__name__)

DEFAULT_ROOT = ".groot"


class Repository:
    """One backend with its object store, staging index, graph and history.

    Construct once per invocation and pass it to whatever needs it.
    """

    def __init__(
        self,
        store: KVStore | None = None,
        *,
        clock: Callable[[], str] = utc_timestamp,
    ) -> None:
        if store is None:
            store = Memory()
        self.store = store
        self.objects = ObjectStore(store)
        self.index = StagingIndex(store, self.objects)
        self.graph = CommitGraph(store, self.objects, self.index, clock=clock)
        self.history = History(self.objects, self.graph)

    @property
    def initialized(self) -> bool:
        return HEAD_KEY in self.store and INDEX_KEY in self.store

    def init(self) -> None:
        """Create the HEAD and index entries if missing.

        Raises:
            AlreadyInitialized: If both already existed. Nothing is
                changed in that case.
        """
        with self.store.lock():
            if self.initialized:
                raise AlreadyInitialized("Repository is already initialized")
            self.store.cas(HEAD_KEY, b"", expected=None)
            self.store.cas(INDEX_KEY, encode_index([]), expected=None)
        logger.info("Initialized repository")

    def require_initialized(self) -> None:
        if not self.initialized:
            raise NotInitialized("Not a groot repository (run 'groot init' first)")

    # -- Pass-through --

    def add(self, path: str | os.PathLike[str]) -> StagingEntry:
        return self.index.add(path)

    def commit(self, message: str) -> str:
        return self.graph.commit(message)

    def read_commit(self, digest: str) -> Commit:
        return self.graph.read_commit(digest)

    @property
    def head(self) -> str | None:
        return self.graph.current_head()

    def log(self, *, limit: int | None = None) -> Iterator[CommitSummary]:
        return self.history.log(limit=limit)

    def show(self, digest: str) -> CommitReport:
        return self.history.show_commit(digest)


def repository(
    kind: Literal["files", "disk", "memory"] = "files",
    *,
    path: str | os.PathLike[str] | None = None,
    clock: Callable[[], str] = utc_timestamp,
) -> Repository:
    """Create a Repository over the chosen backend.

    Args:
        kind: ``"files"`` (default) for the plain-file layout,
            ``"disk"`` for a diskcache database, or ``"memory"``.
        path: Storage root (default ``.groot`` in the current
            directory). Ignored for ``"memory"``.
        clock: Timestamp source for new commits.

    Returns:
        A ``Repository`` instance. The files backend creates nothing
        until the first write.
    """
    root = os.fspath(path) if path is not None else DEFAULT_ROOT
    if kind == "memory":
        backend: KVStore = Memory()
    elif kind == "files":
        from .kv.files import Files

        backend = Files(root)
    elif kind == "disk":
        from .kv.disk import Disk

        backend = Disk(root)
    else:
        raise ValueError(f"Unknown kind: {kind!r}")
    return Repository(backend, clock=clock)
