"""CommitGraph: immutable commits chained by parent digest, plus HEAD."""

import logging
from datetime import datetime, timezone
from typing import Callable

from .errors import ConcurrencyError, CorruptData, EmptyMessage, NotFound
from .kv.base import KVStore
from .objects import ObjectStore
from .records import Commit, decode_commit, encode_commit
from .staging import StagingIndex

logger = logging.getLogger(__name__)

HEAD_KEY = "HEAD"


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


def _parse_head(head_bytes: bytes | None) -> str | None:
    if head_bytes is None:
        return None
    head = head_bytes.decode("utf-8", errors="replace").strip()
    return head or None


class CommitGraph:
    """Builds commits from the staging index and tracks HEAD.

    HEAD only moves forward: each commit's parent is the HEAD observed
    under the lock immediately before it was written.
    """

    def __init__(
        self,
        store: KVStore,
        objects: ObjectStore,
        index: StagingIndex,
        *,
        clock: Callable[[], str] = utc_timestamp,
    ) -> None:
        self.store = store
        self.objects = objects
        self.index = index
        self._clock = clock

    def current_head(self) -> str | None:
        """The most recent commit digest, or None before the first commit."""
        return _parse_head(self.store.get(HEAD_KEY))

    def commit(self, message: str) -> str:
        """Snapshot the staging index into a new commit.

        Writes the commit object, advances HEAD and clears the index
        as one unit: if the index cannot be cleared, HEAD is restored.

        Returns:
            The new commit digest.

        Raises:
            EmptyMessage: If ``message`` is blank.
            NotFound: If a staged blob is missing from the object store.
            ConcurrencyError: If HEAD moved during the commit.
        """
        if not message or not message.strip():
            raise EmptyMessage("Commit message must not be empty")

        with self.store.lock():
            head_bytes = self.store.get(HEAD_KEY)
            parent = _parse_head(head_bytes)
            files = tuple(self.index.load())
            for entry in files:
                if entry.digest not in self.objects:
                    raise NotFound(
                        f"Staged object {entry.digest} for {entry.path} is missing"
                    )

            commit = Commit(
                timestamp=self._clock(),
                message=message,
                files=files,
                parent=parent,
            )
            digest = self.objects.put(encode_commit(commit))

            if not self.store.cas(HEAD_KEY, digest.encode("utf-8"), expected=head_bytes):
                raise ConcurrencyError(f"HEAD changed from {parent}. Retry the commit.")
            try:
                self.index.clear()
            except Exception:
                self.store.set(HEAD_KEY, head_bytes if head_bytes is not None else b"")
                logger.error("Failed to clear index; HEAD restored to %s", parent)
                raise

        logger.info("Committed %s (%d files, parent %s)", digest, len(files), parent)
        return digest

    def read_commit(self, digest: str) -> Commit:
        """Load the commit stored at ``digest``.

        Raises:
            NotFound: If no object exists at ``digest``.
            CorruptData: If the object is not a commit.
        """
        raw = self.objects.get(digest)
        try:
            return decode_commit(raw)
        except CorruptData as e:
            raise CorruptData(f"Object {digest} is not a commit: {e}") from e
