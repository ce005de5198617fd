"""Directory-backed KV store: one plain file per key.

Keys are relative POSIX paths under the root directory, so the
repository layout is readable with ordinary tools::

    <root>/HEAD
    <root>/index
    <root>/objects/<digest>

Writes go to a temporary sibling and are moved into place with
``os.replace``, so readers never observe a half-written value.
Cross-process exclusion uses ``fcntl.flock`` on ``<root>/lock``.
"""

import fcntl
import logging
import os
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path, PurePosixPath
from typing import IO, Iterable

from .base import KVStore

logger = logging.getLogger(__name__)

LOCK_NAME = "lock"
TMP_PREFIX = ".tmp-"


class Files(KVStore):
    """KV store backed by a directory of plain files."""

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self.root = Path(directory)
        self._thread_lock = threading.RLock()
        self._lock_file: IO[bytes] | None = None
        self._depth = 0

    def _path(self, key: str) -> Path:
        parts = PurePosixPath(key).parts
        if not parts or key.startswith("/") or ".." in parts:
            raise ValueError(f"Invalid key: {key!r}")
        return self.root.joinpath(*parts)

    def get(self, key: str) -> bytes | None:
        try:
            return self._path(key).read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            return None

    def set(self, key: str, value: bytes) -> None:
        if not isinstance(value, bytes):
            raise TypeError(f"Expected bytes, got {type(value).__name__}")
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=TMP_PREFIX, dir=path.parent)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(value)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def keys(self) -> Iterable[str]:
        if not self.root.is_dir():
            return
        for dirpath, _, filenames in os.walk(self.root):
            rel_dir = Path(dirpath).relative_to(self.root)
            for name in sorted(filenames):
                if name.startswith(TMP_PREFIX):
                    continue
                if rel_dir == Path(".") and name == LOCK_NAME:
                    continue
                yield (rel_dir / name).as_posix()

    def __contains__(self, key: str) -> bool:
        try:
            return self._path(key).is_file()
        except ValueError:
            return False

    def cas(self, key: str, value: bytes, expected: bytes | None) -> bool:
        if not isinstance(value, bytes):
            raise TypeError(f"Expected bytes, got {type(value).__name__}")
        with self.lock():
            current = self.get(key)
            if current == expected:
                self.set(key, value)
                return True
            return False

    @contextmanager
    def lock(self) -> Iterator[None]:
        """Hold ``flock(LOCK_EX)`` on the lock file.

        Re-entrant within one instance; the OS lock is taken on the
        outermost entry and released on the matching exit.
        """
        with self._thread_lock:
            if self._depth == 0:
                self.root.mkdir(parents=True, exist_ok=True)
                fh = open(self.root / LOCK_NAME, "ab")
                try:
                    fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
                except BaseException:
                    fh.close()
                    raise
                self._lock_file = fh
                logger.debug("Acquired lock: %s", self.root / LOCK_NAME)
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
                if self._depth == 0 and self._lock_file is not None:
                    fcntl.flock(self._lock_file.fileno(), fcntl.LOCK_UN)
                    self._lock_file.close()
                    self._lock_file = None
                    logger.debug("Released lock: %s", self.root / LOCK_NAME)
