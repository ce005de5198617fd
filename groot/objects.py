"""Content-addressed object store over a KV store."""

import hashlib
import logging
import re
from collections.abc import Iterator

from .errors import NotFound
from .kv.base import KVStore

logger = logging.getLogger(__name__)

OBJECT_KEY = "objects/%s"
DIGEST_RE = re.compile(r"^[0-9a-f]{40}$")


def content_digest(content: bytes) -> str:
    """SHA-1 hex digest of the exact bytes (40 chars)."""
    return hashlib.sha1(content).hexdigest()


def is_digest(value: str) -> bool:
    return bool(DIGEST_RE.match(value))


class ObjectStore:
    """Blobs and serialized commits keyed by their own digest.

    Append-only: an object is written once and never changed. Writing
    content that is already present is a no-op.
    """

    def __init__(self, store: KVStore) -> None:
        self.store = store

    def put(self, content: bytes) -> str:
        """Store ``content`` and return its digest."""
        if not isinstance(content, bytes):
            raise TypeError(f"Expected bytes, got {type(content).__name__}")
        digest = content_digest(content)
        key = OBJECT_KEY % digest
        if key in self.store:
            logger.debug("Object %s already present", digest)
        else:
            self.store.set(key, content)
            logger.debug("Wrote object %s (%d bytes)", digest, len(content))
        return digest

    def get(self, digest: str) -> bytes:
        """Return the stored content for ``digest``.

        Raises:
            NotFound: If ``digest`` is malformed or unknown.
        """
        if not is_digest(digest):
            raise NotFound(f"Not a valid object digest: {digest!r}")
        content = self.store.get(OBJECT_KEY % digest)
        if content is None:
            raise NotFound(f"Object {digest} not found")
        return content

    def __contains__(self, digest: object) -> bool:
        if not isinstance(digest, str) or not is_digest(digest):
            return False
        return OBJECT_KEY % digest in self.store

    def __iter__(self) -> Iterator[str]:
        prefix = OBJECT_KEY % ""
        for key in self.store.keys():
            if key.startswith(prefix):
                digest = key[len(prefix):]
                if is_digest(digest):
                    yield digest

    def __len__(self) -> int:
        return sum(1 for _ in self)
