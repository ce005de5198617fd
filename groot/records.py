"""Typed records and their deterministic byte encodings.

Commits and the staging index are stored as compact JSON with sorted
keys, so equal records always encode to equal bytes (and therefore to
equal digests).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Iterable

from .errors import CorruptData


@dataclass(frozen=True)
class StagingEntry:
    """A (path, digest) pair queued for the next commit."""

    path: str
    digest: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "digest": self.digest}

    @classmethod
    def from_dict(cls, raw: Any) -> StagingEntry:
        if not isinstance(raw, dict):
            raise CorruptData(f"Expected an entry object, got {type(raw).__name__}")
        path = raw.get("path")
        digest = raw.get("digest")
        if not isinstance(path, str) or not isinstance(digest, str):
            raise CorruptData(f"Malformed staging entry: {raw!r}")
        return cls(path=path, digest=digest)


@dataclass(frozen=True)
class Commit:
    """An immutable snapshot of the staging index."""

    timestamp: str
    message: str
    files: tuple[StagingEntry, ...]
    parent: str | None = None

    def find(self, path: str) -> StagingEntry | None:
        """First entry for ``path`` in insertion order, or None."""
        for entry in self.files:
            if entry.path == path:
                return entry
        return None


@dataclass(frozen=True)
class CommitSummary:
    """One line of history: a commit's digest, time and message."""

    digest: str
    timestamp: str
    message: str


def _dumps(value: Any) -> bytes:
    return json.dumps(value, sort_keys=True, separators=(",", ":")).encode("utf-8")


def _loads(raw: bytes, what: str) -> Any:
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CorruptData(f"{what} is not valid JSON: {e}") from e


def encode_commit(commit: Commit) -> bytes:
    return _dumps(
        {
            "timestamp": commit.timestamp,
            "message": commit.message,
            "files": [entry.to_dict() for entry in commit.files],
            "parent": commit.parent,
        }
    )


def decode_commit(raw: bytes) -> Commit:
    data = _loads(raw, "Commit")
    if not isinstance(data, dict):
        raise CorruptData(f"Expected a commit object, got {type(data).__name__}")
    timestamp = data.get("timestamp")
    message = data.get("message")
    files = data.get("files")
    parent = data.get("parent")
    if not isinstance(timestamp, str) or not isinstance(message, str):
        raise CorruptData("Commit is missing timestamp or message")
    if not isinstance(files, list):
        raise CorruptData("Commit files must be a list")
    if parent is not None and not isinstance(parent, str):
        raise CorruptData("Commit parent must be a digest or null")
    return Commit(
        timestamp=timestamp,
        message=message,
        files=tuple(StagingEntry.from_dict(item) for item in files),
        # An empty parent string means "no parent", as HEAD does.
        parent=parent or None,
    )


def encode_index(entries: Iterable[StagingEntry]) -> bytes:
    return _dumps([entry.to_dict() for entry in entries])


def decode_index(raw: bytes) -> list[StagingEntry]:
    if not raw.strip():
        return []
    data = _loads(raw, "Staging index")
    if not isinstance(data, list):
        raise CorruptData(f"Expected an index list, got {type(data).__name__}")
    return [StagingEntry.from_dict(item) for item in data]
