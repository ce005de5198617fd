"""groot: a minimal content-addressed version control engine."""

from .diff import DiffSegment, diff_lines
from .errors import (
    AlreadyInitialized,
    ConcurrencyError,
    CorruptData,
    EmptyMessage,
    GrootError,
    NotFound,
    NotInitialized,
)
from .graph import CommitGraph
from .history import CommitReport, FileReport, History
from .kv.base import KVStore
from .objects import ObjectStore, content_digest
from .records import Commit, CommitSummary, StagingEntry
from .repo import Repository, repository
from .staging import StagingIndex

__all__ = [
    "AlreadyInitialized",
    "Commit",
    "CommitGraph",
    "CommitReport",
    "CommitSummary",
    "ConcurrencyError",
    "CorruptData",
    "DiffSegment",
    "EmptyMessage",
    "FileReport",
    "GrootError",
    "History",
    "KVStore",
    "NotFound",
    "NotInitialized",
    "ObjectStore",
    "Repository",
    "StagingEntry",
    "StagingIndex",
    "content_digest",
    "diff_lines",
    "repository",
]
