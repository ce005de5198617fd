"""Read-only traversal of the commit graph and per-commit diff reports."""

import logging
from dataclasses import dataclass
from typing import Iterator, Literal

from .diff import DiffSegment, diff_lines
from .errors import CorruptData
from .graph import CommitGraph
from .objects import ObjectStore
from .records import Commit, CommitSummary

logger = logging.getLogger(__name__)

FileStatus = Literal["initial", "new", "diff"]


@dataclass(frozen=True)
class FileReport:
    """How one file in a commit relates to its parent commit.

    ``status`` is ``"initial"`` when the commit has no parent, ``"new"``
    when the path is absent from the parent, and ``"diff"`` when it was
    compared against ``parent_digest``.
    """

    path: str
    digest: str
    content: str
    status: FileStatus
    segments: tuple[DiffSegment, ...] = ()
    parent_digest: str | None = None

    @property
    def is_new(self) -> bool:
        return self.status != "diff"

    @property
    def changed(self) -> bool:
        return any(s.kind != "unchanged" for s in self.segments)


@dataclass(frozen=True)
class CommitReport:
    """The per-file report for one commit."""

    digest: str
    commit: Commit
    files: tuple[FileReport, ...]


def _decode_text(content: bytes) -> str:
    return content.decode("utf-8", errors="replace")


class History:
    """Walks commits from HEAD and diffs commits against their parents.

    Never mutates the object store or HEAD.
    """

    def __init__(self, objects: ObjectStore, graph: CommitGraph) -> None:
        self.objects = objects
        self.graph = graph

    def log(
        self, start: str | None = None, *, limit: int | None = None
    ) -> Iterator[CommitSummary]:
        """Yield commit summaries from newest to oldest.

        Args:
            start: Commit to start from (default: HEAD).
            limit: Stop after this many summaries.

        Raises:
            CorruptData: If a commit is reached twice (a cycle).
        """
        current = start if start is not None else self.graph.current_head()
        seen: set[str] = set()
        while current is not None:
            if limit is not None and len(seen) >= limit:
                return
            if current in seen:
                raise CorruptData(f"Commit history revisits {current}")
            seen.add(current)
            commit = self.graph.read_commit(current)
            yield CommitSummary(
                digest=current,
                timestamp=commit.timestamp,
                message=commit.message,
            )
            current = commit.parent

    def show_commit(self, digest: str) -> CommitReport:
        """Report every file in a commit against the parent commit.

        When a path appears more than once in the parent, the first
        entry in insertion order is the baseline.

        Raises:
            NotFound: If ``digest`` (or an object it references) is missing.
            CorruptData: If ``digest`` is not a commit.
        """
        commit = self.graph.read_commit(digest)
        parent = (
            self.graph.read_commit(commit.parent)
            if commit.parent is not None
            else None
        )

        reports: list[FileReport] = []
        for entry in commit.files:
            content = _decode_text(self.objects.get(entry.digest))
            if parent is None:
                reports.append(
                    FileReport(entry.path, entry.digest, content, "initial")
                )
                continue
            baseline = parent.find(entry.path)
            if baseline is None:
                reports.append(FileReport(entry.path, entry.digest, content, "new"))
                continue
            old = _decode_text(self.objects.get(baseline.digest))
            reports.append(
                FileReport(
                    entry.path,
                    entry.digest,
                    content,
                    "diff",
                    segments=tuple(diff_lines(old, content)),
                    parent_digest=baseline.digest,
                )
            )
        logger.debug("Built report for %s (%d files)", digest, len(reports))
        return CommitReport(digest=digest, commit=commit, files=tuple(reports))
