"""Line-level text diff as a sequence of tagged segments."""

from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import Literal

SegmentKind = Literal["unchanged", "added", "removed"]


@dataclass(frozen=True)
class DiffSegment:
    """A run of consecutive lines sharing one kind."""

    kind: SegmentKind
    text: str

    @property
    def lines(self) -> list[str]:
        return self.text.splitlines()


def diff_lines(old: str, new: str) -> list[DiffSegment]:
    """Diff two texts line by line.

    Lines keep their terminators, so a missing trailing newline counts
    as a change. Within a replaced block the removed run comes first.
    Concatenating the unchanged and removed segments yields ``old``;
    the unchanged and added segments yield ``new``.
    """
    a = old.splitlines(keepends=True)
    b = new.splitlines(keepends=True)
    matcher = SequenceMatcher(None, a, b, autojunk=False)

    segments: list[DiffSegment] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            segments.append(DiffSegment("unchanged", "".join(a[i1:i2])))
            continue
        if tag in ("replace", "delete"):
            segments.append(DiffSegment("removed", "".join(a[i1:i2])))
        if tag in ("replace", "insert"):
            segments.append(DiffSegment("added", "".join(b[j1:j2])))
    return segments
