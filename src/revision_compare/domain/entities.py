"""Domain entities — read-only projections of remote repository state.

Every call to the engine rebuilds these from scratch; nothing here is cached
or persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class FileStatus(str, Enum):
    """Change classification reported by the compare API for a single file."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    RENAMED = "renamed"
    COPIED = "copied"
    CHANGED = "changed"
    UNCHANGED = "unchanged"


class ContentType(str, Enum):
    """Kind of entry in a directory listing."""

    FILE = "file"
    DIR = "dir"
    SYMLINK = "symlink"
    SUBMODULE = "submodule"


class DiffSource(str, Enum):
    """Where the lines of a :class:`FileDiff` came from."""

    INLINE = "inline"  # patch shipped with the compare response
    SYNTHESIZED = "synthesized"  # rebuilt from two file snapshots


@dataclass(frozen=True, slots=True)
class RateLimitStatus:
    """Quota metadata taken from the most recent response."""

    remaining: int = 0
    reset_epoch_seconds: int = 0

    @property
    def reset_at(self) -> datetime | None:
        """The reset instant in UTC, or ``None`` when unknown."""
        if self.reset_epoch_seconds <= 0:
            return None
        try:
            return datetime.fromtimestamp(self.reset_epoch_seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None


@dataclass(frozen=True, slots=True)
class ApiResponse:
    """A decoded successful response plus its rate-limit metadata."""

    body: Any
    rate_limit: RateLimitStatus


@dataclass(frozen=True, slots=True)
class Signature:
    """Author or committer identity attached to a commit."""

    name: str
    email: str
    timestamp: str


@dataclass(frozen=True, slots=True)
class Commit:
    """A single commit, identified by its hash."""

    hash: str
    message: str
    author: Signature
    committer: Signature

    @property
    def short_hash(self) -> str:
        return self.hash[:7]

    @property
    def subject(self) -> str:
        """First line of the commit message."""
        return self.message.split("\n", 1)[0]


@dataclass(frozen=True, slots=True)
class Branch:
    name: str


@dataclass(frozen=True, slots=True)
class Tag:
    name: str
    commit_hash: str


@dataclass(frozen=True, slots=True)
class BranchGroup:
    """A branch name split into ``locale`` and ``version`` at the first ``-``."""

    locale: str
    version: str


@dataclass(frozen=True, slots=True)
class ContentItem:
    """One entry of a directory listing."""

    type: ContentType
    name: str
    path: str
    size: int | None = None


@dataclass(frozen=True, slots=True)
class FileContent:
    """A decoded file snapshot."""

    content: str
    size: int | None = None
    is_binary: bool = False


@dataclass(frozen=True, slots=True)
class ChangedFile:
    """File-level statistics for one path in a range comparison.

    ``changes == additions + deletions`` is trusted from the API and not
    re-validated.  ``previous_path`` is set only for renamed or copied files.
    """

    hash: str
    path: str
    status: FileStatus
    additions: int = 0
    deletions: int = 0
    changes: int = 0
    inline_patch: str | None = None
    previous_path: str | None = None

    @property
    def source_path(self) -> str:
        """Path of the file on the base side of the comparison."""
        return self.previous_path or self.path


@dataclass(frozen=True, slots=True)
class CompareResult:
    """All commits and changed files between two revisions.

    ``commits`` is base-exclusive, head-inclusive and chronological.
    ``files`` holds at most one entry per path.
    """

    base_commit: Commit
    commits: tuple[Commit, ...] = ()
    files: tuple[ChangedFile, ...] = ()
    status: str | None = None  # ahead / behind / identical / diverged
    ahead_by: int = 0
    behind_by: int = 0
    total_commits: int = 0

    def file(self, path: str) -> ChangedFile | None:
        """Return the changed file at *path*, if any."""
        for changed in self.files:
            if changed.path == path:
                return changed
        return None


@dataclass(frozen=True, slots=True)
class LatestComparison:
    """The repository's newest commit compared against its parent."""

    current: Commit
    previous: Commit
    comparison: CompareResult


@dataclass(frozen=True, slots=True)
class TagComparison:
    base_tag: str
    head_tag: str
    comparison: CompareResult


@dataclass(frozen=True, slots=True)
class FileSnapshotPair:
    """Both sides of a file; a side is ``None`` when the file did not exist there.

    The binary flags come from the decoded bytes and are the only binary
    check the diff path performs.
    """

    old_content: str | None = None
    new_content: str | None = None
    old_size: int | None = None
    new_size: int | None = None
    old_binary: bool = False
    new_binary: bool = False

    @property
    def is_binary(self) -> bool:
        return self.old_binary or self.new_binary


_PLACEHOLDERS: dict[FileStatus, str] = {
    FileStatus.ADDED: "New file (binary or empty)",
    FileStatus.REMOVED: "File deleted",
    FileStatus.RENAMED: "File renamed with no content changes",
}


@dataclass(frozen=True, slots=True)
class FileDiff:
    """Unified-diff hunk lines for one file, without the file header block."""

    path: str
    lines: tuple[str, ...] = ()
    status: FileStatus | None = None
    previous_path: str | None = None
    source: DiffSource = DiffSource.SYNTHESIZED

    @property
    def has_changes(self) -> bool:
        return bool(self.lines)

    @property
    def placeholder(self) -> str:
        """Text to show in place of an empty diff."""
        if self.status is None:
            return "No changes to display"
        return _PLACEHOLDERS.get(self.status, "No changes to display")


@dataclass(frozen=True, slots=True)
class ChangeSummary:
    """Aggregate statistics over a :class:`CompareResult`."""

    commit_count: int
    file_count: int
    additions: int
    deletions: int
    by_status: dict[FileStatus, int] = field(default_factory=dict)
