"""Aggregate statistics and filtering over a comparison's changed files."""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from revision_compare.domain.entities import (
    BranchGroup,
    ChangedFile,
    ChangeSummary,
    CompareResult,
    FileStatus,
)


def summarize(result: CompareResult) -> ChangeSummary:
    """Count commits, files, added/deleted lines and files per status."""
    counts = Counter(f.status for f in result.files)
    return ChangeSummary(
        commit_count=len(result.commits),
        file_count=len(result.files),
        additions=sum(f.additions for f in result.files),
        deletions=sum(f.deletions for f in result.files),
        by_status={status: counts[status] for status in FileStatus if counts[status]},
    )


def filter_files(
    files: Iterable[ChangedFile], status: FileStatus | None = None
) -> list[ChangedFile]:
    """Return *files* with the given status, or all of them when *status* is None."""
    if status is None:
        return list(files)
    return [f for f in files if f.status == status]


def group_branch_name(name: str) -> BranchGroup:
    """Split ``"EN-2024.1"`` into locale ``"en"`` and version ``"2024.1"``.

    Only the first ``-`` separates; a name without one is all locale.
    """
    locale, sep, version = name.partition("-")
    return BranchGroup(locale=locale.lower(), version=version if sep else "")
