"""Port: revision source — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from typing import Protocol

from revision_compare.domain.entities import (
    Commit,
    CompareResult,
    FileContent,
    FileSnapshotPair,
)
from revision_compare.domain.value_objects import RepositoryRef, RevisionPointer


class RevisionSource(Protocol):
    """Abstract contract the comparison services need from a remote repository."""

    async def get_commit(self, repo: RepositoryRef, ref: RevisionPointer) -> Commit:
        """Resolve *ref* to a single commit."""
        ...

    async def compare_range(
        self, repo: RepositoryRef, base: RevisionPointer, head: RevisionPointer
    ) -> CompareResult:
        """Return commits and changed files between *base* and *head*."""
        ...

    async def get_file_content_at_revision(
        self, repo: RepositoryRef, path: str, ref: RevisionPointer
    ) -> FileContent | None:
        """Return the file at *ref*, or ``None`` if it does not exist there."""
        ...

    async def get_file_versions(
        self,
        repo: RepositoryRef,
        path: str,
        base_ref: RevisionPointer,
        head_ref: RevisionPointer,
        previous_path: str | None = None,
    ) -> FileSnapshotPair:
        """Return both sides of a file, fetched concurrently."""
        ...
