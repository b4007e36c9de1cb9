"""Pydantic response DTOs for the API boundary.

Built from the domain dataclasses with ``model_validate(..., from_attributes=True)``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from revision_compare.domain.entities import ContentType, DiffSource, FileStatus


class _FromDomain(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class SignatureSchema(_FromDomain):
    name: str
    email: str
    timestamp: str


class CommitSchema(_FromDomain):
    hash: str
    message: str
    author: SignatureSchema
    committer: SignatureSchema


class BranchSchema(_FromDomain):
    name: str


class TagSchema(_FromDomain):
    name: str
    commit_hash: str


class ContentItemSchema(_FromDomain):
    type: ContentType
    name: str
    path: str
    size: int | None = None


class FileContentResponse(_FromDomain):
    path: str
    ref: str | None = None
    content: str
    size: int | None = None
    is_binary: bool = False


class ChangedFileSchema(_FromDomain):
    hash: str
    path: str
    status: FileStatus
    additions: int
    deletions: int
    changes: int
    inline_patch: str | None = None
    previous_path: str | None = None


class ChangeSummarySchema(_FromDomain):
    commit_count: int
    file_count: int
    additions: int
    deletions: int
    by_status: dict[FileStatus, int]


class CompareResponse(_FromDomain):
    """Result of ``GET /repos/{owner}/{repo}/compare``."""

    base_commit: CommitSchema
    commits: list[CommitSchema]
    files: list[ChangedFileSchema]
    status: str | None = None
    ahead_by: int = 0
    behind_by: int = 0
    total_commits: int = 0
    summary: ChangeSummarySchema


class LatestComparisonResponse(BaseModel):
    current: CommitSchema
    previous: CommitSchema
    comparison: CompareResponse


class TagComparisonResponse(BaseModel):
    base_tag: str
    head_tag: str
    comparison: CompareResponse


class FileDiffResponse(_FromDomain):
    """Hunk lines for one file; ``placeholder`` explains an empty diff."""

    path: str
    previous_path: str | None = None
    status: FileStatus | None = None
    source: DiffSource
    lines: list[str]
    has_changes: bool
    placeholder: str | None = None


class ErrorResponse(BaseModel):
    """Standard error envelope returned on all failure paths."""

    status: str = "error"
    message: str
    remaining: int | None = None
    reset: int | None = None
