"""API routes — thin controllers that delegate to the engine."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from revision_compare.domain.entities import CompareResult, FileDiff, FileStatus
from revision_compare.domain.value_objects import RepositoryRef, RevisionPointer
from revision_compare.infrastructure.github_rest_adapter import GitHubRestAdapter
from revision_compare.interface.dependencies import (
    get_adapter,
    get_comparator,
    get_repository,
    get_synthesizer,
)
from revision_compare.interface.schemas import (
    BranchSchema,
    ChangedFileSchema,
    ChangeSummarySchema,
    CommitSchema,
    CompareResponse,
    ContentItemSchema,
    FileContentResponse,
    FileDiffResponse,
    LatestComparisonResponse,
    TagComparisonResponse,
    TagSchema,
)
from revision_compare.services.change_summary import filter_files, summarize
from revision_compare.services.diff_synthesizer import FileDiffSynthesizer
from revision_compare.services.range_comparator import RangeComparator, default_tag_pair

router = APIRouter(prefix="/repos/{owner}/{repo}")

_ERRORS = {
    404: {"description": "Repository, revision or path not found"},
    429: {"description": "GitHub API rate limit exhausted"},
    502: {"description": "Unexpected response from GitHub"},
    503: {"description": "GitHub unreachable"},
}


def _compare_response(
    result: CompareResult, status: FileStatus | None = None
) -> CompareResponse:
    return CompareResponse(
        base_commit=CommitSchema.model_validate(result.base_commit),
        commits=[CommitSchema.model_validate(c) for c in result.commits],
        files=[ChangedFileSchema.model_validate(f) for f in filter_files(result.files, status)],
        status=result.status,
        ahead_by=result.ahead_by,
        behind_by=result.behind_by,
        total_commits=result.total_commits,
        summary=ChangeSummarySchema.model_validate(summarize(result)),
    )


def _diff_response(diff: FileDiff) -> FileDiffResponse:
    return FileDiffResponse(
        path=diff.path,
        previous_path=diff.previous_path,
        status=diff.status,
        source=diff.source,
        lines=list(diff.lines),
        has_changes=diff.has_changes,
        placeholder=None if diff.has_changes else diff.placeholder,
    )


# ── Browsing ────────────────────────────────────────────────────────────────


@router.get("/branches", response_model=list[BranchSchema], responses=_ERRORS)
async def branches(
    page: int | None = Query(default=None, ge=1),
    per_page: int = Query(default=100, ge=1, le=100),
    repository: RepositoryRef = Depends(get_repository),
    adapter: GitHubRestAdapter = Depends(get_adapter),
) -> list[BranchSchema]:
    """List branches; every page is fetched when ``page`` is omitted."""
    if page is None:
        items = await adapter.list_all_branches(repository)
    else:
        items = await adapter.list_branches(repository, page, per_page)
    return [BranchSchema.model_validate(b) for b in items]


@router.get("/tags", response_model=list[TagSchema], responses=_ERRORS)
async def tags(
    page: int | None = Query(default=None, ge=1),
    per_page: int = Query(default=100, ge=1, le=100),
    repository: RepositoryRef = Depends(get_repository),
    adapter: GitHubRestAdapter = Depends(get_adapter),
) -> list[TagSchema]:
    """List tags, newest first; every page is fetched when ``page`` is omitted."""
    if page is None:
        items = await adapter.list_all_tags(repository)
    else:
        items = await adapter.list_tags(repository, page, per_page)
    return [TagSchema.model_validate(t) for t in items]


@router.get("/commits", response_model=list[CommitSchema], responses=_ERRORS)
async def commits(
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=100, ge=1, le=100),
    sha: str | None = None,
    repository: RepositoryRef = Depends(get_repository),
    adapter: GitHubRestAdapter = Depends(get_adapter),
) -> list[CommitSchema]:
    items = await adapter.list_commits(
        repository, page, per_page, RevisionPointer(sha) if sha else None
    )
    return [CommitSchema.model_validate(c) for c in items]


@router.get("/commits/{ref:path}", response_model=CommitSchema, responses=_ERRORS)
async def commit(
    ref: str,
    repository: RepositoryRef = Depends(get_repository),
    adapter: GitHubRestAdapter = Depends(get_adapter),
) -> CommitSchema:
    return CommitSchema.model_validate(await adapter.get_commit(repository, RevisionPointer(ref)))


@router.get("/contents", response_model=list[ContentItemSchema], responses=_ERRORS)
async def contents(
    path: str = "",
    ref: str | None = None,
    repository: RepositoryRef = Depends(get_repository),
    adapter: GitHubRestAdapter = Depends(get_adapter),
) -> list[ContentItemSchema]:
    """List a directory at ``ref`` (default branch when omitted)."""
    items = await adapter.list_directory(
        repository, path, RevisionPointer(ref) if ref else None
    )
    return [ContentItemSchema.model_validate(i) for i in items]


@router.get("/file", response_model=FileContentResponse, responses=_ERRORS)
async def file_content(
    path: str,
    ref: str | None = None,
    repository: RepositoryRef = Depends(get_repository),
    adapter: GitHubRestAdapter = Depends(get_adapter),
) -> FileContentResponse:
    content = await adapter.get_file_content(
        repository, path, RevisionPointer(ref) if ref else None
    )
    return FileContentResponse(
        path=path,
        ref=ref,
        content=content.content,
        size=content.size,
        is_binary=content.is_binary,
    )


# ── Comparison ──────────────────────────────────────────────────────────────


@router.get("/compare/latest", response_model=LatestComparisonResponse, responses=_ERRORS)
async def compare_latest(
    repository: RepositoryRef = Depends(get_repository),
    comparator: RangeComparator = Depends(get_comparator),
) -> LatestComparisonResponse:
    """Compare ``HEAD`` against ``HEAD~1``."""
    latest = await comparator.get_latest_comparison(repository)
    return LatestComparisonResponse(
        current=CommitSchema.model_validate(latest.current),
        previous=CommitSchema.model_validate(latest.previous),
        comparison=_compare_response(latest.comparison),
    )


@router.get("/compare/tags", response_model=TagComparisonResponse, responses=_ERRORS)
async def compare_tags(
    base: str | None = None,
    head: str | None = None,
    repository: RepositoryRef = Depends(get_repository),
    comparator: RangeComparator = Depends(get_comparator),
    adapter: GitHubRestAdapter = Depends(get_adapter),
) -> TagComparisonResponse:
    """Compare two tags; defaults to the two most recent ones."""
    if not base or not head:
        pair = default_tag_pair(await adapter.list_all_tags(repository))
        if pair is None:
            raise HTTPException(status_code=404, detail="Repository has fewer than two tags.")
        base = base or pair[0]
        head = head or pair[1]
    result = await comparator.compare_tags(repository, base, head)
    return TagComparisonResponse(
        base_tag=result.base_tag,
        head_tag=result.head_tag,
        comparison=_compare_response(result.comparison),
    )


@router.get("/compare", response_model=CompareResponse, responses=_ERRORS)
async def compare(
    base: str,
    head: str,
    status: FileStatus | None = None,
    repository: RepositoryRef = Depends(get_repository),
    comparator: RangeComparator = Depends(get_comparator),
) -> CompareResponse:
    """Compare ``base...head``; ``status`` narrows the returned file list."""
    result = await comparator.compare(repository, RevisionPointer(base), RevisionPointer(head))
    return _compare_response(result, status)


@router.get("/compare/diff", response_model=FileDiffResponse, responses=_ERRORS)
async def compare_file_diff(
    base: str,
    head: str,
    path: str,
    repository: RepositoryRef = Depends(get_repository),
    comparator: RangeComparator = Depends(get_comparator),
    synthesizer: FileDiffSynthesizer = Depends(get_synthesizer),
) -> FileDiffResponse:
    """Diff one file of ``base...head``, preferring the patch GitHub sent inline."""
    base_ref, head_ref = RevisionPointer(base), RevisionPointer(head)
    result = await comparator.compare(repository, base_ref, head_ref)
    changed = result.file(path)
    if changed is None:
        raise HTTPException(status_code=404, detail=f"'{path}' is not changed in {base}...{head}.")
    return _diff_response(
        await synthesizer.diff_changed_file(repository, changed, base_ref, head_ref)
    )


@router.get("/diff", response_model=FileDiffResponse, responses=_ERRORS)
async def diff(
    path: str,
    base: str,
    head: str,
    previous_path: str | None = None,
    status: FileStatus | None = None,
    repository: RepositoryRef = Depends(get_repository),
    synthesizer: FileDiffSynthesizer = Depends(get_synthesizer),
) -> FileDiffResponse:
    """Synthesize the diff of one file between two revisions from both snapshots.

    Always fetches and diffs; ``/compare/diff`` reuses the inline patch instead.
    """
    result = await synthesizer.diff_file(
        repository,
        path,
        previous_path,
        RevisionPointer(base),
        RevisionPointer(head),
        status=status,
    )
    return _diff_response(result)
