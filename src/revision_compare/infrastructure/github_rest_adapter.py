"""GitHub REST API adapter — implements the RevisionSource port.

Repository-level reads (branches, tags, commits, directory listings, file
snapshots, range comparison) built on :class:`GitHubTransport` and
:func:`fetch_all`.  Every method takes the :class:`RepositoryRef` explicitly,
so one adapter instance can serve any number of repositories and callers.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from typing import Any

from revision_compare.domain.entities import (
    Branch,
    ChangedFile,
    Commit,
    CompareResult,
    ContentItem,
    ContentType,
    FileContent,
    FileSnapshotPair,
    FileStatus,
    Signature,
    Tag,
)
from revision_compare.domain.exceptions import ApiError, DecodeError
from revision_compare.domain.value_objects import (
    RepositoryRef,
    RevisionPointer,
    encode_path,
    encode_revision,
)
from revision_compare.infrastructure.pagination import DEFAULT_PAGE_SIZE, fetch_all
from revision_compare.infrastructure.transport import GitHubTransport

logger = logging.getLogger(__name__)


# ── Payload parsing ─────────────────────────────────────────────────────────


def _parse_signature(data: dict[str, Any] | None) -> Signature:
    data = data or {}
    return Signature(
        name=data.get("name") or "",
        email=data.get("email") or "",
        timestamp=data.get("date") or "",
    )


def parse_commit(item: dict[str, Any]) -> Commit:
    """Reshape a commit object from the commits or compare endpoints."""
    try:
        detail = item["commit"]
        return Commit(
            hash=item["sha"],
            message=detail.get("message") or "",
            author=_parse_signature(detail.get("author")),
            committer=_parse_signature(detail.get("committer")),
        )
    except (KeyError, TypeError, AttributeError) as exc:
        raise DecodeError(f"Malformed commit payload: {exc!r}") from exc


def _parse_status(raw: str | None) -> FileStatus:
    try:
        return FileStatus(raw)
    except ValueError:
        logger.debug("Unknown file status %r, treating as 'changed'", raw)
        return FileStatus.CHANGED


def _require_object(item: Any, what: str) -> dict[str, Any]:
    if not isinstance(item, dict):
        raise DecodeError(f"Malformed {what}: expected a JSON object, got {type(item).__name__}.")
    return item


def parse_changed_file(item: dict[str, Any]) -> ChangedFile:
    item = _require_object(item, "file entry in compare payload")
    status = _parse_status(item.get("status"))
    previous = item.get("previous_filename")
    try:
        return ChangedFile(
            hash=item.get("sha") or "",
            path=item["filename"],
            status=status,
            additions=int(item.get("additions") or 0),
            deletions=int(item.get("deletions") or 0),
            changes=int(item.get("changes") or 0),
            inline_patch=item.get("patch"),
            previous_path=previous if status in (FileStatus.RENAMED, FileStatus.COPIED) else None,
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise DecodeError(f"Malformed file entry in compare payload: {exc!r}") from exc


def parse_compare(data: dict[str, Any]) -> CompareResult:
    """Reshape a compare response into a :class:`CompareResult`.

    ``patch`` is optional per file (large diffs omit it).  Duplicate paths
    collapse to a single entry; the later one wins.
    """
    if not isinstance(data, dict) or "base_commit" not in data:
        raise DecodeError("Compare response is missing 'base_commit'.")

    files: dict[str, ChangedFile] = {}
    for item in data.get("files") or []:
        changed = parse_changed_file(item)
        files[changed.path] = changed

    return CompareResult(
        base_commit=parse_commit(data["base_commit"]),
        commits=tuple(parse_commit(c) for c in data.get("commits") or []),
        files=tuple(files.values()),
        status=data.get("status"),
        ahead_by=int(data.get("ahead_by") or 0),
        behind_by=int(data.get("behind_by") or 0),
        total_commits=int(data.get("total_commits") or 0),
    )


def decode_content(data: dict[str, Any]) -> FileContent:
    """Decode a base64 ``contents`` payload into text.

    Anything that is not a base64-encoded file object is a contract violation.
    UTF-8 is tried first; bytes that are not valid UTF-8 are read as Latin-1.
    """
    if not isinstance(data, dict):
        raise DecodeError("Expected a file object, got a directory listing.")
    if data.get("encoding") != "base64" or data.get("content") is None:
        raise DecodeError(
            f"Unexpected file content response (encoding={data.get('encoding')!r})."
        )

    compact = "".join(str(data["content"]).split())
    try:
        raw = base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"File content is not valid base64: {exc}") from exc

    is_binary = b"\x00" in raw
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        text = raw.decode("latin-1")

    size = data.get("size")
    return FileContent(
        content=text,
        size=int(size) if size is not None else len(raw),
        is_binary=is_binary,
    )


# ── Adapter ─────────────────────────────────────────────────────────────────


class GitHubRestAdapter:
    """Concrete RevisionSource backed by the GitHub v3 REST API."""

    def __init__(self, transport: GitHubTransport, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self._transport = transport
        self._page_size = page_size

    # ── Branches / tags / commits ───────────────────────────────────────

    async def list_branches(
        self, repo: RepositoryRef, page: int = 1, per_page: int = DEFAULT_PAGE_SIZE
    ) -> list[Branch]:
        """GET /repos/{owner}/{repo}/branches → [Branch]."""
        data = await self._get_list(repo, "/branches", {"per_page": per_page, "page": page})
        try:
            return [Branch(name=_require_object(item, "branch")["name"]) for item in data]
        except KeyError as exc:
            raise DecodeError(f"Malformed branch entry: missing {exc}") from exc

    async def list_all_branches(self, repo: RepositoryRef) -> list[Branch]:
        return await fetch_all(
            lambda page: self.list_branches(repo, page, self._page_size), self._page_size
        )

    async def list_tags(
        self, repo: RepositoryRef, page: int = 1, per_page: int = DEFAULT_PAGE_SIZE
    ) -> list[Tag]:
        """GET /repos/{owner}/{repo}/tags → [Tag] (newest first, as GitHub orders them)."""
        data = await self._get_list(repo, "/tags", {"per_page": per_page, "page": page})
        tags = []
        for item in data:
            item = _require_object(item, "tag")
            try:
                tags.append(
                    Tag(name=item["name"], commit_hash=(item.get("commit") or {}).get("sha", ""))
                )
            except (KeyError, AttributeError) as exc:
                raise DecodeError(f"Malformed tag entry: {exc!r}") from exc
        return tags

    async def list_all_tags(self, repo: RepositoryRef) -> list[Tag]:
        return await fetch_all(
            lambda page: self.list_tags(repo, page, self._page_size), self._page_size
        )

    async def list_commits(
        self,
        repo: RepositoryRef,
        page: int = 1,
        per_page: int = DEFAULT_PAGE_SIZE,
        sha: RevisionPointer | None = None,
    ) -> list[Commit]:
        """GET /repos/{owner}/{repo}/commits → [Commit], optionally starting at *sha*."""
        params: dict[str, Any] = {"per_page": per_page, "page": page}
        if sha:
            params["sha"] = sha
        data = await self._get_list(repo, "/commits", params)
        return [parse_commit(item) for item in data]

    async def list_all_commits(
        self, repo: RepositoryRef, sha: RevisionPointer | None = None
    ) -> list[Commit]:
        return await fetch_all(
            lambda page: self.list_commits(repo, page, self._page_size, sha), self._page_size
        )

    async def get_commit(self, repo: RepositoryRef, ref: RevisionPointer) -> Commit:
        """GET /repos/{owner}/{repo}/commits/{ref} → Commit."""
        resp = await self._transport.request(
            f"{repo.api_path}/commits/{encode_revision(ref)}", repo.credential
        )
        return parse_commit(resp.body)

    # ── Contents ────────────────────────────────────────────────────────

    async def list_directory(
        self, repo: RepositoryRef, path: str = "", ref: RevisionPointer | None = None
    ) -> list[ContentItem]:
        """GET /repos/{owner}/{repo}/contents/{path} → [ContentItem]."""
        resp = await self._transport.request(
            self._contents_url(repo, path), repo.credential, self._ref_params(ref)
        )
        if not isinstance(resp.body, list):
            raise DecodeError(f"'{path or '/'}' is not a directory in {repo.full_name}.")
        items = []
        for item in resp.body:
            item = _require_object(item, "directory entry")
            try:
                kind = ContentType(item.get("type"))
            except ValueError as exc:
                raise DecodeError(f"Unknown content type {item.get('type')!r}") from exc
            try:
                items.append(
                    ContentItem(
                        type=kind, name=item["name"], path=item["path"], size=item.get("size")
                    )
                )
            except KeyError as exc:
                raise DecodeError(f"Malformed directory entry: missing {exc}") from exc
        return items

    async def get_file_content(
        self, repo: RepositoryRef, path: str, ref: RevisionPointer | None = None
    ) -> FileContent:
        """GET /repos/{owner}/{repo}/contents/{path}?ref= → decoded FileContent."""
        resp = await self._transport.request(
            self._contents_url(repo, path), repo.credential, self._ref_params(ref)
        )
        return decode_content(resp.body)

    async def get_file_content_at_revision(
        self, repo: RepositoryRef, path: str, ref: RevisionPointer
    ) -> FileContent | None:
        """Like :meth:`get_file_content`, but a 404 means "absent at *ref*"."""
        try:
            return await self.get_file_content(repo, path, ref)
        except ApiError as exc:
            if exc.is_not_found:
                logger.debug("%s does not exist at %s in %s", path, ref, repo.full_name)
                return None
            raise

    async def get_file_versions(
        self,
        repo: RepositoryRef,
        path: str,
        base_ref: RevisionPointer,
        head_ref: RevisionPointer,
        previous_path: str | None = None,
    ) -> FileSnapshotPair:
        """Fetch the file at both revisions concurrently.

        The base side is read from *previous_path* when the file was renamed.
        """
        old, new = await asyncio.gather(
            self.get_file_content_at_revision(repo, previous_path or path, base_ref),
            self.get_file_content_at_revision(repo, path, head_ref),
        )
        return FileSnapshotPair(
            old_content=old.content if old else None,
            new_content=new.content if new else None,
            old_size=old.size if old else None,
            new_size=new.size if new else None,
            old_binary=old.is_binary if old else False,
            new_binary=new.is_binary if new else False,
        )

    # ── Compare ─────────────────────────────────────────────────────────

    async def compare_range(
        self, repo: RepositoryRef, base: RevisionPointer, head: RevisionPointer
    ) -> CompareResult:
        """GET /repos/{owner}/{repo}/compare/{base}...{head} → CompareResult."""
        resp = await self._transport.request(
            f"{repo.api_path}/compare/{encode_revision(base)}...{encode_revision(head)}",
            repo.credential,
        )
        return parse_compare(resp.body)

    # ── Helpers ─────────────────────────────────────────────────────────

    @staticmethod
    def _contents_url(repo: RepositoryRef, path: str) -> str:
        encoded = encode_path(path)
        return f"{repo.api_path}/contents/{encoded}" if encoded else f"{repo.api_path}/contents"

    @staticmethod
    def _ref_params(ref: RevisionPointer | None) -> dict[str, str] | None:
        return {"ref": ref} if ref else None

    async def _get_list(
        self, repo: RepositoryRef, endpoint: str, params: dict[str, Any]
    ) -> list[dict[str, Any]]:
        resp = await self._transport.request(f"{repo.api_path}{endpoint}", repo.credential, params)
        if not isinstance(resp.body, list):
            raise DecodeError(f"Expected a JSON array from {endpoint} for {repo.full_name}.")
        return resp.body
