"""Tests for range comparison, latest-commit comparison and tag comparison."""

from __future__ import annotations

import pytest

from conftest import FakeGitHub, commit_payload
from revision_compare.domain.entities import FileStatus, Tag
from revision_compare.domain.exceptions import ApiError
from revision_compare.domain.value_objects import RevisionPointer
from revision_compare.services.diff_synthesizer import FileDiffSynthesizer
from revision_compare.services.range_comparator import RangeComparator, default_tag_pair


def _compare_payload(base: str, commits: list[str], files: list[dict]) -> dict:
    return {
        "base_commit": commit_payload(base),
        "commits": [commit_payload(c) for c in commits],
        "files": files,
    }


@pytest.fixture()
def two_commit_repo(fake_github: FakeGitHub) -> FakeGitHub:
    """Commits A → B: x.txt added ("hi"), y.txt modified ("1\\n2\\n" → "1\\n3\\n")."""
    fake_github.commits["HEAD"] = commit_payload("B", "second")
    fake_github.commits["HEAD~1"] = commit_payload("A", "first")
    fake_github.files[("B", "x.txt")] = "hi"
    fake_github.files[("A", "y.txt")] = "1\n2\n"
    fake_github.files[("B", "y.txt")] = "1\n3\n"
    fake_github.compares["A...B"] = _compare_payload(
        "A",
        ["B"],
        [
            {"sha": "x1", "filename": "x.txt", "status": "added", "additions": 1, "deletions": 0, "changes": 1},
            {"sha": "y1", "filename": "y.txt", "status": "modified", "additions": 1, "deletions": 1, "changes": 2},
        ],
    )
    return fake_github


class TestCompare:
    @pytest.mark.asyncio
    async def test_end_to_end_compare_then_diff(self, adapter, two_commit_repo: FakeGitHub, repo):
        result = await RangeComparator(adapter).compare(repo, RevisionPointer("A"), RevisionPointer("B"))

        assert len(result.files) == 2
        assert result.file("x.txt").status is FileStatus.ADDED
        assert result.file("y.txt").status is FileStatus.MODIFIED
        assert [c.hash for c in result.commits] == ["B"]

        diff = await FileDiffSynthesizer(adapter).diff_changed_file(
            repo, result.file("y.txt"), RevisionPointer("A"), RevisionPointer("B")
        )
        assert "-2" in diff.lines
        assert "+3" in diff.lines
        assert [line for line in diff.lines if line[:1] in "+-"] == ["-2", "+3"]

    @pytest.mark.asyncio
    async def test_compare_issues_single_call(self, adapter, two_commit_repo: FakeGitHub, repo):
        await RangeComparator(adapter).compare(repo, RevisionPointer("A"), RevisionPointer("B"))
        assert len(two_commit_repo.requests) == 1

    @pytest.mark.asyncio
    async def test_unknown_range_propagates(self, adapter, repo):
        with pytest.raises(ApiError) as exc_info:
            await RangeComparator(adapter).compare(repo, RevisionPointer("nope"), RevisionPointer("B"))
        assert exc_info.value.status == 404


class TestLatestComparison:
    @pytest.mark.asyncio
    async def test_compares_head_parent_to_head(self, adapter, two_commit_repo: FakeGitHub, repo):
        latest = await RangeComparator(adapter).get_latest_comparison(repo)

        assert latest.current.hash == "B"
        assert latest.previous.hash == "A"
        assert len(latest.comparison.files) == 2
        assert two_commit_repo.paths_requested() == [
            "/repos/octo/demo/commits/HEAD",
            "/repos/octo/demo/commits/HEAD~1",
            "/repos/octo/demo/compare/A...B",
        ]

    @pytest.mark.asyncio
    async def test_single_commit_repository_propagates(self, adapter, fake_github: FakeGitHub, repo):
        fake_github.commits["HEAD"] = commit_payload("only")
        with pytest.raises(ApiError) as exc_info:
            await RangeComparator(adapter).get_latest_comparison(repo)
        assert exc_info.value.status == 422


class TestTags:
    @pytest.mark.asyncio
    async def test_tag_names_used_verbatim(self, adapter, fake_github: FakeGitHub, repo):
        fake_github.compares["v1.0...v1.1"] = _compare_payload("t1", ["t2"], [])

        result = await RangeComparator(adapter).compare_tags(repo, "v1.0", "v1.1")

        assert result.base_tag == "v1.0"
        assert result.head_tag == "v1.1"
        assert result.comparison.base_commit.hash == "t1"
        assert fake_github.paths_requested() == ["/repos/octo/demo/compare/v1.0...v1.1"]

    def test_default_pair_is_two_most_recent(self):
        tags = [Tag("v3", "c"), Tag("v2", "b"), Tag("v1", "a")]
        assert default_tag_pair(tags) == ("v2", "v3")

    def test_default_pair_needs_two_tags(self):
        assert default_tag_pair([Tag("v1", "a")]) is None
        assert default_tag_pair([]) is None
