"""Range comparison use case.

Turns two revision pointers into a :class:`CompareResult`.  Depends only on
the :class:`RevisionSource` port; the interface layer injects the concrete
adapter at runtime.
"""

from __future__ import annotations

import logging
from typing import Sequence

from revision_compare.domain.entities import (
    CompareResult,
    LatestComparison,
    Tag,
    TagComparison,
)
from revision_compare.domain.ports.revision_source import RevisionSource
from revision_compare.domain.value_objects import RepositoryRef, RevisionPointer

logger = logging.getLogger(__name__)

HEAD = RevisionPointer("HEAD")
HEAD_PARENT = RevisionPointer("HEAD~1")


class RangeComparator:
    """Compares branch tips, adjacent commits and tags.

    Parameters
    ----------
    source:
        Adapter that can resolve commits and run range comparisons.
    """

    def __init__(self, source: RevisionSource) -> None:
        self._source = source

    async def compare(
        self, repo: RepositoryRef, base: RevisionPointer, head: RevisionPointer
    ) -> CompareResult:
        """Issue a single range-compare call for ``base...head``."""
        logger.info("Comparing %s...%s in %s", base, head, repo.full_name)
        result = await self._source.compare_range(repo, base, head)
        missing = sum(1 for f in result.files if f.inline_patch is None)
        logger.info(
            "%s...%s: %d commit(s), %d file(s), %d without inline patch",
            base,
            head,
            len(result.commits),
            len(result.files),
            missing,
        )
        return result

    async def compare_tags(
        self, repo: RepositoryRef, base_tag: str, head_tag: str
    ) -> TagComparison:
        """Compare two tags; tag names are used directly as revision pointers."""
        comparison = await self.compare(repo, RevisionPointer(base_tag), RevisionPointer(head_tag))
        return TagComparison(base_tag=base_tag, head_tag=head_tag, comparison=comparison)

    async def get_latest_comparison(self, repo: RepositoryRef) -> LatestComparison:
        """Compare the newest commit against its parent.

        A repository with a single commit cannot resolve ``HEAD~1``; that
        :class:`ApiError` propagates unchanged.
        """
        current = await self._source.get_commit(repo, HEAD)
        previous = await self._source.get_commit(repo, HEAD_PARENT)
        comparison = await self.compare(
            repo, RevisionPointer(previous.hash), RevisionPointer(current.hash)
        )
        return LatestComparison(current=current, previous=previous, comparison=comparison)


def default_tag_pair(tags: Sequence[Tag]) -> tuple[str, str] | None:
    """Return ``(base, head)`` names for the two most recent tags.

    Tags arrive newest first, so the head is ``tags[0]`` and the base is
    ``tags[1]``.  Returns ``None`` when fewer than two tags exist.
    """
    if len(tags) < 2:
        return None
    return tags[1].name, tags[0].name
