"""Per-file unified diffs.

:func:`synthesize_diff` is a pure transformation of two text blobs and has
no knowledge of the network.  :class:`FileDiffSynthesizer` wraps it with the
two-sided snapshot fetch and is meant to be called lazily, one file at a
time, only when a diff is actually requested.
"""

from __future__ import annotations

import difflib
import logging

from revision_compare.domain.entities import ChangedFile, DiffSource, FileDiff, FileStatus
from revision_compare.domain.ports.revision_source import RevisionSource
from revision_compare.domain.value_objects import RepositoryRef, RevisionPointer

logger = logging.getLogger(__name__)

BASE_LABEL = "Base"
HEAD_LABEL = "Head"
DEFAULT_CONTEXT_LINES = 3
NO_NEWLINE_MARKER = "\\ No newline at end of file"


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, keeping each terminator.

    ``\\r``, form feeds and other characters :meth:`str.splitlines` treats as
    breaks stay part of the line, so line-ending changes show up in the diff.
    """
    parts = text.split("\n")
    tail = parts.pop()
    lines = [part + "\n" for part in parts]
    if tail:
        lines.append(tail)
    return lines


def strip_header(lines: list[str]) -> list[str]:
    """Drop the ``---``/``+++`` label block that precedes the first hunk."""
    for index, line in enumerate(lines):
        if line.startswith("@@"):
            return lines[index:]
    return []


def _render_hunks(diff_lines: list[str]) -> list[str]:
    rendered = []
    for line in strip_header(diff_lines):
        if line.startswith("@@"):
            rendered.append(line)
        elif line.endswith("\n"):
            rendered.append(line[:-1])
        else:
            rendered.append(line)
            rendered.append(NO_NEWLINE_MARKER)
    return rendered


def synthesize_diff(
    old: str | None,
    new: str | None,
    context: int = DEFAULT_CONTEXT_LINES,
) -> list[str]:
    """Return unified-diff hunk lines turning *old* into *new*.

    ``None`` stands for a file that does not exist on that side and is
    treated as empty.  Identical inputs produce no lines.  A side whose last
    line has no trailing newline is followed by ``\\ No newline at end of
    file``, as ``git diff`` prints it.  Binary screening is the caller's job.
    """
    old_text = old or ""
    new_text = new or ""
    if old_text == new_text:
        return []

    diff = difflib.unified_diff(
        split_lines(old_text),
        split_lines(new_text),
        fromfile=BASE_LABEL,
        tofile=HEAD_LABEL,
        n=context,
        lineterm="",
    )
    return _render_hunks(list(diff))


def split_patch(patch: str) -> list[str]:
    """Split an inline patch from the compare API into hunk lines."""
    return strip_header([line.removesuffix("\n") for line in split_lines(patch)])


class FileDiffSynthesizer:
    """Builds :class:`FileDiff` objects, fetching file snapshots on demand."""

    def __init__(self, source: RevisionSource, context: int = DEFAULT_CONTEXT_LINES) -> None:
        self._source = source
        self._context = context

    async def diff_file(
        self,
        repo: RepositoryRef,
        path: str,
        previous_path: str | None,
        base_ref: RevisionPointer,
        head_ref: RevisionPointer,
        status: FileStatus | None = None,
    ) -> FileDiff:
        """Fetch *path* at both revisions and diff them.

        The base side is read from *previous_path* when given (renames).
        A file missing at either revision counts as empty on that side, and
        a binary file on either side yields no lines.
        """
        snapshots = await self._source.get_file_versions(
            repo, path, base_ref, head_ref, previous_path=previous_path
        )
        if snapshots.is_binary:
            logger.debug("Skipping binary content for %s (%s...%s)", path, base_ref, head_ref)
            lines: list[str] = []
        else:
            lines = synthesize_diff(snapshots.old_content, snapshots.new_content, self._context)
        logger.debug(
            "Synthesized %d diff line(s) for %s (%s...%s)", len(lines), path, base_ref, head_ref
        )
        return FileDiff(
            path=path,
            lines=tuple(lines),
            status=status,
            previous_path=previous_path,
            source=DiffSource.SYNTHESIZED,
        )

    async def diff_changed_file(
        self,
        repo: RepositoryRef,
        changed: ChangedFile,
        base_ref: RevisionPointer,
        head_ref: RevisionPointer,
    ) -> FileDiff:
        """Diff one entry of a :class:`CompareResult`.

        The inline patch is used when the compare response carried one;
        otherwise both snapshots are fetched and diffed.
        """
        if changed.inline_patch:
            return FileDiff(
                path=changed.path,
                lines=tuple(split_patch(changed.inline_patch)),
                status=changed.status,
                previous_path=changed.previous_path,
                source=DiffSource.INLINE,
            )
        return await self.diff_file(
            repo,
            changed.path,
            changed.previous_path,
            base_ref,
            head_ref,
            status=changed.status,
        )
