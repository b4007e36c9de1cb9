"""Value objects — repository identity and revision pointers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import NewType
from urllib.parse import quote

from revision_compare.domain.exceptions import InvalidRepositoryError

_NAME_PART = r"[A-Za-z0-9\-_.]+"

_GITHUB_URL_RE = re.compile(
    rf"^https?://github\.com/(?P<owner>{_NAME_PART})/(?P<name>{_NAME_PART}?)(?:\.git)?/?$"
)
_SHORTHAND_RE = re.compile(rf"^(?P<owner>{_NAME_PART})/(?P<name>{_NAME_PART})$")

# A branch, tag, commit hash or relative expression such as ``HEAD~1``.
# Deliberately unvalidated: the remote API is the authority on resolution.
RevisionPointer = NewType("RevisionPointer", str)


@dataclass(frozen=True, slots=True)
class RepositoryRef:
    """Identifies a remote repository and the (optional) credential used for it.

    The credential is an opaque token; when present it grants a higher rate
    limit and access to private repositories.  It never appears in ``repr``.
    """

    owner: str
    name: str
    credential: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not self.owner or not self.name:
            raise InvalidRepositoryError("Repository owner and name must not be empty.")
        if "/" in self.owner or "/" in self.name:
            raise InvalidRepositoryError(
                f"Invalid repository '{self.owner}/{self.name}': "
                "owner and name must not contain '/'."
            )

    @classmethod
    def from_string(cls, value: str, credential: str | None = None) -> RepositoryRef:
        """Parse ``owner/name`` or ``https://github.com/owner/name``."""
        value = value.strip()
        match = _SHORTHAND_RE.match(value) or _GITHUB_URL_RE.match(value)
        if not match:
            raise InvalidRepositoryError(
                f"Invalid repository: '{value}'. "
                "Expected 'owner/name' or https://github.com/<owner>/<name>"
            )
        return cls(owner=match["owner"], name=match["name"], credential=credential)

    def with_credential(self, credential: str | None) -> RepositoryRef:
        """Return a copy of this reference carrying *credential*."""
        return RepositoryRef(owner=self.owner, name=self.name, credential=credential)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def api_path(self) -> str:
        return f"/repos/{quote(self.owner, safe='')}/{quote(self.name, safe='')}"


def encode_revision(ref: str) -> str:
    """URL-encode a revision pointer for use as a single path segment."""
    return quote(ref, safe="")


def encode_path(path: str) -> str:
    """URL-encode a repository file path, keeping the ``/`` separators."""
    return quote(path.strip("/"), safe="/")
