"""Domain exception hierarchy.

The engine raises these and never retries.  The interface layer translates
them into HTTP responses; any other caller decides its own resilience policy
(prompt for a token, wait for the quota reset, or abort).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from revision_compare.domain.entities import RateLimitStatus


class RevisionCompareError(Exception):
    """Base exception for the entire engine."""


# ── Input validation ────────────────────────────────────────────────────────


class InvalidRepositoryError(RevisionCompareError):
    """The supplied owner/name does not identify a GitHub repository."""


# ── GitHub API errors ───────────────────────────────────────────────────────


class ApiError(RevisionCompareError):
    """Any non-2xx response from the GitHub API.

    Carries the HTTP status, the human-readable message extracted from the
    response body, and the rate-limit metadata of that same response.
    """

    def __init__(self, status: int, message: str, rate_limit: RateLimitStatus) -> None:
        super().__init__(message)
        self.status = status
        self.message = message
        self.rate_limit = rate_limit

    @property
    def remaining(self) -> int:
        return self.rate_limit.remaining

    @property
    def reset(self) -> int:
        return self.rate_limit.reset_epoch_seconds

    @property
    def is_not_found(self) -> bool:
        return self.status == 404

    @property
    def is_quota_exhausted(self) -> bool:
        """True when the request was rejected because the budget is spent."""
        return self.status in (403, 429) and self.remaining == 0

    def __repr__(self) -> str:
        return (
            f"ApiError(status={self.status}, message={self.message!r}, "
            f"remaining={self.remaining}, reset={self.reset})"
        )


class NetworkError(RevisionCompareError):
    """The request never produced an HTTP response (DNS, connect, timeout)."""


# ── Payload errors ──────────────────────────────────────────────────────────


class DecodeError(RevisionCompareError):
    """A response payload was not in the expected shape or transport encoding."""


def is_quota_exhausted(exc: BaseException) -> bool:
    """Return True if *exc* is an :class:`ApiError` caused by quota exhaustion."""
    return isinstance(exc, ApiError) and exc.is_quota_exhausted


def describe_error(exc: BaseException) -> str:
    """Render *exc* as a message suitable for showing to an end user.

    Quota exhaustion gets a dedicated "add a token / retry after" hint;
    everything else surfaces its raw message text.
    """
    if isinstance(exc, ApiError) and exc.is_quota_exhausted:
        reset_at = exc.rate_limit.reset_at
        when = reset_at.strftime("%Y-%m-%d %H:%M:%S UTC") if reset_at else "later"
        return f"GitHub rate limit exceeded. Add a token or retry after {when}."
    return str(exc) or type(exc).__name__
