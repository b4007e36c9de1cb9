"""GitHub REST transport — authenticated GET with rate-limit extraction.

Stateless between calls: the credential is supplied per request and the
only side effect is the network call itself.  The ``httpx.AsyncClient`` is
owned by the caller.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

import httpx

from revision_compare.domain.entities import ApiResponse, RateLimitStatus
from revision_compare.domain.exceptions import ApiError, DecodeError, NetworkError

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.github.com"
DEFAULT_API_VERSION = "2022-11-28"
_USER_AGENT = "revision-compare/1.0"


def _header_int(headers: httpx.Headers, name: str) -> int:
    try:
        return int(headers.get(name, "0"))
    except ValueError:
        return 0


def extract_rate_limit(headers: httpx.Headers) -> RateLimitStatus:
    """Read remaining quota and reset time; missing headers read as zero."""
    return RateLimitStatus(
        remaining=max(_header_int(headers, "x-ratelimit-remaining"), 0),
        reset_epoch_seconds=_header_int(headers, "x-ratelimit-reset"),
    )


def extract_error_message(resp: httpx.Response) -> str:
    """Pull the ``message`` field out of an error body, else use the raw text."""
    text = resp.text
    try:
        payload = json.loads(text)
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return text or resp.reason_phrase or f"HTTP {resp.status_code}"


class GitHubTransport:
    """Executes requests against a single GitHub API host."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_base: str = DEFAULT_API_BASE,
        api_version: str = DEFAULT_API_VERSION,
    ) -> None:
        self._client = client
        self._api_base = api_base.rstrip("/")
        self._api_version = api_version

    def headers(self, credential: str | None = None) -> dict[str, str]:
        """Build request headers; ``Authorization`` only when a credential is set."""
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": self._api_version,
            "User-Agent": _USER_AGENT,
        }
        if credential:
            headers["Authorization"] = f"Bearer {credential}"
        return headers

    def absolute_url(self, url: str) -> str:
        if url.startswith(("http://", "https://")):
            return url
        return f"{self._api_base}/{url.lstrip('/')}"

    async def request(
        self,
        url: str,
        credential: str | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> ApiResponse:
        """GET *url* and return the decoded JSON body with its rate-limit status.

        Raises :class:`ApiError` for any non-2xx response, :class:`NetworkError`
        when no response arrives, and :class:`DecodeError` when a successful
        response body is not JSON.
        """
        full_url = self.absolute_url(url)
        try:
            resp = await self._client.get(
                full_url, headers=self.headers(credential), params=params
            )
        except httpx.HTTPError as exc:
            raise NetworkError(f"Network error fetching {full_url}: {exc}") from exc

        rate_limit = extract_rate_limit(resp.headers)
        logger.debug(
            "GET %s -> %d (remaining=%d)", full_url, resp.status_code, rate_limit.remaining
        )

        if not resp.is_success:
            error = ApiError(resp.status_code, extract_error_message(resp), rate_limit)
            if error.is_quota_exhausted:
                logger.warning(
                    "GitHub API quota exhausted; resets at %s",
                    rate_limit.reset_at or "unknown",
                )
            raise error

        try:
            body = resp.json()
        except ValueError as exc:
            raise DecodeError(f"GitHub API returned a non-JSON body for {full_url}") from exc
        return ApiResponse(body=body, rate_limit=rate_limit)
