"""FastAPI dependency injection wiring."""

from __future__ import annotations

import httpx
from fastapi import Depends, Header, Path

from revision_compare.domain.value_objects import RepositoryRef
from revision_compare.infrastructure.config import get_settings
from revision_compare.infrastructure.github_rest_adapter import GitHubRestAdapter
from revision_compare.infrastructure.transport import GitHubTransport
from revision_compare.services.diff_synthesizer import FileDiffSynthesizer
from revision_compare.services.range_comparator import RangeComparator

_http_client: httpx.AsyncClient | None = None


async def startup() -> None:
    """Initialise shared resources — called from the lifespan context manager."""
    global _http_client  # noqa: PLW0603

    settings = get_settings()
    _http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.request_timeout_seconds))


async def shutdown() -> None:
    """Release shared resources."""
    global _http_client  # noqa: PLW0603

    if _http_client:
        await _http_client.aclose()
        _http_client = None


def get_transport() -> GitHubTransport:
    assert _http_client is not None, "startup() was not called"
    settings = get_settings()
    return GitHubTransport(
        _http_client,
        api_base=settings.github_api_base,
        api_version=settings.github_api_version,
    )


def get_adapter(transport: GitHubTransport = Depends(get_transport)) -> GitHubRestAdapter:
    return GitHubRestAdapter(transport, page_size=get_settings().page_size)


def get_comparator(adapter: GitHubRestAdapter = Depends(get_adapter)) -> RangeComparator:
    return RangeComparator(adapter)


def get_synthesizer(adapter: GitHubRestAdapter = Depends(get_adapter)) -> FileDiffSynthesizer:
    return FileDiffSynthesizer(adapter)


def _credential_from_header(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, value = authorization.strip().partition(" ")
    if value and scheme.lower() in ("bearer", "token"):
        return value.strip()
    return authorization.strip()


def get_repository(
    owner: str = Path(...),
    repo: str = Path(...),
    authorization: str | None = Header(default=None),
) -> RepositoryRef:
    """Build the target repository from the path, with the caller's credential.

    Falls back to ``GITHUB_TOKEN`` when the request carries no credential.
    """
    credential = _credential_from_header(authorization)
    if credential is None:
        token = get_settings().github_token
        credential = token.get_secret_value() if token else None
    return RepositoryRef(owner=owner, name=repo, credential=credential)
