"""Shared fixtures: an in-memory GitHub API served through ``httpx.MockTransport``."""

from __future__ import annotations

import base64
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio

from revision_compare.domain.value_objects import RepositoryRef
from revision_compare.infrastructure.github_rest_adapter import GitHubRestAdapter
from revision_compare.infrastructure.transport import GitHubTransport

RATE_HEADERS = {"x-ratelimit-remaining": "4999", "x-ratelimit-reset": "1700000000"}


def commit_payload(sha: str, message: str = "msg", date: str = "2024-01-01T00:00:00Z") -> dict:
    person = {"name": "Ada", "email": "ada@example.com", "date": date}
    return {"sha": sha, "commit": {"message": message, "author": person, "committer": person}}


def content_payload(text: str | bytes, path: str = "file.txt") -> dict:
    raw = text.encode("utf-8") if isinstance(text, str) else text
    encoded = base64.encodebytes(raw).decode("ascii")  # wrapped at 76 chars, like GitHub
    return {
        "type": "file",
        "name": path.rsplit("/", 1)[-1],
        "path": path,
        "size": len(raw),
        "encoding": "base64",
        "content": encoded,
    }


class FakeGitHub:
    """Minimal stand-in for the GitHub REST API, keyed by owner/repo ``demo``.

    ``files`` maps ``(ref, path)`` to text; ``commits`` maps a ref to a
    commit payload; ``compares`` maps ``"base...head"`` to a compare payload.
    Every request is recorded in ``requests``.
    """

    prefix = "/repos/octo/demo"

    def __init__(self) -> None:
        self.files: dict[tuple[str, str], str | bytes] = {}
        self.commits: dict[str, dict[str, Any]] = {}
        self.compares: dict[str, dict[str, Any]] = {}
        self.pages: dict[str, list[list[dict[str, Any]]]] = {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if not path.startswith(self.prefix):
            return self._not_found()
        endpoint = path[len(self.prefix):]

        if endpoint.startswith("/contents/"):
            key = (request.url.params.get("ref", ""), endpoint[len("/contents/"):])
            if key not in self.files:
                return self._not_found()
            return httpx.Response(200, json=content_payload(self.files[key], key[1]), headers=RATE_HEADERS)

        if endpoint.startswith("/commits/"):
            ref = endpoint[len("/commits/"):]
            if ref not in self.commits:
                return httpx.Response(
                    422, json={"message": f"No commit found for SHA: {ref}"}, headers=RATE_HEADERS
                )
            return httpx.Response(200, json=self.commits[ref], headers=RATE_HEADERS)

        if endpoint.startswith("/compare/"):
            spec = endpoint[len("/compare/"):]
            if spec not in self.compares:
                return self._not_found()
            return httpx.Response(200, json=self.compares[spec], headers=RATE_HEADERS)

        if endpoint in self.pages:
            page = int(request.url.params.get("page", "1"))
            pages = self.pages[endpoint]
            body = pages[page - 1] if page <= len(pages) else []
            return httpx.Response(200, json=body, headers=RATE_HEADERS)

        return self._not_found()

    @staticmethod
    def _not_found() -> httpx.Response:
        return httpx.Response(404, json={"message": "Not Found"}, headers=RATE_HEADERS)

    def paths_requested(self) -> list[str]:
        return [r.url.path for r in self.requests]


@pytest_asyncio.fixture()
async def transport_factory() -> AsyncIterator[Callable[..., GitHubTransport]]:
    """Build transports over ``httpx.MockTransport``; their clients are closed on teardown."""
    clients: list[httpx.AsyncClient] = []

    def build(handler, **options: Any) -> GitHubTransport:  # type: ignore[no-untyped-def]
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return GitHubTransport(client, **options)

    yield build
    for client in clients:
        await client.aclose()


@pytest.fixture()
def repo() -> RepositoryRef:
    return RepositoryRef(owner="octo", name="demo")


@pytest.fixture()
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture()
def adapter(fake_github: FakeGitHub, transport_factory) -> GitHubRestAdapter:  # type: ignore[no-untyped-def]
    return GitHubRestAdapter(transport_factory(fake_github))
