"""Global exception handlers — translate engine errors to HTTP responses.

Every failure uses the ``{"status": "error", "message": "..."}`` envelope;
GitHub API failures also carry ``remaining`` and ``reset`` so the caller can
render a "retry after" hint.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from revision_compare.domain.exceptions import (
    ApiError,
    DecodeError,
    InvalidRepositoryError,
    NetworkError,
    RevisionCompareError,
    describe_error,
)

logger = logging.getLogger(__name__)

# GitHub statuses that are meaningful to our own callers as-is.
_PASSTHROUGH_STATUSES = frozenset({401, 403, 404, 409, 422})

_EXCEPTION_STATUS: list[tuple[type[RevisionCompareError], int]] = [
    (InvalidRepositoryError, 422),
    (DecodeError, 502),
    (NetworkError, 503),
]


def _error_json(
    status_code: int,
    message: str,
    remaining: int | None = None,
    reset: int | None = None,
) -> JSONResponse:
    content: dict[str, object] = {"status": "error", "message": message}
    if remaining is not None:
        content["remaining"] = remaining
    if reset is not None:
        content["reset"] = reset
    return JSONResponse(status_code=status_code, content=content)


def status_for_api_error(exc: ApiError) -> int:
    """Quota exhaustion → 429, client-meaningful statuses pass through, else 502."""
    if exc.is_quota_exhausted:
        return 429
    if exc.status in _PASSTHROUGH_STATUSES:
        return exc.status
    return 502


def register_error_handlers(app: FastAPI) -> None:
    """Attach exception handlers to the FastAPI application."""

    # ── GitHub API errors ───────────────────────────────────────────────

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        status_code = status_for_api_error(exc)
        logger.warning("GitHub API error %d (%s): %s", exc.status, request.url.path, exc.message)
        return _error_json(status_code, describe_error(exc), exc.remaining, exc.reset)

    # ── Other engine exceptions ─────────────────────────────────────────

    for exc_type, code in _EXCEPTION_STATUS:

        def _make_handler(
            status_code: int,
        ):  # type: ignore[no-untyped-def]
            async def handler(request: Request, exc: Exception) -> JSONResponse:
                logger.warning("%s: %s", type(exc).__name__, exc)
                return _error_json(status_code, str(exc))

            return handler

        app.add_exception_handler(exc_type, _make_handler(code))

    # ── Explicit HTTP errors raised by the routes ───────────────────────

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return _error_json(exc.status_code, str(exc.detail))

    # ── Pydantic / FastAPI validation errors ────────────────────────────

    @app.exception_handler(RequestValidationError)
    async def validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        messages = []
        for err in exc.errors():
            loc = " → ".join(str(p) for p in err.get("loc", []))
            messages.append(f"{loc}: {err.get('msg', 'validation error')}")
        return _error_json(422, "; ".join(messages))

    # ── Catch-all for unexpected errors ─────────────────────────────────

    @app.exception_handler(Exception)
    async def generic_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception")
        return _error_json(500, "An unexpected error occurred. Please try again later.")
