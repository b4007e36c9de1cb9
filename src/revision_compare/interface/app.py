"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from revision_compare.interface.dependencies import shutdown, startup
from revision_compare.interface.error_handlers import register_error_handlers
from revision_compare.interface.routes import router


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage startup / shutdown of shared resources."""
    await startup()
    yield
    await shutdown()


def create_app() -> FastAPI:
    """Build and wire the FastAPI application."""
    app = FastAPI(
        title="Revision Compare",
        version="1.0.0",
        description=(
            "Browse a GitHub repository and compare two points in its history "
            "(branch tips, adjacent commits or tags): file-level change summary "
            "plus per-file unified diffs."
        ),
        lifespan=_lifespan,
    )

    register_error_handlers(app)
    app.include_router(router)

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
