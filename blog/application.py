"""Application factory that serves the blog API under ``/api``."""
from __future__ import annotations

from typing import Dict, Optional

from fastapi import FastAPI

from .config import Settings, load_settings
from .database import Database
from .service import create_app as create_api_app


def create_application(
    *,
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """Create the combined ASGI application."""

    if settings is None:
        settings = load_settings()

    database = database or Database(settings.database_path, bcrypt_rounds=settings.bcrypt_rounds)
    api_app = create_api_app(settings=settings, database=database)

    app = FastAPI(
        title="Blog",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.database = database
    app.state.api = api_app

    @app.get("/health")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    app.mount("/api", api_app)

    return app


__all__ = ["create_application"]
