"""
FastAPI application entry point for the AlphaSpark backend.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from alphaspark import pages
from alphaspark.auth import NotAuthenticated, not_authenticated_handler
from alphaspark.config import get_settings
from alphaspark.routes import router


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="AlphaSpark Backend", version="0.1.0")
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie,
        max_age=settings.session_max_age,
        same_site="lax",
        https_only=settings.is_production,
    )
    app.add_exception_handler(NotAuthenticated, not_authenticated_handler)
    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(pages.router)
    # Mounted last so API and page routes take precedence.
    app.mount(
        "/",
        StaticFiles(directory=pages.public_dir(), check_dir=False),
        name="static",
    )
    return app


app = create_app()
