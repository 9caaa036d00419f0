"""
FastAPI application entry point for the posts API.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from posts_api.config import Settings, get_settings
from posts_api.errors import PostsApiError, StoreError
from posts_api.routes import build_router

logger = logging.getLogger(__name__)


async def handle_posts_api_error(request: Request, exc: PostsApiError) -> JSONResponse:
    if isinstance(exc, StoreError):
        logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title="Posts API", version="v1")
    app.include_router(build_router(), prefix=settings.api_prefix)
    app.add_exception_handler(PostsApiError, handle_posts_api_error)
    # The guard reads settings through Depends(get_settings).
    app.dependency_overrides[get_settings] = lambda: settings
    return app


app = create_app()
