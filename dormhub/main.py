from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dormhub.api.error_handlers import register_exception_handlers
from dormhub.api.v1.router import router as api_v1_router
from dormhub.config.logging import setup_logging
from dormhub.config.settings import settings
from dormhub.core.middleware import register_middlewares
from dormhub.db.init_db import init_db


def create_app() -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures title, version, debug mode from Settings.
    - Registers CORS, core middleware, and exception handlers.
    - Includes the versioned API router under /api/v1.
    """
    setup_logging()

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version=settings.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Credentials cannot be combined with a wildcard origin
    allow_all = not settings.CORS_ORIGINS or settings.CORS_ORIGINS == ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.CORS_ORIGINS,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middlewares(app)
    register_exception_handlers(app)

    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    @app.on_event("startup")
    async def on_startup() -> None:
        if settings.AUTO_CREATE_TABLES and not settings.is_production():
            init_db()

    return app


app = create_app()
