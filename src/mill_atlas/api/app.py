# src/mill_atlas/api/app.py
"""
HTTP entry point. `create_app()` builds the FastAPI application around an
`ApplicationContainer`; when none is passed, one is bootstrapped from the
environment on startup and torn down on shutdown.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mill_atlas import __version__
from mill_atlas.bootstrap import create_app_config, create_container, shutdown_container
from mill_atlas.config import MillAtlasConfig
from mill_atlas.containers import ApplicationContainer

from .errors import install_exception_handlers
from .routers import auth, dashboard, public

logger = structlog.get_logger(__name__)


def create_app(
    container: Optional[ApplicationContainer] = None,
    config: Optional[MillAtlasConfig] = None,
) -> FastAPI:
    """Build the application; an injected container is neither created nor shut down here."""
    if config is None:
        config = container.pydantic_config() if container is not None else create_app_config()
    owns_container = container is None

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if owns_container:
            app.state.container = create_container(config, service_name="mill-atlas-api")
        logger.info("API started", debug=config.debug)
        try:
            yield
        finally:
            if owns_container:
                await shutdown_container(app.state.container)
            logger.info("API stopped")

    app = FastAPI(
        title="Mill Atlas API",
        version=__version__,
        debug=config.debug,
        lifespan=lifespan,
    )
    if container is not None:
        app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_exception_handlers(app)

    app.include_router(public.router, prefix="/api/public")
    app.include_router(auth.router, prefix="/api/auth")
    app.include_router(dashboard.router, prefix="/api/dashboard")

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok", "version": __version__}

    return app
