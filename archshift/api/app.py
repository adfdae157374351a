"""FastAPI application factory for archshift.

Creates and configures the FastAPI app with CORS, session cookies,
and all route modules registered.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from archshift import __version__
from archshift.core.errors import StoreError

from .deps import get_db_manager

logger = logging.getLogger(__name__)


def create_app(db_manager, engine, settings=None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        db_manager: DatabaseManager instance
        engine: MigrationEngine instance
        settings: Settings instance (defaults to get_settings())

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        from archshift.setting import get_settings
        settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # Stop the simulator thread before the process exits
        engine.shutdown()

    app = FastAPI(
        title="archshift API",
        description="Source-to-AWS architecture design and simulated migration",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(SessionMiddleware, secret_key=settings.session_secret_key)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.db_manager = db_manager
    app.state.engine = engine
    app.state.settings = settings

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        # Body matches the HTTPException {"detail": ...} shape
        logger.error(f"Store unavailable for {request.url.path}: {exc.message}")
        return JSONResponse(status_code=503, content={"detail": exc.to_dict()})

    from .routes.auth import router as auth_router
    from .routes.scope import router as scope_router
    from .routes.architecture import router as architecture_router
    from .routes.migration import router as migration_router

    app.include_router(auth_router, prefix="/api")
    app.include_router(scope_router, prefix="/api")
    app.include_router(architecture_router, prefix="/api")
    app.include_router(migration_router, prefix="/api")

    @app.get("/api/health")
    async def health_check(db=Depends(get_db_manager)):
        database = "ok"
        try:
            db.ping()
        except Exception as e:
            logger.warning(f"Health check could not reach database: {e}")
            database = "unavailable"
        return {"status": "ok", "service": "archshift", "database": database}

    logger.info("FastAPI app created with all routes registered")
    return app
