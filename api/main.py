"""Main FastAPI application for the exercise tracker."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.routes import legacy_router, router
from config.settings import Settings, settings as default_settings
from models.database import UserStore, close_mongo_connection, init_mongo
from utils.errors import ExerciseTrackerError, NotFound
from utils.logger import setup_logger

logger = setup_logger(__name__)


async def handle_tracker_error(request: Request, exc: ExerciseTrackerError):
    """Render every failure as plain text with its status code."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc!r}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc!r}")
    return PlainTextResponse(exc.message, status_code=exc.status_code)


async def handle_http_error(request: Request, exc: StarletteHTTPException):
    """Unmatched routes and methods share the not-found response."""
    if exc.status_code in (404, 405):
        return await handle_tracker_error(request, NotFound())
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code)


def create_app(
    settings: Optional[Settings] = None,
    user_store: Optional[UserStore] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    When ``user_store`` is given it is used as is and no MongoDB connection
    is opened.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for startup/shutdown events."""
        if user_store is not None:
            yield
            return

        logger.info("Starting application...")
        app.state.user_store = await init_mongo()
        logger.info("Application started successfully")
        
        yield
        
        logger.info("Shutting down application...")
        await close_mongo_connection()
        logger.info("Application shut down")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Register users and keep a queryable log of their exercises",
        lifespan=lifespan,
    )
    if user_store is not None:
        app.state.user_store = user_store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    logger.info(f"CORS configured with origins: {settings.cors_origins}")

    app.add_exception_handler(ExerciseTrackerError, handle_tracker_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)

    app.include_router(router)
    app.include_router(legacy_router)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": f"{settings.app_name} API",
            "version": settings.app_version,
            "status": "running"
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": settings.app_name
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug
    )
