"""FiveStep - FastAPI Application Entry Point.

Serves learner sessions of the five-step listening curriculum over HTTP.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fivestep import __version__
from fivestep.api.routes import health
from fivestep.api.routes import sessions
from fivestep.config.settings import get_settings
from fivestep.exceptions import (
    FiveStepError,
    SessionExistsError,
    SessionLimitError,
    SessionNotFoundError,
)
from fivestep.observability.logging import get_logger, init_logging
from fivestep.observability.metrics import set_build_info
from fivestep.orchestrator.session import SessionManager

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown of components.
    """
    settings = get_settings()
    init_logging(
        json_format=settings.environment == "production",
        level=settings.log_level,
    )
    logger.info(
        "fivestep_starting",
        version=__version__,
        environment=settings.environment,
        port=settings.api_port,
    )

    try:
        manager = await SessionManager.from_settings(settings)
        sessions.set_session_manager(manager)
        health.set_component_health("session_manager", True)
        health.set_component_health("synthesis", True)
        health.set_component_health("feedback", True)
        logger.info(
            "session_manager_initialized",
            max_sessions=manager.max_sessions,
            synthesis_backend=manager.gateway.backend.name,
            feedback_engine=manager.tutor.client.name,
        )

        if settings.metrics_enabled:
            set_build_info(__version__, settings.environment)

        health.set_ready(True)
        logger.info("fivestep_ready", components=health.get_component_health())

    except Exception as e:
        logger.error("fivestep_startup_failed", error=str(e))
        raise

    yield  # Application runs here

    logger.info("fivestep_shutting_down")
    health.set_ready(False)

    ended_count = manager.active_count
    await manager.shutdown()
    sessions.set_session_manager(None)
    for component in health.get_component_health():
        health.set_component_health(component, False)
    logger.info("sessions_ended", count=ended_count)

    logger.info("fivestep_shutdown_complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="FiveStep",
        description="Five-stage listening curriculum engine",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url="/redoc" if settings.environment != "production" else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.environment == "development" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(health.router)
    app.include_router(sessions.router)

    @app.exception_handler(FiveStepError)
    async def fivestep_exception_handler(request: Request, exc: FiveStepError) -> JSONResponse:
        if isinstance(exc, SessionNotFoundError):
            status_code = 404
        elif isinstance(exc, SessionLimitError):
            status_code = 503
        elif isinstance(exc, SessionExistsError):
            status_code = 409
        else:
            status_code = 400 if exc.recoverable else 500
        logger.warning(
            "request_failed",
            path=request.url.path,
            method=request.method,
            error=exc.to_dict(),
        )
        return JSONResponse(status_code=status_code, content={"detail": exc.to_dict()})

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app


# Create application instance
app = create_app()


def run() -> None:
    """Serve the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "fivestep.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower().replace("warn", "warning"),
        reload=settings.environment == "development",
    )


if __name__ == "__main__":
    run()
