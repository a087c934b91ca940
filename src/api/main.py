"""FastAPI application factory for the Comprehend service.

Wires together the profile, upload and results routers, the exception
handlers, the middleware stack and tracing. Middleware run in reverse order
of registration, so the last one added sees the request first.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import Depends, FastAPI
from loguru import logger

from src.api.middleware.error_handler import register_exception_handlers
from src.api.middleware.request_context import RequestContextMiddleware
from src.api.middleware.request_logging import RequestLoggingMiddleware
from src.api.middleware.security_headers import SecurityHeadersMiddleware
from src.api.routes import profiles_router, results_router, uploads_router
from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings, get_settings
from src.core.logging import setup_logging
from src.core.observability import instrument_app, setup_tracing
from src.infrastructure.comprehend import close_comprehend_client
from src.infrastructure.database.session import (
    check_database_connection,
    close_database,
)


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Verify the database on startup and release clients on shutdown.

    Raises:
        RuntimeError: If the database is unreachable at startup.
    """
    is_healthy, error_msg = await check_database_connection()
    if not is_healthy:
        logger.error("Database connection failed during startup: {}", error_msg)
        raise RuntimeError(f"Database connection failed: {error_msg}")
    logger.info("Database connection successful")

    logger.info(
        "Application startup complete - {} v{}",
        app_instance.title,
        app_instance.version,
    )

    yield

    logger.info("Application shutdown initiated")
    await close_comprehend_client()
    await close_database()
    logger.info("Application shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to build the app with; defaults to ``get_settings()``.

    Returns:
        FastAPI: The configured application.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings)
    setup_tracing(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    register_exception_handlers(application)

    # 3. Request logging
    application.add_middleware(RequestLoggingMiddleware, log_config=settings.log_config)
    # 2. Correlation ID
    application.add_middleware(RequestContextMiddleware)
    # 1. Security headers
    application.add_middleware(SecurityHeadersMiddleware)

    application.include_router(profiles_router)
    application.include_router(uploads_router)
    application.include_router(results_router)

    @application.get("/health", tags=["monitoring"])
    async def health() -> dict[str, object]:
        """Report liveness and database connectivity.

        A database failure degrades the status rather than failing the check.
        """
        is_healthy, error_msg = await check_database_connection()
        if not is_healthy:
            logger.warning("Database health check failed: {}", error_msg)
        return {
            "status": "healthy" if is_healthy else "degraded",
            "database": is_healthy,
        }

    @application.get("/info", tags=["monitoring"])
    async def info(
        app_settings: Annotated[Settings, Depends(get_settings)],
    ) -> dict[str, Any]:
        return {
            "app_name": app_settings.app_name,
            "version": app_settings.app_version,
            "environment": app_settings.environment,
            "debug": app_settings.debug,
        }

    instrument_app(application, settings)

    return application


app = create_app()
