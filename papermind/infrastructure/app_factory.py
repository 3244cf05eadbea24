from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any, Dict, Optional

import anyio
from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from ..modules.common.exceptions import ConfigurationError
from ..modules.common.utils.error_handler import register_exception_handlers
from .analysis import get_document_analyzer
from .config.settings import EnvironmentOption, Settings, get_settings
from .database.session import create_tables, dispose_engine
from .extraction import get_text_extractor
from .logging import (
    generate_correlation_id,
    get_logger,
    reset_correlation_id,
    set_correlation_id,
)
from .storage import get_object_store

logger = get_logger(__name__)

CORRELATION_HEADERS = ("x-request-id", "x-correlation-id")


async def set_threadpool_tokens(number_of_tokens: int = 100) -> None:
    """Configure the number of threadpool tokens for anyio."""
    limiter = anyio.to_thread.current_default_thread_limiter()
    limiter.total_tokens = number_of_tokens


def validate_service_configuration(settings: Settings) -> None:
    """Fail fast when a credential the request path depends on is missing.

    Raises:
        ConfigurationError: If a required setting is empty.
    """
    if not settings.AUTH_JWT_SECRET:
        raise ConfigurationError("AUTH_JWT_SECRET is not configured")
    if not settings.ANTHROPIC_API_KEY:
        raise ConfigurationError("ANTHROPIC_API_KEY is not configured")


def lifespan_factory(
    settings: Settings,
    create_tables_on_startup: bool = True,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Build the lifespan that owns the process-wide service handles.

    Startup validates configuration, constructs the object store, text
    extractor and analyzer once, and optionally creates tables. Shutdown
    closes the language model client and the database pool.

    Args:
        settings: Application settings
        create_tables_on_startup: Whether to create database tables on startup

    Returns:
        An async context manager for FastAPI's lifespan
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        await set_threadpool_tokens()

        try:
            validate_service_configuration(settings)
            app.state.object_store = get_object_store()
            app.state.text_extractor = get_text_extractor()
            app.state.document_analyzer = get_document_analyzer()

            if create_tables_on_startup:
                await create_tables()

            logger.info(f"{settings.APP_NAME} started in {settings.ENVIRONMENT.value} environment")
            yield

        finally:
            analyzer = getattr(app.state, "document_analyzer", None)
            if analyzer is not None:
                await analyzer.close()
            await dispose_engine()
            logger.info(f"{settings.APP_NAME} stopped")

    return lifespan


async def correlation_id_middleware(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """Bind a correlation id to the request's logs and echo it in ``X-Request-ID``."""
    correlation_id = next(
        (request.headers[name] for name in CORRELATION_HEADERS if request.headers.get(name)),
        None,
    ) or generate_correlation_id()
    request.state.correlation_id = correlation_id

    token = set_correlation_id(correlation_id)
    try:
        response = await call_next(request)
    finally:
        reset_correlation_id(token)

    response.headers["X-Request-ID"] = correlation_id
    return response


def create_application(
    router: APIRouter,
    settings: Optional[Settings] = None,
    lifespan: Optional[Callable[[FastAPI], AbstractAsyncContextManager[None]]] = None,
    create_tables_on_startup: Optional[bool] = None,
    **kwargs: Any,
) -> FastAPI:
    """Creates and configures a FastAPI application based on the provided settings.

    Args:
        router: The APIRouter containing the routes for the application
        settings: Application settings (uses get_settings() if None)
        lifespan: Lifespan for the app; defaults to ``lifespan_factory(settings)``
        create_tables_on_startup: Defaults to ``settings.CREATE_TABLES_ON_STARTUP``
        **kwargs: Additional keyword arguments passed to the FastAPI constructor

    Returns:
        A configured FastAPI application
    """
    if settings is None:
        settings = get_settings()

    if create_tables_on_startup is None:
        create_tables_on_startup = settings.CREATE_TABLES_ON_STARTUP

    metadata: Dict[str, Any] = {
        "title": settings.APP_NAME,
        "description": settings.APP_DESCRIPTION,
        "version": settings.VERSION,
        "docs_url": settings.DOCS_URL,
        "redoc_url": settings.REDOC_URL,
        "openapi_url": settings.OPENAPI_URL,
    }
    metadata.update(kwargs)

    if settings.ENVIRONMENT == EnvironmentOption.PRODUCTION and not settings.ENABLE_DOCS_IN_PRODUCTION:
        metadata.update({"docs_url": None, "redoc_url": None, "openapi_url": None})

    if lifespan is None:
        lifespan = lifespan_factory(settings, create_tables_on_startup=create_tables_on_startup)

    application = FastAPI(lifespan=lifespan, debug=settings.DEBUG, **metadata)

    application.include_router(router)
    register_exception_handlers(application)
    application.middleware("http")(correlation_id_middleware)

    if settings.CORS_ENABLED:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS_LIST,
            allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID"],
        )

    if settings.GZIP_ENABLED:
        application.add_middleware(GZipMiddleware, minimum_size=settings.GZIP_MINIMUM_SIZE)

    return application
