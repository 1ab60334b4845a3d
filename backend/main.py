import asyncio
import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError

from backend.db.connection import (
    dispose_engine,
    get_database_type,
    get_database_url,
    get_engine,
    get_session_factory,
    init_models,
)
from backend.db.store import StoreUnavailableError, SyncStore
from scraper.providers import ProviderError

from .api import sync
from .schemas.error import ErrorType, ValidationErrorDetail
from .schemas.sync import HealthResponse, ProviderHealth
from .services.dependencies import build_event_provider, get_event_provider, get_sync_store
from .services.sync import MmaSyncService
from .settings import AppSettings, get_settings
from .utils.error_responses import (
    build_error_response,
    build_validation_error_response,
    to_json_response,
)
from .utils.request_context import get_request_id, set_request_id

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level_numeric,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _validate_environment(*, active_settings: AppSettings | None = None) -> None:
    """Log warnings for optional configuration that is not set."""
    candidate = active_settings or get_settings()
    warnings = candidate.optional_config_warnings()
    if warnings:
        logger.warning("=" * 60)
        logger.warning("Environment Configuration Warnings:")
        for warning in warnings:
            logger.warning("  • %s", warning)
        logger.warning("=" * 60)


def _sanitize_database_url(url: str) -> str:
    """Sanitize database URL to hide password in logs."""
    if "://" not in url:
        return url

    scheme, rest = url.split("://", 1)
    if "@" in rest:
        auth, host_db = rest.split("@", 1)
        if ":" in auth:
            user, _ = auth.split(":", 1)
            return f"{scheme}://{user}:***@{host_db}"
        return f"{scheme}://{auth}@{host_db}"
    return url


async def run_startup_sync() -> None:
    """Full event sync launched in the background when the API boots."""
    app_settings = get_settings()
    provider = build_event_provider(app_settings)
    try:
        service = MmaSyncService(
            SyncStore(get_session_factory()),
            provider,
            past_events_limit=app_settings.sync_past_events_limit,
        )
        result = await service.sync_all()
    finally:
        await provider.aclose()

    if result.success:
        logger.info(
            "Startup sync complete: %d events, %d fights, %d errors",
            result.events_processed,
            result.fights_processed,
            len(result.errors),
        )
    else:
        logger.error("Startup sync aborted: %s", "; ".join(result.errors[-3:]))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    _validate_environment()

    logger.info("=" * 60)
    logger.info("MMA Data Sync API - Database Preflight Check")
    logger.info("=" * 60)
    logger.info("Database Type: %s", get_database_type().upper())
    logger.info("Database URL: %s", _sanitize_database_url(get_database_url()))
    logger.info("Sync provider: %s", settings.sync_provider)
    logger.info("=" * 60)

    await init_models(get_engine())

    startup_sync: asyncio.Task[None] | None = None
    if settings.sync_on_startup:
        logger.info("Launching background sync on startup")
        startup_sync = asyncio.create_task(run_startup_sync())

    yield

    # A started sync always runs to completion.
    if startup_sync is not None:
        if not startup_sync.done():
            logger.info("Waiting for the startup sync to finish before shutdown")
        try:
            await startup_sync
        except Exception:
            logger.exception("Startup sync crashed")

    logger.info("Shutting down MMA Data Sync API")
    await dispose_engine()


app = FastAPI(
    title="MMA Data Sync API",
    version="0.1.0",
    description=(
        "Ingests MMA organizations, events, fight cards and rosters from external providers."
    ),
    lifespan=lifespan,
    redirect_slashes=False,  # Disable automatic trailing slash redirects
)


# Middleware to add request ID to each request
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add unique request ID to each request for tracking."""
    request_id = str(uuid.uuid4())
    set_request_id(request_id)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# Exception handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle FastAPI request validation errors."""
    errors = [
        ValidationErrorDetail(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            value=error.get("input"),
        )
        for error in exc.errors()
    ]

    logger.warning(
        "Validation error for request %s to %s: %s errors",
        get_request_id(),
        request.url.path,
        len(errors),
    )

    return to_json_response(
        build_validation_error_response(
            message="Request validation failed",
            detail=f"{len(errors)} validation error(s)",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            path=str(request.url.path),
            errors=errors,
        )
    )


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_exception_handler(request: Request, exc: StoreUnavailableError):
    """Handle database outages raised outside a sync run."""
    logger.error(
        "Store unavailable for request %s to %s: %s", get_request_id(), request.url.path, exc
    )

    return to_json_response(
        build_error_response(
            error_type=ErrorType.DATABASE_ERROR,
            message="Database unavailable",
            detail=str(exc),
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            path=str(request.url.path),
            retry_after=5,
        )
    )


@app.exception_handler(ProviderError)
async def provider_exception_handler(request: Request, exc: ProviderError):
    """Handle provider misconfiguration surfacing while wiring a request."""
    logger.error("Provider error for request %s to %s: %s", get_request_id(), request.url.path, exc)

    return to_json_response(
        build_error_response(
            error_type=ErrorType.PROVIDER_ERROR,
            message="Provider unavailable",
            detail=str(exc),
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            path=str(request.url.path),
        )
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Handle all other unhandled exceptions."""
    logger.exception(
        "Unhandled exception for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        type(exc).__name__,
    )

    return to_json_response(
        build_error_response(
            error_type=ErrorType.INTERNAL_ERROR,
            message="Internal server error",
            detail=f"An unexpected error occurred: {type(exc).__name__}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            path=str(request.url.path),
        )
    )


@app.get("/health", tags=["system"], response_model=HealthResponse)
async def healthcheck(
    store: SyncStore = Depends(get_sync_store),
    provider=Depends(get_event_provider),
) -> HealthResponse:
    """Report database reachability and the configured provider's health."""
    try:
        await store.ping()
        database = "ok"
    except StoreUnavailableError as exc:
        logger.warning("Health check: database unavailable: %s", exc)
        database = "unavailable"

    providers = [ProviderHealth(name=provider.name, healthy=await provider.health_check())]
    return HealthResponse(
        status="ok" if database == "ok" else "degraded",
        database=database,
        providers=providers,
    )


app.include_router(sync.router, prefix="/api/sync", tags=["sync"])
