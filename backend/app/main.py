"""
FastAPI Backend Application
===========================
Main entry point for the Paraphraser API.

This file sets up:
- FastAPI app with CORS middleware
- Rate limiting middleware
- Request timing middleware
- Error handlers that turn service and pipeline errors into JSON answers
- Startup/shutdown of the Session Store, the rewrite orchestrator,
  Redis and the cleanup scheduler
- Health check endpoint
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from pipeline import InvalidRequest, LangChainRewriteProvider, OracleError, RewriteOrchestrator
from app.api import paraphrase, sessions, upload
from app.api.deps import get_session_store
from app.core.cache import cache_service
from app.core.config import get_settings
from app.core.errors import AppError
from app.core.middleware import RateLimitMiddleware, RequestTimingMiddleware
from app.db.session import create_engine, create_session_maker
from app.services import FileService, SessionStore
from app.tasks import build_cleanup_scheduler

settings = get_settings()

logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.

    Startup:
    - Create the database engine and the Session Store
    - Build the rewrite orchestrator around the configured LLM
    - Connect to Redis
    - Start the cleanup scheduler (CLEANUP_MODE=inprocess)

    Shutdown:
    - Stop the cleanup scheduler
    - Disconnect from Redis
    - Close database connections
    """
    # ----- STARTUP -----
    logger.info("Starting up Paraphraser API...")

    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)

    engine = create_engine(settings)
    store = SessionStore(
        create_session_maker(engine),
        ttl=settings.session_ttl,
        stale_max_age=settings.stale_max_age,
    )
    provider = LangChainRewriteProvider(
        provider=settings.llm_provider,
        temperature=settings.llm_temperature,
    )
    file_service = FileService(store=store, upload_dir=settings.upload_dir, settings=settings)

    app.state.session_store = store
    app.state.orchestrator = RewriteOrchestrator(provider)
    app.state.file_service = file_service

    # Connect to Redis (rate limiting is skipped without it)
    await cache_service.connect()

    scheduler = None
    if settings.cleanup_mode == "inprocess":
        scheduler = build_cleanup_scheduler(store, file_service, settings)
        scheduler.start()
    else:
        logger.info("Cleanup delegated to Celery beat")

    logger.info("Startup complete!", llm_provider=settings.llm_provider)

    yield  # Application runs here

    # ----- SHUTDOWN -----
    logger.info("Shutting down...")

    if scheduler is not None:
        await scheduler.stop()

    await cache_service.disconnect()
    await engine.dispose()

    logger.info("Shutdown complete!")


# Create FastAPI application
app = FastAPI(
    title="Paraphraser API",
    description="LangGraph-powered text paraphrasing with highlighted changes",
    version=API_VERSION,
    lifespan=lifespan,
)

# ----- Middleware (order matters: first added = outermost) -----

# Request timing (outermost - measures total time)
app.add_middleware(RequestTimingMiddleware)

# Rate limiting
app.add_middleware(
    RateLimitMiddleware,
    requests_per_minute=settings.rate_limit_per_minute,
    requests_per_hour=settings.rate_limit_per_hour,
    exclude_paths=["/health", "/docs", "/openapi.json", "/redoc", "/"],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ----- Error Handlers -----

def _validation_errors(exc: RequestValidationError) -> list:
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        errors.append({"field": ".".join(loc), "message": error.get("msg", "")})
    return errors


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request data", "errors": _validation_errors(exc)},
    )


@app.exception_handler(InvalidRequest)
async def invalid_request_handler(request: Request, exc: InvalidRequest):
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request data", "errors": exc.errors},
    )


@app.exception_handler(OracleError)
async def oracle_error_handler(request: Request, exc: OracleError):
    # Already logged with its session id by ParaphraseService
    return JSONResponse(
        status_code=500,
        content={"message": "Failed to paraphrase text", "error": exc.message},
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


# ----- Health Check -----
@app.get("/health")
async def health_check(store: SessionStore = Depends(get_session_store)):
    """
    Health check endpoint for monitoring.
    Returns status of all critical services.
    """
    # Check database connection
    db_status = "up"
    try:
        await store.ping()
    except Exception as e:
        db_status = f"error: {str(e)}"

    # Check Redis connection
    redis_status = "up" if cache_service.is_connected else "down"

    # Overall status
    all_up = db_status == "up"  # Redis is optional

    return {
        "status": "healthy" if all_up else "degraded",
        "services": {
            "api": "up",
            "database": db_status,
            "redis": redis_status,
        },
        "version": API_VERSION,
    }


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "Welcome to the Paraphraser API",
        "docs": "/docs",
        "health": "/health",
        "version": API_VERSION,
    }


# ----- API Routes -----
app.include_router(paraphrase.router, prefix="/api", tags=["paraphrase"])
app.include_router(upload.router, prefix="/api", tags=["files"])
app.include_router(sessions.router, prefix="/api", tags=["sessions"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.backend_host, port=settings.backend_port)
