"""anon-diary API - FastAPI application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from . import __version__
from .config import Settings, get_settings
from .database import DiaryStorage
from .errors import NotFoundError, StorageError, ValidationError
from .logging_config import get_logger
from .pipeline import GenerationClient
from .rate_limit import create_limiter
from .routes import entries_router, memories_router

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open storage and the generation client for the app's lifetime."""
    settings: Settings = app.state.settings
    logger.info(f"Starting anon-diary API (debug={settings.debug})")
    storage = DiaryStorage(settings.database_path).open()
    generator = GenerationClient.from_settings(settings)
    if not settings.groq_api_key:
        logger.warning("GROQ_API_KEY is not set; every post will use the fallback greentext")
    app.state.storage = storage
    app.state.generator = generator
    try:
        yield
    finally:
        await generator.aclose()
        storage.close()
        logger.info("Shutting down anon-diary API")


async def _validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


async def _not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def _storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Storage failure"})


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application. Collaborators are created in the lifespan."""
    settings = settings or get_settings()

    app = FastAPI(
        title="anon-diary API",
        description="Anonymous diary that retells entries as greentext",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Rate limiting
    limiter = create_limiter(settings)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ValidationError, _validation_error_handler)
    app.add_exception_handler(NotFoundError, _not_found_handler)
    app.add_exception_handler(StorageError, _storage_error_handler)

    # Include routers
    app.include_router(entries_router)
    app.include_router(memories_router)

    @app.get("/")
    @limiter.exempt
    async def root():
        """Service status. Exempt from rate limiting."""
        return {
            "service": "anon-diary",
            "version": __version__,
            "status": "ok",
        }

    @app.get("/health")
    @limiter.exempt
    async def health(request: Request):
        """Health check with an actual database round trip."""
        storage: DiaryStorage = request.app.state.storage
        db_status = "connected" if storage.ping() else "error"
        return {
            "status": "healthy" if db_status == "connected" else "degraded",
            "database": db_status,
        }

    return app
