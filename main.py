"""
Taste Palette API - Main Application.

FastAPI app with MongoDB backend.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
import sentry_sdk
from pymongo.errors import PyMongoError
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from database import Database
from settings import settings
from app.middleware.db_middleware import LazyDatabaseMiddleware
from app.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from app.utils.errors import PersistenceError, TastePaletteException

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Initialize Sentry for error tracking
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        integrations=[
            FastApiIntegration(),
            LoggingIntegration(
                level=logging.INFO,
                event_level=logging.ERROR
            ),
        ],
    )
    logger.info(f"Sentry initialized ({settings.SENTRY_ENVIRONMENT})")
else:
    logger.warning("Sentry DSN not configured - error tracking disabled")

# Import routers
from app.routes import auth, diary, menu, profile, user


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting Taste Palette API...")
    try:
        await Database.connect_db(settings.DATABASE_URL, settings.DATABASE_NAME)
        logger.info("Database initialized successfully")
    except PyMongoError as e:
        logger.warning(f"Failed to initialize database at startup: {e}")
        logger.warning("Database will be initialized lazily on first request")

    yield

    await Database.close_db()
    logger.info("Taste Palette API shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Taste Palette API",
    version="1.0.0",
    description="Menu scanning and personalized dish recommendations",
    lifespan=lifespan
)

app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Lazy database connection middleware
app.add_middleware(LazyDatabaseMiddleware)


def _error_response(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, **extra}
    )


@app.exception_handler(TastePaletteException)
async def taste_palette_exception_handler(request: Request, exc: TastePaletteException):
    """Render application errors as the standard error envelope."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    return _error_response(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return _error_response(exc.status_code, message)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors (400)."""
    errors = [
        {"field": ".".join(str(part) for part in error["loc"][1:]), "message": error["msg"]}
        for error in exc.errors()
    ]
    logger.info(f"{request.method} {request.url.path} -> 400: {errors}")
    return _error_response(400, "Invalid request data", errors=errors)


@app.exception_handler(PyMongoError)
async def database_exception_handler(request: Request, exc: PyMongoError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return _error_response(PersistenceError.status_code, PersistenceError.default_message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc!r}")
    return _error_response(500, "Something went wrong. Please try again.")


app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


# Health check
@app.get("/health")
async def health_check():
    """Health check endpoint - fast response without database dependency."""
    return {
        "status": "ok",
        "environment": settings.ENV,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": "1.0.0"
    }


@app.get("/health/detailed")
async def health_check_detailed():
    """Detailed health check with MongoDB connectivity test."""
    mongo_ok = await Database.ping()
    return {
        "status": "ok" if mongo_ok else "degraded",
        "database": "mongodb",
        "database_connected": mongo_ok,
        "environment": settings.ENV,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": "1.0.0"
    }


# Include routers
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(menu.router, prefix="/menu", tags=["Menu"])
app.include_router(profile.router, prefix="/profile", tags=["Taste Profile"])
app.include_router(diary.router, prefix="/diary", tags=["Diary"])
app.include_router(user.router, prefix="/user", tags=["User"])


# Root endpoint
@app.get("/")
async def root():
    """API root endpoint."""
    return {
        "message": "Taste Palette API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }
