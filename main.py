# Essential imports
import time
from fastapi import FastAPI, Request, status, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

# Import all models for SQLAlchemy relationship resolution
import models  # This triggers the imports in models/__init__.py
from routers import auth, users, products, favourites

# Rate limiter imports
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from middleware.rate_limiter import limiter

# Logging imports
from core.logging_config import setup_logging
from middleware import RequestIDMiddleware, get_request_id
from utils.logger import get_logger, sanitize_log_data

from core.config import Settings, get_settings
from core.database import Base, build_engine, build_session_factory
from core.exceptions import AppError

# CORS imports
from fastapi.middleware.cors import CORSMiddleware


logger = get_logger(__name__)

VERIFY_EMAIL_PREFIX = "/auth/verify-email/"


def loggable_path(path: str) -> str:
    """Request path with the email verification token masked."""
    if path.startswith(VERIFY_EMAIL_PREFIX):
        token = path[len(VERIFY_EMAIL_PREFIX):]
        return VERIFY_EMAIL_PREFIX + sanitize_log_data({"token": token})["token"]
    return path


# Lifecycle events logging
@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    if settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=app.state.engine)

    logger.info("Application startup complete", extra={"event": "startup", "env": settings.ENV})
    yield
    app.state.engine.dispose()
    logger.info("Application shutting down", extra={"event": "shutdown"})


def create_app(settings: Settings) -> FastAPI:
    """
    Build the Sell-It API for the given settings.

    The engine, session factory and settings live on ``app.state`` so each
    app instance (tests build their own) is fully isolated.
    """
    setup_logging(
        log_level=settings.LOG_LEVEL,
        log_dir=settings.LOG_DIR
    )

    app = FastAPI(
        title="Sell-It API",
        description="Backend API for the Sell-It classifieds marketplace",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.engine = build_engine(settings.DATABASE_URL)
    app.state.session_factory = build_session_factory(app.state.engine)


    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


    # HTTP Request Logging Middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """
        Log every HTTP request with method, path, status code and duration.
        """
        start_time = time.time()

        response = await call_next(request)

        duration = (time.time() - start_time) * 1000  # ms
        client_ip = request.client.host if request.client else "unknown"
        path = loggable_path(request.url.path)

        logger.info(
            f'{client_ip} - "{request.method} {path} HTTP/1.1" {response.status_code}',
            extra={
                "method": request.method,
                "path": path,
                "query": sanitize_log_data(dict(request.query_params)),
                "status_code": response.status_code,
                "duration_ms": round(duration, 2),
                "client_ip": client_ip
            }
        )

        return response


    # Add request ID middleware
    app.add_middleware(RequestIDMiddleware)


    # Health check
    @app.get("/health")
    async def health_check():
        logger.debug("Health check requested")
        return {"status": "Healthy"}


    # Domain errors carry a stable machine-readable code
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "code": exc.code},
            headers=exc.headers
        )


    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch all unhandled exceptions (including delivery and storage
        failures), log them with full context and return a generic 500.
        """
        if isinstance(exc, (HTTPException, RequestValidationError)):
            raise exc

        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra={
                "path": loggable_path(request.url.path),
                "method": request.method,
                "error_type": type(exc).__name__,
                "request_id": get_request_id(request)
            },
            exc_info=True
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"}
        )


    # Including routers
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(products.router)
    app.include_router(favourites.router)


    # Add rate limiter to the app
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    return app


app = create_app(get_settings())
