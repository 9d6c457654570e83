"""
Main FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from lifestyle_cms import __version__
from lifestyle_cms.api import api_router
from lifestyle_cms.core.config import settings
from lifestyle_cms.core.logging import get_logger, setup_logging
from lifestyle_cms.db.deps import DBSession
from lifestyle_cms.db.session import check_db_health, close_db, init_db
from lifestyle_cms.services.errors import CarouselError

# Setup logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan events.
    Handles startup and shutdown tasks.
    """
    # Startup
    logger.info(
        "starting_application",
        app_name=settings.APP_NAME,
        environment=settings.APP_ENV,
        version=__version__,
    )

    # Initialize database connection pool
    await init_db()

    yield

    # Shutdown
    logger.info("shutting_down_application")
    await close_db()


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Lifestyle site CMS - carousel content API",
    version=__version__,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)


# Health check endpoint
@app.get("/health", tags=["health"])
async def health_check(db: DBSession) -> JSONResponse:
    """
    Health check endpoint for monitoring.
    Includes database connectivity check.
    """
    db_healthy = await check_db_health(db)

    return JSONResponse(
        status_code=200 if db_healthy else 503,
        content={
            "status": "healthy" if db_healthy else "unhealthy",
            "app_name": settings.APP_NAME,
            "environment": settings.APP_ENV,
            "version": __version__,
            "database": "connected" if db_healthy else "disconnected",
        }
    )


@app.get("/", tags=["root"])
async def root() -> JSONResponse:
    """
    Root endpoint.
    """
    return JSONResponse(
        content={
            "message": f"Welcome to {settings.APP_NAME} API",
            "version": __version__,
            "docs": "/docs" if settings.DEBUG else "Documentation disabled in production",
        }
    )


# Include API routers
app.include_router(api_router, prefix=settings.API_V1_PREFIX)


# ========================================
# Exception handlers
# ========================================

@app.exception_handler(CarouselError)
async def carousel_error_handler(request: Request, exc: CarouselError) -> JSONResponse:
    """Typed service failures keep their code, details and status."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "carousel_error",
        code=exc.code,
        status_code=exc.status_code,
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "error": {
                "code": "validation_error",
                "message": "Request validation failed",
                "errors": jsonable_encoder(exc.errors()),
            }
        },
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for unhandled errors.
    """
    logger.error(
        "unhandled_exception",
        error=str(exc),
        path=request.url.path,
        method=request.method,
        exc_info=True,
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
            }
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "lifestyle_cms.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
