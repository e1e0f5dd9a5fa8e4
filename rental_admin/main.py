from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError, OperationalError
from starlette import status
from rental_admin.database import Base, engine
from rental_admin.config import settings
from rental_admin.Middleware.request_logging import request_logging_middleware
from rental_admin import models  # noqa: F401 register models with Base.metadata
from rental_admin.limits import limiter, RateLimitExceeded, SlowAPIMiddleware
from rental_admin.services.file_store import FileStoreError
from slowapi import _rate_limit_exceeded_handler
import logging
import os

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


from rental_admin.routers import auth, logs, properties

app = FastAPI(title="Rental Admin")
app.middleware("http")(request_logging_middleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rate limiting middleware and handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(FileStoreError)
async def file_store_error_handler(request: Request, exc: FileStoreError):
    logger.error(f"File store error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Could not store uploaded file", "error": "file_store_error"},
    )


@app.exception_handler(OperationalError)
async def database_operational_error_handler(request: Request, exc: OperationalError):
    """Handle database connection/operation errors"""
    logger.error(f"Database operational error: {exc}", exc_info=True)
    error_msg = str(exc).lower()

    if "could not connect" in error_msg or "connection" in error_msg:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "detail": "Database connection error. Please try again.",
                "error": "database_connection_error",
            },
        )
    elif "timeout" in error_msg:
        return JSONResponse(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            content={
                "detail": "Database query timeout. Please try again.",
                "error": "database_timeout",
            },
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database error occurred", "error": "database_error"},
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Handle general SQLAlchemy errors"""
    logger.error(f"Database error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database error occurred", "error": "database_error"},
    )


# Only create tables for SQLite (local dev); PostgreSQL goes through Alembic
if settings.DATABASE_URL.startswith("sqlite"):
    Base.metadata.create_all(bind=engine)


@app.get("/healthy", status_code=status.HTTP_200_OK)
def health_check():
    return {"status": "Healthy"}


app.include_router(auth.router)
app.include_router(properties.router)
app.include_router(logs.router)

# Uploaded images are public, addressed by the paths stored on each property
if os.getenv("TESTING") != "true":
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount(
    settings.UPLOAD_URL_PREFIX,
    StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
    name="uploads",
)
