# club_selection/main.py - Application factory, middleware and error handlers
from fastapi import FastAPI, Request, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
import logging
import traceback
import time

from club_selection.core.config import settings
from club_selection.core.db import db_manager, get_db, check_health
from club_selection.core.exceptions import EnrollmentError
from club_selection.api.routers import auth, students, embed, admin

LOG_FORMATS = {
    "simple": "%(levelname)s - %(message)s",
    "detailed": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}


def setup_logging() -> None:
    """Configure the root logger from LOG_LEVEL / LOG_FORMAT / LOG_FILE_PATH"""
    formatter = logging.Formatter(LOG_FORMATS.get(settings.LOG_FORMAT, LOG_FORMATS["detailed"]))

    handlers = [logging.StreamHandler()]
    if settings.LOG_FILE_PATH:
        handlers.append(RotatingFileHandler(
            settings.LOG_FILE_PATH,
            maxBytes=settings.LOG_MAX_SIZE,
            backupCount=settings.LOG_BACKUP_COUNT,
        ))

    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=settings.LOG_LEVEL, handlers=handlers, force=True)

    if settings.is_development and settings.DEV_LOG_SQL:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)


setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting Club Selection API...")
    logger.info(f"Environment: {settings.ENV}")
    logger.info(f"Database URL: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'local'}")

    # Create tables if they don't exist (for development)
    if settings.is_development:
        logger.info("Creating database tables...")
        db_manager.create_all()

    yield

    logger.info("Shutting down Club Selection API...")
    db_manager.close()


app = FastAPI(
    title=settings.API_TITLE,
    description="Course selection with capacity limits, tag quotas and one-time submission",
    version=settings.API_VERSION,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status and processing time"""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time

    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} "
        f"({process_time:.3f}s)"
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "Origin"],
    max_age=3600,
)


@app.exception_handler(EnrollmentError)
async def enrollment_error_handler(request: Request, exc: EnrollmentError):
    """Domain errors carry their own status code and machine-readable code"""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions"""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
    logger.error(traceback.format_exc())

    if settings.is_development:
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "error": str(exc),
                "traceback": traceback.format_exc()
            }
        )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


@app.get("/api/health")
def health(db: Session = Depends(get_db)):
    db_status = check_health(db)
    return {
        "status": "healthy" if db_status["status"] == "healthy" else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": db_status,
    }


app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(students.router, prefix="/api/students", tags=["Students"])
app.include_router(embed.router, prefix="/api/embed", tags=["Embed"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])


@app.get("/")
def root():
    return {
        "message": settings.API_TITLE,
        "version": settings.API_VERSION,
        "docs_url": "/docs" if settings.is_development else "Documentation disabled in production",
    }
