"""learnhub — FastAPI Application Entry Point."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from learnhub.config import settings
from learnhub.database import engine, Base
from learnhub.errors import AppError, GENERIC_FAILURE_MESSAGE, log_error
from learnhub.middleware.rate_limit import limiter
from learnhub.routers import admin, auth, courses, curriculum, progress
import learnhub.models  # noqa: F401  (registers every table on Base.metadata)

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# ── CORS origins from env (supports dev localhost + production domain) ──────
_cors_origins = [o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()]

app = FastAPI(
    title="learnhub",
    description="Video course catalog with progress tracking and an admin back-office.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        log_error(request.url.path, exc)
    else:
        logger.info("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.user_message})


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    """Storage failures are logged in full and answered without internals."""
    log_error(f"{request.method} {request.url.path}", exc)
    return JSONResponse(status_code=500, content={"detail": GENERIC_FAILURE_MESSAGE})


# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(auth.router)
app.include_router(courses.router)
app.include_router(progress.router)
app.include_router(admin.router)
app.include_router(curriculum.router)


@app.on_event("startup")
def on_startup():
    """Create tables on startup."""
    Base.metadata.create_all(bind=engine)
    logger.info("learnhub started (database: %s)", engine.url.render_as_string(hide_password=True))


@app.get("/")
def root():
    return {
        "name": "learnhub",
        "version": "1.0.0",
        "docs": "/docs",
    }


@app.get("/health")
def health():
    return {"status": "ok"}
