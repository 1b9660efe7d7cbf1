"""FastAPI application setup with lifespan and exception handlers."""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from clipforge import __version__, configure_logging, validate_configuration
from clipforge.api.routes import router
from clipforge.config import settings
from clipforge.db import init_database, shutdown
from clipforge.errors import ApiError
from clipforge.orchestrator.pipeline import build_pipeline
from clipforge.workers.processing_tasks import fail_orphaned_projects

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Startup:
        - Validate configuration (fatal outside development)
        - Initialize database schema
        - Fail projects orphaned by a previous process
        - Build the shared pipeline

    Shutdown:
        - Close capability HTTP clients
        - Close database connections
    """
    # Startup
    configure_logging(settings)
    logger.info("Starting clipforge API...")
    validate_configuration(settings)
    await init_database()
    if settings.pipeline.fail_orphaned_on_startup:
        await fail_orphaned_projects()
    app.state.pipeline = build_pipeline(settings)
    logger.info("API startup complete")

    yield

    # Shutdown
    logger.info("Shutting down clipforge API...")
    await app.state.pipeline.close()
    await shutdown()
    logger.info("API shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="clipforge API",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.server.session_secret,
    max_age=settings.server.session_max_age,
    https_only=settings.server.https_only,
    same_site="lax",
)

# CORS for the web client dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.server.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include router with all endpoints
app.include_router(router)

# Locally synthesized narration, fetched by the video assembler
app.mount(
    "/media",
    StaticFiles(directory=str(settings.storage.media_dir), check_dir=False),
    name="media",
)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed request bodies as 400 with a readable message."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(
        status_code=400,
        content={"message": "; ".join(problems) or "Invalid request"},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Catch-all exception handler to prevent stack traces in API responses."""
    logger.error(f"Unhandled exception in {request.method} {request.url.path}: {type(exc).__name__}: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error"},
    )
