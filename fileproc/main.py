"""
fileproc/main.py

FastAPI application entry point.

Responsibilities:
  - Create the FastAPI app with metadata from config
  - Build the processing scheduler and upload service once, in the lifespan,
    and drain the scheduler on shutdown
  - Register all API routers
  - Add a global exception handler for uncaught AppBaseException
  - Expose a /health endpoint for liveness probes
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fileproc.analyzers.base import AnalyzerRegistry
from fileproc.api.files_controller import router as files_router
from fileproc.core.config import settings
from fileproc.core.exceptions import AppBaseException
from fileproc.core.logger import get_logger
from fileproc.processing.scheduler import ProcessingScheduler
from fileproc.services.upload_service import UploadService

logger = get_logger(__name__)


# ── Lifespan ───────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)

    scheduler = ProcessingScheduler(
        registry=AnalyzerRegistry.default(thumbnail_dir=upload_dir / "thumbnails"),
        max_concurrent=settings.max_concurrent_jobs,
    )
    app.state.scheduler = scheduler
    app.state.upload_service = UploadService(scheduler, upload_dir=upload_dir)
    logger.info(
        "Processing scheduler ready — max_concurrent_jobs=%d upload_dir=%s",
        settings.max_concurrent_jobs,
        upload_dir,
    )

    yield

    logger.info("Draining processing queue before shutdown.")
    await scheduler.join()


# ── App instance ───────────────────────────────────────────────────────────────

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=(
        "Accepts file uploads, validates and scans them, and analyses each "
        "file in the background with a bounded number of concurrent jobs."
    ),
    lifespan=lifespan,
)

# ── Routers ────────────────────────────────────────────────────────────────────

app.include_router(files_router)

# ── Global exception handler ───────────────────────────────────────────────────

@app.exception_handler(AppBaseException)
async def app_exception_handler(request: Request, exc: AppBaseException) -> JSONResponse:
    """
    Safety-net for any AppBaseException that escapes controller-level handling.
    The technical message is logged, never returned.
    """
    logger.exception("Unhandled application error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "message": "Something went wrong"},
    )


# ── Health endpoint ────────────────────────────────────────────────────────────

@app.get("/health", tags=["Health"], summary="Liveness probe")
async def health() -> dict:
    """Returns 200 OK when the service is running."""
    return {"status": "ok", "version": settings.app_version}


# ── Entry point ────────────────────────────────────────────────────────────────

def main() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
