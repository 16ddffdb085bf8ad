"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from activitycalendar.api import router
from activitycalendar.api.deps import limiter
from activitycalendar.config import get_settings
from activitycalendar.services.compressor import get_compressor
from activitycalendar.services.sheets import SheetsError, SheetsNotConfiguredError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    settings.setup_directories()
    # Pick the image compressor once for the whole process
    compressor = get_compressor()
    logger.info(
        "Starting %s (compressor: %s, drive: %s, sheets: %s)",
        settings.app_name,
        type(compressor).__name__,
        "configured" if settings.drive_configured else "not configured",
        "configured" if settings.sheets_configured else "not configured",
    )
    yield


async def _sheets_not_configured_handler(request: Request, exc: SheetsNotConfiguredError):
    return JSONResponse(status_code=503, content={"error": exc.message})


async def _sheets_error_handler(request: Request, exc: SheetsError):
    logger.error("Spreadsheet error on %s %s: %s", request.method, request.url.path, exc.details)
    content = {"error": exc.message}
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=500, content=content)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

    app = FastAPI(
        title=settings.app_name,
        description="Activity calendar with Google Sheets records and Drive attachments",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(SheetsNotConfiguredError, _sheets_not_configured_handler)
    app.add_exception_handler(SheetsError, _sheets_error_handler)

    if settings.cors_enabled and settings.cors_allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_allow_origins,
            allow_methods=settings.cors_allow_methods,
            allow_headers=settings.cors_allow_headers,
            allow_credentials=settings.cors_allow_credentials,
            max_age=settings.cors_max_age,
        )

    # Include API routes
    app.include_router(router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    # Locally stored attachments
    app.mount(
        settings.upload_url_prefix,
        StaticFiles(directory=str(settings.upload_dir), check_dir=False),
        name="uploads",
    )

    # Serve frontend if configured
    frontend_dir = settings.frontend_dir
    if frontend_dir and frontend_dir.exists():
        static_dir = frontend_dir / "static"
        if static_dir.exists():
            app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

        @app.get("/", response_class=HTMLResponse)
        async def serve_frontend(request: Request):
            """Serve the frontend application."""
            index_path = frontend_dir / "index.html"
            if index_path.exists():
                return FileResponse(index_path)
            return HTMLResponse("<h1>ActivityCalendar</h1><p>Frontend not found.</p>")

        @app.get("/{path:path}")
        async def serve_frontend_files(path: str):
            """Serve frontend static files or fallback to index.html for SPA routing."""
            file_path = frontend_dir / path
            if file_path.exists() and file_path.is_file():
                return FileResponse(file_path)
            index_path = frontend_dir / "index.html"
            if index_path.exists():
                return FileResponse(index_path)
            return HTMLResponse("<h1>Not Found</h1>", status_code=404)

    return app


app = create_app()


def run_server():
    """Run the API server."""
    settings = get_settings()
    uvicorn.run(
        "activitycalendar.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run_server()
