"""
FastAPI Production Application

Main entry point for the Sales Reports API.
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
import structlog

from src.config import get_settings
from src.config.logging import configure_logging
from src.serving.api import create_api_app
from src.serving.api.routes.reports import get_report_cache

settings = get_settings()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()

    logger.info(
        "Starting Sales Reports API",
        environment=settings.app_env,
        report_path=str(settings.data_lake.report_path),
    )

    # Warm the cache so the first dashboard request does not hit the disk
    cache = get_report_cache()
    report = cache.get_or_load()
    logger.info("Report loaded", order_count=report["metadata"].get("order_count"))

    yield

    logger.info("Shutting down...")
    cache.invalidate()


app = create_api_app(settings, lifespan=lifespan)


@app.get("/api/v1/info")
async def api_info():
    """API information endpoint."""
    return {
        "name": "Sales Reports API",
        "version": settings.version,
        "environment": settings.app_env,
        "currency": settings.report.currency,
        "timezone": settings.report.timezone,
        "documentation": "/docs",
    }


# Serve the dashboard when it is deployed next to the package
dashboard_path = Path(__file__).parent.parent / "dashboard"
if dashboard_path.exists():
    app.mount("/static", StaticFiles(directory=dashboard_path), name="static")

    @app.get("/")
    async def serve_dashboard():
        """Serve the dashboard page."""
        return FileResponse(dashboard_path / "index.html")

    @app.get("/{full_path:path}")
    async def serve_spa(full_path: str):
        """Serve index.html for client-side routes."""
        if full_path.startswith("api") or full_path.startswith("static"):
            raise HTTPException(status_code=404)
        return FileResponse(dashboard_path / "index.html")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
