"""
FastAPI Application Factory

Creates and configures the report API application.
"""

from typing import Any, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from src.config import Settings, get_settings
from src.serving.api.middleware import (
    RateLimitMiddleware,
    ReportCacheHeadersMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from src.serving.api.routes import health_router, reports_router


def create_api_app(settings: Optional[Settings] = None, **kwargs: Any) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Settings to configure from (defaults to get_settings())
        **kwargs: Extra FastAPI constructor arguments (e.g. lifespan)

    Returns:
        Configured FastAPI app instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Sales Reports API",
        description="Product, store and time sales aggregates for the sales dashboard",
        version=settings.version,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        **kwargs,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(ReportCacheHeadersMiddleware, max_age_seconds=settings.report.cache_ttl_seconds)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.security.rate_limit_requests,
        window_seconds=settings.security.rate_limit_window_seconds,
        refresh_max_requests=settings.security.refresh_rate_limit_requests,
    )

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(reports_router, prefix="/api/v1/reports", tags=["Reports"])

    return app
