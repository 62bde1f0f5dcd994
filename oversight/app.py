"""GRC Oversight: FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from oversight.config import Settings, get_settings
from oversight.errors import configure_error_handlers
from oversight.middleware import configure_cors, configure_rate_limiting, configure_request_logging, lifespan
from oversight.routers import catalogue, health, indicators, records, reports, scoring, sector_controls, tables


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="GRC scoring and sector auto-assignment for government oversight",
        version=settings.app_version,
        lifespan=lifespan,
    )

    # Store settings on app state
    app.state.settings = settings

    # Middleware
    configure_request_logging(app)
    configure_rate_limiting(app, settings)
    configure_cors(app, settings)
    configure_error_handlers(app)

    # Routers
    app.include_router(health.router)
    app.include_router(records.router)
    app.include_router(catalogue.router)
    app.include_router(scoring.router)
    app.include_router(indicators.router)
    app.include_router(sector_controls.router)
    app.include_router(reports.router)
    app.include_router(tables.router)

    return app


# Default app instance for uvicorn
app = create_app()
