"""Health endpoints for the oversight service."""

from __future__ import annotations

import time

from fastapi import APIRouter, Request

from oversight.schemas.health import CatalogueCounts, CheckName, HealthResponse, ServiceHealth
from oversight.store import data_store

router = APIRouter(tags=["health"])


def _check(name: CheckName, check_fn) -> ServiceHealth:
    """Time ``check_fn`` and report it as healthy unless it raises."""
    start = time.monotonic()
    try:
        check_fn()
    except Exception as exc:
        return ServiceHealth(
            service=name,
            status="unhealthy",
            latency_ms=round((time.monotonic() - start) * 1000, 2),
            details=str(exc)[:200],
        )
    return ServiceHealth(service=name, status="healthy", latency_ms=round((time.monotonic() - start) * 1000, 2))


def _app_check(request: Request):
    def check() -> None:
        if getattr(request.app.state, "settings", None) is None:
            raise RuntimeError("settings not loaded")

    return check


def _store_check() -> None:
    for table in ("regulators", "frameworks", "controls", "entities"):
        if not isinstance(getattr(data_store, table, None), dict):
            raise RuntimeError(f"store table '{table}' is not initialised")


def _health(request: Request, services: list[ServiceHealth], failed: str, **extra) -> HealthResponse:
    settings = request.app.state.settings
    overall = "healthy" if all(s.status == "healthy" for s in services) else failed
    return HealthResponse(
        status=overall,
        version=settings.app_version,
        environment=settings.environment,
        services=services,
        **extra,
    )


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    return _health(request, [_check("app", _app_check(request))], "degraded")


@router.get("/health/ready", response_model=HealthResponse)
async def readiness_check(request: Request) -> HealthResponse:
    """Ready once settings are loaded and the store can answer catalogue queries."""
    services = [_check("app", _app_check(request)), _check("store", _store_check)]
    catalogue = None
    if services[1].status == "healthy":
        catalogue = CatalogueCounts(
            regulators=len(data_store.regulators),
            frameworks=len(data_store.frameworks),
            controls=len(data_store.controls),
        )
    return _health(request, services, "unhealthy", catalogue=catalogue)


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    return {"status": "alive"}
