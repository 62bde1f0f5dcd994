"""Schemas for the health endpoints."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

CheckName = Literal["app", "store"]
CheckStatus = Literal["healthy", "unhealthy"]


class ServiceHealth(BaseModel):
    """Result of one readiness check: the app itself or the record store."""

    service: CheckName
    status: CheckStatus
    latency_ms: float = Field(ge=0)
    details: str | None = None


class CatalogueCounts(BaseModel):
    """Reference data loaded into the store."""

    regulators: int = Field(ge=0)
    frameworks: int = Field(ge=0)
    controls: int = Field(ge=0)


class HealthResponse(BaseModel):
    status: Literal["healthy", "degraded", "unhealthy"]
    version: str
    environment: str
    services: list[ServiceHealth]
    catalogue: CatalogueCounts | None = None
