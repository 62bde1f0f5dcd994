"""Schemas for compliance report jobs."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class ReportCreate(BaseModel):
    entity_id: str
    framework_id: str | None = None
    idempotency_key: str | None = Field(
        default=None,
        max_length=100,
        description="Repeating a key returns the job created for it.",
    )


class ReportJob(BaseModel):
    id: str
    entity_id: str
    framework_id: str | None = None
    idempotency_key: str | None = None
    status: Literal["generating", "generated", "failed"]
    attempts: int
    content: dict[str, Any] | None = None
    error: str | None = None
    created_at: datetime
    updated_at: datetime
    generated_at: datetime | None = None
