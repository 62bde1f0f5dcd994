"""Schemas for sector controls and auto-configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class AutoConfigureRequest(BaseModel):
    """Organisation profile used to resolve its regulatory scope."""

    sector: str = Field(..., min_length=1)
    sub_sector: str | None = None
    employee_count: int = Field(default=0, ge=0)
    processes_personal_data: bool = False
    data_sensitivity_level: str = "low"
    entity_id: str | None = Field(
        default=None,
        description="When set, matched regulators are mapped to this entity.",
    )

    @field_validator("data_sensitivity_level")
    @classmethod
    def _lower(cls, value: str) -> str:
        return value.strip().lower()


class RegulatorSummary(BaseModel):
    id: str
    code: str
    name: str
    sector: str
    sub_sector: str | None = None


class FrameworkSummary(BaseModel):
    id: str
    regulator_id: str
    code: str
    name: str
    applies_to_personal_data: bool = False
    control_count: int


class SectorControlsResponse(BaseModel):
    sector: str
    sub_sector: str | None = None
    regulators: list[RegulatorSummary]
    frameworks: list[FrameworkSummary]
    control_count: int
    mandatory_control_count: int
    estimated_control_count: int = Field(..., ge=0)
    complexity_level: str


class AutoConfigureResponse(SectorControlsResponse):
    entity_id: str | None = None
    mapped_count: int = 0
