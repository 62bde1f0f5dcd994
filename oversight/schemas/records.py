"""Schemas for entities, reference data, assessments and risks."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

AssessmentStatus = Literal["Compliant", "Partially Compliant", "Non-Compliant", "In Progress", "Not Applicable"]
ImplementationStatus = Literal["Implemented", "Partially Implemented", "Not Implemented"]
Severity = Literal["High", "Medium", "Low"]
RiskStatus = Literal["Open", "Mitigated"]
Priority = Literal["High", "Medium", "Low"]


class EntityCreate(BaseModel):
    """A government entity tracked by the platform."""

    name: str = Field(..., min_length=1, max_length=255)
    sector: str = Field(..., min_length=1, max_length=100)
    sub_sector: str | None = None
    region: str | None = None
    employee_count: int = Field(default=0, ge=0)
    data_sensitivity_level: str = "low"
    processes_personal_data: bool = False

    @field_validator("data_sensitivity_level")
    @classmethod
    def _lower(cls, value: str) -> str:
        return value.strip().lower()


class Entity(EntityCreate):
    id: str
    created_at: datetime


class RegulatorCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)
    sector: str = Field(..., min_length=1, max_length=100, description="Sector code, or 'all' for every sector")
    sub_sector: str | None = None
    jurisdiction: str = "National"
    is_active: bool = True

    @field_validator("sector")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("sector must not be blank")
        return value.strip()


class Regulator(RegulatorCreate):
    id: str


class EntityRegulatorCreate(BaseModel):
    """Manual mapping of a regulator to an entity."""

    regulator_id: str = Field(..., min_length=1)
    applicability_reason: str = Field(default="Manually assigned", min_length=1, max_length=500)


class EntityRegulator(BaseModel):
    entity_id: str
    regulator_id: str
    regulator_code: str
    regulator_name: str
    applicability_reason: str
    effective_date: datetime
    is_active: bool


class FrameworkCreate(BaseModel):
    regulator_id: str
    code: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)
    framework_type: Literal["Law", "Regulation", "Standard", "Guideline", "Policy"] = "Regulation"
    description: str | None = None
    applies_to_personal_data: bool = False
    is_active: bool = True


class Framework(FrameworkCreate):
    id: str


class ControlCreate(BaseModel):
    framework_id: str
    code: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=255)
    is_mandatory: bool = True
    priority: Priority = "Medium"
    implementation_guidance: str | None = None


class Control(ControlCreate):
    id: str


class AssessmentCreate(BaseModel):
    """A compliance record: one control assessed for one entity."""

    entity_id: str
    control_id: str
    assessment_status: AssessmentStatus
    implementation_status: ImplementationStatus = "Not Implemented"
    assessment_date: datetime | None = None


class AssessmentReview(BaseModel):
    """A reviewer's status change on an existing assessment."""

    assessment_status: AssessmentStatus
    implementation_status: ImplementationStatus | None = None
    reviewer: str | None = None


class Assessment(AssessmentCreate):
    id: str
    framework_id: str
    assessment_date: datetime
    updated_at: datetime
    remediated_at: datetime | None = None
    reviewed_by: str | None = None


class RiskCreate(BaseModel):
    entity_id: str
    severity: Severity
    description: str = Field(..., min_length=1)
    framework_id: str | None = None
    mitigation_plan: str | None = None


class RiskMitigate(BaseModel):
    mitigation_plan: str | None = None


class Risk(RiskCreate):
    id: str
    status: RiskStatus
    created_at: datetime
    mitigated_at: datetime | None = None
