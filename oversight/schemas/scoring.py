"""Schemas for the compliance, risk and maturity scoring endpoints."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class ComplianceBreakdown(BaseModel):
    """Applicable controls split into compliant, partial and non-compliant."""

    total_applicable: int
    compliant: int
    partial: int
    non_compliant: int
    implemented: int
    not_applicable: int


class ComplianceTrendPoint(BaseModel):
    period: str
    assessed: int
    compliance_rate: float
    implemented: int


class ComplianceScore(BaseModel):
    """Compliance score. Score fields are null when nothing is applicable."""

    entity_id: str
    framework_id: str | None = None
    status: Literal["scored", "not_applicable"]
    compliance_score: float | None = Field(None, ge=0.0, le=100.0)
    implementation_score: float | None = Field(None, ge=0.0, le=100.0)
    overall_score: float | None = Field(None, ge=0.0, le=100.0)
    grade: str | None = None
    band: str | None = None
    breakdown: ComplianceBreakdown
    trends: list[ComplianceTrendPoint] = []


class RiskBreakdown(BaseModel):
    total: int
    high: int
    medium: int
    low: int
    open: int
    mitigated: int


class RiskMetrics(BaseModel):
    severity_score: float
    mitigation_rate: float


class RiskTrendPoint(BaseModel):
    period: str
    new_risks: int
    high: int


class RiskScore(BaseModel):
    """Risk posture score: higher means lower risk."""

    entity_id: str
    framework_id: str | None = None
    status: Literal["scored", "no_risks"]
    risk_score: float = Field(..., ge=0.0, le=100.0)
    risk_level: str
    band: str
    breakdown: RiskBreakdown
    metrics: RiskMetrics
    trends: list[RiskTrendPoint] = []


class Recommendation(BaseModel):
    priority: str
    action: str
    reason: str


class MaturityComponents(BaseModel):
    compliance_score: float | None = None
    risk_score: float | None = None
    implementation_score: float | None = None


class MaturityScore(BaseModel):
    entity_id: str
    status: Literal["scored", "not_applicable"]
    maturity_score: float | None = Field(None, ge=0.0, le=100.0)
    maturity_level: str | None = Field(None, description="Basic, Intermediate or Advanced")
    band: str | None = None
    components: MaturityComponents
    weakest_component: str | None = None
    recommendations: list[Recommendation]
