"""Schemas for leading indicators and guidance."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from oversight.schemas.scoring import Recommendation


class LeadingIndicator(BaseModel):
    """Latest two periods of one indicator and a two-point forecast."""

    current: float | None = None
    previous: float | None = None
    change: float | None = None
    change_pct: float | None = None
    trend: Literal["improving", "declining", "stable", "insufficient_data"]
    forecast: float | None = None
    periods: list[str]


class LeadingIndicators(BaseModel):
    compliance_velocity: LeadingIndicator
    risk_trend: LeadingIndicator
    implementation_velocity: LeadingIndicator
    remediation_time: LeadingIndicator


class LeadingIndicatorsResponse(BaseModel):
    entity_id: str
    leading_score: float | None = Field(None, ge=0.0, le=100.0)
    indicators: LeadingIndicators
    insights: list[str]
    recommendations: list[Recommendation]


class FrameworkGuidance(BaseModel):
    framework_name: str
    framework_type: str
    description: str | None = None
    best_practices: list[str]


class ControlGuidance(BaseModel):
    control_name: str
    priority: str
    is_mandatory: bool
    implementation_guidance: str | None = None


class EntityGuidance(BaseModel):
    entity_name: str
    sector: str
    applicable_regulators: list[str]
    current_compliance_score: float | None = None
    recommendations: list[str]


class GapRecommendation(BaseModel):
    type: Literal["compliance", "risk"]
    priority: str
    action: str
    reason: str
    guidance: str | None = None


class GuidanceResponse(BaseModel):
    framework_guidance: FrameworkGuidance | None = None
    control_guidance: ControlGuidance | None = None
    entity_guidance: EntityGuidance | None = None
    best_practices: list[str]
    recommendations: list[GapRecommendation]
