"""GRC scoring endpoints: compliance, risk and maturity."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Query

from oversight.config import ScoringPolicy
from oversight.dependencies import get_policy
from oversight.schemas.common import ApiResponse
from oversight.schemas.scoring import ComplianceScore, MaturityScore, RiskScore
from oversight.services.scoring_engine import (
    calculate_compliance_score,
    calculate_maturity_score,
    calculate_risk_score,
    compute_compliance_trends,
    compute_risk_trends,
)
from oversight.store import data_store

logger = structlog.get_logger()

router = APIRouter(prefix="/api/grc/scoring", tags=["scoring"])


def _check_scope(entity_id: str, framework_id: str | None) -> None:
    data_store.get_entity(entity_id)
    if framework_id:
        data_store.get_framework(framework_id)


@router.get("/compliance", response_model=ApiResponse[ComplianceScore])
async def get_compliance_score(
    entity_id: str = Query(..., min_length=1),
    framework_id: str | None = Query(None),
    policy: ScoringPolicy = Depends(get_policy),
) -> ApiResponse[ComplianceScore]:
    """Compliance score for an entity, optionally scoped to one framework."""
    _check_scope(entity_id, framework_id)
    assessments = data_store.get_assessments(entity_id, framework_id)

    result = calculate_compliance_score(assessments, policy)
    trends = compute_compliance_trends(assessments, policy)

    logger.info(
        "compliance_score_calculated",
        entity_id=entity_id,
        framework_id=framework_id,
        status=result["status"],
        overall_score=result["overall_score"],
    )
    return ApiResponse(
        data=ComplianceScore(entity_id=entity_id, framework_id=framework_id, trends=trends, **result),
    )


@router.get("/risk", response_model=ApiResponse[RiskScore])
async def get_risk_score(
    entity_id: str = Query(..., min_length=1),
    framework_id: str | None = Query(None),
    policy: ScoringPolicy = Depends(get_policy),
) -> ApiResponse[RiskScore]:
    """Risk posture score for an entity. Higher means lower risk."""
    _check_scope(entity_id, framework_id)
    risks = data_store.get_risks(entity_id, framework_id)

    result = calculate_risk_score(risks, policy)

    logger.info(
        "risk_score_calculated",
        entity_id=entity_id,
        framework_id=framework_id,
        risk_score=result["risk_score"],
        risk_level=result["risk_level"],
    )
    return ApiResponse(
        data=RiskScore(entity_id=entity_id, framework_id=framework_id, trends=compute_risk_trends(risks), **result),
    )


@router.get("/maturity/{entity_id}", response_model=ApiResponse[MaturityScore])
async def get_maturity_score(
    entity_id: str,
    policy: ScoringPolicy = Depends(get_policy),
) -> ApiResponse[MaturityScore]:
    """Maturity score built from the compliance and risk calculators."""
    data_store.get_entity(entity_id)

    compliance = calculate_compliance_score(data_store.get_assessments(entity_id), policy)
    risk = calculate_risk_score(data_store.get_risks(entity_id), policy)
    result = calculate_maturity_score(compliance, risk, policy)

    logger.info(
        "maturity_score_calculated",
        entity_id=entity_id,
        maturity_score=result["maturity_score"],
        maturity_level=result["maturity_level"],
    )
    return ApiResponse(data=MaturityScore(entity_id=entity_id, **result))
