"""Leading indicator and guidance endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Query

from oversight.config import ScoringPolicy
from oversight.dependencies import get_policy
from oversight.schemas.common import ApiResponse
from oversight.schemas.indicators import GuidanceResponse, LeadingIndicatorsResponse
from oversight.services.guidance import build_guidance
from oversight.services.leading_indicators import compute_leading_indicators
from oversight.store import data_store

logger = structlog.get_logger()

router = APIRouter(prefix="/api/grc", tags=["indicators"])


@router.get("/indicators/leading", response_model=ApiResponse[LeadingIndicatorsResponse])
async def get_leading_indicators(
    entity_id: str = Query(..., min_length=1),
    policy: ScoringPolicy = Depends(get_policy),
) -> ApiResponse[LeadingIndicatorsResponse]:
    """Period-over-period trends and forecasts for an entity."""
    data_store.get_entity(entity_id)
    result = compute_leading_indicators(
        data_store.get_assessments(entity_id),
        data_store.get_risks(entity_id),
        policy,
    )
    logger.info("leading_indicators_calculated", entity_id=entity_id, leading_score=result["leading_score"])
    return ApiResponse(data=LeadingIndicatorsResponse(entity_id=entity_id, **result))


@router.get("/guidance", response_model=ApiResponse[GuidanceResponse])
async def get_guidance(
    entity_id: str | None = Query(None),
    framework_id: str | None = Query(None),
    control_id: str | None = Query(None),
    context: str | None = Query(None, pattern="^(compliance|risk|implementation)$"),
    policy: ScoringPolicy = Depends(get_policy),
) -> ApiResponse[GuidanceResponse]:
    """Best practices plus entity, framework and control specific guidance."""
    guidance = build_guidance(
        data_store,
        entity_id=entity_id,
        framework_id=framework_id,
        control_id=control_id,
        context=context,
        policy=policy,
    )
    return ApiResponse(data=GuidanceResponse.model_validate(guidance))
