"""Sector auto-assignment endpoints."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException

from oversight.config import ScoringPolicy
from oversight.dependencies import get_policy
from oversight.schemas.common import ApiResponse
from oversight.schemas.sector import AutoConfigureRequest, AutoConfigureResponse, SectorControlsResponse
from oversight.services.sector_assignment import auto_configure as resolve_scope
from oversight.store import data_store

logger = structlog.get_logger()

router = APIRouter(prefix="/api/sector-controls", tags=["sector-controls"])


def _resolve(profile: dict[str, Any], policy: ScoringPolicy) -> dict[str, Any]:
    try:
        return resolve_scope(
            list(data_store.regulators.values()),
            list(data_store.frameworks.values()),
            list(data_store.controls.values()),
            profile,
            policy,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/{sector_code}", response_model=ApiResponse[SectorControlsResponse])
async def get_sector_controls(
    sector_code: str,
    sub_sector: str | None = None,
    policy: ScoringPolicy = Depends(get_policy),
) -> ApiResponse[SectorControlsResponse]:
    """Regulators, frameworks and control counts for a sector with default attributes."""
    if not sector_code.strip():
        raise HTTPException(status_code=400, detail="Sector code must not be blank")
    result = _resolve({"sector": sector_code, "sub_sector": sub_sector}, policy)
    logger.info(
        "sector_controls_resolved",
        sector=result["sector"],
        regulators=len(result["regulators"]),
        controls=result["control_count"],
    )
    return ApiResponse(data=SectorControlsResponse.model_validate(result))


@router.post("/auto-configure", response_model=ApiResponse[AutoConfigureResponse])
async def auto_configure(
    body: AutoConfigureRequest,
    policy: ScoringPolicy = Depends(get_policy),
) -> ApiResponse[AutoConfigureResponse]:
    """Resolve an organisation's regulatory scope.

    With an ``entity_id`` the matched regulators are also mapped to the
    entity. Existing mappings are left as they are.
    """
    if body.entity_id:
        data_store.get_entity(body.entity_id)

    result = _resolve(body.model_dump(), policy)

    mapped = 0
    if body.entity_id:
        for regulator in result["regulators"]:
            reason = f"Auto-mapped for sector '{result['sector']}'"
            if data_store.map_entity_regulator(body.entity_id, regulator["id"], reason) is not None:
                mapped += 1

    logger.info(
        "sector_auto_configured",
        sector=result["sector"],
        entity_id=body.entity_id,
        regulators=len(result["regulators"]),
        estimated_control_count=result["estimated_control_count"],
        mapped=mapped,
    )
    return ApiResponse(
        data=AutoConfigureResponse(entity_id=body.entity_id, mapped_count=mapped, **result),
    )
