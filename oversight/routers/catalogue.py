"""Reference data endpoints: regulators, frameworks and controls."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Query

from oversight.dependencies import PageParams, page_params
from oversight.schemas.common import ApiResponse, Page, paginate
from oversight.schemas.records import (
    Control,
    ControlCreate,
    Framework,
    FrameworkCreate,
    Regulator,
    RegulatorCreate,
)
from oversight.store import data_store

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["catalogue"])


# ─── Regulators ──────────────────────────────────────────────────────────────

@router.post("/regulators", status_code=201, response_model=ApiResponse[Regulator])
async def create_regulator(body: RegulatorCreate) -> ApiResponse[Regulator]:
    record = data_store.add_regulator(body.model_dump())
    logger.info("regulator_created", regulator_id=record["id"], code=record["code"], sector=record["sector"])
    return ApiResponse(data=Regulator.model_validate(record))


@router.get("/regulators", response_model=ApiResponse[Page[Regulator]])
async def list_regulators(
    sector: str | None = None,
    params: PageParams = Depends(page_params),
) -> ApiResponse[Page[Regulator]]:
    """List regulators ordered by code, optionally for one sector."""
    regulators = sorted(data_store.regulators.values(), key=lambda r: r["code"])
    if sector:
        regulators = [r for r in regulators if r["sector"].lower() == sector.lower()]
    return ApiResponse(data=paginate(regulators, params.page, params.limit))


@router.get("/regulators/{regulator_id}", response_model=ApiResponse[Regulator])
async def get_regulator(regulator_id: str) -> ApiResponse[Regulator]:
    return ApiResponse(data=Regulator.model_validate(data_store.get_regulator(regulator_id)))


# ─── Frameworks ──────────────────────────────────────────────────────────────

@router.post("/frameworks", status_code=201, response_model=ApiResponse[Framework])
async def create_framework(body: FrameworkCreate) -> ApiResponse[Framework]:
    record = data_store.add_framework(body.model_dump())
    logger.info("framework_created", framework_id=record["id"], regulator_id=record["regulator_id"])
    return ApiResponse(data=Framework.model_validate(record))


@router.get("/frameworks", response_model=ApiResponse[Page[Framework]])
async def list_frameworks(
    regulator_id: str | None = Query(None),
    params: PageParams = Depends(page_params),
) -> ApiResponse[Page[Framework]]:
    frameworks = list(data_store.frameworks.values())
    if regulator_id:
        frameworks = data_store.get_frameworks_for_regulators([regulator_id])
    return ApiResponse(data=paginate(frameworks, params.page, params.limit))


@router.get("/frameworks/{framework_id}", response_model=ApiResponse[Framework])
async def get_framework(framework_id: str) -> ApiResponse[Framework]:
    return ApiResponse(data=Framework.model_validate(data_store.get_framework(framework_id)))


# ─── Controls ────────────────────────────────────────────────────────────────

@router.post("/controls", status_code=201, response_model=ApiResponse[Control])
async def create_control(body: ControlCreate) -> ApiResponse[Control]:
    record = data_store.add_control(body.model_dump())
    logger.info("control_created", control_id=record["id"], framework_id=record["framework_id"])
    return ApiResponse(data=Control.model_validate(record))


@router.get("/controls", response_model=ApiResponse[Page[Control]])
async def list_controls(
    framework_id: str | None = Query(None),
    params: PageParams = Depends(page_params),
) -> ApiResponse[Page[Control]]:
    controls = list(data_store.controls.values())
    if framework_id:
        controls = data_store.get_controls_for_frameworks([framework_id])
    return ApiResponse(data=paginate(controls, params.page, params.limit))


@router.get("/controls/{control_id}", response_model=ApiResponse[Control])
async def get_control(control_id: str) -> ApiResponse[Control]:
    return ApiResponse(data=Control.model_validate(data_store.get_control(control_id)))
