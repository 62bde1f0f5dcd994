"""Entity, control assessment and risk endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Query

from oversight.dependencies import PageParams, page_params
from oversight.errors import ConflictError, InvalidTransitionError
from oversight.schemas.common import ApiResponse, Page, paginate
from oversight.schemas.records import (
    Assessment,
    AssessmentCreate,
    AssessmentReview,
    Entity,
    EntityCreate,
    EntityRegulator,
    EntityRegulatorCreate,
    Risk,
    RiskCreate,
    RiskMitigate,
)
from oversight.store import data_store, utcnow

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["records"])


# ─── Entities ────────────────────────────────────────────────────────────────

@router.post("/entities", status_code=201, response_model=ApiResponse[Entity])
async def create_entity(body: EntityCreate) -> ApiResponse[Entity]:
    record = data_store.add_entity(body.model_dump())
    logger.info("entity_created", entity_id=record["id"], sector=record["sector"])
    return ApiResponse(data=Entity.model_validate(record))


@router.get("/entities", response_model=ApiResponse[Page[Entity]])
async def list_entities(
    sector: str | None = None,
    params: PageParams = Depends(page_params),
) -> ApiResponse[Page[Entity]]:
    entities = sorted(data_store.entities.values(), key=lambda e: e["name"])
    if sector:
        entities = [e for e in entities if e["sector"].lower() == sector.lower()]
    return ApiResponse(data=paginate(entities, params.page, params.limit))


@router.get("/entities/{entity_id}", response_model=ApiResponse[Entity])
async def get_entity(entity_id: str) -> ApiResponse[Entity]:
    return ApiResponse(data=Entity.model_validate(data_store.get_entity(entity_id)))


def _with_regulator(mapping: dict) -> EntityRegulator:
    regulator = data_store.regulators[mapping["regulator_id"]]
    return EntityRegulator(regulator_code=regulator["code"], regulator_name=regulator["name"], **mapping)


@router.get("/entities/{entity_id}/regulators", response_model=ApiResponse[list[EntityRegulator]])
async def list_entity_regulators(entity_id: str) -> ApiResponse[list[EntityRegulator]]:
    """Regulators mapped to an entity, manually or by sector auto-configuration."""
    data_store.get_entity(entity_id)
    mappings = sorted(
        data_store.get_entity_regulators(entity_id),
        key=lambda m: data_store.regulators[m["regulator_id"]]["code"],
    )
    return ApiResponse(data=[_with_regulator(m) for m in mappings])


@router.post("/entities/{entity_id}/regulators", status_code=201, response_model=ApiResponse[EntityRegulator])
async def map_entity_regulator(entity_id: str, body: EntityRegulatorCreate) -> ApiResponse[EntityRegulator]:
    data_store.get_entity(entity_id)
    mapping = data_store.map_entity_regulator(entity_id, body.regulator_id, body.applicability_reason)
    if mapping is None:
        raise ConflictError(
            "Regulator is already mapped to this entity",
            details={"entity_id": entity_id, "regulator_id": body.regulator_id},
        )
    logger.info("entity_regulator_mapped", entity_id=entity_id, regulator_id=body.regulator_id)
    return ApiResponse(data=_with_regulator(mapping))


# ─── Control assessments ─────────────────────────────────────────────────────

@router.post("/assessments", status_code=201, response_model=ApiResponse[Assessment])
async def create_assessment(body: AssessmentCreate) -> ApiResponse[Assessment]:
    """Record a control assessment for an entity."""
    record = data_store.add_assessment(body.model_dump())
    logger.info(
        "assessment_recorded",
        assessment_id=record["id"],
        entity_id=record["entity_id"],
        status=record["assessment_status"],
    )
    return ApiResponse(data=Assessment.model_validate(record))


@router.get("/assessments", response_model=ApiResponse[Page[Assessment]])
async def list_assessments(
    entity_id: str = Query(...),
    framework_id: str | None = Query(None),
    params: PageParams = Depends(page_params),
) -> ApiResponse[Page[Assessment]]:
    data_store.get_entity(entity_id)
    assessments = sorted(
        data_store.get_assessments(entity_id, framework_id),
        key=lambda a: a["assessment_date"],
        reverse=True,
    )
    return ApiResponse(data=paginate(assessments, params.page, params.limit))


@router.get("/assessments/{assessment_id}", response_model=ApiResponse[Assessment])
async def get_assessment(assessment_id: str) -> ApiResponse[Assessment]:
    return ApiResponse(data=Assessment.model_validate(data_store.get_assessment(assessment_id)))


@router.patch("/assessments/{assessment_id}", response_model=ApiResponse[Assessment])
async def review_assessment(assessment_id: str, body: AssessmentReview) -> ApiResponse[Assessment]:
    """Reviewer status change. Moving to Compliant stamps the remediation time."""
    record = data_store.get_assessment(assessment_id)
    previous = record["assessment_status"]
    now = utcnow()

    if body.assessment_status == "Compliant" and previous != "Compliant":
        record["remediated_at"] = now
    record["assessment_status"] = body.assessment_status
    if body.implementation_status is not None:
        record["implementation_status"] = body.implementation_status
    if body.reviewer is not None:
        record["reviewed_by"] = body.reviewer
    record["updated_at"] = now

    logger.info(
        "assessment_reviewed",
        assessment_id=assessment_id,
        previous_status=previous,
        status=record["assessment_status"],
    )
    return ApiResponse(data=Assessment.model_validate(record))


# ─── Risks ───────────────────────────────────────────────────────────────────

@router.post("/risks", status_code=201, response_model=ApiResponse[Risk])
async def create_risk(body: RiskCreate) -> ApiResponse[Risk]:
    record = data_store.add_risk(body.model_dump())
    logger.info("risk_registered", risk_id=record["id"], entity_id=record["entity_id"], severity=record["severity"])
    return ApiResponse(data=Risk.model_validate(record))


@router.get("/risks", response_model=ApiResponse[Page[Risk]])
async def list_risks(
    entity_id: str = Query(...),
    status: str | None = Query(None, pattern="^(Open|Mitigated)$"),
    params: PageParams = Depends(page_params),
) -> ApiResponse[Page[Risk]]:
    data_store.get_entity(entity_id)
    risks = sorted(data_store.get_risks(entity_id), key=lambda r: r["created_at"], reverse=True)
    if status:
        risks = [r for r in risks if r["status"] == status]
    return ApiResponse(data=paginate(risks, params.page, params.limit))


@router.get("/risks/{risk_id}", response_model=ApiResponse[Risk])
async def get_risk(risk_id: str) -> ApiResponse[Risk]:
    return ApiResponse(data=Risk.model_validate(data_store.get_risk(risk_id)))


@router.post("/risks/{risk_id}/mitigate", response_model=ApiResponse[Risk])
async def mitigate_risk(risk_id: str, body: RiskMitigate | None = None) -> ApiResponse[Risk]:
    """Mark an open risk as mitigated."""
    record = data_store.get_risk(risk_id)
    if record["status"] != "Open":
        raise InvalidTransitionError(
            f"Risk is already {record['status']}",
            details={"risk_id": risk_id, "status": record["status"]},
        )
    record["status"] = "Mitigated"
    record["mitigated_at"] = utcnow()
    if body is not None and body.mitigation_plan:
        record["mitigation_plan"] = body.mitigation_plan

    logger.info("risk_mitigated", risk_id=risk_id, entity_id=record["entity_id"])
    return ApiResponse(data=Risk.model_validate(record))
