"""Read-only paginated view over an allow-list of tables."""

from __future__ import annotations

from enum import Enum
from typing import Any

from fastapi import APIRouter, Depends

from oversight.dependencies import PageParams, page_params
from oversight.schemas.common import ApiResponse, Page, paginate
from oversight.store import DataStore, data_store

router = APIRouter(prefix="/api/tables", tags=["tables"])


class TableName(str, Enum):
    entities = "entities"
    regulators = "regulators"
    frameworks = "frameworks"
    controls = "controls"
    control_assessments = "control_assessments"
    risks = "risks"
    entity_regulators = "entity_regulators"
    compliance_reports = "compliance_reports"


def table_rows(store: DataStore, table: TableName) -> list[dict[str, Any]]:
    """Rows of an allow-listed table, in insertion order."""
    if table is TableName.entity_regulators:
        return [m for mappings in store.entity_regulators.values() for m in mappings]
    sources = {
        TableName.entities: store.entities,
        TableName.regulators: store.regulators,
        TableName.frameworks: store.frameworks,
        TableName.controls: store.controls,
        TableName.control_assessments: store.assessments,
        TableName.risks: store.risks,
        TableName.compliance_reports: store.reports,
    }
    return list(sources[table].values())


@router.get("/{table}", response_model=ApiResponse[Page[dict[str, Any]]])
async def view_table(
    table: TableName,
    params: PageParams = Depends(page_params),
) -> ApiResponse[Page[dict[str, Any]]]:
    """Page through a table. Unknown table names fail path validation."""
    rows = table_rows(data_store, table)
    return ApiResponse(data=paginate(rows, params.page, params.limit))
