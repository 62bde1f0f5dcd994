"""In-memory data store for the GRC oversight service.

Provides a simple data store used during development and testing.
In production, this would be backed by PostgreSQL through the models in
``oversight.models``. Uniqueness and parent-reference rules mirror the
database constraints so the API behaves the same against either backing.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from oversight.errors import ConflictError, NotFoundError, ReferenceViolationError


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime:
    """Timestamp in UTC, treating naive values as UTC and None as now."""
    if value is None:
        return utcnow()
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class DataStore:
    """In-memory data store for development and testing."""

    def __init__(self) -> None:
        self.entities: dict[str, dict[str, Any]] = {}
        self.regulators: dict[str, dict[str, Any]] = {}
        self.frameworks: dict[str, dict[str, Any]] = {}
        self.controls: dict[str, dict[str, Any]] = {}
        self.assessments: dict[str, dict[str, Any]] = {}
        self.risks: dict[str, dict[str, Any]] = {}
        self.entity_regulators: dict[str, list[dict[str, Any]]] = {}  # entity_id -> mappings
        self.reports: dict[str, dict[str, Any]] = {}

    def reset(self) -> None:
        """Clear all data, used in tests."""
        self.__init__()

    # ─── Entities ────────────────────────────────────────────────────────

    def add_entity(self, data: dict[str, Any]) -> dict[str, Any]:
        """Add or update an entity."""
        record = {"created_at": utcnow(), **data}
        record["id"] = data.get("id") or new_id()
        self.entities[record["id"]] = record
        return record

    def get_entity(self, entity_id: str) -> dict[str, Any]:
        if entity_id not in self.entities:
            raise NotFoundError(f"Entity '{entity_id}' not found")
        return self.entities[entity_id]

    # ─── Reference data: regulators, frameworks, controls ───────────────

    def add_regulator(self, data: dict[str, Any]) -> dict[str, Any]:
        """Add a regulator. Regulator codes are unique."""
        code = data["code"]
        if any(r["code"] == code for r in self.regulators.values()):
            raise ConflictError(f"Regulator code '{code}' already exists")
        record = {"is_active": True, "sub_sector": None, **data}
        record["id"] = data.get("id") or new_id()
        self.regulators[record["id"]] = record
        return record

    def get_regulator(self, regulator_id: str) -> dict[str, Any]:
        if regulator_id not in self.regulators:
            raise NotFoundError(f"Regulator '{regulator_id}' not found")
        return self.regulators[regulator_id]

    def add_framework(self, data: dict[str, Any]) -> dict[str, Any]:
        """Add a framework under an existing regulator."""
        regulator_id = data["regulator_id"]
        if regulator_id not in self.regulators:
            raise ReferenceViolationError(f"Regulator '{regulator_id}' does not exist")
        code = data["code"]
        if any(
            f["code"] == code and f["regulator_id"] == regulator_id
            for f in self.frameworks.values()
        ):
            raise ConflictError(f"Framework code '{code}' already exists for this regulator")
        record = {"is_active": True, "applies_to_personal_data": False, **data}
        record["id"] = data.get("id") or new_id()
        self.frameworks[record["id"]] = record
        return record

    def get_framework(self, framework_id: str) -> dict[str, Any]:
        if framework_id not in self.frameworks:
            raise NotFoundError(f"Framework '{framework_id}' not found")
        return self.frameworks[framework_id]

    def add_control(self, data: dict[str, Any]) -> dict[str, Any]:
        """Add a control under an existing framework."""
        framework_id = data["framework_id"]
        if framework_id not in self.frameworks:
            raise ReferenceViolationError(f"Framework '{framework_id}' does not exist")
        record = {"is_mandatory": True, **data}
        record["id"] = data.get("id") or new_id()
        self.controls[record["id"]] = record
        return record

    def get_control(self, control_id: str) -> dict[str, Any]:
        if control_id not in self.controls:
            raise NotFoundError(f"Control '{control_id}' not found")
        return self.controls[control_id]

    def get_frameworks_for_regulators(self, regulator_ids: list[str]) -> list[dict[str, Any]]:
        wanted = set(regulator_ids)
        return [f for f in self.frameworks.values() if f["regulator_id"] in wanted]

    def get_controls_for_frameworks(self, framework_ids: list[str]) -> list[dict[str, Any]]:
        wanted = set(framework_ids)
        return [c for c in self.controls.values() if c["framework_id"] in wanted]

    # ─── Control assessments (compliance records) ────────────────────────

    def add_assessment(self, data: dict[str, Any]) -> dict[str, Any]:
        """Record a control assessment for an entity."""
        if data["entity_id"] not in self.entities:
            raise ReferenceViolationError(f"Entity '{data['entity_id']}' does not exist")
        control = self.controls.get(data["control_id"])
        if control is None:
            raise ReferenceViolationError(f"Control '{data['control_id']}' does not exist")
        record = {
            "implementation_status": "Not Implemented",
            "remediated_at": None,
            "updated_at": utcnow(),
            **data,
        }
        record["framework_id"] = control["framework_id"]
        record["id"] = data.get("id") or new_id()
        record["assessment_date"] = as_utc(record.get("assessment_date"))
        self.assessments[record["id"]] = record
        return record

    def get_assessment(self, assessment_id: str) -> dict[str, Any]:
        if assessment_id not in self.assessments:
            raise NotFoundError(f"Assessment '{assessment_id}' not found")
        return self.assessments[assessment_id]

    def get_assessments(self, entity_id: str, framework_id: str | None = None) -> list[dict[str, Any]]:
        """Assessments for an entity, optionally limited to one framework."""
        return [
            a
            for a in self.assessments.values()
            if a["entity_id"] == entity_id and (framework_id is None or a["framework_id"] == framework_id)
        ]

    # ─── Risks ───────────────────────────────────────────────────────────

    def add_risk(self, data: dict[str, Any]) -> dict[str, Any]:
        """Register a risk for an entity."""
        if data["entity_id"] not in self.entities:
            raise ReferenceViolationError(f"Entity '{data['entity_id']}' does not exist")
        if data.get("framework_id") and data["framework_id"] not in self.frameworks:
            raise ReferenceViolationError(f"Framework '{data['framework_id']}' does not exist")
        record = {
            "status": "Open",
            "framework_id": None,
            "mitigation_plan": None,
            "mitigated_at": None,
            **data,
        }
        record["id"] = data.get("id") or new_id()
        record["created_at"] = as_utc(record.get("created_at"))
        self.risks[record["id"]] = record
        return record

    def get_risk(self, risk_id: str) -> dict[str, Any]:
        if risk_id not in self.risks:
            raise NotFoundError(f"Risk '{risk_id}' not found")
        return self.risks[risk_id]

    def get_risks(self, entity_id: str, framework_id: str | None = None) -> list[dict[str, Any]]:
        return [
            r
            for r in self.risks.values()
            if r["entity_id"] == entity_id and (framework_id is None or r.get("framework_id") == framework_id)
        ]

    # ─── Entity ↔ regulator mappings ─────────────────────────────────────

    def get_entity_regulators(self, entity_id: str) -> list[dict[str, Any]]:
        return self.entity_regulators.get(entity_id, [])

    def map_entity_regulator(self, entity_id: str, regulator_id: str, reason: str) -> dict[str, Any] | None:
        """Map a regulator to an entity. Returns None when already mapped."""
        if entity_id not in self.entities:
            raise ReferenceViolationError(f"Entity '{entity_id}' does not exist")
        if regulator_id not in self.regulators:
            raise ReferenceViolationError(f"Regulator '{regulator_id}' does not exist")
        mappings = self.entity_regulators.setdefault(entity_id, [])
        if any(m["regulator_id"] == regulator_id for m in mappings):
            return None
        mapping = {
            "entity_id": entity_id,
            "regulator_id": regulator_id,
            "applicability_reason": reason,
            "effective_date": utcnow(),
            "is_active": True,
        }
        mappings.append(mapping)
        return mapping

    # ─── Report jobs ─────────────────────────────────────────────────────

    def add_report(self, data: dict[str, Any]) -> dict[str, Any]:
        record = {**data}
        record["id"] = data.get("id") or new_id()
        self.reports[record["id"]] = record
        return record

    def get_report(self, report_id: str) -> dict[str, Any]:
        if report_id not in self.reports:
            raise NotFoundError(f"Report '{report_id}' not found")
        return self.reports[report_id]

    def find_report_by_key(self, idempotency_key: str) -> dict[str, Any] | None:
        for report in self.reports.values():
            if report.get("idempotency_key") == idempotency_key:
                return report
        return None


# Global singleton, replaced in tests
data_store = DataStore()
