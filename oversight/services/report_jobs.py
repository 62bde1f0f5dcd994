"""Compliance report jobs with a persisted generating/generated/failed lifecycle."""

from __future__ import annotations

from typing import Any

import structlog

from oversight.config import ScoringPolicy
from oversight.errors import InvalidTransitionError
from oversight.services.scoring_engine import calculate_compliance_score, calculate_risk_score
from oversight.services.sector_assignment import match_regulators, select_frameworks
from oversight.store import DataStore, utcnow

logger = structlog.get_logger()

STATUS_GENERATING = "generating"
STATUS_GENERATED = "generated"
STATUS_FAILED = "failed"

REPORT_TRANSITIONS: dict[str, set[str]] = {
    STATUS_GENERATING: {STATUS_GENERATED, STATUS_FAILED},
    STATUS_FAILED: {STATUS_GENERATING},
    STATUS_GENERATED: set(),
}


def transition(report: dict[str, Any], new_status: str) -> dict[str, Any]:
    """Move a report to a new status, rejecting moves the lifecycle forbids."""
    current = report["status"]
    if new_status not in REPORT_TRANSITIONS.get(current, set()):
        raise InvalidTransitionError(
            f"Report cannot move from '{current}' to '{new_status}'",
            details={"report_id": report["id"], "status": current},
        )
    report["status"] = new_status
    report["updated_at"] = utcnow()
    return report


def create_report_job(
    store: DataStore,
    entity_id: str,
    framework_id: str | None = None,
    idempotency_key: str | None = None,
) -> tuple[dict[str, Any], bool]:
    """Create a report job, or return the job already filed under the key.

    Returns:
        The report record and whether it was newly created.
    """
    if idempotency_key:
        existing = store.find_report_by_key(idempotency_key)
        if existing is not None:
            return existing, False

    store.get_entity(entity_id)
    if framework_id:
        store.get_framework(framework_id)

    now = utcnow()
    report = store.add_report({
        "entity_id": entity_id,
        "framework_id": framework_id,
        "idempotency_key": idempotency_key,
        "status": STATUS_GENERATING,
        "attempts": 1,
        "content": None,
        "error": None,
        "created_at": now,
        "updated_at": now,
        "generated_at": None,
    })
    return report, True


def retry_report_job(store: DataStore, report_id: str, max_attempts: int) -> dict[str, Any]:
    """Put a failed report back into generation."""
    report = store.get_report(report_id)
    if report["status"] == STATUS_FAILED and report["attempts"] >= max_attempts:
        raise InvalidTransitionError(
            f"Report has already been attempted {report['attempts']} time(s)",
            details={"report_id": report_id, "max_attempts": max_attempts},
        )
    transition(report, STATUS_GENERATING)
    report["attempts"] += 1
    report["error"] = None
    return report


def applicable_regulators(store: DataStore, entity: dict[str, Any]) -> list[dict[str, Any]]:
    """Mapped regulators for an entity, falling back to its sector match."""
    mappings = [m for m in store.get_entity_regulators(entity["id"]) if m.get("is_active", True)]
    if mappings:
        return [store.get_regulator(m["regulator_id"]) for m in mappings]
    return match_regulators(list(store.regulators.values()), entity.get("sector") or "", entity.get("sub_sector"))


def build_report_content(store: DataStore, report: dict[str, Any], policy: ScoringPolicy) -> dict[str, Any]:
    """Assemble the compliance report body for a job."""
    entity = store.get_entity(report["entity_id"])
    framework_id = report.get("framework_id")

    regulators = applicable_regulators(store, entity)
    frameworks = select_frameworks(
        list(store.frameworks.values()),
        [r["id"] for r in regulators],
        bool(entity.get("processes_personal_data", False)),
    )
    if framework_id:
        frameworks = [f for f in frameworks if f["id"] == framework_id]
    controls = store.get_controls_for_frameworks([f["id"] for f in frameworks])

    compliance = calculate_compliance_score(store.get_assessments(entity["id"], framework_id), policy)
    risk = calculate_risk_score(store.get_risks(entity["id"], framework_id), policy)

    if compliance["status"] == "not_applicable":
        headline = "No applicable controls have been assessed yet."
    else:
        b = compliance["breakdown"]
        headline = (
            f"Overall compliance: {compliance['compliance_score']}% (grade {compliance['grade']}). "
            f"{b['compliant']} control(s) are fully compliant, {b['partial']} partially compliant "
            f"and {b['non_compliant']} require attention."
        )

    executive_summary = (
        f"This compliance report for {entity['name']} covers {len(controls)} applicable control(s) "
        f"across {len(frameworks)} framework(s) from {len(regulators)} regulator(s). {headline} "
        f"Risk posture is {risk['risk_level']} ({risk['risk_score']})."
    )

    return {
        "entity": {"id": entity["id"], "name": entity["name"], "sector": entity.get("sector")},
        "regulators": [{"id": r["id"], "code": r["code"], "name": r["name"]} for r in regulators],
        "frameworks": [{"id": f["id"], "code": f["code"], "name": f["name"]} for f in frameworks],
        "applicable_controls": len(controls),
        "compliance": compliance,
        "risk": risk,
        "executive_summary": executive_summary,
    }


def run_report_job(store: DataStore, report_id: str, policy: ScoringPolicy) -> None:
    """Generate a report and record the outcome on the job.

    Any failure lands the job in ``failed`` with the error text, from where
    it can be retried.
    """
    report = store.get_report(report_id)
    if report["status"] != STATUS_GENERATING:
        logger.info("report_generation_skipped", report_id=report_id, status=report["status"])
        return

    try:
        content = build_report_content(store, report, policy)
    except Exception as exc:
        logger.exception("report_generation_failed", report_id=report_id, attempts=report["attempts"])
        report["error"] = str(exc)[:500]
        transition(report, STATUS_FAILED)
        return

    report["content"] = content
    report["generated_at"] = utcnow()
    transition(report, STATUS_GENERATED)
    logger.info("report_generated", report_id=report_id, attempts=report["attempts"])
