"""GRC guidance: best practices and gap recommendations."""

from __future__ import annotations

from typing import Any

from oversight.config import ScoringPolicy
from oversight.services.scoring_engine import calculate_compliance_score, classify
from oversight.store import DataStore

BEST_PRACTICES = {
    "compliance": [
        "Conduct regular assessments (quarterly recommended)",
        "Maintain comprehensive documentation",
        "Implement continuous monitoring",
        "Establish clear accountability",
        "Run regular training and awareness programmes",
    ],
    "risk": [
        "Identify risks proactively",
        "Assess likelihood and impact regularly",
        "Develop mitigation plans for high risks",
        "Monitor risk trends",
        "Review and update the risk register quarterly",
    ],
    "implementation": [
        "Start with high-priority controls",
        "Break work down into manageable tasks",
        "Set realistic timelines",
        "Track progress regularly",
        "Document lessons learned",
    ],
}

FRAMEWORK_BEST_PRACTICES = {
    "Law": ["Ensure legal compliance", "Schedule regular legal review", "Document the legal basis"],
    "Regulation": ["Follow regulatory requirements", "Maintain compliance records", "Audit regularly"],
    "Standard": ["Adhere to standard specifications", "Assess regularly", "Improve continuously"],
    "Guideline": ["Follow recommended practices", "Adapt to context", "Review regularly"],
    "Policy": ["Align with policy objectives", "Review the policy regularly", "Communicate with stakeholders"],
}

MAX_CONTROL_RECOMMENDATIONS = 5
MAX_RISK_RECOMMENDATIONS = 3


def best_practices(context: str | None) -> list[str]:
    return BEST_PRACTICES.get(context or "compliance", BEST_PRACTICES["compliance"])


def framework_guidance(framework: dict[str, Any]) -> dict[str, Any]:
    framework_type = framework.get("framework_type") or "Standard"
    return {
        "framework_name": framework["name"],
        "framework_type": framework_type,
        "description": framework.get("description"),
        "best_practices": FRAMEWORK_BEST_PRACTICES.get(framework_type, FRAMEWORK_BEST_PRACTICES["Standard"]),
    }


ENTITY_RECOMMENDATIONS = {
    "foundation": ["Focus on achieving basic compliance first", "Prioritise mandatory controls"],
    "strengthen": ["Work on partial compliance areas", "Enhance implementation completeness"],
    "maintain": ["Maintain compliance levels", "Focus on continuous improvement"],
}

NO_BASELINE_RECOMMENDATION = "Record control assessments to establish a compliance baseline"


def entity_recommendations(compliance_score: float | None, policy: ScoringPolicy) -> list[str]:
    """Recommendations for an entity based on its compliance score tier."""
    if compliance_score is None:
        return [NO_BASELINE_RECOMMENDATION]
    tier = classify(compliance_score, policy.guidance_thresholds, policy.guidance_fallback)
    return ENTITY_RECOMMENDATIONS.get(tier, ENTITY_RECOMMENDATIONS["foundation"])


def gap_recommendations(
    non_compliant_controls: list[dict[str, Any]],
    open_high_risks: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Recommendations for non-compliant controls and open high risks."""
    recommendations = []
    for control in non_compliant_controls[:MAX_CONTROL_RECOMMENDATIONS]:
        recommendations.append({
            "type": "compliance",
            "priority": control.get("priority") or "Medium",
            "action": f"Implement {control['name']}",
            "reason": "Currently non-compliant",
            "guidance": control.get("implementation_guidance"),
        })
    for risk in open_high_risks[:MAX_RISK_RECOMMENDATIONS]:
        recommendations.append({
            "type": "risk",
            "priority": "High",
            "action": "Mitigate high-priority risk",
            "reason": risk.get("description") or "High severity risk requires immediate attention",
            "guidance": risk.get("mitigation_plan") or "Develop a comprehensive mitigation plan",
        })
    return recommendations


def build_guidance(
    store: DataStore,
    entity_id: str | None = None,
    framework_id: str | None = None,
    control_id: str | None = None,
    context: str | None = None,
    policy: ScoringPolicy | None = None,
) -> dict[str, Any]:
    """Assemble guidance for whichever of entity, framework and control are given."""
    policy = policy or ScoringPolicy()
    guidance: dict[str, Any] = {
        "framework_guidance": None,
        "control_guidance": None,
        "entity_guidance": None,
        "best_practices": best_practices(context),
        "recommendations": [],
    }

    if framework_id:
        guidance["framework_guidance"] = framework_guidance(store.get_framework(framework_id))

    if control_id:
        control = store.get_control(control_id)
        guidance["control_guidance"] = {
            "control_name": control["name"],
            "priority": control.get("priority") or "Medium",
            "is_mandatory": control.get("is_mandatory", True),
            "implementation_guidance": control.get("implementation_guidance"),
        }

    if entity_id:
        entity = store.get_entity(entity_id)
        assessments = store.get_assessments(entity_id, framework_id)
        compliance = calculate_compliance_score(assessments, policy)
        regulators = [store.get_regulator(m["regulator_id"]) for m in store.get_entity_regulators(entity_id)]
        guidance["entity_guidance"] = {
            "entity_name": entity["name"],
            "sector": entity.get("sector") or "",
            "applicable_regulators": [r["name"] for r in regulators],
            "current_compliance_score": compliance["compliance_score"],
            "recommendations": entity_recommendations(compliance["compliance_score"], policy),
        }

        non_compliant = [
            store.get_control(a["control_id"])
            for a in assessments
            if a["assessment_status"] == "Non-Compliant"
        ]
        open_high = [
            r for r in store.get_risks(entity_id)
            if r["status"] == "Open" and r["severity"] == "High"
        ]
        guidance["recommendations"] = gap_recommendations(non_compliant, open_high)

    return guidance
