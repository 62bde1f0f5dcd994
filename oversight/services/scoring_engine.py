"""GRC scoring engine: compliance, risk and maturity scores for an entity.

Every calculator is a pure function of the records handed to it and a
``ScoringPolicy``; nothing here reads the store, so the same rows always
produce the same score.

Risk convention: a higher risk score means a *lower* risk. The same
polarity feeds the maturity score, so all three scores read "higher is
better".
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from typing import Any

from oversight.config import ScoringPolicy


SEVERITIES = ["High", "Medium", "Low"]

TREND_MONTHS = 6


def _round(value: float) -> float:
    return round(value, 2)


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def classify(score: float, thresholds: list[tuple[float, str]], fallback: str) -> str:
    """Return the label of the first threshold the score reaches."""
    for floor, label in sorted(thresholds, key=lambda t: t[0], reverse=True):
        if score >= floor:
            return label
    return fallback


def score_band(score: float, policy: ScoringPolicy) -> str:
    """Colour band for any 0-100 score."""
    return classify(score, policy.band_thresholds, policy.band_fallback)


def score_grade(score: float, policy: ScoringPolicy) -> str:
    """Letter grade for a compliance score."""
    return classify(score, policy.grade_thresholds, policy.grade_fallback)


def period_of(value: datetime | date | str) -> str:
    """Return the ``YYYY-MM`` period a timestamp falls in."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return value.strftime("%Y-%m")


# ─── Compliance ──────────────────────────────────────────────────────────────

def calculate_compliance_score(
    assessments: list[dict[str, Any]],
    policy: ScoringPolicy,
) -> dict[str, Any]:
    """Calculate the compliance score for a set of control assessments.

    Not Applicable assessments are left out of the denominator. When no
    applicable assessment remains the result is ``not_applicable`` with
    null scores, which keeps "nothing to score" apart from "scored zero".

    Args:
        assessments: Control assessment records for one entity.
        policy: Weights and thresholds to apply.

    Returns:
        Dict with status, scores, grade, band and bucket breakdown.
    """
    applicable = [a for a in assessments if a.get("assessment_status") != "Not Applicable"]
    not_applicable = len(assessments) - len(applicable)

    compliant = sum(1 for a in applicable if a.get("assessment_status") == "Compliant")
    partial = sum(1 for a in applicable if a.get("assessment_status") == "Partially Compliant")
    non_compliant = len(applicable) - compliant - partial
    implemented = sum(1 for a in applicable if a.get("implementation_status") == "Implemented")
    total = len(applicable)

    breakdown = {
        "total_applicable": total,
        "compliant": compliant,
        "partial": partial,
        "non_compliant": non_compliant,
        "implemented": implemented,
        "not_applicable": not_applicable,
    }

    if total == 0:
        return {
            "status": "not_applicable",
            "compliance_score": None,
            "implementation_score": None,
            "overall_score": None,
            "grade": None,
            "band": None,
            "breakdown": breakdown,
        }

    compliance_score = _clamp(100 * (compliant + policy.partial_credit * partial) / total)
    implementation_score = _clamp(100 * implemented / total)
    overall_score = _clamp(
        policy.compliance_weight * compliance_score
        + policy.implementation_weight * implementation_score
    )

    return {
        "status": "scored",
        "compliance_score": _round(compliance_score),
        "implementation_score": _round(implementation_score),
        "overall_score": _round(overall_score),
        "grade": score_grade(overall_score, policy),
        "band": score_band(overall_score, policy),
        "breakdown": breakdown,
    }


def compute_compliance_trends(
    assessments: list[dict[str, Any]],
    policy: ScoringPolicy,
    months: int = TREND_MONTHS,
) -> list[dict[str, Any]]:
    """Monthly compliance rate over the most recent periods, newest first."""
    by_period: dict[str, list[dict[str, Any]]] = defaultdict(list)
    for a in assessments:
        if a.get("assessment_status") == "Not Applicable" or not a.get("assessment_date"):
            continue
        by_period[period_of(a["assessment_date"])].append(a)

    trends = []
    for period in sorted(by_period, reverse=True)[:months]:
        rows = by_period[period]
        compliant = sum(1 for a in rows if a["assessment_status"] == "Compliant")
        partial = sum(1 for a in rows if a["assessment_status"] == "Partially Compliant")
        implemented = sum(1 for a in rows if a.get("implementation_status") == "Implemented")
        trends.append({
            "period": period,
            "assessed": len(rows),
            "compliance_rate": _round(100 * (compliant + policy.partial_credit * partial) / len(rows)),
            "implemented": implemented,
        })
    return trends


# ─── Risk ────────────────────────────────────────────────────────────────────

def calculate_risk_score(risks: list[dict[str, Any]], policy: ScoringPolicy) -> dict[str, Any]:
    """Calculate the risk posture score for a set of risks.

    The severity component starts at 100 and loses a fixed penalty per
    open risk; mitigated risks no longer count against it but raise the
    mitigation rate. Adding an open risk can therefore only lower the score.

    Args:
        risks: Risk records for one entity.
        policy: Weights and thresholds to apply.

    Returns:
        Dict with status, risk_score, risk_level, band, breakdown and metrics.
    """
    counts = {severity: 0 for severity in SEVERITIES}
    open_counts = {severity: 0 for severity in SEVERITIES}
    mitigated = 0
    for risk in risks:
        severity = risk.get("severity")
        if severity not in counts:
            raise ValueError(f"Unknown risk severity: {severity!r}")
        counts[severity] += 1
        if risk.get("status") == "Mitigated":
            mitigated += 1
        else:
            open_counts[severity] += 1

    total = len(risks)
    penalty = sum(policy.severity_penalties.get(s, 0.0) * n for s, n in open_counts.items())
    severity_score = _clamp(100 - penalty)
    mitigation_rate = 100 * mitigated / total if total else 100.0

    risk_score = _clamp(
        policy.risk_severity_weight * severity_score + policy.mitigation_weight * mitigation_rate
    )

    return {
        "status": "scored" if total else "no_risks",
        "risk_score": _round(risk_score),
        "risk_level": classify(risk_score, policy.risk_level_thresholds, policy.risk_level_fallback),
        "band": score_band(risk_score, policy),
        "breakdown": {
            "total": total,
            "high": counts["High"],
            "medium": counts["Medium"],
            "low": counts["Low"],
            "open": total - mitigated,
            "mitigated": mitigated,
        },
        "metrics": {
            "severity_score": _round(severity_score),
            "mitigation_rate": _round(mitigation_rate),
        },
    }


def compute_risk_trends(risks: list[dict[str, Any]], months: int = TREND_MONTHS) -> list[dict[str, Any]]:
    """Monthly count of newly raised risks, newest first."""
    by_period: dict[str, list[dict[str, Any]]] = defaultdict(list)
    for risk in risks:
        if risk.get("created_at"):
            by_period[period_of(risk["created_at"])].append(risk)

    return [
        {
            "period": period,
            "new_risks": len(by_period[period]),
            "high": sum(1 for r in by_period[period] if r.get("severity") == "High"),
        }
        for period in sorted(by_period, reverse=True)[:months]
    ]


# ─── Maturity ────────────────────────────────────────────────────────────────

def calculate_maturity_score(
    compliance: dict[str, Any],
    risk: dict[str, Any],
    policy: ScoringPolicy,
) -> dict[str, Any]:
    """Combine compliance and risk results into a maturity score.

    Args:
        compliance: Result of ``calculate_compliance_score``.
        risk: Result of ``calculate_risk_score``.
        policy: Weights and thresholds to apply.

    Returns:
        Dict with status, maturity_score, maturity_level, components and
        recommendations.
    """
    components = {
        "compliance_score": compliance["compliance_score"],
        "risk_score": risk["risk_score"],
        "implementation_score": compliance["implementation_score"],
    }

    if compliance["status"] == "not_applicable":
        return {
            "status": "not_applicable",
            "maturity_score": None,
            "maturity_level": None,
            "band": None,
            "components": components,
            "weakest_component": None,
            "recommendations": [],
        }

    maturity_score = _clamp(
        sum(policy.maturity_weights.get(name, 0.0) * value for name, value in components.items())
    )
    level = classify(maturity_score, policy.maturity_level_thresholds, policy.maturity_level_fallback)
    weakest = min(components, key=lambda name: components[name])

    return {
        "status": "scored",
        "maturity_score": _round(maturity_score),
        "maturity_level": level,
        "band": score_band(maturity_score, policy),
        "components": components,
        "weakest_component": weakest,
        "recommendations": generate_maturity_recommendations(components, level, policy),
    }


_COMPONENT_RECOMMENDATIONS = {
    "risk_score": {
        "action": "Focus on risk mitigation",
        "reason": "Open risks are dragging the risk score below target",
    },
    "compliance_score": {
        "action": "Close compliance gaps",
        "reason": "Too many applicable controls are non-compliant or only partially compliant",
    },
    "implementation_score": {
        "action": "Accelerate control implementation plans",
        "reason": "Assessed controls are not yet implemented",
    },
}

_LEVEL_RECOMMENDATIONS = {
    "Basic": [
        ("High", "Establish formal processes", "Maturity level is low and needs a structured approach"),
        ("High", "Implement foundational controls", "Focus on mandatory controls first"),
    ],
    "Intermediate": [
        ("Medium", "Standardise processes", "Move from defined to managed practices"),
        ("Medium", "Enhance monitoring", "Improve visibility and tracking"),
    ],
    "Advanced": [
        ("Low", "Continuous improvement", "Maintain and refine current maturity"),
    ],
}


def generate_maturity_recommendations(
    components: dict[str, float],
    level: str,
    policy: ScoringPolicy,
) -> list[dict[str, str]]:
    """Rule-based recommendations keyed off the weakest components."""
    recommendations = []
    below = sorted(
        (name for name, value in components.items() if value < policy.recommendation_threshold),
        key=lambda name: components[name],
    )
    for rank, name in enumerate(below):
        rule = _COMPONENT_RECOMMENDATIONS[name]
        recommendations.append({
            "priority": "High" if rank == 0 else "Medium",
            "action": rule["action"],
            "reason": f"{rule['reason']} ({components[name]})",
        })

    for priority, action, reason in _LEVEL_RECOMMENDATIONS.get(level, []):
        recommendations.append({"priority": priority, "action": action, "reason": reason})

    return recommendations
