"""Leading indicators: period-over-period trend classification and forecasts."""

from __future__ import annotations

import statistics
from collections import defaultdict
from datetime import datetime
from typing import Any

from oversight.config import ScoringPolicy
from oversight.services.scoring_engine import period_of

TREND_IMPROVING = "improving"
TREND_DECLINING = "declining"
TREND_STABLE = "stable"
TREND_INSUFFICIENT = "insufficient_data"

# indicator -> (higher_is_better, bounded to 0-100)
INDICATORS: dict[str, tuple[bool, bool]] = {
    "compliance_velocity": (True, True),
    "risk_trend": (False, False),
    "implementation_velocity": (True, False),
    "remediation_time": (False, False),
}

_TREND_POINTS = {TREND_IMPROVING: 100.0, TREND_STABLE: 50.0, TREND_DECLINING: 0.0}


def classify_trend(previous: float, current: float, higher_is_better: bool = True) -> str:
    """Classify a period-over-period change by the sign of its delta.

    Args:
        previous: Aggregate for the prior period.
        current: Aggregate for the current period.
        higher_is_better: If False, a rise is treated as a decline.

    Returns:
        'improving', 'declining' or 'stable'.
    """
    delta = current - previous
    if delta == 0:
        return TREND_STABLE
    if (delta > 0) == higher_is_better:
        return TREND_IMPROVING
    return TREND_DECLINING


def forecast_next(previous: float, current: float, bounded: bool = False) -> float:
    """Two-point linear projection of the next period."""
    projected = current + (current - previous)
    if bounded:
        projected = min(100.0, projected)
    return round(max(0.0, projected), 2)


def build_indicator(
    series: list[tuple[str, float]],
    higher_is_better: bool = True,
    bounded: bool = False,
) -> dict[str, Any]:
    """Summarise a period series into a leading indicator.

    Only the two most recent periods are compared. With fewer than two
    periods the indicator reports ``insufficient_data`` and no forecast.
    """
    ordered = sorted(series)
    periods = [period for period, _ in ordered]

    if len(ordered) < 2:
        return {
            "current": ordered[-1][1] if ordered else None,
            "previous": None,
            "change": None,
            "change_pct": None,
            "trend": TREND_INSUFFICIENT,
            "forecast": None,
            "periods": periods,
        }

    previous = ordered[-2][1]
    current = ordered[-1][1]
    change = current - previous
    change_pct = round((change / abs(previous)) * 100, 1) if previous != 0 else None

    return {
        "current": round(current, 2),
        "previous": round(previous, 2),
        "change": round(change, 2),
        "change_pct": change_pct,
        "trend": classify_trend(previous, current, higher_is_better),
        "forecast": forecast_next(previous, current, bounded),
        "periods": periods,
    }


def _days_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 86400


def build_period_series(
    assessments: list[dict[str, Any]],
    risks: list[dict[str, Any]],
    policy: ScoringPolicy,
) -> dict[str, list[tuple[str, float]]]:
    """Aggregate raw records into one monthly series per indicator."""
    compliance: dict[str, list[float]] = defaultdict(list)
    implemented: dict[str, float] = defaultdict(float)
    for a in assessments:
        status = a.get("assessment_status")
        if status == "Not Applicable" or not a.get("assessment_date"):
            continue
        period = period_of(a["assessment_date"])
        credit = 1.0 if status == "Compliant" else policy.partial_credit if status == "Partially Compliant" else 0.0
        compliance[period].append(credit)
        if a.get("implementation_status") == "Implemented":
            implemented[period] += 1
        else:
            implemented.setdefault(period, 0.0)

    raised: dict[str, float] = defaultdict(float)
    remediation: dict[str, list[float]] = defaultdict(list)
    for risk in risks:
        if risk.get("created_at"):
            raised[period_of(risk["created_at"])] += 1
        if risk.get("status") == "Mitigated" and risk.get("mitigated_at") and risk.get("created_at"):
            remediation[period_of(risk["mitigated_at"])].append(
                _days_between(risk["created_at"], risk["mitigated_at"])
            )

    return {
        "compliance_velocity": [(p, 100 * statistics.mean(v)) for p, v in compliance.items()],
        "risk_trend": list(raised.items()),
        "implementation_velocity": list(implemented.items()),
        "remediation_time": [(p, statistics.mean(v)) for p, v in remediation.items()],
    }


def calculate_leading_score(indicators: dict[str, dict[str, Any]]) -> float | None:
    """Average trend points across indicators that have enough history."""
    points = [_TREND_POINTS[i["trend"]] for i in indicators.values() if i["trend"] in _TREND_POINTS]
    if not points:
        return None
    return round(statistics.mean(points), 1)


def generate_insights(indicators: dict[str, dict[str, Any]]) -> list[str]:
    """Plain English observations about the indicator trends."""
    insights = []
    compliance = indicators["compliance_velocity"]["trend"]
    if compliance == TREND_IMPROVING:
        insights.append("Compliance is improving: positive trend detected")
    elif compliance == TREND_DECLINING:
        insights.append("Compliance is declining: immediate attention required")

    if indicators["risk_trend"]["trend"] == TREND_DECLINING:
        insights.append("New risks are being raised faster than last period: review mitigation strategies")

    if indicators["implementation_velocity"]["trend"] == TREND_DECLINING:
        insights.append("Fewer controls were implemented than last period")

    if indicators["remediation_time"]["trend"] == TREND_DECLINING:
        insights.append("Remediation is taking longer: consider process improvements")

    if all(i["trend"] == TREND_INSUFFICIENT for i in indicators.values()):
        insights.append("Not enough history yet: at least two periods of data are needed per indicator")

    return insights


def generate_recommendations(indicators: dict[str, dict[str, Any]]) -> list[dict[str, str]]:
    """Rule-based actions for declining indicators."""
    rules = {
        "compliance_velocity": ("High", "Increase assessment frequency", "Compliance velocity is declining"),
        "risk_trend": ("High", "Implement proactive risk mitigation", "Risk trend is increasing"),
        "implementation_velocity": (
            "Medium",
            "Review implementation plan resourcing",
            "Implementation velocity is declining",
        ),
        "remediation_time": (
            "Medium",
            "Streamline remediation process",
            "Average remediation time is increasing",
        ),
    }
    recommendations = []
    for name, (priority, action, reason) in rules.items():
        if indicators[name]["trend"] == TREND_DECLINING:
            recommendations.append({"priority": priority, "action": action, "reason": reason})
    return recommendations


def compute_leading_indicators(
    assessments: list[dict[str, Any]],
    risks: list[dict[str, Any]],
    policy: ScoringPolicy,
) -> dict[str, Any]:
    """Compute every leading indicator for one entity.

    Args:
        assessments: Control assessment records for the entity.
        risks: Risk records for the entity.
        policy: Scoring policy (partial credit for the compliance rate).

    Returns:
        Dict with leading_score, indicators, insights and recommendations.
    """
    series = build_period_series(assessments, risks, policy)
    indicators = {
        name: build_indicator(series[name], higher_is_better, bounded)
        for name, (higher_is_better, bounded) in INDICATORS.items()
    }
    return {
        "leading_score": calculate_leading_score(indicators),
        "indicators": indicators,
        "insights": generate_insights(indicators),
        "recommendations": generate_recommendations(indicators),
    }
