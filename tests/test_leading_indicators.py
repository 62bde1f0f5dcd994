"""Tests for leading indicators: trend classification, forecasts and insights."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from oversight.services.leading_indicators import (
    TREND_DECLINING,
    TREND_IMPROVING,
    TREND_INSUFFICIENT,
    TREND_STABLE,
    build_indicator,
    calculate_leading_score,
    classify_trend,
    compute_leading_indicators,
    forecast_next,
)


def _at(month: int, day: int = 1) -> datetime:
    return datetime(2026, month, day, tzinfo=timezone.utc)


def _assessment(status: str, month: int, implementation: str = "Not Implemented") -> dict:
    return {"assessment_status": status, "implementation_status": implementation, "assessment_date": _at(month, 10)}


@pytest.fixture
def two_period_records():
    assessments = [
        _assessment("Compliant", 1),
        _assessment("Non-Compliant", 1),
        _assessment("Compliant", 2, "Implemented"),
        _assessment("Compliant", 2, "Implemented"),
    ]
    risks = [
        {"severity": "High", "status": "Mitigated", "created_at": _at(1, 1), "mitigated_at": _at(1, 11)},
        {"severity": "Low", "status": "Mitigated", "created_at": _at(1, 5), "mitigated_at": _at(2, 4)},
    ] + [{"severity": "Medium", "status": "Open", "created_at": _at(2, 8)} for _ in range(3)]
    return assessments, risks


# ─── Test 1: Trend classification ────────────────────────────────────────────

class TestClassifyTrend:
    """Tests for the sign-of-delta trend classifier."""

    def test_rise_is_improving(self):
        assert classify_trend(50, 70) == TREND_IMPROVING

    def test_fall_is_declining(self):
        assert classify_trend(70, 50) == TREND_DECLINING

    def test_equal_is_stable(self):
        assert classify_trend(60, 60) == TREND_STABLE

    def test_lower_is_better_flips_polarity(self):
        assert classify_trend(5, 8, higher_is_better=False) == TREND_DECLINING
        assert classify_trend(8, 5, higher_is_better=False) == TREND_IMPROVING


# ─── Test 2: Forecast ────────────────────────────────────────────────────────

class TestForecast:

    def test_two_point_projection(self):
        assert forecast_next(50, 70) == 90.0

    def test_bounded_forecast_capped_at_hundred(self):
        assert forecast_next(50, 100, bounded=True) == 100.0

    def test_forecast_floored_at_zero(self):
        assert forecast_next(10, 2) == 0.0


# ─── Test 3: Indicator construction ──────────────────────────────────────────

class TestBuildIndicator:

    def test_single_period_is_insufficient(self):
        indicator = build_indicator([("2026-01", 80.0)])
        assert indicator["trend"] == TREND_INSUFFICIENT
        assert indicator["forecast"] is None
        assert indicator["current"] == 80.0
        assert indicator["previous"] is None

    def test_empty_series_is_insufficient(self):
        indicator = build_indicator([])
        assert indicator["trend"] == TREND_INSUFFICIENT
        assert indicator["current"] is None
        assert indicator["periods"] == []

    def test_compares_latest_two_periods(self):
        series = [("2026-03", 40.0), ("2026-01", 90.0), ("2026-02", 50.0)]
        indicator = build_indicator(series)
        assert indicator["previous"] == 50.0
        assert indicator["current"] == 40.0
        assert indicator["trend"] == TREND_DECLINING
        assert indicator["periods"] == ["2026-01", "2026-02", "2026-03"]

    def test_change_pct_skipped_when_previous_is_zero(self):
        indicator = build_indicator([("2026-01", 0.0), ("2026-02", 3.0)])
        assert indicator["change"] == 3.0
        assert indicator["change_pct"] is None


# ─── Test 4: Leading score ───────────────────────────────────────────────────

class TestLeadingScore:

    def test_average_of_trend_points(self):
        indicators = {
            "a": {"trend": TREND_IMPROVING},
            "b": {"trend": TREND_STABLE},
            "c": {"trend": TREND_INSUFFICIENT},
        }
        assert calculate_leading_score(indicators) == 75.0

    def test_none_without_data(self):
        assert calculate_leading_score({"a": {"trend": TREND_INSUFFICIENT}}) is None


# ─── Test 5: Full computation ────────────────────────────────────────────────

class TestComputeLeadingIndicators:
    """Tests for compute_leading_indicators over raw records."""

    def test_indicator_values(self, policy, two_period_records):
        assessments, risks = two_period_records
        indicators = compute_leading_indicators(assessments, risks, policy)["indicators"]

        compliance = indicators["compliance_velocity"]
        assert (compliance["previous"], compliance["current"]) == (50.0, 100.0)
        assert compliance["trend"] == TREND_IMPROVING
        assert compliance["forecast"] == 100.0

        risk = indicators["risk_trend"]
        assert (risk["previous"], risk["current"]) == (2.0, 3.0)
        assert risk["trend"] == TREND_DECLINING
        assert risk["change_pct"] == 50.0
        assert risk["forecast"] == 4.0

        implementation = indicators["implementation_velocity"]
        assert (implementation["previous"], implementation["current"]) == (0.0, 2.0)
        assert implementation["trend"] == TREND_IMPROVING

        remediation = indicators["remediation_time"]
        assert (remediation["previous"], remediation["current"]) == (10.0, 30.0)
        assert remediation["trend"] == TREND_DECLINING
        assert remediation["forecast"] == 50.0

    def test_score_insights_and_recommendations(self, policy, two_period_records):
        assessments, risks = two_period_records
        result = compute_leading_indicators(assessments, risks, policy)
        assert result["leading_score"] == 50.0
        assert any("Compliance is improving" in i for i in result["insights"])
        assert any("Remediation is taking longer" in i for i in result["insights"])
        assert [r["action"] for r in result["recommendations"]] == [
            "Implement proactive risk mitigation",
            "Streamline remediation process",
        ]

    def test_no_history(self, policy):
        result = compute_leading_indicators([], [], policy)
        assert result["leading_score"] is None
        assert all(i["trend"] == TREND_INSUFFICIENT for i in result["indicators"].values())
        assert result["recommendations"] == []
        assert any("Not enough history" in i for i in result["insights"])
