"""Sector auto-assignment: applicable regulators, frameworks and controls."""

from __future__ import annotations

import math
from typing import Any

from oversight.config import ScoringPolicy
from oversight.services.scoring_engine import classify

# Regulators with this sector apply to every organisation
WILDCARD_SECTOR = "all"


def normalise_sector(sector: str | None) -> str | None:
    if sector is None:
        return None
    return sector.strip().lower() or None


def regulator_applies(regulator: dict[str, Any], sector: str, sub_sector: str | None = None) -> bool:
    """Check whether a regulator covers an organisation's sector.

    A regulator matches on its sector (or the wildcard). A regulator scoped
    to a sub-sector additionally needs the same sub-sector on the request.
    """
    if not regulator.get("is_active", True):
        return False
    reg_sector = normalise_sector(regulator.get("sector"))
    if reg_sector not in (normalise_sector(sector), WILDCARD_SECTOR):
        return False
    reg_sub_sector = normalise_sector(regulator.get("sub_sector"))
    if reg_sub_sector is None:
        return True
    return reg_sub_sector == normalise_sector(sub_sector)


def match_regulators(
    regulators: list[dict[str, Any]],
    sector: str,
    sub_sector: str | None = None,
) -> list[dict[str, Any]]:
    """Return the regulators that apply to a sector, ordered by code."""
    matched = [r for r in regulators if regulator_applies(r, sector, sub_sector)]
    return sorted(matched, key=lambda r: r.get("code", ""))


def select_frameworks(
    frameworks: list[dict[str, Any]],
    regulator_ids: list[str],
    processes_personal_data: bool = False,
) -> list[dict[str, Any]]:
    """Active frameworks issued by the given regulators.

    Personal-data frameworks only apply to organisations that process
    personal data.
    """
    wanted = set(regulator_ids)
    return [
        f
        for f in frameworks
        if f["regulator_id"] in wanted
        and f.get("is_active", True)
        and (processes_personal_data or not f.get("applies_to_personal_data", False))
    ]


def employee_multiplier(employee_count: int, policy: ScoringPolicy) -> float:
    """Size multiplier for the first employee band the count falls under."""
    for limit, factor in policy.employee_bands:
        if employee_count < limit:
            return factor
    return policy.employee_band_fallback


def sensitivity_multiplier(level: str, policy: ScoringPolicy) -> float:
    key = level.strip().lower()
    if key not in policy.sensitivity_multipliers:
        raise ValueError(
            f"Unknown data sensitivity level '{level}', expected one of {policy.sensitivity_levels}"
        )
    return policy.sensitivity_multipliers[key]


def estimate_control_count(
    control_count: int,
    mandatory_count: int,
    framework_count: int,
    employee_count: int,
    data_sensitivity_level: str,
    processes_personal_data: bool,
    policy: ScoringPolicy,
) -> int:
    """Heuristic number of controls an organisation will need to address.

    A weighted sum of the catalogue counts, scaled up for larger
    organisations, more sensitive data and personal-data processing. Every
    factor is at least 1.0 and ascends with its input, so the estimate never
    falls when employee count or sensitivity rises.
    """
    coefficients = policy.control_count_coefficients
    base = (
        coefficients["controls"] * control_count
        + coefficients["mandatory_controls"] * mandatory_count
        + coefficients["frameworks"] * framework_count
    )
    factor = employee_multiplier(employee_count, policy) * sensitivity_multiplier(data_sensitivity_level, policy)
    if processes_personal_data:
        factor *= policy.personal_data_multiplier
    # round first so float noise cannot push an exact product up a whole control
    return math.ceil(round(base * factor, 6))


def auto_configure(
    regulators: list[dict[str, Any]],
    frameworks: list[dict[str, Any]],
    controls: list[dict[str, Any]],
    request: dict[str, Any],
    policy: ScoringPolicy,
) -> dict[str, Any]:
    """Resolve the regulatory scope of an organisation profile.

    Args:
        regulators: Full regulator catalogue.
        frameworks: Full framework catalogue.
        controls: Full control catalogue.
        request: Organisation profile with sector, sub_sector, employee_count,
            processes_personal_data and data_sensitivity_level.
        policy: Scoring policy holding the estimate coefficients.

    Returns:
        Dict with matched regulators and frameworks, control counts and the
        estimated control count.
    """
    sector = request["sector"]
    sub_sector = request.get("sub_sector")
    personal_data = bool(request.get("processes_personal_data", False))

    matched = match_regulators(regulators, sector, sub_sector)
    selected = select_frameworks(frameworks, [r["id"] for r in matched], personal_data)
    framework_ids = {f["id"] for f in selected}
    applicable_controls = [c for c in controls if c["framework_id"] in framework_ids]
    mandatory = sum(1 for c in applicable_controls if c.get("is_mandatory", True))

    estimated = estimate_control_count(
        control_count=len(applicable_controls),
        mandatory_count=mandatory,
        framework_count=len(selected),
        employee_count=request.get("employee_count", 0),
        data_sensitivity_level=request.get("data_sensitivity_level", "low"),
        processes_personal_data=personal_data,
        policy=policy,
    )

    controls_by_framework: dict[str, int] = {}
    for c in applicable_controls:
        controls_by_framework[c["framework_id"]] = controls_by_framework.get(c["framework_id"], 0) + 1

    return {
        "sector": normalise_sector(sector),
        "sub_sector": normalise_sector(sub_sector),
        "regulators": matched,
        "frameworks": [
            {**f, "control_count": controls_by_framework.get(f["id"], 0)} for f in selected
        ],
        "control_count": len(applicable_controls),
        "mandatory_control_count": mandatory,
        "estimated_control_count": estimated,
        "complexity_level": classify(estimated, policy.complexity_thresholds, policy.complexity_fallback),
    }
