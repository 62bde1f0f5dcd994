"""Shared test fixtures for the GRC oversight test suite."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from oversight.app import create_app
from oversight.config import ScoringPolicy, Settings
from oversight.store import data_store


def _test_settings() -> Settings:
    """Return settings suitable for testing."""
    return Settings(
        environment="development",
        debug=True,
        log_format="console",
        rate_limit_default="1000/minute",
        allowed_origins="http://localhost:3000,http://localhost:5015",
    )


@pytest.fixture
def settings():
    """Test settings."""
    return _test_settings()


@pytest.fixture
def policy():
    """Default scoring policy."""
    return ScoringPolicy()


@pytest.fixture
def app(settings):
    """Create a fresh FastAPI app for testing."""
    return create_app(settings)


@pytest.fixture
def client(app):
    """HTTP test client."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_store():
    """Reset the global data store before each test."""
    data_store.reset()
    yield
    data_store.reset()


def _add_controls(framework_id: str, prefix: str, mandatory: int, optional: int = 0) -> list[str]:
    ids = []
    for i in range(mandatory + optional):
        control = data_store.add_control({
            "framework_id": framework_id,
            "code": f"{prefix}-{i + 1}",
            "name": f"{prefix} control {i + 1}",
            "is_mandatory": i < mandatory,
            "priority": "High" if i == 0 else "Medium",
            "implementation_guidance": f"Guidance for {prefix} control {i + 1}",
        })
        ids.append(control["id"])
    return ids


@pytest.fixture
def sample_catalogue():
    """Regulators, frameworks and controls across finance, healthcare and the wildcard.

    finance (no sub-sector): CBK + NCA, frameworks CBK-CSF and ECC,
    7 controls of which 6 are mandatory.
    """
    regulators = {
        "fin": data_store.add_regulator({"code": "CBK", "name": "Central Bank", "sector": "finance"}),
        "bank": data_store.add_regulator({
            "code": "CBK-BANK",
            "name": "Banking Supervision",
            "sector": "finance",
            "sub_sector": "banking",
        }),
        "all": data_store.add_regulator({"code": "NCA", "name": "National Cybersecurity Authority", "sector": "all"}),
        "health": data_store.add_regulator({"code": "MOH", "name": "Ministry of Health", "sector": "healthcare"}),
    }
    frameworks = {
        "fin": data_store.add_framework({
            "regulator_id": regulators["fin"]["id"],
            "code": "CBK-CSF",
            "name": "Cyber Security Framework",
            "framework_type": "Regulation",
        }),
        "bank": data_store.add_framework({
            "regulator_id": regulators["bank"]["id"],
            "code": "BANK-RISK",
            "name": "Banking Risk Rules",
            "framework_type": "Regulation",
        }),
        "all": data_store.add_framework({
            "regulator_id": regulators["all"]["id"],
            "code": "ECC",
            "name": "Essential Cybersecurity Controls",
            "framework_type": "Standard",
        }),
        "pdpl": data_store.add_framework({
            "regulator_id": regulators["all"]["id"],
            "code": "PDPL",
            "name": "Personal Data Protection Law",
            "framework_type": "Law",
            "applies_to_personal_data": True,
        }),
        "health": data_store.add_framework({
            "regulator_id": regulators["health"]["id"],
            "code": "HIS",
            "name": "Health Information Security",
            "framework_type": "Standard",
        }),
    }
    controls = {
        "fin": _add_controls(frameworks["fin"]["id"], "CSF", mandatory=3, optional=1),
        "bank": _add_controls(frameworks["bank"]["id"], "BR", mandatory=2),
        "all": _add_controls(frameworks["all"]["id"], "ECC", mandatory=3),
        "pdpl": _add_controls(frameworks["pdpl"]["id"], "PDPL", mandatory=1, optional=1),
        "health": _add_controls(frameworks["health"]["id"], "HIS", mandatory=2),
    }
    return {"regulators": regulators, "frameworks": frameworks, "controls": controls}


@pytest.fixture
def sample_entity():
    """A finance-sector ministry."""
    return data_store.add_entity({
        "name": "Ministry of Finance",
        "sector": "finance",
        "sub_sector": None,
        "region": "Riyadh",
        "employee_count": 120,
        "data_sensitivity_level": "high",
        "processes_personal_data": False,
    })


@pytest.fixture
def sample_assessments(sample_entity, sample_catalogue):
    """Six assessments on CBK-CSF and ECC controls.

    2 Compliant (1 implemented), 1 partial, 1 non-compliant, 1 in progress
    and 1 not applicable: compliance 50, implementation 20, overall 41.
    """
    fin, ecc = sample_catalogue["controls"]["fin"], sample_catalogue["controls"]["all"]
    when = datetime(2026, 2, 10, tzinfo=timezone.utc)
    rows = [
        (fin[0], "Compliant", "Implemented"),
        (fin[1], "Compliant", "Partially Implemented"),
        (fin[2], "Partially Compliant", "Not Implemented"),
        (fin[3], "Non-Compliant", "Not Implemented"),
        (ecc[0], "In Progress", "Partially Implemented"),
        (ecc[1], "Not Applicable", "Not Implemented"),
    ]
    return [
        data_store.add_assessment({
            "entity_id": sample_entity["id"],
            "control_id": control_id,
            "assessment_status": status,
            "implementation_status": implementation,
            "assessment_date": when,
        })
        for control_id, status, implementation in rows
    ]


@pytest.fixture
def sample_risks(sample_entity):
    """Open High, open Medium and mitigated Low: risk score 46.33."""
    created = datetime(2026, 1, 5, tzinfo=timezone.utc)
    risks = [
        data_store.add_risk({
            "entity_id": sample_entity["id"],
            "severity": "High",
            "description": "Privileged accounts without MFA",
            "created_at": created,
        }),
        data_store.add_risk({
            "entity_id": sample_entity["id"],
            "severity": "Medium",
            "description": "Backups not tested",
            "created_at": created,
        }),
        data_store.add_risk({
            "entity_id": sample_entity["id"],
            "severity": "Low",
            "description": "Outdated policy document",
            "status": "Mitigated",
            "created_at": created,
            "mitigated_at": datetime(2026, 1, 15, tzinfo=timezone.utc),
        }),
    ]
    return risks
