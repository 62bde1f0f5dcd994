"""Tests for the data store constraints and the report job lifecycle."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from oversight.errors import ConflictError, InvalidTransitionError, NotFoundError, ReferenceViolationError
from oversight.services import report_jobs
from oversight.services.report_jobs import (
    STATUS_FAILED,
    STATUS_GENERATED,
    STATUS_GENERATING,
    applicable_regulators,
    build_report_content,
    create_report_job,
    retry_report_job,
    run_report_job,
    transition,
)
from oversight.store import data_store


# ─── Test 1: Store constraints ───────────────────────────────────────────────

class TestStoreConstraints:
    """Uniqueness and parent references behave like the database constraints."""

    def test_duplicate_regulator_code_conflicts(self):
        data_store.add_regulator({"code": "CBK", "name": "Central Bank", "sector": "finance"})
        with pytest.raises(ConflictError):
            data_store.add_regulator({"code": "CBK", "name": "Another", "sector": "finance"})

    def test_framework_needs_existing_regulator(self):
        with pytest.raises(ReferenceViolationError):
            data_store.add_framework({"regulator_id": "missing", "code": "X", "name": "X"})

    def test_duplicate_framework_code_per_regulator_conflicts(self, sample_catalogue):
        regulator_id = sample_catalogue["regulators"]["fin"]["id"]
        with pytest.raises(ConflictError):
            data_store.add_framework({"regulator_id": regulator_id, "code": "CBK-CSF", "name": "Copy"})

    def test_same_framework_code_under_other_regulator_allowed(self, sample_catalogue):
        regulator_id = sample_catalogue["regulators"]["health"]["id"]
        record = data_store.add_framework({"regulator_id": regulator_id, "code": "CBK-CSF", "name": "Copy"})
        assert record["regulator_id"] == regulator_id

    def test_control_needs_existing_framework(self):
        with pytest.raises(ReferenceViolationError):
            data_store.add_control({"framework_id": "missing", "code": "C1", "name": "C1"})

    def test_assessment_inherits_framework_from_control(self, sample_entity, sample_catalogue):
        control_id = sample_catalogue["controls"]["all"][0]
        record = data_store.add_assessment({
            "entity_id": sample_entity["id"],
            "control_id": control_id,
            "assessment_status": "Compliant",
        })
        assert record["framework_id"] == sample_catalogue["frameworks"]["all"]["id"]
        assert record["assessment_date"] is not None

    def test_assessment_needs_existing_entity(self, sample_catalogue):
        with pytest.raises(ReferenceViolationError):
            data_store.add_assessment({
                "entity_id": "missing",
                "control_id": sample_catalogue["controls"]["all"][0],
                "assessment_status": "Compliant",
            })

    def test_risk_needs_existing_framework(self, sample_entity):
        with pytest.raises(ReferenceViolationError):
            data_store.add_risk({
                "entity_id": sample_entity["id"],
                "framework_id": "missing",
                "severity": "High",
                "description": "x",
            })

    def test_missing_records_raise_not_found(self):
        with pytest.raises(NotFoundError):
            data_store.get_entity("missing")
        with pytest.raises(NotFoundError):
            data_store.get_report("missing")

    def test_entity_regulator_mapping_is_idempotent(self, sample_entity, sample_catalogue):
        regulator_id = sample_catalogue["regulators"]["fin"]["id"]
        first = data_store.map_entity_regulator(sample_entity["id"], regulator_id, "sector match")
        second = data_store.map_entity_regulator(sample_entity["id"], regulator_id, "sector match")
        assert first is not None
        assert second is None
        assert len(data_store.get_entity_regulators(sample_entity["id"])) == 1

    def test_entity_regulator_needs_existing_regulator(self, sample_entity):
        with pytest.raises(ReferenceViolationError):
            data_store.map_entity_regulator(sample_entity["id"], "missing", "manual")
        assert data_store.get_entity_regulators(sample_entity["id"]) == []

    def test_timestamps_stored_in_utc(self, sample_entity, sample_catalogue):
        naive = data_store.add_assessment({
            "entity_id": sample_entity["id"],
            "control_id": sample_catalogue["controls"]["all"][0],
            "assessment_status": "Compliant",
            "assessment_date": datetime(2026, 3, 1, 9, 30),
        })
        offset = data_store.add_risk({
            "entity_id": sample_entity["id"],
            "severity": "Low",
            "description": "x",
            "created_at": datetime(2026, 3, 1, 12, 30, tzinfo=timezone(timedelta(hours=3))),
        })
        assert naive["assessment_date"] == datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
        assert offset["created_at"] == datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
        assert offset["created_at"].tzinfo == timezone.utc

    def test_reset_clears_everything(self, sample_catalogue):
        data_store.reset()
        assert data_store.regulators == {}
        assert data_store.controls == {}


# ─── Test 2: Report lifecycle ────────────────────────────────────────────────

class TestReportTransitions:
    """Tests for the generating/generated/failed state machine."""

    def _report(self, status: str) -> dict:
        return {"id": "r1", "status": status}

    def test_generating_to_generated(self):
        assert transition(self._report(STATUS_GENERATING), STATUS_GENERATED)["status"] == STATUS_GENERATED

    def test_generating_to_failed(self):
        assert transition(self._report(STATUS_GENERATING), STATUS_FAILED)["status"] == STATUS_FAILED

    def test_failed_to_generating(self):
        assert transition(self._report(STATUS_FAILED), STATUS_GENERATING)["status"] == STATUS_GENERATING

    @pytest.mark.parametrize("current,target", [
        (STATUS_GENERATED, STATUS_GENERATING),
        (STATUS_GENERATED, STATUS_FAILED),
        (STATUS_FAILED, STATUS_GENERATED),
        (STATUS_GENERATING, STATUS_GENERATING),
    ])
    def test_forbidden_transitions(self, current, target):
        with pytest.raises(InvalidTransitionError):
            transition(self._report(current), target)


# ─── Test 3: Report jobs ─────────────────────────────────────────────────────

class TestReportJobs:
    """Tests for creating, running and retrying report jobs."""

    def test_create_starts_generating(self, sample_entity):
        report, created = create_report_job(data_store, sample_entity["id"])
        assert created
        assert report["status"] == STATUS_GENERATING
        assert report["attempts"] == 1

    def test_idempotency_key_returns_existing_job(self, sample_entity):
        first, _ = create_report_job(data_store, sample_entity["id"], idempotency_key="q1-2026")
        second, created = create_report_job(data_store, sample_entity["id"], idempotency_key="q1-2026")
        assert not created
        assert second["id"] == first["id"]
        assert len(data_store.reports) == 1

    def test_create_for_unknown_entity(self):
        with pytest.raises(NotFoundError):
            create_report_job(data_store, "missing")

    def test_run_generates_content(self, policy, sample_entity, sample_assessments, sample_risks):
        report, _ = create_report_job(data_store, sample_entity["id"])
        run_report_job(data_store, report["id"], policy)

        assert report["status"] == STATUS_GENERATED
        assert report["generated_at"] is not None
        content = report["content"]
        assert content["compliance"]["compliance_score"] == 50.0
        assert content["risk"]["risk_score"] == 46.33
        assert "Ministry of Finance" in content["executive_summary"]
        assert "grade F" in content["executive_summary"]

    def test_content_uses_sector_match_without_mappings(self, policy, sample_entity, sample_catalogue):
        report, _ = create_report_job(data_store, sample_entity["id"])
        content = build_report_content(data_store, report, policy)
        assert [r["code"] for r in content["regulators"]] == ["CBK", "NCA"]
        assert content["applicable_controls"] == 7
        assert "No applicable controls have been assessed yet" in content["executive_summary"]

    def test_mapped_regulators_take_precedence(self, sample_entity, sample_catalogue):
        health = sample_catalogue["regulators"]["health"]["id"]
        data_store.map_entity_regulator(sample_entity["id"], health, "manual")
        assert [r["code"] for r in applicable_regulators(data_store, sample_entity)] == ["MOH"]

    def test_failure_lands_in_failed(self, policy, sample_entity, monkeypatch):
        def _boom(*args, **kwargs):
            raise RuntimeError("scoring backend unavailable")

        monkeypatch.setattr(report_jobs, "build_report_content", _boom)
        report, _ = create_report_job(data_store, sample_entity["id"])
        run_report_job(data_store, report["id"], policy)

        assert report["status"] == STATUS_FAILED
        assert report["error"] == "scoring backend unavailable"
        assert report["content"] is None

    def test_retry_after_failure(self, policy, sample_entity, monkeypatch):
        monkeypatch.setattr(report_jobs, "build_report_content", lambda *a: 1 / 0)
        report, _ = create_report_job(data_store, sample_entity["id"])
        run_report_job(data_store, report["id"], policy)
        monkeypatch.undo()

        retry_report_job(data_store, report["id"], max_attempts=3)
        assert report["status"] == STATUS_GENERATING
        assert report["attempts"] == 2
        assert report["error"] is None

        run_report_job(data_store, report["id"], policy)
        assert report["status"] == STATUS_GENERATED

    def test_retry_of_generated_report_rejected(self, policy, sample_entity):
        report, _ = create_report_job(data_store, sample_entity["id"])
        run_report_job(data_store, report["id"], policy)
        with pytest.raises(InvalidTransitionError):
            retry_report_job(data_store, report["id"], max_attempts=3)

    def test_retry_limit(self, policy, sample_entity, monkeypatch):
        monkeypatch.setattr(report_jobs, "build_report_content", lambda *a: 1 / 0)
        report, _ = create_report_job(data_store, sample_entity["id"])
        run_report_job(data_store, report["id"], policy)
        retry_report_job(data_store, report["id"], max_attempts=2)
        run_report_job(data_store, report["id"], policy)

        assert report["attempts"] == 2
        with pytest.raises(InvalidTransitionError, match="already been attempted"):
            retry_report_job(data_store, report["id"], max_attempts=2)

    def test_run_skips_finished_job(self, policy, sample_entity):
        report, _ = create_report_job(data_store, sample_entity["id"])
        run_report_job(data_store, report["id"], policy)
        generated_at = report["generated_at"]
        run_report_job(data_store, report["id"], policy)
        assert report["generated_at"] == generated_at
