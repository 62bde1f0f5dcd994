"""Initial schema: entities, reference data, compliance records, risks and reports.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # Entities
    op.create_table(
        "entities",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("sector", sa.String(100), nullable=False),
        sa.Column("sub_sector", sa.String(100), nullable=True),
        sa.Column("region", sa.String(100), nullable=True),
        sa.Column("employee_count", sa.Integer, server_default="0"),
        sa.Column("data_sensitivity_level", sa.String(20), nullable=False, server_default="low"),
        sa.Column("processes_personal_data", sa.Boolean, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_entities_sector", "entities", ["sector"])

    # Regulators
    op.create_table(
        "regulators",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("code", sa.String(50), unique=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("sector", sa.String(100), nullable=False),
        sa.Column("sub_sector", sa.String(100), nullable=True),
        sa.Column("jurisdiction", sa.String(100), nullable=False, server_default="National"),
        sa.Column("is_active", sa.Boolean, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_regulators_code", "regulators", ["code"])
    op.create_index("ix_regulators_sector", "regulators", ["sector"])

    # Frameworks
    op.create_table(
        "frameworks",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("regulator_id", sa.String(36), sa.ForeignKey("regulators.id"), nullable=False),
        sa.Column("code", sa.String(50), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("framework_type", sa.String(20), nullable=False, server_default="Regulation"),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("applies_to_personal_data", sa.Boolean, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint("regulator_id", "code", name="uq_framework_regulator_code"),
    )
    op.create_index("ix_frameworks_regulator_id", "frameworks", ["regulator_id"])

    # Controls
    op.create_table(
        "controls",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("framework_id", sa.String(36), sa.ForeignKey("frameworks.id"), nullable=False),
        sa.Column("code", sa.String(100), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("is_mandatory", sa.Boolean, server_default=sa.true()),
        sa.Column("priority", sa.String(10), nullable=False, server_default="Medium"),
        sa.Column("implementation_guidance", sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_controls_framework_id", "controls", ["framework_id"])

    # Entity to regulator mappings
    op.create_table(
        "entity_regulators",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("entity_id", sa.String(36), sa.ForeignKey("entities.id"), nullable=False),
        sa.Column("regulator_id", sa.String(36), sa.ForeignKey("regulators.id"), nullable=False),
        sa.Column("applicability_reason", sa.Text, nullable=True),
        sa.Column("effective_date", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("is_active", sa.Boolean, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint("entity_id", "regulator_id", name="uq_entity_regulator"),
    )
    op.create_index("ix_entity_regulators_entity_id", "entity_regulators", ["entity_id"])

    # Control assessments
    op.create_table(
        "control_assessments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("entity_id", sa.String(36), sa.ForeignKey("entities.id"), nullable=False),
        sa.Column("control_id", sa.String(36), sa.ForeignKey("controls.id"), nullable=False),
        sa.Column("framework_id", sa.String(36), sa.ForeignKey("frameworks.id"), nullable=False),
        sa.Column("assessment_status", sa.String(30), nullable=False),
        sa.Column("implementation_status", sa.String(30), nullable=False, server_default="Not Implemented"),
        sa.Column("assessment_date", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("remediated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_by", sa.String(255), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_control_assessments_entity_id", "control_assessments", ["entity_id"])
    op.create_index("ix_control_assessments_framework_id", "control_assessments", ["framework_id"])

    # Risks
    op.create_table(
        "risks",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("entity_id", sa.String(36), sa.ForeignKey("entities.id"), nullable=False),
        sa.Column("framework_id", sa.String(36), sa.ForeignKey("frameworks.id"), nullable=True),
        sa.Column("severity", sa.String(10), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="Open"),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("mitigation_plan", sa.Text, nullable=True),
        sa.Column("mitigated_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_risks_entity_id", "risks", ["entity_id"])

    # Compliance report jobs
    op.create_table(
        "compliance_reports",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("entity_id", sa.String(36), sa.ForeignKey("entities.id"), nullable=False),
        sa.Column("framework_id", sa.String(36), sa.ForeignKey("frameworks.id"), nullable=True),
        sa.Column("idempotency_key", sa.String(100), unique=True, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="generating"),
        sa.Column("attempts", sa.Integer, server_default="1"),
        sa.Column("content", sa.JSON, nullable=True),
        sa.Column("error", sa.Text, nullable=True),
        sa.Column("generated_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_compliance_reports_entity_id", "compliance_reports", ["entity_id"])


def downgrade() -> None:
    op.drop_table("compliance_reports")
    op.drop_table("risks")
    op.drop_table("control_assessments")
    op.drop_table("entity_regulators")
    op.drop_table("controls")
    op.drop_table("frameworks")
    op.drop_table("regulators")
    op.drop_table("entities")
