"""Control assessment model: one control assessed for one entity."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from oversight.models.base import Base, utcnow


class ControlAssessment(Base):
    """A compliance record. Only a reviewer changes its status."""

    __tablename__ = "control_assessments"

    entity_id: Mapped[str] = mapped_column(ForeignKey("entities.id"), nullable=False, index=True)
    control_id: Mapped[str] = mapped_column(ForeignKey("controls.id"), nullable=False)
    framework_id: Mapped[str] = mapped_column(ForeignKey("frameworks.id"), nullable=False, index=True)
    assessment_status: Mapped[str] = mapped_column(String(30), nullable=False)
    implementation_status: Mapped[str] = mapped_column(String(30), nullable=False, default="Not Implemented")
    assessment_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    remediated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<ControlAssessment {self.id[:8]} status={self.assessment_status}>"
