"""Compliance report job model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from oversight.models.base import Base


class ComplianceReport(Base):
    """A report generation job: generating, generated or failed."""

    __tablename__ = "compliance_reports"

    entity_id: Mapped[str] = mapped_column(ForeignKey("entities.id"), nullable=False, index=True)
    framework_id: Mapped[str | None] = mapped_column(ForeignKey("frameworks.id"), nullable=True)
    idempotency_key: Mapped[str | None] = mapped_column(String(100), unique=True, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="generating")
    attempts: Mapped[int] = mapped_column(Integer, default=1)
    content: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    generated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<ComplianceReport {self.id[:8]} status={self.status}>"
