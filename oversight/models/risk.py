"""Risk register model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from oversight.models.base import Base


class Risk(Base):
    """A registered risk. Moves Open to Mitigated and is never deleted."""

    __tablename__ = "risks"

    entity_id: Mapped[str] = mapped_column(ForeignKey("entities.id"), nullable=False, index=True)
    framework_id: Mapped[str | None] = mapped_column(ForeignKey("frameworks.id"), nullable=True)
    severity: Mapped[str] = mapped_column(String(10), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Open")
    description: Mapped[str] = mapped_column(Text, nullable=False)
    mitigation_plan: Mapped[str | None] = mapped_column(Text, nullable=True)
    mitigated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Risk {self.id[:8]} {self.severity} {self.status}>"
