"""Government entity model and its regulator mappings."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from oversight.models.base import Base, utcnow


class Entity(Base):
    """A government entity under oversight."""

    __tablename__ = "entities"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sector: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    sub_sector: Mapped[str | None] = mapped_column(String(100), nullable=True)
    region: Mapped[str | None] = mapped_column(String(100), nullable=True)
    employee_count: Mapped[int] = mapped_column(Integer, default=0)
    data_sensitivity_level: Mapped[str] = mapped_column(String(20), nullable=False, default="low")
    processes_personal_data: Mapped[bool] = mapped_column(Boolean, default=False)

    def __repr__(self) -> str:
        return f"<Entity {self.name} sector={self.sector}>"


class EntityRegulator(Base):
    """A regulator found applicable to an entity by auto-configuration."""

    __tablename__ = "entity_regulators"
    __table_args__ = (UniqueConstraint("entity_id", "regulator_id", name="uq_entity_regulator"),)

    entity_id: Mapped[str] = mapped_column(ForeignKey("entities.id"), nullable=False, index=True)
    regulator_id: Mapped[str] = mapped_column(ForeignKey("regulators.id"), nullable=False)
    applicability_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    effective_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    def __repr__(self) -> str:
        return f"<EntityRegulator entity={self.entity_id[:8]} regulator={self.regulator_id[:8]}>"
