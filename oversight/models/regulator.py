"""Reference data models: regulators, frameworks and controls."""

from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from oversight.models.base import Base


class Regulator(Base):
    """A regulatory body. Sector ``all`` applies to every entity."""

    __tablename__ = "regulators"

    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sector: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    sub_sector: Mapped[str | None] = mapped_column(String(100), nullable=True)
    jurisdiction: Mapped[str] = mapped_column(String(100), nullable=False, default="National")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    def __repr__(self) -> str:
        return f"<Regulator {self.code}>"


class Framework(Base):
    """A law, regulation or standard issued by one regulator."""

    __tablename__ = "frameworks"
    __table_args__ = (UniqueConstraint("regulator_id", "code", name="uq_framework_regulator_code"),)

    regulator_id: Mapped[str] = mapped_column(ForeignKey("regulators.id"), nullable=False, index=True)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    framework_type: Mapped[str] = mapped_column(String(20), nullable=False, default="Regulation")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    applies_to_personal_data: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    def __repr__(self) -> str:
        return f"<Framework {self.code}>"


class Control(Base):
    __tablename__ = "controls"

    framework_id: Mapped[str] = mapped_column(ForeignKey("frameworks.id"), nullable=False, index=True)
    code: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_mandatory: Mapped[bool] = mapped_column(Boolean, default=True)
    priority: Mapped[str] = mapped_column(String(10), nullable=False, default="Medium")
    implementation_guidance: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Control {self.code}>"
