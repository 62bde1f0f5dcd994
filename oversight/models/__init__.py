"""Database models for the GRC oversight service."""

from oversight.models.base import Base
from oversight.models.entity import Entity, EntityRegulator
from oversight.models.regulator import Control, Framework, Regulator
from oversight.models.assessment import ControlAssessment
from oversight.models.risk import Risk
from oversight.models.report import ComplianceReport

__all__ = [
    "Base",
    "Entity",
    "EntityRegulator",
    "Regulator",
    "Framework",
    "Control",
    "ControlAssessment",
    "Risk",
    "ComplianceReport",
]
