"""Application configuration via environment variables."""

from __future__ import annotations

import math

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings

GUIDANCE_TIERS = ("foundation", "strengthen", "maintain")


class ScoringPolicy(BaseModel):
    """Weights and thresholds shared by every GRC calculator.

    Thresholds are ``(floor, label)`` pairs checked from the top down; the
    first floor a score reaches wins, otherwise the fallback label applies.
    """

    # Compliance
    partial_credit: float = Field(default=0.5, ge=0.0, le=1.0)
    compliance_weight: float = Field(default=0.7, ge=0.0, le=1.0)
    implementation_weight: float = Field(default=0.3, ge=0.0, le=1.0)
    grade_thresholds: list[tuple[float, str]] = [(90, "A"), (80, "B"), (70, "C"), (60, "D")]
    grade_fallback: str = "F"

    # Colour bands used by every score (dashboard cut-offs)
    band_thresholds: list[tuple[float, str]] = [(80, "green"), (60, "yellow"), (40, "orange")]
    band_fallback: str = "red"

    # Risk: higher score means lower risk
    severity_penalties: dict[str, float] = {"High": 30.0, "Medium": 15.0, "Low": 5.0}
    risk_severity_weight: float = Field(default=0.6, ge=0.0, le=1.0)
    mitigation_weight: float = Field(default=0.4, ge=0.0, le=1.0)
    risk_level_thresholds: list[tuple[float, str]] = [(80, "Low"), (60, "Medium"), (40, "High")]
    risk_level_fallback: str = "Critical"

    # Maturity
    maturity_weights: dict[str, float] = {
        "compliance_score": 0.4,
        "risk_score": 0.3,
        "implementation_score": 0.3,
    }
    maturity_level_thresholds: list[tuple[float, str]] = [(75, "Advanced"), (50, "Intermediate")]
    maturity_level_fallback: str = "Basic"
    recommendation_threshold: float = 60.0

    # Guidance: compliance score tiers for entity recommendations
    guidance_thresholds: list[tuple[float, str]] = [(85, "maintain"), (70, "strengthen")]
    guidance_fallback: str = "foundation"

    # Sector auto-assignment
    control_count_coefficients: dict[str, float] = {
        "controls": 0.5,
        "mandatory_controls": 0.8,
        "frameworks": 2.0,
    }
    employee_bands: list[tuple[int, float]] = [(50, 1.0), (250, 1.1), (1000, 1.25)]
    employee_band_fallback: float = 1.5
    sensitivity_multipliers: dict[str, float] = {
        "low": 1.0,
        "medium": 1.15,
        "high": 1.3,
        "critical": 1.5,
    }
    personal_data_multiplier: float = Field(default=1.1, ge=1.0)
    complexity_thresholds: list[tuple[float, str]] = [(200, "High"), (75, "Medium")]
    complexity_fallback: str = "Low"

    @model_validator(mode="after")
    def _check_consistency(self) -> "ScoringPolicy":
        pairs = {
            "compliance/implementation": self.compliance_weight + self.implementation_weight,
            "risk severity/mitigation": self.risk_severity_weight + self.mitigation_weight,
            "maturity": sum(self.maturity_weights.values()),
        }
        for name, total in pairs.items():
            if not math.isclose(total, 1.0, abs_tol=1e-6):
                raise ValueError(f"{name} weights must sum to 1.0, got {total}")

        bands = [limit for limit, _ in self.employee_bands]
        factors = [factor for _, factor in self.employee_bands] + [self.employee_band_fallback]
        if bands != sorted(bands) or factors != sorted(factors):
            raise ValueError("employee_bands must be ascending in both size and multiplier")

        sensitivities = list(self.sensitivity_multipliers.values())
        if sensitivities != sorted(sensitivities):
            raise ValueError("sensitivity_multipliers must be ordered from least to most severe")

        tiers = {label for _, label in self.guidance_thresholds} | {self.guidance_fallback}
        if not tiers <= set(GUIDANCE_TIERS):
            raise ValueError(f"guidance tiers must be among {GUIDANCE_TIERS}, got {sorted(tiers)}")
        return self

    @property
    def sensitivity_levels(self) -> list[str]:
        return list(self.sensitivity_multipliers)


class Settings(BaseSettings):
    """Central configuration for the GRC oversight service."""

    # Application
    app_name: str = "GRC Oversight"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = Field(default="development", pattern=r"^(development|staging|production)$")
    log_level: str = "INFO"
    log_format: str = "json"

    # API
    allowed_origins: str = "http://localhost:3000"
    rate_limit_default: str = "100/minute"
    default_page_size: int = Field(default=50, ge=1, le=200)

    # Report jobs
    report_max_attempts: int = Field(default=3, ge=1)

    scoring: ScoringPolicy = Field(default_factory=ScoringPolicy)

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",")]

    model_config = {
        "env_prefix": "OVERSIGHT_",
        "env_file": ".env",
        "env_nested_delimiter": "__",
        "extra": "ignore",
    }


def get_settings() -> Settings:
    """Return a settings instance built from the environment."""
    return Settings()
