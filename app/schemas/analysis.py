from __future__ import annotations

import math
import re
from typing import Annotated, Any, Literal

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ExperienceLevel = Literal["Entry Level", "Mid Level", "Senior Level", "Executive"]
RiskLevel = Literal["Low", "Medium", "High"]

_NUMBER_CLEAN_RE = re.compile(r"[,$%\s]")


def _round_number(value: Any) -> Any:
    if isinstance(value, bool):
        raise ValueError("expected a number, got a boolean")
    if isinstance(value, str):
        cleaned = _NUMBER_CLEAN_RE.sub("", value)
        multiplier = 1
        if cleaned.lower().endswith("k"):
            cleaned, multiplier = cleaned[:-1], 1000
        try:
            value = float(cleaned) * multiplier
        except ValueError:
            return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return value
        return int(round(value))
    return value


def clamp_percent(value: int) -> int:
    return min(100, max(0, value))


RoundedInt = Annotated[int, BeforeValidator(_round_number)]
Percent = Annotated[int, BeforeValidator(_round_number), AfterValidator(clamp_percent)]


def normalize_experience_level(value: Any) -> str:
    text = str(value or "").strip().lower()
    if not text:
        return "Mid Level"
    if any(token in text for token in ("executive", "director", "vp", "chief", "head of", "c-level")):
        return "Executive"
    if any(token in text for token in ("senior", "expert", "lead", "principal", "staff")):
        return "Senior Level"
    if any(token in text for token in ("entry", "junior", "graduate", "intern", "0-2")):
        return "Entry Level"
    return "Mid Level"


def normalize_risk_level(value: Any) -> str:
    text = str(value or "").strip().lower()
    if text.startswith("low"):
        return "Low"
    if text.startswith("high"):
        return "High"
    return "Medium"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CareerGrowthPoint(CamelModel):
    year: RoundedInt
    demand: RoundedInt
    salary: RoundedInt


class SkillScore(CamelModel):
    skill: str = Field(min_length=1, max_length=120)
    current: Percent
    recommended: Percent


class EmergingRole(CamelModel):
    title: str = Field(min_length=1, max_length=160)
    growth: Percent
    match: Percent


class AIImpact(CamelModel):
    summary: str = Field(min_length=1)
    timeline: str = Field(min_length=1, max_length=60)
    adaptation_potential: Percent


class LearningPath(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    platform: str = Field(default="", max_length=120)
    duration: str = Field(default="", max_length=60)
    link: str = Field(default="", max_length=500)
    skill_addressed: str = Field(default="", max_length=120)


class AnalysisRecord(CamelModel):
    job_title: str = Field(min_length=1, max_length=200)
    experience_level: ExperienceLevel
    ai_risk_level: RiskLevel
    core_skills: list[str] = Field(min_length=1, max_length=20)
    career_growth: list[CareerGrowthPoint] = Field(min_length=10, max_length=10)
    skills_assessment: list[SkillScore] = Field(min_length=1, max_length=20)
    emerging_roles: list[EmergingRole] = Field(min_length=1, max_length=10)
    ai_impact: AIImpact
    recommendations: list[str] = Field(min_length=1, max_length=20)
    learning_paths: list[LearningPath] = Field(default_factory=list, max_length=20)
    is_fallback: bool = False
    fallback_fields: list[str] = Field(default_factory=list)

    @field_validator("job_title", mode="before")
    @classmethod
    def _strip_title(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("experience_level", mode="before")
    @classmethod
    def _normalize_experience(cls, value: Any) -> str:
        return normalize_experience_level(value)

    @field_validator("ai_risk_level", mode="before")
    @classmethod
    def _normalize_risk(cls, value: Any) -> str:
        return normalize_risk_level(value)

    @field_validator("core_skills", "recommendations", mode="before")
    @classmethod
    def _clean_strings(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        return [str(item).strip() for item in value if isinstance(item, (str, int, float)) and str(item).strip()]

    @field_validator("career_growth")
    @classmethod
    def _years_are_consecutive(cls, value: list[CareerGrowthPoint]) -> list[CareerGrowthPoint]:
        years = [point.year for point in value]
        if years != list(range(years[0], years[0] + len(years))):
            raise ValueError("career growth years must be consecutive")
        return value


class AnalyzeResumeResponse(CamelModel):
    success: bool = True
    data: AnalysisRecord
    cached: bool = False
    extraction_warning: str | None = None


class ErrorResponse(BaseModel):
    error: str
    message: str | None = None


class HealthResponse(BaseModel):
    status: str
    message: str
