from __future__ import annotations

import logging
import random
from typing import Any

from app.schemas.analysis import AnalysisRecord, CareerGrowthPoint
from app.services.career_ranges import RoleRanges, get_career_config, ranges_for_title

logger = logging.getLogger(__name__)

GROWTH_YEARS = 10


def _templates() -> dict[str, Any]:
    return get_career_config().get("fallback") or {}


def fallback_career_growth(role: RoleRanges, *, start_year: int | None = None, rng: random.Random | None = None) -> list[CareerGrowthPoint]:
    """Ten yearly points trending upward through the role's bands with a little jitter."""
    rng = rng or random.Random()
    first_year = int(start_year if start_year is not None else _templates().get("start_year", 2024))
    demand_spread = role.demand.max - role.demand.min
    salary_spread = role.salary.max - role.salary.min
    points: list[CareerGrowthPoint] = []
    for index in range(GROWTH_YEARS):
        progress = index / (GROWTH_YEARS - 1)
        demand = role.demand.min + demand_spread * (0.6 + progress * 0.3 + rng.uniform(-0.05, 0.05))
        salary = role.salary.min + salary_spread * (0.4 + progress * 0.5) * (1 + rng.uniform(-0.05, 0.05))
        points.append(
            CareerGrowthPoint(
                year=first_year + index,
                demand=role.demand.clamp(round(demand)),
                salary=role.salary.clamp(round(salary)),
            )
        )
    return points


def fallback_fields(job_title: str, *, rng: random.Random | None = None) -> dict[str, Any]:
    """Template values for every record field, keyed by field name."""
    templates = _templates()
    role = ranges_for_title(job_title)
    return {
        "job_title": job_title,
        "experience_level": templates.get("experience_level", "Mid Level"),
        "ai_risk_level": templates.get("ai_risk_level", "Medium"),
        "core_skills": list(templates.get("core_skills") or []),
        "career_growth": fallback_career_growth(role, rng=rng),
        "skills_assessment": [dict(item) for item in templates.get("skills_assessment") or []],
        "emerging_roles": [dict(item) for item in templates.get("emerging_roles") or []],
        "ai_impact": dict(templates.get("ai_impact") or {}),
        "recommendations": list(templates.get("recommendations") or []),
        "learning_paths": [dict(item) for item in templates.get("learning_paths") or []],
    }


def build_fallback_analysis(job_title: str, *, rng: random.Random | None = None) -> AnalysisRecord:
    logger.info("fallback_analysis_generated title=%s", job_title)
    return AnalysisRecord.model_validate({**fallback_fields(job_title, rng=rng), "is_fallback": True})
