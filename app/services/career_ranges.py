from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from app.schemas.analysis import AnalysisRecord

logger = logging.getLogger(__name__)

_CAREER_CONFIG_CACHE: dict[str, Any] | None = None
_CAREER_CONFIG_PATH = Path(__file__).resolve().parents[1] / "resources" / "career.yaml"

DEFAULT_TITLE = "default"


@dataclass(frozen=True)
class Band:
    min: int
    max: int

    def clamp(self, value: int) -> int:
        return max(self.min, min(self.max, value))

    def contains(self, value: int) -> bool:
        return self.min <= value <= self.max


@dataclass(frozen=True)
class RoleRanges:
    title: str
    demand: Band
    salary: Band


def get_career_config() -> dict[str, Any]:
    """Load role ranges and fallback templates from app/resources/career.yaml and cache them."""
    global _CAREER_CONFIG_CACHE

    if _CAREER_CONFIG_CACHE is not None:
        return _CAREER_CONFIG_CACHE

    if not _CAREER_CONFIG_PATH.exists():
        raise RuntimeError(
            f"Career config not found at '{_CAREER_CONFIG_PATH}'. "
            "Expected file: app/resources/career.yaml"
        )

    try:
        raw = _CAREER_CONFIG_PATH.read_text(encoding="utf-8")
    except OSError as exc:
        raise RuntimeError(
            f"Failed to read career config '{_CAREER_CONFIG_PATH}': {exc}"
        ) from exc

    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise RuntimeError(
            f"Invalid YAML in career config '{_CAREER_CONFIG_PATH}': {exc}"
        ) from exc

    if not isinstance(parsed, dict) or not isinstance(parsed.get("titles"), list):
        raise RuntimeError(
            f"Invalid career config '{_CAREER_CONFIG_PATH}': expected a 'titles' list."
        )

    _CAREER_CONFIG_CACHE = parsed
    return _CAREER_CONFIG_CACHE


def _band(raw: dict[str, Any]) -> Band:
    return Band(min=int(raw["min"]), max=int(raw["max"]))


def _ranges_from_entry(entry: dict[str, Any]) -> RoleRanges:
    return RoleRanges(title=str(entry["name"]), demand=_band(entry["demand"]), salary=_band(entry["salary"]))


def normalize_job_title(title: str | None) -> str:
    """Map a free-form job title onto one of the configured role names, or ``default``."""
    lowered = (title or "").lower()
    if not lowered.strip():
        return DEFAULT_TITLE
    for entry in get_career_config()["titles"]:
        all_of = entry.get("all_of") or []
        any_of = entry.get("any_of") or []
        if all_of and not all(token in lowered for token in all_of):
            continue
        if any_of and not any(token in lowered for token in any_of):
            continue
        return str(entry["name"])
    return DEFAULT_TITLE


def ranges_for(normalized_title: str) -> RoleRanges:
    config = get_career_config()
    for entry in config["titles"]:
        if entry["name"] == normalized_title:
            return _ranges_from_entry(entry)
    return _ranges_from_entry(config["default"])


def ranges_for_title(title: str | None) -> RoleRanges:
    return ranges_for(normalize_job_title(title))


def guess_job_title(text: str, file_name: str = "") -> str:
    """Keyword guess over the résumé text, then the file name; ``Professional`` when nothing matches."""
    haystacks = [(text or "")[:4000].lower(), (file_name or "").lower().replace("_", " ").replace("-", " ")]
    rules = get_career_config().get("title_keywords") or []
    for haystack in haystacks:
        if not haystack.strip():
            continue
        for rule in rules:
            if any(keyword in haystack for keyword in rule.get("keywords") or []):
                return str(rule["title"])
    return "Professional"


def clamp_record(record: AnalysisRecord) -> AnalysisRecord:
    """Force every career-growth point into the band of the record's own job title."""
    role = ranges_for_title(record.job_title)
    points = []
    for point in record.career_growth:
        demand = role.demand.clamp(point.demand)
        salary = role.salary.clamp(point.salary)
        if demand != point.demand:
            logger.warning(
                "career_growth_demand_clamped title=%s year=%s value=%s band=%s-%s",
                record.job_title, point.year, point.demand, role.demand.min, role.demand.max,
            )
        if salary != point.salary:
            logger.info(
                "career_growth_salary_clamped title=%s year=%s value=%s band=%s-%s",
                record.job_title, point.year, point.salary, role.salary.min, role.salary.max,
            )
        points.append(point.model_copy(update={"demand": demand, "salary": salary}))
    return record.model_copy(update={"career_growth": points})
