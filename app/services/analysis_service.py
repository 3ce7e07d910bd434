from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Literal

from app.ai.types import AIClient, GenerationError
from app.core.metrics import MetricsCollector
from app.core.result_cache import ResultCache
from app.schemas.analysis import AnalysisRecord
from app.services.analysis_fallback import build_fallback_analysis, fallback_fields
from app.services.analysis_parser import AnalysisParseError, parse_model_json, validate_analysis
from app.services.analysis_prompt import build_analysis_prompt, build_title_prompt, clean_title_reply
from app.services.career_ranges import clamp_record, get_career_config, guess_job_title, ranges_for_title

logger = logging.getLogger(__name__)

AnalysisSource = Literal["cache", "model", "fallback"]

# A reply that loses career_growth or more than half of these is discarded.
_REQUIRED_FIELDS = {
    "job_title",
    "experience_level",
    "ai_risk_level",
    "core_skills",
    "career_growth",
    "skills_assessment",
    "emerging_roles",
    "ai_impact",
    "recommendations",
}


@dataclass(frozen=True)
class AnalysisOutcome:
    record: AnalysisRecord
    source: AnalysisSource
    fallback_reason: str | None = None

    @property
    def cached(self) -> bool:
        return self.source == "cache"


class AnalysisService:
    def __init__(
        self,
        client: AIClient,
        cache: ResultCache,
        metrics: MetricsCollector,
        rng: random.Random | None = None,
    ):
        self._client = client
        self._cache = cache
        self._metrics = metrics
        self._rng = rng or random.Random()

    def _generate(self, prompt: str) -> str:
        self._metrics.record_model_call()
        return self._client.generate(prompt)

    def _job_title(self, text: str, file_name: str) -> str:
        if not text.strip():
            return guess_job_title("", file_name)
        try:
            title = clean_title_reply(self._generate(build_title_prompt(text)))
        except GenerationError as exc:
            logger.warning("job_title_extraction_failed code=%s: %s", exc.code, exc)
            title = ""
        return title or guess_job_title(text, file_name)

    def _fallback(self, job_title: str, reason: str) -> AnalysisOutcome:
        self._metrics.increment("fallbacks")
        logger.warning("resume_analysis_fallback title=%s reason=%s", job_title, reason)
        record = clamp_record(build_fallback_analysis(job_title, rng=self._rng))
        return AnalysisOutcome(record=record, source="fallback", fallback_reason=reason)

    def _store(self, key: str, record: AnalysisRecord) -> None:
        try:
            self._cache.set(key, record)
        except OSError as exc:
            logger.warning("result_cache_write_failed key=%s: %s", key, exc)

    def analyze(self, text: str, file_name: str) -> AnalysisOutcome:
        key = self._cache.key(text, file_name)
        cached = self._cache.get(key)
        if cached is not None:
            self._metrics.increment("cache_hits")
            logger.info("resume_analysis_cache_hit key=%s", key[:12])
            return AnalysisOutcome(record=cached, source="cache")
        self._metrics.increment("cache_misses")

        job_title = self._job_title(text, file_name)
        if not text.strip():
            return self._fallback(job_title, "no_text")

        role = ranges_for_title(job_title)
        logger.info(
            "resume_analysis_ranges title=%s normalized=%s demand=%s-%s salary=%s-%s",
            job_title, role.title, role.demand.min, role.demand.max, role.salary.min, role.salary.max,
        )
        start_year = int((get_career_config().get("fallback") or {}).get("start_year", 2024))
        prompt = build_analysis_prompt(text, job_title, role, start_year=start_year)

        try:
            reply = self._generate(prompt)
        except GenerationError as exc:
            return self._fallback(job_title, f"generation_{exc.code}")

        try:
            payload = parse_model_json(reply)
            validated = validate_analysis(payload, fallback_fields(job_title, rng=self._rng))
        except AnalysisParseError as exc:
            logger.debug("resume_analysis_unparseable_reply chars=%s", len(reply))
            return self._fallback(job_title, f"invalid_response: {exc}")

        failed_required = _REQUIRED_FIELDS.intersection(validated.failed_fields)
        if "career_growth" in failed_required or len(failed_required) * 2 > len(_REQUIRED_FIELDS):
            return self._fallback(job_title, f"invalid_response: {len(failed_required)} required fields unusable")

        if validated.failed_fields:
            self._metrics.increment("partial_fallbacks")

        record = clamp_record(validated.record)
        self._store(key, record)
        self._metrics.increment("model_analyses")
        return AnalysisOutcome(record=record, source="model")
