from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from app.schemas.analysis import AnalysisRecord

logger = logging.getLogger(__name__)

_CODE_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")

# Flags that only this service may set.
_SERVICE_FIELDS = {"is_fallback", "fallback_fields"}


class AnalysisParseError(ValueError):
    pass


@dataclass
class ValidatedAnalysis:
    record: AnalysisRecord
    failed_fields: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)


def extract_first_json_object(text: str) -> str | None:
    """Return the first balanced ``{...}`` block, honouring string literals and escapes."""
    if not text:
        return None

    fenced = _CODE_FENCE_RE.search(text)
    if fenced and "{" in fenced.group(1):
        text = fenced.group(1)

    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escape_next = False
    for index in range(start, len(text)):
        ch = text[index]
        if escape_next:
            escape_next = False
            continue
        if ch == "\\":
            escape_next = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None


def _repair_common_json_issues(text: str) -> str:
    repaired = text.strip()
    repaired = repaired.replace("“", '"').replace("”", '"').replace("’", "'")
    return _TRAILING_COMMA_RE.sub(r"\1", repaired)


def parse_model_json(text: str) -> dict[str, Any]:
    """Pull the analysis object out of a model reply or raise ``AnalysisParseError``."""
    candidate = extract_first_json_object(text)
    if candidate is None:
        raise AnalysisParseError("no JSON object found in model response")
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        try:
            parsed = json.loads(_repair_common_json_issues(candidate))
        except json.JSONDecodeError as exc:
            raise AnalysisParseError(f"model JSON could not be decoded: {exc.msg}") from exc
    if not isinstance(parsed, dict):
        raise AnalysisParseError("model JSON is not an object")
    return parsed


def _alias_to_field() -> dict[str, str]:
    mapping: dict[str, str] = {}
    for name, info in AnalysisRecord.model_fields.items():
        mapping[name] = name
        if info.alias:
            mapping[info.alias] = name
    return mapping


def _by_field_name(payload: dict[str, Any]) -> dict[str, Any]:
    aliases = _alias_to_field()
    values: dict[str, Any] = {}
    for key, value in payload.items():
        name = aliases.get(key)
        if name is None or name in _SERVICE_FIELDS:
            continue
        values[name] = value
    return values


def validate_analysis(payload: dict[str, Any], fallback: dict[str, Any]) -> ValidatedAnalysis:
    """Validate a model payload field by field.

    Top-level fields that are missing or fail validation are replaced with the
    matching entry from ``fallback`` and reported in ``failed_fields``; valid
    fields are kept as the model produced them.
    """
    values = _by_field_name(payload)
    try:
        return ValidatedAnalysis(record=AnalysisRecord.model_validate(values))
    except ValidationError as exc:
        validation_error = exc

    aliases = _alias_to_field()
    errors: dict[str, str] = {}
    for error in validation_error.errors():
        loc = error.get("loc") or ()
        if not loc:
            continue
        name = aliases.get(str(loc[0]), str(loc[0]))
        detail = ".".join(str(part) for part in loc[1:])
        message = error.get("msg", "invalid")
        errors.setdefault(name, f"{detail}: {message}" if detail else message)

    failed = [name for name in AnalysisRecord.model_fields if name in errors]
    merged = dict(values)
    for name in failed:
        if name not in fallback:
            raise AnalysisParseError(f"field '{name}' is invalid and has no fallback value") from validation_error
        merged[name] = fallback[name]
    merged["fallback_fields"] = [AnalysisRecord.model_fields[name].alias or name for name in failed]

    logger.warning("analysis_fields_replaced fields=%s errors=%s", failed, errors)
    return ValidatedAnalysis(record=AnalysisRecord.model_validate(merged), failed_fields=failed, errors=errors)
