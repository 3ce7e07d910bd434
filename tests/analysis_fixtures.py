from __future__ import annotations

import json
from io import BytesIO
from typing import Any

from docx import Document

from app.ai.types import GenerationError

RESUME_TEXT = (
    "Jane Roe\n"
    "Senior Software Engineer with 8 years building Python and Go services.\n"
    "Led a team of five engineers, moved billing onto a new cloud platform, cut costs by 30%.\n"
    "Skills: Python, Go, PostgreSQL, Docker, AWS, system design, mentoring.\n"
)


def model_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "jobTitle": "Senior Software Engineer",
        "experienceLevel": "Senior Level",
        "aiRiskLevel": "Low",
        "coreSkills": ["Python", "Go", "PostgreSQL", "Docker", "AWS", "Mentoring"],
        "careerGrowth": [
            {"year": 2024 + offset, "demand": 75 + (offset % 5), "salary": 150000 + offset * 5000}
            for offset in range(10)
        ],
        "skillsAssessment": [
            {"skill": "System Design", "current": 80, "recommended": 90},
            {"skill": "Leadership", "current": 70, "recommended": 85},
        ],
        "emergingRoles": [
            {"title": "Platform Engineer", "growth": 80, "match": 85},
            {"title": "AI/ML Engineer", "growth": 90, "match": 60},
        ],
        "aiImpact": {
            "summary": "AI tooling speeds up routine coding; architecture and leadership stay human-led.",
            "timeline": "3-5 years",
            "adaptationPotential": 82,
        },
        "recommendations": ["Deepen ML platform knowledge", "Mentor across teams"],
        "learningPaths": [
            {
                "title": "Machine Learning Engineering for Production",
                "platform": "Coursera",
                "duration": "4 months",
                "link": "https://www.coursera.org/specializations/machine-learning-engineering-for-production-mlops",
                "skillAddressed": "ML Platforms",
            }
        ],
    }
    payload.update(overrides)
    return payload


def model_reply(payload: dict[str, Any] | None = None) -> str:
    body = json.dumps(payload if payload is not None else model_payload(), indent=2)
    return f"Here is the analysis you asked for:\n```json\n{body}\n```\n"


class ScriptedClient:
    """Generation client that replays canned replies (or raises canned errors) in order."""

    def __init__(self, *replies: str | Exception):
        self.replies = list(replies)
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.replies:
            raise GenerationError("no scripted reply left", code="unavailable")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def configured(self) -> bool:
        return True


def docx_bytes(*paragraphs: str, table_rows: list[list[str]] | None = None) -> bytes:
    document = Document()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    if table_rows:
        table = document.add_table(rows=len(table_rows), cols=len(table_rows[0]))
        for row_index, row in enumerate(table_rows):
            for col_index, value in enumerate(row):
                table.cell(row_index, col_index).text = value
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()
