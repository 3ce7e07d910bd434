from __future__ import annotations

import json

from app.services.career_ranges import RoleRanges

TITLE_PREVIEW_CHARS = 500
MAX_RESUME_CHARS = 30000


def build_title_prompt(resume_text: str) -> str:
    preview = (resume_text or "")[:TITLE_PREVIEW_CHARS]
    return (
        "Analyze this resume and extract the most relevant job title. "
        "Respond with ONLY the job title, nothing else.\n\n"
        f"Resume content (first {TITLE_PREVIEW_CHARS} chars):\n{preview}\n"
    )


def clean_title_reply(reply: str) -> str:
    """Keep the first non-empty line of a title reply, without quotes or markdown."""
    for line in (reply or "").splitlines():
        cleaned = line.strip().strip("*#`\"' ").strip()
        if cleaned.lower().startswith("job title:"):
            cleaned = cleaned.split(":", 1)[1].strip()
        if cleaned:
            return cleaned[:120]
    return ""


def _schema_example(job_title: str, role: RoleRanges, start_year: int) -> dict:
    mid_demand = (role.demand.min + role.demand.max) // 2
    mid_salary = (role.salary.min + role.salary.max) // 2
    return {
        "jobTitle": job_title,
        "experienceLevel": "Entry Level/Mid Level/Senior Level/Executive",
        "aiRiskLevel": "Low/Medium/High",
        "coreSkills": ["skill1", "skill2", "skill3", "skill4", "skill5", "skill6"],
        "careerGrowth": [
            {"year": start_year + offset, "demand": mid_demand, "salary": mid_salary}
            for offset in range(10)
        ],
        "skillsAssessment": [
            {"skill": "Technical Skills", "current": 75, "recommended": 85},
            {"skill": "Leadership", "current": 65, "recommended": 75},
        ],
        "emergingRoles": [{"title": "AI/ML Engineer", "growth": 85, "match": 75}],
        "aiImpact": {
            "summary": "Detailed analysis of how AI will impact this specific role based on the resume content.",
            "timeline": "3-5 years",
            "adaptationPotential": 75,
        },
        "recommendations": ["Specific, actionable recommendation"],
        "learningPaths": [
            {
                "title": "Course name",
                "platform": "Coursera/Udemy/edX/...",
                "duration": "6 weeks",
                "link": "https://...",
                "skillAddressed": "Leadership",
            }
        ],
    }


def build_analysis_prompt(resume_text: str, job_title: str, role: RoleRanges, start_year: int = 2024) -> str:
    schema = json.dumps(_schema_example(job_title, role, start_year), indent=2)
    body = (resume_text or "")[:MAX_RESUME_CHARS]
    return (
        "Analyze this resume and provide a comprehensive career analysis in the following JSON format.\n\n"
        f"CRITICAL CONSTRAINTS FOR THIS SPECIFIC ROLE ({role.title}):\n"
        f"- Market demand MUST stay between {role.demand.min}% and {role.demand.max}%\n"
        f"- Salary MUST be between ${role.salary.min} and ${role.salary.max}\n"
        "- careerGrowth MUST contain exactly 10 consecutive years starting at "
        f"{start_year}\n"
        "- All scores (current, recommended, growth, match, adaptationPotential) are integers from 0 to 100\n"
        "- Respond with JSON only, no commentary\n\n"
        f"Generate exactly this JSON structure:\n{schema}\n\n"
        "Customize the analysis based on the actual resume content, but STRICTLY maintain "
        "the demand and salary ranges specified above.\n\n"
        f"Resume content:\n{body}\n"
    )
