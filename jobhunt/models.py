"""Data models for résumé analyses, job listings and match results.

AI responses are untrusted: ``from_dict`` constructors coerce and validate
the loosely-typed JSON the service returns, raising ``MalformedResponse``
when a field cannot be made to fit.
"""
from __future__ import annotations

import hashlib
import math
from dataclasses import dataclass, field
from typing import Any

from jobhunt.errors import MalformedResponse

_ABSENT_URLS = {"null", "none", "n/a"}


def _pick(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _strings(value: Any, name: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if not isinstance(value, list):
        raise MalformedResponse(f"Unexpected value for '{name}' in AI response.")
    items: list[str] = []
    for item in value:
        if isinstance(item, (str, int, float)) and not isinstance(item, bool):
            s = str(item).strip()
            if s:
                items.append(s)
    return items


def _score(value: Any, name: str) -> int:
    """Coerce a 0-100 score; out-of-range numbers are clamped."""
    if isinstance(value, bool) or value is None:
        raise MalformedResponse(f"Missing or invalid '{name}' in AI response.")
    if isinstance(value, str):
        value = value.strip().rstrip("%")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise MalformedResponse(f"Missing or invalid '{name}' in AI response.") from None
    if not math.isfinite(number):
        raise MalformedResponse(f"Missing or invalid '{name}' in AI response.")
    return max(0, min(100, int(round(number))))


def _check_range(value: int, name: str) -> None:
    if not 0 <= value <= 100:
        raise ValueError(f"{name} must be between 0 and 100, got {value}")


@dataclass
class ResumeAnalysis:
    summary: str
    skills: list[str]
    experience_level: str
    ats_score: int
    ats_issues: list[str] = field(default_factory=list)
    improvement_areas: list[str] = field(default_factory=list)
    suggested_roles: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        _check_range(self.ats_score, "ats_score")

    @classmethod
    def from_dict(cls, data: Any) -> ResumeAnalysis:
        if not isinstance(data, dict):
            raise MalformedResponse("Expected a JSON object for the resume analysis.")
        return cls(
            summary=_text(data.get("summary")),
            skills=_strings(data.get("skills"), "skills"),
            experience_level=_text(_pick(data, "experienceLevel", "experience_level")),
            ats_score=_score(_pick(data, "atsScore", "ats_score"), "atsScore"),
            ats_issues=_strings(_pick(data, "atsIssues", "ats_issues"), "atsIssues"),
            improvement_areas=_strings(
                _pick(data, "improvementAreas", "improvement_areas"), "improvementAreas"
            ),
            suggested_roles=_strings(
                _pick(data, "suggestedRoles", "suggested_roles"), "suggestedRoles"
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Same key layout the AI service is asked to produce."""
        return {
            "summary": self.summary,
            "skills": list(self.skills),
            "experienceLevel": self.experience_level,
            "atsScore": self.ats_score,
            "atsIssues": list(self.ats_issues),
            "improvementAreas": list(self.improvement_areas),
            "suggestedRoles": list(self.suggested_roles),
        }

    def profile_text(self) -> str:
        """Condensed projection sent along with job-match requests."""
        return (
            f"Summary: {self.summary}\n"
            f"Skills: {', '.join(self.skills)}\n"
            f"Experience Level: {self.experience_level}"
        )


@dataclass(frozen=True)
class JobListing:
    id: str
    title: str
    company: str
    location: str
    snippet: str
    url: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> JobListing:
        if not isinstance(data, dict):
            raise MalformedResponse("Expected a JSON object for each job listing.")
        title = _text(data.get("title"))
        company = _text(data.get("company"))
        location = _text(data.get("location"))
        job_id = _text(data.get("id"))
        if not job_id:
            job_id = hashlib.sha256((title + company + location).encode()).hexdigest()[:12]

        url = data.get("url")
        if url is not None:
            url = str(url).strip()
            if url.lower() in _ABSENT_URLS:
                url = None

        return cls(
            id=job_id,
            title=title,
            company=company,
            location=location,
            snippet=_text(_pick(data, "snippet", "description")),
            url=url,
        )


def parse_job_batch(payload: Any, limit: int | None = None) -> list[JobListing]:
    """Build one search batch; ids are made unique within the batch."""
    if isinstance(payload, dict):
        payload = payload.get("jobs", payload.get("results"))
    if not isinstance(payload, list):
        raise MalformedResponse("Expected a JSON array of job listings.")

    jobs: list[JobListing] = []
    seen: set[str] = set()
    for raw in payload:
        job = JobListing.from_dict(raw)
        if not job.title:
            continue
        job_id, n = job.id, 2
        while job_id in seen:
            job_id = f"{job.id}-{n}"
            n += 1
        seen.add(job_id)
        if job_id != job.id:
            job = JobListing(job_id, job.title, job.company, job.location, job.snippet, job.url)
        jobs.append(job)
        if limit is not None and len(jobs) >= limit:
            break
    return jobs


@dataclass
class JobMatchAnalysis:
    job_id: str
    match_score: int
    missing_skills: list[str]
    strengths: list[str]
    reasoning: str
    cover_letter: str
    cold_email: str

    def __post_init__(self) -> None:
        _check_range(self.match_score, "match_score")

    @classmethod
    def from_dict(cls, data: Any, job_id: str) -> JobMatchAnalysis:
        if not isinstance(data, dict):
            raise MalformedResponse("Expected a JSON object for the job match analysis.")
        return cls(
            job_id=job_id,
            match_score=_score(_pick(data, "matchScore", "match_score"), "matchScore"),
            missing_skills=_strings(_pick(data, "missingSkills", "missing_skills"), "missingSkills"),
            strengths=_strings(data.get("strengths"), "strengths"),
            reasoning=_text(data.get("reasoning")),
            cover_letter=_text(_pick(data, "coverLetter", "cover_letter")),
            cold_email=_text(_pick(data, "coldEmail", "cold_email")),
        )


@dataclass
class SearchFilters:
    employment_type: str | None = None
    experience_level: str | None = None

    def describe(self) -> list[str]:
        parts: list[str] = []
        if self.employment_type:
            parts.append(f"Type: {self.employment_type}")
        if self.experience_level:
            parts.append(f"Experience: {self.experience_level}")
        return parts


@dataclass
class ResumeFile:
    data: bytes
    mime_type: str
    name: str
