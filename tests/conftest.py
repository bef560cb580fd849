"""Shared fakes: no test talks to the network."""
from __future__ import annotations

from typing import Any

import pytest

from jobhunt.models import JobListing, JobMatchAnalysis, ResumeAnalysis


class FakeLLM:
    """Stands in for LLMClient; replies are consumed in order.

    A reply that is an exception instance is raised instead of returned.
    """

    model = "fake-model"

    def __init__(self, *replies: Any) -> None:
        self.replies = list(replies)
        self.calls: list[dict[str, Any]] = []

    def generate(self, prompt, *, document=None, json_mode=False, max_tokens=None):
        self.calls.append(
            {"prompt": prompt, "document": document, "json_mode": json_mode,
             "max_tokens": max_tokens}
        )
        if not self.replies:
            raise AssertionError("FakeLLM ran out of replies")
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


class FakeSearch:
    def __init__(self, jobs: Any = "", web: Any = "") -> None:
        self.jobs = jobs
        self.web = web
        self.queries: list[str] = []

    def _answer(self, value: Any) -> str:
        if isinstance(value, BaseException):
            raise value
        return value

    def job_results(self, query: str, limit: int) -> str:
        self.queries.append(query)
        return self._answer(self.jobs)

    def web_results(self, query: str, limit: int = 5) -> str:
        self.queries.append(query)
        return self._answer(self.web)


class ServiceError(Exception):
    """Shape of an SDK error: a message plus an optional HTTP status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@pytest.fixture
def analysis() -> ResumeAnalysis:
    return ResumeAnalysis(
        summary="Backend engineer with five years of API work.",
        skills=["Go", "SQL"],
        experience_level="Mid",
        ats_score=70,
        ats_issues=["Tables in the header"],
        improvement_areas=["Quantify impact", "Add a skills section", "Trim to one page"],
        suggested_roles=["Backend Engineer", "Platform Engineer", "SRE"],
    )


@pytest.fixture
def job() -> JobListing:
    return JobListing(
        id="job-42",
        title="Backend Engineer",
        company="Acme",
        location="Berlin",
        snippet="Go services on Postgres.",
        url="https://acme.example/jobs/42",
    )


def make_match(job_id: str, score: int = 77) -> JobMatchAnalysis:
    return JobMatchAnalysis(
        job_id=job_id,
        match_score=score,
        missing_skills=["Kubernetes"],
        strengths=["Go", "SQL", "APIs"],
        reasoning="Solid overlap on the core stack.",
        cover_letter="Dear Hiring Team, ...",
        cold_email="Subject: Backend Engineer role\n\nHi ...",
    )
