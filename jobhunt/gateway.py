"""The AI gateway: every call the session makes to the generative-AI service."""
from __future__ import annotations

from jobhunt import application_kit, job_search, resume_analyzer
from jobhunt.grounding import SearchGrounding
from jobhunt.llm import LLMClient
from jobhunt.models import JobListing, JobMatchAnalysis, ResumeAnalysis, SearchFilters


class AIGateway:
    def __init__(self, llm: LLMClient, search: SearchGrounding) -> None:
        self.llm = llm
        self.search = search

    @classmethod
    def from_env(cls, api_key: str | None = None, search_key: str | None = None) -> AIGateway:
        return cls(LLMClient.from_env(api_key), SearchGrounding.from_env(search_key))

    def analyze_resume(self, data: bytes, mime_type: str) -> ResumeAnalysis:
        return resume_analyzer.analyze_resume(self.llm, data, mime_type)

    def enrich_with_profile(self, current: ResumeAnalysis, profile_input: str) -> ResumeAnalysis:
        return resume_analyzer.enrich_with_profile(self.llm, self.search, current, profile_input)

    def find_jobs(
        self,
        query: str,
        location: str = "",
        filters: SearchFilters | None = None,
    ) -> list[JobListing]:
        return job_search.find_jobs(self.llm, self.search, query, location, filters)

    def analyze_job_match(self, profile_text: str, job: JobListing) -> JobMatchAnalysis:
        return application_kit.analyze_job_match(self.llm, profile_text, job)

    def generate_connection_note(self, job: JobListing, top_skills: list[str]) -> str:
        return application_kit.generate_connection_note(self.llm, job, top_skills)
