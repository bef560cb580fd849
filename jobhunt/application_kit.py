"""Job-match analysis and application material (cover letter, email, note)."""
from __future__ import annotations

from urllib.parse import quote

from jobhunt.errors import EmptyResponse, classified
from jobhunt.llm import LLMClient, parse_json
from jobhunt.log import get_logger
from jobhunt.models import JobListing, JobMatchAnalysis

log = get_logger(__name__)

_MATCH_PROMPT = """\
I need to apply for the following job. Compare my resume profile with the job description.

MY PROFILE:
{profile}

JOB DETAILS:
Title: {title}
Company: {company}
Snippet: {snippet}

Return ONLY valid JSON:
{{
  "matchScore": 0-100 (integer),
  "missingSkills": ["List", "of", "missing", "skills"],
  "strengths": ["List", "of", "matching", "skills"],
  "reasoning": "One paragraph explaining the score",
  "coverLetter": "A full professional cover letter tailored to this job (plain text, no markdown)",
  "coldEmail": "A short, punchy cold email to a recruiter about this role (subject line included)"
}}
"""

_NOTE_PROMPT = (
    "Write a short (under 300 characters) LinkedIn connection request note to a "
    "recruiter at {company} regarding the {title} role. Mention my skills in "
    "{skills}. Return only the text."
)


@classified("analyze job match", grounded=True)
def analyze_job_match(llm: LLMClient, profile_text: str, job: JobListing) -> JobMatchAnalysis:
    prompt = _MATCH_PROMPT.format(
        profile=profile_text,
        title=job.title,
        company=job.company,
        snippet=job.snippet,
    )
    text = llm.generate(prompt, json_mode=True)
    if not text:
        raise EmptyResponse("Failed to analyze job match: no analysis was generated.")

    match = JobMatchAnalysis.from_dict(parse_json(text), job_id=job.id)
    log.info("Match analysis for %s @ %s — %d%%", job.title, job.company, match.match_score)
    return match


def request_connection_note(llm: LLMClient, job: JobListing, top_skills: list[str]) -> str:
    prompt = _NOTE_PROMPT.format(
        company=job.company,
        title=job.title,
        skills=", ".join(top_skills[:2]) or "my field",
    )
    text = llm.generate(prompt, max_tokens=200)
    if not text:
        raise EmptyResponse("No connection note generated.")
    return text


def fallback_note(job: JobListing) -> str:
    at = f" at {job.company}" if job.company else ""
    return f"Hi, I noticed you're hiring for the {job.title} role{at} and would love to connect."


def generate_connection_note(llm: LLMClient, job: JobListing, top_skills: list[str]) -> str:
    try:
        note = request_connection_note(llm, job, top_skills)
        log.info("Connection note generated for %s @ %s", job.title, job.company)
        return note
    except Exception as exc:
        log.warning("Connection note generation failed (%s), using template", exc)
        return fallback_note(job)


def application_mailto(job: JobListing, cover_letter: str) -> str:
    """mailto: link that opens a draft with the cover letter as the body."""
    subject = quote(f"Application for {job.title} - {job.company}")
    return f"mailto:?subject={subject}&body={quote(cover_letter)}"
