"""ATS analysis of an uploaded résumé and LinkedIn-based enrichment."""
from __future__ import annotations

import json
from dataclasses import replace

from jobhunt.documents import document_parts
from jobhunt.errors import classified
from jobhunt.grounding import SearchGrounding, ground_prompt
from jobhunt.llm import LLMClient, parse_json
from jobhunt.log import get_logger
from jobhunt.models import ResumeAnalysis

log = get_logger(__name__)

MAX_ENRICH_BOOST = 10

_ANALYZE_PROMPT = """\
You are an expert Resume Reviewer and ATS (Applicant Tracking System) specialist.
Analyze the attached resume document.

Return ONLY valid JSON matching this schema:
{
  "summary": "Professional summary of the candidate (max 3 sentences)",
  "skills": ["List", "of", "extracted", "skills"],
  "experienceLevel": "Entry/Mid/Senior/Executive",
  "atsScore": 0-100 (integer representing ATS friendliness),
  "atsIssues": ["Specific formatting or content issues that might hurt ATS parsing"],
  "improvementAreas": ["3-5 specific suggestions to improve the resume"],
  "suggestedRoles": ["3 job titles this candidate is best suited for"]
}
"""

_PROFILE_LOOKUP_PROMPT = """\
Using the web search results below, extract the full professional profile
published at {url}: headline, about section, experience (roles, companies,
dates), education and skills. Return plain text only.
"""

_MERGE_PROMPT = """\
I have an existing resume analysis and new LinkedIn profile data.
Merge them into a more comprehensive profile analysis.

EXISTING ANALYSIS:
{analysis}

LINKEDIN DATA:
{linkedin}

Task:
1. Update "summary" to be more comprehensive if LinkedIn provides more context.
2. Add any "skills" found on LinkedIn that are missing from the resume.
3. Re-evaluate "atsScore": if the LinkedIn data fills gaps, raise it slightly
   (at most +10). The resume file itself is what an ATS parses and it has not
   changed, so never lower the score and do not raise it much.
4. Update "suggestedRoles" if the LinkedIn profile suggests a different career trajectory.
5. Keep the JSON structure exactly the same.

Return ONLY valid JSON with the keys summary, skills, experienceLevel, atsScore,
atsIssues, improvementAreas, suggestedRoles.
"""


def is_profile_url(profile_input: str) -> bool:
    return profile_input.strip().lower().startswith("http")


@classified("analyze resume")
def analyze_resume(llm: LLMClient, data: bytes, mime_type: str) -> ResumeAnalysis:
    """Single attempt; an absent or unparsable reply is a MalformedResponse."""
    parts = document_parts(data, mime_type)
    log.info("Analyzing resume (%s, %d bytes) with %s", mime_type, len(data), llm.model)
    text = llm.generate(_ANALYZE_PROMPT, document=parts, json_mode=True)
    analysis = ResumeAnalysis.from_dict(parse_json(text))
    log.info(
        "Resume analysis complete — atsScore=%d, skills=%d",
        analysis.ats_score, len(analysis.skills),
    )
    return analysis


def lookup_profile(llm: LLMClient, search: SearchGrounding, url: str) -> str:
    """Profile text for *url* from a search-grounded request ("" if none)."""
    results = search.web_results(url)
    prompt = ground_prompt(_PROFILE_LOOKUP_PROMPT.format(url=url), results)
    return llm.generate(prompt)


def reconcile(current: ResumeAnalysis, proposed: ResumeAnalysis) -> ResumeAnalysis:
    """Hold a merged analysis to the enrichment rules.

    The ATS score may only move up, by at most MAX_ENRICH_BOOST, and every
    skill of *current* survives the merge.
    """
    ceiling = min(100, current.ats_score + MAX_ENRICH_BOOST)
    score = min(max(proposed.ats_score, current.ats_score), ceiling)
    if score != proposed.ats_score:
        log.info("Enriched atsScore %d adjusted to %d", proposed.ats_score, score)

    known = {s.casefold() for s in current.skills}
    skills = list(current.skills)
    for skill in proposed.skills:
        if skill.casefold() not in known:
            known.add(skill.casefold())
            skills.append(skill)

    return replace(proposed, ats_score=score, skills=skills)


@classified("enrich profile")
def enrich_with_profile(
    llm: LLMClient,
    search: SearchGrounding,
    current: ResumeAnalysis,
    profile_input: str,
) -> ResumeAnalysis:
    """Merge LinkedIn data (a profile URL or pasted text) into *current*."""
    profile_input = profile_input.strip()
    if is_profile_url(profile_input):
        try:
            linkedin = lookup_profile(llm, search, profile_input) or profile_input
        except Exception as exc:
            log.warning("LinkedIn search failed, using URL as context: %s", exc)
            linkedin = f"Profile URL: {profile_input}"
    else:
        linkedin = profile_input

    prompt = _MERGE_PROMPT.format(
        analysis=json.dumps(current.to_dict(), ensure_ascii=False),
        linkedin=linkedin,
    )
    text = llm.generate(prompt, json_mode=True)
    if not text:
        log.info("Enrichment returned no text — keeping current analysis")
        return current

    merged = reconcile(current, ResumeAnalysis.from_dict(parse_json(text)))
    log.info(
        "Profile enriched — atsScore %d → %d, skills %d → %d",
        current.ats_score, merged.ats_score, len(current.skills), len(merged.skills),
    )
    return merged
