"""Job search with search grounding, falling back to a sample batch.

``search_jobs`` raises on any failure; ``find_jobs`` never does and swaps
in ``fallback_jobs`` so a search can always show something.
"""
from __future__ import annotations

from jobhunt.config import MAX_JOB_RESULTS
from jobhunt.errors import EmptyResponse
from jobhunt.grounding import SearchGrounding, ground_prompt
from jobhunt.llm import LLMClient, parse_json
from jobhunt.log import get_logger
from jobhunt.models import JobListing, SearchFilters, parse_job_batch

log = get_logger(__name__)

_SEARCH_PROMPT = """\
Find {limit} active and recent job listings for "{query}"{where}.
{filters}
Focus on real, currently open positions.
For each job, extract: Title, Company, Location, a brief Snippet/Description,
and the Apply URL if available.
"""

_FORMAT_PROMPT = """\
Based on the following text which contains job search results, extract the
jobs as JSON.

Source Text:
{grounded}

Return ONLY a JSON object of this shape:
{{
  "jobs": [
    {{
      "id": "a unique random string id",
      "title": "Job Title",
      "company": "Company Name",
      "location": "Location",
      "snippet": "Brief description",
      "url": "Apply URL if found, else null"
    }}
  ]
}}
"""


def fallback_jobs(query: str, location: str = "") -> list[JobListing]:
    """Sample listings shown when live search is unavailable."""
    log.info("Generating fallback sample jobs for %r", query)
    return [
        JobListing(
            id="mock-1",
            title=f"{query} (Mock)",
            company="Demo Company A",
            location=location or "Remote",
            snippet=(
                "This is a sample listing shown because real-time search is unavailable. "
                "Please check your search API key for Search Grounding."
            ),
        ),
        JobListing(
            id="mock-2",
            title=f"Senior {query}",
            company="Tech Corp B",
            location="New York, NY",
            snippet="Great opportunity for an experienced professional. (Sample Data)",
        ),
        JobListing(
            id="mock-3",
            title=f"Lead {query}",
            company="Future Systems",
            location="San Francisco, CA",
            snippet="Join our fast growing team working on cutting edge tech. (Sample Data)",
        ),
    ]


def search_jobs(
    llm: LLMClient,
    search: SearchGrounding,
    query: str,
    location: str = "",
    filters: SearchFilters | None = None,
    limit: int = MAX_JOB_RESULTS,
) -> list[JobListing]:
    """Grounded search followed by a formatting pass into strict JSON."""
    filters = filters or SearchFilters()
    filter_text = filters.describe()
    search_query = " ".join(p for p in (query, location, filters.employment_type) if p)

    results = search.job_results(search_query, limit)
    prompt = _SEARCH_PROMPT.format(
        limit=limit,
        query=query,
        where=f" in {location}" if location else "",
        filters=f"Filters: {', '.join(filter_text)}" if filter_text else "",
    )
    grounded = llm.generate(ground_prompt(prompt, results))
    if not grounded:
        raise EmptyResponse("Search grounding returned no text.")

    formatted = llm.generate(_FORMAT_PROMPT.format(grounded=grounded), json_mode=True)
    if not formatted:
        raise EmptyResponse("Job formatting returned no text.")

    jobs = parse_job_batch(parse_json(formatted), limit=limit)
    log.info("Job search %r returned %d listings", query, len(jobs))
    return jobs


def find_jobs(
    llm: LLMClient,
    search: SearchGrounding,
    query: str,
    location: str = "",
    filters: SearchFilters | None = None,
) -> list[JobListing]:
    try:
        return search_jobs(llm, search, query, location, filters)
    except Exception as exc:
        log.warning("Search grounding failed, falling back to sample data: %s", exc)
        return fallback_jobs(query, location)
