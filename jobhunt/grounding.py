"""Search grounding: live web results (via SerpAPI) folded into a prompt."""
from __future__ import annotations

from typing import Any

import requests

from jobhunt.config import get_search_key
from jobhunt.errors import (
    RATE_LIMITED,
    SEARCH_GROUNDING_DISABLED,
    EmptyResponse,
    PermissionDenied,
    RateLimited,
)
from jobhunt.log import get_logger

log = get_logger(__name__)


def _best_apply_link(hit: dict) -> str:
    for opts_key in ("apply_options", "related_links"):
        opts = hit.get(opts_key, [])
        if opts and isinstance(opts, list):
            for opt in opts:
                link = opt.get("link", "")
                if link:
                    return link
    return hit.get("share_link", "") or hit.get("link", "")


def ground_prompt(prompt: str, results: str) -> str:
    return f"{prompt.rstrip()}\n\nWEB SEARCH RESULTS:\n{results}\n"


class SearchGrounding:
    ENDPOINT = "https://serpapi.com/search"

    def __init__(self, api_key: str, timeout: float = 20.0) -> None:
        self.api_key = api_key
        self.timeout = timeout

    @classmethod
    def from_env(cls, api_key: str | None = None) -> SearchGrounding:
        return cls(api_key or get_search_key())

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def _fetch(self, params: dict[str, Any]) -> dict[str, Any]:
        if not self.api_key:
            raise PermissionDenied(SEARCH_GROUNDING_DISABLED)
        r = requests.get(
            self.ENDPOINT,
            params={**params, "api_key": self.api_key},
            timeout=self.timeout,
        )
        if r.status_code in (401, 403):
            log.warning("SerpAPI %d — key rejected", r.status_code)
            raise PermissionDenied(SEARCH_GROUNDING_DISABLED)
        if r.status_code == 429:
            raise RateLimited(RATE_LIMITED)
        r.raise_for_status()
        data = r.json()
        if data.get("error"):
            log.warning("SerpAPI error for %r: %s", params.get("q"), data["error"])
        return data

    def job_results(self, query: str, limit: int) -> str:
        """Numbered Google Jobs results for *query*, one block per listing."""
        data = self._fetch({"engine": "google_jobs", "q": query})
        blocks: list[str] = []
        for i, hit in enumerate(data.get("jobs_results", [])[:limit], 1):
            description = (hit.get("description") or "")[:600]
            blocks.append(
                f"{i}. {hit.get('title', '')}\n"
                f"   Company: {hit.get('company_name', '')}\n"
                f"   Location: {hit.get('location', '')}\n"
                f"   Apply: {_best_apply_link(hit) or 'n/a'}\n"
                f"   {description}"
            )
        if not blocks:
            raise EmptyResponse(f"Web search returned no job listings for {query!r}.")
        log.info("SerpAPI google_jobs q=%r returned %d listings", query, len(blocks))
        return "\n".join(blocks)

    def web_results(self, query: str, limit: int = 5) -> str:
        """Numbered organic Google results (title, link, snippet)."""
        data = self._fetch({"engine": "google", "q": query, "num": limit})
        blocks: list[str] = []
        for i, hit in enumerate(data.get("organic_results", [])[:limit], 1):
            blocks.append(
                f"{i}. {hit.get('title', '')}\n"
                f"   {hit.get('link', '')}\n"
                f"   {hit.get('snippet', '')}"
            )
        if not blocks:
            raise EmptyResponse(f"Web search returned no results for {query!r}.")
        log.info("SerpAPI google q=%r returned %d results", query, len(blocks))
        return "\n".join(blocks)
