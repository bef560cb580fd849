"""Session state and the transitions the UI can trigger.

One ``Session`` lives for one browser session. Every intent that calls the
AI gateway takes a ticket for its operation category; the result is only
committed while that ticket is still the newest of its kind, so answers
to abandoned requests never overwrite fresher state. Commits touch
individual fields under a lock.
"""
from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from jobhunt.config import ACCEPTED_MIME_TYPES
from jobhunt.errors import GatewayError
from jobhunt.log import get_logger
from jobhunt.models import (
    JobListing,
    JobMatchAnalysis,
    ResumeAnalysis,
    ResumeFile,
    SearchFilters,
)

log = get_logger(__name__)

UNSUPPORTED_FILE = "Please upload a PDF or Image file."


class View(str, Enum):
    UPLOAD = "upload"
    DASHBOARD = "dashboard"
    JOB_DETAILS = "job_details"


class Operation(str, Enum):
    UPLOAD = "upload"
    ENRICH = "enrich"
    SEARCH = "search"
    MATCH = "match"
    NOTE = "note"


@dataclass(frozen=True)
class _Ticket:
    operation: Operation
    number: int
    batch: int
    key: str | None = None


class Session:
    def __init__(self, gateway: Any) -> None:
        self.gateway = gateway
        self.view: View = View.UPLOAD
        self.resume_file: ResumeFile | None = None
        self.analysis: ResumeAnalysis | None = None
        self.jobs: list[JobListing] = []
        self.matches: dict[str, JobMatchAnalysis] = {}
        self.connection_notes: dict[str, str] = {}
        self.selected_job_id: str | None = None
        self.error: str | None = None

        self._selected_job: JobListing | None = None
        self._lock = threading.RLock()
        self._numbers = itertools.count(1)
        self._latest: dict[tuple[Operation, str | None], int] = {}
        self._active: dict[Operation, set[int]] = {op: set() for op in Operation}
        self._batch = 0

    # ── Read side ────────────────────────────────────────────────────────

    def in_flight(self, operation: Operation) -> bool:
        with self._lock:
            return bool(self._active[operation])

    @property
    def is_loading(self) -> bool:
        with self._lock:
            return any(self._active.values())

    @property
    def selected_job(self) -> JobListing | None:
        return self._selected_job

    @property
    def selected_match(self) -> JobMatchAnalysis | None:
        if self.selected_job_id is None:
            return None
        return self.matches.get(self.selected_job_id)

    # ── Ticket bookkeeping ───────────────────────────────────────────────

    def _begin(self, operation: Operation, key: str | None = None) -> _Ticket:
        with self._lock:
            ticket = _Ticket(operation, next(self._numbers), self._batch, key)
            self._latest[(operation, key)] = ticket.number
            self._active[operation].add(ticket.number)
        log.debug("Started %s #%d", operation.value, ticket.number)
        return ticket

    def _is_current(self, ticket: _Ticket) -> bool:
        if self._latest.get((ticket.operation, ticket.key)) != ticket.number:
            return False
        # Job ids are only unique within one search batch.
        if ticket.operation in (Operation.MATCH, Operation.NOTE) and ticket.batch != self._batch:
            return False
        return True

    def _run(
        self,
        ticket: _Ticket,
        call: Callable[[], Any],
        commit: Callable[[Any], None],
        relevant: Callable[[], bool] | None = None,
    ) -> bool:
        try:
            try:
                result = call()
            except GatewayError as exc:
                with self._lock:
                    if self._is_current(ticket):
                        self.error = exc.message
                log.warning("%s failed: %s", ticket.operation.value, exc.message)
                return False

            with self._lock:
                if not self._is_current(ticket) or (relevant and not relevant()):
                    log.info("Discarding stale %s result #%d", ticket.operation.value, ticket.number)
                    return False
                commit(result)
            return True
        finally:
            with self._lock:
                self._active[ticket.operation].discard(ticket.number)

    # ── Intents ──────────────────────────────────────────────────────────

    def dismiss_error(self) -> None:
        with self._lock:
            self.error = None

    def navigate(self, view: View) -> bool:
        """Pure view switch; refused when *view* has nothing to show."""
        with self._lock:
            if view is View.DASHBOARD and self.analysis is None:
                return False
            if view is View.JOB_DETAILS and self.selected_match is None:
                return False
            # A match still in flight would pull the user back to its job.
            self._latest.pop((Operation.MATCH, None), None)
            self.view = view
        return True

    def upload_resume(self, data: bytes, mime_type: str, name: str) -> bool:
        if mime_type not in ACCEPTED_MIME_TYPES:
            log.warning("Rejected upload %s (%s)", name, mime_type)
            with self._lock:
                self.error = UNSUPPORTED_FILE
            return False

        ticket = self._begin(Operation.UPLOAD)

        def commit(analysis: ResumeAnalysis) -> None:
            self.resume_file = ResumeFile(data=data, mime_type=mime_type, name=name)
            self.analysis = analysis
            self.view = View.DASHBOARD
            log.info("Resume %s analysed — atsScore=%d", name, analysis.ats_score)

        return self._run(ticket, lambda: self.gateway.analyze_resume(data, mime_type), commit)

    def sync_profile(self, profile_input: str) -> bool:
        base = self.analysis
        if base is None or not profile_input.strip():
            return False

        ticket = self._begin(Operation.ENRICH)

        def commit(analysis: ResumeAnalysis) -> None:
            self.analysis = analysis

        return self._run(
            ticket,
            lambda: self.gateway.enrich_with_profile(base, profile_input),
            commit,
            relevant=lambda: self.analysis is base,
        )

    def search_jobs(
        self,
        query: str,
        location: str = "",
        filters: SearchFilters | None = None,
    ) -> bool:
        query = query.strip()
        if not query:
            return False

        ticket = self._begin(Operation.SEARCH)

        def commit(jobs: list[JobListing]) -> None:
            self.jobs = list(jobs)
            self._batch += 1
            log.info("Job batch %d: %d listings for %r", self._batch, len(self.jobs), query)

        return self._run(
            ticket,
            lambda: self.gateway.find_jobs(query, location.strip(), filters),
            commit,
        )

    def select_job(self, job: JobListing) -> bool:
        with self._lock:
            if job.id in self.matches:
                self._selected_job = job
                self.selected_job_id = job.id
                self.view = View.JOB_DETAILS
                return True
            analysis = self.analysis

        if analysis is None:
            log.warning("Cannot analyse %s without a resume analysis", job.id)
            return False

        ticket = self._begin(Operation.MATCH)

        def commit(match: JobMatchAnalysis) -> None:
            self.matches[job.id] = match
            self._selected_job = job
            self.selected_job_id = job.id
            self.view = View.JOB_DETAILS

        return self._run(
            ticket,
            lambda: self.gateway.analyze_job_match(analysis.profile_text(), job),
            commit,
        )

    def update_cover_letter(self, job_id: str, text: str) -> bool:
        with self._lock:
            match = self.matches.get(job_id)
            if match is None:
                return False
            match.cover_letter = text
        return True

    def generate_connection_note(self, job_id: str) -> str | None:
        with self._lock:
            match = self.matches.get(job_id)
            job = self._find_job(job_id)
        if match is None or job is None:
            return None

        ticket = self._begin(Operation.NOTE, key=job_id)

        def commit(note: str) -> None:
            self.connection_notes[job_id] = note

        self._run(
            ticket,
            lambda: self.gateway.generate_connection_note(job, match.strengths),
            commit,
        )
        return self.connection_notes.get(job_id)

    def _find_job(self, job_id: str) -> JobListing | None:
        if self._selected_job is not None and self._selected_job.id == job_id:
            return self._selected_job
        return next((j for j in self.jobs if j.id == job_id), None)
