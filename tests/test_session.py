from dataclasses import replace

import pytest

from jobhunt.errors import OperationFailed, PermissionDenied
from jobhunt.job_search import fallback_jobs
from jobhunt.models import SearchFilters
from jobhunt.session import UNSUPPORTED_FILE, Operation, Session, View
from tests.conftest import make_match

PDF = b"%PDF-1.4 resume"


class FakeGateway:
    """Records calls; ``hooks[name]`` runs inside the call, before it returns."""

    def __init__(self, analysis):
        self.analysis = analysis
        self.calls: dict[str, int] = {}
        self.fail: dict[str, Exception] = {}
        self.hooks: dict[str, object] = {}
        self.jobs = fallback_jobs("Backend Engineer")

    def _enter(self, name):
        self.calls[name] = self.calls.get(name, 0) + 1
        hook = self.hooks.pop(name, None)
        if hook:
            hook()
        if name in self.fail:
            raise self.fail[name]

    def analyze_resume(self, data, mime_type):
        self._enter("analyze_resume")
        return self.analysis

    def enrich_with_profile(self, current, profile_input):
        self._enter("enrich_with_profile")
        return replace(current, ats_score=current.ats_score + 5, skills=current.skills + ["Kafka"])

    def find_jobs(self, query, location="", filters=None):
        self._enter("find_jobs")
        self.last_search = (query, location, filters)
        return list(self.jobs)

    def analyze_job_match(self, profile_text, job):
        self._enter("analyze_job_match")
        self.last_profile_text = profile_text
        return make_match(job.id)

    def generate_connection_note(self, job, top_skills):
        self._enter("generate_connection_note")
        return f"Hi, {job.title} — {', '.join(top_skills[:2])}"


@pytest.fixture
def gateway(analysis):
    return FakeGateway(analysis)


@pytest.fixture
def session(gateway):
    return Session(gateway)


@pytest.fixture
def dashboard(session):
    assert session.upload_resume(PDF, "application/pdf", "cv.pdf")
    return session


class TestUpload:
    def test_initial_state(self, session):
        assert session.view is View.UPLOAD
        assert session.analysis is None
        assert session.error is None
        assert not session.is_loading

    def test_success_moves_to_dashboard(self, session, gateway):
        gateway.analysis = replace(gateway.analysis, ats_score=82, skills=["Go", "SQL"],
                                   suggested_roles=["Backend Engineer"])
        assert session.upload_resume(PDF, "application/pdf", "cv.pdf")
        assert session.view is View.DASHBOARD
        assert f"{session.analysis.ats_score}%" == "82%"
        assert session.resume_file.name == "cv.pdf"
        assert session.resume_file.mime_type == "application/pdf"
        assert session.resume_file.data == PDF

    def test_failure_stays_on_upload(self, session, gateway):
        gateway.fail["analyze_resume"] = OperationFailed("Failed to analyze resume. Please try again.")
        assert not session.upload_resume(PDF, "application/pdf", "cv.pdf")
        assert session.view is View.UPLOAD
        assert session.error == "Failed to analyze resume. Please try again."
        assert session.analysis is None
        assert not session.is_loading

    def test_unaccepted_type_is_rejected_without_a_call(self, session, gateway):
        assert not session.upload_resume(b"text", "text/plain", "cv.txt")
        assert session.error == UNSUPPORTED_FILE
        assert gateway.calls == {}

    def test_in_flight_indicator(self, session, gateway):
        seen = {}

        def probe():
            seen["upload"] = session.in_flight(Operation.UPLOAD)
            seen["search"] = session.in_flight(Operation.SEARCH)
            seen["loading"] = session.is_loading

        gateway.hooks["analyze_resume"] = probe
        session.upload_resume(PDF, "image/png", "cv.png")
        assert seen == {"upload": True, "search": False, "loading": True}
        assert not session.in_flight(Operation.UPLOAD)

    def test_older_upload_result_is_discarded(self, session, gateway, analysis):
        newer = replace(analysis, summary="Second resume")

        def second_upload():
            gateway.analysis = newer
            session.upload_resume(PDF, "application/pdf", "second.pdf")
            gateway.analysis = replace(analysis, summary="First resume")

        gateway.hooks["analyze_resume"] = second_upload
        assert not session.upload_resume(PDF, "application/pdf", "first.pdf")
        assert session.analysis.summary == "Second resume"
        assert session.resume_file.name == "second.pdf"


class TestEnrichAndSearch:
    def test_sync_profile_replaces_analysis(self, dashboard):
        before = dashboard.analysis
        assert dashboard.sync_profile("https://linkedin.com/in/jane")
        assert dashboard.analysis.ats_score == before.ats_score + 5
        assert "Kafka" in dashboard.analysis.skills
        assert dashboard.view is View.DASHBOARD

    def test_sync_profile_requires_analysis(self, session, gateway):
        assert not session.sync_profile("bio")
        assert "enrich_with_profile" not in gateway.calls

    def test_sync_failure_keeps_analysis_and_sets_error(self, dashboard, gateway):
        before = dashboard.analysis
        gateway.fail["enrich_with_profile"] = PermissionDenied("API Permission Denied.")
        assert not dashboard.sync_profile("bio")
        assert dashboard.analysis is before
        assert dashboard.error == "API Permission Denied."
        assert dashboard.view is View.DASHBOARD

    def test_enrichment_of_replaced_resume_is_dropped(self, dashboard, gateway, analysis):
        def upload_another():
            gateway.analysis = replace(analysis, summary="Another resume")
            dashboard.upload_resume(PDF, "application/pdf", "new.pdf")

        gateway.hooks["enrich_with_profile"] = upload_another
        assert not dashboard.sync_profile("bio")
        assert dashboard.analysis.summary == "Another resume"
        assert "Kafka" not in dashboard.analysis.skills

    def test_search_replaces_batch(self, dashboard, gateway):
        filters = SearchFilters("Full-time", "Mid Level")
        assert dashboard.search_jobs("  Backend Engineer ", " Berlin ", filters)
        assert [j.id for j in dashboard.jobs] == ["mock-1", "mock-2", "mock-3"]
        assert gateway.last_search == ("Backend Engineer", "Berlin", filters)

        gateway.jobs = gateway.jobs[:1]
        dashboard.search_jobs("Backend Engineer")
        assert [j.id for j in dashboard.jobs] == ["mock-1"]

    def test_search_does_not_clear_an_existing_error(self, dashboard, gateway):
        gateway.fail["enrich_with_profile"] = PermissionDenied("enrich failed")
        dashboard.sync_profile("bio")
        assert dashboard.search_jobs("Backend Engineer")
        assert dashboard.error == "enrich failed"

    def test_fallback_search_shows_no_error(self, dashboard):
        assert dashboard.search_jobs("Backend Engineer", "")
        assert len(dashboard.jobs) == 3
        assert dashboard.error is None

    def test_blank_query_is_ignored(self, dashboard, gateway):
        assert not dashboard.search_jobs("   ")
        assert "find_jobs" not in gateway.calls


class TestSelectJob:
    def test_first_selection_analyzes_and_caches(self, dashboard, gateway):
        dashboard.search_jobs("Backend Engineer")
        job = dashboard.jobs[0]
        assert job.id == "mock-1"
        assert dashboard.select_job(job)
        assert gateway.calls["analyze_job_match"] == 1
        assert "mock-1" in dashboard.matches
        assert dashboard.view is View.JOB_DETAILS
        assert dashboard.selected_job is job
        assert dashboard.selected_match.job_id == "mock-1"
        assert gateway.last_profile_text == dashboard.analysis.profile_text()

    def test_second_selection_uses_cache(self, dashboard, gateway):
        dashboard.search_jobs("Backend Engineer")
        job = dashboard.jobs[1]
        dashboard.select_job(job)
        first = dashboard.selected_match
        dashboard.navigate(View.DASHBOARD)
        assert dashboard.select_job(job)
        assert gateway.calls["analyze_job_match"] == 1
        assert dashboard.selected_match is first
        assert dashboard.selected_match.job_id == job.id

    def test_selection_without_analysis_does_nothing(self, session, gateway, job):
        assert not session.select_job(job)
        assert session.view is View.UPLOAD
        assert gateway.calls == {}

    def test_failed_match_keeps_dashboard(self, dashboard, gateway, job):
        gateway.fail["analyze_job_match"] = OperationFailed("Failed to analyze job match.")
        assert not dashboard.select_job(job)
        assert dashboard.view is View.DASHBOARD
        assert dashboard.error == "Failed to analyze job match."
        assert dashboard.matches == {}
        assert not dashboard.navigate(View.JOB_DETAILS)

    def test_match_for_a_replaced_batch_is_discarded(self, dashboard, gateway):
        dashboard.search_jobs("Backend Engineer")
        job = dashboard.jobs[0]
        gateway.hooks["analyze_job_match"] = lambda: dashboard.search_jobs("Designer")
        assert not dashboard.select_job(job)
        assert dashboard.matches == {}
        assert dashboard.view is View.DASHBOARD

    def test_navigating_away_abandons_a_pending_match(self, dashboard, gateway, job):
        gateway.hooks["analyze_job_match"] = lambda: dashboard.navigate(View.UPLOAD)
        assert not dashboard.select_job(job)
        assert dashboard.view is View.UPLOAD
        assert job.id not in dashboard.matches

    def test_cache_survives_enrichment(self, dashboard, gateway, job):
        dashboard.select_job(job)
        dashboard.navigate(View.DASHBOARD)
        dashboard.sync_profile("bio")
        dashboard.select_job(job)
        assert gateway.calls["analyze_job_match"] == 1


class TestNavigation:
    def test_job_details_unreachable_without_cached_selection(self, session, dashboard):
        assert not session.navigate(View.JOB_DETAILS)
        assert session.view is View.DASHBOARD

    def test_dashboard_requires_analysis(self, session):
        assert not session.navigate(View.DASHBOARD)
        assert session.view is View.UPLOAD

    def test_round_trip(self, dashboard, job):
        dashboard.select_job(job)
        assert dashboard.navigate(View.DASHBOARD)
        assert dashboard.view is View.DASHBOARD
        assert dashboard.navigate(View.JOB_DETAILS)
        assert dashboard.view is View.JOB_DETAILS
        assert dashboard.navigate(View.UPLOAD)

    def test_errors_never_change_view(self, dashboard, gateway, job):
        dashboard.select_job(job)
        gateway.fail["enrich_with_profile"] = OperationFailed("nope")
        dashboard.sync_profile("bio")
        assert dashboard.view is View.JOB_DETAILS

    def test_dismiss_error(self, session):
        session.upload_resume(b"x", "text/plain", "x.txt")
        assert session.error
        session.dismiss_error()
        assert session.error is None

    def test_new_error_supersedes_old(self, dashboard, gateway):
        gateway.fail["enrich_with_profile"] = OperationFailed("first")
        dashboard.sync_profile("bio")
        gateway.fail["enrich_with_profile"] = OperationFailed("second")
        dashboard.sync_profile("bio")
        assert dashboard.error == "second"


class TestApplicationKit:
    def test_cover_letter_edit_does_not_reanalyze(self, dashboard, gateway, job):
        dashboard.select_job(job)
        assert dashboard.update_cover_letter(job.id, "My own words")
        assert dashboard.selected_match.cover_letter == "My own words"
        assert gateway.calls["analyze_job_match"] == 1

    def test_cover_letter_edit_needs_a_match(self, dashboard):
        assert not dashboard.update_cover_letter("unknown", "text")

    def test_connection_note_uses_strengths(self, dashboard, job):
        dashboard.select_job(job)
        note = dashboard.generate_connection_note(job.id)
        assert note == "Hi, Backend Engineer — Go, SQL"
        assert dashboard.connection_notes[job.id] == note

    def test_connection_note_needs_a_match(self, dashboard, gateway):
        assert dashboard.generate_connection_note("job-unknown") is None
        assert "generate_connection_note" not in gateway.calls


def test_select_job_outside_current_batch(dashboard, job):
    assert dashboard.select_job(job)
    assert dashboard.selected_job is job
