"""Streamlit UI for JobHunt AI."""
from __future__ import annotations

import html
import os

import streamlit as st

from jobhunt.application_kit import application_mailto
from jobhunt.config import EDITABLE_KEYS, apply_env, load_env_file, save_env_file
from jobhunt.gateway import AIGateway
from jobhunt.log import get_logger
from jobhunt.models import JobListing, ResumeAnalysis, SearchFilters
from jobhunt.session import Operation, Session, View

log = get_logger(__name__)

# ── Constants ────────────────────────────────────────────────────────────

UPLOAD_TYPES: list[str] = ["pdf", "jpg", "jpeg", "png", "webp"]
EXPERIENCE_LEVELS: list[str] = ["Entry Level", "Mid Level", "Senior Level", "Executive"]
JOB_TYPES: list[str] = ["Full-time", "Part-time", "Contract", "Remote"]

_GLASS_CSS = """
<style>
[data-testid="stAppViewContainer"] {
    background: linear-gradient(135deg, #eef2ff 0%, #f5f3ff 45%, #f8fafc 100%);
}
[data-testid="stMetric"] {
    background: rgba(255,255,255,0.65);
    padding: 0.75rem 1rem;
    border-radius: 12px;
    border: 1px solid rgba(255,255,255,0.4);
    box-shadow: 0 4px 16px rgba(0,0,0,0.06);
}
[data-testid="stForm"],
[data-testid="stExpander"] {
    background: rgba(255,255,255,0.55);
    border-radius: 12px;
    border: 1px solid rgba(255,255,255,0.35);
}
.stButton > button[kind="primary"] {
    border-radius: 8px;
    font-weight: 600;
}
.job-snippet { color: #475569; font-size: 0.9rem; }
</style>
"""

# ── Helpers ──────────────────────────────────────────────────────────────


def _session() -> Session:
    if "session" not in st.session_state:
        st.session_state["session"] = Session(AIGateway.from_env())
    return st.session_state["session"]


def _score_color(score: int) -> str:
    if score > 75:
        return "green"
    if score > 50:
        return "orange"
    return "red"


def _bullets(items: list[str]) -> None:
    st.markdown("\n".join(f"- {item}" for item in items))


def _error_banner(session: Session) -> None:
    if not session.error:
        return
    c1, c2 = st.columns([6, 1])
    with c1:
        st.error(f"**Action Failed** — {session.error}")
    with c2:
        if st.button("Dismiss", key="dismiss_error"):
            session.dismiss_error()
            st.rerun()


# ── View: Upload ─────────────────────────────────────────────────────────


def view_upload(session: Session) -> None:
    st.title("Supercharge Your Job Search")
    st.write(
        "Upload your resume to get instant ATS feedback, find tailored jobs, "
        "and auto-generate applications."
    )

    uploaded = st.file_uploader("Resume (PDF or image)", type=UPLOAD_TYPES)
    busy = session.in_flight(Operation.UPLOAD)
    if st.button("Analyze Resume", type="primary", disabled=uploaded is None or busy,
                 use_container_width=True):
        with st.spinner("Analyzing your resume…"):
            session.upload_resume(uploaded.getvalue(), uploaded.type, uploaded.name)
        st.rerun()


# ── View: Dashboard ──────────────────────────────────────────────────────


def _analysis_panel(session: Session, analysis: ResumeAnalysis) -> None:
    c1, c2 = st.columns([1, 2])
    with c1:
        st.metric("ATS Compatibility Score", f"{analysis.ats_score}%")
        st.markdown(f":{_score_color(analysis.ats_score)}[Optimization Level]")
        st.caption(f"Experience level: {analysis.experience_level or '—'}")
    with c2:
        st.subheader("Professional Summary")
        st.write(analysis.summary or "—")
        if analysis.skills:
            st.markdown("**Skills:** " + ", ".join(analysis.skills))

    c1, c2 = st.columns(2)
    with c1:
        st.subheader("ATS Issues")
        if analysis.ats_issues:
            _bullets(analysis.ats_issues)
        else:
            st.success("No ATS issues found — your resume parses cleanly.")
    with c2:
        st.subheader("Areas for Improvement")
        _bullets(analysis.improvement_areas)

    with st.expander("Sync LinkedIn", expanded=False):
        with st.form("linkedin"):
            profile_input = st.text_area(
                "LinkedIn URL or bio text",
                placeholder="Paste LinkedIn URL or Bio text...",
                height=90,
            )
            busy = session.in_flight(Operation.ENRICH)
            submitted = st.form_submit_button("Add", disabled=busy)
        if submitted and profile_input.strip():
            with st.spinner("Merging your LinkedIn profile…"):
                session.sync_profile(profile_input)
            st.rerun()


def _job_card(session: Session, job: JobListing) -> None:
    with st.container(border=True):
        c1, c2 = st.columns([4, 1])
        with c1:
            st.markdown(f"**{job.title}** · {job.company}")
            st.caption(job.location)
            st.markdown(f'<div class="job-snippet">{html.escape(job.snippet)}</div>',
                        unsafe_allow_html=True)
            if job.url and job.url != "#":
                st.markdown(f"[Apply link]({job.url})")
        with c2:
            cached = job.id in session.matches
            label = "View kit" if cached else "Analyze match"
            if st.button(label, key=f"select_{job.id}",
                         disabled=session.in_flight(Operation.MATCH)):
                with st.spinner("Building your application kit…"):
                    session.select_job(job)
                st.rerun()


def _suggested_roles(roles: list[str]) -> None:
    """Role chips; clicking one fills the search query."""
    if not roles:
        return
    cols = st.columns(len(roles) + 1)
    cols[0].caption("Suggested:")
    for i, (col, role) in enumerate(zip(cols[1:], roles)):
        if col.button(role, key=f"role_{i}"):
            st.session_state["job_query"] = role


def _job_finder(session: Session, analysis: ResumeAnalysis) -> None:
    st.subheader("Find Your Next Role")
    default_level = analysis.experience_level or "Mid Level"
    levels = list(dict.fromkeys(EXPERIENCE_LEVELS + [default_level]))

    if "job_query" not in st.session_state:
        st.session_state["job_query"] = analysis.suggested_roles[0] if analysis.suggested_roles else ""
    _suggested_roles(analysis.suggested_roles)

    with st.form("job_search"):
        c1, c2 = st.columns([2, 1])
        with c1:
            query = st.text_input("Job title, keywords, or company", key="job_query")
        with c2:
            location = st.text_input("Location", placeholder="City or 'Remote'")
        c1, c2 = st.columns(2)
        with c1:
            experience = st.selectbox("Experience", levels, index=levels.index(default_level))
        with c2:
            job_type = st.selectbox("Job type", JOB_TYPES)
        submitted = st.form_submit_button(
            "Search Jobs", type="primary", disabled=session.in_flight(Operation.SEARCH),
            use_container_width=True,
        )

    if submitted:
        with st.spinner("Searching live job listings…"):
            session.search_jobs(query, location, SearchFilters(job_type, experience))
        st.rerun()

    for job in session.jobs:
        _job_card(session, job)


def view_dashboard(session: Session) -> None:
    analysis = session.analysis
    if analysis is None:
        session.navigate(View.UPLOAD)
        st.rerun()
        return
    st.title("Your Career Dashboard")
    _analysis_panel(session, analysis)
    st.divider()
    _job_finder(session, analysis)


# ── View: Job details ────────────────────────────────────────────────────


def view_job_details(session: Session) -> None:
    job, match = session.selected_job, session.selected_match
    if job is None or match is None:
        session.navigate(View.DASHBOARD)
        st.rerun()
        return

    if st.button("← Back to Search"):
        session.navigate(View.DASHBOARD)
        st.rerun()

    left, right = st.columns([1, 2])
    with left:
        st.header(job.title)
        st.write(f"**{job.company}** · {job.location}")
        st.metric("Match Score", f"{match.match_score}%")
        st.write(match.reasoning)
        st.markdown("**Strengths**")
        _bullets(match.strengths)
        st.markdown("**Missing skills**")
        _bullets(match.missing_skills)
        if job.url and job.url != "#":
            st.link_button("Open job posting", job.url)

    with right:
        st.subheader("Cover Letter")
        letter = st.text_area(
            "Edit before sending", value=match.cover_letter, height=360,
            key=f"letter_{job.id}",
        )
        if letter != match.cover_letter:
            session.update_cover_letter(job.id, letter)
        st.link_button("Smart Apply (email draft)", application_mailto(job, letter),
                       type="primary")

        st.subheader("Cold Email")
        st.code(match.cold_email, language=None, wrap_lines=True)

        st.subheader("LinkedIn Connection Note")
        if st.button("Generate note", disabled=session.in_flight(Operation.NOTE)):
            with st.spinner("Writing a connection note…"):
                session.generate_connection_note(job.id)
        note = session.connection_notes.get(job.id)
        if note:
            st.code(note, language=None, wrap_lines=True)


# ── Sidebar ──────────────────────────────────────────────────────────────


def _sidebar(session: Session) -> None:
    with st.sidebar:
        st.markdown("### JobHunt AI")
        if session.analysis is not None:
            if st.button("Dashboard", use_container_width=True,
                         type="primary" if session.view is View.DASHBOARD else "secondary"):
                session.navigate(View.DASHBOARD)
                st.rerun()
        if st.button("Upload new resume", use_container_width=True):
            session.navigate(View.UPLOAD)
            st.rerun()

        st.divider()
        env = load_env_file()
        with st.form("settings"):
            st.markdown("**API Keys**")
            ai_key = st.text_input(
                "AI API key", value=env.get("AI_API_KEY", os.environ.get("AI_API_KEY", "")),
                type="password",
            )
            base_url = st.text_input("AI base URL", value=env.get("AI_BASE_URL", ""),
                                     placeholder="Gemini OpenAI-compatible endpoint")
            model = st.text_input("Model", value=env.get("AI_MODEL", ""),
                                  placeholder="gemini-2.5-flash")
            serp = st.text_input(
                "SerpAPI key (search grounding)", value=env.get("SERPAPI_KEY", ""),
                type="password", help="https://serpapi.com — enables live job search",
            )
            persist = st.checkbox("Save to .env", value=False)
            if st.form_submit_button("Apply", use_container_width=True):
                values = dict(zip(EDITABLE_KEYS, (ai_key, base_url, model, serp)))
                apply_env(values)
                if persist:
                    save_env_file(values)
                session.gateway = AIGateway.from_env()
                st.success("Settings applied.")


# ── Main ─────────────────────────────────────────────────────────────────

_VIEWS = {
    View.UPLOAD: view_upload,
    View.DASHBOARD: view_dashboard,
    View.JOB_DETAILS: view_job_details,
}


def main() -> None:
    st.set_page_config(page_title="JobHunt AI", page_icon="🤖", layout="wide")
    st.markdown(_GLASS_CSS, unsafe_allow_html=True)
    session = _session()
    _sidebar(session)
    _error_banner(session)
    _VIEWS[session.view](session)


main()
