"""
RAG Showcase – Streamlit frontend.
Import a CV, analyze jobs, and compare pgvector vs Elasticsearch answers.
No business logic in layout; flows and backend calls live in ingestion/, comparison/, analytics/.
"""

import asyncio
from typing import Any, Coroutine, Optional

import streamlit as st

from rag_showcase.analytics.dashboard import AnalyticsDashboard
from rag_showcase.comparison.history import ComparisonHistory
from rag_showcase.comparison.orchestrator import ComparisonOrchestrator
from rag_showcase.comparison.rendering import (
    BAND_COLORS,
    HIGHLIGHT_COLORS,
    SIDE_LABELS,
    score_band,
    summarize_history,
    winner_highlight,
    winner_label,
)
from rag_showcase.config import (
    ANALYTICS_REFRESH_SECONDS,
    ANALYZE_PROVIDERS,
    COMPARE_PROVIDERS,
    DEFAULT_ANALYZE_PROVIDER,
    DEFAULT_COMPARE_PROVIDER,
    DEMO_PROFILE_COUNT,
    MAX_BULK_QUESTIONS,
)
from rag_showcase.errors import ShowcaseError
from rag_showcase.ingestion.orchestrator import FlowState, IngestionOrchestrator, JobAnalysisFlow
from rag_showcase.schemas.analysis import AnalysisResult
from rag_showcase.schemas.analytics import FacetedSearchRequest
from rag_showcase.schemas.comparison import ELASTICSEARCH, PGVECTOR, ComparisonResult
from rag_showcase.schemas.document import UploadedDocument
from rag_showcase.services.api_client import BackendClient
from rag_showcase.services.local_store import LocalStore
from rag_showcase.services.session import SessionContext, init_session, whoami
from rag_showcase.utils.helpers import format_number, format_timestamp
from rag_showcase.utils.logger import get_logger

logger = get_logger(__name__)

UPLOAD_TYPES = ["txt", "pdf", "doc", "docx"]
FACET_LIMIT = 10


def _run_async(coro: Coroutine[Any, Any, Any]) -> Any:
    """Drive one coroutine to completion on a fresh event loop (Streamlit callbacks are sync)."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _bootstrap() -> None:
    """Build the per-browser-session objects once; the demo token is fetched exactly here."""
    if "client" in st.session_state:
        return
    store = LocalStore()
    session = SessionContext(store)
    client = BackendClient(session)
    _run_async(init_session(client))
    st.session_state["user"] = _run_async(whoami(client))

    comparison = ComparisonOrchestrator(client, ComparisonHistory(store))
    _run_async(comparison.load_current_model())

    st.session_state["client"] = client
    st.session_state["ingestion"] = IngestionOrchestrator(client)
    st.session_state["analysis"] = JobAnalysisFlow(client)
    st.session_state["comparison"] = comparison
    st.session_state["dashboard"] = AnalyticsDashboard(client)


def _uploaded(file) -> Optional[UploadedDocument]:
    if file is None:
        return None
    return UploadedDocument(name=file.name, mime_type=file.type or "", data=file.getvalue())


# ----- Import profile -----

def _sync_ingestion_inputs() -> IngestionOrchestrator:
    ing: IngestionOrchestrator = st.session_state["ingestion"]
    ing.cv_text = st.session_state.get("cv_text", "")
    ing.cover_letter_text = st.session_state.get("cover_letter_text", "")
    ing.homepage_url = st.session_state.get("homepage_url", "")
    ing.linkedin_url = st.session_state.get("linkedin_url", "")
    ing.skip_processing = st.session_state.get("skip_processing", False)
    ing.provider = st.session_state.get("import_provider", DEFAULT_ANALYZE_PROVIDER)
    return ing


def _push_ingestion_inputs(ing: IngestionOrchestrator) -> None:
    st.session_state["cv_text"] = ing.cv_text
    st.session_state["cover_letter_text"] = ing.cover_letter_text
    st.session_state["homepage_url"] = ing.homepage_url
    st.session_state["linkedin_url"] = ing.linkedin_url


def _on_import() -> None:
    _run_async(_sync_ingestion_inputs().submit())


def _on_load_cv_file() -> None:
    ing = _sync_ingestion_inputs()
    doc = _uploaded(st.session_state.get("cv_file"))
    if doc and _run_async(ing.load_file(doc)):
        _push_ingestion_inputs(ing)


def _on_load_cv_url() -> None:
    ing = _sync_ingestion_inputs()
    if _run_async(ing.load_url(st.session_state.get("cv_url", ""))):
        _push_ingestion_inputs(ing)


def _on_load_profile() -> None:
    ing = _sync_ingestion_inputs()
    if _run_async(ing.load_existing_profile()):
        _push_ingestion_inputs(ing)
    else:
        ing.error_message = "No saved profile found."


def _on_clear_import() -> None:
    ing: IngestionOrchestrator = st.session_state["ingestion"]
    ing.clear()
    _push_ingestion_inputs(ing)
    st.session_state["cv_url"] = ""


def render_import_tab() -> None:
    ing: IngestionOrchestrator = st.session_state["ingestion"]
    caps = ing.capabilities
    st.subheader("Your CV / Resume")
    st.caption("Each import replaces your previous profile – old data is cleared automatically.")

    st.text_area("CV text", key="cv_text", height=220, placeholder="Paste your CV/Resume text here...")
    col_file, col_url = st.columns(2)
    with col_file:
        st.file_uploader("Upload CV file", type=UPLOAD_TYPES, key="cv_file")
        st.button("Load file", key="load_cv_file", on_click=_on_load_cv_file, disabled=ing.busy)
    if caps.supports_url_load:
        with col_url:
            st.text_input("Load CV from URL", key="cv_url", placeholder="https://example.com/cv.pdf")
            st.button("Load URL", key="load_cv_url", on_click=_on_load_cv_url, disabled=ing.busy)

    if caps.supports_cover_letter:
        st.text_area(
            "Existing cover letter (optional)",
            key="cover_letter_text",
            height=140,
            placeholder="Paste your existing cover letter here...",
        )
    if caps.supports_links:
        lcol1, lcol2 = st.columns(2)
        with lcol1:
            st.text_input("Personal homepage URL", key="homepage_url", placeholder="https://www.yourwebsite.com")
        with lcol2:
            st.text_input(
                "LinkedIn profile URL", key="linkedin_url", placeholder="https://www.linkedin.com/in/yourprofile"
            )

    pcol, scol = st.columns(2)
    with pcol:
        st.selectbox(
            "LLM provider",
            options=list(ANALYZE_PROVIDERS.keys()),
            format_func=lambda k: ANALYZE_PROVIDERS[k],
            key="import_provider",
        )
    if caps.supports_skip_processing:
        with scol:
            st.checkbox(
                "Skip AI processing (fast import, no entity extraction)",
                key="skip_processing",
            )

    bcol1, bcol2, bcol3 = st.columns([2, 1, 1])
    with bcol1:
        st.button("Import profile", type="primary", key="import_btn", on_click=_on_import, disabled=ing.busy)
    with bcol2:
        st.button("Load saved profile", key="load_profile_btn", on_click=_on_load_profile, disabled=ing.busy)
    with bcol3:
        st.button("Clear all", key="clear_import_btn", on_click=_on_clear_import, disabled=ing.busy)

    if ing.progress_message:
        st.info(ing.progress_message)
    if ing.error_message:
        st.error(ing.error_message)
    if ing.state == FlowState.SUCCEEDED and ing.status_message:
        st.success(ing.status_message.replace("\n", "  \n"))


# ----- Analyze job -----

def _sync_analysis_inputs() -> JobAnalysisFlow:
    flow: JobAnalysisFlow = st.session_state["analysis"]
    flow.job_description = st.session_state.get("job_description", "")
    flow.job_url = st.session_state.get("job_url", "")
    flow.provider = st.session_state.get("analysis_provider", DEFAULT_ANALYZE_PROVIDER)
    return flow


def _on_analyze() -> None:
    _run_async(_sync_analysis_inputs().submit())


def _on_load_job_file() -> None:
    flow = _sync_analysis_inputs()
    doc = _uploaded(st.session_state.get("job_file"))
    if doc and _run_async(flow.load_file(doc)):
        st.session_state["job_description"] = flow.job_description


def _on_load_latest_analysis() -> None:
    _run_async(st.session_state["analysis"].load_latest())


def _on_clear_analysis() -> None:
    flow: JobAnalysisFlow = st.session_state["analysis"]
    flow.clear()
    st.session_state["job_description"] = ""
    st.session_state["job_url"] = ""


def _render_analysis_result(result: AnalysisResult) -> None:
    job = result.job_analysis
    st.markdown("### Job overview")
    ocol1, ocol2 = st.columns(2)
    with ocol1:
        st.markdown(f"**Company:** {job.company or '—'}  \n**Role:** {job.role or '—'}")
        st.markdown(f"**Location:** {job.location or '—'}  \n**Remote policy:** {job.remote_policy or '—'}")
    with ocol2:
        salary = job.salary_range
        if salary.min and salary.max:
            salary_text = f"{salary.currency} {salary.min:,.0f} - {salary.max:,.0f}"
        else:
            salary_text = "Not specified"
        st.markdown(f"**Seniority:** {job.seniority or '—'}  \n**Salary range:** {salary_text}")

    fit = result.fit_score
    color = BAND_COLORS[score_band(fit.total)]
    st.markdown(f"### Fit score :{color}[{format_number(fit.total)}%]")
    for name, value in fit.breakdown.model_dump().items():
        st.progress(min(max(int(value), 0), 100), text=f"{name.replace('_', ' ').title()}: {format_number(value)}%")
    mcol, xcol = st.columns(2)
    with mcol:
        st.markdown("**Matched skills**")
        st.markdown(" ".join(f"`{s}`" for s in fit.matched_skills) or "—")
    with xcol:
        st.markdown("**Missing skills**")
        st.markdown(" ".join(f"`{s}`" for s in fit.missing_skills) or "—")

    prob = result.success_probability
    pcolor = BAND_COLORS[score_band(prob.probability)]
    st.markdown(f"### Success probability :{pcolor}[{format_number(prob.probability)}%]")
    for factor in prob.factors:
        sign = "+" if factor.impact >= 0 else ""
        st.caption(f"{factor.factor}: {sign}{format_number(factor.impact)}")
    if prob.recommendation:
        st.info(prob.recommendation)
    if job.red_flags or job.green_flags:
        with st.expander("Flags"):
            for flag in job.green_flags:
                st.markdown(f"- ✅ {flag}")
            for flag in job.red_flags:
                st.markdown(f"- ⚠️ {flag}")


def render_analyze_tab() -> None:
    flow: JobAnalysisFlow = st.session_state["analysis"]
    st.subheader("Job description")
    st.text_input("Job description URL", key="job_url", placeholder="https://www.company.com/careers/job-posting")
    st.file_uploader("Upload job description file", type=UPLOAD_TYPES, key="job_file")
    st.button("Load file", key="load_job_file", on_click=_on_load_job_file, disabled=flow.busy)
    st.text_area(
        "Paste job description", key="job_description", height=200, placeholder="Paste the job description here..."
    )
    st.selectbox(
        "LLM provider",
        options=list(ANALYZE_PROVIDERS.keys()),
        format_func=lambda k: ANALYZE_PROVIDERS[k],
        key="analysis_provider",
    )
    bcol1, bcol2, bcol3 = st.columns([2, 1, 1])
    with bcol1:
        st.button("Analyze job", type="primary", key="analyze_btn", on_click=_on_analyze, disabled=flow.busy)
    with bcol2:
        st.button("Load last analysis", key="latest_analysis_btn", on_click=_on_load_latest_analysis)
    with bcol3:
        st.button("Clear all", key="clear_analysis_btn", on_click=_on_clear_analysis, disabled=flow.busy)

    if flow.error_message:
        st.error(flow.error_message)
    if flow.result is not None:
        st.divider()
        _render_analysis_result(flow.result)


# ----- Q&A comparison -----

def _on_compare() -> None:
    comp: ComparisonOrchestrator = st.session_state["comparison"]
    comp.question = st.session_state.get("question_input", "")
    comp.provider = st.session_state.get("compare_provider", DEFAULT_COMPARE_PROVIDER)
    _run_async(comp.compare())
    st.session_state["question_input"] = comp.question


def _on_bulk_upload() -> None:
    comp: ComparisonOrchestrator = st.session_state["comparison"]
    comp.provider = st.session_state.get("compare_provider", DEFAULT_COMPARE_PROVIDER)
    doc = _uploaded(st.session_state.get("questions_file"))
    if doc is None:
        comp.error_message = "Choose a .txt file with one question per line first."
        return
    report = _run_async(comp.bulk_compare_upload(doc))
    if report is not None:
        st.session_state["bulk_report"] = report


def _on_clear_history() -> None:
    comp: ComparisonOrchestrator = st.session_state["comparison"]
    if comp.clear_history(confirmed=st.session_state.get("confirm_clear_history", False)):
        st.session_state["confirm_clear_history"] = False
        st.session_state.pop("bulk_report", None)


def _render_answer(result: ComparisonResult, side: str) -> None:
    answer = getattr(result, side)
    score = getattr(result.evaluation, f"{side}_score")
    highlight = winner_highlight(side, result.evaluation.winner)
    with st.container(border=True):
        st.markdown(
            f":{HIGHLIGHT_COLORS[highlight]}[**{SIDE_LABELS[side]}**] · "
            f":{BAND_COLORS[score_band(score)]}[{format_number(score)}%]"
        )
        st.write(answer.answer)
        st.caption(f"⏱ {answer.retrieval_time_ms:.1f}ms")


def _render_comparison_rows(results) -> None:
    for result in results:
        qcol, pcol, ecol, vcol = st.columns([2, 3, 3, 2])
        with qcol:
            st.markdown(f"🔍 **{result.question}**")
            st.caption(format_timestamp(result.timestamp))
        with pcol:
            _render_answer(result, PGVECTOR)
        with ecol:
            _render_answer(result, ELASTICSEARCH)
        with vcol:
            st.markdown(f"🏆 **{winner_label(result.evaluation.winner)}**")
            st.caption(result.evaluation.reasoning)
            if result.llm_used:
                st.caption(f"LLM: {result.llm_used}")
        st.divider()


def render_compare_tab() -> None:
    comp: ComparisonOrchestrator = st.session_state["comparison"]
    busy = comp.loading or comp.bulk_running
    st.subheader("Vector Database Q&A Comparison")
    st.caption("Query your CV data and compare pgvector vs Elasticsearch.")

    qcol, pcol = st.columns([2, 1])
    with qcol:
        st.text_input(
            "Your question", key="question_input", placeholder="e.g. How long did Michael work at Cognizant?"
        )
    with pcol:
        st.selectbox(
            "AI model for answers",
            options=list(COMPARE_PROVIDERS.keys()),
            format_func=lambda k: (
                f"{COMPARE_PROVIDERS[k]} ({comp.current_model})" if k == "local" else COMPARE_PROVIDERS[k]
            ),
            key="compare_provider",
        )
    st.button(
        "Ask question & compare",
        type="primary",
        key="compare_btn",
        on_click=_on_compare,
        disabled=busy or not st.session_state.get("question_input", "").strip(),
    )

    with st.expander("Bulk question upload"):
        st.caption(f"Upload a .txt file with one question per line (max {MAX_BULK_QUESTIONS} questions).")
        st.file_uploader("Questions file", type=["txt"], key="questions_file")
        st.button("Upload questions", key="bulk_btn", on_click=_on_bulk_upload, disabled=busy)
        report = st.session_state.get("bulk_report")
        if report is not None:
            st.caption(f"Processed {report.succeeded}/{report.total} questions.")
            if report.failed_questions:
                st.warning("Skipped: " + "; ".join(report.failed_questions))

    if comp.error_message:
        st.error(f"**Error:** {comp.error_message}")

    results = comp.results
    if not results:
        st.info("Ask a question about your CV data and compare the answers from both vector databases.")
        return

    summary = summarize_history(results)
    mcols = st.columns(4)
    mcols[0].metric("Questions asked", summary.total)
    mcols[1].metric("pgvector wins", summary.wins[PGVECTOR])
    mcols[2].metric("Elasticsearch wins", summary.wins[ELASTICSEARCH])
    mcols[3].metric("Ties", summary.wins["tie"])

    hcol, ccol = st.columns([3, 1])
    with hcol:
        st.markdown(f"### Comparison results ({len(results)} question{'s' if len(results) != 1 else ''})")
    with ccol:
        st.checkbox("Confirm: delete all results", key="confirm_clear_history")
        st.button(
            "Clear all results",
            key="clear_history_btn",
            on_click=_on_clear_history,
            disabled=not st.session_state.get("confirm_clear_history", False),
        )
    with st.container(height=800):
        _render_comparison_rows(results)


# ----- Analytics -----

@st.fragment(run_every=ANALYTICS_REFRESH_SECONDS)
def _render_live_analytics() -> None:
    dashboard: AnalyticsDashboard = st.session_state["dashboard"]
    _run_async(dashboard.refresh())
    if dashboard.error_message:
        st.error(dashboard.error_message)
    data = dashboard.rag
    if data is None:
        return
    mcols = st.columns(3)
    mcols[0].metric("Total queries", data.total_queries)
    mcols[1].metric(
        "Avg score (pgvector / ES)",
        f"{data.avg_pgvector_score:.1f} / {data.avg_elasticsearch_score:.1f}",
    )
    mcols[2].metric(
        "Avg latency ms (pgvector / ES)",
        f"{data.avg_pgvector_latency:.1f} / {data.avg_elasticsearch_latency:.1f}",
    )
    if data.winner_distribution:
        st.markdown("**Winner distribution**")
        st.bar_chart({b.key: b.count for b in data.winner_distribution})
    if data.score_trends:
        st.markdown("**Score trends**")
        st.line_chart(
            {
                "pgvector": [p.pgvector_score for p in data.score_trends],
                "elasticsearch": [p.elasticsearch_score for p in data.score_trends],
            }
        )
    if data.recent_queries:
        st.markdown("**Recent queries**")
        st.dataframe([q.model_dump() for q in data.recent_queries], use_container_width=True)


def _on_generate_demo() -> None:
    _run_async(st.session_state["dashboard"].generate_demo_data(DEMO_PROFILE_COUNT))


def _on_clear_analytics() -> None:
    confirmed = st.session_state.get("confirm_clear_analytics", False)
    if _run_async(st.session_state["dashboard"].clear(confirmed)):
        st.session_state["confirm_clear_analytics"] = False


def render_analytics_tab() -> None:
    dashboard: AnalyticsDashboard = st.session_state["dashboard"]
    st.subheader("RAG analytics")
    st.caption(f"Refreshes every {int(ANALYTICS_REFRESH_SECONDS)} seconds.")
    _render_live_analytics()

    st.divider()
    st.subheader("Index statistics")
    if dashboard.index is None:
        _run_async(dashboard.refresh_index_stats())
    if dashboard.index is not None:
        idx = dashboard.index
        icols = st.columns(3)
        icols[0].metric("Documents", idx.total_documents)
        icols[1].metric("Index size (MB)", f"{idx.index_size_mb:.2f}")
        icols[2].metric("Avg chunk size", f"{idx.avg_chunk_size:.0f}")
        if idx.top_skills:
            st.bar_chart({s.skill: s.count for s in idx.top_skills})

    gcol, ccol = st.columns(2)
    with gcol:
        st.button(f"Generate {DEMO_PROFILE_COUNT} demo profiles", key="demo_btn", on_click=_on_generate_demo)
        if dashboard.status_message:
            st.caption(dashboard.status_message)
    with ccol:
        st.checkbox("Confirm: delete all analytics data (cannot be undone)", key="confirm_clear_analytics")
        st.button(
            "Clear analytics",
            key="clear_analytics_btn",
            on_click=_on_clear_analytics,
            disabled=not st.session_state.get("confirm_clear_analytics", False),
        )


# ----- Faceted search -----

def _on_faceted_search() -> None:
    client: BackendClient = st.session_state["client"]
    request = FacetedSearchRequest(
        query=st.session_state.get("facet_query", ""),
        databases=st.session_state.get("facet_databases", []),
        programming_languages=st.session_state.get("facet_languages", []),
        companies=st.session_state.get("facet_companies", []),
        certifications=st.session_state.get("facet_certifications", []),
    )
    try:
        st.session_state["facet_hits"] = _run_async(client.faceted_search(request))
        st.session_state["facet_error"] = None
    except ShowcaseError as e:
        logger.error("Faceted search failed: %s", e.user_message)
        st.session_state["facet_error"] = e.user_message


def render_faceted_tab() -> None:
    client: BackendClient = st.session_state["client"]
    if "aggregations" not in st.session_state:
        try:
            st.session_state["aggregations"] = _run_async(client.get_aggregations())
        except ShowcaseError as e:
            logger.error("Failed to load aggregations: %s", e.user_message)
            st.session_state["aggregations"] = None
    aggs = st.session_state.get("aggregations")

    st.text_input("Search your CV data", key="facet_query")
    if aggs is not None:
        fcols = st.columns(4)
        facets = (
            ("Databases", "facet_databases", aggs.databases),
            ("Languages", "facet_languages", aggs.programming_languages),
            ("Companies", "facet_companies", aggs.companies),
            ("Certifications", "facet_certifications", aggs.certifications),
        )
        for col, (label, key, buckets) in zip(fcols, facets):
            with col:
                st.multiselect(
                    label,
                    options=[b.name for b in buckets[:FACET_LIMIT]],
                    key=key,
                    format_func=lambda name, b=buckets: f"{name} ({next((x.count for x in b if x.name == name), 0)})",
                )
    st.button("Search", type="primary", key="facet_search_btn", on_click=_on_faceted_search)

    if st.session_state.get("facet_error"):
        st.error(st.session_state["facet_error"])
    for hit in st.session_state.get("facet_hits", []):
        with st.container(border=True):
            st.caption(f"Score: {hit.score:.2f}")
            st.write(hit.content)
            tags = hit.databases + hit.programming_languages + hit.companies + hit.certifications
            if tags:
                st.markdown(" ".join(f"`{t}`" for t in tags))


def render_layout() -> None:
    """Streamlit page layout; flows and backend calls use the orchestrators."""
    st.set_page_config(page_title="RAG Showcase", layout="wide")
    _bootstrap()
    st.title("RAG Showcase")
    st.markdown("*pgvector vs Elasticsearch – compare retrieval over your own CV.*")

    client: BackendClient = st.session_state["client"]
    with st.sidebar:
        user = st.session_state.get("user") or {}
        if user.get("email"):
            st.markdown(f"**{user['email']}**")
            st.caption("Logged in (demo session)")
        else:
            st.caption("Demo session" if client.session.token else "No session token (demo mode)")

    tabs = st.tabs(["Import Profile", "Analyze Job", "Q&A Comparison", "Analytics", "Faceted Search"])
    with tabs[0]:
        render_import_tab()
    with tabs[1]:
        render_analyze_tab()
    with tabs[2]:
        render_compare_tab()
    with tabs[3]:
        render_analytics_tab()
    with tabs[4]:
        render_faceted_tab()


if __name__ == "__main__":
    render_layout()
