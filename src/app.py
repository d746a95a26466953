"""TestMe main entry point."""

from __future__ import annotations

import html
import logging
import time
from typing import Any, MutableMapping

import streamlit as st

from config import INTRO_PARAGRAPHS, INTRO_TITLE, PAGE_ICON, PAGE_TITLE
from services.answer_grader import AnswerGrader
from services.credential_store import CredentialStore
from services.document_processor import PDFProcessor
from services.feedback_renderer import sanitize_feedback_html
from services.quiz_generator import QuestionGenerationError, QuizGenerator
from services.workflow import QuizSession, WorkflowState
from utils.metrics import get_metrics_summary, log_metric

LOGGER = logging.getLogger("testme.app")

SOURCE_TEXT_KEY = "source_text"
ANSWER_KEY_PREFIX = "answer_"
PAGE_INPUT_KEYS = ("pdf_start_page", "pdf_end_page")


def _session() -> QuizSession:
    """Return this browser session's QuizSession, loading a stored key on first use."""
    if "quiz_session" not in st.session_state:
        session = QuizSession()
        stored = None
        try:
            stored = CredentialStore().load()
        except Exception:
            LOGGER.exception("Could not read stored API key")
        if stored:
            st.session_state["api_key"] = stored
            session.submit_credential()
        st.session_state["quiz_session"] = session
    return st.session_state["quiz_session"]


def _api_key() -> str:
    return str(st.session_state.get("api_key") or "").strip()


def _flash(message: str) -> None:
    """Queue an error that survives the next rerun."""
    st.session_state["flash_error"] = message


def _show_flash() -> None:
    message = st.session_state.pop("flash_error", None)
    if message:
        st.error(message)


def _clear_answer_widgets() -> None:
    for key in [k for k in st.session_state.keys() if str(k).startswith(ANSWER_KEY_PREFIX)]:
        del st.session_state[key]


def _inject_css() -> None:
    st.markdown(
        """
        <style>
        .block-container { max-width: 48rem !important; }
        .testme-question { font-weight: 600; margin-bottom: 0.25rem; }
        .testme-feedback { border-left: 3px solid #E5E7EB; padding-left: 0.75rem; margin-bottom: 1.25rem; }
        </style>
        """,
        unsafe_allow_html=True,
    )


def _render_intro() -> None:
    if not st.session_state.get("show_intro", True):
        return
    with st.container(border=True):
        st.markdown(f"**{INTRO_TITLE}**")
        for paragraph in INTRO_PARAGRAPHS:
            st.write(paragraph)
        if st.button("Close", key="intro_close"):
            st.session_state["show_intro"] = False
            st.rerun()


def _render_sidebar(session: QuizSession) -> None:
    st.sidebar.header(PAGE_TITLE)
    if session.step == WorkflowState.TEXT_INPUT and _api_key():
        if st.sidebar.button("Change API key", key="reset_api_key", use_container_width=True):
            try:
                CredentialStore().clear()
            except Exception:
                LOGGER.exception("Could not clear stored API key")
            st.session_state["api_key"] = ""
            session.reset_credential()
            st.rerun()

    summary = get_metrics_summary()
    if summary:
        st.sidebar.divider()
        st.sidebar.caption("**Recent activity**")
        for operation, stats in summary.items():
            st.sidebar.markdown(
                f"{operation}: **{stats['total']}** runs, avg **{stats['avg_s']}s**"
                + (f", {stats['failed']} failed" if stats.get("failed") else "")
            )


def _render_api_key_step(session: QuizSession) -> None:
    with st.form("api_key_form"):
        candidate = st.text_input("OpenAI API key", placeholder="Enter your OpenAI API key", type="password")
        submitted = st.form_submit_button("Submit API Key")
    if not submitted:
        return
    try:
        stored = CredentialStore().submit(candidate)
    except ValueError as e:
        st.warning(str(e))
        return
    st.session_state["api_key"] = stored
    session.submit_credential()
    st.rerun()


def _extract_pdf_text() -> None:
    """Button callback: overwrite the text box with the selected page range."""
    session = _session()
    uploaded = st.session_state.get("pdf_upload")
    if uploaded is None:
        return
    start = int(st.session_state.get("pdf_start_page") or 1)
    end = int(st.session_state.get("pdf_end_page") or 1)
    try:
        text = PDFProcessor().extract_range_from_file(uploaded, start, end)
    except ValueError as e:
        LOGGER.warning("PDF extraction failed: %s", e)
        _flash(str(e))
        return
    st.session_state[SOURCE_TEXT_KEY] = text
    session.source_text = text


def _start_generation() -> None:
    """Button callback: move to the generating screen."""
    session = _session()
    session.source_text = str(st.session_state.get(SOURCE_TEXT_KEY) or "")
    session.begin_generation()


def _clamp_page_inputs(state: MutableMapping[str, Any], max_pages: int) -> None:
    """Pull page inputs back inside a newly uploaded, shorter document."""
    for key in PAGE_INPUT_KEYS:
        if key in state and int(state[key] or 1) > max_pages:
            state[key] = max(1, max_pages)


def _render_text_input_step(session: QuizSession) -> None:
    if SOURCE_TEXT_KEY not in st.session_state:
        st.session_state[SOURCE_TEXT_KEY] = session.source_text
    st.text_area("Study text", key=SOURCE_TEXT_KEY, placeholder="Enter your text here", height=200)
    session.source_text = str(st.session_state.get(SOURCE_TEXT_KEY) or "")

    uploaded = st.file_uploader("Or extract text from a PDF", type=["pdf"], key="pdf_upload")
    max_pages = None
    if uploaded is not None:
        try:
            max_pages = PDFProcessor().page_count(uploaded.getvalue())
        except ValueError as e:
            st.warning(str(e))
        else:
            st.caption(f"This PDF has {max_pages} pages.")
            _clamp_page_inputs(st.session_state, max_pages)
    c1, c2 = st.columns(2)
    c1.number_input("Start Page", min_value=1, max_value=max_pages, value=1, step=1, key="pdf_start_page")
    c2.number_input("End Page", min_value=1, max_value=max_pages, value=1, step=1, key="pdf_end_page")
    st.button(
        "Extract Text from PDF",
        key="pdf_extract",
        disabled=uploaded is None,
        on_click=_extract_pdf_text,
    )
    st.divider()
    st.button("Generate Test", key="generate_test", type="primary", on_click=_start_generation)


def _render_generating_step(session: QuizSession) -> None:
    st.info("Please wait while we create your test questions...")
    started = time.perf_counter()
    try:
        with st.spinner("Generating Test"):
            questions = QuizGenerator().generate_questions(session.source_text, api_key=_api_key())
    except QuestionGenerationError as e:
        LOGGER.warning("Model returned no questions")
        log_metric("generate", time.perf_counter() - started, succeeded=False, questions=0)
        _flash(str(e))
        session.generation_failed()
        st.rerun()
        return
    except ValueError as e:
        LOGGER.warning("Question generation failed: %s", e)
        log_metric("generate", time.perf_counter() - started, succeeded=False)
        _flash(f"Error generating questions. {e}")
        session.generation_failed()
        st.rerun()
        return
    log_metric("generate", time.perf_counter() - started, questions=len(questions))
    _clear_answer_widgets()
    session.generation_succeeded(questions)
    st.rerun()


def _render_test_generated_step(session: QuizSession) -> None:
    st.success(f"Your test is ready ({len(session.questions)} questions). Click the button when you're done studying.")
    if st.button("Done Studying", key="done_studying", type="primary"):
        session.done_studying()
        st.rerun()


def _render_answering_step(session: QuizSession) -> None:
    for index, question in enumerate(session.questions):
        st.markdown(f'<p class="testme-question">{html.escape(question)}</p>', unsafe_allow_html=True)
        key = f"{ANSWER_KEY_PREFIX}{index}"
        if key not in st.session_state:
            st.session_state[key] = session.answer_for(index)
        value = st.text_input("Your answer", key=key, placeholder="Your answer", label_visibility="collapsed")
        session.set_answer(index, value)

    if not st.button("Check Answers", key="check_answers", type="primary"):
        return
    started = time.perf_counter()
    try:
        with st.spinner("Checking your answers..."):
            items = AnswerGrader().grade(session.source_text, session.questions, session.answers, _api_key())
    except ValueError as e:
        LOGGER.warning("Grading failed: %s", e)
        log_metric("grade", time.perf_counter() - started, succeeded=False, questions=len(session.questions))
        st.error(f"Error checking answers. Please try again. ({e})")
        return
    log_metric("grade", time.perf_counter() - started, questions=len(items))
    session.grading_succeeded(items)
    st.rerun()


def _render_feedback_step(session: QuizSession) -> None:
    st.subheader("Feedback")
    for item in session.feedback:
        st.markdown(f'<p class="testme-question">{html.escape(item.question)}</p>', unsafe_allow_html=True)
        st.write(f"Your answer: {item.answer}")
        st.markdown(
            f'<div class="testme-feedback">{sanitize_feedback_html(item.feedback)}</div>',
            unsafe_allow_html=True,
        )
    if st.button("Start Over", key="start_over", type="primary"):
        _clear_answer_widgets()
        session.start_over()
        st.rerun()


STEP_RENDERERS: dict[WorkflowState, Any] = {
    WorkflowState.API_KEY: _render_api_key_step,
    WorkflowState.TEXT_INPUT: _render_text_input_step,
    WorkflowState.GENERATING_TEST: _render_generating_step,
    WorkflowState.TEST_GENERATED: _render_test_generated_step,
    WorkflowState.ANSWERING_QUESTIONS: _render_answering_step,
    WorkflowState.FEEDBACK: _render_feedback_step,
}


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    st.set_page_config(page_title=PAGE_TITLE, page_icon=PAGE_ICON)
    _inject_css()
    session = _session()
    _render_sidebar(session)
    st.title(PAGE_TITLE)
    _render_intro()
    _show_flash()
    STEP_RENDERERS[session.step](session)


if __name__ == "__main__":
    main()
