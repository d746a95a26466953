"""Offline self-check for local storage, workflow and question parsing."""

from __future__ import annotations

import sqlite3
import sys
import tempfile
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

import services.credential_store as credential_store
import utils.metrics as metrics
from services.quiz_generator import split_questions
from services.workflow import QuizSession, WorkflowState


def check_credential_round_trip(db_path: Path) -> None:
    store = credential_store.CredentialStore(key="selfcheck_key")
    assert store.load() is None, "fresh store should be empty"
    try:
        store.submit("   ")
    except ValueError:
        pass
    else:
        raise AssertionError("blank credential accepted")
    store.submit("sk-selfcheck")
    assert store.load() == "sk-selfcheck", "credential round trip failed"

    conn = sqlite3.connect(db_path)
    try:
        rows = conn.execute("SELECT key FROM credentials").fetchall()
        assert [r[0] for r in rows] == ["selfcheck_key"], f"unexpected credential rows: {rows}"
    finally:
        conn.close()

    store.clear()
    assert store.load() is None, "credential clear failed"


def check_metrics(db_path: Path) -> None:
    metrics.log_metric("generate", 0.5, questions=3)
    summary = metrics.get_metrics_summary()
    assert summary.get("generate", {}).get("total") == 1, f"metrics summary wrong: {summary}"


def check_workflow() -> None:
    session = QuizSession()
    session.submit_credential()
    session.source_text = "Photosynthesis converts light into chemical energy."
    session.begin_generation()
    session.generation_succeeded(split_questions("What is photosynthesis?\n\nWhat does it produce?"))
    assert session.questions == ["What is photosynthesis?", "What does it produce?"]
    session.done_studying()
    session.set_answer(0, "Turning light into sugar")
    assert session.step == WorkflowState.ANSWERING_QUESTIONS
    session.grading_succeeded([])
    session.start_over()
    assert session.step == WorkflowState.TEXT_INPUT
    assert session.source_text and not session.questions and not session.answers


def main() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        db_path = Path(tmp) / "selfcheck.db"
        credential_store.DB_PATH = db_path
        metrics.DB_PATH = db_path
        check_credential_round_trip(db_path)
        check_metrics(db_path)
    check_workflow()
    print("self_check: OK")


if __name__ == "__main__":
    main()
