"""Tests for AnswerGrader: concurrent, ordered, all-or-nothing grading."""

from __future__ import annotations

import asyncio

import pytest

from services.answer_grader import AnswerGrader, FeedbackItem, build_grading_message
from services.llm_service import LLMProcessor


def _question_of(user_message: str) -> str:
    line = next(l for l in user_message.splitlines() if l.startswith("Question: "))
    return line[len("Question: "):]


class TestAnswerGrader:
    def test_output_order_matches_questions_despite_completion_order(self, monkeypatch):
        delays = {"Q1": 0.05, "Q2": 0.02, "Q3": 0.0}
        completed = []

        async def fake_ainvoke(self, system_prompt, user_message, api_key, temperature=0.7):
            q = _question_of(user_message)
            await asyncio.sleep(delays[q])
            completed.append(q)
            return f"<p>feedback for {q}</p>"

        monkeypatch.setattr(LLMProcessor, "ainvoke", fake_ainvoke)
        items = AnswerGrader().grade("text", ["Q1", "Q2", "Q3"], {0: "a1", 1: "a2", 2: "a3"}, "sk-x")

        assert completed == ["Q3", "Q2", "Q1"]
        assert items == [
            FeedbackItem("Q1", "a1", "<p>feedback for Q1</p>"),
            FeedbackItem("Q2", "a2", "<p>feedback for Q2</p>"),
            FeedbackItem("Q3", "a3", "<p>feedback for Q3</p>"),
        ]

    def test_calls_run_concurrently(self, monkeypatch):
        in_flight = 0
        peak = 0

        async def fake_ainvoke(self, system_prompt, user_message, api_key, temperature=0.7):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return "ok"

        monkeypatch.setattr(LLMProcessor, "ainvoke", fake_ainvoke)
        AnswerGrader().grade("text", ["A", "B", "C", "D"], {}, "sk-x")
        assert peak == 4

    def test_missing_answers_default_to_empty(self, monkeypatch):
        messages = []

        async def fake_ainvoke(self, system_prompt, user_message, api_key, temperature=0.7):
            messages.append(user_message)
            return "ok"

        monkeypatch.setattr(LLMProcessor, "ainvoke", fake_ainvoke)
        items = AnswerGrader().grade("text", ["Q1", "Q2"], {1: "only second"}, "sk-x")

        assert [i.answer for i in items] == ["", "only second"]
        assert "Student's answer: \n" in messages[0]

    def test_one_failure_fails_whole_batch(self, monkeypatch):
        async def fake_ainvoke(self, system_prompt, user_message, api_key, temperature=0.7):
            if _question_of(user_message) == "Q2":
                raise ValueError("Error calling the API: boom")
            return "ok"

        monkeypatch.setattr(LLMProcessor, "ainvoke", fake_ainvoke)
        with pytest.raises(ValueError, match="boom"):
            AnswerGrader().grade("text", ["Q1", "Q2", "Q3"], {}, "sk-x")

    def test_no_questions_returns_empty(self, monkeypatch):
        async def fake_ainvoke(self, *args, **kwargs):
            raise AssertionError("should not be called")

        monkeypatch.setattr(LLMProcessor, "ainvoke", fake_ainvoke)
        assert AnswerGrader().grade("text", [], {}, "sk-x") == []


class TestBuildGradingMessage:
    def test_embeds_text_question_and_answer(self):
        msg = build_grading_message("Mitochondria make ATP.", "What makes ATP?", "Mitochondria")
        assert msg.startswith("Based on the following text:\n\nMitochondria make ATP.\n\n")
        assert "Question: What makes ATP?\n" in msg
        assert "Student's answer: Mitochondria\n" in msg
        assert "structure the reply as HTML" in msg
