"""Tests for question splitting and QuizGenerator (LLM stubbed)."""

from __future__ import annotations

import pytest

import services.quiz_generator as qg_mod
from services.llm_service import LLMProcessor
from services.quiz_generator import QuestionGenerationError, QuizGenerator, split_questions


class TestSplitQuestions:
    def test_blank_lines_dropped_order_kept(self):
        assert split_questions("Q1\n\nQ2\nQ3") == ["Q1", "Q2", "Q3"]

    def test_whitespace_only_lines_dropped(self):
        assert split_questions("Q1\n   \n\t\nQ2") == ["Q1", "Q2"]

    def test_enumeration_markers_kept(self):
        raw = "1. What is DNA?\n2. What is RNA?"
        assert split_questions(raw) == ["1. What is DNA?", "2. What is RNA?"]

    def test_windows_line_endings(self):
        assert split_questions("A?\r\nB?\r\n") == ["A?", "B?"]

    def test_empty_and_none(self):
        assert split_questions("") == []
        assert split_questions(None) == []  # type: ignore[arg-type]


class TestQuizGenerator:
    def test_sends_fixed_prompts_with_text(self, monkeypatch):
        calls = []

        def fake_invoke(self, system_prompt, user_message, api_key, temperature=0.7):
            calls.append((system_prompt, user_message, api_key))
            return "What is a cell?\n\nWhat is a nucleus?"

        monkeypatch.setattr(LLMProcessor, "invoke", fake_invoke)
        questions = QuizGenerator().generate_questions("Cells have a nucleus.", api_key="sk-x")

        assert questions == ["What is a cell?", "What is a nucleus?"]
        system_prompt, user_message, api_key = calls[0]
        assert system_prompt == qg_mod.QUESTION_SYSTEM_PROMPT
        assert user_message.endswith("explanations:\n\nCells have a nucleus.")
        assert api_key == "sk-x"

    def test_text_with_braces_is_not_formatted(self, monkeypatch):
        seen = []
        monkeypatch.setattr(
            LLMProcessor, "invoke", lambda self, s, u, api_key, temperature=0.7: seen.append(u) or "Q?"
        )
        QuizGenerator().generate_questions("f(x) = {x | x > 0}", api_key="sk-x")
        assert seen[0].endswith("f(x) = {x | x > 0}")

    def test_empty_model_output_raises(self, monkeypatch):
        monkeypatch.setattr(LLMProcessor, "invoke", lambda self, s, u, api_key, temperature=0.7: "\n \n")
        with pytest.raises(QuestionGenerationError):
            QuizGenerator().generate_questions("text", api_key="sk-x")

    def test_remote_failure_propagates(self, monkeypatch):
        def boom(self, s, u, api_key, temperature=0.7):
            raise ValueError("Error calling the API: down")

        monkeypatch.setattr(LLMProcessor, "invoke", boom)
        with pytest.raises(ValueError, match="down"):
            QuizGenerator().generate_questions("text", api_key="sk-x")
