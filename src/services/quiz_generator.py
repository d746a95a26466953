"""
Question generation: ask the LLM for open-ended questions, one per line.
"""

from __future__ import annotations

import logging

from services.llm_service import LLMProcessor

LOGGER = logging.getLogger("testme.generator")

QUESTION_SYSTEM_PROMPT = "You are a helpful assistant that generates test questions based on given text."

QUESTION_USER_PROMPT = (
    "Generate 1 or more (depending on length of text)open-ended questions (relatively small in size) "
    "with short answers and based on the following text. The questions should require minimal prompting "
    "and test understanding of the key concepts. Only return the questions, no need for answers or "
    "explanations:\n\n{text}"
)


class QuestionGenerationError(ValueError):
    """Raised when the model returns no usable question lines."""


def split_questions(raw: str) -> list[str]:
    """Split model output into questions: one per non-blank line, text kept as-is."""
    return [line for line in (raw or "").splitlines() if line.strip()]


class QuizGenerator:
    """Generates open-ended questions from study text via LLM."""

    def __init__(self) -> None:
        self._llm = LLMProcessor()

    def generate_questions(self, text: str, api_key: str) -> list[str]:
        """
        Generate questions grounded in the given study text.

        Args:
            text: Study text (typed or extracted from a PDF).
            api_key: OpenAI API key.

        Returns:
            Ordered, non-empty list of question strings.

        Raises:
            ValueError: If the API call fails.
            QuestionGenerationError: If the response contains no questions.
        """
        raw = self._llm.invoke(
            QUESTION_SYSTEM_PROMPT,
            QUESTION_USER_PROMPT.format(text=text),
            api_key=api_key,
        )
        questions = split_questions(raw)
        if not questions:
            raise QuestionGenerationError("No questions were generated. Try adding more study text.")
        LOGGER.info("Generated %d questions from %d characters", len(questions), len(text))
        return questions
