"""
Answer grading: one concurrent LLM evaluation per question.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Mapping, Sequence

from services.llm_service import LLMProcessor

LOGGER = logging.getLogger("testme.grader")

GRADING_SYSTEM_PROMPT = (
    "You are a helpful assistant that evaluates answers to test questions based on given text."
)

GRADING_USER_PROMPT = (
    "Based on the following text:\n\n{text}\n\n"
    "Question: {question}\n"
    "Student's answer: {answer}\n\n"
    "Evaluate the student's answer. Provide brief feedback on what they got right and what they might "
    "have missed. Be encouraging but point out any inaccuracies. You're talking to the student directly, "
    "so use a conversational tone. Use bullet points to list the key points and feedback. you can "
    "structure the reply as HTML. Just give the evualation, nothing else."
)


@dataclass(frozen=True)
class FeedbackItem:
    question: str
    answer: str
    feedback: str


def build_grading_message(source_text: str, question: str, answer: str) -> str:
    return GRADING_USER_PROMPT.format(text=source_text, question=question, answer=answer)


class AnswerGrader:
    """Grades every answer concurrently; the batch succeeds or fails as a whole."""

    def __init__(self) -> None:
        self._llm = LLMProcessor()

    async def _grade_one(self, source_text: str, question: str, answer: str, api_key: str) -> FeedbackItem:
        feedback = await self._llm.ainvoke(
            GRADING_SYSTEM_PROMPT,
            build_grading_message(source_text, question, answer),
            api_key=api_key,
        )
        return FeedbackItem(question=question, answer=answer, feedback=feedback)

    async def agrade(
        self,
        source_text: str,
        questions: Sequence[str],
        answers: Mapping[int, str],
        api_key: str,
    ) -> list[FeedbackItem]:
        """
        Dispatch all evaluations at once and wait for every one.

        Results are collected by position, so feedback[i] always belongs to
        questions[i]. The first failure propagates and no feedback is returned.
        """
        tasks = [
            self._grade_one(source_text, question, answers.get(index) or "", api_key)
            for index, question in enumerate(questions)
        ]
        results = await asyncio.gather(*tasks)
        LOGGER.info("Graded %d answers", len(results))
        return list(results)

    def grade(
        self,
        source_text: str,
        questions: Sequence[str],
        answers: Mapping[int, str],
        api_key: str,
    ) -> list[FeedbackItem]:
        """
        Grade a full answer sheet.

        Args:
            source_text: The study text the questions were generated from.
            questions: Questions in display order.
            answers: Answers keyed by question index; missing answers count as "".
            api_key: OpenAI API key.

        Returns:
            One FeedbackItem per question, in question order.

        Raises:
            ValueError: If any single evaluation call fails.
        """
        return asyncio.run(self.agrade(source_text, questions, answers, api_key))
