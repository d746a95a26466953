"""
Quiz workflow: the step enum, its transition table and the per-session state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from services.answer_grader import FeedbackItem


class WorkflowState(str, Enum):
    API_KEY = "API_KEY"
    TEXT_INPUT = "TEXT_INPUT"
    GENERATING_TEST = "GENERATING_TEST"
    TEST_GENERATED = "TEST_GENERATED"
    ANSWERING_QUESTIONS = "ANSWERING_QUESTIONS"
    FEEDBACK = "FEEDBACK"


class WorkflowEvent(str, Enum):
    SUBMIT_CREDENTIAL = "SUBMIT_CREDENTIAL"
    GENERATE = "GENERATE"
    GENERATION_SUCCEEDED = "GENERATION_SUCCEEDED"
    GENERATION_FAILED = "GENERATION_FAILED"
    DONE_STUDYING = "DONE_STUDYING"
    GRADING_SUCCEEDED = "GRADING_SUCCEEDED"
    START_OVER = "START_OVER"
    RESET_CREDENTIAL = "RESET_CREDENTIAL"


class InvalidTransitionError(RuntimeError):
    """Raised when an event is not accepted in the current step."""


TRANSITIONS: dict[tuple[WorkflowState, WorkflowEvent], WorkflowState] = {
    (WorkflowState.API_KEY, WorkflowEvent.SUBMIT_CREDENTIAL): WorkflowState.TEXT_INPUT,
    (WorkflowState.TEXT_INPUT, WorkflowEvent.GENERATE): WorkflowState.GENERATING_TEST,
    (WorkflowState.TEXT_INPUT, WorkflowEvent.RESET_CREDENTIAL): WorkflowState.API_KEY,
    (WorkflowState.GENERATING_TEST, WorkflowEvent.GENERATION_SUCCEEDED): WorkflowState.TEST_GENERATED,
    (WorkflowState.GENERATING_TEST, WorkflowEvent.GENERATION_FAILED): WorkflowState.TEXT_INPUT,
    (WorkflowState.TEST_GENERATED, WorkflowEvent.DONE_STUDYING): WorkflowState.ANSWERING_QUESTIONS,
    (WorkflowState.ANSWERING_QUESTIONS, WorkflowEvent.GRADING_SUCCEEDED): WorkflowState.FEEDBACK,
    (WorkflowState.FEEDBACK, WorkflowEvent.START_OVER): WorkflowState.TEXT_INPUT,
}


def transition(state: WorkflowState, event: WorkflowEvent) -> WorkflowState:
    """Return the next step for *event*, or raise InvalidTransitionError."""
    try:
        return TRANSITIONS[(state, event)]
    except KeyError:
        raise InvalidTransitionError(f"{event.value} is not allowed in {state.value}") from None


@dataclass
class QuizSession:
    """Everything one user works on between screens. The credential lives in CredentialStore."""

    step: WorkflowState = WorkflowState.API_KEY
    source_text: str = ""
    questions: list[str] = field(default_factory=list)
    answers: dict[int, str] = field(default_factory=dict)
    feedback: list[FeedbackItem] = field(default_factory=list)

    def _apply(self, event: WorkflowEvent) -> None:
        self.step = transition(self.step, event)

    def submit_credential(self) -> None:
        self._apply(WorkflowEvent.SUBMIT_CREDENTIAL)

    def reset_credential(self) -> None:
        self._apply(WorkflowEvent.RESET_CREDENTIAL)

    def begin_generation(self) -> None:
        self._apply(WorkflowEvent.GENERATE)

    def generation_succeeded(self, questions: Sequence[str]) -> None:
        self._apply(WorkflowEvent.GENERATION_SUCCEEDED)
        # A new question list invalidates answers and feedback for the old one.
        self.questions = list(questions)
        self.answers = {}
        self.feedback = []

    def generation_failed(self) -> None:
        self._apply(WorkflowEvent.GENERATION_FAILED)

    def done_studying(self) -> None:
        self._apply(WorkflowEvent.DONE_STUDYING)

    def set_answer(self, index: int, value: str) -> None:
        if not 0 <= index < len(self.questions):
            raise IndexError(f"No question at index {index}")
        self.answers[index] = value

    def answer_for(self, index: int) -> str:
        return self.answers.get(index) or ""

    def grading_succeeded(self, items: Sequence[FeedbackItem]) -> None:
        self._apply(WorkflowEvent.GRADING_SUCCEEDED)
        self.feedback = list(items)

    def start_over(self) -> None:
        self._apply(WorkflowEvent.START_OVER)
        self.questions = []
        self.answers = {}
        self.feedback = []
