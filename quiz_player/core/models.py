"""Domain models for the quiz player."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class QuestionType(str, Enum):
    """Question kinds understood by the player and the scoring service."""

    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    MATCHING_PAIRS = "matching_pairs"
    FREE_TEXT = "free_text"
    SHORT_ANSWER = "short_answer"
    LONG_ANSWER = "long_answer"
    CODING = "coding"

    @property
    def is_choice(self) -> bool:
        return self in (QuestionType.MULTIPLE_CHOICE, QuestionType.TRUE_FALSE)

    @property
    def is_text(self) -> bool:
        return self in TEXT_QUESTION_TYPES


TEXT_QUESTION_TYPES = frozenset(
    {
        QuestionType.FREE_TEXT,
        QuestionType.SHORT_ANSWER,
        QuestionType.LONG_ANSWER,
        QuestionType.CODING,
    }
)


class FeedbackMode(str, Enum):
    """When the learner sees whether an answer was right."""

    ON_SUBMIT = "on_submit"
    IMMEDIATE = "immediate"


@dataclass(frozen=True, slots=True)
class AnswerOption:
    """Selectable choice of a multiple-choice or true/false question."""

    id: str
    text: str


@dataclass(frozen=True, slots=True)
class MatchingPair:
    """One left/right pair of a matching question."""

    id: str
    left: str
    right: str


@dataclass(frozen=True, slots=True)
class QuestionContent:
    """The question itself, shared by every quiz that includes it."""

    id: str
    title: str
    content: str
    type: QuestionType
    image_url: str | None = None
    options: tuple[AnswerOption, ...] = ()
    pairs: tuple[MatchingPair, ...] = ()

    def option_by_id(self, option_id: str) -> AnswerOption | None:
        return next((option for option in self.options if option.id == option_id), None)


@dataclass(frozen=True, slots=True)
class QuizQuestion:
    """A question slot inside a quiz, with its position and optional explanation."""

    id: str
    order: int
    question: QuestionContent
    explanation: str | None = None

    @property
    def question_id(self) -> str:
        return self.question.id

    @property
    def has_explanation(self) -> bool:
        return bool(self.explanation and self.explanation.strip())


@dataclass(frozen=True, slots=True)
class QuizTransition:
    """Informational block shown before the question at ``position``."""

    id: str
    position: int
    content: str


@dataclass(frozen=True, slots=True)
class QuizSettings:
    """Per-quiz behaviour switches."""

    time_limit_minutes: int | None = None
    randomize_questions: bool = False
    show_correct_answers: bool = True
    max_attempts: int = 0
    passing_score: float = 0.0
    exam_mode: bool = False
    feedback_mode: FeedbackMode = FeedbackMode.ON_SUBMIT

    @property
    def is_immediate_feedback(self) -> bool:
        return self.feedback_mode is FeedbackMode.IMMEDIATE

    @property
    def time_limit_seconds(self) -> int | None:
        if not self.time_limit_minutes or self.time_limit_minutes <= 0:
            return None
        return self.time_limit_minutes * 60


@dataclass(frozen=True, slots=True)
class Quiz:
    """Read-only quiz aggregate consumed by the player."""

    id: str
    title: str
    questions: tuple[QuizQuestion, ...]
    transitions: tuple[QuizTransition, ...] = ()
    settings: QuizSettings = field(default_factory=QuizSettings)

    def transition_at(self, index: int) -> QuizTransition | None:
        """Return the transition preceding question ``index``, if any."""
        return next((t for t in self.transitions if t.position == index), None)

    def question_by_id(self, question_id: str) -> QuizQuestion | None:
        return next((q for q in self.questions if q.question.id == question_id), None)

    def question_ids(self) -> list[str]:
        return [q.question.id for q in self.questions]
