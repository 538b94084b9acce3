"""Wire schemas shared by the player and the scoring service."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from quiz_player.core.models import (
    AnswerOption,
    FeedbackMode,
    MatchingPair,
    QuestionContent,
    QuestionType,
    Quiz,
    QuizQuestion,
    QuizSettings,
    QuizTransition,
)


class WireModel(BaseModel):
    """Base model using camelCase names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OptionPayload(WireModel):
    id: str
    text: str


class PairPayload(WireModel):
    id: str
    left: str
    right: str


class QuestionContentPayload(WireModel):
    id: str
    title: str = ""
    content: str = ""
    type: QuestionType
    image_url: str | None = None
    options: list[OptionPayload] | None = None
    pairs: list[PairPayload] | None = None


class QuizQuestionPayload(WireModel):
    id: str
    order: int = 0
    explanation: str | None = None
    question: QuestionContentPayload


class TransitionPayload(WireModel):
    id: str
    position: int = Field(ge=0)
    content: str


class SettingsPayload(WireModel):
    time_limit_minutes: int | None = None
    randomize_questions: bool = False
    show_correct_answers: bool = True
    max_attempts: int = 0
    passing_score: float = 0.0
    exam_mode: bool = False
    feedback_mode: FeedbackMode = FeedbackMode.ON_SUBMIT


class QuizPayload(WireModel):
    """Player view of a quiz. Carries no correctness information."""

    id: str
    title: str = ""
    questions: list[QuizQuestionPayload] = Field(default_factory=list)
    transitions: list[TransitionPayload] = Field(default_factory=list)
    settings: SettingsPayload = Field(default_factory=SettingsPayload)

    def to_quiz(self) -> Quiz:
        """Build the immutable quiz aggregate, questions sorted by ``order``."""
        questions = tuple(
            QuizQuestion(
                id=item.id,
                order=item.order,
                explanation=item.explanation,
                question=QuestionContent(
                    id=item.question.id,
                    title=item.question.title,
                    content=item.question.content,
                    type=item.question.type,
                    image_url=item.question.image_url,
                    options=tuple(AnswerOption(id=o.id, text=o.text) for o in item.question.options or []),
                    pairs=tuple(
                        MatchingPair(id=p.id, left=p.left, right=p.right)
                        for p in item.question.pairs or []
                    ),
                ),
            )
            for item in sorted(self.questions, key=lambda q: q.order)
        )
        transitions = tuple(
            QuizTransition(id=t.id, position=t.position, content=t.content) for t in self.transitions
        )
        settings = QuizSettings(**self.settings.model_dump())
        return Quiz(
            id=self.id,
            title=self.title,
            questions=questions,
            transitions=transitions,
            settings=settings,
        )


class AttemptStarted(WireModel):
    attempt_id: str
    quiz_id: str
    started_at: datetime


class SubmissionRequest(WireModel):
    answers: dict[str, str | dict[str, str]] = Field(default_factory=dict)
    time_spent_seconds: int | None = None


class QuestionSubmissionRequest(WireModel):
    """A single answer graded on its own in immediate-feedback quizzes."""

    answer: str | dict[str, str]


class CorrectAnswer(WireModel):
    id: str
    content: str | dict[str, str]


class QuestionResult(WireModel):
    question_id: str
    user_answer: str | None = None
    correct_answers: list[CorrectAnswer] = Field(default_factory=list)
    is_correct: bool = False
    points_earned: float = 0.0
    points_possible: float = 0.0


class SubmissionResult(WireModel):
    """Scored attempt returned by the scoring service."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    attempt_id: str
    quiz_id: str
    score: float
    total_points: float
    percentage: float
    results: list[QuestionResult] = Field(default_factory=list)
    time_spent_seconds: int = 0

    def result_for(self, question_id: str) -> QuestionResult | None:
        return next((r for r in self.results if r.question_id == question_id), None)
