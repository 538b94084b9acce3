"""Navigation through the transition / question / explanation sequence.

Every quiz is walked as a linear sequence of steps. For each question slot
``i`` the sequence may contain up to three steps, in this order:

    transition(i)   only if the quiz has a transition at position ``i``
    question(i)     always
    explanation(i)  only if the question has explanation text and is answered

Whether a transition or explanation step exists is derived from the quiz and
the answer store on every call; nothing about visited steps is cached.

Two attempt flags restrict movement:

* test mode locks every answered question the learner has moved past
  (the "answered set"); locked questions cannot be revisited.
* exam mode (test mode plus ``settings.exam_mode``) forbids any backward
  movement at all.

Immediate-feedback quizzes grade each question as it is answered:

* Next waits on a question until it has been graded;
* explanation steps are never shown;
* jumps can only go back, never ahead of the current question;
* Last only works once every question has been graded.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import ClassVar, Union

from quiz_player.core.answers import AnswerStore
from quiz_player.core.models import Quiz


class PositionKind(str, Enum):
    """Serialized names of the three step kinds."""

    TRANSITION = "transition"
    QUESTION = "question"
    EXPLANATION = "explanation"


@dataclass(frozen=True, slots=True)
class TransitionPosition:
    index: int
    kind: ClassVar[PositionKind] = PositionKind.TRANSITION


@dataclass(frozen=True, slots=True)
class QuestionPosition:
    index: int
    kind: ClassVar[PositionKind] = PositionKind.QUESTION


@dataclass(frozen=True, slots=True)
class ExplanationPosition:
    index: int
    kind: ClassVar[PositionKind] = PositionKind.EXPLANATION


NavigationPosition = Union[TransitionPosition, QuestionPosition, ExplanationPosition]

_POSITION_TYPES: dict[PositionKind, type] = {
    PositionKind.TRANSITION: TransitionPosition,
    PositionKind.QUESTION: QuestionPosition,
    PositionKind.EXPLANATION: ExplanationPosition,
}


def position_to_dict(position: NavigationPosition) -> dict[str, object]:
    return {"kind": position.kind.value, "index": position.index}


def position_from_dict(raw: dict[str, object]) -> NavigationPosition:
    """Decode ``{"kind": ..., "index": ...}``; raises ``ValueError`` on bad input."""
    kind = PositionKind(raw["kind"])
    index = raw["index"]
    if isinstance(index, bool) or not isinstance(index, int):
        raise ValueError(f"Position index must be an integer, got {index!r}")
    return _POSITION_TYPES[kind](index)


class NavigationResult(Enum):
    """Outcome of a navigation request."""

    MOVED = auto()
    IGNORED = auto()
    END_REACHED = auto()


class NavigationStateMachine:
    """Owns the single navigation cursor of an attempt."""

    def __init__(
        self,
        quiz: Quiz,
        answers: AnswerStore,
        *,
        is_test_mode: bool = False,
        is_graded: Callable[[str], bool] | None = None,
    ) -> None:
        self._quiz = quiz
        self._answers = answers
        self._is_test_mode = is_test_mode
        self._is_graded = is_graded or (lambda _question_id: False)
        self._answered_set: set[int] = set()
        self._position: NavigationPosition | None = self.start_position()

    # --- State -------------------------------------------------------------

    @property
    def position(self) -> NavigationPosition | None:
        return self._position

    @property
    def question_count(self) -> int:
        return len(self._quiz.questions)

    @property
    def is_test_mode(self) -> bool:
        return self._is_test_mode

    @property
    def is_exam_locked(self) -> bool:
        """True when backward movement is forbidden altogether."""
        return self._is_test_mode and self._quiz.settings.exam_mode

    @property
    def is_immediate_feedback(self) -> bool:
        return self._quiz.settings.is_immediate_feedback

    @property
    def answered_set(self) -> frozenset[int]:
        return frozenset(self._answered_set)

    @property
    def current_index(self) -> int:
        return self._position.index if self._position is not None else 0

    def is_locked(self, index: int) -> bool:
        """Whether question ``index`` can no longer be opened."""
        if not self._is_test_mode:
            return False
        if index in self._answered_set:
            return True
        return self.is_exam_locked and index < self.current_index

    def start_position(self) -> NavigationPosition | None:
        if not self._quiz.questions:
            return None
        if self._quiz.transition_at(0) is not None:
            return TransitionPosition(0)
        return QuestionPosition(0)

    def explanation_reachable(self, index: int) -> bool:
        if self.is_immediate_feedback:
            return False
        question = self._quiz.questions[index]
        return question.has_explanation and self._answers.is_answered(question.question.id)

    def is_question_graded(self, index: int) -> bool:
        return self._is_graded(self._quiz.questions[index].question.id)

    def all_questions_graded(self) -> bool:
        return all(self.is_question_graded(index) for index in range(self.question_count))

    def is_awaiting_grade(self) -> bool:
        """True when Next is held back until the current question is graded."""
        position = self._position
        return (
            self.is_immediate_feedback
            and isinstance(position, QuestionPosition)
            and not self.is_question_graded(position.index)
        )

    def can_go_last(self) -> bool:
        if self._position is None or self.is_last_step():
            return False
        return not self.is_immediate_feedback or self.all_questions_graded()

    def is_valid(self, position: NavigationPosition) -> bool:
        """Check ``position`` against the current quiz and answers."""
        if not 0 <= position.index < self.question_count:
            return False
        if isinstance(position, TransitionPosition):
            return self._quiz.transition_at(position.index) is not None
        if isinstance(position, ExplanationPosition):
            return self.explanation_reachable(position.index)
        return isinstance(position, QuestionPosition)

    def restore(
        self,
        position: NavigationPosition | None,
        answered_set: set[int] | None = None,
    ) -> bool:
        """Resume at ``position``; fall back to the start when it is not valid."""
        if answered_set is not None:
            self._answered_set = {i for i in answered_set if 0 <= i < self.question_count}
        if position is not None and self.is_valid(position):
            self._position = position
            return True
        self._position = self.start_position()
        return False

    # --- Moves -------------------------------------------------------------

    def next(self) -> NavigationResult:
        position = self._position
        if position is None:
            return NavigationResult.IGNORED
        if isinstance(position, TransitionPosition):
            return self._move_to(QuestionPosition(position.index))
        if isinstance(position, QuestionPosition):
            if self.is_awaiting_grade():
                return NavigationResult.IGNORED
            if self.explanation_reachable(position.index):
                return self._move_to(ExplanationPosition(position.index))
            return self._advance_from(position.index)
        if isinstance(position, ExplanationPosition):
            return self._advance_from(position.index)
        raise TypeError(f"Unknown position type: {type(position).__name__}")

    def previous(self) -> NavigationResult:
        target = self.previous_target()
        if target is None:
            return NavigationResult.IGNORED
        return self._move_to(target)

    def first(self) -> NavigationResult:
        target = self.first_target()
        if target is None:
            return NavigationResult.IGNORED
        return self._move_to(target)

    def last(self) -> NavigationResult:
        if self._position is None:
            return NavigationResult.IGNORED
        if self.is_immediate_feedback and not self.all_questions_graded():
            return NavigationResult.IGNORED
        last_index = self.question_count - 1
        if self.explanation_reachable(last_index):
            target: NavigationPosition = ExplanationPosition(last_index)
        else:
            target = QuestionPosition(last_index)
        self._commit_forward(self.current_index, last_index)
        return self._move_to(target)

    def jump_to_question(self, index: int) -> NavigationResult:
        if self._position is None or not 0 <= index < self.question_count:
            return NavigationResult.IGNORED
        if self._is_test_mode and index in self._answered_set:
            return NavigationResult.IGNORED
        if self.is_exam_locked and index < self.current_index:
            return NavigationResult.IGNORED
        if self.is_immediate_feedback and index > self.current_index:
            return NavigationResult.IGNORED
        self._commit_forward(self.current_index, index)
        return self._move_to(QuestionPosition(index))

    # --- Targets (no side effects) ------------------------------------------

    def previous_target(self) -> NavigationPosition | None:
        position = self._position
        if position is None or self.is_exam_locked:
            return None
        if isinstance(position, ExplanationPosition):
            return QuestionPosition(position.index)
        if isinstance(position, QuestionPosition):
            if self._quiz.transition_at(position.index) is not None:
                return TransitionPosition(position.index)
            if position.index == 0:
                return None
            return self._backward_into(position.index - 1)
        if isinstance(position, TransitionPosition):
            if position.index == 0:
                return None
            return self._backward_into(position.index - 1)
        raise TypeError(f"Unknown position type: {type(position).__name__}")

    def first_target(self) -> NavigationPosition | None:
        if self._position is None or self.is_exam_locked:
            return None
        if self._is_test_mode and 0 in self._answered_set:
            return None
        return self.start_position()

    def is_last_step(self) -> bool:
        """True when Next would reach the end of the quiz."""
        position = self._position
        if position is None or position.index != self.question_count - 1:
            return False
        if isinstance(position, ExplanationPosition):
            return True
        return isinstance(position, QuestionPosition) and not self.explanation_reachable(position.index)

    # --- Internals -----------------------------------------------------------

    def _advance_from(self, index: int) -> NavigationResult:
        if index >= self.question_count - 1:
            return NavigationResult.END_REACHED
        next_index = index + 1
        self._commit_forward(index, next_index)
        if self._quiz.transition_at(next_index) is not None:
            return self._move_to(TransitionPosition(next_index))
        return self._move_to(QuestionPosition(next_index))

    def _backward_into(self, index: int) -> NavigationPosition | None:
        if self._is_test_mode and index in self._answered_set:
            return None
        if self.explanation_reachable(index):
            return ExplanationPosition(index)
        return QuestionPosition(index)

    def _commit_forward(self, from_index: int, to_index: int) -> None:
        if not self._is_test_mode:
            return
        for index in range(from_index, to_index):
            question_id = self._quiz.questions[index].question.id
            if self._answers.is_answered(question_id):
                self._answered_set.add(index)

    def _move_to(self, target: NavigationPosition) -> NavigationResult:
        if target == self._position:
            return NavigationResult.IGNORED
        self._position = target
        return NavigationResult.MOVED


class ReviewNavigator:
    """Question-only cursor used while reviewing submitted results."""

    def __init__(self, question_count: int, index: int = 0) -> None:
        self._question_count = question_count
        self._index = max(0, min(index, question_count - 1)) if question_count else 0

    @property
    def index(self) -> int:
        return self._index

    @property
    def position(self) -> QuestionPosition:
        return QuestionPosition(self._index)

    def can_go_previous(self) -> bool:
        return self._index > 0

    def can_go_next(self) -> bool:
        return self._index < self._question_count - 1

    def previous(self) -> NavigationResult:
        return self.jump_to(self._index - 1)

    def next(self) -> NavigationResult:
        return self.jump_to(self._index + 1)

    def first(self) -> NavigationResult:
        return self.jump_to(0)

    def last(self) -> NavigationResult:
        return self.jump_to(self._question_count - 1)

    def jump_to(self, index: int) -> NavigationResult:
        if self._question_count == 0:
            return NavigationResult.IGNORED
        clamped = max(0, min(index, self._question_count - 1))
        if clamped == self._index:
            return NavigationResult.IGNORED
        self._index = clamped
        return NavigationResult.MOVED
