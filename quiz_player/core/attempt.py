"""A single learner's in-progress attempt at a quiz.

``QuizAttempt`` is the facade the UI talks to. It owns the answer store, the
navigation cursor, the countdown and the local snapshot, and turns the
stored answers into a submission once the learner (or the timer) submits.
Requests to the scoring service run on a ``BackgroundRunner``; their
outcome is applied when the Qt event loop delivers it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum, auto
import logging
import random
import time

from quiz_player.constants.quiz_constants import (
    ANSWER_SUBMIT_FAILED_MESSAGE,
    NO_ATTEMPT_MESSAGE,
    SUBMIT_FAILED_MESSAGE,
    SUBMIT_FINAL_WARNING,
    UNANSWERED_WARNING,
)
from quiz_player.core.answers import AnswerStore, AnswerValue, WireAnswer
from quiz_player.core.background import BackgroundRunner
from quiz_player.core.models import Quiz, QuizQuestion
from quiz_player.core.navigation import (
    ExplanationPosition,
    NavigationPosition,
    NavigationResult,
    NavigationStateMachine,
    TransitionPosition,
)
from quiz_player.core.persistence import PersistenceLayer, ProgressSnapshot, SavedPosition
from quiz_player.core.results import QuestionReview, QuestionReviewer, ResultsPresenter, ReviewStatus, review_status
from quiz_player.core.schemas import QuestionResult, SubmissionResult
from quiz_player.core.submission import (
    ScoringServiceError,
    SubmissionClient,
    build_submission_payload,
    encode_answer,
)
from quiz_player.core.timer import TimerController, resolve_start_seconds

logger = logging.getLogger(__name__)


class ShortcutKey(Enum):
    HOME = auto()
    END = auto()
    LEFT = auto()
    RIGHT = auto()


@dataclass(slots=True)
class AttemptCallbacks:
    """Notifications raised by the attempt; every hook is optional."""

    on_change: Callable[[], None] | None = None
    on_tick: Callable[[int], None] | None = None
    on_time_up: Callable[[], None] | None = None
    on_submit_requested: Callable[[], None] | None = None
    on_submitted: Callable[[SubmissionResult], None] | None = None
    on_error: Callable[[str], None] | None = None
    on_question_graded: Callable[[str, QuestionResult], None] | None = None


@dataclass(slots=True)
class SidebarItem:
    index: int
    number: int
    is_current: bool
    is_answered: bool
    is_locked: bool
    status: ReviewStatus | None = None


def _is_permutation(candidate: list[str] | None, expected: list[str]) -> bool:
    return candidate is not None and sorted(candidate) == sorted(expected) and len(set(candidate)) == len(candidate)


class QuizAttempt:
    """Runs one attempt from mount to scored review."""

    def __init__(
        self,
        quiz: Quiz,
        persistence: PersistenceLayer,
        *,
        attempt_id: str | None = None,
        client: SubmissionClient | None = None,
        is_test_mode: bool = False,
        callbacks: AttemptCallbacks | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
        runner: BackgroundRunner | None = None,
    ) -> None:
        self._source_quiz = quiz
        self._persistence = persistence
        self._attempt_id = attempt_id
        self._client = client
        self._is_test_mode = is_test_mode
        self._callbacks = callbacks or AttemptCallbacks()
        self._rng = rng or random.Random()
        self._clock = clock
        self._runner = runner or BackgroundRunner()

        self._submitting = False
        self._graded: dict[str, QuestionResult] = {}
        self._grading: set[str] = set()
        self._disposed = False
        self._presenter: ResultsPresenter | None = None

        snapshot = self._persistence.load()
        if snapshot is not None:
            logger.info("Resuming quiz %s from snapshot saved at %s", quiz.id, snapshot.last_saved)

        self._quiz, order_honoured = self._arrange_quiz(quiz, snapshot)
        self._answers = AnswerStore(self._quiz.question_ids())
        self._reviewer = QuestionReviewer(self._quiz)
        self._navigation = NavigationStateMachine(
            self._quiz,
            self._answers,
            is_test_mode=is_test_mode,
            is_graded=self._graded.__contains__,
        )

        if snapshot is not None:
            known_ids = set(self._quiz.question_ids())
            self._answers.load_wire(
                {question_id: raw for question_id, raw in snapshot.answers.items() if question_id in known_ids}
            )
            self._graded.update(
                {
                    question_id: result
                    for question_id, result in snapshot.graded_questions.items()
                    if question_id in known_ids
                }
            )
            position = snapshot.current_position.to_position() if order_honoured else None
            locked = set(snapshot.locked_questions) if order_honoured else set()
            if not self._navigation.restore(position, locked) and order_honoured:
                logger.warning("Stored position %s is no longer valid; starting over", snapshot.current_position)

        self._time_spent_base = snapshot.time_spent_seconds if snapshot is not None else 0
        self._started_at = self._clock()

        start_seconds = resolve_start_seconds(
            self._quiz.settings,
            snapshot.time_remaining if snapshot is not None else None,
            has_snapshot=snapshot is not None,
            is_test_mode=is_test_mode,
        )
        self._timer = TimerController(
            start_seconds,
            on_tick=self._handle_tick,
            on_expired=self._handle_time_up,
        )

        if self._quiz.questions:
            self.save()

    # --- Lifecycle -------------------------------------------------------------

    def start(self) -> None:
        """Start the countdown, if the quiz has a time limit."""
        if self._disposed or self.is_submitted:
            return
        self._timer.start()

    def dispose(self) -> None:
        """Stop the countdown and drop every callback."""
        self._timer.dispose()
        self._disposed = True
        self._callbacks = AttemptCallbacks()

    # --- Read-only state ---------------------------------------------------------

    @property
    def quiz(self) -> Quiz:
        """The quiz in the order this attempt presents it."""
        return self._quiz

    @property
    def attempt_id(self) -> str | None:
        return self._attempt_id

    @property
    def answers(self) -> AnswerStore:
        return self._answers

    @property
    def navigation(self) -> NavigationStateMachine:
        return self._navigation

    @property
    def timer(self) -> TimerController:
        return self._timer

    @property
    def is_test_mode(self) -> bool:
        return self._is_test_mode

    @property
    def is_exam_mode(self) -> bool:
        return self._navigation.is_exam_locked

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    @property
    def is_submitted(self) -> bool:
        return self._presenter is not None

    @property
    def is_immediate_feedback(self) -> bool:
        return self._quiz.settings.is_immediate_feedback

    @property
    def results(self) -> ResultsPresenter | None:
        return self._presenter

    @property
    def time_remaining(self) -> int | None:
        return self._timer.remaining

    @property
    def position(self) -> NavigationPosition | None:
        if self._presenter is not None:
            return self._presenter.navigator.position
        return self._navigation.position

    @property
    def current_index(self) -> int:
        position = self.position
        return position.index if position is not None else 0

    @property
    def current_question(self) -> QuizQuestion | None:
        if not self._quiz.questions:
            return None
        return self._quiz.questions[self.current_index]

    def answered_count(self) -> int:
        return self._answers.answered_count()

    def progress_percent(self) -> float:
        return self._answers.progress_percent()

    def time_spent_seconds(self) -> int:
        return self._time_spent_base + int(self._clock() - self._started_at)

    def is_question_locked(self, index: int) -> bool:
        return self._navigation.is_locked(index)

    def is_answer_locked(self, index: int) -> bool:
        """Whether the answer to question ``index`` can no longer be changed."""
        question_id = self._quiz.questions[index].question.id
        return self._navigation.is_locked(index) or question_id in self._graded or question_id in self._grading

    def is_grading(self, question_id: str) -> bool:
        return question_id in self._grading

    def question_result(self, question_id: str) -> QuestionResult | None:
        """Result of a question graded on its own in an immediate-feedback quiz."""
        return self._graded.get(question_id)

    def question_feedback(self, index: int) -> QuestionReview | None:
        result = self._graded.get(self._quiz.questions[index].question.id)
        if result is None:
            return None
        return self._reviewer.review(index, result)

    def can_go_next(self) -> bool:
        if self._presenter is not None:
            return self._presenter.navigator.can_go_next()
        return self._navigation.position is not None and not self._navigation.is_awaiting_grade()

    def can_go_last(self) -> bool:
        if self._presenter is not None:
            return self._presenter.navigator.can_go_next()
        return self._navigation.can_go_last()

    def can_go_previous(self) -> bool:
        if self._presenter is not None:
            return self._presenter.navigator.can_go_previous()
        return self._navigation.previous_target() is not None

    def can_go_first(self) -> bool:
        if self._presenter is not None:
            return self._presenter.navigator.can_go_previous()
        target = self._navigation.first_target()
        return target is not None and target != self._navigation.position

    def quiz_title(self) -> str:
        if self._quiz.title:
            return self._quiz.title
        if self._quiz.questions:
            first = self._quiz.questions[0].question
            return first.title or first.content or "Quiz"
        return "Quiz"

    def position_title(self) -> str:
        position = self.position
        if position is None:
            return ""
        question = self._quiz.questions[position.index]
        if isinstance(position, TransitionPosition):
            return "Quiz Introduction" if position.index == 0 else "Information"
        if isinstance(position, ExplanationPosition):
            return f"{question.question.title} - Explanation"
        return question.question.title

    def submit_confirmation_text(self) -> str:
        answered = self.answered_count()
        total = len(self._quiz.questions)
        lines = [f"You have answered {answered} of {total} questions."]
        if self._is_test_mode and answered < total:
            lines.append(UNANSWERED_WARNING)
        lines.append(SUBMIT_FINAL_WARNING)
        return "\n".join(lines)

    def sidebar_items(self) -> list[SidebarItem]:
        items: list[SidebarItem] = []
        for index, question in enumerate(self._quiz.questions):
            if self._presenter is not None:
                status = self._presenter.status_for(index)
            elif question.question.id in self._graded:
                status = review_status(self._graded[question.question.id])
            else:
                status = None
            items.append(
                SidebarItem(
                    index=index,
                    number=index + 1,
                    is_current=index == self.current_index,
                    is_answered=self._answers.is_answered(question.question.id),
                    is_locked=self._presenter is None and self._navigation.is_locked(index),
                    status=status,
                )
            )
        return items

    # --- Handlers ----------------------------------------------------------------

    def next(self) -> NavigationResult:
        if self._presenter is not None:
            return self._after_move(self._presenter.navigator.next())
        result = self._navigation.next()
        if result is NavigationResult.END_REACHED:
            if self._callbacks.on_submit_requested is not None:
                self._callbacks.on_submit_requested()
            return result
        return self._after_move(result)

    def previous(self) -> NavigationResult:
        if self._presenter is not None:
            return self._after_move(self._presenter.navigator.previous())
        return self._after_move(self._navigation.previous())

    def first(self) -> NavigationResult:
        if self._presenter is not None:
            return self._after_move(self._presenter.navigator.first())
        return self._after_move(self._navigation.first())

    def last(self) -> NavigationResult:
        if self._presenter is not None:
            return self._after_move(self._presenter.navigator.last())
        return self._after_move(self._navigation.last())

    def jump_to_question(self, index: int) -> NavigationResult:
        if self._presenter is not None:
            if not 0 <= index < len(self._quiz.questions):
                return NavigationResult.IGNORED
            return self._after_move(self._presenter.navigator.jump_to(index))
        return self._after_move(self._navigation.jump_to_question(index))

    def handle_shortcut(self, key: ShortcutKey, *, text_entry_focused: bool = False) -> NavigationResult:
        """Dispatch a navigation key unless the learner is typing."""
        if text_entry_focused:
            return NavigationResult.IGNORED
        if key is ShortcutKey.HOME:
            return self.first()
        if key is ShortcutKey.END:
            return self.last()
        if key is ShortcutKey.LEFT:
            return self.previous()
        if key is ShortcutKey.RIGHT:
            return self.next()
        raise ValueError(f"Unknown shortcut key: {key}")

    def set_answer(self, question_id: str, value: AnswerValue | WireAnswer) -> bool:
        if self._submitting or self._presenter is not None:
            return False
        index = self._index_of(question_id)
        if index is None or self.is_answer_locked(index):
            return False
        self._answers.set(question_id, value)
        self.save()
        self._notify_change()
        if self.is_immediate_feedback and self._quiz.questions[index].question.type.is_choice:
            self.submit_answer(question_id)
        return True

    def submit_answer(self, question_id: str) -> bool:
        """Send one answer for grading in an immediate-feedback quiz.

        Returns ``True`` when the request was dispatched. The result is
        recorded once the runner reports back.
        """
        if not self.is_immediate_feedback or self._disposed:
            return False
        if self._submitting or self._presenter is not None:
            return False
        if question_id in self._graded or question_id in self._grading:
            return False
        index = self._index_of(question_id)
        answer = self._answers.get(question_id)
        if index is None or answer is None or not answer.is_answered:
            return False
        if not self._attempt_id:
            self._report_error(NO_ATTEMPT_MESSAGE)
            return False
        if self._client is None:
            raise RuntimeError("QuizAttempt.submit_answer() needs a SubmissionClient")

        client = self._client
        quiz_id = self._quiz.id
        attempt_id = self._attempt_id
        wire_answer = encode_answer(self._quiz.questions[index], answer)
        self._grading.add(question_id)
        self._notify_change()
        logger.info("Submitting answer to %s for attempt %s", question_id, attempt_id)
        self._runner.run(
            lambda: client.submit_question(quiz_id, attempt_id, question_id, wire_answer),
            lambda result: self._handle_answer_graded(question_id, result),
            lambda error: self._handle_answer_failed(question_id, error),
        )
        return True

    def submit(self) -> bool:
        """Submit the attempt; returns ``True`` once the request is on its way.

        ``is_submitting`` stays set until the scoring service has answered.
        """
        if self._submitting or self._presenter is not None or self._disposed:
            return False
        if not self._attempt_id:
            self._report_error(NO_ATTEMPT_MESSAGE)
            return False
        if self._client is None:
            raise RuntimeError("QuizAttempt.submit() needs a SubmissionClient")

        self._submitting = True
        self._timer.stop()
        self._notify_change()
        # Cleared before dispatch: a failed request loses the local snapshot.
        self._persistence.clear()
        client = self._client
        quiz_id = self._quiz.id
        attempt_id = self._attempt_id
        request = build_submission_payload(self._quiz, self._answers, self.time_spent_seconds())
        logger.info("Submitting attempt %s with %d answers", attempt_id, len(request.answers))
        self._runner.run(
            lambda: client.submit(quiz_id, attempt_id, request),
            self._handle_submit_success,
            self._handle_submit_failure,
        )
        return True

    # --- Persistence ---------------------------------------------------------------

    def snapshot(self) -> ProgressSnapshot | None:
        position = self._navigation.position
        if position is None:
            return None
        return ProgressSnapshot(
            answers=self._answers.to_wire(),
            current_position=SavedPosition.from_position(position),
            time_remaining=self._timer.remaining,
            question_order=self._quiz.question_ids(),
            option_order={
                q.question.id: [option.id for option in q.question.options]
                for q in self._quiz.questions
                if q.question.options
            },
            locked_questions=sorted(self._navigation.answered_set),
            time_spent_seconds=self.time_spent_seconds(),
            graded_questions=dict(self._graded),
        )

    def save(self) -> None:
        if self._submitting or self._presenter is not None or self._disposed:
            return
        snapshot = self.snapshot()
        if snapshot is not None:
            self._persistence.save(snapshot)

    # --- Internals -----------------------------------------------------------------

    def _arrange_quiz(self, quiz: Quiz, snapshot: ProgressSnapshot | None) -> tuple[Quiz, bool]:
        """Return the quiz in presentation order and whether the saved order was kept."""
        question_ids = quiz.question_ids()
        by_id = {q.question.id: q for q in quiz.questions}
        order_honoured = True

        if snapshot is not None and _is_permutation(snapshot.question_order, question_ids):
            ordered = [by_id[question_id] for question_id in snapshot.question_order]
        elif snapshot is not None:
            ordered = list(quiz.questions)
            order_honoured = snapshot.question_order is None
        else:
            ordered = list(quiz.questions)
            if quiz.settings.randomize_questions:
                self._rng.shuffle(ordered)

        saved_options = (snapshot.option_order or {}) if snapshot is not None else {}
        arranged = [self._arrange_options(question, saved_options) for question in ordered]
        return replace(quiz, questions=tuple(arranged)), order_honoured

    def _arrange_options(self, question: QuizQuestion, saved_options: dict[str, list[str]]) -> QuizQuestion:
        content = question.question
        if not content.type.is_choice or len(content.options) < 2:
            return question
        option_ids = [option.id for option in content.options]
        saved = saved_options.get(content.id)
        if _is_permutation(saved, option_ids):
            by_id = {option.id: option for option in content.options}
            options = [by_id[option_id] for option_id in saved]
        else:
            options = list(content.options)
            self._rng.shuffle(options)
        return replace(question, question=replace(content, options=tuple(options)))

    def _index_of(self, question_id: str) -> int | None:
        return next(
            (i for i, q in enumerate(self._quiz.questions) if q.question.id == question_id),
            None,
        )

    def _handle_submit_success(self, result: SubmissionResult) -> None:
        self._submitting = False
        self._timer.dispose()
        self._presenter = ResultsPresenter(self._quiz, result)
        logger.info("Attempt %s scored %.2f%%", self._attempt_id, result.percentage)
        if self._callbacks.on_submitted is not None:
            self._callbacks.on_submitted(result)
        self._notify_change()

    def _handle_submit_failure(self, error: Exception) -> None:
        if isinstance(error, ScoringServiceError):
            logger.error("Submission of attempt %s failed: %s", self._attempt_id, error)
        else:
            logger.error("Submission of attempt %s failed", self._attempt_id, exc_info=error)
        self._submitting = False
        if not self._disposed and not self._timer.is_expired:
            self._timer.start()
        self._report_error(SUBMIT_FAILED_MESSAGE)
        self._notify_change()

    def _handle_answer_graded(self, question_id: str, result: QuestionResult) -> None:
        self._grading.discard(question_id)
        self._graded[question_id] = result
        logger.info("Question %s graded: %s", question_id, "correct" if result.is_correct else "incorrect")
        self.save()
        if self._callbacks.on_question_graded is not None:
            self._callbacks.on_question_graded(question_id, result)
        self._notify_change()

    def _handle_answer_failed(self, question_id: str, error: Exception) -> None:
        self._grading.discard(question_id)
        if isinstance(error, ScoringServiceError):
            logger.error("Grading of question %s failed: %s", question_id, error)
        else:
            logger.error("Grading of question %s failed", question_id, exc_info=error)
        self._report_error(ANSWER_SUBMIT_FAILED_MESSAGE)
        self._notify_change()

    def _after_move(self, result: NavigationResult) -> NavigationResult:
        if result is NavigationResult.MOVED:
            self.save()
            self._notify_change()
        return result

    def _handle_tick(self, remaining: int) -> None:
        self.save()
        if self._callbacks.on_tick is not None:
            self._callbacks.on_tick(remaining)

    def _handle_time_up(self) -> None:
        logger.info("Time limit reached for attempt %s; submitting", self._attempt_id)
        if self._callbacks.on_time_up is not None:
            self._callbacks.on_time_up()
        self.submit()

    def _notify_change(self) -> None:
        if self._callbacks.on_change is not None:
            self._callbacks.on_change()

    def _report_error(self, message: str) -> None:
        if self._callbacks.on_error is not None:
            self._callbacks.on_error(message)
