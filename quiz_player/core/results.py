"""Review of a scored attempt, question by question."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
import json

from quiz_player.core.models import QuestionType, Quiz, QuizQuestion
from quiz_player.core.navigation import ReviewNavigator
from quiz_player.core.schemas import QuestionResult, SubmissionResult
from quiz_player.core.timer import format_time_spent

NO_ANSWER_TEXT = "No answer"
MATCH_ARROW = "→"


class ReviewStatus(Enum):
    CORRECT = auto()
    INCORRECT = auto()
    UNGRADED = auto()


@dataclass(slots=True)
class MatchReviewRow:
    """One left/right match made by the learner."""

    left: str
    right: str
    is_correct: bool


@dataclass(slots=True)
class QuestionReview:
    index: int
    question: QuizQuestion
    result: QuestionResult | None
    status: ReviewStatus
    user_answer_text: str
    correct_answer_text: str | None = None
    correct_answer_lines: list[str] = field(default_factory=list)
    match_rows: list[MatchReviewRow] = field(default_factory=list)

    @property
    def points_earned(self) -> float:
        return self.result.points_earned if self.result else 0.0

    @property
    def points_possible(self) -> float:
        return self.result.points_possible if self.result else 0.0

    @property
    def show_correct_answer(self) -> bool:
        return self.status is ReviewStatus.INCORRECT and self.correct_answer_text is not None


@dataclass(slots=True)
class ResultsSummary:
    score: float
    total_points: float
    percentage: float
    time_spent_seconds: int
    correct_count: int
    question_count: int
    passed: bool
    grade: str

    @property
    def time_spent_text(self) -> str:
        return format_time_spent(self.time_spent_seconds)


def grade_letter(percentage: float) -> str:
    if percentage >= 90:
        return "A"
    if percentage >= 80:
        return "B"
    if percentage >= 70:
        return "C"
    if percentage >= 60:
        return "D"
    return "F"


def parse_user_matches(raw: str | None) -> dict[str, str] | None:
    """Decode a JSON-encoded matching answer; ``None`` if it is not one."""
    if not raw:
        return None
    try:
        decoded = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(decoded, dict):
        return None
    return {str(key): str(value) for key, value in decoded.items()}


def review_status(result: QuestionResult | None) -> ReviewStatus:
    if result is None:
        return ReviewStatus.UNGRADED
    return ReviewStatus.CORRECT if result.is_correct else ReviewStatus.INCORRECT


class QuestionReviewer:
    """Formats a scored question of ``quiz`` for display."""

    def __init__(self, quiz: Quiz) -> None:
        self._quiz = quiz

    def review(self, index: int, result: QuestionResult | None) -> QuestionReview:
        question = self._quiz.questions[index]
        if result is None:
            return QuestionReview(
                index=index,
                question=question,
                result=None,
                status=ReviewStatus.UNGRADED,
                user_answer_text=NO_ANSWER_TEXT,
            )

        status = ReviewStatus.CORRECT if result.is_correct else ReviewStatus.INCORRECT
        question_type = question.question.type
        if question_type is QuestionType.MATCHING_PAIRS:
            review = self._review_matching(index, question, result, status)
        elif question_type.is_choice:
            review = QuestionReview(
                index=index,
                question=question,
                result=result,
                status=status,
                user_answer_text=self._choice_text(question, result.user_answer) or NO_ANSWER_TEXT,
                correct_answer_text=self._correct_choice_text(question, result),
            )
        else:
            review = QuestionReview(
                index=index,
                question=question,
                result=result,
                status=status,
                user_answer_text=result.user_answer or NO_ANSWER_TEXT,
                correct_answer_text=self._correct_text_answers(result),
            )

        if not self._quiz.settings.show_correct_answers:
            review.correct_answer_text = None
            review.correct_answer_lines = []
        return review

    # --- Type-specific formatting --------------------------------------------

    def _review_matching(
        self,
        index: int,
        question: QuizQuestion,
        result: QuestionResult,
        status: ReviewStatus,
    ) -> QuestionReview:
        correct_map = self._correct_matches(result)
        correct_lines = [f"{left} {MATCH_ARROW} {right}" for left, right in correct_map.items()]
        review = QuestionReview(
            index=index,
            question=question,
            result=result,
            status=status,
            user_answer_text=result.user_answer or NO_ANSWER_TEXT,
            correct_answer_text="\n".join(correct_lines) if correct_lines else None,
            correct_answer_lines=correct_lines,
        )

        user_matches = parse_user_matches(result.user_answer)
        if user_matches is None:
            return review

        rows: list[MatchReviewRow] = []
        for left_key, right_key in user_matches.items():
            left_text = self._left_text(question, left_key)
            right_text = self._right_text(question, right_key)
            rows.append(
                MatchReviewRow(
                    left=left_text,
                    right=right_text,
                    is_correct=correct_map.get(left_text) == right_text,
                )
            )
        review.match_rows = rows
        review.user_answer_text = "\n".join(f"{row.left} {MATCH_ARROW} {row.right}" for row in rows) or NO_ANSWER_TEXT
        return review

    @staticmethod
    def _correct_matches(result: QuestionResult) -> dict[str, str]:
        for answer in result.correct_answers:
            if isinstance(answer.content, dict):
                return dict(answer.content)
        return {}

    @staticmethod
    def _left_text(question: QuizQuestion, key: str) -> str:
        pair = next((p for p in question.question.pairs if p.id == key), None)
        return pair.left if pair is not None else key

    @staticmethod
    def _right_text(question: QuizQuestion, key: str) -> str:
        pair = next((p for p in question.question.pairs if p.id == key), None)
        return pair.right if pair is not None else key

    @staticmethod
    def _choice_text(question: QuizQuestion, answer: str | None) -> str | None:
        if not answer:
            return None
        option = question.question.option_by_id(answer)
        if option is None:
            option = next(
                (o for o in question.question.options if o.text.lower() == answer.lower()),
                None,
            )
        return option.text if option is not None else answer

    def _correct_choice_text(self, question: QuizQuestion, result: QuestionResult) -> str | None:
        texts: list[str] = []
        for answer in result.correct_answers:
            option = question.question.option_by_id(answer.id)
            if option is not None:
                texts.append(option.text)
            elif isinstance(answer.content, str):
                texts.append(self._choice_text(question, answer.content) or answer.content)
        return " or ".join(texts) if texts else None

    @staticmethod
    def _correct_text_answers(result: QuestionResult) -> str | None:
        texts = [answer.content for answer in result.correct_answers if isinstance(answer.content, str)]
        return " or ".join(texts) if texts else None


class ResultsPresenter:
    """Maps each question of the attempt to its scored result."""

    def __init__(self, quiz: Quiz, submission: SubmissionResult) -> None:
        self._quiz = quiz
        self._submission = submission
        self._reviewer = QuestionReviewer(quiz)
        self._navigator = ReviewNavigator(len(quiz.questions))

    @property
    def submission(self) -> SubmissionResult:
        return self._submission

    @property
    def navigator(self) -> ReviewNavigator:
        return self._navigator

    def summary(self) -> ResultsSummary:
        correct_count = sum(1 for result in self._submission.results if result.is_correct)
        percentage = self._submission.percentage
        return ResultsSummary(
            score=self._submission.score,
            total_points=self._submission.total_points,
            percentage=percentage,
            time_spent_seconds=self._submission.time_spent_seconds,
            correct_count=correct_count,
            question_count=len(self._quiz.questions),
            passed=percentage >= self._quiz.settings.passing_score,
            grade=grade_letter(percentage),
        )

    def status_for(self, index: int) -> ReviewStatus:
        return review_status(self._submission.result_for(self._quiz.questions[index].question.id))

    def current_review(self) -> QuestionReview | None:
        if not self._quiz.questions:
            return None
        return self.review(self._navigator.index)

    def reviews(self) -> list[QuestionReview]:
        return [self.review(index) for index in range(len(self._quiz.questions))]

    def review(self, index: int) -> QuestionReview:
        question = self._quiz.questions[index]
        return self._reviewer.review(index, self._submission.result_for(question.question.id))
