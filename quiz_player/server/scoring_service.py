"""Attempt bookkeeping for the reference scoring service."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from threading import Lock
from uuid import uuid4

from quiz_player.core.models import FeedbackMode
from quiz_player.core.schemas import (
    AttemptStarted,
    QuestionResult,
    QuestionSubmissionRequest,
    QuizPayload,
    SubmissionRequest,
    SubmissionResult,
)
from quiz_player.server.grading import grade_question, grade_submission
from quiz_player.server.quiz_catalog import QuizCatalog, QuizDefinition

logger = logging.getLogger(__name__)


class ScoringServiceLookupError(Exception):
    """Raised for an unknown quiz or attempt."""


class AttemptConflictError(Exception):
    """Raised when an attempt cannot be opened or submitted in its current state."""


@dataclass(slots=True)
class AttemptRecord:
    attempt_id: str
    quiz_id: str
    started_at: datetime
    result: SubmissionResult | None = None
    question_results: dict[str, QuestionResult] = field(default_factory=dict)

    @property
    def is_submitted(self) -> bool:
        return self.result is not None


class ScoringService:
    """Opens attempts and grades submissions against the quiz catalog.

    Called from uvicorn worker threads, so attempt state is guarded by a lock.
    """

    def __init__(self, catalog: QuizCatalog) -> None:
        self._catalog = catalog
        self._attempts: dict[str, AttemptRecord] = {}
        self._lock = Lock()

    @property
    def catalog(self) -> QuizCatalog:
        return self._catalog

    def get_quiz(self, quiz_id: str) -> QuizPayload:
        return self._definition(quiz_id).to_player_payload()

    def start_attempt(self, quiz_id: str) -> AttemptStarted:
        definition = self._definition(quiz_id)
        max_attempts = definition.settings.max_attempts
        with self._lock:
            if max_attempts > 0:
                submitted = sum(
                    1 for record in self._attempts.values() if record.quiz_id == quiz_id and record.is_submitted
                )
                if submitted >= max_attempts:
                    raise AttemptConflictError(f"Maximum number of attempts ({max_attempts}) reached.")
            record = AttemptRecord(
                attempt_id=uuid4().hex,
                quiz_id=quiz_id,
                started_at=datetime.now(timezone.utc),
            )
            self._attempts[record.attempt_id] = record
        logger.info("Opened attempt %s for quiz %s", record.attempt_id, quiz_id)
        return AttemptStarted(attempt_id=record.attempt_id, quiz_id=quiz_id, started_at=record.started_at)

    def submit(self, quiz_id: str, attempt_id: str, request: SubmissionRequest) -> SubmissionResult:
        definition = self._definition(quiz_id)
        with self._lock:
            record = self._open_record(quiz_id, attempt_id)
            time_spent = request.time_spent_seconds
            if time_spent is None:
                time_spent = int((datetime.now(timezone.utc) - record.started_at).total_seconds())
            result = grade_submission(definition, attempt_id, request.answers, time_spent)
            record.result = result
        logger.info(
            "Graded attempt %s: %.2f / %.2f (%.2f%%)",
            attempt_id,
            result.score,
            result.total_points,
            result.percentage,
        )
        return result

    def submit_question(
        self,
        quiz_id: str,
        attempt_id: str,
        question_id: str,
        request: QuestionSubmissionRequest,
    ) -> QuestionResult:
        """Grade one answer of an immediate-feedback attempt; each question is graded once."""
        definition = self._definition(quiz_id)
        if definition.settings.feedback_mode is not FeedbackMode.IMMEDIATE:
            raise AttemptConflictError(f"Quiz {quiz_id} does not grade answers one at a time.")
        item = definition.question_by_content_id(question_id)
        if item is None:
            raise ScoringServiceLookupError(f"Question {question_id} not found.")
        with self._lock:
            record = self._open_record(quiz_id, attempt_id)
            if question_id in record.question_results:
                raise AttemptConflictError(f"Question {question_id} was already answered.")
            result = grade_question(item, request.answer)
            record.question_results[question_id] = result
        logger.info("Graded question %s of attempt %s: correct=%s", question_id, attempt_id, result.is_correct)
        return result

    def attempt(self, attempt_id: str) -> AttemptRecord | None:
        with self._lock:
            return self._attempts.get(attempt_id)

    def _open_record(self, quiz_id: str, attempt_id: str) -> AttemptRecord:
        record = self._attempts.get(attempt_id)
        if record is None or record.quiz_id != quiz_id:
            raise ScoringServiceLookupError(f"Attempt {attempt_id} not found.")
        if record.is_submitted:
            raise AttemptConflictError(f"Attempt {attempt_id} was already submitted.")
        return record

    def _definition(self, quiz_id: str) -> QuizDefinition:
        definition = self._catalog.get(quiz_id)
        if definition is None:
            raise ScoringServiceLookupError(f"Quiz {quiz_id} not found.")
        return definition
