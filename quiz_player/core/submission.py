"""Turning stored answers into a submission and talking to the scoring service."""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from quiz_player.constants.network_constants import REQUEST_TIMEOUT_SECONDS, SCORING_SERVICE_URL
from quiz_player.core.answers import AnswerStore, AnswerValue, MatchesAnswer, ScalarAnswer, WireAnswer
from quiz_player.core.models import QuestionType, Quiz, QuizQuestion
from quiz_player.core.schemas import (
    AttemptStarted,
    QuestionResult,
    QuestionSubmissionRequest,
    QuizPayload,
    SubmissionRequest,
    SubmissionResult,
)

logger = logging.getLogger(__name__)


class ScoringServiceError(Exception):
    """Raised when the scoring service cannot be reached or answers badly."""


class AttemptStartError(ScoringServiceError):
    """Raised when a new attempt cannot be opened."""


class SubmissionError(ScoringServiceError):
    """Raised when a submission is not accepted."""


def encode_answer(question: QuizQuestion | None, answer: AnswerValue) -> WireAnswer:
    """Encode one answer for the wire.

    True/false answers are sent as the lowercase text of the chosen option
    ("true" / "false") because the scoring service compares them by text.
    Every other answer is sent unchanged.
    """
    if isinstance(answer, ScalarAnswer):
        if question is not None and question.question.type is QuestionType.TRUE_FALSE:
            option = question.question.option_by_id(answer.value)
            if option is not None:
                return option.text.lower()
        return answer.value
    if isinstance(answer, MatchesAnswer):
        return dict(answer.matches)
    raise TypeError(f"Unsupported answer variant: {type(answer).__name__}")


def build_submission_payload(
    quiz: Quiz,
    answers: AnswerStore,
    time_spent_seconds: int | None = None,
) -> SubmissionRequest:
    encoded = {
        question_id: encode_answer(quiz.question_by_id(question_id), answer)
        for question_id, answer in answers.items()
    }
    return SubmissionRequest(answers=encoded, time_spent_seconds=time_spent_seconds)


class SubmissionClient:
    """Thin httpx client for the scoring service."""

    def __init__(
        self,
        base_url: str = SCORING_SERVICE_URL,
        timeout_seconds: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds

    @property
    def base_url(self) -> str:
        return self._base_url

    def fetch_quiz(self, quiz_id: str) -> Quiz:
        data = self._get(f"/api/quizzes/{quiz_id}", ScoringServiceError)
        try:
            return QuizPayload.model_validate(data).to_quiz()
        except ValidationError as exc:
            raise ScoringServiceError(f"Quiz {quiz_id} could not be read.") from exc

    def start_attempt(self, quiz_id: str) -> AttemptStarted:
        data = self._post(f"/api/quizzes/{quiz_id}/attempts", {}, AttemptStartError)
        try:
            started = AttemptStarted.model_validate(data)
        except ValidationError as exc:
            raise AttemptStartError("The attempt could not be started.") from exc
        logger.info("Started attempt %s for quiz %s", started.attempt_id, quiz_id)
        return started

    def submit(self, quiz_id: str, attempt_id: str, request: SubmissionRequest) -> SubmissionResult:
        data = self._post(
            f"/api/quizzes/{quiz_id}/attempts/{attempt_id}/submit",
            request.model_dump(by_alias=True, exclude_none=True),
            SubmissionError,
        )
        try:
            return SubmissionResult.model_validate(data)
        except ValidationError as exc:
            raise SubmissionError("The scoring service returned an unreadable result.") from exc

    def submit_question(
        self,
        quiz_id: str,
        attempt_id: str,
        question_id: str,
        answer: WireAnswer,
    ) -> QuestionResult:
        request = QuestionSubmissionRequest(answer=answer)
        data = self._post(
            f"/api/quizzes/{quiz_id}/attempts/{attempt_id}/questions/{question_id}/submit",
            request.model_dump(by_alias=True),
            SubmissionError,
        )
        try:
            return QuestionResult.model_validate(data)
        except ValidationError as exc:
            raise SubmissionError(f"The result for question {question_id} could not be read.") from exc

    def _get(self, path: str, error_type: type[ScoringServiceError]) -> object:
        try:
            with httpx.Client(base_url=self._base_url, timeout=self._timeout_seconds) as client:
                response = client.get(path)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as exc:
            raise error_type(f"Request to {path} failed: {exc}") from exc
        except ValueError as exc:
            raise error_type(f"Response from {path} was not JSON.") from exc

    def _post(self, path: str, payload: dict, error_type: type[ScoringServiceError]) -> object:
        try:
            with httpx.Client(base_url=self._base_url, timeout=self._timeout_seconds) as client:
                response = client.post(path, json=payload)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as exc:
            raise error_type(f"Request to {path} failed: {exc}") from exc
        except ValueError as exc:
            raise error_type(f"Response from {path} was not JSON.") from exc
