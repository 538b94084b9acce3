"""FastAPI server exposing the reference scoring endpoints."""

from __future__ import annotations

from threading import Thread

from fastapi import Depends, FastAPI, HTTPException
import uvicorn

from quiz_player.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from quiz_player.core.schemas import (
    AttemptStarted,
    QuestionResult,
    QuestionSubmissionRequest,
    QuizPayload,
    SubmissionRequest,
    SubmissionResult,
)
from quiz_player.server.quiz_catalog import QuizCatalog
from quiz_player.server.scoring_service import (
    AttemptConflictError,
    ScoringService,
    ScoringServiceLookupError,
)


def _get_scoring_service_dependency(service: ScoringService):
    def dependency() -> ScoringService:
        return service

    return dependency


def create_scoring_app(catalog: QuizCatalog | ScoringService) -> FastAPI:
    """Create a FastAPI application wired to the provided catalog."""
    service = catalog if isinstance(catalog, ScoringService) else ScoringService(catalog)
    app = FastAPI(title="Quiz Player Scoring API", version="0.1.0")
    service_dep = _get_scoring_service_dependency(service)

    @app.get("/api/quizzes/{quiz_id}", response_model=QuizPayload, response_model_by_alias=True)
    def get_quiz(quiz_id: str, scoring: ScoringService = Depends(service_dep)) -> QuizPayload:
        try:
            return scoring.get_quiz(quiz_id)
        except ScoringServiceLookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    @app.post(
        "/api/quizzes/{quiz_id}/attempts",
        status_code=201,
        response_model=AttemptStarted,
        response_model_by_alias=True,
    )
    def start_attempt(quiz_id: str, scoring: ScoringService = Depends(service_dep)) -> AttemptStarted:
        try:
            return scoring.start_attempt(quiz_id)
        except ScoringServiceLookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except AttemptConflictError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc

    @app.post(
        "/api/quizzes/{quiz_id}/attempts/{attempt_id}/submit",
        response_model=SubmissionResult,
        response_model_by_alias=True,
    )
    def submit_attempt(
        quiz_id: str,
        attempt_id: str,
        payload: SubmissionRequest,
        scoring: ScoringService = Depends(service_dep),
    ) -> SubmissionResult:
        try:
            return scoring.submit(quiz_id, attempt_id, payload)
        except ScoringServiceLookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except AttemptConflictError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc

    @app.post(
        "/api/quizzes/{quiz_id}/attempts/{attempt_id}/questions/{question_id}/submit",
        response_model=QuestionResult,
        response_model_by_alias=True,
    )
    def submit_question(
        quiz_id: str,
        attempt_id: str,
        question_id: str,
        payload: QuestionSubmissionRequest,
        scoring: ScoringService = Depends(service_dep),
    ) -> QuestionResult:
        try:
            return scoring.submit_question(quiz_id, attempt_id, question_id, payload)
        except ScoringServiceLookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except AttemptConflictError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc

    return app


def start_scoring_server(
    catalog: QuizCatalog,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""
    app = create_scoring_app(catalog)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="QuizScoringServer", daemon=True)
    thread.start()
    return thread
