"""Scoring a submission against a quiz definition's answer key."""

from __future__ import annotations

import json

from quiz_player.core.models import QuestionType
from quiz_player.core.schemas import CorrectAnswer, QuestionResult, SubmissionResult
from quiz_player.server.quiz_catalog import QuizDefinition, QuizQuestionDefinition

SubmittedAnswer = str | dict[str, str] | None


def _normalize_text(value: str) -> str:
    return value.strip().casefold()


def correct_answers_for(item: QuizQuestionDefinition) -> list[CorrectAnswer]:
    content = item.question
    if content.type.is_choice:
        return [CorrectAnswer(id=option.id, content=option.text) for option in content.correct_options()]
    if content.type is QuestionType.MATCHING_PAIRS:
        return [
            CorrectAnswer(
                id=f"{content.id}-matches",
                content={pair.left: pair.right for pair in content.pairs or []},
            )
        ]
    return [
        CorrectAnswer(id=f"{content.id}-accepted-{position}", content=text)
        for position, text in enumerate(content.accepted_answers)
    ]


def is_answer_correct(item: QuizQuestionDefinition, answer: SubmittedAnswer) -> bool:
    """Grade one answer. Missing or empty answers are never correct."""
    content = item.question
    if answer is None or answer == "" or answer == {}:
        return False

    if content.type is QuestionType.MATCHING_PAIRS:
        if not isinstance(answer, dict):
            return False
        expected = {pair.id: pair.id for pair in content.pairs or []}
        return answer == expected

    if not isinstance(answer, str):
        return False

    if content.type is QuestionType.MULTIPLE_CHOICE:
        return answer in {option.id for option in content.correct_options()}

    if content.type is QuestionType.TRUE_FALSE:
        # Sent as the lowercase option text; older clients send the option id.
        correct = content.correct_options()
        return any(answer == option.text.lower() or answer == option.id for option in correct)

    accepted = {_normalize_text(text) for text in content.accepted_answers}
    return _normalize_text(answer) in accepted


def _echo_user_answer(answer: SubmittedAnswer) -> str | None:
    if answer is None:
        return None
    if isinstance(answer, dict):
        return json.dumps(answer)
    return answer


def grade_question(item: QuizQuestionDefinition, answer: SubmittedAnswer) -> QuestionResult:
    is_correct = is_answer_correct(item, answer)
    return QuestionResult(
        question_id=item.question.id,
        user_answer=_echo_user_answer(answer),
        correct_answers=correct_answers_for(item),
        is_correct=is_correct,
        points_earned=item.points if is_correct else 0.0,
        points_possible=item.points,
    )


def grade_submission(
    definition: QuizDefinition,
    attempt_id: str,
    answers: dict[str, str | dict[str, str]],
    time_spent_seconds: int,
) -> SubmissionResult:
    """Score every question of ``definition``; unanswered questions earn nothing."""
    results = [grade_question(item, answers.get(item.question.id)) for item in definition.questions]
    score = sum(result.points_earned for result in results)
    total_points = sum(result.points_possible for result in results)
    percentage = round(score / total_points * 100, 2) if total_points else 0.0
    return SubmissionResult(
        attempt_id=attempt_id,
        quiz_id=definition.id,
        score=score,
        total_points=total_points,
        percentage=percentage,
        results=results,
        time_spent_seconds=max(0, time_spent_seconds),
    )
