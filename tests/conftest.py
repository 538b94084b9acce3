from __future__ import annotations

import pytest
from PySide6.QtCore import QCoreApplication

from quiz_player.core.models import (
    AnswerOption,
    MatchingPair,
    QuestionContent,
    QuestionType,
    Quiz,
    QuizQuestion,
    QuizSettings,
    QuizTransition,
)


def make_question(
    question_id: str,
    *,
    order: int = 0,
    type: QuestionType = QuestionType.MULTIPLE_CHOICE,
    explanation: str | None = None,
    options: tuple[tuple[str, str], ...] | None = None,
    pairs: tuple[tuple[str, str, str], ...] = (),
    title: str | None = None,
) -> QuizQuestion:
    if options is None:
        if type is QuestionType.TRUE_FALSE:
            options = (("o1", "True"), ("o2", "False"))
        elif type is QuestionType.MULTIPLE_CHOICE:
            options = ((f"{question_id}-a", "Alpha"), (f"{question_id}-b", "Beta"), (f"{question_id}-c", "Gamma"))
        else:
            options = ()
    return QuizQuestion(
        id=f"slot-{question_id}",
        order=order,
        explanation=explanation,
        question=QuestionContent(
            id=question_id,
            title=title or f"Title {question_id}",
            content=f"Content of {question_id}",
            type=type,
            options=tuple(AnswerOption(id=option_id, text=text) for option_id, text in options),
            pairs=tuple(MatchingPair(id=pair_id, left=left, right=right) for pair_id, left, right in pairs),
        ),
    )


def make_quiz(
    questions: list[QuizQuestion],
    *,
    transitions: tuple[int, ...] = (),
    quiz_id: str = "quiz-1",
    title: str = "Sample quiz",
    **settings,
) -> Quiz:
    return Quiz(
        id=quiz_id,
        title=title,
        questions=tuple(questions),
        transitions=tuple(
            QuizTransition(id=f"t{position}", position=position, content=f"Transition {position}")
            for position in transitions
        ),
        settings=QuizSettings(**settings),
    )


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def question_factory():
    return make_question


@pytest.fixture
def quiz_factory():
    return make_quiz


@pytest.fixture
def three_step_quiz() -> Quiz:
    """Transitions before q0 and q2; q0 and q2 carry explanations."""
    return make_quiz(
        [
            make_question("q0", order=1, explanation="Because."),
            make_question("q1", order=2),
            make_question("q2", order=3, explanation="Also because."),
        ],
        transitions=(0, 2),
    )


@pytest.fixture
def definition_data() -> dict:
    return {
        "id": "quiz-def",
        "title": "Definition quiz",
        "settings": {"passingScore": 50},
        "questions": [
            {
                "id": "slot-mc",
                "order": 1,
                "points": 2,
                "question": {
                    "id": "mc",
                    "title": "Pick B",
                    "content": "Which one?",
                    "type": "multiple_choice",
                    "options": [
                        {"id": "a", "text": "A"},
                        {"id": "b", "text": "B", "isCorrect": True},
                    ],
                },
            },
            {
                "id": "slot-tf",
                "order": 2,
                "question": {
                    "id": "tf",
                    "title": "Sky",
                    "content": "The sky is green.",
                    "type": "true_false",
                    "options": [
                        {"id": "o1", "text": "True"},
                        {"id": "o2", "text": "False", "isCorrect": True},
                    ],
                },
            },
            {
                "id": "slot-match",
                "order": 3,
                "question": {
                    "id": "match",
                    "title": "Capitals",
                    "content": "Match countries and capitals.",
                    "type": "matching_pairs",
                    "pairs": [
                        {"id": "p1", "left": "France", "right": "Paris"},
                        {"id": "p2", "left": "Italy", "right": "Rome"},
                    ],
                },
            },
            {
                "id": "slot-text",
                "order": 4,
                "explanation": "Water freezes at zero.",
                "question": {
                    "id": "text",
                    "title": "Freezing",
                    "content": "Freezing point of water in Celsius?",
                    "type": "short_answer",
                    "acceptedAnswers": ["0", "zero"],
                },
            },
        ],
    }
