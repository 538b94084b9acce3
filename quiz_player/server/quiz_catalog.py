"""Loading quiz definitions (quiz plus answer key) from JSON files.

A definition file is the player view of a quiz with the grading data mixed
in. Minimal example:

    {
      "id": "algebra-1",
      "title": "Algebra warm-up",
      "settings": {"timeLimitMinutes": 10, "passingScore": 60},
      "transitions": [{"id": "t0", "position": 0, "content": "# Welcome"}],
      "questions": [
        {
          "id": "qq1", "order": 1, "points": 2,
          "explanation": "$2 + 2 = 4$.",
          "question": {
            "id": "q1", "title": "Sum", "content": "What is $2 + 2$?",
            "type": "multiple_choice",
            "options": [{"id": "a", "text": "3"}, {"id": "b", "text": "4", "isCorrect": true}]
          }
        },
        {
          "id": "qq2", "order": 2,
          "question": {
            "id": "q2", "title": "Capital", "content": "Capital of France?",
            "type": "short_answer", "acceptedAnswers": ["Paris"]
          }
        }
      ]
    }

Matching questions need no answer key: each pair's left side matches its
own right side.

With ``"feedbackMode": "immediate"`` in the settings, each answer is graded
as soon as the learner gives it.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import Field, ValidationError

from quiz_player.constants.quiz_constants import DEFAULT_QUESTION_POINTS
from quiz_player.core.models import QuestionType
from quiz_player.core.schemas import (
    OptionPayload,
    QuestionContentPayload,
    QuizPayload,
    QuizQuestionPayload,
)

logger = logging.getLogger(__name__)


class QuizDefinitionError(Exception):
    """Raised when a quiz definition cannot be parsed."""


class OptionDefinition(OptionPayload):
    is_correct: bool = False


class QuestionContentDefinition(QuestionContentPayload):
    options: list[OptionDefinition] | None = None
    accepted_answers: list[str] = Field(default_factory=list)

    def correct_options(self) -> list[OptionDefinition]:
        return [option for option in self.options or [] if option.is_correct]


class QuizQuestionDefinition(QuizQuestionPayload):
    question: QuestionContentDefinition
    points: float = Field(default=DEFAULT_QUESTION_POINTS, ge=0)


class QuizDefinition(QuizPayload):
    """A quiz together with its answer key."""

    questions: list[QuizQuestionDefinition] = Field(default_factory=list)

    def to_player_payload(self) -> QuizPayload:
        """Strip the answer key so the result can be sent to a learner."""
        return QuizPayload.model_validate(self.model_dump(by_alias=True))

    def question_by_content_id(self, question_id: str) -> QuizQuestionDefinition | None:
        return next((item for item in self.questions if item.question.id == question_id), None)


def _check_answer_keys(definition: QuizDefinition) -> None:
    for item in definition.questions:
        content = item.question
        if content.type.is_choice:
            if not content.options:
                raise QuizDefinitionError(f"Question {content.id} has no options.")
            if not content.correct_options():
                raise QuizDefinitionError(f"Question {content.id} has no option marked correct.")
        elif content.type is QuestionType.MATCHING_PAIRS:
            if not content.pairs:
                raise QuizDefinitionError(f"Question {content.id} has no pairs.")
        elif not content.accepted_answers:
            raise QuizDefinitionError(f"Question {content.id} has no accepted answers.")

    seen: set[str] = set()
    for item in definition.questions:
        if item.question.id in seen:
            raise QuizDefinitionError(f"Question id {item.question.id} is used twice.")
        seen.add(item.question.id)


def parse_quiz_definition(text: str) -> QuizDefinition:
    try:
        definition = QuizDefinition.model_validate(json.loads(text))
    except json.JSONDecodeError as exc:
        raise QuizDefinitionError(f"Quiz definition is not valid JSON: {exc}") from exc
    except ValidationError as exc:
        raise QuizDefinitionError(f"Quiz definition is invalid: {exc}") from exc
    _check_answer_keys(definition)
    return definition


def load_quiz_definition(path: Path | str) -> QuizDefinition:
    file_path = Path(path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise QuizDefinitionError(f"Could not read quiz definition {file_path}: {exc}") from exc
    definition = parse_quiz_definition(text)
    logger.info(
        "Loaded quiz %s (%d questions) from %s",
        definition.id,
        len(definition.questions),
        file_path,
    )
    return definition


class QuizCatalog:
    """Quiz definitions available to the scoring service, keyed by quiz id."""

    def __init__(self, definitions: list[QuizDefinition] | None = None) -> None:
        self._definitions: dict[str, QuizDefinition] = {}
        for definition in definitions or []:
            self.add(definition)

    @classmethod
    def from_paths(cls, paths: list[Path | str]) -> "QuizCatalog":
        return cls([load_quiz_definition(path) for path in paths])

    def add(self, definition: QuizDefinition) -> None:
        self._definitions[definition.id] = definition

    def get(self, quiz_id: str) -> QuizDefinition | None:
        return self._definitions.get(quiz_id)

    def quiz_ids(self) -> list[str]:
        return list(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)
