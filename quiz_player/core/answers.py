"""Per-question answer values and the in-memory answer store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True, slots=True)
class ScalarAnswer:
    """Selected option id or free text."""

    value: str

    @property
    def is_answered(self) -> bool:
        return bool(self.value)


@dataclass(frozen=True, slots=True)
class MatchesAnswer:
    """Matching answer: left pair id -> right pair id."""

    matches: dict[str, str] = field(default_factory=dict)

    @property
    def is_answered(self) -> bool:
        return bool(self.matches)


AnswerValue = Union[ScalarAnswer, MatchesAnswer]
WireAnswer = Union[str, dict[str, str]]


def answer_from_wire(raw: object) -> AnswerValue:
    """Convert a JSON answer (string or object) into an answer variant."""
    if isinstance(raw, str):
        return ScalarAnswer(raw)
    if isinstance(raw, dict):
        return MatchesAnswer({str(key): str(value) for key, value in raw.items()})
    raise TypeError(f"Unsupported answer shape: {type(raw).__name__}")


def answer_to_wire(answer: AnswerValue) -> WireAnswer:
    if isinstance(answer, ScalarAnswer):
        return answer.value
    if isinstance(answer, MatchesAnswer):
        return dict(answer.matches)
    raise TypeError(f"Unsupported answer variant: {type(answer).__name__}")


class AnswerStore:
    """Holds the learner's answers keyed by question id.

    Writes are not validated: free text and partial matches are stored as-is
    while the learner is still editing them.
    """

    def __init__(self, question_ids: list[str] | None = None) -> None:
        self._question_ids: list[str] = list(question_ids or [])
        self._answers: dict[str, AnswerValue] = {}

    def set_question_ids(self, question_ids: list[str]) -> None:
        self._question_ids = list(question_ids)

    def set(self, question_id: str, value: AnswerValue | WireAnswer) -> None:
        """Replace the answer for ``question_id`` entirely."""
        if not isinstance(value, (ScalarAnswer, MatchesAnswer)):
            value = answer_from_wire(value)
        self._answers[question_id] = value

    def get(self, question_id: str) -> AnswerValue | None:
        return self._answers.get(question_id)

    def is_answered(self, question_id: str) -> bool:
        answer = self._answers.get(question_id)
        return answer is not None and answer.is_answered

    def answered_count(self) -> int:
        return sum(1 for answer in self._answers.values() if answer.is_answered)

    def progress_percent(self) -> float:
        total = len(self._question_ids)
        if total == 0:
            return 0.0
        return self.answered_count() / total * 100

    def items(self) -> list[tuple[str, AnswerValue]]:
        return list(self._answers.items())

    def to_wire(self) -> dict[str, WireAnswer]:
        return {question_id: answer_to_wire(answer) for question_id, answer in self._answers.items()}

    def load_wire(self, raw_answers: dict[str, object]) -> None:
        """Replace the store content with answers decoded from JSON."""
        self._answers = {
            question_id: answer_from_wire(raw) for question_id, raw in raw_answers.items()
        }

    def __len__(self) -> int:
        return len(self._answers)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._answers
