import json
from pathlib import Path

import pytest

from quiz_player.server.quiz_catalog import (
    QuizCatalog,
    QuizDefinitionError,
    load_quiz_definition,
    parse_quiz_definition,
)


def test_load_definition_from_file(tmp_path, definition_data):
    path = tmp_path / "quiz.json"
    path.write_text(json.dumps(definition_data), encoding="utf-8")

    definition = load_quiz_definition(path)

    assert definition.id == "quiz-def"
    assert definition.questions[0].points == 2
    assert definition.questions[1].points == 1
    assert [o.id for o in definition.questions[0].question.correct_options()] == ["b"]


def test_player_payload_hides_answer_key(definition_data):
    payload = parse_quiz_definition(json.dumps(definition_data)).to_player_payload()
    raw = payload.model_dump_json(by_alias=True)

    assert "isCorrect" not in raw
    assert "acceptedAnswers" not in raw
    assert payload.to_quiz().question_ids() == ["mc", "tf", "match", "text"]


def test_sample_definition_in_repository_is_valid():
    definition = load_quiz_definition(Path(__file__).resolve().parents[1] / "quiz_definition.json")

    assert len(definition.questions) == 4


@pytest.mark.parametrize(
    "text",
    [
        "{not json",
        json.dumps({"title": "missing id"}),
        json.dumps({"id": "q", "questions": [{"id": "s", "question": {"id": "x", "type": "essay"}}]}),
    ],
)
def test_invalid_definitions_raise(text):
    with pytest.raises(QuizDefinitionError):
        parse_quiz_definition(text)


def test_choice_question_needs_a_correct_option(definition_data):
    for option in definition_data["questions"][0]["question"]["options"]:
        option["isCorrect"] = False

    with pytest.raises(QuizDefinitionError, match="no option marked correct"):
        parse_quiz_definition(json.dumps(definition_data))


def test_text_question_needs_accepted_answers(definition_data):
    definition_data["questions"][3]["question"]["acceptedAnswers"] = []

    with pytest.raises(QuizDefinitionError, match="no accepted answers"):
        parse_quiz_definition(json.dumps(definition_data))


def test_duplicate_question_ids_are_rejected(definition_data):
    definition_data["questions"][1]["question"]["id"] = "mc"

    with pytest.raises(QuizDefinitionError, match="used twice"):
        parse_quiz_definition(json.dumps(definition_data))


def test_missing_file_raises(tmp_path):
    with pytest.raises(QuizDefinitionError):
        load_quiz_definition(tmp_path / "absent.json")


def test_catalog_lookup(definition_data):
    catalog = QuizCatalog([parse_quiz_definition(json.dumps(definition_data))])

    assert catalog.quiz_ids() == ["quiz-def"]
    assert catalog.get("quiz-def") is not None
    assert catalog.get("other") is None
    assert len(catalog) == 1
