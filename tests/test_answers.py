import pytest

from quiz_player.core.answers import (
    AnswerStore,
    MatchesAnswer,
    ScalarAnswer,
    answer_from_wire,
    answer_to_wire,
)


def test_progress_counts_only_answered_values():
    store = AnswerStore([f"q{i}" for i in range(5)])
    store.set("q0", "opt-a")
    store.set("q1", {})
    store.set("q2", {"left-1": "right-2"})

    assert store.answered_count() == 2
    assert store.progress_percent() == 40


def test_empty_scalar_is_not_answered():
    store = AnswerStore(["q0"])
    store.set("q0", "")

    assert "q0" in store
    assert not store.is_answered("q0")
    assert not store.is_answered("missing")


def test_set_replaces_whole_answer():
    store = AnswerStore(["q0"])
    store.set("q0", MatchesAnswer({"a": "1", "b": "2"}))
    store.set("q0", MatchesAnswer({"c": "3"}))

    assert store.get("q0") == MatchesAnswer({"c": "3"})


def test_progress_without_questions_is_zero():
    assert AnswerStore().progress_percent() == 0.0


def test_wire_conversion():
    assert answer_from_wire("text") == ScalarAnswer("text")
    assert answer_from_wire({"a": "b"}) == MatchesAnswer({"a": "b"})
    assert answer_to_wire(MatchesAnswer({"a": "b"})) == {"a": "b"}
    with pytest.raises(TypeError):
        answer_from_wire(3)


def test_load_wire_replaces_content():
    store = AnswerStore(["q0", "q1"])
    store.set("q0", "old")
    store.load_wire({"q1": "new"})

    assert store.to_wire() == {"q1": "new"}
    assert len(store) == 1
