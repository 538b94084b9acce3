import pytest

from quiz_player.core.navigation import PositionKind, QuestionPosition
from quiz_player.core.persistence import (
    InMemoryStorage,
    JsonFileStorage,
    PersistenceLayer,
    ProgressSnapshot,
    SavedPosition,
    progress_key,
)
from quiz_player.core.schemas import QuestionResult


def _snapshot(**overrides) -> ProgressSnapshot:
    values = {
        "answers": {"q1": "a"},
        "current_position": SavedPosition(kind=PositionKind.QUESTION, index=2),
        "time_remaining": 120,
    }
    values.update(overrides)
    return ProgressSnapshot(**values)


def test_round_trip_reproduces_snapshot():
    storage = InMemoryStorage()
    layer = PersistenceLayer("quiz-1", storage)
    snapshot = _snapshot()

    layer.save(snapshot)
    loaded = layer.load()

    assert loaded == snapshot
    assert loaded.current_position.to_position() == QuestionPosition(2)
    assert storage.keys() == ["quiz-progress-quiz-1"]


def test_snapshot_uses_camel_case_keys():
    raw = _snapshot().to_json()

    assert '"currentPosition"' in raw
    assert '"timeRemaining":120' in raw
    assert '"lastSaved"' in raw


def test_invalid_json_is_discarded():
    storage = InMemoryStorage()
    storage.set_item(progress_key("quiz-1"), "{not json")
    layer = PersistenceLayer("quiz-1", storage)

    assert layer.load() is None
    assert storage.get_item(progress_key("quiz-1")) is None


@pytest.mark.parametrize(
    "raw",
    [
        '{"answers": {}}',
        '{"currentPosition": {"kind": "question", "index": -1}}',
        '{"currentPosition": {"kind": "bogus", "index": 0}}',
        "[]",
    ],
)
def test_invalid_snapshot_shape_is_discarded(raw):
    storage = InMemoryStorage()
    storage.set_item(progress_key("quiz-1"), raw)

    assert PersistenceLayer("quiz-1", storage).load() is None


def test_missing_snapshot_loads_as_none():
    assert PersistenceLayer("quiz-1", InMemoryStorage()).load() is None


def test_clear_removes_snapshot():
    storage = InMemoryStorage()
    layer = PersistenceLayer("quiz-1", storage)
    layer.save(_snapshot())

    layer.clear()

    assert layer.load() is None


def test_json_file_storage(tmp_path):
    storage = JsonFileStorage(tmp_path / "progress")
    layer = PersistenceLayer("quiz-2", storage)
    layer.save(_snapshot(time_remaining=None))

    assert (tmp_path / "progress" / "quiz-progress-quiz-2.json").exists()
    assert layer.load().time_remaining is None

    layer.clear()
    layer.clear()
    assert storage.get_item(layer.key) is None


def test_undecodable_snapshot_file_is_discarded(tmp_path):
    storage = JsonFileStorage(tmp_path)
    path = tmp_path / "quiz-progress-quiz-1.json"
    path.write_bytes(b'{"answers": {"q1": "\xff\xfe"}}')

    assert PersistenceLayer("quiz-1", storage).load() is None
    assert not path.exists()


def test_file_names_stay_inside_the_directory(tmp_path):
    directory = tmp_path / "progress"
    storage = JsonFileStorage(directory)
    layer = PersistenceLayer("../../escape/quiz", storage)

    layer.save(_snapshot())

    written = list(directory.iterdir())
    assert len(written) == 1
    assert written[0].parent == directory
    assert "/" not in written[0].name
    assert not (tmp_path / "escape").exists()
    assert layer.load().answers == {"q1": "a"}


def test_graded_questions_survive_a_round_trip():
    layer = PersistenceLayer("quiz-1", InMemoryStorage())
    graded = {"q1": QuestionResult(question_id="q1", user_answer="a", is_correct=True, points_earned=1, points_possible=1)}
    layer.save(_snapshot(graded_questions=graded))

    assert layer.load().graded_questions == graded
