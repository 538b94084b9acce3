"""Local persistence of in-progress attempts so a restart does not lose work."""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging
import os
from pathlib import Path
import time
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from quiz_player.constants.quiz_constants import DEFAULT_PROGRESS_DIR, PROGRESS_KEY_PREFIX
from quiz_player.core.navigation import NavigationPosition, PositionKind, position_from_dict
from quiz_player.core.schemas import QuestionResult

logger = logging.getLogger(__name__)


def progress_key(quiz_id: str) -> str:
    return f"{PROGRESS_KEY_PREFIX}{quiz_id}"


class SavedPosition(BaseModel):
    kind: PositionKind
    index: int = Field(ge=0)

    @classmethod
    def from_position(cls, position: NavigationPosition) -> "SavedPosition":
        return cls(kind=position.kind, index=position.index)

    def to_position(self) -> NavigationPosition:
        return position_from_dict({"kind": self.kind.value, "index": self.index})


class ProgressSnapshot(BaseModel):
    """Serialized state of one in-progress attempt."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    answers: dict[str, str | dict[str, str]] = Field(default_factory=dict)
    current_position: SavedPosition
    time_remaining: int | None = None
    last_saved: int = Field(default_factory=lambda: int(time.time() * 1000))
    question_order: list[str] | None = None
    option_order: dict[str, list[str]] | None = None
    locked_questions: list[int] = Field(default_factory=list)
    time_spent_seconds: int = 0
    graded_questions: dict[str, QuestionResult] = Field(default_factory=dict)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class ProgressStorage(ABC):
    """Key/value store of JSON strings."""

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        pass


class InMemoryStorage(ProgressStorage):
    """Dict-backed storage. Everything is lost when the process exits."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class JsonFileStorage(ProgressStorage):
    """One ``<key>.json`` file per key inside ``directory``.

    Keys are percent-encoded into file names, so a key can never name a
    path outside ``directory``.
    """

    def __init__(self, directory: Path = DEFAULT_PROGRESS_DIR) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def _path_for(self, key: str) -> Path:
        return self._directory / f"{quote(key, safe='')}.json"

    def get_item(self, key: str) -> str | None:
        try:
            return self._path_for(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set_item(self, key: str, value: str) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        target = self._path_for(key)
        temp_path = target.with_suffix(".json.tmp")
        temp_path.write_text(value, encoding="utf-8")
        os.replace(temp_path, target)

    def remove_item(self, key: str) -> None:
        self._path_for(key).unlink(missing_ok=True)


class PersistenceLayer:
    """Reads and writes the snapshot of a single quiz.

    Writes are last-write-wins; two windows on the same quiz overwrite each
    other's snapshot.
    """

    def __init__(self, quiz_id: str, storage: ProgressStorage) -> None:
        self._key = progress_key(quiz_id)
        self._storage = storage

    @property
    def key(self) -> str:
        return self._key

    def save(self, snapshot: ProgressSnapshot) -> None:
        try:
            self._storage.set_item(self._key, snapshot.to_json())
        except OSError:
            logger.exception("Could not write progress snapshot %s", self._key)

    def load(self) -> ProgressSnapshot | None:
        """Return the stored snapshot, or ``None`` if it is missing or unreadable."""
        try:
            raw = self._storage.get_item(self._key)
            if raw is None:
                return None
            return ProgressSnapshot.model_validate_json(raw)
        except OSError as exc:
            logger.warning("Could not read progress snapshot %s: %s", self._key, exc)
            return None
        except (ValidationError, ValueError) as exc:
            # Covers undecodable bytes as well as bad JSON and bad shapes.
            logger.warning("Discarding corrupt progress snapshot %s: %s", self._key, exc)
            self.clear()
            return None

    def clear(self) -> None:
        try:
            self._storage.remove_item(self._key)
        except OSError:
            logger.exception("Could not remove progress snapshot %s", self._key)
