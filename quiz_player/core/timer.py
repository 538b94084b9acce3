"""Countdown timer for timed attempts."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum, auto
import logging

from PySide6.QtCore import QObject, QTimer

from quiz_player.constants.quiz_constants import (
    TIMER_TICK_INTERVAL_MS,
    TIMER_URGENT_SECONDS,
    TIMER_WARNING_SECONDS,
)
from quiz_player.core.models import QuizSettings

logger = logging.getLogger(__name__)


class TimerUrgency(Enum):
    NORMAL = auto()
    WARNING = auto()
    URGENT = auto()


def timer_urgency(seconds_remaining: int) -> TimerUrgency:
    if seconds_remaining <= TIMER_URGENT_SECONDS:
        return TimerUrgency.URGENT
    if seconds_remaining <= TIMER_WARNING_SECONDS:
        return TimerUrgency.WARNING
    return TimerUrgency.NORMAL


def format_time_seconds(seconds: int) -> str:
    """Render a countdown as ``MM:SS`` or ``H:MM:SS``."""
    seconds = max(0, int(seconds))
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def format_time_spent(seconds: int) -> str:
    seconds = max(0, int(seconds))
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def resolve_start_seconds(
    settings: QuizSettings,
    restored_seconds: int | None,
    *,
    has_snapshot: bool,
    is_test_mode: bool,
) -> int | None:
    """Pick the countdown start value for a new or resumed attempt.

    A restored value is used only when it fits inside the configured limit.
    A snapshot saved without a timer stays untimed outside test mode; in test
    or exam mode the configured limit always applies.
    """
    limit = settings.time_limit_seconds
    if limit is None:
        return None
    if not has_snapshot:
        return limit
    if restored_seconds is None:
        return limit if is_test_mode else None
    if 0 <= restored_seconds <= limit:
        return restored_seconds
    return limit


class TimerController(QObject):
    """One-second countdown that fires ``on_expired`` exactly once at zero."""

    def __init__(
        self,
        start_seconds: int | None,
        on_tick: Callable[[int], None] | None = None,
        on_expired: Callable[[], None] | None = None,
        parent: QObject | None = None,
        interval_ms: int = TIMER_TICK_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)
        self._remaining = start_seconds
        self._on_tick = on_tick
        self._on_expired = on_expired
        self._expired = False
        self._disposed = False

        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self.tick)

    @property
    def remaining(self) -> int | None:
        return self._remaining

    @property
    def has_limit(self) -> bool:
        return self._remaining is not None

    @property
    def is_expired(self) -> bool:
        return self._expired

    def is_running(self) -> bool:
        return self._timer.isActive()

    def start(self) -> None:
        if self._remaining is None or self._expired or self._disposed:
            return
        if self._remaining <= 0:
            self._expire()
            return
        if not self._timer.isActive():
            self._timer.start()

    def stop(self) -> None:
        if self._timer.isActive():
            self._timer.stop()

    def tick(self) -> None:
        if self._remaining is None or self._expired or self._disposed:
            return
        self._remaining = max(0, self._remaining - 1)
        if self._on_tick is not None:
            self._on_tick(self._remaining)
        if self._remaining == 0:
            self._expire()

    def dispose(self) -> None:
        """Stop ticking for good; no callback fires afterwards."""
        self.stop()
        self._disposed = True
        self._on_tick = None
        self._on_expired = None

    def _expire(self) -> None:
        if self._expired:
            return
        self._expired = True
        self.stop()
        logger.info("Countdown reached zero")
        if self._on_expired is not None:
            self._on_expired()
