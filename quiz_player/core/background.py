"""Running blocking scoring-service calls off the Qt thread."""

from __future__ import annotations

from collections.abc import Callable
import logging
from threading import Thread
from typing import Any

from PySide6.QtCore import QObject, Signal, Slot

logger = logging.getLogger(__name__)

Task = Callable[[], Any]
SuccessHandler = Callable[[Any], None]
FailureHandler = Callable[[Exception], None]


class _TaskRelay(QObject):
    """Lives on the Qt thread; signals emitted by the worker are queued to it."""

    succeeded = Signal(object)
    failed = Signal(object)

    def __init__(
        self,
        on_success: SuccessHandler,
        on_failure: FailureHandler,
        on_settled: Callable[["_TaskRelay"], None],
    ) -> None:
        super().__init__()
        self._on_success = on_success
        self._on_failure = on_failure
        self._on_settled = on_settled
        self.succeeded.connect(self._deliver_success)
        self.failed.connect(self._deliver_failure)

    @Slot(object)
    def _deliver_success(self, value: object) -> None:
        self._on_settled(self)
        self._on_success(value)

    @Slot(object)
    def _deliver_failure(self, error: object) -> None:
        self._on_settled(self)
        self._on_failure(error)


class BackgroundRunner:
    """Runs each task on a daemon thread and reports back on the Qt event loop.

    Handlers are invoked from the thread that called ``run`` once that
    thread's event loop processes the queued signal.
    """

    def __init__(self, thread_name: str = "QuizScoringRequest") -> None:
        self._thread_name = thread_name
        self._pending: set[_TaskRelay] = set()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def run(self, task: Task, on_success: SuccessHandler, on_failure: FailureHandler) -> None:
        relay = _TaskRelay(on_success, on_failure, self._pending.discard)
        self._pending.add(relay)

        def work() -> None:
            try:
                value = task()
            except Exception as exc:
                logger.debug("Background task %s failed: %s", self._thread_name, exc)
                relay.failed.emit(exc)
                return
            relay.succeeded.emit(value)

        Thread(target=work, name=self._thread_name, daemon=True).start()
