import threading
import time

from PySide6.QtCore import QCoreApplication

from quiz_player.core.background import BackgroundRunner


def _wait_until_settled(runner, timeout=5.0):
    deadline = time.monotonic() + timeout
    while runner.pending_count and time.monotonic() < deadline:
        QCoreApplication.processEvents()
        time.sleep(0.01)


def test_success_is_delivered_on_the_calling_thread(qapp):
    runner = BackgroundRunner()
    worker_threads = []
    delivered = []

    def task():
        worker_threads.append(threading.current_thread())
        return 42

    runner.run(task, lambda value: delivered.append((value, threading.current_thread())), delivered.append)
    assert runner.pending_count == 1

    _wait_until_settled(runner)

    assert runner.pending_count == 0
    assert delivered == [(42, threading.main_thread())]
    assert worker_threads[0] is not threading.main_thread()


def test_failure_is_delivered_to_the_failure_handler(qapp):
    runner = BackgroundRunner()
    successes = []
    failures = []

    def task():
        raise RuntimeError("service down")

    runner.run(task, successes.append, failures.append)
    _wait_until_settled(runner)

    assert successes == []
    assert len(failures) == 1
    assert isinstance(failures[0], RuntimeError)
    assert str(failures[0]) == "service down"


def test_nothing_is_delivered_before_events_are_processed(qapp):
    runner = BackgroundRunner()
    release = threading.Event()
    delivered = []

    runner.run(lambda: release.wait(5) and "done", delivered.append, delivered.append)

    assert delivered == []
    assert runner.pending_count == 1

    release.set()
    _wait_until_settled(runner)

    assert delivered == ["done"]
