"""Application entry point for the quiz player."""

from __future__ import annotations

import argparse
import sys
import time

from PySide6.QtWidgets import QApplication

from quiz_player.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from quiz_player.constants.quiz_constants import DEFAULT_QUIZ_DEFINITION_PATH
from quiz_player.core.models import Quiz
from quiz_player.core.persistence import JsonFileStorage, PersistenceLayer
from quiz_player.core.submission import AttemptStartError, ScoringServiceError, SubmissionClient
from quiz_player.server.quiz_catalog import QuizCatalog, QuizDefinitionError, load_quiz_definition
from quiz_player.server.scoring_server import start_scoring_server
from quiz_player.ui.learner_main_window import LearnerMainWindow
from quiz_player.utils.logging_config import configure_logging

_SERVER_READY_ATTEMPTS = 40
_SERVER_READY_DELAY_SECONDS = 0.25


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Take a quiz.")
    parser.add_argument(
        "quiz_path",
        nargs="?",
        default=DEFAULT_QUIZ_DEFINITION_PATH,
        help="quiz definition JSON file (default: %(default)s)",
    )
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="lock answered questions once the learner moves past them",
    )
    return parser.parse_args(argv)


def _wait_for_quiz(client: SubmissionClient, quiz_id: str) -> Quiz:
    """Fetch the quiz, retrying while the embedded server is still starting."""
    for attempt in range(_SERVER_READY_ATTEMPTS):
        try:
            return client.fetch_quiz(quiz_id)
        except ScoringServiceError:
            if attempt == _SERVER_READY_ATTEMPTS - 1:
                raise
            time.sleep(_SERVER_READY_DELAY_SECONDS)
    raise ScoringServiceError(f"Quiz {quiz_id} could not be fetched.")


def main(argv: list[str] | None = None) -> None:
    """Initialize logging, start the scoring server, and launch the Qt UI."""
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    logger = configure_logging()
    logger.info("Starting quiz player…")

    try:
        definition = load_quiz_definition(args.quiz_path)
    except QuizDefinitionError as exc:
        logger.error("%s", exc)
        sys.exit(1)

    start_scoring_server(QuizCatalog([definition]), host=DEFAULT_HOST, port=DEFAULT_PORT)
    client = SubmissionClient()
    try:
        quiz = _wait_for_quiz(client, definition.id)
    except ScoringServiceError:
        logger.exception("Scoring service did not come up")
        sys.exit(1)

    attempt_id: str | None = None
    try:
        attempt_id = client.start_attempt(quiz.id).attempt_id
    except AttemptStartError:
        # The learner can still work through the quiz; submitting will ask for a restart.
        logger.exception("Could not start an attempt for quiz %s", quiz.id)

    app = QApplication(sys.argv)
    window = LearnerMainWindow(
        quiz=quiz,
        persistence=PersistenceLayer(quiz.id, JsonFileStorage()),
        client=client,
        attempt_id=attempt_id,
        is_test_mode=args.test_mode,
    )
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
