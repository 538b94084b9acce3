"""Quiz-related constants shared across UI and core layers."""

from pathlib import Path

TIMER_TICK_INTERVAL_MS: int = 1000
TIMER_WARNING_SECONDS: int = 300
TIMER_URGENT_SECONDS: int = 60

PROGRESS_KEY_PREFIX: str = "quiz-progress-"
DEFAULT_PROGRESS_DIR: Path = Path.home() / ".quiz_player" / "progress"

DEFAULT_QUESTION_POINTS: float = 1.0
DEFAULT_QUIZ_DEFINITION_PATH: str = "quiz_definition.json"

NO_ATTEMPT_MESSAGE: str = "No attempt ID found. Please restart the quiz."
SUBMIT_FAILED_MESSAGE: str = "Failed to submit quiz. Please try again."
TIME_UP_MESSAGE: str = "Time's up! Your quiz has been automatically submitted."
SUBMIT_SUCCESS_MESSAGE: str = "Quiz submitted successfully!"
UNANSWERED_WARNING: str = "Unanswered questions will be marked as incorrect."
SUBMIT_FINAL_WARNING: str = "Once submitted, you cannot change your answers."
SUBMITTING_MESSAGE: str = "Submitting your answers..."
ANSWER_SUBMIT_FAILED_MESSAGE: str = "Failed to submit answer. Please try again."
ANSWER_CORRECT_MESSAGE: str = "Correct!"
ANSWER_GRADED_MESSAGE: str = "Submitted. Check feedback below."
