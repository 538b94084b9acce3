"""Qt UI constants used across widgets."""

WINDOW_TITLE: str = "Quiz Player"
WINDOW_MIN_WIDTH: int = 1100
WINDOW_MIN_HEIGHT: int = 720
CONTENT_FONT_SIZE: int = 14

BUTTON_FIRST: str = "First"
BUTTON_PREVIOUS: str = "Previous"
BUTTON_NEXT: str = "Next"
BUTTON_LAST: str = "Last"
BUTTON_SUBMIT: str = "Submit Quiz"
BUTTON_SUBMITTING: str = "Submitting..."
BUTTON_CHECK_ANSWER: str = "Check Answer"
BUTTON_CHECKING_ANSWER: str = "Checking..."
BUTTON_CONTINUE: str = "Continue"
BUTTON_REVIEW_PREVIOUS: str = "Previous Question"
BUTTON_REVIEW_NEXT: str = "Next Question"

SUBMIT_DIALOG_TITLE: str = "Submit Quiz?"
TIME_UP_TITLE: str = "Time's up"
ERROR_DIALOG_TITLE: str = "Quiz Player"

LOADING_TEXT: str = "Loading quiz..."
UNTIMED_TEXT: str = "No time limit"
PROGRESS_TEMPLATE: str = "{answered} / {total} answered"
QUESTION_COUNTER_TEMPLATE: str = "Question {number} of {total}"
SIDEBAR_TITLE: str = "Questions"
TEXT_ANSWER_PLACEHOLDER: str = "Type your answer here"
MATCH_PLACEHOLDER: str = "Select a match"
LOCKED_NOTICE: str = "This question is locked. Answers cannot be changed after moving on in test mode."

RESULTS_TITLE: str = "Quiz Results"
RESULTS_PASSED: str = "Passed"
RESULTS_FAILED: str = "Not passed"
YOUR_ANSWER_LABEL: str = "Your answer"
CORRECT_ANSWER_LABEL: str = "Correct answer"
FEEDBACK_CORRECT: str = "Correct!"
FEEDBACK_INCORRECT: str = "Incorrect."
FEEDBACK_CORRECT_ANSWER_TEMPLATE: str = "Correct answer: {answer}"
