"""Static metadata describing the quiz player."""

APP_NAME = "Quiz Player"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "Quiz Player runs a learner's attempt at a quiz: it walks through transitions, questions and "
    "explanations, keeps a countdown, saves progress locally and shows the scored results."
)

HELP_TEXT = (
    "Use Previous / Next or the question list to move through the quiz.\n"
    "Keyboard: Left / Right move one step, Home jumps to the start, End to the last question. "
    "Shortcuts are ignored while typing an answer.\n\n"
    "In test mode, answered questions are locked once you move past them. "
    "In exam mode you can only move forward."
)
