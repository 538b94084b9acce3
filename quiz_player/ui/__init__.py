"""Qt UI components for the learner application."""

from .dialog_helpers import (
    confirm_submit_quiz,
    show_error,
    show_info,
    show_warning,
)
from .learner_main_window import LearnerMainWindow
from .question_renderer import render_explanation, render_question, render_transition

__all__ = [
    "LearnerMainWindow",
    "confirm_submit_quiz",
    "show_error",
    "show_info",
    "show_warning",
    "render_explanation",
    "render_question",
    "render_transition",
]
