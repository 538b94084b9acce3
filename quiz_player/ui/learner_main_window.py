"""Qt main window running one learner attempt from first step to results."""

from __future__ import annotations

from enum import Enum, auto

from PySide6.QtCore import QEvent, QObject, Qt
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QLineEdit,
    QMainWindow,
    QPlainTextEdit,
    QPushButton,
    QStackedWidget,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from quiz_player.constants.about import APP_ABOUT_TEXT, APP_LICENSE, APP_NAME, APP_VERSION, HELP_TEXT
from quiz_player.constants.quiz_constants import (
    ANSWER_CORRECT_MESSAGE,
    ANSWER_GRADED_MESSAGE,
    SUBMIT_SUCCESS_MESSAGE,
    SUBMITTING_MESSAGE,
    TIME_UP_MESSAGE,
)
from quiz_player.constants.ui_constants import (
    ERROR_DIALOG_TITLE,
    WINDOW_MIN_HEIGHT,
    WINDOW_MIN_WIDTH,
    WINDOW_TITLE,
)
from quiz_player.core.answers import AnswerValue
from quiz_player.core.attempt import AttemptCallbacks, QuizAttempt, ShortcutKey
from quiz_player.core.models import Quiz
from quiz_player.core.navigation import NavigationResult
from quiz_player.core.persistence import PersistenceLayer
from quiz_player.core.schemas import QuestionResult, SubmissionResult
from quiz_player.core.submission import SubmissionClient
from quiz_player.styling.styles import Styles
from quiz_player.ui.components.question_sidebar import QuestionSidebar
from quiz_player.ui.components.quiz_panel import QuizPanel
from quiz_player.ui.components.results_panel import ResultsPanel
from quiz_player.ui.dialog_helpers import confirm_submit_quiz, show_error, show_info

_SHORTCUT_KEYS = {
    Qt.Key_Home: ShortcutKey.HOME,
    Qt.Key_End: ShortcutKey.END,
    Qt.Key_Left: ShortcutKey.LEFT,
    Qt.Key_Right: ShortcutKey.RIGHT,
}

_TEXT_ENTRY_WIDGETS = (QLineEdit, QPlainTextEdit, QTextEdit)


def is_text_entry(widget: QWidget | None) -> bool:
    return isinstance(widget, _TEXT_ENTRY_WIDGETS)


class LearnerView(Enum):
    """Which panel the window is showing."""

    QUIZ = auto()
    RESULTS = auto()


class LearnerMainWindow(QMainWindow):
    """Main Qt window wiring a ``QuizAttempt`` to the quiz and results panels."""

    def __init__(
        self,
        quiz: Quiz,
        persistence: PersistenceLayer,
        client: SubmissionClient,
        attempt_id: str | None,
        is_test_mode: bool = False,
    ) -> None:
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)
        self.setMinimumSize(WINDOW_MIN_WIDTH, WINDOW_MIN_HEIGHT)

        self._view = LearnerView.QUIZ
        self._time_up = False
        self.attempt = QuizAttempt(
            quiz,
            persistence,
            attempt_id=attempt_id,
            client=client,
            is_test_mode=is_test_mode,
            callbacks=AttemptCallbacks(
                on_change=self._refresh_state,
                on_tick=self._handle_tick,
                on_time_up=self._handle_time_up,
                on_submit_requested=self._handle_submit,
                on_submitted=self._handle_submitted,
                on_error=self._handle_error,
                on_question_graded=self._handle_question_graded,
            ),
        )

        self._build_ui()
        self.setStyleSheet(Styles.get_main_window_style())
        QApplication.instance().installEventFilter(self)

        self._refresh_state()
        self.attempt.start()

    def _build_ui(self) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)

        root_layout = QVBoxLayout()
        central_widget.setLayout(root_layout)

        top_row = QHBoxLayout()
        top_row.addStretch()
        self.help_button = QPushButton("Help", self)
        self.help_button.clicked.connect(self._handle_help)
        top_row.addWidget(self.help_button)
        self.about_button = QPushButton(f"About {APP_NAME}", self)
        self.about_button.clicked.connect(self._handle_about)
        top_row.addWidget(self.about_button)
        root_layout.addLayout(top_row)

        body_row = QHBoxLayout()
        self.sidebar = QuestionSidebar(on_select=self._handle_jump, parent=self)
        body_row.addWidget(self.sidebar)

        self.view_stack = QStackedWidget(self)
        self.quiz_panel = QuizPanel(
            on_first=self.attempt.first,
            on_previous=self.attempt.previous,
            on_next=self.attempt.next,
            on_last=self.attempt.last,
            on_submit=self._handle_submit,
            on_answer=self._handle_answer,
            on_check_answer=self.attempt.submit_answer,
            parent=self,
        )
        self.results_panel = ResultsPanel(
            on_previous=self.attempt.previous,
            on_next=self.attempt.next,
            parent=self,
        )
        self.view_stack.addWidget(self.quiz_panel)
        self.view_stack.addWidget(self.results_panel)
        body_row.addWidget(self.view_stack, stretch=1)

        root_layout.addLayout(body_row, stretch=1)

    # --- State -------------------------------------------------------------

    def _set_view(self, view: LearnerView) -> None:
        self._view = view
        self.view_stack.setCurrentWidget(self.quiz_panel if view is LearnerView.QUIZ else self.results_panel)

    def _refresh_state(self) -> None:
        results = self.attempt.results
        if results is not None:
            if self._view is not LearnerView.RESULTS:
                self._set_view(LearnerView.RESULTS)
            self.results_panel.show_results(results)
        else:
            self.quiz_panel.show_state(self.attempt)
        self.sidebar.set_items(self.attempt.sidebar_items())

    # --- Handlers ----------------------------------------------------------

    def _handle_answer(self, question_id: str, value: AnswerValue) -> None:
        self.attempt.set_answer(question_id, value)

    def _handle_jump(self, index: int) -> None:
        if self.attempt.jump_to_question(index) is NavigationResult.IGNORED:
            # Put the selection back on the current question.
            self.sidebar.set_items(self.attempt.sidebar_items())

    def _handle_tick(self, remaining: int) -> None:
        self.quiz_panel.update_timer(remaining)

    def _handle_time_up(self) -> None:
        self._time_up = True
        self.statusBar().showMessage(TIME_UP_MESSAGE)

    def _handle_submit(self) -> None:
        if self.attempt.is_submitting or self.attempt.is_submitted:
            return
        if not confirm_submit_quiz(self, self.attempt.submit_confirmation_text()):
            return
        self._submit()

    def _submit(self) -> None:
        if self.attempt.submit() and not self._time_up:
            self.statusBar().showMessage(SUBMITTING_MESSAGE)

    def _handle_submitted(self, result: SubmissionResult) -> None:
        if not self._time_up:
            self.statusBar().showMessage(SUBMIT_SUCCESS_MESSAGE, 5000)

    def _handle_question_graded(self, question_id: str, result: QuestionResult) -> None:
        self.statusBar().showMessage(ANSWER_CORRECT_MESSAGE if result.is_correct else ANSWER_GRADED_MESSAGE, 3000)

    def _handle_error(self, message: str) -> None:
        self.statusBar().clearMessage()
        show_error(self, ERROR_DIALOG_TITLE, message)

    def _handle_about(self) -> None:
        details = (
            f"{APP_NAME} v{APP_VERSION}\n"
            f"License: {APP_LICENSE}\n\n"
            f"{APP_ABOUT_TEXT}"
        )
        show_info(self, f"About {APP_NAME}", details)

    def _handle_help(self) -> None:
        show_info(self, f"{APP_NAME} Help", HELP_TEXT)

    # --- Qt overrides ------------------------------------------------------

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        if event.type() != QEvent.KeyPress or not self.isActiveWindow():
            return False
        key = _SHORTCUT_KEYS.get(event.key())
        if key is None or event.modifiers() not in (Qt.NoModifier, Qt.KeypadModifier):
            return False
        result = self.attempt.handle_shortcut(
            key,
            text_entry_focused=is_text_entry(QApplication.focusWidget()),
        )
        return result is not NavigationResult.IGNORED

    def closeEvent(self, event: QCloseEvent) -> None:
        QApplication.instance().removeEventFilter(self)
        self.attempt.save()
        self.attempt.dispose()
        super().closeEvent(event)
