"""Component showing the current step of an attempt and collecting answers."""

from __future__ import annotations

from collections.abc import Callable

from PySide6.QtCore import Qt
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import (
    QButtonGroup,
    QComboBox,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QProgressBar,
    QPushButton,
    QRadioButton,
    QVBoxLayout,
    QWidget,
)

from quiz_player.constants.ui_constants import (
    BUTTON_CHECK_ANSWER,
    BUTTON_CHECKING_ANSWER,
    BUTTON_CONTINUE,
    BUTTON_FIRST,
    BUTTON_LAST,
    BUTTON_NEXT,
    BUTTON_PREVIOUS,
    BUTTON_SUBMIT,
    BUTTON_SUBMITTING,
    CONTENT_FONT_SIZE,
    FEEDBACK_CORRECT,
    FEEDBACK_CORRECT_ANSWER_TEMPLATE,
    FEEDBACK_INCORRECT,
    LOADING_TEXT,
    LOCKED_NOTICE,
    MATCH_PLACEHOLDER,
    PROGRESS_TEMPLATE,
    QUESTION_COUNTER_TEMPLATE,
    TEXT_ANSWER_PLACEHOLDER,
    UNTIMED_TEXT,
)
from quiz_player.core.answers import AnswerValue, MatchesAnswer, ScalarAnswer
from quiz_player.core.attempt import QuizAttempt
from quiz_player.core.models import QuestionType, QuizQuestion
from quiz_player.core.navigation import (
    ExplanationPosition,
    NavigationPosition,
    QuestionPosition,
    TransitionPosition,
)
from quiz_player.core.results import QuestionReview, ReviewStatus
from quiz_player.core.timer import format_time_seconds, timer_urgency
from quiz_player.styling.color_palette import ColorPalette
from quiz_player.styling.styles import Styles
from quiz_player.ui.question_renderer import render_explanation, render_question, render_transition

AnswerCallback = Callable[[str, AnswerValue], None]


class QuizPanel(QWidget):
    """UI component for taking a quiz one step at a time."""

    def __init__(
        self,
        on_first: Callable[[], None],
        on_previous: Callable[[], None],
        on_next: Callable[[], None],
        on_last: Callable[[], None],
        on_submit: Callable[[], None],
        on_answer: AnswerCallback,
        on_check_answer: Callable[[str], None] | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.on_first = on_first
        self.on_previous = on_previous
        self.on_next = on_next
        self.on_last = on_last
        self.on_submit = on_submit
        self.on_answer = on_answer
        self.on_check_answer = on_check_answer

        self._font_size = CONTENT_FONT_SIZE
        self._rendered_key: tuple[str, int] | None = None
        self._answer_widgets: list[QWidget] = []
        self._option_group: QButtonGroup | None = None
        self._match_boxes: dict[str, QComboBox] = {}
        self._check_question_id: str | None = None

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        header_row = QHBoxLayout()
        self.title_label = QLabel(LOADING_TEXT, self)
        self.title_label.setWordWrap(True)
        self.title_label.setStyleSheet(Styles.get_large_label_style())
        header_row.addWidget(self.title_label, stretch=1)

        self.timer_label = QLabel(UNTIMED_TEXT, self)
        self.timer_label.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
        header_row.addWidget(self.timer_label)
        layout.addLayout(header_row)

        progress_row = QHBoxLayout()
        self.counter_label = QLabel("", self)
        progress_row.addWidget(self.counter_label)
        self.progress_bar = QProgressBar(self)
        self.progress_bar.setRange(0, 100)
        self.progress_bar.setTextVisible(False)
        progress_row.addWidget(self.progress_bar, stretch=1)
        self.progress_label = QLabel("", self)
        progress_row.addWidget(self.progress_label)
        layout.addLayout(progress_row)

        self.content_view = QWebEngineView(self)
        layout.addWidget(self.content_view, stretch=3)

        self.locked_label = QLabel(LOCKED_NOTICE, self)
        self.locked_label.setWordWrap(True)
        self.locked_label.setVisible(False)
        layout.addWidget(self.locked_label)

        self.answer_container = QWidget(self)
        self.answer_layout = QVBoxLayout()
        self.answer_layout.setContentsMargins(0, 0, 0, 0)
        self.answer_container.setLayout(self.answer_layout)
        layout.addWidget(self.answer_container, stretch=2)

        feedback_row = QHBoxLayout()
        self.feedback_label = QLabel("", self)
        self.feedback_label.setWordWrap(True)
        self.feedback_label.setVisible(False)
        feedback_row.addWidget(self.feedback_label, stretch=1)
        self.check_button = QPushButton(BUTTON_CHECK_ANSWER, self)
        self.check_button.clicked.connect(self._handle_check_answer)
        self.check_button.setVisible(False)
        feedback_row.addWidget(self.check_button)
        layout.addLayout(feedback_row)

        nav_row = QHBoxLayout()
        self.first_button = QPushButton(BUTTON_FIRST, self)
        self.first_button.clicked.connect(self.on_first)
        nav_row.addWidget(self.first_button)

        self.previous_button = QPushButton(BUTTON_PREVIOUS, self)
        self.previous_button.clicked.connect(self.on_previous)
        nav_row.addWidget(self.previous_button)

        nav_row.addStretch()

        self.next_button = QPushButton(BUTTON_NEXT, self)
        self.next_button.clicked.connect(self.on_next)
        nav_row.addWidget(self.next_button)

        self.last_button = QPushButton(BUTTON_LAST, self)
        self.last_button.clicked.connect(self.on_last)
        nav_row.addWidget(self.last_button)

        self.submit_button = QPushButton(BUTTON_SUBMIT, self)
        self.submit_button.setObjectName("primaryButton")
        self.submit_button.clicked.connect(self.on_submit)
        nav_row.addWidget(self.submit_button)

        layout.addLayout(nav_row)

    def set_font_size(self, font_size: int) -> None:
        self._font_size = font_size
        self._rendered_key = None

    def show_loading(self) -> None:
        self.title_label.setText(LOADING_TEXT)
        self.content_view.setHtml("")
        self._clear_answer_widgets()
        self._rendered_key = None
        self.feedback_label.setVisible(False)
        self.check_button.setVisible(False)
        for button in (self.first_button, self.previous_button, self.next_button, self.last_button, self.submit_button):
            button.setEnabled(False)

    def show_state(self, attempt: QuizAttempt) -> None:
        """Refresh the panel from ``attempt``; the step itself is re-rendered only when it changes."""
        position = attempt.position
        if position is None:
            self.show_loading()
            return

        question = attempt.quiz.questions[position.index]
        key = (position.kind.value, position.index)
        if key != self._rendered_key:
            self._render_step(attempt, question)
            self._rendered_key = key

        self.title_label.setText(f"{attempt.quiz_title()}: {attempt.position_title()}")
        total = len(attempt.quiz.questions)
        self.counter_label.setText(QUESTION_COUNTER_TEMPLATE.format(number=position.index + 1, total=total))
        self.progress_bar.setValue(int(attempt.progress_percent()))
        self.progress_label.setText(PROGRESS_TEMPLATE.format(answered=attempt.answered_count(), total=total))

        busy = attempt.is_submitting
        self.first_button.setEnabled(not busy and attempt.can_go_first())
        self.previous_button.setEnabled(not busy and attempt.can_go_previous())
        self.next_button.setEnabled(not busy and attempt.can_go_next())
        self.next_button.setText(BUTTON_CONTINUE if isinstance(position, TransitionPosition) else BUTTON_NEXT)
        self.last_button.setEnabled(not busy and attempt.can_go_last())
        self.submit_button.setEnabled(not busy)
        self.submit_button.setText(BUTTON_SUBMITTING if busy else BUTTON_SUBMIT)
        self._show_answer_state(attempt, question, position)
        self.update_timer(attempt.time_remaining)

    def _show_answer_state(
        self, attempt: QuizAttempt, question: QuizQuestion, position: NavigationPosition
    ) -> None:
        if not isinstance(position, QuestionPosition):
            self.feedback_label.setVisible(False)
            self.check_button.setVisible(False)
            return
        for widget in self._answer_widgets:
            widget.setEnabled(not attempt.is_answer_locked(position.index))
        self._show_feedback(attempt.question_feedback(position.index))

        question_id = question.question.id
        grading = attempt.is_grading(question_id)
        needs_check = (
            attempt.is_immediate_feedback
            and not question.question.type.is_choice
            and attempt.question_result(question_id) is None
        )
        self.check_button.setVisible(needs_check)
        self.check_button.setEnabled(
            not attempt.is_submitting and not grading and attempt.answers.is_answered(question_id)
        )
        self.check_button.setText(BUTTON_CHECKING_ANSWER if grading else BUTTON_CHECK_ANSWER)
        self._check_question_id = question_id

    def _show_feedback(self, review: QuestionReview | None) -> None:
        if review is None:
            self.feedback_label.setVisible(False)
            return
        if review.status is ReviewStatus.CORRECT:
            text = FEEDBACK_CORRECT
        else:
            text = FEEDBACK_INCORRECT
            if review.correct_answer_text:
                text += " " + FEEDBACK_CORRECT_ANSWER_TEMPLATE.format(answer=review.correct_answer_text)
        self.feedback_label.setText(text)
        self.feedback_label.setStyleSheet(f"font-weight: bold; color: {ColorPalette.status_color(review.status)};")
        self.feedback_label.setVisible(True)

    def _handle_check_answer(self) -> None:
        if self.on_check_answer is not None and self._check_question_id is not None:
            self.on_check_answer(self._check_question_id)

    def update_timer(self, remaining: int | None) -> None:
        if remaining is None:
            self.timer_label.setText(UNTIMED_TEXT)
            self.timer_label.setStyleSheet("")
            return
        self.timer_label.setText(format_time_seconds(remaining))
        self.timer_label.setStyleSheet(Styles.get_timer_style(timer_urgency(remaining)))

    # --- Step rendering --------------------------------------------------------

    def _render_step(self, attempt: QuizAttempt, question: QuizQuestion) -> None:
        position = attempt.position
        self._clear_answer_widgets()
        self.locked_label.setVisible(False)

        if isinstance(position, TransitionPosition):
            transition = attempt.quiz.transition_at(position.index)
            self.content_view.setHtml(render_transition(transition, attempt.position_title(), self._font_size))
        elif isinstance(position, ExplanationPosition):
            self.content_view.setHtml(render_explanation(question, self._font_size))
        elif isinstance(position, QuestionPosition):
            self.content_view.setHtml(render_question(question, self._font_size))
            locked = attempt.is_question_locked(position.index)
            self._build_answer_widgets(
                question, attempt.answers.get(question.question.id), attempt.is_answer_locked(position.index)
            )
            self.locked_label.setVisible(locked)

    def _clear_answer_widgets(self) -> None:
        for widget in self._answer_widgets:
            self.answer_layout.removeWidget(widget)
            widget.deleteLater()
        self._answer_widgets = []
        self._option_group = None
        self._match_boxes = {}

    def _add_answer_widget(self, widget: QWidget) -> None:
        self.answer_layout.addWidget(widget)
        self._answer_widgets.append(widget)

    def _build_answer_widgets(self, question: QuizQuestion, current: AnswerValue | None, locked: bool) -> None:
        content = question.question
        if content.type.is_choice:
            self._build_choice_widgets(question, current)
        elif content.type is QuestionType.MATCHING_PAIRS:
            self._build_matching_widgets(question, current)
        else:
            self._build_text_widget(question, current)
        for widget in self._answer_widgets:
            widget.setEnabled(not locked)

    def _build_choice_widgets(self, question: QuizQuestion, current: AnswerValue | None) -> None:
        selected = current.value if isinstance(current, ScalarAnswer) else None
        self._option_group = QButtonGroup(self)
        self._option_group.setExclusive(True)
        for option in question.question.options:
            button = QRadioButton(option.text, self.answer_container)
            button.setChecked(option.id == selected)
            button.toggled.connect(
                lambda checked, option_id=option.id: checked
                and self.on_answer(question.question.id, ScalarAnswer(option_id))
            )
            self._option_group.addButton(button)
            self._add_answer_widget(button)

    def _build_text_widget(self, question: QuizQuestion, current: AnswerValue | None) -> None:
        text = current.value if isinstance(current, ScalarAnswer) else ""
        question_id = question.question.id
        if question.question.type in (QuestionType.LONG_ANSWER, QuestionType.CODING):
            editor = QPlainTextEdit(self.answer_container)
            editor.setPlaceholderText(TEXT_ANSWER_PLACEHOLDER)
            editor.setPlainText(text)
            editor.textChanged.connect(
                lambda: self.on_answer(question_id, ScalarAnswer(editor.toPlainText()))
            )
            self._add_answer_widget(editor)
            return
        line_edit = QLineEdit(self.answer_container)
        line_edit.setPlaceholderText(TEXT_ANSWER_PLACEHOLDER)
        line_edit.setText(text)
        line_edit.textChanged.connect(lambda value: self.on_answer(question_id, ScalarAnswer(value)))
        self._add_answer_widget(line_edit)

    def _build_matching_widgets(self, question: QuizQuestion, current: AnswerValue | None) -> None:
        matches = current.matches if isinstance(current, MatchesAnswer) else {}
        pairs = question.question.pairs
        right_choices = sorted(pairs, key=lambda pair: pair.right)

        grid_widget = QWidget(self.answer_container)
        grid = QGridLayout()
        grid.setContentsMargins(0, 0, 0, 0)
        grid_widget.setLayout(grid)
        for row, pair in enumerate(pairs):
            grid.addWidget(QLabel(pair.left, grid_widget), row, 0)
            box = QComboBox(grid_widget)
            box.addItem(MATCH_PLACEHOLDER, None)
            for choice in right_choices:
                box.addItem(choice.right, choice.id)
            selected = matches.get(pair.id)
            if selected is not None:
                box.setCurrentIndex(max(0, box.findData(selected)))
            box.currentIndexChanged.connect(lambda _index: self._emit_matches(question))
            grid.addWidget(box, row, 1)
            self._match_boxes[pair.id] = box
        self._add_answer_widget(grid_widget)

    def _emit_matches(self, question: QuizQuestion) -> None:
        matches = {
            left_id: box.currentData()
            for left_id, box in self._match_boxes.items()
            if box.currentData() is not None
        }
        self.on_answer(question.question.id, MatchesAnswer(matches))
