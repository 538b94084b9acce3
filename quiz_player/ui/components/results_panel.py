"""Component for reviewing a scored attempt."""

from __future__ import annotations

from collections.abc import Callable

from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import (
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from quiz_player.constants.ui_constants import (
    BUTTON_REVIEW_NEXT,
    BUTTON_REVIEW_PREVIOUS,
    CONTENT_FONT_SIZE,
    CORRECT_ANSWER_LABEL,
    QUESTION_COUNTER_TEMPLATE,
    RESULTS_FAILED,
    RESULTS_PASSED,
    RESULTS_TITLE,
    YOUR_ANSWER_LABEL,
)
from quiz_player.core.results import MATCH_ARROW, QuestionReview, ResultsPresenter, ReviewStatus
from quiz_player.styling.color_palette import ColorPalette
from quiz_player.styling.styles import Styles
from quiz_player.ui.question_renderer import render_question


def format_summary(presenter: ResultsPresenter) -> str:
    summary = presenter.summary()
    verdict = RESULTS_PASSED if summary.passed else RESULTS_FAILED
    return (
        f"Score: {summary.score:g} / {summary.total_points:g}  ({summary.percentage:.1f}%, grade {summary.grade})\n"
        f"Correct: {summary.correct_count} of {summary.question_count}    "
        f"Time spent: {summary.time_spent_text}    {verdict}"
    )


def format_user_answer(review: QuestionReview) -> str:
    if review.match_rows:
        return "\n".join(
            f"{'✓' if row.is_correct else '✗'} {row.left} {MATCH_ARROW} {row.right}" for row in review.match_rows
        )
    return review.user_answer_text


class ResultsPanel(QWidget):
    """UI component showing the score and a question-by-question review."""

    def __init__(
        self,
        on_previous: Callable[[], None],
        on_next: Callable[[], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.on_previous = on_previous
        self.on_next = on_next
        self._font_size = CONTENT_FONT_SIZE
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        title = QLabel(RESULTS_TITLE, self)
        title.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(title)

        self.summary_label = QLabel("", self)
        self.summary_label.setWordWrap(True)
        layout.addWidget(self.summary_label)

        self.counter_label = QLabel("", self)
        layout.addWidget(self.counter_label)

        self.question_view = QWebEngineView(self)
        layout.addWidget(self.question_view, stretch=3)

        self.answer_box = QGroupBox(YOUR_ANSWER_LABEL, self)
        answer_layout = QVBoxLayout()
        self.answer_box.setLayout(answer_layout)
        self.status_label = QLabel("", self.answer_box)
        answer_layout.addWidget(self.status_label)
        self.user_answer_label = QLabel("", self.answer_box)
        self.user_answer_label.setWordWrap(True)
        answer_layout.addWidget(self.user_answer_label)
        self.points_label = QLabel("", self.answer_box)
        answer_layout.addWidget(self.points_label)
        layout.addWidget(self.answer_box)

        self.correct_box = QGroupBox(CORRECT_ANSWER_LABEL, self)
        correct_layout = QVBoxLayout()
        self.correct_box.setLayout(correct_layout)
        self.correct_answer_label = QLabel("", self.correct_box)
        self.correct_answer_label.setWordWrap(True)
        correct_layout.addWidget(self.correct_answer_label)
        self.correct_box.setVisible(False)
        layout.addWidget(self.correct_box)

        nav_row = QHBoxLayout()
        self.previous_button = QPushButton(BUTTON_REVIEW_PREVIOUS, self)
        self.previous_button.clicked.connect(self.on_previous)
        nav_row.addWidget(self.previous_button)
        nav_row.addStretch()
        self.next_button = QPushButton(BUTTON_REVIEW_NEXT, self)
        self.next_button.clicked.connect(self.on_next)
        nav_row.addWidget(self.next_button)
        layout.addLayout(nav_row)

    def show_results(self, presenter: ResultsPresenter) -> None:
        self.summary_label.setText(format_summary(presenter))
        review = presenter.current_review()
        navigator = presenter.navigator
        self.previous_button.setEnabled(navigator.can_go_previous())
        self.next_button.setEnabled(navigator.can_go_next())
        if review is None:
            self.question_view.setHtml("")
            return
        self._show_review(review, presenter.summary().question_count)

    def _show_review(self, review: QuestionReview, total: int) -> None:
        self.counter_label.setText(QUESTION_COUNTER_TEMPLATE.format(number=review.index + 1, total=total))
        self.question_view.setHtml(render_question(review.question, self._font_size))

        if review.status is ReviewStatus.UNGRADED:
            status_text = "Not graded"
        else:
            status_text = "Correct" if review.status is ReviewStatus.CORRECT else "Incorrect"
        self.status_label.setText(status_text)
        self.status_label.setStyleSheet(f"font-weight: bold; color: {ColorPalette.status_color(review.status)};")
        self.answer_box.setStyleSheet(Styles.get_review_box_style(review.status is ReviewStatus.CORRECT))
        self.user_answer_label.setText(format_user_answer(review))
        self.points_label.setText(f"Points: {review.points_earned:g} / {review.points_possible:g}")

        self.correct_box.setVisible(review.show_correct_answer)
        self.correct_answer_label.setText(review.correct_answer_text or "")
