"""Question list shown beside the quiz and the results review."""

from __future__ import annotations

from collections.abc import Callable

from PySide6.QtGui import QBrush, QColor
from PySide6.QtWidgets import QLabel, QListWidget, QListWidgetItem, QVBoxLayout, QWidget

from quiz_player.constants.ui_constants import SIDEBAR_TITLE
from quiz_player.core.attempt import SidebarItem
from quiz_player.core.results import ReviewStatus
from quiz_player.styling.color_palette import ColorPalette

_STATUS_MARKERS = {
    ReviewStatus.CORRECT: "✓",
    ReviewStatus.INCORRECT: "✗",
    ReviewStatus.UNGRADED: "–",
}


def sidebar_label(item: SidebarItem) -> str:
    label = f"Question {item.number}"
    if item.status is not None:
        return f"{_STATUS_MARKERS[item.status]}  {label}"
    if item.is_locked:
        return f"🔒  {label}"
    if item.is_answered:
        return f"●  {label}"
    return f"○  {label}"


class QuestionSidebar(QWidget):
    """Clickable list of question slots."""

    def __init__(self, on_select: Callable[[int], None], parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.on_select = on_select
        self._updating = False
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        layout.setContentsMargins(0, 0, 0, 0)
        self.setLayout(layout)

        title = QLabel(SIDEBAR_TITLE, self)
        title.setStyleSheet("font-weight: bold;")
        layout.addWidget(title)

        self.list_widget = QListWidget(self)
        self.list_widget.setMinimumWidth(180)
        self.list_widget.currentRowChanged.connect(self._handle_row_changed)
        layout.addWidget(self.list_widget, stretch=1)

    def set_items(self, items: list[SidebarItem]) -> None:
        self._updating = True
        try:
            self.list_widget.clear()
            current_row = -1
            for item in items:
                entry = QListWidgetItem(sidebar_label(item))
                if item.status is not None:
                    entry.setForeground(QBrush(QColor(ColorPalette.status_color(item.status))))
                elif item.is_locked:
                    entry.setBackground(QBrush(QColor(ColorPalette.LOCKED_BG.light)))
                elif item.is_answered:
                    entry.setBackground(QBrush(QColor(ColorPalette.ANSWERED_BG.light)))
                self.list_widget.addItem(entry)
                if item.is_current:
                    current_row = item.index
            self.list_widget.setCurrentRow(current_row)
        finally:
            self._updating = False

    def _handle_row_changed(self, row: int) -> None:
        if self._updating or row < 0:
            return
        self.on_select(row)
