"""Component showing the ranked results of one quiz."""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from quiz_arena.constants.quiz_constants import PODIUM_SIZE
from quiz_arena.constants.ui_constants import NO_RESULTS_MESSAGE
from quiz_arena.core.models import Quiz, Result
from quiz_arena.core.services.leaderboard import build_leaderboard
from quiz_arena.core.services.scoring_engine import percentage
from quiz_arena.styling.styles import Styles

_COLUMNS = ("Rank", "Student", "Score", "%", "Submitted")


class LeaderboardPanel(QWidget):
    """UI component rendering a leaderboard from the latest results snapshot."""

    def __init__(self, on_back: Callable[[], None], parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.on_back = on_back
        self._quiz: Quiz | None = None
        self._results: list[Result] = []

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        header_row = QHBoxLayout()
        self.back_button = QPushButton("Back", self)
        self.back_button.clicked.connect(self.on_back)
        header_row.addWidget(self.back_button)

        self.title_label = QLabel("", self)
        self.title_label.setStyleSheet(Styles.get_heading_style())
        header_row.addWidget(self.title_label, stretch=1)
        layout.addLayout(header_row)

        self.table = QTableWidget(0, len(_COLUMNS), self)
        self.table.setHorizontalHeaderLabels(list(_COLUMNS))
        self.table.horizontalHeader().setSectionResizeMode(1, QHeaderView.Stretch)
        self.table.verticalHeader().setVisible(False)
        self.table.setEditTriggers(QTableWidget.NoEditTriggers)
        layout.addWidget(self.table, stretch=1)

        self.empty_label = QLabel(NO_RESULTS_MESSAGE, self)
        self.empty_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.empty_label)

    @property
    def quiz(self) -> Quiz | None:
        return self._quiz

    def show_quiz(self, quiz: Quiz, results: list[Result]) -> None:
        self._quiz = quiz
        self.title_label.setText(f"Leaderboard: {quiz.title}")
        self.set_results(results)

    def set_results(self, results: list[Result]) -> None:
        self._results = list(results)
        if self._quiz is None:
            return
        entries = build_leaderboard(self._results, quiz_id=self._quiz.id)
        self.table.setRowCount(len(entries))
        for row, entry in enumerate(entries):
            rank_text = f"#{entry.rank}" + (" 🏆" if entry.rank <= PODIUM_SIZE else "")
            cells = (
                rank_text,
                entry.student_name,
                f"{entry.score} / {entry.total}",
                f"{percentage(entry.score, entry.total)}%",
                entry.submitted_at.astimezone().strftime("%Y-%m-%d %H:%M"),
            )
            for column, text in enumerate(cells):
                self.table.setItem(row, column, QTableWidgetItem(text))
        self.empty_label.setVisible(not entries)
