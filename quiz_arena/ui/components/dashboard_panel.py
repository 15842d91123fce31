"""Component listing published quizzes."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from quiz_arena.constants.ui_constants import NO_QUIZZES_MESSAGE, PDF_FILE_FILTER
from quiz_arena.core.errors import PersistenceError
from quiz_arena.core.models import Quiz
from quiz_arena.core.quiz_exporter import default_pdf_name, save_quiz_pdf
from quiz_arena.core.quiz_manager import QuizManager
from quiz_arena.ui.dialog_helpers import confirm_delete, show_error, show_info
from quiz_arena.styling.styles import Styles


class DashboardPanel(QWidget):
    """UI component showing the teacher's quizzes with their actions."""

    def __init__(
        self,
        quiz_manager: QuizManager,
        on_show_leaderboard: Callable[[Quiz], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.quiz_manager = quiz_manager
        self.on_show_leaderboard = on_show_leaderboard
        self._quizzes: list[Quiz] = []

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        heading = QLabel("Teacher Dashboard", self)
        heading.setStyleSheet(Styles.get_heading_style())
        layout.addWidget(heading)

        self.quiz_list = QListWidget(self)
        self.quiz_list.setAlternatingRowColors(True)
        self.quiz_list.currentRowChanged.connect(lambda _: self._update_buttons())
        layout.addWidget(self.quiz_list, stretch=1)

        self.empty_label = QLabel(NO_QUIZZES_MESSAGE, self)
        self.empty_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.empty_label)

        button_row = QHBoxLayout()
        self.pdf_button = QPushButton("Download PDF", self)
        self.pdf_button.clicked.connect(self._handle_download_pdf)
        button_row.addWidget(self.pdf_button)

        self.leaderboard_button = QPushButton("Leaderboard", self)
        self.leaderboard_button.clicked.connect(self._handle_leaderboard)
        button_row.addWidget(self.leaderboard_button)

        button_row.addStretch()

        self.delete_button = QPushButton("Delete Quiz", self)
        self.delete_button.clicked.connect(self._handle_delete)
        button_row.addWidget(self.delete_button)
        layout.addLayout(button_row)

        self._update_buttons()

    def set_quizzes(self, quizzes: list[Quiz]) -> None:
        """Replace the list with a fresh store snapshot, keeping the selection."""
        selected = self._selected_quiz()
        self._quizzes = list(quizzes)
        self.quiz_list.clear()
        for quiz in self._quizzes:
            created = quiz.created_at.astimezone().strftime("%Y-%m-%d")
            label = (
                f"{quiz.title} | {quiz.question_count} questions · "
                f"{quiz.effective_duration_minutes} Mins · {quiz.difficulty.value} · {created}"
            )
            QListWidgetItem(label, self.quiz_list)
        if selected is not None:
            for row, quiz in enumerate(self._quizzes):
                if quiz.id == selected.id:
                    self.quiz_list.setCurrentRow(row)
                    break
        self.empty_label.setVisible(not self._quizzes)
        self._update_buttons()

    def _selected_quiz(self) -> Quiz | None:
        row = self.quiz_list.currentRow()
        if 0 <= row < len(self._quizzes):
            return self._quizzes[row]
        return None

    def _update_buttons(self) -> None:
        has_selection = self._selected_quiz() is not None
        for button in (self.pdf_button, self.leaderboard_button, self.delete_button):
            button.setEnabled(has_selection)

    def _handle_download_pdf(self) -> None:
        quiz = self._selected_quiz()
        if quiz is None:
            return
        file_path, _ = QFileDialog.getSaveFileName(
            self,
            "Save quiz as PDF",
            str(Path.cwd() / default_pdf_name(quiz)),
            PDF_FILE_FILTER,
        )
        if not file_path:
            return
        try:
            saved = save_quiz_pdf(Path(file_path), quiz)
        except OSError as exc:
            show_error(self, "Export failed", str(exc))
            return
        show_info(self, "Quiz saved", f"Quiz exported to {saved}.")

    def _handle_leaderboard(self) -> None:
        quiz = self._selected_quiz()
        if quiz is not None:
            self.on_show_leaderboard(quiz)

    def _handle_delete(self) -> None:
        quiz = self._selected_quiz()
        if quiz is None or not confirm_delete(self, f"quiz '{quiz.title}'"):
            return
        try:
            self.quiz_manager.delete_quiz(quiz.id)
        except (LookupError, PersistenceError) as exc:
            show_error(self, "Delete failed", str(exc))
