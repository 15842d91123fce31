"""Component for uploading and removing study notes."""

from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from quiz_arena.constants.ui_constants import (
    NO_NOTES_MESSAGE,
    NOTE_FIELDS_REQUIRED_MESSAGE,
    NOTE_UPLOAD_BUTTON,
    PDF_FILE_FILTER,
    SELECT_PDF_BUTTON,
)
from quiz_arena.core.errors import PersistenceError, ValidationError
from quiz_arena.core.models import Note
from quiz_arena.core.quiz_manager import QuizManager
from quiz_arena.ui.dialog_helpers import confirm_delete, show_error, show_info
from quiz_arena.styling.styles import Styles


class NotesPanel(QWidget):
    """UI component managing the study materials students can download."""

    def __init__(self, quiz_manager: QuizManager, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.quiz_manager = quiz_manager
        self._notes: list[Note] = []
        self._selected_file: Path | None = None

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        heading = QLabel("Study Notes", self)
        heading.setStyleSheet(Styles.get_heading_style())
        layout.addWidget(heading)

        upload_row = QHBoxLayout()
        self.title_input = QLineEdit(self)
        self.title_input.setPlaceholderText("e.g., Chapter 1 Summary")
        upload_row.addWidget(self.title_input, stretch=1)

        self.file_button = QPushButton(SELECT_PDF_BUTTON, self)
        self.file_button.clicked.connect(self._handle_select_file)
        upload_row.addWidget(self.file_button)

        self.upload_button = QPushButton(NOTE_UPLOAD_BUTTON, self)
        self.upload_button.setProperty("primary", True)
        self.upload_button.clicked.connect(self._handle_upload)
        upload_row.addWidget(self.upload_button)
        layout.addLayout(upload_row)

        self.status_label = QLabel("", self)
        layout.addWidget(self.status_label)

        self.note_list = QListWidget(self)
        self.note_list.setAlternatingRowColors(True)
        layout.addWidget(self.note_list, stretch=1)

        self.empty_label = QLabel(NO_NOTES_MESSAGE, self)
        self.empty_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.empty_label)

        self.delete_button = QPushButton("Delete Note", self)
        self.delete_button.clicked.connect(self._handle_delete)
        layout.addWidget(self.delete_button)

    def set_notes(self, notes: list[Note]) -> None:
        self._notes = list(notes)
        self.note_list.clear()
        for note in self._notes:
            uploaded = note.created_at.astimezone().strftime("%Y-%m-%d")
            QListWidgetItem(f"{note.title} ({note.file_name}, {uploaded})", self.note_list)
        self.empty_label.setVisible(not self._notes)
        self.delete_button.setEnabled(bool(self._notes))

    def _set_status(self, message: str, is_error: bool = False) -> None:
        self.status_label.setText(message)
        self.status_label.setStyleSheet(Styles.get_status_style(is_error))

    def _handle_select_file(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(self, "Select note", str(Path.home()), PDF_FILE_FILTER)
        if file_path:
            self._selected_file = Path(file_path)
            self._set_status(f"Selected: {self._selected_file.name}")

    def _handle_upload(self) -> None:
        title = self.title_input.text().strip()
        if not title or self._selected_file is None:
            self._set_status(NOTE_FIELDS_REQUIRED_MESSAGE, is_error=True)
            return
        try:
            content = self._selected_file.read_bytes()
            self.quiz_manager.upload_note(title, self._selected_file.name, content, "application/pdf")
        except (OSError, ValidationError, PersistenceError) as exc:
            self._set_status(f"Failed to upload note: {exc}", is_error=True)
            return
        self.title_input.clear()
        self._selected_file = None
        self._set_status("")
        show_info(self, "Note uploaded", "Note uploaded successfully!")

    def _handle_delete(self) -> None:
        row = self.note_list.currentRow()
        if not 0 <= row < len(self._notes):
            return
        note = self._notes[row]
        if not confirm_delete(self, f"note '{note.title}'"):
            return
        try:
            self.quiz_manager.delete_note(note.id)
        except (LookupError, PersistenceError) as exc:
            show_error(self, "Delete failed", str(exc))
