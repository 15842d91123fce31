"""Component for generating, reviewing, and publishing a quiz."""

from __future__ import annotations

import base64
from pathlib import Path
from typing import Callable

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import (
    QComboBox,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QPlainTextEdit,
    QPushButton,
    QSpinBox,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from quiz_arena.constants.quiz_constants import (
    DEFAULT_DURATION_MINUTES,
    DEFAULT_QUESTION_COUNT,
    MAX_DURATION_MINUTES,
    MAX_QUESTION_COUNT,
    MIN_QUESTION_COUNT,
)
from quiz_arena.constants.ui_constants import (
    DISCARD_BUTTON,
    GENERATE_BUTTON,
    GENERATING_BUTTON,
    PDF_FILE_FILTER,
    PLACEHOLDER_TOPIC,
    PUBLISH_BUTTON,
    SELECT_PDF_BUTTON,
)
from quiz_arena.core.errors import GenerationError, PersistenceError, ValidationError
from quiz_arena.core.markdown_renderer import renderer
from quiz_arena.core.models import Difficulty, Quiz
from quiz_arena.core.quiz_manager import QuizManager
from quiz_arena.core.services.quiz_generator import GenerationRequest
from quiz_arena.ui.dialog_helpers import confirm_discard_draft, show_error
from quiz_arena.styling.styles import Styles


class _GenerationSignals(QObject):
    finished = Signal(object)
    failed = Signal(str)


class _GenerationTask(QRunnable):
    """Runs the blocking generator call off the UI thread."""

    def __init__(self, quiz_manager: QuizManager, request: GenerationRequest) -> None:
        super().__init__()
        self.signals = _GenerationSignals()
        self._quiz_manager = quiz_manager
        self._request = request

    def run(self) -> None:
        try:
            quiz = self._quiz_manager.generate_quiz(self._request)
        except (ValidationError, GenerationError) as exc:
            self.signals.failed.emit(str(exc))
            return
        self.signals.finished.emit(quiz)


class CreationPanel(QWidget):
    """UI component for the generate -> review -> publish flow."""

    def __init__(
        self,
        quiz_manager: QuizManager,
        on_published: Callable[[Quiz], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.quiz_manager = quiz_manager
        self.on_published = on_published
        self._draft: Quiz | None = None
        self._document_path: Path | None = None
        self._pending_task: _GenerationTask | None = None

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        heading = QLabel("Create New Quiz", self)
        heading.setStyleSheet(Styles.get_heading_style())
        layout.addWidget(heading)

        self.step_stack = QStackedWidget(self)
        self.step_stack.addWidget(self._build_request_form())
        self.step_stack.addWidget(self._build_review_form())
        layout.addWidget(self.step_stack, stretch=1)

    def _build_request_form(self) -> QWidget:
        form = QWidget(self)
        layout = QVBoxLayout()
        form.setLayout(layout)

        settings_row = QHBoxLayout()
        settings_row.addWidget(QLabel("Number of questions:", form))
        self.count_spinbox = QSpinBox(form)
        self.count_spinbox.setRange(MIN_QUESTION_COUNT, MAX_QUESTION_COUNT)
        self.count_spinbox.setValue(DEFAULT_QUESTION_COUNT)
        settings_row.addWidget(self.count_spinbox)

        settings_row.addWidget(QLabel("Difficulty:", form))
        self.difficulty_combo = QComboBox(form)
        for difficulty in Difficulty:
            self.difficulty_combo.addItem(difficulty.value, userData=difficulty)
        self.difficulty_combo.setCurrentIndex(list(Difficulty).index(Difficulty.MEDIUM))
        settings_row.addWidget(self.difficulty_combo)
        settings_row.addStretch()
        layout.addLayout(settings_row)

        self.topic_input = QPlainTextEdit(form)
        self.topic_input.setPlaceholderText(PLACEHOLDER_TOPIC)
        layout.addWidget(self.topic_input, stretch=1)

        file_row = QHBoxLayout()
        self.file_button = QPushButton(SELECT_PDF_BUTTON, form)
        self.file_button.clicked.connect(self._handle_select_document)
        file_row.addWidget(self.file_button)
        self.file_label = QLabel("", form)
        file_row.addWidget(self.file_label, stretch=1)
        layout.addLayout(file_row)

        self.error_label = QLabel("", form)
        self.error_label.setWordWrap(True)
        self.error_label.setStyleSheet(Styles.get_status_style(is_error=True))
        layout.addWidget(self.error_label)

        self.generate_button = QPushButton(GENERATE_BUTTON, form)
        self.generate_button.setProperty("primary", True)
        self.generate_button.clicked.connect(self._handle_generate)
        layout.addWidget(self.generate_button)
        return form

    def _build_review_form(self) -> QWidget:
        form = QWidget(self)
        layout = QVBoxLayout()
        form.setLayout(layout)

        self.draft_title_label = QLabel("", form)
        self.draft_title_label.setStyleSheet(Styles.get_heading_style())
        layout.addWidget(self.draft_title_label)

        duration_row = QHBoxLayout()
        duration_row.addWidget(QLabel("Time limit:", form))
        self.duration_spinbox = QSpinBox(form)
        self.duration_spinbox.setRange(1, MAX_DURATION_MINUTES)
        self.duration_spinbox.setValue(DEFAULT_DURATION_MINUTES)
        self.duration_spinbox.setSuffix(" min")
        duration_row.addWidget(self.duration_spinbox)
        duration_row.addStretch()
        layout.addLayout(duration_row)

        self.preview_view = QWebEngineView(form)
        layout.addWidget(self.preview_view, stretch=1)

        button_row = QHBoxLayout()
        self.discard_button = QPushButton(DISCARD_BUTTON, form)
        self.discard_button.clicked.connect(self._handle_discard)
        button_row.addWidget(self.discard_button)
        button_row.addStretch()
        self.publish_button = QPushButton(PUBLISH_BUTTON, form)
        self.publish_button.setProperty("primary", True)
        self.publish_button.clicked.connect(self._handle_publish)
        button_row.addWidget(self.publish_button)
        layout.addLayout(button_row)
        return form

    def has_unpublished_draft(self) -> bool:
        return self._draft is not None

    def confirm_leave(self) -> bool:
        """Ask before navigating away from an unpublished draft."""
        if self._draft is None or confirm_discard_draft(self):
            self.reset_state()
            return True
        return False

    def reset_state(self) -> None:
        self._draft = None
        self._document_path = None
        self.topic_input.clear()
        self.count_spinbox.setValue(DEFAULT_QUESTION_COUNT)
        self.file_label.setText("")
        self.error_label.setText("")
        self.duration_spinbox.setValue(DEFAULT_DURATION_MINUTES)
        self.step_stack.setCurrentIndex(0)

    def _handle_select_document(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(self, "Select source PDF", str(Path.home()), PDF_FILE_FILTER)
        if file_path:
            self._document_path = Path(file_path)
            self.file_label.setText(f"Selected: {self._document_path.name}")

    def _build_request(self) -> GenerationRequest:
        document_base64 = None
        mime_type = None
        if self._document_path is not None:
            document_base64 = base64.b64encode(self._document_path.read_bytes()).decode("ascii")
            mime_type = "application/pdf"
        return GenerationRequest(
            topic=self.topic_input.toPlainText(),
            question_count=self.count_spinbox.value(),
            difficulty=self.difficulty_combo.currentData(),
            document_base64=document_base64,
            document_mime_type=mime_type,
        )

    def _handle_generate(self) -> None:
        if self._pending_task is not None:
            return
        try:
            request = self._build_request()
            request.validate()
        except (OSError, ValidationError) as exc:
            self.error_label.setText(str(exc))
            return

        self.error_label.setText("")
        self._set_generating(True)
        task = _GenerationTask(self.quiz_manager, request)
        task.signals.finished.connect(self._on_generated)
        task.signals.failed.connect(self._on_generation_failed)
        self._pending_task = task
        QThreadPool.globalInstance().start(task)

    def _set_generating(self, generating: bool) -> None:
        self.generate_button.setEnabled(not generating)
        self.generate_button.setText(GENERATING_BUTTON if generating else GENERATE_BUTTON)

    def _on_generated(self, quiz: Quiz) -> None:
        self._pending_task = None
        self._set_generating(False)
        self._draft = quiz
        self.draft_title_label.setText(quiz.title)
        self.duration_spinbox.setValue(quiz.effective_duration_minutes)
        body = "".join(
            renderer.render_question_preview(number, question)
            for number, question in enumerate(quiz.questions, start=1)
        )
        self.preview_view.setHtml(renderer.wrap_document(body, title=quiz.title))
        self.step_stack.setCurrentIndex(1)

    def _on_generation_failed(self, message: str) -> None:
        self._pending_task = None
        self._set_generating(False)
        self.error_label.setText(f"Failed to generate quiz. Please try again. {message}")

    def _handle_discard(self) -> None:
        if confirm_discard_draft(self):
            self.reset_state()

    def _handle_publish(self) -> None:
        if self._draft is None:
            return
        try:
            published = self.quiz_manager.publish_quiz(self._draft, self.duration_spinbox.value())
        except (ValidationError, PersistenceError) as exc:
            show_error(self, "Error publishing quiz", str(exc))
            return
        self.reset_state()
        self.on_published(published)
