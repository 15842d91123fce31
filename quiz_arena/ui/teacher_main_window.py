"""Qt main window for the teacher: quizzes, quiz creation, notes, and leaderboards."""

from __future__ import annotations

from enum import Enum, auto

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from quiz_arena.constants.about import APP_ABOUT_TEXT, APP_LICENSE, APP_NAME, APP_VERSION, HELP_TEXT
from quiz_arena.constants.ui_constants import (
    MODE_BUTTON_CREATE,
    MODE_BUTTON_DASHBOARD,
    MODE_BUTTON_LOGOUT,
    MODE_BUTTON_NOTES,
    PASSWORD_REJECTED_MESSAGE,
    STORE_REFRESH_INTERVAL_MS,
    STUDENT_URL_PLACEHOLDER,
    WINDOW_TITLE,
)
from quiz_arena.core.models import Quiz
from quiz_arena.core.quiz_manager import QuizManager
from quiz_arena.core.services.quiz_store import Collection
from quiz_arena.ui.components.creation_panel import CreationPanel
from quiz_arena.ui.components.dashboard_panel import DashboardPanel
from quiz_arena.ui.components.leaderboard_panel import LeaderboardPanel
from quiz_arena.ui.components.notes_panel import NotesPanel
from quiz_arena.ui.dialog_helpers import ask_teacher_password, show_info, show_warning
from quiz_arena.utils.settings import AppSettings
from quiz_arena.styling.styles import Styles


class TeacherMode(Enum):
    """High-level UI mode for the teacher console."""

    DASHBOARD = auto()
    CREATE = auto()
    NOTES = auto()
    LEADERBOARD = auto()


class TeacherMainWindow(QMainWindow):
    """Main Qt window switching between the teacher panels."""

    def __init__(
        self,
        quiz_manager: QuizManager,
        settings: AppSettings,
        student_url: str | None = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)

        self.quiz_manager = quiz_manager
        self.settings = settings
        self.student_url = student_url or STUDENT_URL_PLACEHOLDER
        self._mode = TeacherMode.DASHBOARD

        self._subscriptions = {
            collection: quiz_manager.subscribe(collection) for collection in Collection
        }

        self._build_ui()
        self._configure_refresh_timer()
        self.setStyleSheet(Styles.get_main_window_style())

    def _build_ui(self) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)

        root_layout = QVBoxLayout()
        central_widget.setLayout(root_layout)

        self._build_mode_buttons(root_layout)

        self.url_label = QLabel(f"Students connect to: {self.student_url}", self)
        self.url_label.setWordWrap(True)
        root_layout.addWidget(self.url_label)

        self.mode_stack = QStackedWidget(self)
        self.dashboard_panel = DashboardPanel(
            self.quiz_manager,
            on_show_leaderboard=self._show_leaderboard,
            parent=self,
        )
        self.creation_panel = CreationPanel(
            self.quiz_manager,
            on_published=self._handle_published,
            parent=self,
        )
        self.notes_panel = NotesPanel(self.quiz_manager, parent=self)
        self.leaderboard_panel = LeaderboardPanel(
            on_back=lambda: self._set_mode(TeacherMode.DASHBOARD),
            parent=self,
        )

        self._panel_index = {
            TeacherMode.DASHBOARD: self.mode_stack.addWidget(self.dashboard_panel),
            TeacherMode.CREATE: self.mode_stack.addWidget(self.creation_panel),
            TeacherMode.NOTES: self.mode_stack.addWidget(self.notes_panel),
            TeacherMode.LEADERBOARD: self.mode_stack.addWidget(self.leaderboard_panel),
        }
        root_layout.addWidget(self.mode_stack, stretch=1)

        self._set_mode(TeacherMode.DASHBOARD)

    def _build_mode_buttons(self, layout: QVBoxLayout) -> None:
        button_row = QHBoxLayout()

        self.dashboard_button = QPushButton(MODE_BUTTON_DASHBOARD, self)
        self.dashboard_button.setCheckable(True)
        self.dashboard_button.clicked.connect(lambda: self._request_mode(TeacherMode.DASHBOARD))
        button_row.addWidget(self.dashboard_button)

        self.create_button = QPushButton(MODE_BUTTON_CREATE, self)
        self.create_button.setCheckable(True)
        self.create_button.clicked.connect(lambda: self._request_mode(TeacherMode.CREATE))
        button_row.addWidget(self.create_button)

        self.notes_button = QPushButton(MODE_BUTTON_NOTES, self)
        self.notes_button.setCheckable(True)
        self.notes_button.clicked.connect(lambda: self._request_mode(TeacherMode.NOTES))
        button_row.addWidget(self.notes_button)

        button_row.addStretch()

        self.help_button = QPushButton("Help", self)
        self.help_button.clicked.connect(self._handle_help)
        button_row.addWidget(self.help_button)

        self.logout_button = QPushButton(MODE_BUTTON_LOGOUT, self)
        self.logout_button.clicked.connect(self._handle_logout)
        button_row.addWidget(self.logout_button)

        layout.addLayout(button_row)

    def _configure_refresh_timer(self) -> None:
        self.refresh_timer = QTimer(self)
        self.refresh_timer.setInterval(STORE_REFRESH_INTERVAL_MS)
        self.refresh_timer.timeout.connect(self._refresh_state)
        self.refresh_timer.start()
        self._refresh_state()

    def _refresh_state(self) -> None:
        quizzes = self._subscriptions[Collection.QUIZZES].poll()
        if quizzes is not None:
            self.dashboard_panel.set_quizzes(quizzes)
        notes = self._subscriptions[Collection.NOTES].poll()
        if notes is not None:
            self.notes_panel.set_notes(notes)
        results = self._subscriptions[Collection.RESULTS].poll()
        if results is not None:
            self.leaderboard_panel.set_results(results)

    def request_login(self) -> bool:
        """Prompt for the static teacher password until it matches or the teacher gives up."""
        while True:
            password = ask_teacher_password(self if self.isVisible() else None)
            if password is None:
                return False
            if self.settings.check_teacher_password(password):
                return True
            show_warning(self, "Login failed", PASSWORD_REJECTED_MESSAGE)

    def _request_mode(self, mode: TeacherMode) -> None:
        if self._mode == TeacherMode.CREATE and mode != TeacherMode.CREATE:
            if not self.creation_panel.confirm_leave():
                self._set_mode(TeacherMode.CREATE)
                return
        self._set_mode(mode)

    def _set_mode(self, mode: TeacherMode) -> None:
        self._mode = mode
        self.dashboard_button.setChecked(mode in (TeacherMode.DASHBOARD, TeacherMode.LEADERBOARD))
        self.create_button.setChecked(mode == TeacherMode.CREATE)
        self.notes_button.setChecked(mode == TeacherMode.NOTES)
        self.mode_stack.setCurrentIndex(self._panel_index[mode])

    def _show_leaderboard(self, quiz: Quiz) -> None:
        results_subscription = self._subscriptions[Collection.RESULTS]
        self.leaderboard_panel.show_quiz(quiz, next(results_subscription))
        self._set_mode(TeacherMode.LEADERBOARD)

    def _handle_published(self, quiz: Quiz) -> None:
        self._set_mode(TeacherMode.DASHBOARD)
        self._refresh_state()
        show_info(self, "Quiz published", f"'{quiz.title}' is now available to students.")

    def _handle_help(self) -> None:
        show_info(
            self,
            f"{APP_NAME} Help",
            f"{APP_NAME} v{APP_VERSION} ({APP_LICENSE})\n\n{APP_ABOUT_TEXT}\n\n{HELP_TEXT}",
        )

    def _handle_logout(self) -> None:
        if self._mode == TeacherMode.CREATE and not self.creation_panel.confirm_leave():
            return
        self._set_mode(TeacherMode.DASHBOARD)
        self.hide()
        if self.request_login():
            self.show()
        else:
            self.close()

    def closeEvent(self, event) -> None:  # noqa: N802 - Qt override
        self.refresh_timer.stop()
        for subscription in self._subscriptions.values():
            subscription.close()
        super().closeEvent(event)
