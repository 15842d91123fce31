"""Application entry point for QuizArena."""

from __future__ import annotations

import socket
import sys

from PySide6.QtWidgets import QApplication

from quiz_arena.core.quiz_manager import QuizManager
from quiz_arena.core.services.quiz_generator import QuizGenerator
from quiz_arena.core.services.quiz_store import QuizStore
from quiz_arena.server.api_server import start_api_server
from quiz_arena.ui.teacher_main_window import TeacherMainWindow
from quiz_arena.utils.logging_config import configure_logging
from quiz_arena.utils.settings import AppSettings


def _determine_student_url(port: int) -> str:
    """Best-effort determination of the local IP for student-facing URL."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            ip_address = sock.getsockname()[0]
    except OSError:
        ip_address = "127.0.0.1"
    return f"http://{ip_address}:{port}/"


def main() -> None:
    """Initialize logging, start the API server, and launch the Qt UI."""
    settings = AppSettings.from_env()
    logger = configure_logging(settings.log_level)
    logger.info("Starting QuizArena…")

    store = QuizStore(settings.data_path)
    generator = QuizGenerator(settings.gemini_api_key, model=settings.gemini_model)
    if not generator.is_configured:
        logger.warning("GEMINI_API_KEY is not set; quiz generation will fail until it is provided.")
    quiz_manager = QuizManager(store, generator)

    start_api_server(quiz_manager=quiz_manager, host=settings.host, port=settings.port)
    student_url = _determine_student_url(settings.port)
    logger.info("Student page available at %s", student_url)

    app = QApplication(sys.argv)
    window = TeacherMainWindow(quiz_manager=quiz_manager, settings=settings, student_url=student_url)
    if not window.request_login():
        logger.info("Login cancelled; exiting.")
        sys.exit(0)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
