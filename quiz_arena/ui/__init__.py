"""Qt UI components for the teacher console."""

from .dialog_helpers import (
    ask_teacher_password,
    confirm_delete,
    show_error,
    show_info,
    show_warning,
)
from .teacher_main_window import TeacherMainWindow

__all__ = [
    "TeacherMainWindow",
    "ask_teacher_password",
    "confirm_delete",
    "show_error",
    "show_info",
    "show_warning",
]
