"""Helper functions for common dialog patterns in the teacher UI."""

from __future__ import annotations

from PySide6.QtWidgets import QInputDialog, QLineEdit, QMessageBox, QWidget

from quiz_arena.constants.ui_constants import PASSWORD_DIALOG_TITLE, PASSWORD_PROMPT


def confirm_delete(parent: QWidget, item_label: str) -> bool:
    """Ask before deleting a quiz or note.

    Args:
        parent: Parent widget for the dialog
        item_label: Human-readable name of the item, e.g. "quiz 'Fractions'"

    Returns:
        True if user confirmed, False otherwise
    """
    reply = QMessageBox.question(
        parent,
        "Confirm Delete",
        f"Are you sure you want to delete {item_label}?",
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return reply == QMessageBox.Yes


def confirm_discard_draft(parent: QWidget) -> bool:
    reply = QMessageBox.question(
        parent,
        "Discard Draft",
        "The generated quiz has not been published. Discard it?",
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return reply == QMessageBox.Yes


def ask_teacher_password(parent: QWidget | None) -> str | None:
    """Prompt for the teacher password; None when the dialog is cancelled."""
    password, accepted = QInputDialog.getText(
        parent,
        PASSWORD_DIALOG_TITLE,
        PASSWORD_PROMPT,
        QLineEdit.Password,
    )
    return password if accepted else None


def show_error(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.critical(parent, title, message)


def show_info(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.information(parent, title, message)


def show_warning(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.warning(parent, title, message)
