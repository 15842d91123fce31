"""Centralized Qt stylesheets for the teacher console."""

from .color_palette import ColorPalette, Theme


class Styles:
    """Helper class to generate Qt stylesheets based on the current theme."""

    @staticmethod
    def get_main_window_style(theme: Theme = Theme.LIGHT) -> str:
        return f"""
            QWidget {{
                background-color: {ColorPalette.BACKGROUND_PRIMARY.get(theme)};
                color: {ColorPalette.TEXT_PRIMARY.get(theme)};
                font-family: 'Segoe UI', 'Roboto', sans-serif;
                font-size: 14px;
            }}
            QPushButton {{
                background-color: {ColorPalette.BACKGROUND_SECONDARY.get(theme)};
                border: 1px solid {ColorPalette.BORDER_PRIMARY.get(theme)};
                border-radius: 6px;
                padding: 6px 12px;
            }}
            QPushButton:hover {{
                background-color: {ColorPalette.BUTTON_HOVER_BG.get(theme)};
            }}
            QPushButton:checked, QPushButton[primary="true"] {{
                background-color: {ColorPalette.ACCENT_PRIMARY.get(theme)};
                color: {ColorPalette.ACCENT_TEXT.get(theme)};
                border: 1px solid {ColorPalette.ACCENT_PRIMARY.get(theme)};
            }}
            QLineEdit, QPlainTextEdit, QSpinBox, QComboBox, QListWidget, QTableWidget {{
                border: 1px solid {ColorPalette.BORDER_PRIMARY.get(theme)};
                border-radius: 4px;
                padding: 4px;
            }}
        """

    @staticmethod
    def get_heading_style() -> str:
        return "font-size: 16pt; font-weight: bold;"

    @staticmethod
    def get_status_style(is_error: bool, theme: Theme = Theme.LIGHT) -> str:
        color = ColorPalette.ERROR if is_error else ColorPalette.SUCCESS
        return f"color: {color.get(theme)};"
