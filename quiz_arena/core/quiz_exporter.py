"""PDF exports: printable quizzes with an answer key, and student scorecards."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
import re

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from quiz_arena.core.models import Quiz, Result
from quiz_arena.core.services.scoring_engine import grade_answers, percentage

_OPTION_LETTERS = ("A", "B", "C", "D")
_FONT = "Helvetica"


def default_pdf_name(quiz: Quiz) -> str:
    stem = re.sub(r"\s+", "_", quiz.title.strip())
    return f"{stem}_quiz.pdf"


def build_quiz_pdf(quiz: Quiz) -> bytes:
    """Render the quiz for printing, with the answer key on its own page."""

    pdf = _new_document()
    pdf.set_font(_FONT, "B", 20)
    _line(pdf, quiz.title, height=10)
    pdf.set_font(_FONT, size=10)
    _line(pdf, f"Time Allowed: {quiz.effective_duration_minutes} Minutes", height=6)
    if quiz.subject:
        _line(pdf, f"Subject: {quiz.subject}  |  Difficulty: {quiz.difficulty.value}", height=6)
    pdf.ln(6)

    pdf.set_font(_FONT, size=12)
    for number, question in enumerate(quiz.questions, start=1):
        _paragraph(pdf, f"{number}. {question.text}")
        for letter, option in zip(_OPTION_LETTERS, question.options):
            _paragraph(pdf, f"   {letter}. {option}", height=6)
        pdf.ln(5)

    pdf.add_page()
    pdf.set_font(_FONT, "B", 16)
    _line(pdf, "Answer Key", height=10)
    pdf.ln(4)
    pdf.set_font(_FONT, size=12)
    for number, question in enumerate(quiz.questions, start=1):
        _line(pdf, f"{number}. {_OPTION_LETTERS[question.correct_index]}", height=7)
    return bytes(pdf.output())


def build_scorecard_pdf(quiz: Quiz, result: Result, answers: Sequence[int]) -> bytes:
    """Render a student's result with a per-question review."""

    pdf = _new_document()
    pdf.set_font(_FONT, "B", 18)
    _line(pdf, f"Scorecard - {quiz.title}", height=10)
    pdf.set_font(_FONT, size=12)
    _line(pdf, f"Student: {result.student_name}", height=7)
    _line(
        pdf,
        f"Score: {result.score} / {result.total} ({percentage(result.score, result.total)}%)",
        height=7,
    )
    _line(pdf, f"Submitted: {result.submitted_at.astimezone().strftime('%Y-%m-%d %H:%M')}", height=7)
    pdf.ln(6)

    for review in grade_answers(quiz, answers):
        question = quiz.questions[review.question_index]
        if review.is_unanswered:
            status = "Not answered"
        elif review.is_correct:
            status = "Correct"
        else:
            status = f"Your answer: {_OPTION_LETTERS[review.selected_index]}"
        pdf.set_font(_FONT, "B", 12)
        _paragraph(pdf, f"{review.question_index + 1}. {question.text}")
        pdf.set_font(_FONT, size=11)
        _paragraph(pdf, f"   {status}", height=6)
        if not review.is_correct:
            _paragraph(pdf, f"   Correct: {question.options[review.correct_index]}", height=6)
        if question.explanation:
            _paragraph(pdf, f"   {question.explanation}", height=6)
        pdf.ln(3)
    return bytes(pdf.output())


def save_quiz_pdf(file_path: Path, quiz: Quiz) -> Path:
    file_path = file_path.resolve()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_bytes(build_quiz_pdf(quiz))
    return file_path


def _new_document() -> FPDF:
    pdf = FPDF()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.set_margins(20, 20, 20)
    pdf.add_page()
    return pdf


def _latin1(text: str) -> str:
    # Core PDF fonts only cover Latin-1.
    return text.encode("latin-1", "replace").decode("latin-1")


def _line(pdf: FPDF, text: str, height: float = 8) -> None:
    pdf.cell(0, height, _latin1(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def _paragraph(pdf: FPDF, text: str, height: float = 7) -> None:
    pdf.multi_cell(0, height, _latin1(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
