from __future__ import annotations

from dataclasses import replace

from quiz_arena.core.models import Result
from quiz_arena.core.quiz_exporter import build_quiz_pdf, build_scorecard_pdf, default_pdf_name, save_quiz_pdf
from tests.conftest import BASE_TIME, make_quiz


def test_default_pdf_name_replaces_whitespace():
    assert default_pdf_name(replace(make_quiz(), title=" Past  Simple\tTense ")) == "Past_Simple_Tense_quiz.pdf"


def test_quiz_pdf_is_a_pdf_document():
    document = build_quiz_pdf(make_quiz())
    assert document.startswith(b"%PDF")


def test_non_latin_text_does_not_break_export():
    quiz = replace(make_quiz(), title="Grammaire \u2013 \u00e9l\u00e8ve \U0001f4da")
    assert build_quiz_pdf(quiz).startswith(b"%PDF")


def test_scorecard_pdf_covers_unanswered_questions():
    quiz = make_quiz((1, 0, 2))
    result = Result(quiz_id=quiz.id, student_name="Ada", score=1, total=3, submitted_at=BASE_TIME)
    assert build_scorecard_pdf(quiz, result, (1, 3, -1)).startswith(b"%PDF")


def test_save_quiz_pdf_writes_file(tmp_path):
    saved = save_quiz_pdf(tmp_path / "exports" / "quiz.pdf", make_quiz())
    assert saved.exists()
    assert saved.read_bytes().startswith(b"%PDF")
