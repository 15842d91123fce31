"""Markdown rendering for question text, shared by the Qt console and the student page.

Generated questions and explanations may contain emphasis, lists, inline code
or ``$...$`` math. The HTML keeps math delimiters intact so MathJax can
typeset them on the client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import html

from markdown_it import MarkdownIt

from quiz_arena.core.models import Question

_MATHJAX_SCRIPT = "https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-mml-chtml.js"
_OPTION_LETTERS = ("A", "B", "C", "D")


@dataclass(slots=True)
class MarkdownRenderer:
    """Converts markdown into HTML fragments or standalone preview documents."""

    enable_html: bool = False
    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = MarkdownIt("commonmark", {"html": self.enable_html}).enable("table")

    def render_fragment(self, markdown_text: str | None) -> str:
        text = (markdown_text or "").strip()
        if not text:
            return ""
        return self._markdown.render(text)

    def render_inline(self, markdown_text: str | None) -> str:
        """Render without the wrapping paragraph, for option labels."""
        return self._markdown.renderInline((markdown_text or "").strip())

    def render_question_preview(
        self,
        number: int,
        question: Question,
        show_answer: bool = True,
    ) -> str:
        """HTML block used by the teacher preview before publishing."""
        items = []
        for index, option in enumerate(question.options):
            label = f"<b>{_OPTION_LETTERS[index]}.</b> {self.render_inline(option)}"
            if show_answer and index == question.correct_index:
                label = f'<span class="correct">{label} &#10003;</span>'
            items.append(f"<li>{label}</li>")
        block = [
            f'<div class="question"><div class="number">Question {number}</div>',
            self.render_fragment(question.text),
            f"<ul>{''.join(items)}</ul>",
        ]
        if show_answer and question.explanation:
            block.append(f'<div class="explanation">{self.render_fragment(question.explanation)}</div>')
        block.append("</div>")
        return "".join(block)

    def wrap_document(self, body_html: str, title: str = "QuizArena", font_size: int = 12) -> str:
        return f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>{html.escape(title)}</title>
    <style>
      body {{ font-family: 'Segoe UI', system-ui, sans-serif; font-size: {font_size}pt; margin: 0; padding: 1rem; }}
      .question {{ margin-bottom: 1.25rem; }}
      .number {{ font-weight: bold; color: #4f46e5; }}
      .correct {{ color: #15803d; font-weight: bold; }}
      .explanation {{ background: #eef2ff; border-radius: 6px; padding: 0.25rem 0.75rem; }}
      ul {{ list-style: none; padding-left: 0.5rem; }}
    </style>
    <script>
      window.MathJax = {{ tex: {{ inlineMath: [['$','$']], displayMath: [['$$','$$']] }} }};
    </script>
    <script defer src="{_MATHJAX_SCRIPT}"></script>
  </head>
  <body>{body_html}</body>
</html>"""


renderer = MarkdownRenderer()
