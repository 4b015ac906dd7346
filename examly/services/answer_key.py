"""
MCQ answer-key PDF.

One entry per question, in the order supplied: number, question text and
the correct option. When the stored option letter is missing or points at
an empty option, the first non-empty option A-D is shown instead.
"""

from datetime import datetime
from typing import Dict, Optional, Sequence, Tuple

from examly.config import settings
from examly.models.records import OPTION_LETTERS, QuestionRecord
from examly.services.pdf_writer import BOLD_FONT, PdfWriter

NOT_SPECIFIED = "Correct answer not specified"

def resolve_correct_answer(question: QuestionRecord) -> Tuple[Optional[str], str]:
    """Return ``(letter, option text)``; letter is None when nothing usable is stored"""
    letter = (question.correct_option or "").strip().upper()
    if letter in OPTION_LETTERS:
        text = (question.option_text(letter) or "").strip()
        if text:
            return letter, text

    for letter, text in question.options():
        if text and text.strip():
            return letter, text.strip()

    return None, NOT_SPECIFIED

def format_answer(question: QuestionRecord) -> str:
    letter, text = resolve_correct_answer(question)
    return f"{letter}. {text}" if letter else text

def key_filename(title: Optional[str]) -> str:
    safe = "".join(ch if ch.isascii() and ch.isalnum() else "_" for ch in (title or "mcq-key"))
    return f"{safe}-key.pdf"

def build_answer_key(
    title: Optional[str],
    questions: Sequence[QuestionRecord],
    metadata: Optional[Dict[str, str]] = None,
    generated_at: Optional[datetime] = None,
) -> PdfWriter:
    title = title or "Generated Paper"
    generated_at = generated_at or datetime.now(settings.tz)

    writer = PdfWriter(
        title=f"{title} - MCQ Answer Key",
        continued_header=f"{title} - Answer Key (continued)",
    )
    writer.text(f"{title} - MCQ Answer Key", font=BOLD_FONT, size=16, align="center")
    writer.gap(6)

    for label, value in (metadata or {}).items():
        writer.text(f"{label}: {value}", size=10, align="center")
    writer.text(f"Generated on: {generated_at.strftime('%d %b %Y')}", size=10, align="center")
    writer.rule(8)

    for number, question in enumerate(questions, start=1):
        # keep number and first line of the question on one page
        writer.ensure_space(40)
        writer.text(f"{number}. {question.question_text}", font=BOLD_FONT, size=11)
        writer.text(f"Answer: {format_answer(question)}", size=11, indent=18)
        writer.gap(6)

    return writer

def render_answer_key(
    title: Optional[str],
    questions: Sequence[QuestionRecord],
    metadata: Optional[Dict[str, str]] = None,
    generated_at: Optional[datetime] = None,
) -> bytes:
    return build_answer_key(title, questions, metadata, generated_at).finish()

