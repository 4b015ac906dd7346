"""
Unit tests for the MCQ answer key renderer
"""
from datetime import datetime

import pytest

from examly.models.records import QuestionRecord
from examly.services.answer_key import (
    NOT_SPECIFIED,
    build_answer_key,
    format_answer,
    key_filename,
    render_answer_key,
    resolve_correct_answer,
)
from tests.fakes import mcq

GENERATED_AT = datetime(2024, 3, 1, 10, 30)


def question(question_id, **overrides):
    return QuestionRecord.model_validate(mcq(question_id, **overrides))


class TestResolveCorrectAnswer:
    """Test which option the key shows"""

    def test_stored_option(self):
        assert resolve_correct_answer(question("q1", correct="C")) == ("C", "q1 option C")

    def test_lowercase_letter(self):
        assert resolve_correct_answer(question("q1", correct="b")) == ("B", "q1 option B")

    def test_empty_correct_option_text(self):
        q = question("q1", correct="C", option_c="")

        assert resolve_correct_answer(q) == ("A", "q1 option A")

    def test_empty_correct_option_falls_back_to_first_filled(self):
        q = question("q1", correct="C", option_a="", option_c="")

        assert resolve_correct_answer(q) == ("B", "q1 option B")

    def test_missing_letter_falls_back(self):
        q = question("q1", correct=None)

        assert resolve_correct_answer(q) == ("A", "q1 option A")

    def test_no_options_at_all(self):
        q = QuestionRecord(id="q1", question_text="Blank", correct_option="A")

        assert resolve_correct_answer(q) == (None, NOT_SPECIFIED)
        assert format_answer(q) == NOT_SPECIFIED

    def test_format_answer(self):
        assert format_answer(question("q9", correct="D")) == "D. q9 option D"


class TestBuildAnswerKey:
    """Test the laid out answer key"""

    def test_header_and_metadata(self):
        writer = build_answer_key(
            "Physics Test",
            [question("q1")],
            metadata={"Selection Method": "auto", "Total MCQs": "1"},
            generated_at=GENERATED_AT,
        )

        first_page = writer.pages[0]
        assert first_page[0] == "Physics Test - MCQ Answer Key"
        assert "Selection Method: auto" in first_page
        assert "Total MCQs: 1" in first_page
        assert "Generated on: 01 Mar 2024" in first_page

    def test_default_title(self):
        writer = build_answer_key(None, [question("q1")], generated_at=GENERATED_AT)

        assert writer.pages[0][0] == "Generated Paper - MCQ Answer Key"

    def test_entries_follow_input_order(self):
        questions = [question("q3", correct="A"), question("q1", correct="B"), question("q2", correct="C")]

        lines = build_answer_key("Quiz", questions, generated_at=GENERATED_AT).pages[0]

        entries = [line for line in lines if line[:2] in ("1.", "2.", "3.")]
        assert entries == ["1. Question q3", "2. Question q1", "3. Question q2"]
        answers = [line for line in lines if line.startswith("Answer:")]
        assert answers == ["Answer: A. q3 option A", "Answer: B. q1 option B", "Answer: C. q2 option C"]

    def test_long_keys_continue_on_new_pages(self):
        questions = [question(f"q{n}") for n in range(1, 61)]

        writer = build_answer_key("Long Test", questions, generated_at=GENERATED_AT)

        assert len(writer.pages) > 1
        for page in writer.pages[1:]:
            assert page[0] == "Long Test - Answer Key (continued)"
        answers = [line for page in writer.pages for line in page if line.startswith("Answer:")]
        assert len(answers) == 60

    def test_long_question_text_wraps(self):
        long_text = "Which of the following statements about vectors is correct " * 6

        lines = build_answer_key("Wrap", [question("q1", text=long_text)], generated_at=GENERATED_AT).pages[0]

        wrapped = [line for line in lines if "vectors" in line]
        assert len(wrapped) > 1

    def test_render_produces_pdf_bytes(self):
        content = render_answer_key("Physics", [question("q1")], generated_at=GENERATED_AT)

        assert content.startswith(b"%PDF")


@pytest.mark.parametrize("title,expected", [
    ("Physics Test", "Physics_Test-key.pdf"),
    ("Chapter 1/2", "Chapter_1_2-key.pdf"),
    (None, "mcq_key-key.pdf"),
])
def test_key_filename(title, expected):
    assert key_filename(title) == expected
