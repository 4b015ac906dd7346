"""
Typed records for rows returned by the Supabase query client.

A row with an unexpected shape (missing id, unknown difficulty) fails
validation when it is decoded.
"""

from pydantic import BaseModel, ConfigDict
from typing import List, Optional, Tuple, Type, TypeVar
from enum import Enum

OPTION_LETTERS = ("A", "B", "C", "D")

class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

class QuestionType(str, Enum):
    MCQ = "mcq"
    SHORT = "short"
    LONG = "long"

class SourceType(str, Enum):
    BOOK = "book"
    PAST_PAPER = "past_paper"
    MODEL_PAPER = "model_paper"
    CUSTOM = "custom"

class Record(BaseModel):
    model_config = ConfigDict(extra="ignore")

class QuestionRecord(Record):
    id: str
    question_text: str = ""
    question_text_ur: Optional[str] = None
    option_a: Optional[str] = None
    option_b: Optional[str] = None
    option_c: Optional[str] = None
    option_d: Optional[str] = None
    option_a_ur: Optional[str] = None
    option_b_ur: Optional[str] = None
    option_c_ur: Optional[str] = None
    option_d_ur: Optional[str] = None
    correct_option: Optional[str] = None
    answer_text: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    question_type: Optional[QuestionType] = None
    source_type: Optional[SourceType] = None
    subject_id: Optional[str] = None
    chapter_id: Optional[str] = None
    topic_id: Optional[str] = None
    class_subject_id: Optional[str] = None

    def option_text(self, letter: str) -> Optional[str]:
        return getattr(self, f"option_{letter.lower()}", None)

    def options(self) -> List[Tuple[str, Optional[str]]]:
        return [(letter, self.option_text(letter)) for letter in OPTION_LETTERS]

class SchoolClassRecord(Record):
    id: str
    name: str
    description: Optional[str] = None

class SubjectRecord(Record):
    id: str
    name: str
    description: Optional[str] = None

class ChapterRecord(Record):
    id: str
    name: str
    chapterNo: Optional[int] = None
    subject_id: Optional[str] = None
    class_id: Optional[str] = None

class TopicRecord(Record):
    id: str
    name: str
    chapter_id: Optional[str] = None

class PaperRecord(Record):
    id: str
    title: str
    created_by: Optional[str] = None
    class_name: Optional[str] = None
    subject_name: Optional[str] = None
    paperPdf: Optional[str] = None
    paperKey: Optional[str] = None

class PaperQuestionRecord(Record):
    paper_id: str
    question_id: str
    order_number: int
    question_type: QuestionType

R = TypeVar("R", bound=Record)

def decode_rows(model: Type[R], rows: List[dict]) -> List[R]:
    """Decode raw rows into records, raising on the first malformed row"""
    return [model.model_validate(row) for row in rows]
