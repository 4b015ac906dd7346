"""
Request bodies sent by the web client.

The client posts camelCase keys (``subjectId``, ``mcqCount``); fields are
declared in snake_case and accept either spelling.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class McqKeyRequest(CamelModel):
    subject_id: Optional[str] = None
    selected_chapters: List[str] = []
    paper_title: Optional[str] = None
    chapter_option: Optional[str] = None
    selection_method: Optional[str] = None
    # null values are treated as absent
    selected_questions: Optional[Dict[str, Optional[List[str]]]] = None
    mcq_count: Optional[int] = 0
    mcq_difficulty: Optional[str] = "any"
    source_type: Optional[str] = "all"
    paper_id: Optional[str] = None

class PaperRequest(CamelModel):
    title: Optional[str] = None
    subject_id: Optional[str] = None
    class_id: Optional[str] = None
    chapter_option: str = "full_book"
    selected_chapters: List[str] = []
    selection_method: str = "auto"
    selected_questions: Optional[Dict[str, Optional[List[str]]]] = None
    # Final preview order: {type: [{"id": ...}, ...]}
    reordered_questions: Optional[Dict[str, List[Dict[str, Any]]]] = None
    mcq_count: Optional[int] = 0
    short_count: Optional[int] = 0
    long_count: Optional[int] = 0
    mcq_difficulty: Optional[str] = "any"
    short_difficulty: Optional[str] = "any"
    long_difficulty: Optional[str] = "any"
    source_type: Optional[str] = "all"
    mcq_marks: int = 1
    short_marks: int = 2
    long_marks: int = 5
    time_minutes: Optional[int] = None
    paper_date: Optional[str] = None

    def marks_for(self, question_type: str) -> int:
        return {
            "mcq": self.mcq_marks,
            "short": self.short_marks,
            "long": self.long_marks,
        }.get(question_type, 1)

class BulkQuestionsRequest(CamelModel):
    subject_id: Optional[str] = None
    class_id: Optional[str] = None
    chapter_ids: Optional[List[str]] = None
    requirements: Optional[Dict[str, int]] = None
    source_type: str = "all"
    limits: Dict[str, int] = {"mcq": 50, "short": 50, "long": 20}

class QuizGenerateRequest(CamelModel):
    subject_id: str
    class_subject_id: Optional[str] = None
    quiz_type: str = "full"
    chapters: List[str] = []
    question_count: int = 10
    difficulty: str = "all"

class QuizSubmitRequest(BaseModel):
    answers: Dict[str, Optional[str]]
