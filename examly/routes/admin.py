from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Query
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from uuid import uuid4
import csv
import io
import logging

from examly.config import settings
from examly.database import Database, get_db
from examly.models.records import (
    OPTION_LETTERS,
    ChapterRecord,
    Difficulty,
    QuestionRecord,
    QuestionType,
    SchoolClassRecord,
    SourceType,
    SubjectRecord,
    TopicRecord,
)
from examly.utils.auth_utils import require_admin

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_IMPORT_ROWS = 200
CSV_HEADERS = ['question_text', 'option_a', 'option_b', 'option_c', 'option_d', 'correct_option', 'difficulty']

class QuestionCreate(BaseModel):
    question_text: str
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
    difficulty: Difficulty = Difficulty.MEDIUM
    question_type: QuestionType = QuestionType.MCQ
    source_type: SourceType = SourceType.BOOK
    subject_id: str
    chapter_id: Optional[str] = None
    topic_id: Optional[str] = None
    class_subject_id: Optional[str] = None

    def validate_content(self):
        if not self.question_text.strip():
            raise ValueError("Question text is required")
        if len(self.question_text) > 2000:
            raise ValueError("Question text cannot exceed 2000 characters")
        for letter in OPTION_LETTERS:
            option = getattr(self, f"option_{letter.lower()}")
            if option and len(option) > 500:
                raise ValueError(f"Option {letter} cannot exceed 500 characters")

        if self.question_type == QuestionType.MCQ:
            if self.correct_option is None or self.correct_option.upper() not in OPTION_LETTERS:
                raise ValueError("Correct option must be 'A', 'B', 'C', or 'D'")
            if not getattr(self, f"option_{self.correct_option.lower()}"):
                raise ValueError(f"Option {self.correct_option.upper()} is marked correct but is empty")
            self.correct_option = self.correct_option.upper()

class QuestionUpdate(BaseModel):
    question_text: Optional[str] = None
    question_text_ur: Optional[str] = None
    option_a: Optional[str] = None
    option_b: Optional[str] = None
    option_c: Optional[str] = None
    option_d: Optional[str] = None
    correct_option: Optional[str] = None
    answer_text: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    source_type: Optional[SourceType] = None
    chapter_id: Optional[str] = None
    topic_id: Optional[str] = None

class ClassCreate(BaseModel):
    name: str
    description: Optional[str] = None

class SubjectCreate(BaseModel):
    name: str
    description: Optional[str] = None
    class_ids: List[str] = []

class ChapterCreate(BaseModel):
    name: str
    chapterNo: int
    subject_id: str
    class_id: str

class TopicCreate(BaseModel):
    name: str
    chapter_id: str

# Lookup tables an admin may delete rows from
MANAGED_TABLES = {"classes", "subjects", "chapters", "topics"}

@router.post("/questions")
async def create_question(
    question: QuestionCreate,
    admin_user: dict = Depends(require_admin),
    db: Database = Depends(get_db),
):
    """Add a question to the bank"""
    try:
        question.validate_content()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        row = {
            "id": str(uuid4()),
            **question.model_dump(mode="json", exclude_none=True),
            "created_at": datetime.now(settings.tz).isoformat(),
        }
        created = db.insert("questions", row)
        return QuestionRecord.model_validate(created)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to create question: {str(e)}")

@router.put("/questions/{question_id}")
async def update_question(
    question_id: str,
    changes: QuestionUpdate,
    admin_user: dict = Depends(require_admin),
    db: Database = Depends(get_db),
):
    """Edit a question"""
    data = changes.model_dump(mode="json", exclude_none=True)
    if not data:
        raise HTTPException(status_code=400, detail="Nothing to update")

    if "correct_option" in data:
        data["correct_option"] = data["correct_option"].upper()
        if data["correct_option"] not in OPTION_LETTERS:
            raise HTTPException(status_code=400, detail="Correct option must be 'A', 'B', 'C', or 'D'")

    try:
        existing = db.select_one("questions", "id", {"id": question_id})
        if not existing:
            raise HTTPException(status_code=404, detail="Question not found")

        updated = db.update("questions", data, {"id": question_id})
        return QuestionRecord.model_validate(updated)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to update question: {str(e)}")

@router.delete("/questions/{question_id}")
async def delete_question(
    question_id: str,
    admin_user: dict = Depends(require_admin),
    db: Database = Depends(get_db),
):
    try:
        existing = db.select_one("questions", "id", {"id": question_id})
        if not existing:
            raise HTTPException(status_code=404, detail="Question not found")

        db.delete("questions", {"id": question_id})
        return {"message": "Question deleted", "question_id": question_id}
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to delete question: {str(e)}")

@router.post("/questions/import")
async def import_questions_from_csv(
    subject_id: str = Query(...),
    chapter_id: Optional[str] = Query(None),
    source_type: SourceType = Query(SourceType.BOOK),
    file: UploadFile = File(...),
    admin_user: dict = Depends(require_admin),
    db: Database = Depends(get_db),
):
    """Import MCQs from a CSV file into a subject/chapter"""
    try:
        if not file.filename.endswith('.csv'):
            raise HTTPException(status_code=400, detail="Only CSV files are allowed")

        content = await file.read()
        csv_reader = csv.reader(io.StringIO(content.decode('utf-8')))
        headers = next(csv_reader, None)

        if headers != CSV_HEADERS:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid CSV format. Expected headers: {', '.join(CSV_HEADERS)}"
            )

        questions = []
        row_number = 1

        for row in csv_reader:
            row_number += 1
            if not any(cell.strip() for cell in row):
                continue

            if len(row) != len(CSV_HEADERS):
                raise HTTPException(
                    status_code=400,
                    detail=f"Row {row_number}: Invalid number of columns. Expected {len(CSV_HEADERS)}, got {len(row)}"
                )

            question_text, option_a, option_b, option_c, option_d, correct_option, difficulty = [c.strip() for c in row]

            try:
                question = QuestionCreate(
                    question_text=question_text,
                    option_a=option_a or None,
                    option_b=option_b or None,
                    option_c=option_c or None,
                    option_d=option_d or None,
                    correct_option=correct_option,
                    difficulty=(difficulty or "medium").lower(),
                    question_type=QuestionType.MCQ,
                    source_type=source_type,
                    subject_id=subject_id,
                    chapter_id=chapter_id,
                )
                question.validate_content()
            except ValueError as e:
                raise HTTPException(status_code=400, detail=f"Row {row_number}: {str(e)}")

            questions.append(question)
            if len(questions) > MAX_IMPORT_ROWS:
                raise HTTPException(status_code=400, detail=f"Maximum {MAX_IMPORT_ROWS} questions allowed per import")

        if not questions:
            raise HTTPException(status_code=400, detail="No valid questions found in the CSV file")

        created_at = datetime.now(settings.tz).isoformat()
        inserted = db.insert_many("questions", [
            {"id": str(uuid4()), **q.model_dump(mode="json", exclude_none=True), "created_at": created_at}
            for q in questions
        ])
        logger.info(f"Imported {len(inserted)} questions into subject {subject_id} by {admin_user['id']}")

        return {
            "message": f"Successfully imported {len(inserted)} questions",
            "question_ids": [row["id"] for row in inserted],
        }

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to import questions: {str(e)}")

@router.post("/classes")
async def create_class(data: ClassCreate, admin_user: dict = Depends(require_admin), db: Database = Depends(get_db)):
    try:
        created = db.insert("classes", {"id": str(uuid4()), **data.model_dump(exclude_none=True)})
        return SchoolClassRecord.model_validate(created)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to create class: {str(e)}")

@router.post("/subjects")
async def create_subject(data: SubjectCreate, admin_user: dict = Depends(require_admin), db: Database = Depends(get_db)):
    """Create a subject and offer it in the given classes"""
    try:
        created = db.insert("subjects", {
            "id": str(uuid4()),
            "name": data.name,
            "description": data.description,
        })
        db.insert_many("class_subjects", [
            {"id": str(uuid4()), "class_id": class_id, "subject_id": created["id"]}
            for class_id in data.class_ids
        ])
        return SubjectRecord.model_validate(created)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to create subject: {str(e)}")

@router.post("/chapters")
async def create_chapter(data: ChapterCreate, admin_user: dict = Depends(require_admin), db: Database = Depends(get_db)):
    try:
        created = db.insert("chapters", {"id": str(uuid4()), **data.model_dump()})
        return ChapterRecord.model_validate(created)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to create chapter: {str(e)}")

@router.post("/topics")
async def create_topic(data: TopicCreate, admin_user: dict = Depends(require_admin), db: Database = Depends(get_db)):
    try:
        created = db.insert("topics", {"id": str(uuid4()), **data.model_dump()})
        return TopicRecord.model_validate(created)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to create topic: {str(e)}")

@router.delete("/{table}/{row_id}")
async def delete_lookup_row(
    table: str,
    row_id: str,
    admin_user: dict = Depends(require_admin),
    db: Database = Depends(get_db),
):
    """Delete a class, subject, chapter or topic"""
    if table not in MANAGED_TABLES:
        raise HTTPException(status_code=404, detail="Unknown table")

    try:
        existing = db.select_one(table, "id", {"id": row_id})
        if not existing:
            raise HTTPException(status_code=404, detail="Not found")

        db.delete(table, {"id": row_id})
        return {"message": f"Deleted from {table}", "id": row_id}
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to delete: {str(e)}")

@router.get("/dashboard")
async def get_dashboard(admin_user: dict = Depends(require_admin), db: Database = Depends(get_db)):
    """Content and usage counts"""
    try:
        by_type = {
            question_type.value: db.count("questions", {"question_type": question_type.value})
            for question_type in QuestionType
        }

        return {
            "total_questions": db.count("questions"),
            "questions_by_type": by_type,
            "total_classes": db.count("classes"),
            "total_subjects": db.count("subjects"),
            "total_chapters": db.count("chapters"),
            "total_papers": db.count("papers"),
            "total_users": db.count("profiles"),
        }
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to get dashboard statistics: {str(e)}")
