from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
import logging

from examly.config import settings
from examly.database import Database, get_db
from examly.models.records import (
    ChapterRecord,
    QuestionRecord,
    SchoolClassRecord,
    SubjectRecord,
    TopicRecord,
    decode_rows,
)
from examly.models.requests import BulkQuestionsRequest
from examly.services.selection import ALL_SOURCES, ANY_DIFFICULTY, get_class_subject_id, map_source_type

logger = logging.getLogger(__name__)

router = APIRouter()

def _split_ids(value: Optional[str]):
    return [item.strip() for item in (value or "").split(",") if item.strip()]

@router.get("/classes")
async def get_classes(db: Database = Depends(get_db)):
    """All classes ordered by name"""
    try:
        rows = db.select("classes", "*", order_by=[("name", False)])
        return decode_rows(SchoolClassRecord, rows)
    except Exception as e:
        logger.error(f"Error fetching classes: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch classes")

@router.get("/subjects")
async def get_subjects(class_id: Optional[str] = Query(None, alias="classId"), db: Database = Depends(get_db)):
    """Subjects offered for a class"""
    if not class_id:
        raise HTTPException(status_code=400, detail="Class ID is required")

    try:
        links = db.select("class_subjects", "subject_id", {"class_id": class_id})
        subject_ids = [link["subject_id"] for link in links]
        if not subject_ids:
            return []

        rows = db.select("subjects", "*", in_filters={"id": subject_ids})
        return decode_rows(SubjectRecord, rows)
    except Exception as e:
        logger.error(f"Error fetching subjects: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch subjects")

@router.get("/chapters")
async def get_chapters(
    subject_id: Optional[str] = Query(None, alias="subjectId"),
    class_id: Optional[str] = Query(None, alias="classId"),
    db: Database = Depends(get_db),
):
    """Chapters of a subject for a class, in book order"""
    if not subject_id or not class_id:
        raise HTTPException(status_code=400, detail="Subject ID and Class ID are required")

    try:
        rows = db.select(
            "chapters",
            "*",
            filters={"subject_id": subject_id, "class_id": class_id},
            order_by=[("chapterNo", False)],
        )
        return decode_rows(ChapterRecord, rows)
    except Exception as e:
        logger.error(f"Error fetching chapters: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch chapters")

@router.get("/topics")
async def get_topics(chapter_id: Optional[str] = Query(None, alias="chapterId"), db: Database = Depends(get_db)):
    if not chapter_id:
        raise HTTPException(status_code=400, detail="Chapter ID is required")

    try:
        rows = db.select("topics", "*", filters={"chapter_id": chapter_id}, order_by=[("name", False)])
        return decode_rows(TopicRecord, rows)
    except Exception as e:
        logger.error(f"Error fetching topics: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch topics")

@router.get("/questions")
async def get_questions(
    subject_id: Optional[str] = Query(None, alias="subjectId"),
    class_id: Optional[str] = Query(None, alias="classId"),
    question_type: Optional[str] = Query(None, alias="questionType"),
    difficulty: Optional[str] = Query(None),
    chapter_ids: Optional[str] = Query(None, alias="chapterIds"),
    source_type: Optional[str] = Query(None),
    question_ids: Optional[str] = Query(None, alias="questionIds"),
    limit: Optional[int] = Query(None),
    db: Database = Depends(get_db),
):
    """Questions by id list, or by subject/class/type with optional filters"""
    try:
        # Preview of manually selected questions
        if question_ids is not None:
            ids = _split_ids(question_ids)
            if not ids:
                return []
            rows = db.select("questions", "*", in_filters={"id": ids})
            return decode_rows(QuestionRecord, rows)

        if not subject_id or not question_type or not class_id:
            raise HTTPException(
                status_code=400,
                detail="subjectId, classId and questionType are required when not using questionIds"
            )

        chapters = db.select("chapters", "id", {"subject_id": subject_id, "class_id": class_id})
        class_chapter_ids = [chapter["id"] for chapter in chapters]
        if not class_chapter_ids:
            return []

        requested = _split_ids(chapter_ids)
        if requested:
            class_chapter_ids = [chapter_id for chapter_id in class_chapter_ids if chapter_id in requested]
            if not class_chapter_ids:
                return []

        filters = {"question_type": question_type}
        if difficulty and difficulty != ANY_DIFFICULTY:
            filters["difficulty"] = difficulty
        if source_type and source_type != ALL_SOURCES:
            filters["source_type"] = source_type

        rows = db.select(
            "questions",
            "*",
            filters=filters,
            in_filters={"chapter_id": class_chapter_ids},
            limit=limit or settings.question_fetch_limit,
        )
        return decode_rows(QuestionRecord, rows)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching questions: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch questions")

@router.post("/questions/bulk")
async def get_questions_bulk(request: BulkQuestionsRequest, db: Database = Depends(get_db)):
    """Questions of every type for a set of chapters, newest first"""
    if not request.subject_id or not request.class_id or request.chapter_ids is None:
        raise HTTPException(status_code=400, detail="Missing required parameters")

    try:
        filters = {"subject_id": request.subject_id}
        class_subject_id = get_class_subject_id(db, request.class_id, request.subject_id)
        if class_subject_id:
            filters["class_subject_id"] = class_subject_id

        db_source_type = map_source_type(request.source_type)
        if db_source_type and db_source_type != ALL_SOURCES:
            filters["source_type"] = db_source_type

        result = {}
        for question_type, default_limit in (("mcq", 50), ("short", 50), ("long", 20)):
            limit = request.limits.get(question_type, default_limit)
            if limit <= 0:
                result[question_type] = []
                continue

            rows = db.select(
                "questions",
                "*",
                filters={**filters, "question_type": question_type},
                in_filters={"chapter_id": request.chapter_ids} if request.chapter_ids else None,
                order_by=[("created_at", True)],
                limit=limit,
            )
            questions = decode_rows(QuestionRecord, rows)

            if request.requirements and request.requirements.get(question_type):
                questions = questions[:request.requirements[question_type]]
            result[question_type] = questions

        return {
            **result,
            "metadata": {
                "totalFetched": {question_type: len(items) for question_type, items in result.items()},
                "requested": request.requirements,
            },
        }

    except Exception as e:
        logger.error(f"Error in bulk questions API: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
