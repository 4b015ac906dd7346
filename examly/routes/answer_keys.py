from fastapi import APIRouter, Depends
from typing import List
import logging

from examly.database import Database, get_db
from examly.models.records import QuestionRecord
from examly.models.requests import McqKeyRequest
from examly.routes.papers import pdf_response
from examly.services.answer_key import key_filename, render_answer_key
from examly.services.selection import find_questions_with_fallback, load_questions, resolve_chapter_ids
from examly.utils.errors import ApiError

logger = logging.getLogger(__name__)

router = APIRouter()

NO_MCQS_FOUND = "No MCQs found for the given criteria"

def select_key_questions(db: Database, request: McqKeyRequest) -> List[QuestionRecord]:
    """MCQs for the key, in the order they appear on the paper.

    Explicitly selected ids keep their given order. A stored paper plan is
    used when the paper is known; otherwise the automatic selection is
    re-run with the same filters the paper generator uses.
    """
    selected = (request.selected_questions or {}).get("mcq") or []
    if selected:
        return load_questions(db, selected)

    if request.paper_id:
        rows = db.select(
            "paper_questions",
            "question_id",
            filters={"paper_id": request.paper_id, "question_type": "mcq"},
            order_by=[("order_number", False)],
        )
        if rows:
            return load_questions(db, [row["question_id"] for row in rows])

    question_ids = find_questions_with_fallback(
        db,
        "mcq",
        request.subject_id,
        resolve_chapter_ids(request.chapter_option, request.selected_chapters),
        request.source_type,
        request.mcq_difficulty,
        request.mcq_count or 0,
    )
    return load_questions(db, question_ids)

@router.post("/generate-mcq-key")
async def generate_mcq_key(request: McqKeyRequest, db: Database = Depends(get_db)):
    """Generate the MCQ answer key PDF for a paper"""
    if not request.subject_id:
        raise ApiError(400, "Subject ID is required")

    try:
        mcqs = select_key_questions(db, request)
        if not mcqs:
            raise ApiError(404, NO_MCQS_FOUND)

        pdf = render_answer_key(
            request.paper_title,
            mcqs,
            metadata={
                "Selection Method": request.selection_method or "auto",
                "Total MCQs": str(len(mcqs)),
            },
        )
        return pdf_response(pdf, key_filename(request.paper_title))

    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Error generating MCQ key: {e}")
        raise ApiError(500, "Internal server error", str(e))
