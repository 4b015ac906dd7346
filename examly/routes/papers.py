from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from uuid import uuid4
import logging

from examly.config import settings
from examly.database import Database, Storage, get_db, get_storage
from examly.models.records import PaperQuestionRecord, PaperRecord, QuestionRecord, decode_rows
from examly.models.requests import CamelModel, PaperRequest
from examly.services.answer_key import render_answer_key
from examly.services.paper_pdf import PaperSection, paper_filename, render_paper
from examly.services.paper_storage import save_answer_key, save_user_pdf, split_public_url
from examly.services.selection import (
    find_questions_with_fallback,
    list_questions_for_manual_selection,
    load_questions,
    resolve_chapter_ids,
)
from examly.services.subscription import is_paid_subscriber
from examly.utils.auth_utils import get_current_user
from examly.utils.errors import ApiError

logger = logging.getLogger(__name__)

router = APIRouter()

# Auto selection fills sections in this order
AUTO_SECTIONS = ("mcq", "short", "long")

PlanItem = Tuple[str, str]  # (question_type, question_id)

class DeletePaperRequest(CamelModel):
    paper_id: Optional[str] = None

def lookup_names(db: Database, subject_id: str, class_id: str) -> Tuple[str, str]:
    subject = db.select_one("subjects", "name", {"id": subject_id})
    school_class = db.select_one("classes", "name", {"id": class_id})
    subject_name = subject["name"] if subject else "Unknown Subject"
    class_name = str(school_class["name"]) if school_class else "Unknown Class"
    return subject_name, class_name

def build_question_plan(db: Database, request: PaperRequest, chapter_ids: List[str]) -> List[PlanItem]:
    """Ordered (type, id) pairs that make up the paper"""
    plan: List[PlanItem] = []

    if request.selection_method == "manual" and request.reordered_questions:
        for question_type, items in request.reordered_questions.items():
            for item in items:
                if item.get("id"):
                    plan.append((question_type, str(item["id"])))
        return plan

    if request.selection_method == "manual" and request.selected_questions:
        for question_type, question_ids in request.selected_questions.items():
            if not question_ids:
                continue

            existing = db.select(
                "questions",
                "id",
                filters={"subject_id": request.subject_id},
                in_filters={"id": question_ids},
            )
            valid = {row["id"] for row in existing}
            if not valid:
                logger.warning(f"No valid {question_type} questions found for manual selection")
                continue

            plan.extend((question_type, question_id) for question_id in question_ids if question_id in valid)
        return plan

    for question_type in AUTO_SECTIONS:
        count = getattr(request, f"{question_type}_count") or 0
        if count <= 0:
            continue
        question_ids = find_questions_with_fallback(
            db,
            question_type,
            request.subject_id,
            chapter_ids,
            request.source_type,
            getattr(request, f"{question_type}_difficulty"),
            count,
        )
        if not question_ids:
            logger.warning(f"No {question_type} questions found")
        plan.extend((question_type, question_id) for question_id in question_ids)

    return plan

def build_sections(questions: Dict[str, QuestionRecord], plan: List[PlanItem], marks: Dict[str, int]) -> List[PaperSection]:
    sections: Dict[str, PaperSection] = {}
    for question_type, question_id in plan:
        question = questions.get(question_id)
        if question is None:
            continue
        if question_type not in sections:
            sections[question_type] = PaperSection(
                question_type=question_type,
                marks_each=marks.get(question_type, 1),
            )
        sections[question_type].questions.append(question)
    return list(sections.values())

def load_branding(db: Database, user_id: str) -> dict:
    """Institute name and logo from the owner's profile"""
    try:
        profile = db.select_one("profiles", "institution,logo", {"id": user_id})
    except Exception as e:
        logger.warning(f"Failed to load branding for {user_id}: {e}")
        return {}
    if not profile:
        return {}
    return {"institute_name": profile.get("institution"), "logo": profile.get("logo")}

def increment_papers_generated(db: Database, user_id: str):
    try:
        profile = db.select_one("profiles", "papers_generated", {"id": user_id})
        if profile is None:
            return
        count = (profile.get("papers_generated") or 0) + 1
        db.update("profiles", {"papers_generated": count}, {"id": user_id})
    except Exception as e:
        logger.warning(f"Failed to update papers_generated for {user_id}: {e}")

def discard_paper(db: Database, paper: Optional[dict]):
    if not paper:
        return
    for table, filters in (("paper_questions", {"paper_id": paper["id"]}), ("papers", {"id": paper["id"]})):
        try:
            db.delete(table, filters)
        except Exception as e:
            logger.warning(f"Failed to clean up {table} for paper {paper['id']}: {e}")

def store_paper_artifacts(
    db: Database,
    storage: Storage,
    user_id: str,
    paper: dict,
    pdf: bytes,
    sections: List[PaperSection],
    class_name: str,
    subject_name: str,
):
    """Upload the paper and its MCQ key, then record their URLs on the paper"""
    update = {}

    try:
        pdf_path = save_user_pdf(storage, user_id, pdf, paper["title"])
        update["paperPdf"] = settings.public_object_url(settings.papers_bucket, pdf_path)
    except Exception as e:
        logger.warning(f"Failed to save paper PDF to storage: {e}")

    mcqs = [q for section in sections if section.question_type == "mcq" for q in section.questions]
    if mcqs:
        try:
            key = render_answer_key(
                paper["title"],
                mcqs,
                metadata={"Class": class_name, "Subject": subject_name, "Total MCQs": str(len(mcqs))},
            )
            key_path = save_answer_key(storage, user_id, paper["id"], key)
            update["paperKey"] = settings.public_object_url(settings.keys_bucket, key_path)
        except Exception as e:
            logger.warning(f"Failed to generate and save MCQ key: {e}")

    if update:
        try:
            db.update("papers", update, {"id": paper["id"]})
        except Exception as e:
            logger.warning(f"Failed to update paper with PDF/key URLs: {e}")

def pdf_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Content-Length": str(len(content)),
        },
    )

def _parse_paper_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Ignoring unparseable paper date: {value}")
        return None

@router.post("/generate-paper")
async def generate_paper(
    request: PaperRequest,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
    storage: Storage = Depends(get_storage),
):
    """Generate a question paper PDF"""
    if not request.title or not request.subject_id or not request.class_id:
        raise ApiError(400, "Complete your Profile to generate a paper!")

    user_id = current_user["id"]
    paper = None
    try:
        subject_name, class_name = lookup_names(db, request.subject_id, request.class_id)
        paper = db.insert("papers", {
            "id": str(uuid4()),
            "title": request.title,
            "created_by": user_id,
            "class_name": class_name,
            "subject_name": subject_name,
        })

        chapter_ids = resolve_chapter_ids(request.chapter_option, request.selected_chapters)
        plan = build_question_plan(db, request, chapter_ids)
        if not plan:
            raise ApiError(404, "No questions found for the given criteria")

        db.insert_many("paper_questions", [
            {
                "paper_id": paper["id"],
                "question_id": question_id,
                "order_number": order_number,
                "question_type": question_type,
            }
            for order_number, (question_type, question_id) in enumerate(plan, start=1)
        ])

        questions = {q.id: q for q in load_questions(db, [question_id for _, question_id in plan])}
        marks = {question_type: request.marks_for(question_type) for question_type, _ in plan}
        sections = build_sections(questions, plan, marks)

        paid = is_paid_subscriber(db, user_id)
        pdf = render_paper(
            paper["title"],
            class_name,
            subject_name,
            sections,
            time_minutes=request.time_minutes,
            paper_date=_parse_paper_date(request.paper_date),
            paid=paid,
            **load_branding(db, user_id),
        )

        if paid:
            store_paper_artifacts(db, storage, user_id, paper, pdf, sections, class_name, subject_name)

        increment_papers_generated(db, user_id)
        logger.info(f"Generated paper {paper['id']} with {len(plan)} questions for {user_id}")

        return pdf_response(pdf, paper_filename(paper["title"]))

    except ApiError:
        discard_paper(db, paper)
        raise
    except Exception as e:
        logger.error(f"Error generating paper: {e}")
        discard_paper(db, paper)
        raise ApiError(500, "Failed to generate paper. Please try again later.", str(e))

@router.get("/generate-paper")
async def get_questions_for_manual_selection(
    subject_id: Optional[str] = Query(None, alias="subjectId"),
    class_id: Optional[str] = Query(None, alias="classId"),
    chapter_ids: Optional[str] = Query(None, alias="chapterIds"),
    source_type: Optional[str] = Query(None, alias="sourceType"),
    difficulty: Optional[str] = Query(None),
    db: Database = Depends(get_db),
):
    """Questions available for manual selection"""
    if not subject_id or not class_id:
        raise ApiError(400, "Subject ID and Class ID are required")

    chapters = [c.strip() for c in (chapter_ids or "").split(",") if c.strip()]
    try:
        return list_questions_for_manual_selection(db, subject_id, class_id, chapters, source_type, difficulty)
    except Exception as e:
        logger.error(f"Error fetching questions for manual selection: {e}")
        raise ApiError(500, "Failed to fetch questions", str(e))

@router.get("/download-paper/{paper_id}")
async def download_paper(
    paper_id: str,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Re-render a stored paper from its saved question order"""
    try:
        row = db.select_one("papers", "*", {"id": paper_id})
        if not row:
            raise ApiError(404, "Paper not found")

        paper = PaperRecord.model_validate(row)
        if paper.created_by != current_user["id"]:
            raise ApiError(403, "You do not have access to this paper")

        rows = db.select("paper_questions", "*", filters={"paper_id": paper_id}, order_by=[("order_number", False)])
        plan = [(entry.question_type.value, entry.question_id) for entry in decode_rows(PaperQuestionRecord, rows)]
        if not plan:
            raise ApiError(404, "Paper has no questions")

        questions = {q.id: q for q in load_questions(db, [question_id for _, question_id in plan])}
        defaults = PaperRequest()
        marks = {question_type: defaults.marks_for(question_type) for question_type, _ in plan}
        sections = build_sections(questions, plan, marks)

        pdf = render_paper(
            paper.title,
            paper.class_name or "",
            paper.subject_name or "",
            sections,
            paid=is_paid_subscriber(db, paper.created_by),
            **load_branding(db, paper.created_by),
        )
        return pdf_response(pdf, paper_filename(paper.title))

    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Error downloading paper {paper_id}: {e}")
        raise ApiError(500, "Failed to download paper", str(e))

@router.post("/papers/delete")
async def delete_paper(
    request: DeletePaperRequest,
    db: Database = Depends(get_db),
    storage: Storage = Depends(get_storage),
):
    """Remove a paper's stored PDF and key"""
    if not request.paper_id:
        raise ApiError(400, "Missing paperId")

    try:
        row = db.select_one("papers", "*", {"id": request.paper_id})
        if not row:
            raise ApiError(404, "Paper not found")

        paper = PaperRecord.model_validate(row)
        for url in (paper.paperPdf, paper.paperKey):
            location = split_public_url(url)
            if location is None:
                continue
            bucket, path = location
            try:
                storage.remove(bucket, [path])
            except Exception as e:
                logger.error(f"Error deleting {path} from {bucket}: {e}")

        db.update("papers", {"paperPdf": None, "paperKey": None}, {"id": request.paper_id})
        return {"success": True, "message": "Paper deleted successfully"}

    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Error deleting paper: {e}")
        raise ApiError(500, str(e) or "Internal Server Error")
