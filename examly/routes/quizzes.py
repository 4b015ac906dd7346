from fastapi import APIRouter, Depends, HTTPException
import logging

from examly.database import Database, get_db
from examly.models.records import QuestionRecord, decode_rows
from examly.models.requests import QuizGenerateRequest, QuizSubmitRequest
from examly.services.answer_key import resolve_correct_answer
from examly.services.selection import QUESTION_COLUMNS, load_questions

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_QUIZ_QUESTIONS = 100

def quiz_question(question: QuestionRecord) -> dict:
    """Question as shown to a student, without the answer"""
    return {
        "id": question.id,
        "question_text": question.question_text,
        "question_text_ur": question.question_text_ur,
        "options": {letter: text for letter, text in question.options() if text},
        "difficulty": question.difficulty,
        "chapter_id": question.chapter_id,
    }

@router.post("/generate")
async def generate_quiz(request: QuizGenerateRequest, db: Database = Depends(get_db)):
    """Pick MCQs for a practice quiz"""
    if request.question_count <= 0 or request.question_count > MAX_QUIZ_QUESTIONS:
        raise HTTPException(status_code=400, detail=f"Question count must be between 1 and {MAX_QUIZ_QUESTIONS}")

    try:
        filters = {"subject_id": request.subject_id, "question_type": "mcq"}
        if request.class_subject_id:
            filters["class_subject_id"] = request.class_subject_id
        if request.difficulty not in ("all", "any"):
            filters["difficulty"] = request.difficulty

        in_filters = None
        if request.quiz_type == "chapter" and request.chapters:
            in_filters = {"chapter_id": request.chapters}

        rows = db.select(
            "questions",
            QUESTION_COLUMNS,
            filters=filters,
            in_filters=in_filters,
            order_by=[("id", True)],
            limit=request.question_count,
        )
        questions = [quiz_question(q) for q in decode_rows(QuestionRecord, rows)]

        return {"questions": questions, "total_questions": len(questions)}

    except Exception as e:
        logger.error(f"Error generating quiz: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to generate quiz: {str(e)}")

@router.post("/submit")
async def submit_quiz(request: QuizSubmitRequest, db: Database = Depends(get_db)):
    """Grade quiz answers against the stored correct options"""
    if not request.answers:
        raise HTTPException(status_code=400, detail="No answers submitted")

    try:
        questions = load_questions(db, list(request.answers.keys()))
        if not questions:
            raise HTTPException(status_code=404, detail="Questions not found")

        results = []
        score = 0
        for question in questions:
            correct, _ = resolve_correct_answer(question)
            selected = (request.answers.get(question.id) or "").strip().upper() or None
            is_correct = selected is not None and selected == correct
            if is_correct:
                score += 1
            results.append({
                "question_id": question.id,
                "selected": selected,
                "correct_option": correct,
                "is_correct": is_correct,
            })

        total = len(questions)
        return {
            "score": score,
            "total": total,
            "percentage": round(score * 100 / total, 2),
            "results": results,
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error grading quiz: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to submit quiz: {str(e)}")
