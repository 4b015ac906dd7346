"""
Question selection shared by paper generation and answer-key generation.

A generated paper and its independently regenerated answer key must pick
the same questions, so the filters, the ordering (id descending) and the
limit used for automatic selection are defined here and nowhere else.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from examly.database import Database
from examly.models.records import QuestionRecord, decode_rows

logger = logging.getLogger(__name__)

QUESTION_COLUMNS = (
    "id, question_text, question_text_ur, option_a, option_b, option_c, option_d, "
    "option_a_ur, option_b_ur, option_c_ur, option_d_ur, correct_option, answer_text, "
    "difficulty, question_type, source_type, subject_id, chapter_id, topic_id, class_subject_id"
)

# Request values -> values stored in questions.source_type
SOURCE_TYPE_MAP = {
    "model": "model_paper",
    "past": "past_paper",
    "book": "book",
    "all": "all",
}

ALL_SOURCES = "all"
ANY_DIFFICULTY = "any"

Tier = Tuple[Dict[str, str], List[str]]

def map_source_type(source_type: Optional[str]) -> Optional[str]:
    if source_type is None:
        return None
    return SOURCE_TYPE_MAP.get(source_type, source_type)

def resolve_chapter_ids(chapter_option: Optional[str], selected_chapters: Optional[Sequence[str]]) -> List[str]:
    """Chapters to filter on; an empty list means the whole book"""
    if chapter_option in ("custom", "single_chapter"):
        return list(selected_chapters or [])
    return []

def build_fallback_tiers(
    question_type: str,
    subject_id: str,
    chapter_ids: Sequence[str],
    source_type: Optional[str],
    difficulty: Optional[str],
) -> List[Tier]:
    """Filter sets from most to least specific.

    1. every filter
    2. without difficulty
    3. without difficulty and source type
    4. subject and type only

    A tier identical to an earlier one is left out.
    """
    base = {"question_type": question_type, "subject_id": subject_id}

    db_source_type = map_source_type(source_type)
    source_filter = {}
    if db_source_type and db_source_type != ALL_SOURCES:
        source_filter = {"source_type": db_source_type}

    difficulty_filter = {}
    if difficulty and difficulty != ANY_DIFFICULTY:
        difficulty_filter = {"difficulty": difficulty}

    chapters = list(chapter_ids or [])
    candidates = [
        ({**base, **source_filter, **difficulty_filter}, chapters),
        ({**base, **source_filter}, chapters),
        (dict(base), chapters),
        (dict(base), []),
    ]

    tiers: List[Tier] = []
    for tier in candidates:
        if tier not in tiers:
            tiers.append(tier)
    return tiers

def _query_tier(db: Database, filters: Dict[str, str], chapter_ids: List[str], count: int) -> List[str]:
    rows = db.select(
        "questions",
        "id",
        filters=filters,
        in_filters={"chapter_id": chapter_ids} if chapter_ids else None,
        order_by=[("id", True)],
        limit=count,
    )
    return [row["id"] for row in rows]

def find_questions_with_fallback(
    db: Database,
    question_type: str,
    subject_id: str,
    chapter_ids: Sequence[str],
    source_type: Optional[str],
    difficulty: Optional[str],
    count: int,
) -> List[str]:
    """Return up to ``count`` question ids, relaxing filters until enough are found.

    The first tier that yields ``count`` rows wins; otherwise the rows of the
    last (least filtered) tier are returned, possibly fewer than ``count``.
    Database errors propagate to the caller.
    """
    if not count or count <= 0:
        return []

    tiers = build_fallback_tiers(question_type, subject_id, chapter_ids, source_type, difficulty)

    found: List[str] = []
    for number, (filters, chapters) in enumerate(tiers, start=1):
        found = _query_tier(db, filters, chapters, count)
        if len(found) >= count:
            if number > 1:
                logger.info(f"Selected {len(found)} {question_type} questions after relaxing to tier {number}")
            return found

    logger.warning(
        f"Only {len(found)} of {count} {question_type} questions available for subject {subject_id}"
    )
    return found

def load_questions(db: Database, question_ids: Sequence[str]) -> List[QuestionRecord]:
    """Fetch full question rows, returned in the order of ``question_ids``.

    Ids with no matching row are dropped.
    """
    ids = list(question_ids)
    if not ids:
        return []

    rows = db.select("questions", QUESTION_COLUMNS, in_filters={"id": ids})
    by_id = {record.id: record for record in decode_rows(QuestionRecord, rows)}
    return [by_id[question_id] for question_id in ids if question_id in by_id]

def get_class_subject_id(db: Database, class_id: str, subject_id: str) -> Optional[str]:
    row = db.select_one("class_subjects", "id", {"class_id": class_id, "subject_id": subject_id})
    return row["id"] if row else None

def list_questions_for_manual_selection(
    db: Database,
    subject_id: str,
    class_id: str,
    chapter_ids: Sequence[str],
    source_type: Optional[str] = None,
    difficulty: Optional[str] = None,
) -> List[QuestionRecord]:
    """All questions a teacher may pick from, grouped by type and chapter"""
    filters = {"subject_id": subject_id}

    class_subject_id = get_class_subject_id(db, class_id, subject_id)
    if class_subject_id:
        filters["class_subject_id"] = class_subject_id

    db_source_type = map_source_type(source_type)
    if db_source_type and db_source_type != ALL_SOURCES:
        filters["source_type"] = db_source_type

    if difficulty and difficulty != ANY_DIFFICULTY:
        filters["difficulty"] = difficulty

    rows = db.select(
        "questions",
        QUESTION_COLUMNS,
        filters=filters,
        in_filters={"chapter_id": list(chapter_ids)} if chapter_ids else None,
        order_by=[("question_type", False), ("chapter_id", False), ("id", False)],
    )
    return decode_rows(QuestionRecord, rows)
