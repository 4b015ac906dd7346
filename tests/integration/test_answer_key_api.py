"""
Integration tests for MCQ answer key generation
"""
from unittest.mock import patch

import pytest
from httpx import AsyncClient

from examly.services import answer_key


def captured_ids(render_mock):
    _, questions = render_mock.call_args.args[:2]
    return [q.id for q in questions]


class TestGenerateMcqKey:
    """POST /api/generate-mcq-key"""

    @pytest.mark.asyncio
    async def test_subject_is_required(self, client: AsyncClient):
        response = await client.post("/api/generate-mcq-key", json={"paperTitle": "Test"})

        assert response.status_code == 400
        assert response.json() == {"message": "Subject ID is required"}

    @pytest.mark.asyncio
    async def test_nothing_found(self, client: AsyncClient):
        response = await client.post("/api/generate-mcq-key", json={"subjectId": "sub-404", "mcqCount": 5})

        assert response.status_code == 404
        assert response.json() == {"message": "No MCQs found for the given criteria"}

    @pytest.mark.asyncio
    async def test_zero_count_finds_nothing(self, client: AsyncClient):
        response = await client.post("/api/generate-mcq-key", json={"subjectId": "sub-1"})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_manual_selection_keeps_order(self, client: AsyncClient):
        with patch("examly.routes.answer_keys.render_answer_key", wraps=answer_key.render_answer_key) as render:
            response = await client.post("/api/generate-mcq-key", json={
                "subjectId": "sub-1",
                "paperTitle": "Physics Test",
                "selectionMethod": "manual",
                "selectedQuestions": {"mcq": ["q3", "q1", "ghost", "q2"]},
            })

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == 'attachment; filename="Physics_Test-key.pdf"'
        assert response.content.startswith(b"%PDF")
        assert captured_ids(render) == ["q3", "q1", "q2"]
        assert render.call_args.kwargs["metadata"] == {"Selection Method": "manual", "Total MCQs": "3"}

    @pytest.mark.asyncio
    async def test_auto_selection_matches_fallback_order(self, client: AsyncClient):
        with patch("examly.routes.answer_keys.render_answer_key", wraps=answer_key.render_answer_key) as render:
            response = await client.post("/api/generate-mcq-key", json={
                "subjectId": "sub-1",
                "chapterOption": "full_book",
                "mcqCount": 2,
                "mcqDifficulty": "hard",
                "sourceType": "model",
            })

        assert response.status_code == 200
        assert response.headers["content-disposition"] == 'attachment; filename="mcq_key-key.pdf"'
        assert captured_ids(render) == ["q3", "q2"]

    @pytest.mark.asyncio
    async def test_custom_chapters(self, client: AsyncClient):
        with patch("examly.routes.answer_keys.render_answer_key", wraps=answer_key.render_answer_key) as render:
            response = await client.post("/api/generate-mcq-key", json={
                "subjectId": "sub-1",
                "chapterOption": "custom",
                "selectedChapters": ["ch-1"],
                "mcqCount": 2,
            })

        assert response.status_code == 200
        assert captured_ids(render) == ["q3", "q1"]

    @pytest.mark.asyncio
    async def test_stored_paper_order_is_used(self, client: AsyncClient, fake_client):
        fake_client.tables["paper_questions"] = [
            {"paper_id": "p1", "question_id": "q1", "order_number": 2, "question_type": "mcq"},
            {"paper_id": "p1", "question_id": "q2", "order_number": 1, "question_type": "mcq"},
            {"paper_id": "p1", "question_id": "s1", "order_number": 3, "question_type": "short"},
        ]

        with patch("examly.routes.answer_keys.render_answer_key", wraps=answer_key.render_answer_key) as render:
            response = await client.post("/api/generate-mcq-key", json={
                "subjectId": "sub-1",
                "paperId": "p1",
                "mcqCount": 3,
            })

        assert response.status_code == 200
        assert captured_ids(render) == ["q2", "q1"]

    @pytest.mark.asyncio
    async def test_database_failure(self, client: AsyncClient, fake_client):
        fake_client.fail_tables.add("questions")

        response = await client.post("/api/generate-mcq-key", json={"subjectId": "sub-1", "mcqCount": 2})

        assert response.status_code == 500
        assert response.json() == {"message": "Internal server error", "error": "questions unavailable"}


class TestMcqKeyNullFields:
    """Clients send null for fields they leave unset"""

    @pytest.mark.asyncio
    async def test_null_filters_select_like_defaults(self, client: AsyncClient):
        with patch("examly.routes.answer_keys.render_answer_key", wraps=answer_key.render_answer_key) as render:
            response = await client.post("/api/generate-mcq-key", json={
                "subjectId": "sub-1",
                "chapterOption": None,
                "selectionMethod": None,
                "selectedQuestions": None,
                "mcqCount": 2,
                "mcqDifficulty": None,
                "sourceType": None,
                "paperId": None,
            })

        assert response.status_code == 200
        assert captured_ids(render) == ["q3", "q2"]

    @pytest.mark.asyncio
    async def test_null_count_finds_nothing(self, client: AsyncClient):
        response = await client.post("/api/generate-mcq-key", json={
            "subjectId": "sub-1",
            "mcqCount": None,
            "mcqDifficulty": None,
            "sourceType": None,
        })

        assert response.status_code == 404
        assert response.json() == {"message": "No MCQs found for the given criteria"}

    @pytest.mark.asyncio
    async def test_manual_selection_with_null_sections(self, client: AsyncClient):
        with patch("examly.routes.answer_keys.render_answer_key", wraps=answer_key.render_answer_key) as render:
            response = await client.post("/api/generate-mcq-key", json={
                "subjectId": "sub-1",
                "selectionMethod": "manual",
                "selectedQuestions": {"mcq": ["q3", "q1"], "short": None, "long": None},
                "mcqCount": None,
                "mcqDifficulty": None,
                "sourceType": None,
            })

        assert response.status_code == 200
        assert captured_ids(render) == ["q3", "q1"]
