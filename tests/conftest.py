import pytest
from httpx import ASGITransport, AsyncClient

from examly.main import app
from examly.database import Database, Storage, get_db, get_storage
from tests.fakes import FakeSupabaseClient, mcq, written

USER_TOKEN = "user-token"
ADMIN_TOKEN = "admin-token"

@pytest.fixture
def fake_client():
    """Small question bank: one subject, two chapters, a class and two users"""
    client = FakeSupabaseClient({
        "classes": [{"id": "class-9", "name": "9th"}, {"id": "class-10", "name": "10th"}],
        "subjects": [{"id": "sub-1", "name": "Physics"}, {"id": "sub-2", "name": "Chemistry"}],
        "class_subjects": [
            {"id": "cs-1", "class_id": "class-9", "subject_id": "sub-1"},
            {"id": "cs-2", "class_id": "class-9", "subject_id": "sub-2"},
        ],
        "chapters": [
            {"id": "ch-2", "name": "Kinematics", "chapterNo": 2, "subject_id": "sub-1", "class_id": "class-9"},
            {"id": "ch-1", "name": "Measurements", "chapterNo": 1, "subject_id": "sub-1", "class_id": "class-9"},
        ],
        "topics": [{"id": "t-1", "name": "Units", "chapter_id": "ch-1"}],
        "questions": [
            mcq("q1", "What is the SI unit of length?", correct="B"),
            mcq("q2", "What is the SI unit of mass?", correct="C", chapter_id="ch-2", difficulty="hard"),
            mcq("q3", "What is the SI unit of time?", correct="A", source_type="past_paper"),
            written("s1"),
            written("s2", chapter_id="ch-2"),
            written("l1", question_type="long"),
        ],
        "profiles": [
            {"id": "user-1", "role": "teacher", "papers_generated": 0},
            {"id": "admin-1", "role": "admin", "papers_generated": 0},
        ],
        "papers": [],
        "paper_questions": [],
        "user_packages": [],
    })
    for row in client.tables["questions"]:
        row["class_subject_id"] = "cs-1"
    client.add_user(USER_TOKEN, "user-1")
    client.add_user(ADMIN_TOKEN, "admin-1", email="admin@examly.test")
    return client

@pytest.fixture
def db(fake_client):
    return Database(fake_client)

@pytest.fixture
def storage(fake_client):
    return Storage(fake_client)

@pytest.fixture
async def client(db, storage):
    """Create test client backed by the in-memory Supabase fake"""
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_storage] = lambda: storage
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()

@pytest.fixture
def auth_headers():
    """Helper to create auth headers"""
    def _auth_headers(token: str = USER_TOKEN):
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers
