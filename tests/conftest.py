import pytest

from httpx import AsyncClient, ASGITransport
from app.main import app
from app.database import db
from app.models.quiz_state import attempt_store
from app.utils.auth_utils import get_current_user
from tests.fakes import FakeDatabase

DB_METHODS = ("insert", "insert_many", "select", "count", "update", "upsert", "delete")

@pytest.fixture
def fake_db(monkeypatch):
    """Route every Database call to an in-memory FakeDatabase"""
    fake = FakeDatabase()
    for name in DB_METHODS:
        monkeypatch.setattr(db, name, getattr(fake, name))
    return fake

@pytest.fixture(autouse=True)
def clear_attempt_store():
    attempt_store.states.clear()
    yield
    attempt_store.states.clear()

@pytest.fixture
def admin_user():
    return {"id": "admin-1", "email": "admin@school.test", "role": "admin", "metadata": {"role": "admin"}}

@pytest.fixture
def student_user():
    return {"id": "student-1", "email": "student@school.test", "role": "student", "metadata": {"role": "student"}}

@pytest.fixture
def login_as():
    """Authenticate requests as the given user dict"""
    def _login(user: dict):
        app.dependency_overrides[get_current_user] = lambda: user
    yield _login
    app.dependency_overrides.clear()

@pytest.fixture
async def client():
    """Create test client"""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

@pytest.fixture
def quiz_config():
    return {
        "class": 7,
        "subject": "Science",
        "mode": "chapter",
        "chapter": "Light",
        "question_count": 10
    }
