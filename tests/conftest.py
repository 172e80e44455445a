import mongomock
import pytest
from fastapi.testclient import TestClient

from auth import token_for
from database import get_db
from main import app
from models import Actor, Role, UserCreate
from services import user_service


@pytest.fixture
def db():
    return mongomock.MongoClient()["home_services_test"]


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Create a stored user and return (record, actor)."""
    counter = {"n": 0}

    def _make(role=Role.CLIENT, **extra):
        counter["n"] += 1
        data = UserCreate(
            name=extra.pop("name", f"{role.value} {counter['n']}"),
            email=f"{role.value}{counter['n']}@example.com",
            password="secret123",
            role=role,
            **extra,
        )
        record = user_service.create_user(db, data)
        return record, Actor(id=record["id"], role=role)

    return _make


@pytest.fixture
def auth_headers():
    def _headers(record):
        return {"Authorization": f"Bearer {token_for(record)}"}

    return _headers
