import os

# Settings are read at import time, so the environment must be ready first
os.environ["SECRET_KEY"] = "test-secret-key-0123456789abcdef0123456789abcdef"
os.environ["ENVIRONMENT"] = "test"
os.environ["AUTO_CREATE_TABLES"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from civic_intake.core.database import Database
from civic_intake.main import create_app

PASSWORD = "correct-horse-battery"


@pytest.fixture
def database():
    # Single in-memory SQLite connection shared by every session in the test
    db = Database(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    db.create_all()
    yield db
    db.close()


@pytest.fixture
def client(database):
    with TestClient(create_app(database=database)) as test_client:
        yield test_client


def signup(client, email, role="citizen", password=PASSWORD, full_name="Test User"):
    """Sign up through the API; the client keeps the returned session cookie"""
    response = client.post(
        "/auth/signup",
        json={"email": email, "password": password, "fullName": full_name, "role": role},
    )
    assert response.status_code == 201, response.text
    return response.json()["user"]


def complaint_payload(**overrides):
    payload = {
        "title": "Streetlight out",
        "description": "The streetlight on 5th Avenue has been dark for a week",
        "categoryId": "street-lighting",
    }
    payload.update(overrides)
    return payload
