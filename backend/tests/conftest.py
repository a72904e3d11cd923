"""Shared fixtures: a fresh in-memory backend and API client per test."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from fastapi.testclient import TestClient

from app.backend import build_backend
from app.config import Settings
from app.main import create_app

PASSWORD = "Secret123!"


@pytest.fixture
def test_settings():
    return Settings(
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret",
        RATE_LIMIT_ENABLED=False,
        DEMO_DATA_ENABLED=True,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def backend(test_settings):
    b = build_backend(test_settings)
    b.create_tables()
    return b


@pytest.fixture
def db(backend):
    session = backend.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(backend):
    with TestClient(create_app(backend=backend)) as c:
        yield c


def sign_up(client, email, role, first_name="Test", last_name="User", password=PASSWORD):
    """Create an account and return (auth headers, response body)."""
    resp = client.post("/api/auth/signup", json={
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "password": password,
        "confirm_password": password,
        "role": role,
    })
    assert resp.status_code == 201, resp.text
    body = resp.json()
    return {"Authorization": f"Bearer {body['access_token']}"}, body


def register_entry(client, headers, name="Sam Student", semester=3, college_code="ABC123"):
    resp = client.post("/api/students/entry", headers=headers, json={
        "name": name,
        "semester": semester,
        "college_code": college_code,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def complete_teacher_profile(client, headers, college_code="ABC123", department="Computer Science"):
    resp = client.put("/api/teachers/profile", headers=headers, json={
        "teacher_id": "T-001",
        "department": department,
        "subjects": "Algorithms",
        "courses": "CS301",
        "college_code": college_code,
    })
    assert resp.status_code == 200, resp.text
    return resp.json()
