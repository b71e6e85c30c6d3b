"""Fixtures and helpers for HTTP tests.

Every test gets its own SQLite file, brought to the latest schema through
the real Alembic migrations when the app starts.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import update

from apps.api.core.config import Settings
from apps.api.main import create_app
from homelib.db.models import Book

OLD_TIMESTAMP = "2000-01-01 00:00:00.000"


def build_settings(tmp_path, **overrides) -> Settings:
    values = {
        "DATABASE_URL": f"sqlite:///{tmp_path / 'homelib-test.db'}",
        "CORS_ORIGINS": ["http://localhost:5173"],
        "COVER_LOOKUP_ENABLED": False,
        "LOG_LEVEL": "WARNING",
    }
    values.update(overrides)
    return Settings.model_validate(values)


@pytest.fixture
def settings(tmp_path):
    return build_settings(tmp_path)


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client


# ---------------------------------------------------------------------------
# Helpers (plain functions so tests can pass custom arguments)
# ---------------------------------------------------------------------------


def user_headers(user_id) -> dict:
    return {"currentUserId": str(user_id)}


def create_user(client, name="Alice", color="#ff0000", **fields) -> dict:
    response = client.post("/users", json={"name": name, "color": color, **fields})
    assert response.status_code == 201, response.text
    return response.json()


def create_book(client, user_id, title="The Hobbit", author="J.R.R. Tolkien", **fields) -> dict:
    response = client.post(
        "/books",
        json={"title": title, "author": author, **fields},
        headers=user_headers(user_id),
    )
    assert response.status_code == 201, response.text
    return response.json()


def create_tag(client, user_id, name="favourite", color="#00ff00") -> dict:
    response = client.post("/tags", json={"name": name, "color": color}, headers=user_headers(user_id))
    assert response.status_code == 201, response.text
    return response.json()


def create_genre(client, user_id, name="Fantasy", color="#0000ff") -> dict:
    response = client.post("/genres", json={"name": name, "color": color}, headers=user_headers(user_id))
    assert response.status_code == 201, response.text
    return response.json()


def create_journal(client, user_id, book_id, title="Chapter 1", content="Bilbo leaves home.") -> dict:
    response = client.post(
        f"/books/{book_id}/journals",
        json={"title": title, "content": content},
        headers=user_headers(user_id),
    )
    assert response.status_code == 201, response.text
    return response.json()


def backdate_book(client, book_id) -> None:
    """Push a book's ``updated_at`` into the past so a later bump is observable."""
    with client.app.state.session_factory() as session:
        session.execute(update(Book).where(Book.id == book_id).values(updated_at=OLD_TIMESTAMP))
        session.commit()
