"""Shared fixtures and factory helpers for the SQLite CRUD tests.

Each test gets a completely fresh in-memory database with foreign keys
enforced and the reading status reference rows seeded.
"""

import pytest
from sqlalchemy import insert, update
from sqlalchemy.orm import Session

from homelib.db.base import Base
from homelib.db.crud import (
    BookCRUD,
    BookListCRUD,
    GenreCRUD,
    JournalCRUD,
    TagCRUD,
    UserCRUD,
)
from homelib.db.models import STATUS_NAMES, Status
from homelib.db.session import create_db_engine

OLD_TIMESTAMP = "2000-01-01 00:00:00.000"


# ---------------------------------------------------------------------------
# Core fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def session():
    """Provide a fresh, isolated in-memory SQLite session for each test."""
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(engine)
    with Session(engine, autoflush=False) as sess:
        sess.execute(insert(Status), [{"id": key, "name": name} for key, name in STATUS_NAMES.items()])
        sess.flush()
        yield sess
    engine.dispose()


# ---------------------------------------------------------------------------
# Factory helpers (plain functions, not fixtures, so tests can call them
# with custom arguments easily)
# ---------------------------------------------------------------------------


def make_user(session, name="Alice", color="#ff0000", **kwargs):
    return UserCRUD.create(session, name=name, color=color, **kwargs)


def make_book(session, user, title="The Hobbit", author="J.R.R. Tolkien", **kwargs):
    return BookCRUD.create(session, user_id=user.id, title=title, author=author, **kwargs)


def make_tag(session, user, name="favourite", color="#00ff00"):
    return TagCRUD.create(session, user.id, name, color)


def make_genre(session, user, name="Fantasy", color="#0000ff"):
    return GenreCRUD.create(session, user.id, name, color)


def make_journal(session, user, book, title="Chapter 1", content="Bilbo leaves home."):
    return JournalCRUD.create(session, book.id, user.id, title, content)


def make_book_list(session, user, name="Summer reads", type_id=1, book_ids=()):
    return BookListCRUD.create(session, user.id, name=name, type_id=type_id, book_ids=book_ids)


def backdate(session, row):
    """Push ``updated_at`` into the past so a later bump is observable."""
    model = type(row)
    session.execute(update(model).where(model.id == row.id).values(updated_at=OLD_TIMESTAMP))
    session.flush()
    session.expire_all()
