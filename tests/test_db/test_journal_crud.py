"""Tests for JournalCRUD."""

import pytest

from homelib.db.crud import BookCRUD, JournalCRUD, NotFoundError
from tests.test_db.conftest import OLD_TIMESTAMP, backdate, make_book, make_journal, make_user


class TestJournalCRUDCreate:
    def test_create(self, session):
        user = make_user(session)
        book = make_book(session, user)
        entry = make_journal(session, user, book)
        assert entry.id is not None
        assert entry.book_id == book.id
        assert entry.user_id == user.id
        assert entry.title == "Chapter 1"

    def test_create_bumps_book_updated_at(self, session):
        user = make_user(session)
        book = make_book(session, user)
        backdate(session, book)
        make_journal(session, user, book)
        session.expire_all()
        assert BookCRUD.get_by_id(session, book.id).updated_at != OLD_TIMESTAMP

    def test_create_blank_content_raises(self, session):
        user = make_user(session)
        book = make_book(session, user)
        with pytest.raises(ValueError, match="content"):
            make_journal(session, user, book, content=" ")

    def test_create_for_missing_book_raises(self, session):
        user = make_user(session)
        with pytest.raises(NotFoundError):
            JournalCRUD.create(session, 99999, user.id, "t", "c")


class TestJournalCRUDRead:
    def test_get_by_book_newest_first(self, session):
        user = make_user(session)
        book = make_book(session, user)
        first = make_journal(session, user, book, title="first")
        second = make_journal(session, user, book, title="second")
        # created_at ties on a fast machine are broken by id, newest first
        assert [e.id for e in JournalCRUD.get_by_book(session, book.id)] == [second.id, first.id]

    def test_get_by_book_only_returns_that_book(self, session):
        user = make_user(session)
        book = make_book(session, user, title="A")
        other = make_book(session, user, title="B")
        make_journal(session, user, other)
        assert JournalCRUD.get_by_book(session, book.id) == []


class TestJournalCRUDUpdate:
    def test_update_merges_fields(self, session):
        user = make_user(session)
        book = make_book(session, user)
        entry = make_journal(session, user, book)
        updated = JournalCRUD.update(session, entry.id, content="Gandalf arrives.")
        assert updated.title == "Chapter 1"
        assert updated.content == "Gandalf arrives."

    def test_update_bumps_book_updated_at(self, session):
        user = make_user(session)
        book = make_book(session, user)
        entry = make_journal(session, user, book)
        backdate(session, book)
        JournalCRUD.update(session, entry.id, title="Renamed")
        session.expire_all()
        assert BookCRUD.get_by_id(session, book.id).updated_at != OLD_TIMESTAMP

    def test_update_missing_raises(self, session):
        with pytest.raises(NotFoundError):
            JournalCRUD.update(session, 99999, title="x")

    def test_update_under_wrong_book_raises(self, session):
        user = make_user(session)
        book = make_book(session, user, title="A")
        other = make_book(session, user, title="B")
        entry = make_journal(session, user, book)
        with pytest.raises(NotFoundError):
            JournalCRUD.update(session, entry.id, book_id=other.id, title="x")
