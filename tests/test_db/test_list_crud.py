"""Tests for BookListCRUD."""

import pytest

from homelib.db.crud import BookListCRUD, NotFoundError, ReadingStatusCRUD
from tests.test_db.conftest import make_book, make_book_list, make_user


class TestBookListCRUDCreate:
    def test_create_with_ordered_books(self, session):
        user = make_user(session)
        first = make_book(session, user, title="First")
        second = make_book(session, user, title="Second")
        book_list = make_book_list(session, user, book_ids=[second.id, first.id])
        books = BookListCRUD.get_books(session, book_list.id, user.id)
        assert [b["id"] for b in books] == [second.id, first.id]

    def test_create_blank_name_raises(self, session):
        user = make_user(session)
        with pytest.raises(ValueError, match="name"):
            make_book_list(session, user, name="")

    def test_books_carry_current_user_status_name(self, session):
        alice = make_user(session, name="Alice")
        bob = make_user(session, name="Bob")
        book = make_book(session, alice)
        ReadingStatusCRUD.upsert(session, alice.id, book.id, 2)
        book_list = make_book_list(session, alice, book_ids=[book.id])

        assert BookListCRUD.get_books(session, book_list.id, alice.id)[0]["status_name"] == "READING"
        assert BookListCRUD.get_books(session, book_list.id, bob.id)[0]["status_name"] is None


class TestBookListCRUDScope:
    def test_get_for_user_hides_other_users_lists(self, session):
        alice = make_user(session, name="Alice")
        bob = make_user(session, name="Bob")
        book_list = make_book_list(session, alice)
        assert BookListCRUD.get_for_user(session, book_list.id, alice.id) is not None
        assert BookListCRUD.get_for_user(session, book_list.id, bob.id) is None

    def test_get_all_for_user(self, session):
        alice = make_user(session, name="Alice")
        bob = make_user(session, name="Bob")
        make_book_list(session, alice, name="A")
        make_book_list(session, bob, name="B")
        assert [lst.name for lst in BookListCRUD.get_all_for_user(session, alice.id)] == ["A"]


class TestBookListCRUDUpdate:
    def test_update_replaces_books_in_order(self, session):
        user = make_user(session)
        a = make_book(session, user, title="A")
        b = make_book(session, user, title="B")
        c = make_book(session, user, title="C")
        book_list = make_book_list(session, user, book_ids=[a.id, b.id])
        BookListCRUD.update(session, book_list.id, user.id, book_ids=[c.id, a.id])
        books = BookListCRUD.get_books(session, book_list.id, user.id)
        assert [row["id"] for row in books] == [c.id, a.id]

    def test_update_without_books_keeps_membership(self, session):
        user = make_user(session)
        book = make_book(session, user)
        book_list = make_book_list(session, user, book_ids=[book.id])
        updated = BookListCRUD.update(session, book_list.id, user.id, name="Renamed")
        assert updated.name == "Renamed"
        assert len(BookListCRUD.get_books(session, book_list.id, user.id)) == 1

    def test_update_other_users_list_raises(self, session):
        alice = make_user(session, name="Alice")
        bob = make_user(session, name="Bob")
        book_list = make_book_list(session, alice)
        with pytest.raises(NotFoundError):
            BookListCRUD.update(session, book_list.id, bob.id, name="Mine now")


class TestBookListCRUDDelete:
    def test_delete(self, session):
        user = make_user(session)
        book = make_book(session, user)
        book_list = make_book_list(session, user, book_ids=[book.id])
        BookListCRUD.delete(session, book_list.id, user.id)
        assert BookListCRUD.get_all_for_user(session, user.id) == []

    def test_delete_missing_raises(self, session):
        user = make_user(session)
        with pytest.raises(NotFoundError):
            BookListCRUD.delete(session, 99999, user.id)
