"""Tests for RatingCRUD and ReadingStatusCRUD upserts."""

import pytest
from sqlalchemy import func, select

from homelib.db.crud import NotFoundError, RatingCRUD, ReadingStatusCRUD
from homelib.db.models import Rating
from tests.test_db.conftest import make_book, make_user


class TestRatingCRUD:
    def test_upsert_creates(self, session):
        user = make_user(session)
        book = make_book(session, user)
        rating = RatingCRUD.upsert(session, user.id, book.id, 4.5)
        assert rating.rating == 4.5
        assert rating.user_id == user.id

    def test_upsert_overwrites_single_row(self, session):
        user = make_user(session)
        book = make_book(session, user)
        RatingCRUD.upsert(session, user.id, book.id, 3)
        RatingCRUD.upsert(session, user.id, book.id, 5)
        assert RatingCRUD.get(session, user.id, book.id).rating == 5
        assert session.scalar(select(func.count()).select_from(Rating)) == 1

    def test_users_rate_independently(self, session):
        alice = make_user(session, name="Alice")
        bob = make_user(session, name="Bob")
        book = make_book(session, alice)
        RatingCRUD.upsert(session, alice.id, book.id, 1)
        RatingCRUD.upsert(session, bob.id, book.id, 5)
        assert RatingCRUD.get(session, alice.id, book.id).rating == 1
        assert RatingCRUD.get(session, bob.id, book.id).rating == 5

    @pytest.mark.parametrize("value", [4.3, -1, 5.5])
    def test_invalid_values_rejected(self, session, value):
        user = make_user(session)
        book = make_book(session, user)
        with pytest.raises(ValueError):
            RatingCRUD.upsert(session, user.id, book.id, value)

    def test_missing_book_raises(self, session):
        user = make_user(session)
        with pytest.raises(NotFoundError):
            RatingCRUD.upsert(session, user.id, 99999, 3)

    def test_delete(self, session):
        user = make_user(session)
        book = make_book(session, user)
        RatingCRUD.upsert(session, user.id, book.id, 2)
        assert RatingCRUD.delete(session, user.id, book.id) is True
        assert RatingCRUD.get(session, user.id, book.id) is None
        assert RatingCRUD.delete(session, user.id, book.id) is False


class TestReadingStatusCRUD:
    @pytest.mark.parametrize("status_id", [0, 1, 2, 3, 99])
    def test_known_statuses_accepted(self, session, status_id):
        user = make_user(session)
        book = make_book(session, user)
        row = ReadingStatusCRUD.upsert(session, user.id, book.id, status_id)
        assert row.status_id == status_id

    def test_unknown_status_rejected(self, session):
        user = make_user(session)
        book = make_book(session, user)
        with pytest.raises(ValueError, match="status_id"):
            ReadingStatusCRUD.upsert(session, user.id, book.id, 5)

    def test_upsert_overwrites(self, session):
        user = make_user(session)
        book = make_book(session, user)
        ReadingStatusCRUD.upsert(session, user.id, book.id, 2)
        ReadingStatusCRUD.upsert(session, user.id, book.id, 1)
        assert ReadingStatusCRUD.get(session, user.id, book.id).status_id == 1

    def test_status_name_lookup(self, session):
        assert ReadingStatusCRUD.get_status_name(session, 99) == "DNF"
        assert ReadingStatusCRUD.get_status_name(session, 42) is None

    def test_delete(self, session):
        user = make_user(session)
        book = make_book(session, user)
        ReadingStatusCRUD.upsert(session, user.id, book.id, 3)
        assert ReadingStatusCRUD.delete(session, user.id, book.id) is True
        assert ReadingStatusCRUD.get(session, user.id, book.id) is None
