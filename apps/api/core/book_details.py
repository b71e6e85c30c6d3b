"""Assemble ``BookWithDetails`` views with batch queries.

Every related collection is fetched with one query per collection for the
whole set of requested books, keyed by book id, instead of one query per
book. Books without related rows get empty collections. Query errors are
not caught here: a failing sub-query fails the whole request.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from sqlalchemy import Table, select
from sqlalchemy.orm import Session

from homelib.db.crud import BookCRUD
from homelib.db.models import (
    Book,
    Genre,
    JournalEntry,
    Rating,
    ReadingStatus,
    Status,
    Tag,
    User,
    book_genres,
    book_tags,
)

from .serialize import serialize_book, serialize_user_summary

logger = logging.getLogger(__name__)


def _fetch_labels_for_books(
    db: Session,
    model: type[Tag] | type[Genre],
    link_table: Table,
    target_column: str,
    book_ids: list[int],
) -> dict[int, list[dict]]:
    stmt = (
        select(
            link_table.c.book_id,
            model.id,
            model.user_id,
            model.name,
            model.color,
            model.created_at,
            model.updated_at,
        )
        .join(link_table, link_table.c[target_column] == model.id)
        .where(link_table.c.book_id.in_(book_ids))
        .order_by(model.name, model.id)
    )
    result: dict[int, list[dict]] = defaultdict(list)
    for row in db.execute(stmt):
        result[row.book_id].append(
            {
                "id": row.id,
                "user_id": row.user_id,
                "name": row.name,
                "color": row.color,
                "created_at": row.created_at,
                "updated_at": row.updated_at,
            }
        )
    return result


def fetch_tags_for_books(db: Session, book_ids: list[int]) -> dict[int, list[dict]]:
    return _fetch_labels_for_books(db, Tag, book_tags, "tag_id", book_ids)


def fetch_genres_for_books(db: Session, book_ids: list[int]) -> dict[int, list[dict]]:
    return _fetch_labels_for_books(db, Genre, book_genres, "genre_id", book_ids)


def fetch_journals_for_books(db: Session, book_ids: list[int]) -> dict[int, list[dict]]:
    stmt = (
        select(JournalEntry, User.name, User.color)
        .join(User, User.id == JournalEntry.user_id)
        .where(JournalEntry.book_id.in_(book_ids))
        .order_by(JournalEntry.created_at.desc(), JournalEntry.id.desc())
    )
    result: dict[int, list[dict]] = defaultdict(list)
    for entry, user_name, user_color in db.execute(stmt):
        result[entry.book_id].append(
            {
                "id": entry.id,
                "book_id": entry.book_id,
                "title": entry.title,
                "content": entry.content,
                "created_at": entry.created_at,
                "updated_at": entry.updated_at,
                "user": serialize_user_summary(entry.user_id, user_name, user_color),
            }
        )
    return result


def fetch_ratings_for_books(db: Session, book_ids: list[int]) -> dict[int, list[dict]]:
    stmt = (
        select(Rating, User.name, User.color)
        .join(User, User.id == Rating.user_id)
        .where(Rating.book_id.in_(book_ids))
        .order_by(Rating.created_at.desc(), Rating.id.desc())
    )
    result: dict[int, list[dict]] = defaultdict(list)
    for rating, user_name, user_color in db.execute(stmt):
        result[rating.book_id].append(
            {
                "id": rating.id,
                "book_id": rating.book_id,
                "rating": rating.rating,
                "created_at": rating.created_at,
                "updated_at": rating.updated_at,
                "user": serialize_user_summary(rating.user_id, user_name, user_color),
            }
        )
    return result


def fetch_statuses_for_books(db: Session, book_ids: list[int]) -> dict[int, list[dict]]:
    stmt = (
        select(ReadingStatus, Status.name, User.name, User.color)
        .join(Status, Status.id == ReadingStatus.status_id)
        .join(User, User.id == ReadingStatus.user_id)
        .where(ReadingStatus.book_id.in_(book_ids))
        .order_by(ReadingStatus.updated_at.desc(), ReadingStatus.id.desc())
    )
    result: dict[int, list[dict]] = defaultdict(list)
    for reading_status, status_name, user_name, user_color in db.execute(stmt):
        result[reading_status.book_id].append(
            {
                "id": reading_status.id,
                "book_id": reading_status.book_id,
                "status_id": reading_status.status_id,
                "status_name": status_name,
                "created_at": reading_status.created_at,
                "updated_at": reading_status.updated_at,
                "user": serialize_user_summary(reading_status.user_id, user_name, user_color),
            }
        )
    return result


def fetch_current_user_statuses(db: Session, book_ids: list[int], user_id: int) -> dict[int, int]:
    stmt = select(ReadingStatus.book_id, ReadingStatus.status_id).where(
        ReadingStatus.user_id == user_id,
        ReadingStatus.book_id.in_(book_ids),
    )
    return {row.book_id: row.status_id for row in db.execute(stmt)}


def assemble_book_details(
    db: Session,
    books: list[Book],
    current_user_id: int | None = None,
) -> list[dict]:
    """Build one details dict per book, preserving the order of ``books``."""
    if not books:
        return []

    book_ids = list(dict.fromkeys(book.id for book in books))
    tags = fetch_tags_for_books(db, book_ids)
    genres = fetch_genres_for_books(db, book_ids)
    journals = fetch_journals_for_books(db, book_ids)
    ratings = fetch_ratings_for_books(db, book_ids)
    statuses = fetch_statuses_for_books(db, book_ids)
    current_statuses = (
        fetch_current_user_statuses(db, book_ids, current_user_id) if current_user_id is not None else {}
    )

    details = []
    for book in books:
        data = serialize_book(book)
        data["tags"] = tags.get(book.id, [])
        data["genres"] = genres.get(book.id, [])
        data["journals"] = journals.get(book.id, [])
        data["ratings"] = ratings.get(book.id, [])
        data["statuses"] = statuses.get(book.id, [])
        data["current_user_status"] = current_statuses.get(book.id)
        details.append(data)
    return details


def load_book_details(db: Session, book_id: int, current_user_id: int | None = None) -> dict | None:
    book = BookCRUD.get_by_id(db, book_id)
    if book is None:
        return None
    return assemble_book_details(db, [book], current_user_id)[0]


def list_books_with_details(
    db: Session,
    current_user_id: int | None = None,
    search: str | None = None,
) -> list[dict]:
    books = BookCRUD.list_all(db, search=search)
    logger.debug("Loaded %d books (search=%r)", len(books), search)
    return assemble_book_details(db, books, current_user_id)
