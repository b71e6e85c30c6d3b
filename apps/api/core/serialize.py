"""Helpers to serialize SQLAlchemy ORM models to API response dicts."""

from __future__ import annotations

from homelib.db.models import Book, BookList, Genre, JournalEntry, Rating, ReadingStatus, Tag, User


def serialize_user(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "color": user.color,
        "avatar_image": user.avatar_image,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
        "last_login": user.last_login,
    }


def serialize_user_summary(user_id: int, name: str, color: str) -> dict:
    return {"id": user_id, "name": name, "color": color}


def serialize_book(book: Book) -> dict:
    return {
        "id": book.id,
        "user_id": book.user_id,
        "cover_image": book.cover_image,
        "title": book.title,
        "author": book.author,
        "series": book.series,
        "created_at": book.created_at,
        "updated_at": book.updated_at,
    }


def serialize_label(label: Tag | Genre) -> dict:
    return {
        "id": label.id,
        "user_id": label.user_id,
        "name": label.name,
        "color": label.color,
        "created_at": label.created_at,
        "updated_at": label.updated_at,
    }


def serialize_journal(entry: JournalEntry) -> dict:
    return {
        "id": entry.id,
        "book_id": entry.book_id,
        "user_id": entry.user_id,
        "title": entry.title,
        "content": entry.content,
        "created_at": entry.created_at,
        "updated_at": entry.updated_at,
    }


def serialize_rating(rating: Rating) -> dict:
    return {
        "id": rating.id,
        "user_id": rating.user_id,
        "book_id": rating.book_id,
        "rating": rating.rating,
        "created_at": rating.created_at,
        "updated_at": rating.updated_at,
    }


def serialize_reading_status(reading_status: ReadingStatus, status_name: str | None) -> dict:
    return {
        "id": reading_status.id,
        "user_id": reading_status.user_id,
        "book_id": reading_status.book_id,
        "status_id": reading_status.status_id,
        "status_name": status_name,
        "created_at": reading_status.created_at,
        "updated_at": reading_status.updated_at,
    }


def serialize_list(book_list: BookList, books: list[dict]) -> dict:
    owner = book_list.user
    return {
        "id": book_list.id,
        "user_id": book_list.user_id,
        "type_id": book_list.type_id,
        "name": book_list.name,
        "created_at": book_list.created_at,
        "updated_at": book_list.updated_at,
        "user": {
            "id": owner.id,
            "name": owner.name,
            "color": owner.color,
            "avatar_image": owner.avatar_image,
        },
        "books": [
            {
                "id": row["id"],
                "cover_image": row["cover_image"],
                "status_name": row["status_name"],
            }
            for row in books
        ],
    }
