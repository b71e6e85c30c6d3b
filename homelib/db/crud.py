"""SQLite CRUD helpers for the home library schema.

Each model gets a small class of static methods that take a SQLAlchemy
``Session``. Writes flush so ids and server defaults are available
immediately; committing is left to the caller, which owns the transaction.
Invalid input raises ``ValueError`` and missing rows raise ``NotFoundError``.
"""

from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import Table, delete, insert, or_, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from .models import (
    STATUS_NAMES,
    Book,
    BookList,
    Genre,
    JournalEntry,
    ListBook,
    Rating,
    ReadingStatus,
    Status,
    Tag,
    User,
    book_genres,
    book_tags,
    now_expr,
)

logger = logging.getLogger(__name__)


class NotFoundError(LookupError):
    """Raised when a row targeted by an update or delete does not exist."""


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _require_non_empty(value: str | None, field_name: str) -> str:
    """Validate that a string field is not None, empty, or whitespace-only."""
    if value is None:
        raise ValueError(f"{field_name} is required")
    value = str(value).strip()
    if not value:
        raise ValueError(f"{field_name} must not be empty")
    return value


def _validate_rating(rating: float | None) -> float:
    """Ratings are half-star steps between 0 and 5 inclusive."""
    if rating is None:
        raise ValueError("rating is required")
    rating = float(rating)
    if rating < 0 or rating > 5:
        raise ValueError(f"rating must be between 0 and 5, got {rating}")
    if (rating * 2) % 1 != 0:
        raise ValueError(f"rating must be in 0.5 increments, got {rating}")
    return rating


def _validate_status_id(status_id: int | None) -> int:
    if status_id is None:
        raise ValueError("status_id is required")
    if status_id not in STATUS_NAMES:
        allowed = ", ".join(str(key) for key in STATUS_NAMES)
        raise ValueError(f"status_id must be one of {allowed}, got {status_id}")
    return status_id


def _dedupe_ids(ids: Iterable[int]) -> list[int]:
    return list(dict.fromkeys(ids))


def _touch_book(session: Session, book_id: int) -> None:
    session.execute(update(Book).where(Book.id == book_id).values(updated_at=now_expr()))


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserCRUD:
    @staticmethod
    def get_by_id(session: Session, user_id: int) -> User | None:
        return session.get(User, user_id)

    @staticmethod
    def get_all(session: Session) -> list[User]:
        return list(session.scalars(select(User).order_by(User.id)))

    @staticmethod
    def create(session: Session, name: str, color: str, avatar_image: str | None = None) -> User:
        user = User(
            name=_require_non_empty(name, "name"),
            color=_require_non_empty(color, "color"),
            avatar_image=avatar_image,
        )
        session.add(user)
        session.flush()
        session.refresh(user)
        return user

    @staticmethod
    def update(session: Session, user_id: int, **kwargs) -> User:
        """Apply only the fields present in ``kwargs``; ``avatar_image=None`` clears it."""
        user = session.get(User, user_id)
        if not user:
            raise NotFoundError(f"User with id {user_id} not found")
        for field in ("name", "color"):
            if field in kwargs:
                kwargs[field] = _require_non_empty(kwargs[field], field)
        for key, value in kwargs.items():
            setattr(user, key, value)
        user.updated_at = now_expr()
        session.flush()
        session.refresh(user)
        return user

    @staticmethod
    def select(session: Session, user_id: int) -> User:
        """Mark ``user_id`` as the active profile by stamping ``last_login``."""
        user = session.get(User, user_id)
        if not user:
            raise NotFoundError(f"User with id {user_id} not found")
        user.last_login = now_expr()
        session.flush()
        session.refresh(user)
        return user


# ---------------------------------------------------------------------------
# Books
# ---------------------------------------------------------------------------

# Fixed mapping so a relation name can never be turned into arbitrary SQL.
_BOOK_LINK_TABLES: dict[str, tuple[Table, str]] = {
    "tags": (book_tags, "tag_id"),
    "genres": (book_genres, "genre_id"),
}

# Rows removed before the book itself, in this order.
_BOOK_DEPENDENT_TABLES = (
    book_tags,
    book_genres,
    JournalEntry.__table__,
    Rating.__table__,
    ReadingStatus.__table__,
    ListBook.__table__,
)


def _replace_book_links(session: Session, relation: str, book_id: int, ids: Iterable[int]) -> list[int]:
    """Replace every link of ``relation`` for ``book_id`` with ``ids``.

    The target set is the de-duplicated input; an empty input clears all
    links. The book's ``updated_at`` is bumped.
    """
    try:
        table, target_column = _BOOK_LINK_TABLES[relation]
    except KeyError:
        raise ValueError(f"Unknown book relation {relation!r}") from None

    unique_ids = _dedupe_ids(ids)
    session.execute(delete(table).where(table.c.book_id == book_id))
    if unique_ids:
        session.execute(
            insert(table),
            [{"book_id": book_id, target_column: target_id} for target_id in unique_ids],
        )
    _touch_book(session, book_id)
    session.flush()
    logger.debug("Replaced %s for book %s with %s", relation, book_id, unique_ids)
    return unique_ids


class BookCRUD:
    @staticmethod
    def get_by_id(session: Session, book_id: int) -> Book | None:
        return session.get(Book, book_id)

    @staticmethod
    def exists(session: Session, book_id: int) -> bool:
        return session.scalar(select(Book.id).where(Book.id == book_id)) is not None

    @staticmethod
    def list_all(session: Session, search: str | None = None) -> list[Book]:
        """All books, most recently updated first, optionally filtered by a substring.

        The search term is matched with SQL ``LIKE`` against title, author
        and series, so SQLite's case-insensitive ASCII matching applies.
        """
        stmt = select(Book)
        if search is not None:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    Book.title.like(pattern),
                    Book.author.like(pattern),
                    Book.series.like(pattern),
                )
            )
        stmt = stmt.order_by(Book.updated_at.desc(), Book.id.desc())
        return list(session.scalars(stmt))

    @staticmethod
    def create(
        session: Session,
        user_id: int,
        title: str,
        author: str,
        cover_image: str | None = None,
        series: str | None = None,
    ) -> Book:
        book = Book(
            user_id=user_id,
            title=_require_non_empty(title, "title"),
            author=_require_non_empty(author, "author"),
            cover_image=cover_image,
            series=series,
        )
        session.add(book)
        session.flush()
        session.refresh(book)
        return book

    @staticmethod
    def update(session: Session, book_id: int, **kwargs) -> Book:
        """Apply only the fields present in ``kwargs``.

        ``cover_image=None`` and ``series=None`` clear those columns; title
        and author may be changed but never blanked.
        """
        book = session.get(Book, book_id)
        if not book:
            raise NotFoundError(f"Book with id {book_id} not found")
        for field in ("title", "author"):
            if field in kwargs:
                kwargs[field] = _require_non_empty(kwargs[field], field)
        for key, value in kwargs.items():
            setattr(book, key, value)
        book.updated_at = now_expr()
        session.flush()
        session.refresh(book)
        return book

    @staticmethod
    def set_cover_image(session: Session, book_id: int, cover_image: str) -> None:
        """Store a looked-up cover without counting it as a user edit."""
        session.execute(
            update(Book)
            .where(Book.id == book_id)
            .values(cover_image=cover_image, updated_at=Book.updated_at)
            .execution_options(synchronize_session=False)
        )
        session.flush()

    @staticmethod
    def replace_tags(session: Session, book_id: int, tag_ids: Iterable[int]) -> list[int]:
        return _replace_book_links(session, "tags", book_id, tag_ids)

    @staticmethod
    def replace_genres(session: Session, book_id: int, genre_ids: Iterable[int]) -> list[int]:
        return _replace_book_links(session, "genres", book_id, genre_ids)

    @staticmethod
    def delete(session: Session, book_id: int) -> None:
        """Delete a book and every row that hangs off it.

        Tags and genres themselves survive. Raises ``NotFoundError`` when the
        book does not exist; the caller must then roll back.
        """
        if book_id <= 0:
            raise ValueError(f"Invalid book id {book_id}")
        for table in _BOOK_DEPENDENT_TABLES:
            session.execute(delete(table).where(table.c.book_id == book_id))
        result = session.execute(
            delete(Book).where(Book.id == book_id).execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError(f"Book with id {book_id} not found")
        session.flush()


# ---------------------------------------------------------------------------
# Tags and genres
# ---------------------------------------------------------------------------


class _LabelCRUD:
    """Shared behaviour for user-defined book labels (tags and genres)."""

    model: type[Tag] | type[Genre]
    label: str

    @classmethod
    def get_by_id(cls, session: Session, label_id: int):
        return session.get(cls.model, label_id)

    @classmethod
    def get_all(cls, session: Session, name: str | None = None) -> list:
        stmt = select(cls.model)
        if name:
            stmt = stmt.where(cls.model.name.like(f"%{name}%"))
        stmt = stmt.order_by(cls.model.name, cls.model.id)
        return list(session.scalars(stmt))

    @classmethod
    def create(cls, session: Session, user_id: int, name: str, color: str):
        label = cls.model(
            user_id=user_id,
            name=_require_non_empty(name, "name"),
            color=_require_non_empty(color, "color"),
        )
        session.add(label)
        session.flush()
        session.refresh(label)
        return label

    @classmethod
    def update(cls, session: Session, label_id: int, **kwargs):
        label = session.get(cls.model, label_id)
        if not label:
            raise NotFoundError(f"{cls.label} with id {label_id} not found")
        for field in ("name", "color"):
            if field in kwargs:
                kwargs[field] = _require_non_empty(kwargs[field], field)
        for key, value in kwargs.items():
            setattr(label, key, value)
        label.updated_at = now_expr()
        session.flush()
        session.refresh(label)
        return label

    @classmethod
    def delete(cls, session: Session, label_id: int) -> None:
        """Delete a label; its book links go with it through ON DELETE CASCADE."""
        label = session.get(cls.model, label_id)
        if not label:
            raise NotFoundError(f"{cls.label} with id {label_id} not found")
        session.delete(label)
        session.flush()


class TagCRUD(_LabelCRUD):
    model = Tag
    label = "Tag"


class GenreCRUD(_LabelCRUD):
    model = Genre
    label = "Genre"


# ---------------------------------------------------------------------------
# Journals
# ---------------------------------------------------------------------------


class JournalCRUD:
    @staticmethod
    def get_by_id(session: Session, journal_id: int) -> JournalEntry | None:
        return session.get(JournalEntry, journal_id)

    @staticmethod
    def get_all(session: Session) -> list[JournalEntry]:
        stmt = select(JournalEntry).order_by(JournalEntry.created_at.desc(), JournalEntry.id.desc())
        return list(session.scalars(stmt))

    @staticmethod
    def get_by_book(session: Session, book_id: int) -> list[JournalEntry]:
        stmt = (
            select(JournalEntry)
            .where(JournalEntry.book_id == book_id)
            .order_by(JournalEntry.created_at.desc(), JournalEntry.id.desc())
        )
        return list(session.scalars(stmt))

    @staticmethod
    def create(session: Session, book_id: int, user_id: int, title: str, content: str) -> JournalEntry:
        title = _require_non_empty(title, "title")
        content = _require_non_empty(content, "content")
        if not BookCRUD.exists(session, book_id):
            raise NotFoundError(f"Book with id {book_id} not found")
        entry = JournalEntry(book_id=book_id, user_id=user_id, title=title, content=content)
        session.add(entry)
        session.flush()
        _touch_book(session, book_id)
        session.flush()
        session.refresh(entry)
        return entry

    @staticmethod
    def update(
        session: Session,
        journal_id: int,
        book_id: int | None = None,
        title: str | None = None,
        content: str | None = None,
    ) -> JournalEntry:
        """Merge ``title``/``content`` over the stored entry.

        When ``book_id`` is given the entry must belong to that book.
        """
        entry = session.get(JournalEntry, journal_id)
        if not entry or (book_id is not None and entry.book_id != book_id):
            raise NotFoundError(f"Journal entry with id {journal_id} not found")
        if title is not None:
            entry.title = _require_non_empty(title, "title")
        if content is not None:
            entry.content = _require_non_empty(content, "content")
        entry.updated_at = now_expr()
        session.flush()
        _touch_book(session, entry.book_id)
        session.flush()
        session.refresh(entry)
        return entry


# ---------------------------------------------------------------------------
# Ratings and reading status
# ---------------------------------------------------------------------------


class RatingCRUD:
    @staticmethod
    def get(session: Session, user_id: int, book_id: int) -> Rating | None:
        stmt = select(Rating).where(Rating.user_id == user_id, Rating.book_id == book_id)
        return session.scalar(stmt)

    @staticmethod
    def upsert(session: Session, user_id: int, book_id: int, rating: float) -> Rating:
        """Create or overwrite the single rating a user holds for a book."""
        rating = _validate_rating(rating)
        if not BookCRUD.exists(session, book_id):
            raise NotFoundError(f"Book with id {book_id} not found")
        stmt = sqlite_insert(Rating).values(user_id=user_id, book_id=book_id, rating=rating)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Rating.user_id, Rating.book_id],
            set_={"rating": stmt.excluded.rating, "updated_at": now_expr()},
        )
        session.execute(stmt)
        session.flush()
        row = RatingCRUD.get(session, user_id, book_id)
        session.refresh(row)
        return row

    @staticmethod
    def delete(session: Session, user_id: int, book_id: int) -> bool:
        result = session.execute(
            delete(Rating)
            .where(Rating.user_id == user_id, Rating.book_id == book_id)
            .execution_options(synchronize_session=False)
        )
        session.flush()
        return result.rowcount > 0


class ReadingStatusCRUD:
    @staticmethod
    def get(session: Session, user_id: int, book_id: int) -> ReadingStatus | None:
        stmt = select(ReadingStatus).where(
            ReadingStatus.user_id == user_id,
            ReadingStatus.book_id == book_id,
        )
        return session.scalar(stmt)

    @staticmethod
    def get_status_name(session: Session, status_id: int) -> str | None:
        return session.scalar(select(Status.name).where(Status.id == status_id))

    @staticmethod
    def upsert(session: Session, user_id: int, book_id: int, status_id: int) -> ReadingStatus:
        status_id = _validate_status_id(status_id)
        if not BookCRUD.exists(session, book_id):
            raise NotFoundError(f"Book with id {book_id} not found")
        stmt = sqlite_insert(ReadingStatus).values(user_id=user_id, book_id=book_id, status_id=status_id)
        stmt = stmt.on_conflict_do_update(
            index_elements=[ReadingStatus.user_id, ReadingStatus.book_id],
            set_={"status_id": stmt.excluded.status_id, "updated_at": now_expr()},
        )
        session.execute(stmt)
        session.flush()
        row = ReadingStatusCRUD.get(session, user_id, book_id)
        session.refresh(row)
        return row

    @staticmethod
    def delete(session: Session, user_id: int, book_id: int) -> bool:
        result = session.execute(
            delete(ReadingStatus)
            .where(ReadingStatus.user_id == user_id, ReadingStatus.book_id == book_id)
            .execution_options(synchronize_session=False)
        )
        session.flush()
        return result.rowcount > 0


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------


def _replace_list_books(session: Session, list_id: int, book_ids: Iterable[int]) -> None:
    session.execute(delete(ListBook).where(ListBook.list_id == list_id))
    rows = [
        {"list_id": list_id, "book_id": book_id, "position": position}
        for position, book_id in enumerate(_dedupe_ids(book_ids))
    ]
    if rows:
        session.execute(insert(ListBook), rows)


class BookListCRUD:
    @staticmethod
    def get_for_user(session: Session, list_id: int, user_id: int) -> BookList | None:
        stmt = select(BookList).where(BookList.id == list_id, BookList.user_id == user_id)
        return session.scalar(stmt)

    @staticmethod
    def get_all_for_user(session: Session, user_id: int) -> list[BookList]:
        stmt = (
            select(BookList)
            .where(BookList.user_id == user_id)
            .order_by(BookList.created_at.desc(), BookList.id.desc())
        )
        return list(session.scalars(stmt))

    @staticmethod
    def get_books(session: Session, list_id: int, user_id: int) -> list[dict]:
        """Books on a list in position order, with ``user_id``'s reading status name."""
        stmt = (
            select(Book.id, Book.cover_image, Status.name.label("status_name"))
            .join(ListBook, ListBook.book_id == Book.id)
            .outerjoin(
                ReadingStatus,
                (ReadingStatus.book_id == Book.id) & (ReadingStatus.user_id == user_id),
            )
            .outerjoin(Status, Status.id == ReadingStatus.status_id)
            .where(ListBook.list_id == list_id)
            .order_by(ListBook.position)
        )
        return [dict(row._mapping) for row in session.execute(stmt)]

    @staticmethod
    def create(
        session: Session,
        user_id: int,
        name: str,
        type_id: int,
        book_ids: Iterable[int] = (),
    ) -> BookList:
        book_list = BookList(user_id=user_id, name=_require_non_empty(name, "name"), type_id=type_id)
        session.add(book_list)
        session.flush()
        _replace_list_books(session, book_list.id, book_ids)
        session.flush()
        session.refresh(book_list)
        return book_list

    @staticmethod
    def update(session: Session, list_id: int, user_id: int, **kwargs) -> BookList:
        """Update a list owned by ``user_id``; a ``book_ids`` key replaces its books."""
        book_list = BookListCRUD.get_for_user(session, list_id, user_id)
        if not book_list:
            raise NotFoundError(f"List with id {list_id} not found")
        book_ids = kwargs.pop("book_ids", None)
        if "name" in kwargs:
            kwargs["name"] = _require_non_empty(kwargs["name"], "name")
        for key, value in kwargs.items():
            setattr(book_list, key, value)
        book_list.updated_at = now_expr()
        session.flush()
        if book_ids is not None:
            _replace_list_books(session, list_id, book_ids)
            session.flush()
        session.refresh(book_list)
        return book_list

    @staticmethod
    def delete(session: Session, list_id: int, user_id: int) -> None:
        book_list = BookListCRUD.get_for_user(session, list_id, user_id)
        if not book_list:
            raise NotFoundError(f"List with id {list_id} not found")
        session.execute(delete(ListBook).where(ListBook.list_id == list_id))
        session.delete(book_list)
        session.flush()
