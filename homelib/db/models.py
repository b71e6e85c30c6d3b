from sqlalchemy import (
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

# SQLite renders timestamps as UTC text with millisecond precision.
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%f"
_TIMESTAMP_DEFAULT = text(f"(strftime('{TIMESTAMP_FORMAT}', 'now'))")

STATUS_NAMES = {
    0: "UNREAD",
    1: "READ",
    2: "READING",
    3: "TBR",
    99: "DNF",
}


def now_expr():
    """SQL expression for the current timestamp, evaluated by the database."""
    return func.strftime(TIMESTAMP_FORMAT, "now")


def _created_at() -> Mapped[str]:
    return mapped_column(String, server_default=_TIMESTAMP_DEFAULT, nullable=False)


def _updated_at() -> Mapped[str]:
    return mapped_column(
        String,
        server_default=_TIMESTAMP_DEFAULT,
        onupdate=now_expr(),
        nullable=False,
    )


book_tags = Table(
    "book_tags",
    Base.metadata,
    Column("book_id", ForeignKey("books.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
    Index("ix_book_tags_tag_id", "tag_id"),
)
book_genres = Table(
    "book_genres",
    Base.metadata,
    Column("book_id", ForeignKey("books.id", ondelete="CASCADE"), primary_key=True),
    Column("genre_id", ForeignKey("genres.id", ondelete="CASCADE"), primary_key=True),
    Index("ix_book_genres_genre_id", "genre_id"),
)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text)
    color: Mapped[str] = mapped_column(Text)
    avatar_image: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[str] = _created_at()
    updated_at: Mapped[str] = _updated_at()
    last_login: Mapped[str | None] = mapped_column(String)


class Book(Base):
    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    cover_image: Mapped[str | None] = mapped_column(Text)
    title: Mapped[str] = mapped_column(Text)
    author: Mapped[str] = mapped_column(Text)
    series: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[str] = _created_at()
    updated_at: Mapped[str] = _updated_at()


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    name: Mapped[str] = mapped_column(Text)
    color: Mapped[str] = mapped_column(Text)
    created_at: Mapped[str] = _created_at()
    updated_at: Mapped[str] = _updated_at()


class Genre(Base):
    __tablename__ = "genres"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    name: Mapped[str] = mapped_column(Text)
    color: Mapped[str] = mapped_column(Text)
    created_at: Mapped[str] = _created_at()
    updated_at: Mapped[str] = _updated_at()


class JournalEntry(Base):
    __tablename__ = "journal_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    book_id: Mapped[int] = mapped_column(ForeignKey("books.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    title: Mapped[str] = mapped_column(Text)
    content: Mapped[str] = mapped_column(Text)
    created_at: Mapped[str] = _created_at()
    updated_at: Mapped[str] = _updated_at()


class Status(Base):
    __tablename__ = "status"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(Text, unique=True)


class Rating(Base):
    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("user_id", "book_id", name="uq_ratings_user_book"),
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_ratings_rating_range"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    book_id: Mapped[int] = mapped_column(ForeignKey("books.id", ondelete="CASCADE"), index=True)
    rating: Mapped[float] = mapped_column(Float)
    created_at: Mapped[str] = _created_at()
    updated_at: Mapped[str] = _updated_at()


class ReadingStatus(Base):
    __tablename__ = "reading_status"
    __table_args__ = (
        UniqueConstraint("user_id", "book_id", name="uq_reading_status_user_book"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    book_id: Mapped[int] = mapped_column(ForeignKey("books.id", ondelete="CASCADE"), index=True)
    status_id: Mapped[int] = mapped_column(ForeignKey("status.id"))
    created_at: Mapped[str] = _created_at()
    updated_at: Mapped[str] = _updated_at()


class BookList(Base):
    __tablename__ = "lists"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    type_id: Mapped[int] = mapped_column(Integer)
    name: Mapped[str] = mapped_column(Text)
    created_at: Mapped[str] = _created_at()
    updated_at: Mapped[str] = _updated_at()

    user: Mapped["User"] = relationship()


class ListBook(Base):
    __tablename__ = "list_books"

    list_id: Mapped[int] = mapped_column(ForeignKey("lists.id", ondelete="CASCADE"), primary_key=True)
    book_id: Mapped[int] = mapped_column(ForeignKey("books.id", ondelete="CASCADE"), primary_key=True)
    position: Mapped[int] = mapped_column(Integer)
