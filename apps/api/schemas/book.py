from pydantic import BaseModel

from .common import RowId
from .label import LabelOut
from .user import UserSummary


class BookOut(BaseModel):
    id: int
    user_id: int
    cover_image: str | None = None
    title: str
    author: str
    series: str | None = None
    created_at: str
    updated_at: str


class BookJournalOut(BaseModel):
    id: int
    book_id: int
    title: str
    content: str
    created_at: str
    updated_at: str
    user: UserSummary


class BookRatingOut(BaseModel):
    id: int
    book_id: int
    rating: float
    created_at: str
    updated_at: str
    user: UserSummary


class BookStatusOut(BaseModel):
    id: int
    book_id: int
    status_id: int
    status_name: str
    created_at: str
    updated_at: str
    user: UserSummary


class BookWithDetailsOut(BookOut):
    tags: list[LabelOut] = []
    genres: list[LabelOut] = []
    journals: list[BookJournalOut] = []
    ratings: list[BookRatingOut] = []
    statuses: list[BookStatusOut] = []
    current_user_status: int | None = None


class CreateBookRequest(BaseModel):
    title: str
    author: str
    cover_image: str | None = None
    series: str | None = None
    tags: list[RowId] | None = None
    genres: list[RowId] | None = None


class UpdateBookRequest(BaseModel):
    """Partial update; only fields present in the request body are applied.

    ``cover_image``, ``series`` and ``rating`` distinguish an explicit
    ``null`` (clear it) from an absent key (leave it alone).
    """

    title: str | None = None
    author: str | None = None
    cover_image: str | None = None
    series: str | None = None
    rating: float | None = None
    tags: list[RowId] | None = None
    genres: list[RowId] | None = None
