from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Response, status
from sqlalchemy.orm import Session

from homelib.db.crud import BookCRUD, NotFoundError, RatingCRUD, ReadingStatusCRUD

from ..core.book_details import list_books_with_details, load_book_details
from ..core.covers import CoverLookup
from ..core.deps import MAX_ID, get_cover_lookup, get_current_user_id, get_db, get_optional_user_id
from ..core.serialize import serialize_book, serialize_rating, serialize_reading_status
from ..schemas.book import BookOut, BookWithDetailsOut, CreateBookRequest, UpdateBookRequest
from ..schemas.engagement import RatingOut, RatingRequest, StatusOut, StatusRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/books", tags=["books"])

BookId = Annotated[int, Path(gt=0, le=MAX_ID)]


def _book_details_or_404(db: Session, book_id: int, current_user_id: int | None) -> dict:
    details = load_book_details(db, book_id, current_user_id)
    if details is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    return details


def _require_book(db: Session, book_id: int) -> None:
    if not BookCRUD.exists(db, book_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")


@router.get("", response_model=list[BookWithDetailsOut])
def list_books(
    search: str | None = None,
    db: Session = Depends(get_db),
    current_user_id: int | None = Depends(get_optional_user_id),
):
    books = list_books_with_details(db, current_user_id=current_user_id, search=search)
    logger.info("Returning %d books", len(books))
    return books


@router.post("", response_model=BookOut, status_code=status.HTTP_201_CREATED)
def create_book(
    body: CreateBookRequest,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
    cover_lookup: CoverLookup | None = Depends(get_cover_lookup),
):
    try:
        book = BookCRUD.create(
            db,
            user_id=current_user_id,
            title=body.title,
            author=body.author,
            cover_image=body.cover_image,
            series=body.series,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if body.tags is not None:
        BookCRUD.replace_tags(db, book.id, body.tags)
    if body.genres is not None:
        BookCRUD.replace_genres(db, book.id, body.genres)
    db.commit()
    db.refresh(book)
    logger.info("Created book %s for user %s", book.id, current_user_id)

    if cover_lookup is not None:
        cover_lookup(db, book)
    return serialize_book(book)


@router.get("/{book_id}", response_model=BookWithDetailsOut)
def get_book(
    book_id: BookId,
    db: Session = Depends(get_db),
    current_user_id: int | None = Depends(get_optional_user_id),
):
    return _book_details_or_404(db, book_id, current_user_id)


@router.put("/{book_id}", response_model=BookWithDetailsOut)
def update_book(
    body: UpdateBookRequest,
    book_id: BookId,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    changes = body.model_dump(exclude_unset=True)
    tag_ids = changes.pop("tags", None)
    genre_ids = changes.pop("genres", None)
    has_rating = "rating" in changes
    rating = changes.pop("rating", None)

    try:
        BookCRUD.update(db, book_id, **changes)
        if has_rating:
            if rating is None:
                RatingCRUD.delete(db, current_user_id, book_id)
            else:
                RatingCRUD.upsert(db, current_user_id, book_id, rating)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if tag_ids is not None:
        BookCRUD.replace_tags(db, book_id, tag_ids)
    if genre_ids is not None:
        BookCRUD.replace_genres(db, book_id, genre_ids)
    db.commit()
    logger.info("Updated book %s", book_id)
    return _book_details_or_404(db, book_id, current_user_id)


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(get_current_user_id)],
)
def delete_book(book_id: BookId, db: Session = Depends(get_db)):
    try:
        BookCRUD.delete(db, book_id)
    except NotFoundError:
        db.rollback()
        logger.warning("Book %s not found for deletion", book_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    db.commit()
    logger.info("Deleted book %s", book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Current user's rating and reading status
# ---------------------------------------------------------------------------


@router.get("/{book_id}/ratings")
def get_my_rating(
    book_id: BookId,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    _require_book(db, book_id)
    rating = RatingCRUD.get(db, current_user_id, book_id)
    return {"rating": rating.rating if rating else None}


@router.post("/{book_id}/ratings", response_model=RatingOut)
def upsert_my_rating(
    body: RatingRequest,
    book_id: BookId,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    try:
        rating = RatingCRUD.upsert(db, current_user_id, book_id, body.rating)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    db.commit()
    return serialize_rating(rating)


@router.delete("/{book_id}/ratings", status_code=status.HTTP_204_NO_CONTENT)
def delete_my_rating(
    book_id: BookId,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    if not RatingCRUD.delete(db, current_user_id, book_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rating not found")
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{book_id}/status")
def get_my_status(
    book_id: BookId,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    _require_book(db, book_id)
    reading_status = ReadingStatusCRUD.get(db, current_user_id, book_id)
    return {"status_id": reading_status.status_id if reading_status else None}


@router.post("/{book_id}/status", response_model=StatusOut)
def upsert_my_status(
    body: StatusRequest,
    book_id: BookId,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    try:
        reading_status = ReadingStatusCRUD.upsert(db, current_user_id, book_id, body.status_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    db.commit()
    status_name = ReadingStatusCRUD.get_status_name(db, reading_status.status_id)
    return serialize_reading_status(reading_status, status_name)


@router.delete("/{book_id}/status", status_code=status.HTTP_204_NO_CONTENT)
def delete_my_status(
    book_id: BookId,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    if not ReadingStatusCRUD.delete(db, current_user_id, book_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Status not found")
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
