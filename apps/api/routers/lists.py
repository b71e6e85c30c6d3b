from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Response, status
from sqlalchemy.orm import Session

from homelib.db.crud import BookListCRUD, NotFoundError
from homelib.db.models import BookList

from ..core.deps import MAX_ID, get_current_user_id, get_db
from ..core.serialize import serialize_list
from ..schemas.list import CreateListRequest, ListOut, UpdateListRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/lists", tags=["lists"])

ListId = Annotated[int, Path(gt=0, le=MAX_ID)]


def _list_out(db: Session, book_list: BookList, current_user_id: int) -> dict:
    return serialize_list(book_list, BookListCRUD.get_books(db, book_list.id, current_user_id))


@router.get("", response_model=list[ListOut])
def list_lists(
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    return [
        _list_out(db, book_list, current_user_id)
        for book_list in BookListCRUD.get_all_for_user(db, current_user_id)
    ]


@router.post("", response_model=ListOut, status_code=status.HTTP_201_CREATED)
def create_list(
    body: CreateListRequest,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    try:
        book_list = BookListCRUD.create(
            db,
            user_id=current_user_id,
            name=body.name,
            type_id=body.type_id,
            book_ids=body.books,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    db.commit()
    logger.info("Created list %s with %d books", book_list.id, len(body.books))
    return _list_out(db, book_list, current_user_id)


@router.get("/{list_id}", response_model=ListOut)
def get_list(
    list_id: ListId,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    book_list = BookListCRUD.get_for_user(db, list_id, current_user_id)
    if book_list is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="List not found")
    return _list_out(db, book_list, current_user_id)


@router.put("/{list_id}", response_model=ListOut)
def update_list(
    body: UpdateListRequest,
    list_id: ListId,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    changes = body.model_dump(exclude_unset=True)
    if "books" in changes:
        changes["book_ids"] = changes.pop("books")
    if changes.get("type_id", 0) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="type_id is required")
    try:
        book_list = BookListCRUD.update(db, list_id, current_user_id, **changes)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="List not found")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    db.commit()
    return _list_out(db, book_list, current_user_id)


@router.delete("/{list_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_list(
    list_id: ListId,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    try:
        BookListCRUD.delete(db, list_id, current_user_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="List not found")
    db.commit()
    logger.info("Deleted list %s", list_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
