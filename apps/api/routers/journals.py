from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.orm import Session

from homelib.db.crud import BookCRUD, JournalCRUD, NotFoundError

from ..core.deps import MAX_ID, get_current_user_id, get_db
from ..core.serialize import serialize_journal
from ..schemas.journal import CreateJournalRequest, JournalOut, UpdateJournalRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["journals"])

PositiveId = Annotated[int, Path(gt=0, le=MAX_ID)]


@router.get("/journals", response_model=list[JournalOut])
def list_journals(db: Session = Depends(get_db)):
    return [serialize_journal(entry) for entry in JournalCRUD.get_all(db)]


@router.get("/journals/{journal_id}", response_model=JournalOut)
def get_journal(journal_id: PositiveId, db: Session = Depends(get_db)):
    entry = JournalCRUD.get_by_id(db, journal_id)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Journal entry not found")
    return serialize_journal(entry)


@router.get("/books/{book_id}/journals", response_model=list[JournalOut])
def list_book_journals(book_id: PositiveId, db: Session = Depends(get_db)):
    if not BookCRUD.exists(db, book_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    return [serialize_journal(entry) for entry in JournalCRUD.get_by_book(db, book_id)]


@router.post(
    "/books/{book_id}/journals",
    response_model=JournalOut,
    status_code=status.HTTP_201_CREATED,
)
def create_journal(
    body: CreateJournalRequest,
    book_id: PositiveId,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    try:
        entry = JournalCRUD.create(db, book_id, current_user_id, body.title, body.content)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    db.commit()
    logger.info("Created journal entry %s for book %s", entry.id, book_id)
    return serialize_journal(entry)


@router.put(
    "/books/{book_id}/journals/{journal_id}",
    response_model=JournalOut,
    dependencies=[Depends(get_current_user_id)],
)
def update_journal(
    body: UpdateJournalRequest,
    book_id: PositiveId,
    journal_id: PositiveId,
    db: Session = Depends(get_db),
):
    try:
        entry = JournalCRUD.update(db, journal_id, book_id=book_id, title=body.title, content=body.content)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Journal entry not found")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    db.commit()
    logger.info("Updated journal entry %s", journal_id)
    return serialize_journal(entry)
