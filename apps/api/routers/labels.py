"""Routers for tags and genres, which share one shape and behaviour."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Response, status
from sqlalchemy.orm import Session

from homelib.db.crud import GenreCRUD, NotFoundError, TagCRUD

from ..core.deps import MAX_ID, get_current_user_id, get_db
from ..core.serialize import serialize_label
from ..schemas.label import CreateLabelRequest, LabelOut, UpdateLabelRequest

logger = logging.getLogger(__name__)

LabelId = Annotated[int, Path(gt=0, le=MAX_ID)]


def build_label_router(prefix: str, crud: type[TagCRUD] | type[GenreCRUD]) -> APIRouter:
    noun = crud.label
    router = APIRouter(prefix=prefix, tags=[prefix.strip("/")])

    @router.get("", response_model=list[LabelOut])
    def list_labels(name: str | None = None, db: Session = Depends(get_db)):
        return [serialize_label(label) for label in crud.get_all(db, name=name)]

    @router.post("", response_model=LabelOut, status_code=status.HTTP_201_CREATED)
    def create_label(
        body: CreateLabelRequest,
        db: Session = Depends(get_db),
        current_user_id: int = Depends(get_current_user_id),
    ):
        try:
            label = crud.create(db, current_user_id, body.name, body.color)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        db.commit()
        logger.info("Created %s %s", noun.lower(), label.id)
        return serialize_label(label)

    @router.get("/{label_id}", response_model=LabelOut)
    def get_label(label_id: LabelId, db: Session = Depends(get_db)):
        label = crud.get_by_id(db, label_id)
        if label is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{noun} not found")
        return serialize_label(label)

    @router.put(
        "/{label_id}",
        response_model=LabelOut,
        dependencies=[Depends(get_current_user_id)],
    )
    def update_label(body: UpdateLabelRequest, label_id: LabelId, db: Session = Depends(get_db)):
        try:
            label = crud.update(db, label_id, **body.model_dump(exclude_unset=True))
        except NotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{noun} not found")
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        db.commit()
        return serialize_label(label)

    @router.delete(
        "/{label_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        dependencies=[Depends(get_current_user_id)],
    )
    def delete_label(label_id: LabelId, db: Session = Depends(get_db)):
        try:
            crud.delete(db, label_id)
        except NotFoundError:
            logger.warning("%s %s not found for deletion", noun, label_id)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{noun} not found")
        db.commit()
        logger.info("Deleted %s %s", noun.lower(), label_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


tags_router = build_label_router("/tags", TagCRUD)
genres_router = build_label_router("/genres", GenreCRUD)
