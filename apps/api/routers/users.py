from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.orm import Session

from homelib.db.crud import NotFoundError, UserCRUD

from ..core.deps import MAX_ID, get_current_user_id, get_db
from ..core.serialize import serialize_user
from ..schemas.user import CreateUserRequest, SelectUserRequest, UpdateUserRequest, UserOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db)):
    return [serialize_user(user) for user in UserCRUD.get_all(db)]


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(body: CreateUserRequest, db: Session = Depends(get_db)):
    try:
        user = UserCRUD.create(db, body.name, body.color, avatar_image=body.avatar_image)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    db.commit()
    logger.info("Created user %s", user.id)
    return serialize_user(user)


@router.post("/select", response_model=UserOut)
def select_user(body: SelectUserRequest, db: Session = Depends(get_db)):
    try:
        user = UserCRUD.select(db, body.id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    db.commit()
    logger.info("Selected user %s", user.id)
    return serialize_user(user)


@router.put(
    "/{user_id}",
    response_model=UserOut,
    dependencies=[Depends(get_current_user_id)],
)
def update_user(
    body: UpdateUserRequest,
    user_id: Annotated[int, Path(gt=0, le=MAX_ID)],
    db: Session = Depends(get_db),
):
    try:
        user = UserCRUD.update(db, user_id, **body.model_dump(exclude_unset=True))
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    db.commit()
    return serialize_user(user)
