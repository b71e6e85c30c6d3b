from __future__ import annotations

import logging
import re
from typing import Generator

from fastapi import Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from .covers import CoverLookup

logger = logging.getLogger(__name__)

CURRENT_USER_HEADER = "currentUserId"

# SQLite INTEGER is a signed 64-bit value.
MAX_ID = 2**63 - 1
MIN_ID = -(2**63)

_DECIMAL_ID = re.compile(r"[+-]?[0-9]+")


def get_db(request: Request) -> Generator[Session, None, None]:
    with request.app.state.session_factory() as session:
        yield session


def get_cover_lookup(request: Request) -> CoverLookup | None:
    return request.app.state.cover_lookup


def parse_user_id(raw: str) -> int | None:
    """Return the header value as an int64, or None when it is not a plain decimal in range."""
    if not _DECIMAL_ID.fullmatch(raw):
        return None
    value = int(raw)
    if not MIN_ID <= value <= MAX_ID:
        return None
    return value


def get_current_user_id(
    current_user_id: str | None = Header(default=None, alias=CURRENT_USER_HEADER),
) -> int:
    if current_user_id is None:
        logger.warning("Missing %s header", CURRENT_USER_HEADER)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing {CURRENT_USER_HEADER} header",
        )
    user_id = parse_user_id(current_user_id)
    if user_id is None:
        logger.warning("Invalid %s header: %r", CURRENT_USER_HEADER, current_user_id)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {CURRENT_USER_HEADER} header",
        )
    return user_id


def get_optional_user_id(
    current_user_id: str | None = Header(default=None, alias=CURRENT_USER_HEADER),
) -> int | None:
    """Read-only endpoints personalise output when a valid id is sent and ignore it otherwise."""
    if current_user_id is None:
        return None
    user_id = parse_user_id(current_user_id)
    if user_id is None:
        logger.warning("Ignoring invalid %s header: %r", CURRENT_USER_HEADER, current_user_id)
    return user_id
