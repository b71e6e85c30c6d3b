"""Best-effort cover image lookup for newly created books.

The lookup service is queried by title and author. Any failure (network,
HTTP status, malformed payload, or the follow-up database write) is logged
and swallowed so book creation never fails because of it.
"""

from __future__ import annotations

import logging

import requests
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from homelib.db.crud import BookCRUD
from homelib.db.models import Book

logger = logging.getLogger(__name__)


def fetch_cover_url(title: str, author: str, api_url: str, timeout_seconds: float) -> str | None:
    try:
        response = requests.get(
            api_url,
            params={"book_title": title, "author_name": author},
            timeout=timeout_seconds,
        )
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("Cover lookup failed for %r by %r: %s", title, author, e)
        return None

    url = payload.get("url") if isinstance(payload, dict) else None
    if not isinstance(url, str) or not url.strip():
        logger.warning("Cover lookup returned no url for %r by %r", title, author)
        return None
    return url.strip()


class CoverLookup:
    """Post-create hook that fills in ``cover_image`` when the client sent none."""

    def __init__(self, api_url: str, timeout_seconds: float) -> None:
        self.api_url = api_url
        self.timeout_seconds = timeout_seconds

    def __call__(self, db: Session, book: Book) -> None:
        if book.cover_image:
            return
        url = fetch_cover_url(book.title, book.author, self.api_url, self.timeout_seconds)
        if url is None:
            return
        try:
            BookCRUD.set_cover_image(db, book.id, url)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.warning("Could not store cover image for book %s", book.id, exc_info=True)
            return
        db.refresh(book)
        logger.info("Stored cover image for book %s", book.id)
