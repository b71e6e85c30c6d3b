"""Application-wide exception handlers."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

# Malformed ids, headers and JSON syntax are client errors in the request
# envelope; a well-formed body with wrong fields stays a 422.
_BAD_REQUEST_LOCATIONS = {"path", "header", "query"}


def _is_bad_request(errors: list[dict]) -> bool:
    for error in errors:
        loc = error.get("loc") or ()
        if error.get("type") == "json_invalid":
            return True
        if loc and loc[0] in _BAD_REQUEST_LOCATIONS:
            return True
    return False


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    status_code = status.HTTP_400_BAD_REQUEST if _is_bad_request(errors) else 422
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, errors)
    return JSONResponse(status_code=status_code, content={"detail": jsonable_encoder(errors)})


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Answer with a generic 500.

    The request's pending transaction is rolled back by ``get_db`` when the
    exception unwinds its ``with`` block and the session closes.
    """
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
