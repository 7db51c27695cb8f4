from __future__ import annotations

import logging

from fastapi import HTTPException, status

from src.domain.errors import (
    CroppingInactive,
    EditorError,
    EmptyHistoryError,
    EmptyRegionError,
    HistoryAlreadySeeded,
    IllegalDragStart,
    JobNotFound,
    OperationPending,
    SessionNotFound,
    SourceDecodeError,
    SourceRegionEmptyError,
    TransformFailed,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[EditorError], int] = {
    SessionNotFound: status.HTTP_404_NOT_FOUND,
    JobNotFound: status.HTTP_404_NOT_FOUND,
    IllegalDragStart: status.HTTP_409_CONFLICT,
    OperationPending: status.HTTP_409_CONFLICT,
    CroppingInactive: status.HTTP_409_CONFLICT,
    EmptyHistoryError: status.HTTP_409_CONFLICT,
    HistoryAlreadySeeded: status.HTTP_409_CONFLICT,
    EmptyRegionError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    SourceRegionEmptyError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    SourceDecodeError: status.HTTP_400_BAD_REQUEST,
    TransformFailed: status.HTTP_502_BAD_GATEWAY,
}


def http_error(exc: EditorError) -> HTTPException:
    """Translate a domain error into the HTTP error the routes raise."""
    code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_400_BAD_REQUEST)
    if code != status.HTTP_404_NOT_FOUND:
        logger.warning("Request rejected with %d: %s", code, exc)
    return HTTPException(status_code=code, detail=str(exc))
