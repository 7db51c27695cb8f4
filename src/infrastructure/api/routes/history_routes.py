from __future__ import annotations

from fastapi import APIRouter, Depends

from src.application.dtos.history_dto import HistoryResponse, HistoryState, HistoryStepResponse
from src.domain.errors import EditorError
from src.infrastructure.api.dependencies import get_codec, get_registry
from src.infrastructure.api.errors import http_error
from src.infrastructure.api.presenters import artifact_metadata
from src.infrastructure.codec.pillow_codec import PillowRasterCodec
from src.infrastructure.sessions.session_registry import SessionRegistry

router = APIRouter(
    prefix="/sessions/{session_id}/history",
    tags=["Edit History"],
    responses={
        404: {"description": "Not Found - Session does not exist"},
        409: {"description": "Conflict - Another operation is still running"},
    },
)


@router.get(
    "",
    response_model=HistoryResponse,
    summary="Get Edit History",
    description="""
    Retrieve the full timeline of versions of a photo session.

    **Returns:**
    - Every version, oldest first, with its annotation
    - The cursor index of the version currently shown
    - Whether undo and redo are possible

    Versions after the cursor are the redo branch; they are discarded by the
    next edit.
    """,
    response_description="Timeline of versions and cursor position",
)
async def get_history(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
    codec: PillowRasterCodec = Depends(get_codec),
):
    """Get the edit history of a session."""
    try:
        history = registry.get_photo(session_id).history
    except EditorError as e:
        raise http_error(e) from e
    return HistoryResponse(
        state=HistoryState.from_history(history),
        versions=[artifact_metadata(v, codec) for v in history.versions],
    )


@router.post(
    "/undo",
    response_model=HistoryStepResponse,
    summary="Undo",
    description="""
    Step back to the previous version.

    At the oldest version this is a no-op reported with `changed: false`.
    Cropping mode and slider state are reset when the version changes.
    """,
)
async def undo(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
    codec: PillowRasterCodec = Depends(get_codec),
):
    """Undo the last edit."""
    try:
        session = registry.get_photo(session_id)
        version = session.undo()
    except EditorError as e:
        raise http_error(e) from e
    return HistoryStepResponse(
        changed=version is not None,
        current=artifact_metadata(session.current, codec),
        state=HistoryState.from_history(session.history),
    )


@router.post(
    "/redo",
    response_model=HistoryStepResponse,
    summary="Redo",
    description="""
    Step forward to the next version.

    At the newest version this is a no-op reported with `changed: false`.
    """,
)
async def redo(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
    codec: PillowRasterCodec = Depends(get_codec),
):
    """Redo the next edit."""
    try:
        session = registry.get_photo(session_id)
        version = session.redo()
    except EditorError as e:
        raise http_error(e) from e
    return HistoryStepResponse(
        changed=version is not None,
        current=artifact_metadata(session.current, codec),
        state=HistoryState.from_history(session.history),
    )
