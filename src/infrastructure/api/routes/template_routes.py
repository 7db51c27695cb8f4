from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from src.application.dtos.common_dto import SuccessResponse
from src.application.dtos.generator_dto import GenerateTemplateRequest, TemplateStateResponse
from src.application.dtos.history_dto import HistoryState
from src.application.sessions.generator_session import TemplateSession
from src.domain.errors import EditorError
from src.infrastructure.api.dependencies import get_codec, get_registry
from src.infrastructure.api.errors import http_error
from src.infrastructure.api.presenters import artifact_metadata
from src.infrastructure.codec.pillow_codec import PillowRasterCodec
from src.infrastructure.sessions.session_registry import SessionRegistry

router = APIRouter(
    prefix="/templates",
    tags=["Template Generator"],
    responses={
        404: {"description": "Not Found - Session does not exist"},
        409: {"description": "Conflict - A generation is still running"},
    },
)


def _state(session: TemplateSession, codec: PillowRasterCodec) -> TemplateStateResponse:
    current = session.current
    return TemplateStateResponse(
        id=session.id,
        current=artifact_metadata(current, codec) if current else None,
        history=HistoryState.from_history(session.history),
        pending=session.pending,
    )


def _session(registry: SessionRegistry, session_id: str) -> TemplateSession:
    try:
        return registry.get_template(session_id)
    except EditorError as e:
        raise http_error(e) from e


@router.post(
    "",
    response_model=TemplateStateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open Template Session",
)
async def open_template(
    registry: SessionRegistry = Depends(get_registry),
    codec: PillowRasterCodec = Depends(get_codec),
):
    """Open a template session."""
    return _state(registry.create_template(), codec)


@router.get("/{session_id}", response_model=TemplateStateResponse, summary="Get Template Session")
async def get_template(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
    codec: PillowRasterCodec = Depends(get_codec),
):
    return _state(_session(registry, session_id), codec)


@router.delete(
    "/{session_id}",
    response_model=SuccessResponse,
    summary="Close Template Session",
    description="Drop a template session and every template it holds.",
)
async def close_template(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    """Close a template session."""
    try:
        registry.delete_template(session_id)
    except EditorError as e:
        raise http_error(e) from e
    return SuccessResponse(ok=True, message="Session closed")


@router.get(
    "/{session_id}/current",
    summary="Download Current Template",
    responses={200: {"content": {"image/png": {}}, "description": "Template image"}},
)
async def download_current(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    current = _session(registry, session_id).current
    if current is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No template generated yet")
    return Response(content=current.payload, media_type=current.media_type)


@router.post(
    "/{session_id}/generate",
    response_model=TemplateStateResponse,
    summary="Generate Template",
    description="""
    Generate a template for a prompt and push it as a new history entry.

    **Template types**: `story` (portrait), `banner` (wide), `post` (square)
    """,
    responses={502: {"description": "Bad Gateway - Generation failed"}},
)
async def generate(
    session_id: str,
    request: GenerateTemplateRequest,
    registry: SessionRegistry = Depends(get_registry),
    codec: PillowRasterCodec = Depends(get_codec),
):
    session = _session(registry, session_id)
    try:
        await session.generate(request.prompt, request.template_type)
    except EditorError as e:
        raise http_error(e) from e
    return _state(session, codec)


@router.post("/{session_id}/undo", response_model=TemplateStateResponse, summary="Undo Template")
async def undo(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
    codec: PillowRasterCodec = Depends(get_codec),
):
    session = _session(registry, session_id)
    try:
        session.undo()
    except EditorError as e:
        raise http_error(e) from e
    return _state(session, codec)


@router.post("/{session_id}/redo", response_model=TemplateStateResponse, summary="Redo Template")
async def redo(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
    codec: PillowRasterCodec = Depends(get_codec),
):
    session = _session(registry, session_id)
    try:
        session.redo()
    except EditorError as e:
        raise http_error(e) from e
    return _state(session, codec)
