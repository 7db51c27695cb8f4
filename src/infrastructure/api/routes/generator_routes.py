from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from src.application.dtos.common_dto import SuccessResponse
from src.application.dtos.generator_dto import (
    GenerateImagesRequest,
    GeneratorStateResponse,
    JobResponse,
    OutpaintRequest,
    SubmitJobRequest,
)
from src.application.dtos.history_dto import HistoryState
from src.application.jobs.poller import PollHandle
from src.application.sessions.generator_session import GeneratorSession
from src.domain.errors import EditorError
from src.infrastructure.api.dependencies import get_codec, get_registry
from src.infrastructure.api.errors import http_error
from src.infrastructure.api.presenters import artifact_metadata
from src.infrastructure.codec.pillow_codec import PillowRasterCodec
from src.infrastructure.sessions.session_registry import SessionRegistry

router = APIRouter(
    prefix="/generator",
    tags=["Image Generator"],
    responses={
        404: {"description": "Not Found - Session or job does not exist"},
        409: {"description": "Conflict - A generation is still running"},
        422: {"description": "Validation Error - Invalid request format"},
    },
)


def _job_response(handle: PollHandle) -> JobResponse:
    return JobResponse(
        job_id=handle.job_id,
        active=handle.is_active,
        cancelled=handle.cancelled,
        attempts=handle.attempts,
        error=str(handle.error) if handle.error else None,
    )


def _state(session: GeneratorSession, codec: PillowRasterCodec) -> GeneratorStateResponse:
    return GeneratorStateResponse(
        id=session.id,
        images=[artifact_metadata(a, codec) for a in session.current],
        history=HistoryState.from_history(session.history),
        prompts=list(session.prompts),
        jobs=[_job_response(h) for h in session.jobs.values()],
        pending=session.pending,
    )


def _session(registry: SessionRegistry, session_id: str) -> GeneratorSession:
    try:
        return registry.get_generator(session_id)
    except EditorError as e:
        raise http_error(e) from e


@router.post(
    "",
    response_model=GeneratorStateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open Generator Session",
    description="Open an image generator session with an empty history.",
)
async def open_generator(
    registry: SessionRegistry = Depends(get_registry),
    codec: PillowRasterCodec = Depends(get_codec),
):
    """Open a generator session."""
    return _state(registry.create_generator(), codec)


@router.get(
    "/{session_id}",
    response_model=GeneratorStateResponse,
    summary="Get Generator Session",
    description="Current image set, history position, recent prompts and job states.",
)
async def get_generator(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
    codec: PillowRasterCodec = Depends(get_codec),
):
    """Get a generator session snapshot."""
    return _state(_session(registry, session_id), codec)


@router.delete(
    "/{session_id}",
    response_model=SuccessResponse,
    summary="Close Generator Session",
    description="Drop a generator session. Running jobs are cancelled and their results discarded.",
)
async def close_generator(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    """Close a generator session."""
    try:
        registry.delete_generator(session_id)
    except EditorError as e:
        raise http_error(e) from e
    return SuccessResponse(ok=True, message="Session closed")


@router.get(
    "/{session_id}/images/{index}",
    summary="Download Generated Image",
    description="Download one image of the current set by position.",
    responses={200: {"content": {"image/*": {}}, "description": "Image file content"}},
)
async def download_image(session_id: str, index: int, registry: SessionRegistry = Depends(get_registry)):
    """Download a generated image."""
    images = _session(registry, session_id).current
    if not 0 <= index < len(images):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No image at index {index}")
    return Response(content=images[index].payload, media_type=images[index].media_type)


@router.post(
    "/{session_id}/generate",
    response_model=GeneratorStateResponse,
    summary="Generate Images",
    description="""
    Generate a set of images from a prompt and push the set as a new history entry.

    **Aspect ratios**: `1:1`, `16:9`, `9:16`
    **Count**: 1-4 images per set
    """,
    responses={502: {"description": "Bad Gateway - Generation failed"}},
)
async def generate(
    session_id: str,
    request: GenerateImagesRequest,
    registry: SessionRegistry = Depends(get_registry),
    codec: PillowRasterCodec = Depends(get_codec),
):
    """Generate an image set."""
    session = _session(registry, session_id)
    try:
        await session.generate(request.prompt, request.count, request.aspect_ratio)
    except EditorError as e:
        raise http_error(e) from e
    return _state(session, codec)


@router.post(
    "/{session_id}/outpaint",
    response_model=GeneratorStateResponse,
    summary="Outpaint Image",
    description="""
    Extend one image of the current set towards a side. The set with the
    extended image replacing the original is pushed as a new history entry.
    """,
    responses={
        400: {"description": "Bad Request - No image at that index"},
        502: {"description": "Bad Gateway - Outpainting failed"},
    },
)
async def outpaint(
    session_id: str,
    request: OutpaintRequest,
    registry: SessionRegistry = Depends(get_registry),
    codec: PillowRasterCodec = Depends(get_codec),
):
    """Outpaint one image."""
    session = _session(registry, session_id)
    try:
        await session.outpaint(request.index, request.direction)
    except EditorError as e:
        raise http_error(e) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return _state(session, codec)


@router.post(
    "/{session_id}/undo",
    response_model=GeneratorStateResponse,
    summary="Undo Generation",
    description="Step back to the previous image set. A no-op at the oldest set.",
)
async def undo(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
    codec: PillowRasterCodec = Depends(get_codec),
):
    """Undo the last generation."""
    session = _session(registry, session_id)
    try:
        session.undo()
    except EditorError as e:
        raise http_error(e) from e
    return _state(session, codec)


@router.post(
    "/{session_id}/redo",
    response_model=GeneratorStateResponse,
    summary="Redo Generation",
    description="Step forward to the next image set. A no-op at the newest set.",
)
async def redo(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
    codec: PillowRasterCodec = Depends(get_codec),
):
    """Redo the next generation."""
    session = _session(registry, session_id)
    try:
        session.redo()
    except EditorError as e:
        raise http_error(e) from e
    return _state(session, codec)


@router.post(
    "/{session_id}/jobs",
    response_model=JobResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Submit Generation Job",
    description="""
    Submit a long-running generation job. The server polls the job in the
    background; when it finishes, its single image is pushed as a new history
    entry. Poll `GET /generator/{session_id}` for job state.
    """,
)
async def submit_job(
    session_id: str,
    request: SubmitJobRequest,
    registry: SessionRegistry = Depends(get_registry),
):
    """Submit a job."""
    session = _session(registry, session_id)
    handle = session.start_job(request.prompt, request.aspect_ratio)
    return _job_response(handle)


@router.delete(
    "/{session_id}/jobs/{job_id}",
    response_model=JobResponse,
    summary="Cancel Generation Job",
    description="""
    Stop polling a job. A result that arrives after cancellation is discarded
    and never reaches the history.
    """,
)
async def cancel_job(session_id: str, job_id: str, registry: SessionRegistry = Depends(get_registry)):
    """Cancel a job."""
    session = _session(registry, session_id)
    try:
        session.cancel_job(job_id)
    except EditorError as e:
        raise http_error(e) from e
    return _job_response(session.jobs[job_id])
