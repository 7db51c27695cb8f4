from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from src.application.dtos.crop_dto import (
    AspectLockRequest,
    CropStateResponse,
    PointerDownRequest,
    PointerMoveRequest,
    StartCropRequest,
)
from src.application.dtos.session_dto import SessionResponse
from src.domain.entities.region import ASPECT_PRESETS, AspectLock
from src.domain.errors import EditorError
from src.infrastructure.api.dependencies import get_codec, get_registry
from src.infrastructure.api.errors import http_error
from src.infrastructure.api.presenters import crop_state, session_response
from src.infrastructure.codec.pillow_codec import PillowRasterCodec
from src.infrastructure.sessions.session_registry import SessionRegistry

router = APIRouter(
    prefix="/sessions/{session_id}/crop",
    tags=["Crop Tool"],
    responses={
        404: {"description": "Not Found - Session does not exist"},
        409: {"description": "Conflict - Cropping inactive, drag already active or operation running"},
        422: {"description": "Validation Error - Invalid request format or empty region"},
    },
)


def _parse_lock(ratio: str | None) -> AspectLock | None:
    if not ratio or ratio == "freeform":
        return None
    return ASPECT_PRESETS.get(ratio) or AspectLock.parse(ratio)


@router.get(
    "",
    response_model=CropStateResponse,
    summary="Get Crop State",
    description="Current crop region, aspect lock and drag state of a session.",
)
async def get_crop(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    """Get the crop tool state."""
    try:
        session = registry.get_photo(session_id)
    except EditorError as e:
        raise http_error(e) from e
    return crop_state(session)


@router.post(
    "/start",
    response_model=CropStateResponse,
    summary="Enter Cropping Mode",
    description="""
    Enter cropping mode with a centered default region covering 80% of the
    rendered container on each axis.

    **Note**: If `bounds` is missing or has zero size (the image is not laid
    out yet) this is a no-op and `cropping` stays false.
    """,
)
async def start_crop(
    session_id: str,
    request: StartCropRequest,
    registry: SessionRegistry = Depends(get_registry),
):
    """Start cropping."""
    try:
        session = registry.get_photo(session_id)
        session.start_crop(request.bounds.to_entity() if request.bounds else None)
    except EditorError as e:
        raise http_error(e) from e
    return crop_state(session)


@router.post(
    "/aspect",
    response_model=CropStateResponse,
    summary="Set Aspect Lock",
    description="""
    Lock the crop region to a width:height ratio, or unlock it.

    **Presets**: `freeform` (or null), `1:1`, `16:9`, `9:16`; any other `W:H`
    with positive terms is accepted.

    Locking keeps the region's center and width, derives the height, and
    scales the result down if it no longer fits. Unlocking restores the
    default region.

    **Note**: Both terms must be finite and positive, and a region of minimum
    size at the ratio must fit the rendered container.
    """,
    responses={400: {"description": "Bad Request - Malformed ratio or ratio too extreme for the container"}},
)
async def set_aspect(
    session_id: str,
    request: AspectLockRequest,
    registry: SessionRegistry = Depends(get_registry),
):
    """Set or clear the aspect lock."""
    try:
        session = registry.get_photo(session_id)
        session.set_aspect_lock(_parse_lock(request.ratio))
    except EditorError as e:
        raise http_error(e) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return crop_state(session)


@router.post(
    "/pointer/down",
    response_model=CropStateResponse,
    summary="Grab Handle",
    description="""
    Start a drag session on one of the region's handles.

    **Handles**: `move`, `top`, `bottom`, `left`, `right`, `top-left`,
    `top-right`, `bottom-left`, `bottom-right`

    Only one drag may be active; a second pointer-down is rejected with 409
    and leaves the active drag untouched.
    """,
)
async def pointer_down(
    session_id: str,
    request: PointerDownRequest,
    registry: SessionRegistry = Depends(get_registry),
):
    """Begin a drag."""
    container = request.container.to_entity() if request.container else None
    try:
        session = registry.get_photo(session_id)
        session.pointer_down(request.handle, request.event.to_entity(), container)
    except EditorError as e:
        raise http_error(e) from e
    return crop_state(session)


@router.post(
    "/pointer/move",
    response_model=CropStateResponse,
    summary="Move Pointer",
    description="""
    Feed a pointer move to the active drag. The region is recomputed from the
    drag's anchor plus the pointer delta, then aspect-locked and clamped to the
    container. Without an active drag the move is ignored.
    """,
)
async def pointer_move(
    session_id: str,
    request: PointerMoveRequest,
    registry: SessionRegistry = Depends(get_registry),
):
    """Move the pointer."""
    container = request.container.to_entity() if request.container else None
    try:
        session = registry.get_photo(session_id)
        session.pointer_move(request.event.to_entity(), container)
    except EditorError as e:
        raise http_error(e) from e
    return crop_state(session)


@router.post(
    "/pointer/up",
    response_model=CropStateResponse,
    summary="Release Pointer",
    description="End the active drag. The region keeps its last value.",
)
async def pointer_up(
    session_id: str,
    request: PointerMoveRequest | None = None,
    registry: SessionRegistry = Depends(get_registry),
):
    """Release the pointer."""
    try:
        session = registry.get_photo(session_id)
        session.pointer_up(request.event.to_entity() if request else None)
    except EditorError as e:
        raise http_error(e) from e
    return crop_state(session)


@router.post(
    "/pointer/cancel",
    response_model=CropStateResponse,
    summary="Cancel Pointer",
    description="Abort the active drag (e.g. touch cancel). The region keeps its last value.",
)
async def pointer_cancel(
    session_id: str,
    request: PointerMoveRequest | None = None,
    registry: SessionRegistry = Depends(get_registry),
):
    """Cancel the pointer."""
    try:
        session = registry.get_photo(session_id)
        session.pointer_cancel(request.event.to_entity() if request else None)
    except EditorError as e:
        raise http_error(e) from e
    return crop_state(session)


@router.post(
    "/cancel",
    response_model=CropStateResponse,
    summary="Leave Cropping Mode",
    description="Discard the crop region without touching the history.",
)
async def cancel_crop(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    """Cancel cropping."""
    try:
        session = registry.get_photo(session_id)
        session.cancel_crop()
    except EditorError as e:
        raise http_error(e) from e
    return crop_state(session)


@router.post(
    "/commit",
    response_model=SessionResponse,
    summary="Commit Crop",
    description="""
    Extract the selected region from the current version at native resolution
    and append it to the history.

    **How It Works:**
    1. The display-space region is scaled by native size / rendered size
    2. The matching source pixels are copied into a new raster
    3. The raster is encoded in the source's format and pushed as a new version

    An empty region (422) or undecodable source (400) leaves the history and
    cropping mode unchanged.
    """,
    responses={
        400: {"description": "Bad Request - Source image could not be decoded"},
    },
)
async def commit_crop(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
    codec: PillowRasterCodec = Depends(get_codec),
):
    """Commit the crop."""
    try:
        session = registry.get_photo(session_id)
        session.commit_crop()
    except EditorError as e:
        raise http_error(e) from e
    return session_response(session, codec)
