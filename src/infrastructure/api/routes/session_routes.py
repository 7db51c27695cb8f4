from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status

from src.application.dtos.common_dto import SuccessResponse
from src.application.dtos.session_dto import (
    AdjustmentsRequest,
    SessionResponse,
    TransformListResponse,
    TransformRequest,
)
from src.application.use_cases.export_artifact import ExportArtifactUseCase
from src.application.use_cases.load_artifact import LoadArtifactUseCase, PayloadTooLarge
from src.domain.errors import EditorError
from src.domain.services.processing_service import ProcessingService
from src.infrastructure.api.dependencies import (
    get_app_settings,
    get_codec,
    get_processing_service,
    get_registry,
)
from src.infrastructure.api.errors import http_error
from src.infrastructure.api.presenters import session_response
from src.infrastructure.codec.pillow_codec import PillowRasterCodec
from src.infrastructure.config import Settings
from src.infrastructure.sessions.session_registry import SessionRegistry

router = APIRouter(
    prefix="/sessions",
    tags=["Photo Sessions"],
    responses={
        404: {"description": "Not Found - Session does not exist"},
        409: {"description": "Conflict - Another operation is still running"},
        422: {"description": "Validation Error - Invalid request format"},
    },
)


async def _load_upload(file: UploadFile, codec: PillowRasterCodec, settings: Settings):
    data = await file.read()
    uc = LoadArtifactUseCase(codec=codec, max_bytes=settings.max_upload_bytes)
    try:
        return uc.execute(data, file.filename)
    except PayloadTooLarge as e:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(e)) from e
    except EditorError as e:
        raise http_error(e) from e


@router.post(
    "",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open Photo Session",
    description="""
    Upload an image and open an editing session on it.

    **Supported formats**: JPEG, PNG, GIF, BMP, TIFF, WEBP

    The uploaded image becomes the first and only version of the session's
    edit history. Sessions live in memory and are lost on restart.
    """,
    response_description="Snapshot of the new session",
    responses={
        400: {"description": "Bad Request - Invalid image file or unsupported format"},
        413: {"description": "Payload Too Large - File size exceeds limit"},
    },
)
async def open_session(
    file: UploadFile = File(..., description="Image file to edit"),
    registry: SessionRegistry = Depends(get_registry),
    codec: PillowRasterCodec = Depends(get_codec),
    settings: Settings = Depends(get_app_settings),
):
    """Open a photo session seeded with the uploaded image."""
    artifact = await _load_upload(file, codec, settings)
    session = registry.create_photo(artifact)
    return session_response(session, codec)


@router.get(
    "/{session_id}",
    response_model=SessionResponse,
    summary="Get Session",
    description="Retrieve the current version, history position, crop mode and slider state of a session.",
)
async def get_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
    codec: PillowRasterCodec = Depends(get_codec),
):
    """Get a photo session snapshot."""
    try:
        session = registry.get_photo(session_id)
    except EditorError as e:
        raise http_error(e) from e
    return session_response(session, codec)


@router.post(
    "/{session_id}/artifact",
    response_model=SessionResponse,
    summary="Replace Artifact",
    description="""
    Load a new image into an existing session.

    **Note**: Every prior version is discarded; the new image becomes the only
    entry of the history. Cropping mode and slider state are reset.
    """,
    responses={
        400: {"description": "Bad Request - Invalid image file or unsupported format"},
        413: {"description": "Payload Too Large - File size exceeds limit"},
    },
)
async def replace_artifact(
    session_id: str,
    file: UploadFile = File(..., description="Image file to edit"),
    registry: SessionRegistry = Depends(get_registry),
    codec: PillowRasterCodec = Depends(get_codec),
    settings: Settings = Depends(get_app_settings),
):
    """Reset the session's history with a new image."""
    try:
        session = registry.get_photo(session_id)
    except EditorError as e:
        raise http_error(e) from e
    artifact = await _load_upload(file, codec, settings)
    try:
        session.load(artifact)
    except EditorError as e:
        raise http_error(e) from e
    return session_response(session, codec)


@router.get(
    "/{session_id}/current",
    summary="Download Current Version",
    description="""
    Download the version currently shown, in its own MIME type.

    **Resolutions**: `original`, `1080p`, `720p`, `480p`

    Presets other than `original` resample to that height and keep the aspect
    ratio. Slider adjustments that have not been applied yet are drawn into
    the export.
    """,
    response_description="Binary image file data",
    responses={
        200: {"content": {"image/*": {}}, "description": "Image file content"},
        400: {"description": "Bad Request - Source image could not be decoded"},
    },
)
async def download_current(
    session_id: str,
    resolution: str = Query("original", description="Export preset", pattern="^(original|1080p|720p|480p)$"),
    registry: SessionRegistry = Depends(get_registry),
    codec: PillowRasterCodec = Depends(get_codec),
    processing: ProcessingService = Depends(get_processing_service),
):
    """Download the current version."""
    try:
        session = registry.get_photo(session_id)
        artifact = session.current
        content = ExportArtifactUseCase(codec, processing).execute(artifact, resolution, session.adjustments)
    except EditorError as e:
        raise http_error(e) from e
    filename = f"edited-image-{resolution}.{artifact.extension}"
    return Response(
        content=content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete(
    "/{session_id}",
    response_model=SuccessResponse,
    summary="Close Session",
    description="Drop a session and every version it holds.",
)
async def close_session(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    """Close a photo session."""
    try:
        registry.delete_photo(session_id)
    except EditorError as e:
        raise http_error(e) from e
    return SuccessResponse(ok=True, message="Session closed")


@router.post(
    "/{session_id}/adjustments",
    response_model=SessionResponse,
    summary="Apply Adjustments",
    description="""
    Update the brightness, contrast, saturation, blur and filter sliders.

    With `apply` set (default) the adjustments are baked into a new version of
    the history and the sliders reset; otherwise only the slider state is kept.

    **Ranges**: brightness, contrast and saturation -100..100; blur 0..20
    **Filters**: `none`, `grayscale`, `sepia`, `invert`
    """,
    responses={400: {"description": "Bad Request - No adjustment to apply or undecodable source"}},
)
async def apply_adjustments(
    session_id: str,
    request: AdjustmentsRequest,
    registry: SessionRegistry = Depends(get_registry),
    codec: PillowRasterCodec = Depends(get_codec),
):
    """Store or bake photo adjustments."""
    try:
        session = registry.get_photo(session_id)
        state = request.to_entity()
        if request.apply:
            session.apply_adjustments(state)
        else:
            session.set_adjustments(state)
    except EditorError as e:
        raise http_error(e) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return session_response(session, codec)


@router.get(
    "/{session_id}/transforms",
    response_model=TransformListResponse,
    summary="List Transforms",
    description="List the AI transforms available to a photo session.",
)
async def list_transforms(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    """List transform names."""
    try:
        session = registry.get_photo(session_id)
    except EditorError as e:
        raise http_error(e) from e
    return TransformListResponse(transforms=list(session.backend.transform_names))


@router.post(
    "/{session_id}/transforms/{name}",
    response_model=SessionResponse,
    summary="Apply Transform",
    description="""
    Run an AI transform on the current version and append the result to the history.

    **Supported Transforms:**
    - `remove_background` - params: `{"tolerance": 0.1}`
    - `replace_sky` - params: `{"sky": "Sunset"}`
    - `add_object` - params: `{"prompt": "a red balloon"}`
    - `apply_style` - params: `{"style": "Vintage"}`
    - `magic_erase` - params: `{}`
    - `upscale` - params: `{"scale": 2}` (2 or 4)
    - `pixelate` - params: `{"block": 8}` (1..64)

    Any active crop is cancelled. While the transform runs, further
    transforms, commits and history navigation are rejected with 409.
    A failing transform leaves the history unchanged (502).
    """,
    responses={
        400: {"description": "Bad Request - Unknown transform or parameter out of range"},
        502: {"description": "Bad Gateway - The transform failed"},
    },
)
async def apply_transform(
    session_id: str,
    name: str,
    request: TransformRequest | None = None,
    registry: SessionRegistry = Depends(get_registry),
    codec: PillowRasterCodec = Depends(get_codec),
):
    """Apply a mock AI transform."""
    try:
        session = registry.get_photo(session_id)
    except EditorError as e:
        raise http_error(e) from e
    params = request.params if request else {}
    try:
        session.backend.validate_params(name, params)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    try:
        await session.apply_transform(name, params)
    except EditorError as e:
        raise http_error(e) from e
    return session_response(session, codec)
