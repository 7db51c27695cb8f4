from __future__ import annotations

from src.application.dtos.artifact_dto import ArtifactMetadata
from src.application.dtos.crop_dto import CropStateResponse, RectModel
from src.application.dtos.history_dto import HistoryState
from src.application.dtos.session_dto import AdjustmentsModel, SessionResponse
from src.application.sessions.photo_session import PhotoEditorSession
from src.domain.entities.artifact import ArtifactVersion
from src.domain.errors import SourceDecodeError
from src.infrastructure.codec.pillow_codec import PillowRasterCodec


def artifact_metadata(artifact: ArtifactVersion, codec: PillowRasterCodec) -> ArtifactMetadata:
    try:
        info = codec.describe(artifact.payload)
    except SourceDecodeError:
        return ArtifactMetadata.from_entity(artifact)
    return ArtifactMetadata.from_entity(artifact, info.width, info.height)


def session_response(session: PhotoEditorSession, codec: PillowRasterCodec) -> SessionResponse:
    return SessionResponse(
        id=session.id,
        current=artifact_metadata(session.current, codec),
        history=HistoryState.from_history(session.history),
        cropping=session.region_editor.is_cropping,
        pending=session.pending,
        adjustments=AdjustmentsModel.from_entity(session.adjustments),
    )


def crop_state(session: PhotoEditorSession) -> CropStateResponse:
    editor = session.region_editor
    drag = editor.drag.session
    return CropStateResponse(
        cropping=editor.is_cropping,
        region=RectModel.from_entity(editor.region) if editor.region else None,
        aspect=editor.aspect_lock.label if editor.aspect_lock else None,
        dragging=drag is not None,
        handle=drag.handle if drag else None,
    )
