from __future__ import annotations

import logging
from typing import Any

from src.application.sessions.base import ExclusiveSession
from src.application.use_cases.apply_adjustments import ApplyAdjustmentsUseCase
from src.application.use_cases.apply_transform import ApplyTransformUseCase
from src.application.use_cases.commit_crop import CommitCropUseCase
from src.domain.entities.adjustments import AdjustmentState
from src.domain.entities.artifact import ArtifactVersion
from src.domain.entities.region import (
    MIN_SIZE,
    AspectLock,
    Bounds,
    DragSession,
    Handle,
    PointerEvent,
    Rect,
)
from src.domain.services.drag_session import PointerChannel
from src.domain.services.edit_history import EditHistory
from src.domain.services.processing_service import ProcessingService
from src.domain.services.region_editor import RegionEditor
from src.infrastructure.backend.mock_backend import MockGenerationBackend
from src.infrastructure.codec.pillow_codec import PillowRasterCodec

logger = logging.getLogger(__name__)


class PhotoEditorSession(ExclusiveSession):
    """Editing session for one artifact in the photo panel.

    Owns the artifact's history, the crop tool and the panel-local slider
    state. Only one transform or commit may be outstanding at a time; while one
    is, drags, commits and history navigation are rejected with
    ``OperationPending``.
    """

    def __init__(
        self,
        session_id: str,
        initial: ArtifactVersion,
        codec: PillowRasterCodec,
        processing: ProcessingService,
        backend: MockGenerationBackend,
        min_size: float = MIN_SIZE,
        default_fraction: float = 0.8,
    ) -> None:
        super().__init__()
        self.id = session_id
        self.codec = codec
        self.processing = processing
        self.backend = backend
        self.history: EditHistory[ArtifactVersion] = EditHistory()
        self.history.seed(initial)
        self.channel = PointerChannel()
        self.region_editor = RegionEditor(
            CommitCropUseCase(codec, self.history),
            channel=self.channel,
            min_size=min_size,
            default_fraction=default_fraction,
        )
        self.adjustments = AdjustmentState()

    @property
    def current(self) -> ArtifactVersion:
        return self.history.current()

    def load(self, artifact: ArtifactVersion) -> None:
        """Replace the artifact; every prior version is discarded."""
        self._require_idle()
        self.history.reset(artifact)
        self._on_current_changed()
        logger.info("Session %s loaded a new %s artifact", self.id, artifact.media_type)

    def undo(self) -> ArtifactVersion | None:
        self._require_idle()
        version = self.history.undo()
        if version is not None:
            self._on_current_changed()
        return version

    def redo(self) -> ArtifactVersion | None:
        self._require_idle()
        version = self.history.redo()
        if version is not None:
            self._on_current_changed()
        return version

    # --------- crop tool ---------
    def start_crop(self, bounds: Bounds | None) -> Rect | None:
        self._require_idle()
        return self.region_editor.start(bounds)

    def set_aspect_lock(self, lock: AspectLock | None) -> Rect:
        return self.region_editor.set_aspect_lock(lock)

    def pointer_down(
        self, handle: Handle, event: PointerEvent, container: Bounds | None = None
    ) -> DragSession:
        self._require_idle()
        return self.region_editor.on_handle_down(handle, event, container)

    def pointer_move(self, event: PointerEvent, container: Bounds | None = None) -> Rect | None:
        if container is not None:
            self.region_editor.update_container(container)
        # routed through the channel: only an active drag is listening
        self.channel.emit("move", event)
        return self.region_editor.region

    def pointer_up(self, event: PointerEvent | None = None) -> None:
        self.channel.emit("up", event or PointerEvent())

    def pointer_cancel(self, event: PointerEvent | None = None) -> None:
        self.channel.emit("cancel", event or PointerEvent())

    def cancel_crop(self) -> None:
        self.region_editor.cancel()

    def commit_crop(self) -> ArtifactVersion:
        with self._exclusive("crop"):
            version = self.region_editor.commit()
        self._on_current_changed()
        return version

    # --------- adjustments and transforms ---------
    def set_adjustments(self, state: AdjustmentState) -> None:
        self._require_idle()
        self.adjustments = state

    def apply_adjustments(self, state: AdjustmentState | None = None) -> ArtifactVersion:
        state = state or self.adjustments
        with self._exclusive("adjustments"):
            version = ApplyAdjustmentsUseCase(self.codec, self.processing, self.history).execute(state)
        self._on_current_changed()
        return version

    async def apply_transform(self, operation: str, params: dict[str, Any]) -> ArtifactVersion:
        with self._exclusive(operation):
            self.region_editor.cancel()
            uc: ApplyTransformUseCase[ArtifactVersion] = ApplyTransformUseCase(self.history)
            version = await uc.execute(
                lambda source: self.backend.transform(source, operation, params)
            )
        self._on_current_changed()
        logger.info("Session %s applied %s", self.id, operation)
        return version

    # --------- helpers ---------
    def _on_current_changed(self) -> None:
        # derived UI state belongs to the version that was on screen
        self.adjustments = AdjustmentState()
        self.region_editor.cancel()

