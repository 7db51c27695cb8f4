from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from src.domain.entities.adjustments import AdjustmentState
from src.domain.entities.artifact import ArtifactVersion
from src.domain.services.edit_history import EditHistory
from src.domain.services.processing_service import ProcessingService
from src.infrastructure.codec.pillow_codec import PillowRasterCodec

logger = logging.getLogger(__name__)


@dataclass
class ApplyAdjustmentsUseCase:
    """Bake the photo panel's slider positions and filter into a new version."""

    codec: PillowRasterCodec
    processing: ProcessingService
    history: EditHistory[ArtifactVersion]

    def execute(self, state: AdjustmentState) -> ArtifactVersion:
        if state.is_neutral:
            raise ValueError("No adjustments to apply")
        source = self.history.current()
        with self.codec.open_source(source) as buffer:
            out = render_adjustments(self.processing, buffer, state)
            payload = self.codec.encode(out, source.media_type)
        version = ArtifactVersion(
            payload=payload, media_type=source.media_type, annotation="applied color adjustments"
        )
        self.history.push(version)
        logger.info("Applied adjustments %s", state)
        return version


def render_adjustments(ps: ProcessingService, matrix: np.ndarray, state: AdjustmentState) -> np.ndarray:
    """Apply slider offsets first, then the filter preset."""
    out = matrix
    if state.brightness:
        out = ps.adjust_brightness(out, state.brightness / 100.0)
    if state.contrast:
        out = ps.adjust_contrast(out, state.contrast / 100.0)
    if state.saturation:
        out = ps.adjust_saturation(out, state.saturation / 100.0)
    if state.blur:
        out = ps.box_blur(out, state.blur)
    if state.filter == "grayscale":
        out = ps.desaturate(out)
    elif state.filter == "sepia":
        out = ps.sepia(out)
    elif state.filter == "invert":
        out = ps.invert_color(out)
    return out
