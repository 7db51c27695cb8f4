from __future__ import annotations

import logging
from dataclasses import dataclass

from src.application.use_cases.apply_adjustments import render_adjustments
from src.domain.entities.adjustments import AdjustmentState
from src.domain.entities.artifact import ArtifactVersion
from src.domain.services.processing_service import ProcessingService
from src.infrastructure.codec.pillow_codec import PillowRasterCodec

logger = logging.getLogger(__name__)

# target heights of the export presets; None keeps the native size
EXPORT_HEIGHTS: dict[str, int | None] = {
    "original": None,
    "1080p": 1080,
    "720p": 720,
    "480p": 480,
}


@dataclass
class ExportArtifactUseCase:
    """
    Render a version for download.

    The artifact is resampled to the preset's height with its aspect ratio
    kept, and the panel's live slider state is drawn on top. The history is
    never touched.
    """

    codec: PillowRasterCodec
    processing: ProcessingService

    def execute(
        self,
        artifact: ArtifactVersion,
        resolution: str = "original",
        adjustments: AdjustmentState | None = None,
    ) -> bytes:
        """
        Encode ``artifact`` at ``resolution`` in its own media type.

        Raises:
            ValueError: If the resolution is not an export preset
            SourceDecodeError: If the artifact cannot be decoded
        """
        if resolution not in EXPORT_HEIGHTS:
            raise ValueError(f"Unsupported resolution: {resolution}")
        target_height = EXPORT_HEIGHTS[resolution]
        plain = adjustments is None or adjustments.is_neutral
        if target_height is None and plain:
            return artifact.payload

        with self.codec.open_source(artifact) as buffer:
            out = buffer
            if target_height is not None:
                height, width = buffer.shape[:2]
                target_width = max(1, round(target_height * width / height))
                out = self.codec.resize(out, target_width, target_height)
            if not plain:
                out = render_adjustments(self.processing, out, adjustments)
            payload = self.codec.encode(out, artifact.media_type)
        logger.info("Exported version %s at %s", artifact.id, resolution)
        return payload
