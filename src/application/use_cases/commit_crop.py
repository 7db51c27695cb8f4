from __future__ import annotations

import logging
from dataclasses import dataclass

from src.domain.entities.artifact import ArtifactVersion
from src.domain.entities.region import Bounds, Rect
from src.domain.errors import SourceRegionEmptyError
from src.domain.services.edit_history import EditHistory
from src.domain.services.geometry_service import GeometryService
from src.infrastructure.codec.pillow_codec import PillowRasterCodec

logger = logging.getLogger(__name__)


@dataclass
class CommitCropUseCase:
    """
    Turn a committed crop region into a new version of the current artifact.

    WORKFLOW:
    1. Decode ``history.current()`` through the codec
    2. Map the display-space region to source pixels
       (scale = native size / display size, per axis)
    3. Extract the sub-region and re-encode it in the source media type
    4. Push the new version

    This is the only destructive step of the crop tool: pixels outside the
    rectangle are gone from the new version, while the previous version stays
    intact in history. Any failure leaves history untouched.
    """

    codec: PillowRasterCodec
    history: EditHistory[ArtifactVersion]

    def commit(self, region: Rect, display: Bounds) -> ArtifactVersion:
        return self.execute(region, display.width, display.height)

    def execute(
        self, region: Rect, display_width: float, display_height: float
    ) -> ArtifactVersion:
        """
        Args:
            region: Selection rectangle in display coordinates
            display_width: Rendered width of the artifact
            display_height: Rendered height of the artifact

        Returns:
            The pushed ArtifactVersion

        Raises:
            SourceDecodeError: If the current artifact cannot be decoded
            SourceRegionEmptyError: If the region covers no source pixels
        """
        source = self.history.current()
        with self.codec.open_source(source) as buffer:
            native_h, native_w = buffer.shape[:2]
            scale_x, scale_y = GeometryService.source_scale(
                native_w, native_h, display_width, display_height
            )
            rect = GeometryService.to_source_space(region, scale_x, scale_y, native_w, native_h)
            if rect.is_empty:
                raise SourceRegionEmptyError(f"Region {region} maps to no source pixels")
            payload = self.codec.encode_region(buffer, rect, source.media_type)

        version = ArtifactVersion(
            payload=payload, media_type=source.media_type, annotation="cropped image"
        )
        self.history.push(version)
        logger.info(
            "Committed crop %dx%d at (%d, %d) from %dx%d source",
            rect.width, rect.height, rect.x, rect.y, native_w, native_h,
        )
        return version
